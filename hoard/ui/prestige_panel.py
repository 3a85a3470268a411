"""Prestige panel — progress toward the next prestige and the artifact collection."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

from hoard.data.artifacts import ArtifactDef, Rarity
from hoard.data.balance import BALANCE, BalanceConfig
from hoard.engine.economy import format_number
from hoard.engine.game_state import EconomyState
from hoard.engine.prestige import (
    can_prestige,
    compute_prestige_award,
    prestige_progress,
    upcoming_artifacts,
)

_RARITY_STYLES = {
    Rarity.COMMON: "white",
    Rarity.UNCOMMON: "green",
    Rarity.RARE: "blue",
    Rarity.EPIC: "magenta",
    Rarity.LEGENDARY: "yellow",
    Rarity.MYTHIC: "bold red",
}


def _artifact_line(text: Text, adef: ArtifactDef, locked: bool = False) -> None:
    style = "dim" if locked else _RARITY_STYLES.get(adef.rarity, "white")
    text.append(f"  {adef.icon} {adef.name}", style=style)
    if locked:
        text.append(f"  (prestige {adef.unlock_at_prestige})\n", style="dim")
    else:
        text.append(f"  {adef.effect_text}\n", style="dim")


class PrestigeInfo(Widget):
    """Shows prestige readiness, upcoming artifacts and the collection."""

    DEFAULT_CSS = """
    PrestigeInfo {
        width: 100%;
        height: auto;
        min-height: 5;
        padding: 1;
    }
    """

    def __init__(self, balance: BalanceConfig = BALANCE, **kwargs) -> None:
        super().__init__(**kwargs)
        self._balance = balance
        self._state: EconomyState | None = None

    def render(self) -> Text:
        text = Text()

        if self._state is None:
            return text

        state = self._state
        balance = self._balance
        exp = state.display_uses_exponential_notation

        text.append("  ─── Prestige ───\n", style="bold yellow")
        if can_prestige(state, balance):
            award = compute_prestige_award(state, balance)
            text.append(f"  [P] Prestige now  +{format_number(award, exp)} points\n", style="bold yellow")
            text.append("  Gold, units and upgrades reset. Points and artifacts stay.\n", style="dim")
        else:
            pct = prestige_progress(state, balance)
            bar_width = 20
            filled = int(pct * bar_width)
            bar = "#" * filled + "." * (bar_width - filled)
            threshold = balance.prestige.unlock_threshold
            text.append(f"  [{bar}] {pct * 100:.0f}%\n", style="green")
            text.append(
                f"  ({format_number(state.lifetime_currency, exp)}/{format_number(threshold, exp)} gold this run)\n",
                style="dim",
            )

        upcoming = upcoming_artifacts(state, balance)
        if upcoming:
            text.append("\n  ─── Coming Up ───\n", style="bold cyan")
            for adef in upcoming:
                _artifact_line(text, adef, locked=True)

        owned = sorted(
            (balance.artifacts[aid] for aid in state.unlocked_artifacts if aid in balance.artifacts),
            key=lambda a: (a.unlock_at_prestige, a.id),
        )
        text.append(f"\n  ─── Artifacts ({len(owned)}/{len(balance.artifacts)}) ───\n", style="bold magenta")
        if not owned:
            text.append("  None yet. Prestige to find your first.\n", style="dim italic")
        for adef in owned:
            _artifact_line(text, adef)

        return text

    def update_from_state(self, state: EconomyState) -> None:
        self._state = state
        self.refresh()
