"""HUD widget — gold counter, yields, prestige standing."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget
from textual.reactive import reactive

from hoard.engine.economy import format_number
from hoard.engine.game_state import EconomyState


class HUD(Widget):
    """Heads-up display showing core economy stats."""

    DEFAULT_CSS = """
    HUD {
        width: 100%;
        height: 100%;
        padding: 1;
    }
    """

    gold: reactive[str] = reactive("0")
    lifetime: reactive[str] = reactive("0")
    per_click: reactive[str] = reactive("1")
    passive: reactive[str] = reactive("0/s")
    points: reactive[str] = reactive("0")
    multiplier: reactive[str] = reactive("1.00x")
    prestige_count: reactive[int] = reactive(0)
    bulk: reactive[str] = reactive("x1")
    notation: reactive[str] = reactive("short")

    def render(self) -> Text:
        text = Text()
        text.append("  === The Hoard ===\n\n", style="bold yellow")

        text.append("  Gold: ", style="dim")
        text.append(f"{self.gold}\n", style="bold green")

        text.append("  Per Dig: ", style="dim")
        text.append(f"{self.per_click}\n", style="green")

        text.append("  Passive: ", style="dim")
        text.append(f"{self.passive}\n", style="green")

        text.append("  This run: ", style="dim")
        text.append(f"{self.lifetime}\n", style="green")

        text.append("\n")

        text.append("  Prestige Points: ", style="dim")
        text.append(f"{self.points}\n", style="bold yellow")
        text.append("  Multiplier: ", style="dim")
        text.append(f"{self.multiplier}\n", style="yellow")
        text.append("  Prestiges: ", style="dim")
        text.append(f"{self.prestige_count}\n", style="yellow")

        text.append("\n")
        text.append("  Buying: ", style="dim")
        text.append(f"{self.bulk}\n", style="bold cyan")
        text.append("  Numbers: ", style="dim")
        text.append(f"{self.notation}\n", style="cyan")

        text.append("\n")
        text.append("  [Space] Dig  [1-3] Hire  [4-6] Upgrade\n", style="dim italic")
        text.append("  [B] Bulk  [P] Prestige  [N] Notation\n", style="dim italic")
        text.append("  [S] Save  [Q] Quit\n", style="dim italic")

        return text

    def update_from_state(self, state: EconomyState, bulk_label: str) -> None:
        """Sync HUD with economy state."""
        exp = state.display_uses_exponential_notation
        self.gold = format_number(state.currency, exp)
        self.lifetime = format_number(state.lifetime_currency, exp)
        # What one click or one second actually pays out
        self.per_click = format_number(state.click_yield * state.prestige_multiplier, exp)
        self.passive = f"{format_number(state.passive_yield_per_s * state.prestige_multiplier, exp)}/s"
        self.points = format_number(state.prestige_currency, exp)
        self.multiplier = f"{state.prestige_multiplier:.2f}x"
        self.prestige_count = state.total_prestige_count
        self.bulk = bulk_label
        self.notation = "scientific" if exp else "short"
