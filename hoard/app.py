"""Hoard — Main Textual Application.

Wires a GameSession into a playable TUI: dig for gold, hire units, buy
upgrades, prestige for artifacts.
"""

from __future__ import annotations

import time

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.timer import Timer
from textual.widgets import Header, Footer

from hoard.data.units import UnitKind
from hoard.data.upgrades import BETTER_FOCUS, SHARP_PICKAXE, STRONGER_SWORDS
from hoard.engine.economy import MAX, Quantity
from hoard.engine.errors import InsufficientFunds, PrestigeNotEligible
from hoard.engine.session import GameSession
from hoard.ui.hud import HUD
from hoard.ui.prestige_panel import PrestigeInfo
from hoard.ui.shop_panel import ShopPanel

# Bulk buy modes cycled with [B]
BULK_STEPS: tuple[Quantity, ...] = (1, 10, MAX)


def bulk_label(bulk: Quantity) -> str:
    return "MAX" if bulk == MAX else f"x{bulk}"


class HoardApp(App):
    """The Hoard TUI game application."""

    TITLE = "Hoard — Idle Treasure Keeper"
    SUB_TITLE = "Dig. Hire. Hoard. Prestige."
    CSS = """
    #game-container {
        height: 1fr;
    }
    #hud-panel {
        width: 1fr;
    }
    #side-panel {
        width: 2fr;
    }
    #shop-panel {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("space", "dig", "Dig", show=True, priority=True),
        Binding("enter", "dig", "Dig", show=False),
        Binding("1", f"hire('{UnitKind.MINER.value}')", "Miner", show=False),
        Binding("2", f"hire('{UnitKind.SOLDIER.value}')", "Soldier", show=False),
        Binding("3", f"hire('{UnitKind.WIZARD.value}')", "Wizard", show=False),
        Binding("4", f"upgrade('{SHARP_PICKAXE.id}')", "Pickaxe", show=False),
        Binding("5", f"upgrade('{STRONGER_SWORDS.id}')", "Swords", show=False),
        Binding("6", f"upgrade('{BETTER_FOCUS.id}')", "Focus", show=False),
        Binding("b", "cycle_bulk", "Bulk", show=True),
        Binding("p", "prestige", "Prestige", show=True),
        Binding("n", "toggle_notation", "Notation", show=True),
        Binding("s", "save", "Save", show=True),
        Binding("q", "quit_game", "Quit", show=True),
    ]

    def __init__(self, session: GameSession | None = None) -> None:
        super().__init__()
        if session is None:
            session = GameSession()
            self._load_errors = session.load().errors
        else:
            self._load_errors = []
        self._session = session
        self._bulk_index = 0
        self._last_tick: float = time.time()
        self._tick_timer: Timer | None = None

    @property
    def bulk(self) -> Quantity:
        return BULK_STEPS[self._bulk_index]

    def compose(self) -> ComposeResult:
        yield Header()

        with Horizontal(id="game-container"):
            # Left: HUD
            yield HUD(id="hud-panel")

            # Center: prestige and artifacts
            with Vertical(id="side-panel"):
                yield PrestigeInfo(self._session.balance, id="prestige-info")

            # Right: shop
            yield ShopPanel(self._session.balance, id="shop-panel")

        yield Footer()

    def on_mount(self) -> None:
        """Start the game loop timer."""
        interval = self._session.balance.general.tick_interval_s
        self._tick_timer = self.set_interval(interval, self._game_tick)
        self._last_tick = time.time()

        if self._load_errors:
            self.notify(
                "Saved game could not be loaded; starting fresh.",
                severity="error", timeout=5,
            )

        self._sync_ui()

    def _game_tick(self) -> None:
        """Main game loop — called once per tick interval."""
        now = time.time()
        dt = now - self._last_tick
        self._last_tick = now

        self._session.tick_passive_income(dt)
        self._session.maybe_autosave(now)

        self._sync_ui()

    def _sync_ui(self) -> None:
        """Push a state snapshot to all UI widgets."""
        state = self._session.snapshot()

        hud = self.query_one("#hud-panel", HUD)
        hud.update_from_state(state, bulk_label(self.bulk))

        shop = self.query_one("#shop-panel", ShopPanel)
        shop.update_from_state(state, self.bulk)

        prestige = self.query_one("#prestige-info", PrestigeInfo)
        prestige.update_from_state(state)

    # ── Actions ──────────────────────────────────────

    def action_dig(self) -> None:
        """Click the gold pile."""
        self._session.click()
        self._sync_ui()

    def action_hire(self, kind: str) -> None:
        try:
            result = self._session.purchase_units(kind, self.bulk)
        except InsufficientFunds:
            self.notify("Can't afford that hire.", severity="error", timeout=1)
            return
        name = self._session.balance.units[UnitKind(result.item)].name
        self.notify(f"Hired {result.count} {name}!", severity="information", timeout=1)
        self._sync_ui()

    def action_upgrade(self, upgrade_id: str) -> None:
        try:
            result = self._session.purchase_upgrade(upgrade_id, self.bulk)
        except InsufficientFunds:
            self.notify("Can't afford that upgrade.", severity="error", timeout=1)
            return
        name = self._session.balance.upgrades[upgrade_id].name
        self.notify(f"{name} +{result.count}!", severity="information", timeout=1)
        self._sync_ui()

    def action_cycle_bulk(self) -> None:
        self._bulk_index = (self._bulk_index + 1) % len(BULK_STEPS)
        self._sync_ui()

    def action_prestige(self) -> None:
        """Soft reset for prestige points and artifacts."""
        try:
            result = self._session.execute_prestige()
        except PrestigeNotEligible:
            self.notify("Not ready to prestige — hoard more gold!", severity="error", timeout=2)
            return

        self.notify(
            f"✦ PRESTIGE {result.prestige_count}! +{result.award} points "
            f"(x{result.prestige_multiplier:.2f})",
            severity="warning", timeout=5,
        )
        for adef in result.new_artifacts:
            self.notify(
                f"{adef.icon} Artifact found: {adef.name} — {adef.effect_text}",
                severity="warning", timeout=6,
            )
        self._sync_ui()

    def action_toggle_notation(self) -> None:
        state = self._session.snapshot()
        self._session.set_display_notation(not state.display_uses_exponential_notation)
        self._sync_ui()

    def action_save(self) -> None:
        if self._session.save():
            self.notify("Game saved.", severity="information", timeout=1)
        else:
            self.notify("Save failed — see the log.", severity="error", timeout=3)

    def action_quit_game(self) -> None:
        """Save and quit."""
        self._session.save()
        self.exit()
