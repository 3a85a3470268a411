"""Shop panel — units to hire and upgrades to buy, priced for the current bulk mode."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget
from textual.reactive import reactive

from hoard.data.balance import BALANCE, BalanceConfig
from hoard.data.units import YieldTarget
from hoard.engine.costs import ItemRef, bulk_cost, max_affordable
from hoard.engine.economy import MAX, Quantity, format_number
from hoard.engine.game_state import EconomyState


def order_preview(
    state: EconomyState,
    item: ItemRef,
    owned: int,
    bulk: Quantity,
    balance: BalanceConfig = BALANCE,
) -> tuple[int, int]:
    """(count, total_cost) the next order would be in the given bulk mode.

    In "max" mode with nothing affordable, previews a single purchase so the
    player can see how far away it is.
    """
    if bulk == MAX:
        best = max_affordable(state, item, owned, state.currency, balance)
        if best.count > 0:
            return best.count, best.total_cost
        return 1, bulk_cost(state, item, owned, 1, balance)
    return bulk, bulk_cost(state, item, owned, bulk, balance)


class ShopPanel(Widget):
    """Displays every unit and upgrade with cost and affordability."""

    DEFAULT_CSS = """
    ShopPanel {
        width: 100%;
        height: 100%;
        padding: 1;
        overflow-y: auto;
    }
    """

    # Serialized shop data for reactivity
    shop_text: reactive[str] = reactive("")

    def __init__(self, balance: BalanceConfig = BALANCE, **kwargs) -> None:
        super().__init__(**kwargs)
        self._balance = balance
        self._state: EconomyState | None = None
        self._bulk: Quantity = 1

    def render(self) -> Text:
        text = Text()
        if self._state is None:
            return text

        state = self._state
        exp = state.display_uses_exponential_notation

        text.append("  ═══ Hire ═══\n\n", style="bold magenta")
        for i, (kind, udef) in enumerate(self._balance.units.items(), start=1):
            owned = state.owned(kind)
            count, cost = order_preview(state, kind, owned, self._bulk, self._balance)
            affordable = state.currency >= cost

            text.append(f"  [{i}] ", style="bold")
            text.append(f"{udef.name} ", style="bold green" if affordable else "bold red")
            text.append(f"x{owned}\n", style="dim")
            text.append(f"      {udef.description}\n", style="dim italic")

            rate = state.unit_yield_rate.get(kind, udef.base_yield) * state.modifiers.yield_multiplier(kind)
            where = "per dig" if udef.yield_target == YieldTarget.CLICK else "per second"
            text.append(f"      Each: +{format_number(rate, exp)} {where}\n", style="cyan")

            cost_style = "green" if affordable else "red"
            text.append(f"      {count} for {format_number(cost, exp)} gold\n\n", style=cost_style)

        text.append("  ═══ Upgrades ═══\n\n", style="bold magenta")
        first_key = len(self._balance.units) + 1
        for i, (uid, udef) in enumerate(self._balance.upgrades.items(), start=first_key):
            level = state.level(uid)
            count, cost = order_preview(state, uid, level, self._bulk, self._balance)
            affordable = state.currency >= cost

            text.append(f"  [{i}] ", style="bold")
            text.append(f"{udef.name} ", style="bold green" if affordable else "bold red")
            text.append(f"Lv.{level}\n", style="dim")
            text.append(f"      {udef.description}\n", style="dim italic")

            if level > 0:
                mult = (1.0 + udef.effect_per_level) ** level
                text.append(f"      Now: {mult:.2f}x {udef.target.value} yield\n", style="cyan")

            cost_style = "green" if affordable else "red"
            text.append(f"      {count} for {format_number(cost, exp)} gold\n\n", style=cost_style)

        return text

    def update_from_state(self, state: EconomyState, bulk: Quantity) -> None:
        """Sync panel with economy state."""
        self._state = state
        self._bulk = bulk
        # Trigger re-render via reactive
        self.shop_text = "|".join(
            [f"{k.value}:{n}" for k, n in state.units_owned.items()]
            + [f"{uid}:{lvl}" for uid, lvl in state.upgrade_levels.items()]
        ) + f"|g:{state.currency:.0f}|b:{bulk}|e:{state.display_uses_exponential_notation}"
