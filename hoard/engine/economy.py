"""Economy engine — gold generation, purchases, and number formatting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Union

from hoard.data.balance import BALANCE, BalanceConfig
from hoard.data.units import UnitKind, YieldTarget
from hoard.engine.costs import (
    item_cost,
    max_affordable,
    resolve_unit,
    resolve_upgrade,
    unit_cost,
    upgrade_cost,
)
from hoard.engine.errors import InsufficientFunds
from hoard.engine.game_state import EconomyState

logger = logging.getLogger(__name__)

# Buy as many as the current gold allows
MAX = "max"

Quantity = Union[int, Literal["max"]]


@dataclass(frozen=True)
class PurchaseResult:
    """What a successful purchase bought and paid."""

    item: str
    count: int
    total_cost: int


def compute_derived(state: EconomyState, balance: BalanceConfig = BALANCE) -> None:
    """Recompute click and passive yields from owned counts and modifiers.

    Always rebuilt from scratch so repeated purchases never accumulate
    rounding drift. Call after any purchase, prestige, or modifier change.
    """
    mods = state.modifiers

    click = balance.general.base_click_yield
    passive = 0.0
    for kind, udef in balance.units.items():
        contribution = (
            state.owned(kind)
            * state.unit_yield_rate.get(kind, udef.base_yield)
            * mods.yield_multiplier(kind)
        )
        if udef.yield_target == YieldTarget.CLICK:
            click += contribution
        else:
            passive += contribution

    scale = state.prestige_multiplier * mods.currency_multiplier
    state.click_yield = click * scale * mods.click_multiplier
    state.passive_yield_per_s = passive * scale * mods.passive_multiplier


def handle_click(state: EconomyState) -> float:
    """Handle a single click on the gold pile. Returns gold earned."""
    earned = state.click_yield * state.prestige_multiplier
    state.currency += earned
    state.lifetime_currency += earned
    return earned


def tick_passive_income(state: EconomyState, elapsed_s: float) -> float:
    """Apply passive income for elapsed_s seconds. Returns gold earned."""
    if elapsed_s <= 0:
        return 0.0
    earned = state.passive_yield_per_s * state.prestige_multiplier * elapsed_s
    if earned > 0:
        state.currency += earned
        state.lifetime_currency += earned
    return earned


def _check_quantity(quantity: Quantity) -> None:
    if quantity == MAX:
        return
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValueError(f"quantity must be a positive integer or {MAX!r}, got {quantity!r}")


def _resolve_order(
    state: EconomyState,
    item: UnitKind | str,
    owned: int,
    quantity: Quantity,
    balance: BalanceConfig,
) -> tuple[int, int]:
    """Turn a quantity (or "max") into a concrete (count, total_cost)."""
    _check_quantity(quantity)
    if quantity == MAX:
        best = max_affordable(state, item, owned, state.currency, balance)
        return best.count, best.total_cost

    # Same per-step price as bulk_cost, but stop once the order is out of reach
    total = 0
    for step in range(quantity):
        total += item_cost(state, item, owned + step, balance)
        if total > state.currency:
            label = item.value if isinstance(item, UnitKind) else item
            raise InsufficientFunds(label, total, state.currency)
    return quantity, total


def purchase_units(
    state: EconomyState,
    kind: UnitKind | str,
    quantity: Quantity = 1,
    balance: BalanceConfig = BALANCE,
) -> PurchaseResult:
    """Hire `quantity` units (or as many as affordable).

    Raises InsufficientFunds without touching the state when the order
    costs more than the current gold or resolves to zero units.
    """
    udef = resolve_unit(kind, balance)
    owned = state.owned(udef.kind)
    count, total = _resolve_order(state, udef.kind, owned, quantity, balance)

    if count == 0 or state.currency < total:
        needed = total if count else unit_cost(state, udef.kind, owned, balance)
        raise InsufficientFunds(udef.kind.value, needed, state.currency)

    state.currency -= total
    state.units_owned[udef.kind] = owned + count
    compute_derived(state, balance)

    logger.debug("hired %d %s for %d gold", count, udef.kind.value, total)
    return PurchaseResult(item=udef.kind.value, count=count, total_cost=total)


def purchase_upgrade(
    state: EconomyState,
    upgrade_id: str,
    quantity: Quantity = 1,
    balance: BalanceConfig = BALANCE,
) -> PurchaseResult:
    """Buy `quantity` upgrade levels (or as many as affordable).

    The target unit's current yield rate is multiplied by
    (1 + effect_per_level) ** count in one step.
    """
    udef = resolve_upgrade(upgrade_id, balance)
    level = state.level(upgrade_id)
    count, total = _resolve_order(state, upgrade_id, level, quantity, balance)

    if count == 0 or state.currency < total:
        needed = total if count else upgrade_cost(state, upgrade_id, level, balance)
        raise InsufficientFunds(upgrade_id, needed, state.currency)

    state.currency -= total
    state.upgrade_levels[upgrade_id] = level + count
    base = balance.units[udef.target].base_yield
    current = state.unit_yield_rate.get(udef.target, base)
    state.unit_yield_rate[udef.target] = current * (1.0 + udef.effect_per_level) ** count
    compute_derived(state, balance)

    logger.debug("upgraded %s by %d levels for %d gold", upgrade_id, count, total)
    return PurchaseResult(item=upgrade_id, count=count, total_cost=total)


def next_costs(state: EconomyState, balance: BalanceConfig = BALANCE) -> dict[str, int]:
    """Price of the next single unit / level of every item, keyed by id."""
    costs = {kind.value: unit_cost(state, kind, balance=balance) for kind in balance.units}
    for uid in balance.upgrades:
        costs[uid] = upgrade_cost(state, uid, balance=balance)
    return costs


def set_display_notation(state: EconomyState, use_exponential: bool) -> None:
    state.display_uses_exponential_notation = bool(use_exponential)


def _trim(value: float) -> str:
    """Up to three decimals, trailing zeros and dot removed."""
    return f"{value:.3f}".rstrip("0").rstrip(".")


def format_number(
    n: float,
    exponential: bool = False,
    balance: BalanceConfig = BALANCE,
) -> str:
    """Format a number with suffixes (or scientific notation) for readability."""
    if exponential:
        return f"{n:.3e}"
    if n < 0:
        return f"-{format_number(-n, balance=balance)}"

    for threshold, suffix in reversed(balance.general.suffixes):
        if n >= threshold:
            return f"{_trim(n / threshold)}{suffix}"

    return _trim(n)
