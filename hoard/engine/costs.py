"""Cost model — prices of the next unit, of a bulk order, and of "buy max".

Every path (single, bulk, max) goes through the same per-step price, so the
three can never disagree about rounding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from hoard.data.balance import BALANCE, BalanceConfig
from hoard.data.units import UnitDef, UnitKind
from hoard.data.upgrades import UpgradeDef
from hoard.engine.errors import InvalidItemKind
from hoard.engine.game_state import EconomyState

# A unit kind (enum or its save-file value) or an upgrade id
ItemRef = Union[UnitKind, str]


@dataclass(frozen=True)
class Affordable:
    """Result of a "buy max" search."""

    count: int
    total_cost: int


def scaled_cost(item: UnitDef | UpgradeDef, owned: int) -> int:
    """Undiscounted price of the next purchase given `owned` already bought."""
    return math.floor(
        item.base_cost * (1 + item.cost_growth_rate * owned ** item.cost_growth_exponent)
    )


def resolve_unit(kind: UnitKind | str, balance: BalanceConfig = BALANCE) -> UnitDef:
    """Look up a unit by enum member or save-file value."""
    if not isinstance(kind, UnitKind):
        try:
            kind = UnitKind(kind)
        except ValueError:
            raise InvalidItemKind(kind) from None
    udef = balance.units.get(kind)
    if udef is None:
        raise InvalidItemKind(kind)
    return udef


def resolve_upgrade(upgrade_id: str, balance: BalanceConfig = BALANCE) -> UpgradeDef:
    udef = balance.upgrades.get(upgrade_id)
    if udef is None:
        raise InvalidItemKind(upgrade_id)
    return udef


def unit_cost(
    state: EconomyState,
    kind: UnitKind | str,
    owned: int | None = None,
    balance: BalanceConfig = BALANCE,
) -> int:
    """Price of the next unit, after the artifact cost reduction."""
    udef = resolve_unit(kind, balance)
    if owned is None:
        owned = state.owned(udef.kind)
    cost = scaled_cost(udef, owned)
    reduction = state.modifiers.unit_cost_reduction
    if reduction > 0:
        cost = math.floor(cost * (1.0 - reduction))
    return cost


def upgrade_cost(
    state: EconomyState,
    upgrade_id: str,
    level: int | None = None,
    balance: BalanceConfig = BALANCE,
) -> int:
    """Price of the next upgrade level. Artifact reductions apply to units only."""
    udef = resolve_upgrade(upgrade_id, balance)
    if level is None:
        level = state.level(upgrade_id)
    return scaled_cost(udef, level)


def is_unit(item: ItemRef, balance: BalanceConfig = BALANCE) -> bool:
    if isinstance(item, UnitKind):
        return True
    if item in balance.upgrades:
        return False
    try:
        UnitKind(item)
    except ValueError:
        raise InvalidItemKind(item) from None
    return True


def item_cost(
    state: EconomyState,
    item: ItemRef,
    owned: int,
    balance: BalanceConfig = BALANCE,
) -> int:
    """Price of one step of any purchasable item."""
    if is_unit(item, balance):
        return unit_cost(state, item, owned, balance)
    return upgrade_cost(state, item, owned, balance)


def bulk_cost(
    state: EconomyState,
    item: ItemRef,
    owned: int,
    quantity: int,
    balance: BalanceConfig = BALANCE,
) -> int:
    """Total price of `quantity` consecutive purchases starting at `owned`."""
    if quantity < 0:
        raise ValueError(f"quantity must be >= 0, got {quantity}")
    return sum(item_cost(state, item, owned + i, balance) for i in range(quantity))


def max_affordable(
    state: EconomyState,
    item: ItemRef,
    owned: int,
    available: float,
    balance: BalanceConfig = BALANCE,
) -> Affordable:
    """Greedy "buy max": stop at the first step that no longer fits."""
    if not math.isfinite(available):
        raise ValueError(f"available gold must be finite, got {available}")
    count = 0
    total = 0
    next_cost = item_cost(state, item, owned, balance)
    while total + next_cost <= available:
        total += next_cost
        count += 1
        next_cost = item_cost(state, item, owned + count, balance)
    return Affordable(count=count, total_cost=total)
