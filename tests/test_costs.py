"""Tests for the cost model — single, bulk, and buy-max pricing."""

import math

import pytest

from hoard.data.units import MINER, UnitKind
from hoard.data.upgrades import SHARP_PICKAXE
from hoard.engine.costs import (
    bulk_cost,
    max_affordable,
    scaled_cost,
    unit_cost,
    upgrade_cost,
)
from hoard.engine.errors import InvalidItemKind
from hoard.engine.game_state import new_economy_state
from hoard.engine.modifiers import apply_modifiers


def test_first_miner_costs_base():
    state = new_economy_state()
    assert unit_cost(state, UnitKind.MINER) == 10


def test_second_miner_cost():
    # floor(10 * (1 + 0.15 * 1^0.9)) = floor(11.5)
    state = new_economy_state()
    assert unit_cost(state, UnitKind.MINER, owned=1) == 11


def test_unit_cost_accepts_save_key():
    state = new_economy_state()
    assert unit_cost(state, "soldier") == 50


def test_unit_cost_reads_owned_from_state():
    state = new_economy_state()
    state.units_owned[UnitKind.MINER] = 1
    assert unit_cost(state, UnitKind.MINER) == 11


@pytest.mark.parametrize("item", [MINER, SHARP_PICKAXE])
def test_costs_never_decrease(item):
    costs = [scaled_cost(item, n) for n in range(200)]
    assert all(b >= a for a, b in zip(costs, costs[1:]))


def test_bulk_cost_is_additive():
    state = new_economy_state()
    for a, b in [(1, 1), (3, 7), (10, 10), (0, 5)]:
        whole = bulk_cost(state, UnitKind.MINER, 0, a + b)
        split = bulk_cost(state, UnitKind.MINER, 0, a) + bulk_cost(state, UnitKind.MINER, a, b)
        assert whole == split


def test_bulk_cost_of_zero_is_free():
    state = new_economy_state()
    assert bulk_cost(state, UnitKind.WIZARD, 4, 0) == 0


def test_bulk_cost_rejects_negative_quantity():
    state = new_economy_state()
    with pytest.raises(ValueError):
        bulk_cost(state, UnitKind.MINER, 0, -1)


def test_max_affordable_with_100_gold():
    # 10 + 11 + 12 + 14 + 15 + 16 + 17 = 95; the eighth would cost 18
    state = new_economy_state()
    best = max_affordable(state, UnitKind.MINER, 0, 100)
    assert best.count == 7
    assert best.total_cost == 95


@pytest.mark.parametrize("available", [0, 9, 10, 55, 1_000, 123_456])
def test_max_affordable_is_sound(available):
    state = new_economy_state()
    best = max_affordable(state, UnitKind.SOLDIER, 3, available)
    assert best.total_cost <= available
    next_cost = unit_cost(state, UnitKind.SOLDIER, owned=3 + best.count)
    assert best.total_cost + next_cost > available
    assert best.total_cost == bulk_cost(state, UnitKind.SOLDIER, 3, best.count)


def test_max_affordable_rejects_non_finite_gold():
    state = new_economy_state()
    with pytest.raises(ValueError):
        max_affordable(state, UnitKind.MINER, 0, math.inf)
    with pytest.raises(ValueError):
        max_affordable(state, UnitKind.MINER, 0, math.nan)


def test_cost_reduction_applies_to_units():
    state = new_economy_state()
    state.unlocked_artifacts.add("mercantile-emblem")
    apply_modifiers(state)
    # floor(10 * (1 - 0.15)) = floor(8.5)
    assert unit_cost(state, UnitKind.MINER) == 8


def test_cost_reduction_skips_upgrades():
    state = new_economy_state()
    before = upgrade_cost(state, SHARP_PICKAXE.id)
    state.unlocked_artifacts.add("mercantile-emblem")
    apply_modifiers(state)
    assert upgrade_cost(state, SHARP_PICKAXE.id) == before == 50


def test_upgrade_cost_grows_with_level():
    state = new_economy_state()
    cost1 = upgrade_cost(state, SHARP_PICKAXE.id)
    state.upgrade_levels[SHARP_PICKAXE.id] = 1
    cost2 = upgrade_cost(state, SHARP_PICKAXE.id)
    assert cost2 > cost1


def test_unknown_items_raise():
    state = new_economy_state()
    with pytest.raises(InvalidItemKind):
        unit_cost(state, "dragon")
    with pytest.raises(InvalidItemKind):
        upgrade_cost(state, "golden-shovel")
    with pytest.raises(InvalidItemKind):
        bulk_cost(state, "golden-shovel", 0, 2)
