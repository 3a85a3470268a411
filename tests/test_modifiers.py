"""Tests for the artifact modifier pipeline."""

import itertools

import pytest

from hoard.data.balance import BALANCE
from hoard.data.units import UnitKind
from hoard.engine.errors import InvalidItemKind
from hoard.engine.game_state import ModifierAccumulator, new_economy_state
from hoard.engine.modifiers import apply_modifiers, recompute_modifiers


def test_no_artifacts_is_identity():
    assert recompute_modifiers([]) == ModifierAccumulator()


def test_recompute_is_idempotent():
    ids = ["ancient-coin", "mystic-pickaxe", "mercantile-emblem"]
    assert recompute_modifiers(ids) == recompute_modifiers(ids)


def test_recompute_ignores_order():
    ids = ["ancient-coin", "midas-touch", "philosophers-stone", "lucky-clover"]
    results = [recompute_modifiers(p) for p in itertools.permutations(ids)]
    assert all(r == results[0] for r in results)


def test_currency_multipliers_stack():
    acc = recompute_modifiers(["ancient-coin", "midas-touch", "philosophers-stone"])
    assert acc.currency_multiplier == pytest.approx(1.2 * 1.5 * 1.25)


def test_click_multiplier():
    acc = recompute_modifiers(["lucky-clover"])
    assert acc.click_multiplier == pytest.approx(1.25)
    assert acc.passive_multiplier == 1.0


def test_unit_yield_boost_is_per_kind():
    acc = recompute_modifiers(["mystic-pickaxe", "heroes-medallion"])
    assert acc.yield_multiplier(UnitKind.MINER) == pytest.approx(1.35)
    assert acc.yield_multiplier(UnitKind.SOLDIER) == pytest.approx(1.4)
    assert acc.yield_multiplier(UnitKind.WIZARD) == 1.0


def test_starting_bonuses():
    acc = recompute_modifiers(["bottomless-pouch", "philosophers-stone"])
    assert acc.starting_bonus.currency == 100
    assert acc.starting_bonus.units_owned == {kind: 3 for kind in BALANCE.units}


def test_unknown_artifact_raises():
    with pytest.raises(InvalidItemKind):
        recompute_modifiers(["ancient-coin", "cursed-idol"])


def test_apply_modifiers_does_not_compound():
    state = new_economy_state()
    state.units_owned[UnitKind.MINER] = 4
    state.unlocked_artifacts = {"mystic-pickaxe", "ancient-coin"}

    apply_modifiers(state)
    first = state.passive_yield_per_s
    apply_modifiers(state)
    apply_modifiers(state)

    assert state.passive_yield_per_s == first
    assert first == pytest.approx(4 * 1.0 * 1.35 * 1.2)
    # Stored rates hold upgrades only; artifact boosts stay in the accumulator
    assert state.unit_yield_rate[UnitKind.MINER] == 1.0
