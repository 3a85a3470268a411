"""Tests for balance data and registry validation."""

import pytest

from hoard.data.artifacts import ALL_ARTIFACTS, ArtifactEffect, EffectRule
from hoard.data.balance import BALANCE, BalanceConfig, PrestigeBalance
from hoard.data.units import MINER, UnitDef, UnitKind, YieldTarget
from hoard.data.upgrades import ALL_UPGRADES


def test_every_unit_kind_is_configured():
    assert set(BALANCE.units) == set(UnitKind)


def test_upgrades_target_known_units():
    for udef in ALL_UPGRADES.values():
        assert udef.target in BALANCE.units


def test_artifact_unlocks_are_spread_over_ten_prestiges():
    levels = sorted(a.unlock_at_prestige for a in ALL_ARTIFACTS.values())
    assert levels[0] == 1
    assert levels[-1] == 10
    assert len(ALL_ARTIFACTS) == 9


def test_registries_are_read_only():
    with pytest.raises(TypeError):
        BALANCE.units[UnitKind.MINER] = MINER


def test_unit_def_validation():
    with pytest.raises(ValueError):
        UnitDef(UnitKind.MINER, "Miner", "", 0, 0.15, 0.9, 1, YieldTarget.PASSIVE)
    with pytest.raises(ValueError):
        UnitDef(UnitKind.MINER, "Miner", "", 10, 0.15, 0.9, -1, YieldTarget.PASSIVE)


def test_effect_rule_validation():
    with pytest.raises(ValueError):
        EffectRule(ArtifactEffect.UNIT_YIELD_MULT, 1.5)
    with pytest.raises(ValueError):
        EffectRule(ArtifactEffect.UNIT_COST_REDUCTION, 1.0)
    with pytest.raises(ValueError):
        EffectRule(ArtifactEffect.CURRENCY_MULT, -2)


def test_prestige_balance_validation():
    with pytest.raises(ValueError):
        PrestigeBalance(points_divisor=0)


def test_upgrade_for_missing_unit_rejected():
    with pytest.raises(ValueError):
        BalanceConfig(units={UnitKind.MINER: MINER})
