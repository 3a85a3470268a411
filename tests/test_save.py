"""Tests for save/load, backups, and corrupt-data handling."""

import json

import pytest

from hoard.data.units import UnitKind
from hoard.data.upgrades import SHARP_PICKAXE
from hoard.engine.economy import purchase_units, purchase_upgrade
from hoard.engine.errors import CorruptSaveData
from hoard.engine.game_state import new_economy_state
from hoard.engine.prestige import execute_prestige
from hoard.engine.save import (
    JsonFileStore,
    SaveGateway,
    dict_to_state,
    state_to_dict,
    validate_payload,
)


@pytest.fixture
def gateway(tmp_path):
    return SaveGateway(
        primary=JsonFileStore(tmp_path / "save.json"),
        backup=JsonFileStore(tmp_path / "save.backup.json"),
    )


def _played_state():
    """A state reached through real play: one prestige, some units and upgrades."""
    state = new_economy_state()
    state.lifetime_currency = 4_000_000
    execute_prestige(state)
    state.currency = 2_000
    state.lifetime_currency = 2_000
    purchase_units(state, UnitKind.MINER, 5)
    purchase_units(state, UnitKind.WIZARD)
    purchase_upgrade(state, SHARP_PICKAXE.id)
    state.display_uses_exponential_notation = True
    return state


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")


# ── Round trip ───────────────────────────────────────────────────────────────

def test_round_trip(gateway):
    state = _played_state()
    assert gateway.save(state)
    assert state.last_saved_timestamp > 0

    result = gateway.load()
    assert result.ok
    assert result.source == "primary"
    assert result.errors == []
    assert result.state == state


def test_save_writes_backup_too(gateway):
    gateway.save(_played_state())
    assert gateway.primary.path.exists()
    assert gateway.backup.path.exists()
    primary = json.loads(gateway.primary.path.read_text(encoding="utf-8"))
    backup = json.loads(gateway.backup.path.read_text(encoding="utf-8"))
    assert primary == backup
    assert primary["version"] == 1
    assert primary["units_owned"]["miner"] == 5


def test_load_with_no_save(gateway):
    result = gateway.load()
    assert not result.ok
    assert result.source is None
    assert result.errors == []


# ── Backup fallback ──────────────────────────────────────────────────────────

def test_unreadable_primary_falls_back_to_backup(gateway):
    state = _played_state()
    gateway.save(state)
    gateway.primary.path.write_text("{not json", encoding="utf-8")

    result = gateway.load()
    assert result.ok
    assert result.source == "backup"
    assert result.state == state
    assert result.errors


def test_missing_primary_falls_back_to_backup(gateway):
    gateway.save(_played_state())
    gateway.primary.path.unlink()
    result = gateway.load()
    assert result.ok
    assert result.source == "backup"


def test_non_object_json_is_unreadable(gateway):
    _write(gateway.primary.path, [1, 2, 3])
    result = gateway.load()
    assert not result.ok
    assert any("JSON object" in e for e in result.errors)


def test_invalid_primary_does_not_fall_back(gateway):
    gateway.save(_played_state())
    _write(gateway.primary.path, {"currency": -5, "prestige_currency": 0})

    result = gateway.load()
    assert not result.ok
    assert result.source == "primary"
    assert any("currency" in e for e in result.errors)


def test_number_too_large_for_a_float_is_invalid(gateway):
    digits = "1" + "0" * 400
    gateway.primary.path.write_text(
        '{"currency": ' + digits + ', "prestige_currency": 0}', encoding="utf-8"
    )
    result = gateway.load()
    assert not result.ok
    assert any("currency" in e for e in result.errors)


def test_number_too_long_to_parse_is_rejected(gateway):
    digits = "9" * 5000
    gateway.primary.path.write_text(
        '{"currency": 0, "prestige_currency": ' + digits + "}", encoding="utf-8"
    )
    result = gateway.load()
    assert not result.ok
    assert result.errors


def test_deeply_nested_json_is_unreadable(gateway):
    gateway.primary.path.write_text("[" * 100_000, encoding="utf-8")
    with pytest.raises(CorruptSaveData):
        gateway.primary.read()

    result = gateway.load()
    assert not result.ok
    assert result.source is None
    assert result.errors


# ── Validation ───────────────────────────────────────────────────────────────

def test_validate_missing_required_fields():
    errors = validate_payload({})
    assert len(errors) == 2


@pytest.mark.parametrize("payload", [
    {"currency": True, "prestige_currency": 0},
    {"currency": float("nan"), "prestige_currency": 0},
    {"currency": 1.0, "prestige_currency": 1.5},
    {"currency": 1.0, "prestige_currency": 0, "units_owned": {"miner": -1}},
    {"currency": 1.0, "prestige_currency": 0, "units_owned": [1, 2]},
    {"currency": 1.0, "prestige_currency": 0, "unlocked_artifacts": "ancient-coin"},
    {"currency": 1.0, "prestige_currency": 0, "display_uses_exponential_notation": "yes"},
])
def test_validate_rejects_bad_values(payload):
    assert validate_payload(payload)
    with pytest.raises(CorruptSaveData):
        dict_to_state(payload)


def test_minimal_payload_loads_over_defaults():
    state = dict_to_state({"currency": 12.5, "prestige_currency": 0})
    assert state.currency == 12.5
    assert state.owned(UnitKind.MINER) == 0
    assert state.click_yield == 1.0


def test_unknown_ids_are_dropped():
    state = dict_to_state({
        "currency": 0,
        "prestige_currency": 1,
        "total_prestige_count": 1,
        "units_owned": {"miner": 2, "dragon": 1},
        "upgrade_levels": {"golden-shovel": 4},
        "unlocked_artifacts": ["ancient-coin", "cursed-idol"],
    })
    assert state.owned(UnitKind.MINER) == 2
    assert "golden-shovel" not in state.upgrade_levels
    assert state.unlocked_artifacts == {"ancient-coin"}


def test_stale_caches_are_recomputed():
    state = dict_to_state({
        "currency": 0,
        "prestige_currency": 5,
        "prestige_multiplier": 7.0,
        "units_owned": {"miner": 1},
        "upgrade_levels": {SHARP_PICKAXE.id: 1},
        "unit_yield_rate": {"miner": 99.0},
    })
    assert state.unit_yield_rate[UnitKind.MINER] == pytest.approx(1.1)
    assert state.prestige_multiplier == pytest.approx(1.1)
    assert state.passive_yield_per_s == pytest.approx(1.1 * 1.1)


def test_load_unlocks_artifacts_added_since_save():
    state = dict_to_state({
        "currency": 0,
        "prestige_currency": 3,
        "total_prestige_count": 3,
        "unlocked_artifacts": [],
    })
    assert state.unlocked_artifacts == {"ancient-coin", "mystic-pickaxe", "lucky-clover"}
    assert state.modifiers.click_multiplier == pytest.approx(1.25)


def test_state_to_dict_uses_save_keys():
    d = state_to_dict(new_economy_state())
    assert set(d["units_owned"]) == {"miner", "soldier", "wizard"}
    assert d["unlocked_artifacts"] == []


# ── Write failures ───────────────────────────────────────────────────────────

def test_primary_write_failure_is_reported(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    gateway = SaveGateway(
        primary=JsonFileStore(blocker / "save.json"),
        backup=JsonFileStore(tmp_path / "save.backup.json"),
    )

    assert gateway.save(_played_state()) is False
    # The mirror is still written
    assert gateway.backup.path.exists()
    result = gateway.load()
    assert result.ok
    assert result.source == "backup"


def test_delete_removes_both_files(gateway):
    gateway.save(_played_state())
    gateway.delete()
    assert not gateway.primary.path.exists()
    assert not gateway.backup.path.exists()
    assert not gateway.load().ok
