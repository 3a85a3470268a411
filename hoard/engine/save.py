"""Save/load — persists the economy to disk with a mirrored backup file."""

from __future__ import annotations

import json
import logging
import math
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from hoard.data.balance import BALANCE, BalanceConfig
from hoard.data.units import UnitKind
from hoard.engine.errors import CorruptSaveData, PersistenceWriteFailure
from hoard.engine.game_state import EconomyState, new_economy_state
from hoard.engine.modifiers import apply_modifiers
from hoard.engine.prestige import check_artifact_unlocks, prestige_multiplier_for

logger = logging.getLogger(__name__)

SAVE_DIR = Path.home() / ".hoard"
SAVE_FILE = SAVE_DIR / "save.json"
BACKUP_FILE = SAVE_DIR / "save.backup.json"

SCHEMA_VERSION = 1

REQUIRED_FIELDS = ("currency", "prestige_currency")
_FLOAT_FIELDS = ("currency", "lifetime_currency", "prestige_multiplier", "last_saved_timestamp")
_INT_FIELDS = ("prestige_currency", "total_prestige_count")


# ── Serialisation helpers ────────────────────────────────────────


def state_to_dict(state: EconomyState) -> dict:
    s = state
    return {
        "version": SCHEMA_VERSION,
        "currency": s.currency,
        "lifetime_currency": s.lifetime_currency,
        "units_owned": {kind.value: n for kind, n in s.units_owned.items()},
        "unit_yield_rate": {kind.value: r for kind, r in s.unit_yield_rate.items()},
        "upgrade_levels": dict(s.upgrade_levels),
        "prestige_currency": s.prestige_currency,
        "prestige_multiplier": s.prestige_multiplier,
        "total_prestige_count": s.total_prestige_count,
        "unlocked_artifacts": sorted(s.unlocked_artifacts),
        "display_uses_exponential_notation": s.display_uses_exponential_notation,
        "last_saved_timestamp": s.last_saved_timestamp,
    }


def _is_number(value: object) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def _is_count(value: object) -> bool:
    return _is_number(value) and value >= 0 and float(value).is_integer()


def validate_payload(d: dict) -> list[str]:
    """Return every problem with a decoded save; empty when it can be adopted."""
    errors: list[str] = []

    for name in REQUIRED_FIELDS:
        if name not in d:
            errors.append(f"missing required field {name!r}")

    for name in _FLOAT_FIELDS:
        if name in d and not (_is_number(d[name]) and d[name] >= 0):
            errors.append(f"{name!r} must be a non-negative number, got {d[name]!r}")
    for name in _INT_FIELDS:
        if name in d and not _is_count(d[name]):
            errors.append(f"{name!r} must be a non-negative integer, got {d[name]!r}")

    for name, check, what in (
        ("units_owned", _is_count, "non-negative integers"),
        ("upgrade_levels", _is_count, "non-negative integers"),
        ("unit_yield_rate", lambda v: _is_number(v) and v >= 0, "non-negative numbers"),
    ):
        if name not in d:
            continue
        mapping = d[name]
        if not isinstance(mapping, dict):
            errors.append(f"{name!r} must be an object")
        elif not all(isinstance(k, str) and check(v) for k, v in mapping.items()):
            errors.append(f"{name!r} values must be {what}")

    if "unlocked_artifacts" in d:
        ids = d["unlocked_artifacts"]
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            errors.append("'unlocked_artifacts' must be a list of ids")

    if "display_uses_exponential_notation" in d and not isinstance(
        d["display_uses_exponential_notation"], bool
    ):
        errors.append("'display_uses_exponential_notation' must be a boolean")

    return errors


def _unit_kind(key: str, balance: BalanceConfig) -> UnitKind | None:
    try:
        kind = UnitKind(key)
    except ValueError:
        return None
    return kind if kind in balance.units else None


def _expected_yield_rates(state: EconomyState, balance: BalanceConfig) -> dict[UnitKind, float]:
    rates = {kind: udef.base_yield for kind, udef in balance.units.items()}
    for uid, udef in balance.upgrades.items():
        rates[udef.target] *= (1.0 + udef.effect_per_level) ** state.level(uid)
    return rates


def dict_to_state(d: dict, balance: BalanceConfig = BALANCE) -> EconomyState:
    """Merge a decoded save over fresh defaults.

    Raises CorruptSaveData if validation fails; nothing is adopted then.
    Derived values are recomputed rather than trusted.
    """
    errors = validate_payload(d)
    if errors:
        raise CorruptSaveData(errors)

    state = new_economy_state(balance)
    state.currency = float(d["currency"])
    state.lifetime_currency = float(d.get("lifetime_currency", 0.0))
    state.prestige_currency = int(d["prestige_currency"])
    state.total_prestige_count = int(d.get("total_prestige_count", 0))
    state.display_uses_exponential_notation = d.get("display_uses_exponential_notation", False)
    state.last_saved_timestamp = float(d.get("last_saved_timestamp", 0.0))

    for key, n in d.get("units_owned", {}).items():
        kind = _unit_kind(key, balance)
        if kind is None:
            logger.warning("dropping unknown unit %r from save", key)
            continue
        state.units_owned[kind] = int(n)

    for uid, level in d.get("upgrade_levels", {}).items():
        if uid not in balance.upgrades:
            logger.warning("dropping unknown upgrade %r from save", uid)
            continue
        state.upgrade_levels[uid] = int(level)

    for aid in d.get("unlocked_artifacts", []):
        if aid not in balance.artifacts:
            logger.warning("dropping unknown artifact %r from save", aid)
            continue
        state.unlocked_artifacts.add(aid)

    # Yield rates are a cache of base × upgrade compounding; keep the stored
    # value only while it still agrees with the levels.
    stored_rates = d.get("unit_yield_rate", {})
    for kind, expected in _expected_yield_rates(state, balance).items():
        stored = stored_rates.get(kind.value)
        if stored is not None and math.isclose(stored, expected, rel_tol=1e-9):
            state.unit_yield_rate[kind] = float(stored)
        else:
            if stored is not None:
                logger.warning("%s yield rate %r disagrees with upgrades, using %r", kind.value, stored, expected)
            state.unit_yield_rate[kind] = expected

    expected_mult = prestige_multiplier_for(state.prestige_currency, balance)
    stored_mult = d.get("prestige_multiplier")
    if stored_mult is not None and math.isclose(stored_mult, expected_mult, rel_tol=1e-9):
        state.prestige_multiplier = float(stored_mult)
    else:
        if stored_mult is not None:
            logger.warning("prestige multiplier %r disagrees with points, using %r", stored_mult, expected_mult)
        state.prestige_multiplier = expected_mult

    # Artifacts added to the catalog since this save was written
    check_artifact_unlocks(state, balance)
    apply_modifiers(state, balance)
    return state


# ── Stores ───────────────────────────────────────────────────────


class JsonFileStore:
    """One JSON document on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def read(self) -> dict | None:
        """Decoded payload, None if the file is absent, CorruptSaveData if unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as exc:
            raise CorruptSaveData([f"{self.path.name}: {exc}"]) from exc
        if not isinstance(data, dict):
            raise CorruptSaveData([f"{self.path.name}: expected a JSON object"])
        return data

    def write(self, payload: dict) -> None:
        """Atomically replace the file; PersistenceWriteFailure on any OS error."""
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise PersistenceWriteFailure(f"{self.path}: {exc}") from exc

    def delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("could not delete %s: %s", self.path, exc)


@dataclass
class LoadResult:
    """Outcome of a load: the state (if any), where it came from, and what went wrong."""

    state: EconomyState | None = None
    source: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is not None


def _describe_timestamp(ts: float) -> str:
    if not ts:
        return "never"
    try:
        return datetime.fromtimestamp(ts).isoformat(timespec="seconds")
    except (OverflowError, OSError, ValueError):
        return repr(ts)


# ── Public API ───────────────────────────────────────────────────


class SaveGateway:
    """Primary save file plus a mirrored backup.

    Neither save nor load ever raises; problems are logged and reported
    through the return value so gameplay carries on.
    """

    def __init__(
        self,
        primary: JsonFileStore | None = None,
        backup: JsonFileStore | None = None,
        balance: BalanceConfig = BALANCE,
    ) -> None:
        self.primary = primary or JsonFileStore(SAVE_FILE)
        self.backup = backup or JsonFileStore(BACKUP_FILE)
        self.balance = balance

    def save(self, state: EconomyState) -> bool:
        """Stamp and persist the state. Returns True when the primary write succeeded."""
        state.last_saved_timestamp = time.time()
        return self.write(state_to_dict(state))

    def write(self, payload: dict) -> bool:
        """Persist an already-serialized state to both stores."""
        ok = True
        try:
            self.primary.write(payload)
        except PersistenceWriteFailure as exc:
            logger.error("failed to save game: %s", exc)
            ok = False
        try:
            self.backup.write(payload)
        except PersistenceWriteFailure as exc:
            logger.warning("failed to write backup save: %s", exc)
        return ok

    def load(self) -> LoadResult:
        """Load from the primary store, falling back to the backup when it is missing or unreadable."""
        errors: list[str] = []
        for source, store in (("primary", self.primary), ("backup", self.backup)):
            try:
                data = store.read()
            except CorruptSaveData as exc:
                logger.error("failed to read %s save: %s", source, exc)
                errors.extend(exc.errors)
                continue
            if data is None:
                continue

            try:
                state = dict_to_state(data, self.balance)
            except CorruptSaveData as exc:
                logger.error("saved game data appears to be corrupt: %s", exc)
                return LoadResult(state=None, source=source, errors=errors + exc.errors)

            if source == "backup":
                logger.warning("restored game from backup")
            logger.info(
                "game loaded from %s save (last saved: %s)",
                source, _describe_timestamp(state.last_saved_timestamp),
            )
            return LoadResult(state=state, source=source, errors=errors)

        return LoadResult(state=None, source=None, errors=errors)

    def delete(self) -> None:
        """Remove both save files (start over)."""
        self.primary.delete()
        self.backup.delete()
