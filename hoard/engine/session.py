"""Game session — owns one economy and serializes every operation on it.

Front ends (the terminal app, the web API) talk to a GameSession instead of
touching EconomyState directly. Each operation runs under one lock so a
passive-income tick can never observe a half-applied purchase or prestige.
File I/O happens after the lock is released.
"""

from __future__ import annotations

import copy
import logging
import threading
import time

from hoard.data.artifacts import ArtifactDef
from hoard.data.balance import BALANCE, BalanceConfig
from hoard.data.units import UnitKind
from hoard.engine import economy, prestige
from hoard.engine.economy import PurchaseResult, Quantity, format_number
from hoard.engine.game_state import EconomyState, new_economy_state
from hoard.engine.modifiers import apply_modifiers
from hoard.engine.prestige import PrestigeResult
from hoard.engine.save import LoadResult, SaveGateway, state_to_dict

logger = logging.getLogger(__name__)


class GameSession:
    """One player's economy plus the gateway that persists it."""

    def __init__(
        self,
        balance: BalanceConfig = BALANCE,
        gateway: SaveGateway | None = None,
        state: EconomyState | None = None,
        autosave: bool = True,
    ) -> None:
        self.balance = balance
        self.gateway = gateway if gateway is not None else SaveGateway(balance=balance)
        self.autosave = autosave
        self._lock = threading.Lock()
        self._io_lock = threading.Lock()
        self._state = state if state is not None else new_economy_state(balance)
        apply_modifiers(self._state, balance)
        self._last_autosave = time.time()
        # Snapshots are numbered under _lock; older ones never overwrite newer
        self._save_seq = 0
        self._written_seq = 0

    # ── Reads ────────────────────────────────────────

    def snapshot(self) -> EconomyState:
        """Deep copy of the current state, safe to render from."""
        with self._lock:
            return copy.deepcopy(self._state)

    def can_prestige(self) -> bool:
        with self._lock:
            return prestige.can_prestige(self._state, self.balance)

    def prestige_award(self) -> int:
        with self._lock:
            return prestige.compute_prestige_award(self._state, self.balance)

    def prestige_progress(self) -> float:
        with self._lock:
            return prestige.prestige_progress(self._state, self.balance)

    def next_costs(self) -> dict[str, int]:
        with self._lock:
            return economy.next_costs(self._state, self.balance)

    def upcoming_artifacts(self) -> list[ArtifactDef]:
        with self._lock:
            return prestige.upcoming_artifacts(self._state, self.balance)

    def format(self, n: float) -> str:
        """Format a number using the player's notation setting."""
        with self._lock:
            exponential = self._state.display_uses_exponential_notation
        return format_number(n, exponential, self.balance)

    # ── Actions ──────────────────────────────────────

    def click(self) -> float:
        with self._lock:
            return economy.handle_click(self._state)

    def tick_passive_income(self, elapsed_s: float) -> float:
        with self._lock:
            return economy.tick_passive_income(self._state, elapsed_s)

    def purchase_units(self, kind: UnitKind | str, quantity: Quantity = 1) -> PurchaseResult:
        with self._lock:
            result = economy.purchase_units(self._state, kind, quantity, self.balance)
            pending = self._stamp() if self.autosave else None
        self._write(pending)
        return result

    def purchase_upgrade(self, upgrade_id: str, quantity: Quantity = 1) -> PurchaseResult:
        with self._lock:
            result = economy.purchase_upgrade(self._state, upgrade_id, quantity, self.balance)
            pending = self._stamp() if self.autosave else None
        self._write(pending)
        return result

    def execute_prestige(self) -> PrestigeResult:
        with self._lock:
            result = prestige.execute_prestige(self._state, self.balance)
            pending = self._stamp() if self.autosave else None
        self._write(pending)
        return result

    def set_display_notation(self, use_exponential: bool) -> None:
        with self._lock:
            economy.set_display_notation(self._state, use_exponential)

    # ── Persistence ──────────────────────────────────

    def _stamp(self) -> tuple[int, dict]:
        # Caller holds self._lock
        self._save_seq += 1
        self._state.last_saved_timestamp = time.time()
        return self._save_seq, state_to_dict(self._state)

    def _write(self, pending: tuple[int, dict] | None) -> bool:
        if pending is None:
            return False
        seq, payload = pending
        with self._io_lock:
            if seq <= self._written_seq:
                logger.debug("skipping stale save #%d (already wrote #%d)", seq, self._written_seq)
                return True
            ok = self.gateway.write(payload)
            if ok:
                self._written_seq = seq
        self._last_autosave = time.time()
        return ok

    def save(self) -> bool:
        """Persist now. Safe to call redundantly; never raises."""
        with self._lock:
            pending = self._stamp()
        return self._write(pending)

    def maybe_autosave(self, now: float | None = None) -> bool:
        """Save if the autosave interval has elapsed. Returns True when a save ran."""
        now = time.time() if now is None else now
        if now - self._last_autosave < self.balance.general.autosave_interval_s:
            return False
        self.save()
        return True

    def load(self) -> LoadResult:
        """Replace the state with the saved game, if a valid one exists."""
        with self._io_lock:
            result = self.gateway.load()
        if result.state is not None:
            with self._lock:
                self._state = result.state
        elif result.errors:
            logger.warning("keeping a fresh game: %s", "; ".join(result.errors))
        return result
