"""Prestige — trade lifetime gold for permanent points, artifacts, and a fresh run."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Iterable

from hoard.data.artifacts import ArtifactDef
from hoard.data.balance import BALANCE, BalanceConfig
from hoard.engine.economy import compute_derived
from hoard.engine.errors import PrestigeNotEligible
from hoard.engine.game_state import EconomyState, new_economy_state
from hoard.engine.modifiers import apply_modifiers, recompute_modifiers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrestigeResult:
    """Outcome of a prestige, for the caller to announce."""

    award: int
    prestige_count: int
    prestige_multiplier: float
    new_artifacts: list[ArtifactDef] = field(default_factory=list)


def compute_prestige_award(state: EconomyState, balance: BalanceConfig = BALANCE) -> int:
    """Points a prestige would award right now: floor(sqrt(lifetime / divisor))."""
    lifetime = state.lifetime_currency
    if lifetime <= 0:
        return 0
    return math.floor(math.sqrt(lifetime / balance.prestige.points_divisor))


def can_prestige(state: EconomyState, balance: BalanceConfig = BALANCE) -> bool:
    """True once lifetime gold this cycle has reached the unlock threshold."""
    return state.lifetime_currency >= balance.prestige.unlock_threshold


def prestige_progress(state: EconomyState, balance: BalanceConfig = BALANCE) -> float:
    """Fraction of the way to the unlock threshold, clamped to [0, 1]."""
    threshold = balance.prestige.unlock_threshold
    if threshold <= 0:
        return 1.0
    return max(0.0, min(state.lifetime_currency / threshold, 1.0))


def prestige_multiplier_for(points: int, balance: BalanceConfig = BALANCE) -> float:
    return 1.0 + points * balance.prestige.bonus_per_point


def artifacts_due(
    unlocked: Iterable[str],
    prestige_count: int,
    balance: BalanceConfig = BALANCE,
) -> list[ArtifactDef]:
    """Locked artifacts whose prestige requirement has been met, in unlock order."""
    have = set(unlocked)
    due = [
        adef
        for adef in balance.artifacts.values()
        if adef.unlock_at_prestige <= prestige_count and adef.id not in have
    ]
    due.sort(key=lambda a: (a.unlock_at_prestige, a.id))
    return due


def check_artifact_unlocks(state: EconomyState, balance: BalanceConfig = BALANCE) -> list[ArtifactDef]:
    """Unlock every artifact due at the current prestige count.

    Returns the newly unlocked artifacts; modifiers are rebuilt when any were added.
    """
    new = artifacts_due(state.unlocked_artifacts, state.total_prestige_count, balance)
    if new:
        state.unlocked_artifacts.update(a.id for a in new)
        apply_modifiers(state, balance)
        for adef in new:
            logger.info("artifact unlocked: %s (%s)", adef.name, adef.id)
    return new


def upcoming_artifacts(
    state: EconomyState,
    balance: BalanceConfig = BALANCE,
    lookahead: int = 2,
    limit: int = 3,
) -> list[ArtifactDef]:
    """Locked artifacts within `lookahead` prestiges, soonest first."""
    horizon = state.total_prestige_count + lookahead
    locked = [
        adef
        for adef in balance.artifacts.values()
        if adef.id not in state.unlocked_artifacts and adef.unlock_at_prestige <= horizon
    ]
    locked.sort(key=lambda a: (a.unlock_at_prestige, a.id))
    return locked[:limit]


def _commit(state: EconomyState, fresh: EconomyState) -> None:
    for f in fields(EconomyState):
        setattr(state, f.name, getattr(fresh, f.name))


def execute_prestige(state: EconomyState, balance: BalanceConfig = BALANCE) -> PrestigeResult:
    """Soft reset — prestige points, count, and artifacts persist, the run clears.

    The new run is built on a separate state object and committed in one
    step, so a failure leaves `state` untouched. Raises PrestigeNotEligible
    when the award would be zero.
    """
    award = compute_prestige_award(state, balance)
    if award <= 0:
        raise PrestigeNotEligible(
            f"lifetime gold {state.lifetime_currency:g} earns no prestige points yet"
        )

    points = state.prestige_currency + award
    count = state.total_prestige_count + 1
    new_artifacts = artifacts_due(state.unlocked_artifacts, count, balance)
    unlocked = set(state.unlocked_artifacts) | {a.id for a in new_artifacts}
    modifiers = recompute_modifiers(unlocked, balance)

    fresh = new_economy_state(balance)
    fresh.prestige_currency = points
    fresh.prestige_multiplier = max(state.prestige_multiplier, prestige_multiplier_for(points, balance))
    fresh.total_prestige_count = count
    fresh.unlocked_artifacts = unlocked
    fresh.modifiers = modifiers
    fresh.display_uses_exponential_notation = state.display_uses_exponential_notation
    fresh.last_saved_timestamp = state.last_saved_timestamp

    # Starting bonuses replace literal zero as the floor of the new run
    bonus = modifiers.starting_bonus
    fresh.currency = bonus.currency
    for kind, n in bonus.units_owned.items():
        if kind in fresh.units_owned:
            fresh.units_owned[kind] = max(fresh.units_owned[kind], n)

    compute_derived(fresh, balance)
    _commit(state, fresh)

    logger.info(
        "prestige #%d: +%d points (total %d, x%.2f), %d new artifacts",
        count, award, points, state.prestige_multiplier, len(new_artifacts),
    )
    for adef in new_artifacts:
        logger.info("artifact unlocked: %s (%s)", adef.name, adef.id)

    return PrestigeResult(
        award=award,
        prestige_count=count,
        prestige_multiplier=state.prestige_multiplier,
        new_artifacts=new_artifacts,
    )
