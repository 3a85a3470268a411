"""Artifact effect pipeline — fold unlocked artifacts into one accumulator."""

from __future__ import annotations

import logging
from typing import Iterable

from hoard.data.artifacts import ArtifactEffect, EffectRule
from hoard.data.balance import BALANCE, BalanceConfig
from hoard.engine.economy import compute_derived
from hoard.engine.errors import InvalidItemKind
from hoard.engine.game_state import EconomyState, ModifierAccumulator

logger = logging.getLogger(__name__)


def _apply_rule(acc: ModifierAccumulator, rule: EffectRule, balance: BalanceConfig) -> None:
    m = rule.magnitude
    kind = rule.kind

    if kind == ArtifactEffect.CURRENCY_MULT:
        acc.currency_multiplier *= m
    elif kind == ArtifactEffect.CLICK_MULT:
        acc.click_multiplier *= m
    elif kind == ArtifactEffect.PASSIVE_MULT:
        acc.passive_multiplier *= m
    elif kind == ArtifactEffect.UNIT_YIELD_MULT:
        acc.unit_yield_multiplier[rule.target] = acc.yield_multiplier(rule.target) * m
    elif kind == ArtifactEffect.UNIT_COST_REDUCTION:
        acc.unit_cost_reduction = max(acc.unit_cost_reduction, m)
    elif kind == ArtifactEffect.STARTING_CURRENCY:
        acc.starting_bonus.currency = max(acc.starting_bonus.currency, m)
    elif kind == ArtifactEffect.STARTING_UNITS:
        targets = [rule.target] if rule.target is not None else list(balance.units)
        units = acc.starting_bonus.units_owned
        for target in targets:
            units[target] = max(units.get(target, 0), int(m))


def recompute_modifiers(
    unlocked: Iterable[str],
    balance: BalanceConfig = BALANCE,
) -> ModifierAccumulator:
    """Build the accumulator for an unlocked set, starting from identity.

    Artifacts are visited in sorted id order so float products come out the
    same however the set happens to iterate.
    """
    acc = ModifierAccumulator()
    for artifact_id in sorted(set(unlocked)):
        adef = balance.artifacts.get(artifact_id)
        if adef is None:
            raise InvalidItemKind(artifact_id)
        for rule in adef.effects:
            _apply_rule(acc, rule, balance)
    return acc


def apply_modifiers(state: EconomyState, balance: BalanceConfig = BALANCE) -> None:
    """Install a freshly rebuilt accumulator and recompute derived yields.

    Call after the unlocked set changes and after loading from storage.
    """
    state.modifiers = recompute_modifiers(state.unlocked_artifacts, balance)
    compute_derived(state, balance)
    logger.debug(
        "modifiers rebuilt from %d artifacts: gold x%.3f, click x%.3f, passive x%.3f, cost -%.0f%%",
        len(state.unlocked_artifacts),
        state.modifiers.currency_multiplier,
        state.modifiers.click_multiplier,
        state.modifiers.passive_multiplier,
        state.modifiers.unit_cost_reduction * 100,
    )
