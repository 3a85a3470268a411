"""Economy state — single source of truth for one play session."""

from __future__ import annotations

from dataclasses import dataclass, field

from hoard.data.balance import BALANCE, BalanceConfig
from hoard.data.units import UnitKind


@dataclass
class StartingBonus:
    """Floor values a fresh run starts from after prestige."""

    currency: float = 0.0
    units_owned: dict[UnitKind, int] = field(default_factory=dict)


@dataclass
class ModifierAccumulator:
    """Aggregate effect of every unlocked artifact.

    Rebuilt from identity whenever the unlocked set changes; never
    stacked onto a previous accumulator.
    """

    currency_multiplier: float = 1.0
    click_multiplier: float = 1.0
    passive_multiplier: float = 1.0
    unit_cost_reduction: float = 0.0   # fraction, 0 <= x < 1
    # Per-unit yield boosts; missing kinds are 1.0
    unit_yield_multiplier: dict[UnitKind, float] = field(default_factory=dict)
    starting_bonus: StartingBonus = field(default_factory=StartingBonus)

    def yield_multiplier(self, kind: UnitKind) -> float:
        return self.unit_yield_multiplier.get(kind, 1.0)


@dataclass
class EconomyState:
    """Complete mutable state for one player."""

    # ── Gold ─────────────────────────────────────────────
    currency: float = 0.0
    lifetime_currency: float = 0.0   # this prestige cycle only

    # ── Units & upgrades ─────────────────────────────────
    units_owned: dict[UnitKind, int] = field(default_factory=dict)
    # Base yield × upgrade compounding (artifact boosts live in modifiers)
    unit_yield_rate: dict[UnitKind, float] = field(default_factory=dict)
    upgrade_levels: dict[str, int] = field(default_factory=dict)

    # ── Derived / caches (recomputed, never hand-edited) ─
    click_yield: float = 1.0
    passive_yield_per_s: float = 0.0

    # ── Prestige (survives resets) ───────────────────────
    prestige_currency: int = 0
    prestige_multiplier: float = 1.0
    total_prestige_count: int = 0
    unlocked_artifacts: set[str] = field(default_factory=set)

    modifiers: ModifierAccumulator = field(default_factory=ModifierAccumulator)

    # ── Settings ─────────────────────────────────────────
    display_uses_exponential_notation: bool = False
    last_saved_timestamp: float = 0.0

    def owned(self, kind: UnitKind) -> int:
        return self.units_owned.get(kind, 0)

    def level(self, upgrade_id: str) -> int:
        return self.upgrade_levels.get(upgrade_id, 0)


def new_economy_state(balance: BalanceConfig = BALANCE) -> EconomyState:
    """Create a fresh session with config-derived defaults."""
    return EconomyState(
        units_owned={kind: 0 for kind in balance.units},
        unit_yield_rate={kind: udef.base_yield for kind, udef in balance.units.items()},
        upgrade_levels={uid: 0 for uid in balance.upgrades},
        click_yield=balance.general.base_click_yield,
    )
