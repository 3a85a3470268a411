"""Upgrade definitions — leveled boosts to a single unit's yield."""

from __future__ import annotations

from dataclasses import dataclass

from hoard.data.units import UnitKind


@dataclass(frozen=True)
class UpgradeDef:
    """Definition of a single upgrade.

    Each level multiplies the target unit's yield rate by (1 + effect_per_level).
    Costs follow the same curve as units.
    """

    id: str
    name: str
    description: str
    target: UnitKind
    effect_per_level: float
    base_cost: float
    cost_growth_rate: float
    cost_growth_exponent: float

    def __post_init__(self) -> None:
        if self.base_cost <= 0:
            raise ValueError(f"{self.id}: base_cost must be > 0")
        if self.cost_growth_rate <= 0 or self.cost_growth_exponent <= 0:
            raise ValueError(f"{self.id}: cost growth must be > 0")


SHARP_PICKAXE = UpgradeDef(
    id="miner-sharp-pickaxe",
    name="Sharp Pickaxe",
    description="Miners dig faster. +10% miner output per level, compounding.",
    target=UnitKind.MINER,
    effect_per_level=0.1,
    base_cost=50,
    cost_growth_rate=0.25,
    cost_growth_exponent=1.1,
)

STRONGER_SWORDS = UpgradeDef(
    id="soldier-stronger-swords",
    name="Stronger Swords",
    description="Better steel, richer raids. +10% soldier output per level, compounding.",
    target=UnitKind.SOLDIER,
    effect_per_level=0.1,
    base_cost=150,
    cost_growth_rate=0.28,
    cost_growth_exponent=1.15,
)

BETTER_FOCUS = UpgradeDef(
    id="wizard-better-focus",
    name="Better Focus",
    description="Sharper minds, bigger spells. +10% wizard click bonus per level, compounding.",
    target=UnitKind.WIZARD,
    effect_per_level=0.1,
    base_cost=250,
    cost_growth_rate=0.3,
    cost_growth_exponent=1.2,
)

# ── All upgrades registry ────────────────────────────────────────

ALL_UPGRADES: dict[str, UpgradeDef] = {
    u.id: u
    for u in [
        SHARP_PICKAXE,
        STRONGER_SWORDS,
        BETTER_FOCUS,
    ]
}
