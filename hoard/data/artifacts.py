"""Artifacts — permanent modifiers unlocked by prestiging.

Each artifact is pure data: one or more effect rules (kind + magnitude +
optional target) that the modifier pipeline folds into the accumulator.
Artifacts are never removed once unlocked.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto

from hoard.data.units import UnitKind


class ArtifactEffect(Enum):
    CURRENCY_MULT       = auto()  # all gold income × magnitude
    CLICK_MULT          = auto()  # click income × magnitude
    PASSIVE_MULT        = auto()  # passive income × magnitude
    UNIT_YIELD_MULT     = auto()  # target unit's yield × magnitude
    UNIT_COST_REDUCTION = auto()  # unit prices × (1 - magnitude); strongest wins
    STARTING_CURRENCY   = auto()  # gold granted after each prestige; strongest wins
    STARTING_UNITS      = auto()  # units granted after each prestige (target, or every kind)


class Rarity(IntEnum):
    COMMON = 1
    UNCOMMON = 2
    RARE = 3
    EPIC = 4
    LEGENDARY = 5
    MYTHIC = 6


@dataclass(frozen=True)
class EffectRule:
    kind: ArtifactEffect
    magnitude: float
    target: UnitKind | None = None

    def __post_init__(self) -> None:
        if self.kind == ArtifactEffect.UNIT_YIELD_MULT and self.target is None:
            raise ValueError("UNIT_YIELD_MULT needs a target unit")
        if self.kind == ArtifactEffect.UNIT_COST_REDUCTION and not 0.0 <= self.magnitude < 1.0:
            raise ValueError("cost reduction must be in [0, 1)")
        if self.magnitude < 0:
            raise ValueError("effect magnitude must be >= 0")


@dataclass(frozen=True)
class ArtifactDef:
    id: str
    name: str
    icon: str
    rarity: Rarity
    effect_text: str
    description: str
    unlock_at_prestige: int
    effects: tuple[EffectRule, ...]


ANCIENT_COIN = ArtifactDef(
    id="ancient-coin",
    name="Ancient Gold Coin",
    icon="🪙",
    rarity=Rarity.COMMON,
    effect_text="Increases all gold income by 20%",
    description="A mysteriously preserved gold coin bearing the face of a forgotten king.",
    unlock_at_prestige=1,
    effects=(EffectRule(ArtifactEffect.CURRENCY_MULT, 1.2),),
)

MYSTIC_PICKAXE = ArtifactDef(
    id="mystic-pickaxe",
    name="Mystic Pickaxe",
    icon="⛏️",
    rarity=Rarity.UNCOMMON,
    effect_text="Miners are 35% more efficient",
    description="A finely-crafted pickaxe that hums with arcane energy when held.",
    unlock_at_prestige=2,
    effects=(EffectRule(ArtifactEffect.UNIT_YIELD_MULT, 1.35, UnitKind.MINER),),
)

LUCKY_CLOVER = ArtifactDef(
    id="lucky-clover",
    name="Four-Leaf Clover",
    icon="🍀",
    rarity=Rarity.UNCOMMON,
    effect_text="Gold per click increased by 25%",
    description="A perfectly preserved clover that seems to shimmer with an inner light.",
    unlock_at_prestige=3,
    effects=(EffectRule(ArtifactEffect.CLICK_MULT, 1.25),),
)

HEROES_MEDALLION = ArtifactDef(
    id="heroes-medallion",
    name="Hero's Medallion",
    icon="🏅",
    rarity=Rarity.RARE,
    effect_text="Soldiers are 40% more efficient",
    description="A polished medal awarded to a legendary warrior for feats of valor.",
    unlock_at_prestige=4,
    effects=(EffectRule(ArtifactEffect.UNIT_YIELD_MULT, 1.4, UnitKind.SOLDIER),),
)

ANCIENT_SCROLL = ArtifactDef(
    id="ancient-scroll",
    name="Ancient Scroll",
    icon="📜",
    rarity=Rarity.RARE,
    effect_text="Wizards provide 35% more gold per click",
    description="Fragile parchment inscribed with faded spells of fortune and prosperity.",
    unlock_at_prestige=5,
    effects=(EffectRule(ArtifactEffect.UNIT_YIELD_MULT, 1.35, UnitKind.WIZARD),),
)

MERCANTILE_EMBLEM = ArtifactDef(
    id="mercantile-emblem",
    name="Mercantile Emblem",
    icon="💼",
    rarity=Rarity.EPIC,
    effect_text="All jobs cost 15% less gold",
    description="A trader's token that whispers secrets of bargaining to its owner.",
    unlock_at_prestige=6,
    effects=(EffectRule(ArtifactEffect.UNIT_COST_REDUCTION, 0.15),),
)

BOTTOMLESS_POUCH = ArtifactDef(
    id="bottomless-pouch",
    name="Bottomless Pouch",
    icon="👝",
    rarity=Rarity.LEGENDARY,
    effect_text="Start with 100 gold after each prestige",
    description="A small leather pouch that somehow produces gold coins from thin air.",
    unlock_at_prestige=7,
    effects=(EffectRule(ArtifactEffect.STARTING_CURRENCY, 100),),
)

MIDAS_TOUCH = ArtifactDef(
    id="midas-touch",
    name="Midas Touch",
    icon="👆",
    rarity=Rarity.LEGENDARY,
    effect_text="Increases all gold income by 50%",
    description="Your fingertips glimmer with golden light, turning everything you touch to riches.",
    unlock_at_prestige=8,
    effects=(EffectRule(ArtifactEffect.CURRENCY_MULT, 1.5),),
)

PHILOSOPHERS_STONE = ArtifactDef(
    id="philosophers-stone",
    name="Philosopher's Stone",
    icon="💎",
    rarity=Rarity.MYTHIC,
    effect_text="Start with 3 of each job after prestige and increases all gold income by 25%",
    description=(
        "The legendary alchemical substance that transforms not just lead to gold, "
        "but poverty to prosperity."
    ),
    unlock_at_prestige=10,
    effects=(
        EffectRule(ArtifactEffect.STARTING_UNITS, 3),
        EffectRule(ArtifactEffect.CURRENCY_MULT, 1.25),
    ),
)

ALL_ARTIFACTS: dict[str, ArtifactDef] = {
    a.id: a
    for a in [
        ANCIENT_COIN,
        MYSTIC_PICKAXE,
        LUCKY_CLOVER,
        HEROES_MEDALLION,
        ANCIENT_SCROLL,
        MERCANTILE_EMBLEM,
        BOTTOMLESS_POUCH,
        MIDAS_TOUCH,
        PHILOSOPHERS_STONE,
    ]
}
