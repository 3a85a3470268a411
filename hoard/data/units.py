"""Unit definitions — the jobs a player hires to produce gold."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UnitKind(Enum):
    """Closed set of production units. Values are the save-file keys."""

    MINER = "miner"
    SOLDIER = "soldier"
    WIZARD = "wizard"


class YieldTarget(Enum):
    """Which income stream a unit feeds."""

    CLICK = "click"
    PASSIVE = "passive"


@dataclass(frozen=True)
class UnitDef:
    """Definition of a single unit type.

    Cost of the next unit: floor(base_cost * (1 + cost_growth_rate * owned ^ cost_growth_exponent))
    """

    kind: UnitKind
    name: str
    description: str
    base_cost: float
    cost_growth_rate: float
    cost_growth_exponent: float
    # Gold per second (passive) or extra gold per click (click), per unit owned
    base_yield: float
    yield_target: YieldTarget

    def __post_init__(self) -> None:
        if self.base_cost <= 0:
            raise ValueError(f"{self.kind.value}: base_cost must be > 0")
        if self.cost_growth_rate <= 0 or self.cost_growth_exponent <= 0:
            raise ValueError(f"{self.kind.value}: cost growth must be > 0")
        if self.base_yield < 0:
            raise ValueError(f"{self.kind.value}: base_yield must be >= 0")


MINER = UnitDef(
    kind=UnitKind.MINER,
    name="Miner",
    description="Digs for gold around the clock.",
    base_cost=10,
    cost_growth_rate=0.15,
    cost_growth_exponent=0.9,
    base_yield=1.0,
    yield_target=YieldTarget.PASSIVE,
)

SOLDIER = UnitDef(
    kind=UnitKind.SOLDIER,
    name="Soldier",
    description="Raids and guards caravans for steady plunder.",
    base_cost=50,
    cost_growth_rate=0.17,
    cost_growth_exponent=0.95,
    base_yield=5.0,
    yield_target=YieldTarget.PASSIVE,
)

WIZARD = UnitDef(
    kind=UnitKind.WIZARD,
    name="Wizard",
    description="Conjures extra coins every time you strike.",
    base_cost=100,
    cost_growth_rate=0.2,
    cost_growth_exponent=1.05,
    base_yield=2.0,
    yield_target=YieldTarget.CLICK,
)

ALL_UNITS: dict[UnitKind, UnitDef] = {u.kind: u for u in [MINER, SOLDIER, WIZARD]}
