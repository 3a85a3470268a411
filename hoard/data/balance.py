"""Balance constants — all tuning knobs in one place.

Tweak these to adjust game feel, pacing, and difficulty curves.
Unit and upgrade costs follow: floor(base_cost * (1 + growth_rate * owned ^ growth_exponent))
Prestige points: floor(sqrt(lifetime_gold / points_divisor))
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from hoard.data.artifacts import ALL_ARTIFACTS, ArtifactDef
from hoard.data.units import ALL_UNITS, UnitDef, UnitKind
from hoard.data.upgrades import ALL_UPGRADES, UpgradeDef


@dataclass(frozen=True)
class GeneralBalance:
    """Tuning for clicking, ticking, and saving."""

    # Gold per click before wizards and multipliers
    base_click_yield: float = 1.0

    # Passive income is paid out once per tick
    tick_interval_s: float = 1.0

    # Periodic save while playing
    autosave_interval_s: float = 10.0

    # Longest gap the web API will pay out in one catch-up tick
    max_catch_up_s: float = 60.0

    # Large number formatting thresholds
    suffixes: tuple[tuple[float, str], ...] = (
        (1e3, "K"),
        (1e6, "M"),
        (1e9, "B"),
        (1e12, "T"),
    )


@dataclass(frozen=True)
class PrestigeBalance:
    """Tuning for the prestige soft reset."""

    # Lifetime gold needed before the prestige button lights up
    unlock_threshold: float = 1_000_000
    # Points earned = floor(sqrt(lifetime_gold / points_divisor))
    points_divisor: float = 1_000_000
    # Prestige multiplier: 1 + (prestige_points * bonus_per_point)
    bonus_per_point: float = 0.02

    def __post_init__(self) -> None:
        if self.points_divisor <= 0:
            raise ValueError("points_divisor must be > 0")
        if self.bonus_per_point < 0:
            raise ValueError("bonus_per_point must be >= 0")


def _frozen(mapping):
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class BalanceConfig:
    """Top-level container for all balance constants and item registries."""

    general: GeneralBalance = field(default_factory=GeneralBalance)
    prestige: PrestigeBalance = field(default_factory=PrestigeBalance)
    units: Mapping[UnitKind, UnitDef] = field(default_factory=lambda: _frozen(ALL_UNITS))
    upgrades: Mapping[str, UpgradeDef] = field(default_factory=lambda: _frozen(ALL_UPGRADES))
    artifacts: Mapping[str, ArtifactDef] = field(default_factory=lambda: _frozen(ALL_ARTIFACTS))

    def __post_init__(self) -> None:
        # Registries handed in by callers get the same read-only treatment
        for name in ("units", "upgrades", "artifacts"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, _frozen(value))
        for udef in self.upgrades.values():
            if udef.target not in self.units:
                raise ValueError(f"{udef.id}: unknown target unit {udef.target}")


# Singleton — import this everywhere
BALANCE = BalanceConfig()
