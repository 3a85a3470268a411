"""Error kinds raised by the economy engine.

Gameplay errors (funds, eligibility) leave the state untouched and are meant
to be caught by the caller and shown as feedback. Persistence errors are
caught inside the save gateway and reported as results, never raised to the
game loop.
"""

from __future__ import annotations


class EconomyError(Exception):
    """Base class for every engine error."""


class InsufficientFunds(EconomyError):
    """A purchase cost more gold than the player has (or bought nothing)."""

    def __init__(self, item: str, needed: float, available: float) -> None:
        super().__init__(f"cannot afford {item}: need {needed:g}, have {available:g}")
        self.item = item
        self.needed = needed
        self.available = available


class InvalidItemKind(EconomyError, LookupError):
    """An identifier that is not in the balance registry."""

    def __init__(self, item: object) -> None:
        super().__init__(f"unknown item: {item!r}")
        self.item = item


class PrestigeNotEligible(EconomyError):
    """Prestige attempted while it would award zero points."""


class CorruptSaveData(EconomyError):
    """A save payload that could not be decoded or failed validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "corrupt save data")
        self.errors = list(errors)


class PersistenceWriteFailure(EconomyError):
    """The save store could not be written."""
