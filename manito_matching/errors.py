# manito_matching/errors.py
from __future__ import annotations


class PairingError(RuntimeError):
    """Base class for every fatal pairing failure."""


class InsufficientPopulationError(PairingError):
    pass


class GroupUnsolvableError(PairingError):
    def __init__(self, group_size: int, attempts: int, detail: str = ""):
        self.group_size = group_size
        self.attempts = attempts
        msg = f"No valid arrangement found for a group of {group_size} participants"
        msg += f" after {attempts} attempts." if attempts else "."
        if detail:
            msg += " " + detail
        msg += " Relax the forbidden pairs or the category balance and retry."
        super().__init__(msg)


class ReciprocityViolationError(PairingError):
    def __init__(self, giver: str, receiver: str):
        self.giver = giver
        self.receiver = receiver
        super().__init__(
            f"Validation failed: {giver} and {receiver} give to each other "
            f"({giver} <-> {receiver})."
        )


class SheetError(ValueError):
    """Bad sheet address, layout or write request."""


class CellConflictError(SheetError):
    def __init__(self, cell: str, current: str, expected: str):
        self.cell = cell
        self.current = current
        self.expected = expected
        super().__init__(
            f"CONFLICT: cell {cell} was already modified. "
            f"Current value: {current!r}, expected: {expected!r}."
        )
