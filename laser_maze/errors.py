"""Exceptions raised by the laser maze solver."""

from __future__ import annotations


class LaserMazeError(ValueError):
    """Base class for every error raised by this package."""


class BoardError(LaserMazeError):
    """Invalid operation on a board."""


class CellOccupied(BoardError):
    def __init__(self, cell) -> None:
        super().__init__(f"Cell {cell} is already occupied")
        self.cell = cell


class OutOfRange(BoardError):
    def __init__(self, cell) -> None:
        super().__init__(f"Cell {cell} is outside the 5x5 grid")
        self.cell = cell


class ValidationError(LaserMazeError):
    """The puzzle cannot be searched. Raised before the search starts."""


class TooManyTokens(ValidationError):
    pass


class LaserCountError(ValidationError):
    pass


class TargetCountError(ValidationError):
    pass


class DuplicateCell(ValidationError):
    pass


class InvalidCellReference(ValidationError):
    pass


class UnplaceableToken(ValidationError):
    pass


class ChallengeFormatError(LaserMazeError):
    """A challenge record is malformed."""
