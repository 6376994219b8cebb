"""Value types for the 5x5 laser maze board."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import CellOccupied, OutOfRange

GRID_SIZE = 5

Cell = Tuple[int, int]


def inside(cell: Cell) -> bool:
    row, col = cell
    return 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE


def all_cells() -> List[Cell]:
    return [(row, col) for row in range(GRID_SIZE) for col in range(GRID_SIZE)]


def _spiral_order() -> Tuple[Cell, ...]:
    """Cells ordered from the outer ring inwards, clockwise from (0, 0)."""

    order: List[Cell] = []
    top, left, bottom, right = 0, 0, GRID_SIZE - 1, GRID_SIZE - 1
    while top <= bottom and left <= right:
        order.extend((top, col) for col in range(left, right + 1))
        order.extend((row, right) for row in range(top + 1, bottom + 1))
        if top < bottom:
            order.extend((bottom, col) for col in range(right - 1, left - 1, -1))
        if left < right:
            order.extend((row, left) for row in range(bottom - 1, top, -1))
        top, left, bottom, right = top + 1, left + 1, bottom - 1, right - 1
    return tuple(order)


SPIRAL_ORDER = _spiral_order()

CORNERS = frozenset(
    {(0, 0), (0, GRID_SIZE - 1), (GRID_SIZE - 1, 0), (GRID_SIZE - 1, GRID_SIZE - 1)}
)


class Direction(Enum):
    """Cardinal directions. Values are (row delta, column delta)."""

    NORTH = (-1, 0)
    EAST = (0, 1)
    SOUTH = (1, 0)
    WEST = (0, -1)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    @property
    def index(self) -> int:
        """Clockwise quarter turns from north."""
        return _CLOCKWISE.index(self)

    @staticmethod
    def from_name(name: str) -> "Direction":
        name = name.upper()
        try:
            return Direction[name]
        except KeyError as exc:
            raise ValueError(f"Unknown direction: {name}") from exc

    @staticmethod
    def from_index(index: int) -> "Direction":
        return _CLOCKWISE[index % 4]

    def rotate(self, quarter_turns: int) -> "Direction":
        return Direction.from_index(self.index + quarter_turns)

    def turn_left(self) -> "Direction":
        return self.rotate(-1)

    def turn_right(self) -> "Direction":
        return self.rotate(1)

    def reverse(self) -> "Direction":
        return self.rotate(2)

    def step(self, cell: Cell) -> Cell:
        return (cell[0] + self.value[0], cell[1] + self.value[1])


_CLOCKWISE = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)


class TokenKind(Enum):
    """Game pieces. Values match the names used in challenge records."""

    LASER = "Laser"
    TARGET_MIRROR = "TargetMirror"
    CHECKPOINT = "Checkpoint"
    BEAM_SPLITTER = "BeamSplitter"
    DOUBLE_MIRROR = "DoubleMirror"
    CELL_BLOCKER = "CellBlocker"

    @staticmethod
    def from_name(name: str) -> "TokenKind":
        for kind in TokenKind:
            if name in (kind.value, kind.name) or name.upper() == kind.name:
                return kind
        raise ValueError(f"Unknown token kind: {name}")

    @property
    def rank(self) -> int:
        """Placement priority; cheaper legality checks come first."""
        return _RANK[self]

    @property
    def max_count(self) -> int:
        return _MAX_COUNT[self]


_RANK: Dict[TokenKind, int] = {
    TokenKind.LASER: 0,
    TokenKind.TARGET_MIRROR: 1,
    TokenKind.CHECKPOINT: 2,
    TokenKind.BEAM_SPLITTER: 3,
    TokenKind.DOUBLE_MIRROR: 4,
    TokenKind.CELL_BLOCKER: 5,
}

_MAX_COUNT: Dict[TokenKind, int] = {
    TokenKind.LASER: 1,
    TokenKind.TARGET_MIRROR: 5,
    TokenKind.CHECKPOINT: 1,
    TokenKind.BEAM_SPLITTER: 2,
    TokenKind.DOUBLE_MIRROR: 1,
    TokenKind.CELL_BLOCKER: 1,
}


@dataclass(frozen=True)
class Token:
    """A game piece, either on the board or waiting to be placed."""

    kind: TokenKind
    orientation: Optional[Direction] = None
    must_be_lit: bool = False

    def __post_init__(self) -> None:
        if self.kind is not TokenKind.TARGET_MIRROR and self.must_be_lit:
            object.__setattr__(self, "must_be_lit", False)
        if self.kind is TokenKind.CELL_BLOCKER and self.orientation is not None:
            object.__setattr__(self, "orientation", None)

    @property
    def needs_orientation(self) -> bool:
        return self.orientation is None and self.kind is not TokenKind.CELL_BLOCKER

    def oriented(self, direction: Optional[Direction]) -> "Token":
        return replace(self, orientation=direction)

    def sort_key(self) -> Tuple[int, int]:
        return (self.kind.rank, 0 if self.must_be_lit else 1)


_SYMBOLS: Dict[TokenKind, str] = {
    TokenKind.LASER: "L",
    TokenKind.TARGET_MIRROR: "T",
    TokenKind.CHECKPOINT: "C",
    TokenKind.BEAM_SPLITTER: "S",
    TokenKind.DOUBLE_MIRROR: "D",
    TokenKind.CELL_BLOCKER: "#",
}


class Board:
    """Immutable mapping from cells to tokens.

    Every mutating operation returns a new board, so search states can share
    boards freely without aliasing problems.
    """

    __slots__ = ("_cells", "_hash")

    def __init__(self, cells: Optional[Dict[Cell, Token]] = None):
        self._cells: Dict[Cell, Token] = {}
        for cell, token in (cells or {}).items():
            cell = (int(cell[0]), int(cell[1]))
            if not inside(cell):
                raise OutOfRange(cell)
            self._cells[cell] = token
        self._hash: Optional[int] = None

    @classmethod
    def from_tokens(cls, placements: Iterable[Tuple[Cell, Token]]) -> "Board":
        board = cls()
        for cell, token in placements:
            board = board.place(cell, token)
        return board

    def place(self, cell: Cell, token: Token) -> "Board":
        cell = (int(cell[0]), int(cell[1]))
        if not inside(cell):
            raise OutOfRange(cell)
        if cell in self._cells:
            raise CellOccupied(cell)
        cells = dict(self._cells)
        cells[cell] = token
        return Board(cells)

    def remove(self, cell: Cell) -> "Board":
        if not inside(cell):
            raise OutOfRange(cell)
        cells = dict(self._cells)
        cells.pop(cell, None)
        return Board(cells)

    def orient(self, cell: Cell, direction: Optional[Direction]) -> "Board":
        token = self._cells.get(cell)
        if token is None:
            raise KeyError(f"No token at {cell}")
        cells = dict(self._cells)
        cells[cell] = token.oriented(direction)
        return Board(cells)

    def get(self, cell: Cell) -> Optional[Token]:
        return self._cells.get(cell)

    def is_empty(self, cell: Cell) -> bool:
        return cell not in self._cells

    def empty_cells(self) -> List[Cell]:
        return [cell for cell in all_cells() if cell not in self._cells]

    def tokens(self) -> List[Tuple[Cell, Token]]:
        return sorted(self._cells.items())

    def find(self, kind: TokenKind) -> List[Cell]:
        return sorted(cell for cell, token in self._cells.items() if token.kind is kind)

    def count(self, kind: TokenKind) -> int:
        return sum(1 for token in self._cells.values() if token.kind is kind)

    def row_occupancy(self, row: int) -> int:
        return sum(1 for cell in self._cells if cell[0] == row)

    def column_occupancy(self, col: int) -> int:
        return sum(1 for cell in self._cells if cell[1] == col)

    def to_text(self) -> str:
        """Two characters per cell: kind symbol and facing arrow."""

        arrows = {
            Direction.NORTH: "^",
            Direction.EAST: ">",
            Direction.SOUTH: "v",
            Direction.WEST: "<",
        }
        lines = []
        for row in range(GRID_SIZE):
            parts = []
            for col in range(GRID_SIZE):
                token = self._cells.get((row, col))
                if token is None:
                    parts.append(" .")
                    continue
                symbol = _SYMBOLS[token.kind]
                if token.must_be_lit:
                    symbol = symbol.lower()
                if token.kind is TokenKind.CELL_BLOCKER:
                    arrow = "#"
                elif token.orientation is None:
                    arrow = "?"
                else:
                    arrow = arrows[token.orientation]
                parts.append(symbol + arrow)
            lines.append(" ".join(parts))
        return "\n".join(lines)

    def __iter__(self) -> Iterator[Tuple[Cell, Token]]:
        return iter(self.tokens())

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._cells.items()))
        return self._hash

    def __repr__(self) -> str:
        return f"Board({self.tokens()!r})"
