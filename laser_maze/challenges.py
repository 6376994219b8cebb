"""Challenge records stored as JSON and the solution records written back."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .board import GRID_SIZE, Direction, Token, TokenKind
from .errors import ChallengeFormatError
from .solver import Puzzle, SolveResult


def default_challenge_root() -> Path:
    return Path(__file__).resolve().parent / "catalog"


class ChallengeLoader:
    """Load challenge files stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def available(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(path.stem for path in self.root.glob("*.json"))

    def load(self, name: str) -> Puzzle:
        path = self.root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        return load_file(path)


def load_file(path: Path) -> Puzzle:
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ChallengeFormatError(f"{path}: {exc}") from exc
    puzzle = parse_puzzle(data)
    if not puzzle.name:
        puzzle.name = path.stem
    return puzzle


def _rows(grid: Any) -> List[List[Any]]:
    if not isinstance(grid, list):
        raise ChallengeFormatError("'grid' must be a list")
    if len(grid) == GRID_SIZE * GRID_SIZE and not any(isinstance(entry, list) for entry in grid):
        return [grid[row * GRID_SIZE:(row + 1) * GRID_SIZE] for row in range(GRID_SIZE)]
    if len(grid) != GRID_SIZE or any(
        not isinstance(row, list) or len(row) != GRID_SIZE for row in grid
    ):
        raise ChallengeFormatError("'grid' must hold 5 rows of 5 entries or 25 flat entries")
    return grid


def _kind(value: Any) -> TokenKind:
    if not isinstance(value, str):
        raise ChallengeFormatError(f"Token kind must be a string, got {value!r}")
    try:
        return TokenKind.from_name(value)
    except ValueError as exc:
        raise ChallengeFormatError(str(exc)) from exc


def _grid_token(entry: Dict[str, Any], cell) -> Token:
    if not isinstance(entry, dict) or "kind" not in entry:
        raise ChallengeFormatError(f"Entry at {cell} needs a 'kind'")
    kind = _kind(entry["kind"])
    orientation: Optional[Direction] = None
    if entry.get("locked", True) and entry.get("orientation") is not None:
        try:
            orientation = Direction.from_name(str(entry["orientation"]))
        except ValueError as exc:
            raise ChallengeFormatError(f"Entry at {cell}: {exc}") from exc
    return Token(kind, orientation, bool(entry.get("must_be_lit", False)))


def _added_token(entry: Any) -> Token:
    if isinstance(entry, dict):
        if "kind" not in entry:
            raise ChallengeFormatError("Entries in 'to_add' need a 'kind'")
        return Token(_kind(entry["kind"]), must_be_lit=bool(entry.get("must_be_lit", False)))
    return Token(_kind(entry))


def parse_puzzle(data: Dict[str, Any]) -> Puzzle:
    """Build a :class:`Puzzle` from a decoded challenge record.

    Orientations of unlocked grid entries are dropped so the solver picks
    them. The result is not validated; see :func:`laser_maze.solver.validate`.
    """

    if not isinstance(data, dict):
        raise ChallengeFormatError("A challenge record must be a JSON object")
    try:
        targets = int(data.get("targets", 0))
    except (TypeError, ValueError) as exc:
        raise ChallengeFormatError("'targets' must be an integer") from exc

    placements = []
    for row, entries in enumerate(_rows(data.get("grid", [[None] * GRID_SIZE] * GRID_SIZE))):
        for col, entry in enumerate(entries):
            if entry is None:
                continue
            placements.append(((row, col), _grid_token(entry, (row, col))))

    to_add = data.get("to_add", [])
    if not isinstance(to_add, list):
        raise ChallengeFormatError("'to_add' must be a list")

    return Puzzle(
        placements=placements,
        to_add=[_added_token(entry) for entry in to_add],
        targets=targets,
        name=str(data.get("name", "")),
        difficulty=str(data.get("difficulty", "Unknown")),
    )


def solution_record(result: SolveResult, name: str = "") -> Dict[str, Any]:
    """Serialise a search result; ``grid`` is ``None`` unless a solution was found."""

    record: Dict[str, Any] = {
        "name": name,
        "status": result.status.value,
        "states_explored": result.states_explored,
        "traces_run": result.traces_run,
        "grid": None,
    }
    if result.board is None:
        return record

    lit = result.trace.lit_targets if result.trace is not None else frozenset()
    grid: List[List[Optional[Dict[str, Any]]]] = [
        [None] * GRID_SIZE for _ in range(GRID_SIZE)
    ]
    for (row, col), token in result.board.tokens():
        grid[row][col] = {
            "kind": token.kind.value,
            "orientation": token.orientation.name if token.orientation else None,
            "must_be_lit": token.must_be_lit,
            "lit": (row, col) in lit,
        }
    record["grid"] = grid
    record["targets_lit"] = len(lit)
    return record
