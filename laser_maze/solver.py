"""Depth-first search over board states driven by an explicit stack."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .board import Board, Cell, Token, TokenKind, inside
from .branching import SearchState, generate_children
from .errors import (
    DuplicateCell,
    InvalidCellReference,
    LaserCountError,
    TargetCountError,
    TooManyTokens,
    UnplaceableToken,
)
from .optics import canonical
from .tracer import TraceResult, trace

logger = logging.getLogger(__name__)

MAX_TARGETS = 3
PROGRESS_INTERVAL = 10_000


@dataclass
class Puzzle:
    """Input record: the starting board, the tokens to add and the target count."""

    placements: List[Tuple[Cell, Token]] = field(default_factory=list)
    to_add: List[Token] = field(default_factory=list)
    targets: int = 0
    name: str = ""
    difficulty: str = ""

    def board(self) -> Board:
        return Board.from_tokens(
            (cell, token.oriented(canonical(token.kind, token.orientation)))
            for cell, token in self.placements
        )


def validate(puzzle: Puzzle) -> None:
    """Reject puzzles the search cannot handle.

    Raises a :class:`~laser_maze.errors.ValidationError` subclass describing
    the first problem found.
    """

    seen = set()
    for cell, _token in puzzle.placements:
        if len(cell) != 2 or not inside(cell):
            raise InvalidCellReference(f"Cell {tuple(cell)} is outside the 5x5 grid")
        if tuple(cell) in seen:
            raise DuplicateCell(f"Cell {tuple(cell)} holds more than one token")
        seen.add(tuple(cell))

    for token in puzzle.to_add:
        if token.kind is TokenKind.CELL_BLOCKER:
            raise UnplaceableToken("A cell blocker cannot be among the tokens to add")

    tokens = [token for _cell, token in puzzle.placements] + list(puzzle.to_add)
    counts = Counter(token.kind for token in tokens)
    for kind in TokenKind:
        if counts[kind] > kind.max_count:
            raise TooManyTokens(
                f"{counts[kind]} {kind.value} tokens given, at most {kind.max_count} allowed"
            )
    if counts[TokenKind.LASER] != 1:
        raise LaserCountError(f"Exactly one Laser is required, found {counts[TokenKind.LASER]}")

    if not 0 <= puzzle.targets <= MAX_TARGETS:
        raise TargetCountError(f"Target count must be between 0 and {MAX_TARGETS}")
    must_light = sum(1 for token in tokens if token.must_be_lit)
    if must_light > puzzle.targets:
        raise TargetCountError(
            f"{must_light} target mirrors must be lit but only {puzzle.targets} targets are required"
        )
    if puzzle.targets > counts[TokenKind.TARGET_MIRROR]:
        raise TargetCountError(
            f"{puzzle.targets} targets required but only "
            f"{counts[TokenKind.TARGET_MIRROR]} target mirrors available"
        )


class SolveStatus(Enum):
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass
class SolveResult:
    status: SolveStatus
    board: Optional[Board] = None
    trace: Optional[TraceResult] = None
    states_explored: int = 0
    traces_run: int = 0

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.FOUND


class LaserMazeSolver:
    """Search for a board configuration that solves ``puzzle``.

    The search tree is explored depth first with an explicit LIFO stack, so
    memory stays bounded by the current frontier. Cancellation is cooperative:
    :meth:`cancel` may be called from another thread and is honoured before
    the next state is popped.
    """

    def __init__(
        self,
        puzzle: Puzzle,
        *,
        cancel_event: Optional[threading.Event] = None,
        progress_interval: int = PROGRESS_INTERVAL,
    ):
        self.puzzle = puzzle
        self.progress_interval = max(1, int(progress_interval))
        self._cancel = cancel_event or threading.Event()
        self.stack: List[SearchState] = []
        self.states_explored = 0
        self.traces_run = 0
        self._initialized = False

    def initialize(self) -> SearchState:
        validate(self.puzzle)
        remaining = tuple(
            sorted((token.oriented(None) for token in self.puzzle.to_add), key=Token.sort_key)
        )
        root = SearchState(
            board=self.puzzle.board(),
            remaining=remaining,
            order_fixed=not remaining,
            required_targets=self.puzzle.targets,
        )
        self.stack = [root]
        self.states_explored = 0
        self.traces_run = 0
        self._initialized = True
        logger.debug(
            "Initialised search for %r: %d tokens on board, %d to add, %d targets",
            self.puzzle.name,
            len(root.board),
            len(remaining),
            self.puzzle.targets,
        )
        return root

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def solve(self) -> SolveResult:
        if not self._initialized:
            self.initialize()

        while True:
            if self._cancel.is_set():
                self.stack.clear()
                logger.info("Search cancelled after %d states", self.states_explored)
                return self._result(SolveStatus.CANCELLED)
            if not self.stack:
                logger.info(
                    "No solution for %r after %d states", self.puzzle.name, self.states_explored
                )
                return self._result(SolveStatus.EXHAUSTED)

            state = self.stack.pop()
            self.states_explored += 1
            if self.states_explored % self.progress_interval == 0:
                logger.debug(
                    "Explored %d states (%d traces), frontier %d, depth %d",
                    self.states_explored,
                    self.traces_run,
                    len(self.stack),
                    state.depth,
                )

            result = None
            if state.traceable:
                result = trace(state.board, state.required_targets, len(state.remaining))
                self.traces_run += 1
                if result.solved:
                    logger.info(
                        "Solved %r after %d states", self.puzzle.name, self.states_explored
                    )
                    return self._result(SolveStatus.FOUND, state.board, result)

            children = generate_children(state, result)
            self.stack.extend(reversed(children))

    def _result(
        self,
        status: SolveStatus,
        board: Optional[Board] = None,
        result: Optional[TraceResult] = None,
    ) -> SolveResult:
        return SolveResult(
            status=status,
            board=board,
            trace=result,
            states_explored=self.states_explored,
            traces_run=self.traces_run,
        )


def solve(puzzle: Puzzle) -> SolveResult:
    return LaserMazeSolver(puzzle).solve()


class SolveJob:
    """Run a solver on a background thread."""

    def __init__(self, puzzle: Puzzle, *, progress_interval: int = PROGRESS_INTERVAL):
        self.solver = LaserMazeSolver(puzzle, progress_interval=progress_interval)
        self._result: Optional[SolveResult] = None
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(
            target=self._run, name=f"laser-maze-{puzzle.name or 'puzzle'}", daemon=True
        )

    def start(self) -> "SolveJob":
        # Validation errors surface here, in the caller's thread.
        self.solver.initialize()
        self._thread.start()
        return self

    def _run(self) -> None:
        try:
            self._result = self.solver.solve()
        except Exception as exc:  # re-raised from wait()
            logger.exception("Solver thread failed")
            self._error = exc

    def cancel(self) -> None:
        self.solver.cancel()

    @property
    def done(self) -> bool:
        return self._thread.ident is not None and not self._thread.is_alive()

    def wait(self, timeout: Optional[float] = None) -> Optional[SolveResult]:
        self._thread.join(timeout)
        if self._thread.is_alive():
            return None
        if self._error is not None:
            raise self._error
        return self._result
