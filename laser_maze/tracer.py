"""Beam propagation over a board snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Set, Tuple

from .board import Board, Cell, Direction, TokenKind, inside
from .optics import interact


class Outcome(Enum):
    SOLVED = "solved"
    BLOCKED = "blocked"
    PENDING = "pending"


@dataclass
class Beam:
    """Single beam head advancing across the board."""

    cell: Cell
    direction: Direction


@dataclass
class TraceState:
    """Mutable runtime state of one tracer run."""

    steps: int = 0
    beams: int = 0
    active: List[Beam] = field(default_factory=list)
    visited: Set[Tuple[Cell, Direction]] = field(default_factory=set)
    swept: Set[Cell] = field(default_factory=set)
    touched: Set[Cell] = field(default_factory=set)
    lit_targets: Set[Cell] = field(default_factory=set)
    activated: Set[Cell] = field(default_factory=set)
    pending: Optional[Cell] = None
    escaped: bool = False
    looped: bool = False


@dataclass(frozen=True)
class TraceResult:
    outcome: Outcome
    swept: FrozenSet[Cell] = frozenset()
    touched: FrozenSet[Cell] = frozenset()
    lit_targets: FrozenSet[Cell] = frozenset()
    activated: FrozenSet[Cell] = frozenset()
    pending: Optional[Cell] = None
    escaped: bool = False
    looped: bool = False
    steps: int = 0
    beams: int = 0

    @property
    def solved(self) -> bool:
        return self.outcome is Outcome.SOLVED


class LightTracer:
    """Propagate the laser through a board until every beam has terminated.

    A run stops early when a beam enters a token whose orientation has not
    been chosen yet. Each ``(cell, direction)`` pair is entered at most once
    per run, so a run on the 5x5 grid takes at most 100 advancing steps plus
    one terminating step per beam, even when splitters form loops.
    """

    def __init__(self, board: Board, required_targets: int = 0, unplaced: int = 0):
        self.board = board
        self.required_targets = required_targets
        self.unplaced = unplaced
        self.reset()

    def reset(self) -> None:
        self.state = TraceState()
        lasers = self.board.find(TokenKind.LASER)
        if not lasers:
            raise ValueError("Cannot trace a board without a laser")
        origin = lasers[0]
        laser = self.board.get(origin)
        if laser.orientation is None:
            raise ValueError(f"Laser at {origin} has no orientation")
        self.state.touched.add(origin)
        self._launch(origin, laser.orientation)

    def _launch(self, cell: Cell, direction: Direction) -> None:
        self.state.active.append(Beam(cell=cell, direction=direction))
        self.state.beams += 1

    @property
    def finished(self) -> bool:
        return self.state.pending is not None or not self.state.active

    def step(self) -> None:
        """Advance every active beam by one cell."""

        state = self.state
        active, state.active = state.active, []
        for index, beam in enumerate(active):
            state.steps += 1
            direction = beam.direction
            next_cell = direction.step(beam.cell)

            if not inside(next_cell):
                state.escaped = True
                continue

            signature = (next_cell, direction)
            if signature in state.visited:
                state.looped = True
                continue
            state.visited.add(signature)

            token = self.board.get(next_cell)
            if token is None:
                state.swept.add(next_cell)
                state.active.append(Beam(cell=next_cell, direction=direction))
                continue

            if token.needs_orientation:
                state.pending = next_cell
                state.active.extend(active[index + 1:])
                return

            state.touched.add(next_cell)
            result = interact(token, direction)
            if result.blocked:
                state.escaped = True
            if result.lit:
                state.lit_targets.add(next_cell)
            if result.activated:
                state.activated.add(next_cell)
            if len(result.outputs) == 1:
                state.active.append(Beam(cell=next_cell, direction=result.outputs[0]))
            else:
                for output in result.outputs:
                    self._launch(next_cell, output)

    def run(self) -> TraceResult:
        while not self.finished:
            self.step()
        return self.result()

    def result(self) -> TraceResult:
        state = self.state
        return TraceResult(
            outcome=self._outcome(),
            swept=frozenset(state.swept),
            touched=frozenset(state.touched),
            lit_targets=frozenset(state.lit_targets),
            activated=frozenset(state.activated),
            pending=state.pending,
            escaped=state.escaped,
            looped=state.looped,
            steps=state.steps,
            beams=state.beams,
        )

    def _outcome(self) -> Outcome:
        state = self.state
        if state.pending is not None:
            return Outcome.PENDING
        if self.unplaced or state.escaped:
            return Outcome.BLOCKED
        for cell, token in self.board.tokens():
            if token.kind is TokenKind.CELL_BLOCKER:
                continue
            if cell not in state.touched:
                return Outcome.BLOCKED
            if token.must_be_lit and cell not in state.lit_targets:
                return Outcome.BLOCKED
        if len(state.lit_targets) != self.required_targets:
            return Outcome.BLOCKED
        return Outcome.SOLVED


def trace(board: Board, required_targets: int = 0, unplaced: int = 0) -> TraceResult:
    return LightTracer(board, required_targets, unplaced).run()
