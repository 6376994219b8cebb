"""Optical behaviour of every token kind.

This table is shared by the tracer and the orientation enumeration so both
agree on what an orientation means. Interactions are written for a piece
facing NORTH; the beam's travel direction is rotated into that reference
frame, looked up, and the resulting beams rotated back.

Reference pieces (row 0 is north):

* Laser: emits north.
* TargetMirror: ``\\`` mirror with the target on its north face and a solid
  east face. A beam striking the target lights it and is absorbed.
* Checkpoint: open along the north/south axis.
* DoubleMirror: ``\\`` mirror reflecting on both sides.
* BeamSplitter: ``\\`` half mirror, reflects like the double mirror and
  transmits the incoming beam straight on.
* CellBlocker: absorbs everything, has no orientation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .board import Direction, Token, TokenKind

N, E, S, W = Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST


@dataclass(frozen=True)
class Interaction:
    """Outcome of one beam entering a token's cell."""

    outputs: Tuple[Direction, ...] = ()
    lit: bool = False
    activated: bool = False
    blocked: bool = False


ABSORBED = Interaction()
BLOCKED = Interaction(blocked=True)

# Distinct orientations per kind. Two-fold symmetric pieces only use NORTH
# and EAST; a cell blocker has none.
ORIENTATIONS: Dict[TokenKind, Tuple[Direction, ...]] = {
    TokenKind.LASER: (N, E, S, W),
    TokenKind.TARGET_MIRROR: (N, E, S, W),
    TokenKind.CHECKPOINT: (N, E),
    TokenKind.BEAM_SPLITTER: (N, E),
    TokenKind.DOUBLE_MIRROR: (N, E),
    TokenKind.CELL_BLOCKER: (),
}

_DIAGONAL = {N: W, W: N, S: E, E: S}

_REFERENCE: Dict[TokenKind, Dict[Direction, Interaction]] = {
    TokenKind.LASER: {
        N: BLOCKED,
        E: BLOCKED,
        S: ABSORBED,
        W: BLOCKED,
    },
    TokenKind.TARGET_MIRROR: {
        N: Interaction(outputs=(W,)),
        E: Interaction(outputs=(S,)),
        S: Interaction(lit=True),
        W: BLOCKED,
    },
    TokenKind.CHECKPOINT: {
        N: Interaction(outputs=(N,), activated=True),
        S: Interaction(outputs=(S,), activated=True),
        E: BLOCKED,
        W: BLOCKED,
    },
    TokenKind.DOUBLE_MIRROR: {
        travel: Interaction(outputs=(_DIAGONAL[travel],)) for travel in (N, E, S, W)
    },
    TokenKind.BEAM_SPLITTER: {
        travel: Interaction(outputs=(_DIAGONAL[travel], travel)) for travel in (N, E, S, W)
    },
}


def canonical(kind: TokenKind, orientation: Optional[Direction]) -> Optional[Direction]:
    """Fold an orientation onto the kind's distinct orientations."""

    if orientation is None or kind is TokenKind.CELL_BLOCKER:
        return None
    if len(ORIENTATIONS[kind]) == 2:
        return Direction.from_index(orientation.index % 2)
    return orientation


def interact(token: Token, travel: Direction) -> Interaction:
    """Apply ``token`` to a beam travelling in ``travel``."""

    if token.kind is TokenKind.CELL_BLOCKER:
        return ABSORBED
    if token.orientation is None:
        raise ValueError(f"{token.kind.value} has no orientation")
    turns = token.orientation.index
    result = _REFERENCE[token.kind][travel.rotate(-turns)]
    if not result.outputs:
        return result
    return Interaction(
        outputs=tuple(direction.rotate(turns) for direction in result.outputs),
        lit=result.lit,
        activated=result.activated,
        blocked=result.blocked,
    )


def target_face(orientation: Direction) -> Direction:
    """Side of a target mirror that has to be struck to light it."""

    return orientation


def open_axis(orientation: Direction) -> Tuple[Direction, Direction]:
    """Both ends of a checkpoint's pass-through axis."""

    return (orientation, orientation.reverse())
