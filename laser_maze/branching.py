"""Search states and the rules that expand them into children."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .board import SPIRAL_ORDER, Board, Cell, Direction, Token, TokenKind, inside
from .optics import ORIENTATIONS, open_axis, target_face
from .tracer import Outcome, TraceResult

# Kinds that can never make another token "lonely" or be lonely themselves.
_NEVER_LONELY = (TokenKind.CHECKPOINT, TokenKind.CELL_BLOCKER)


@dataclass(frozen=True)
class SearchState:
    """One node of the search tree.

    ``remaining`` lists the tokens still to be placed in placement priority
    order. Until ``order_fixed`` is set that order is only the default kind
    ranking and the branch generator expands it into every distinct
    permutation first.

    ``pending`` is the cell of the token most recently dropped, whose
    orientation is picked on a later pop. It is informational only: the
    next expansion follows the trace, which stops at the first unoriented
    token the beam reaches.
    """

    board: Board
    remaining: Tuple[Token, ...] = ()
    order_fixed: bool = True
    required_targets: int = 0
    pending: Optional[Cell] = None
    depth: int = 0

    @property
    def lonely_count(self) -> int:
        return len(lonely_cells(self.board))

    @property
    def laser_ready(self) -> bool:
        lasers = self.board.find(TokenKind.LASER)
        return bool(lasers) and self.board.get(lasers[0]).orientation is not None

    @property
    def traceable(self) -> bool:
        return self.laser_ready and self.order_fixed

    def child(self, **changes) -> "SearchState":
        changes.setdefault("depth", self.depth + 1)
        return replace(self, **changes)


def unique_permutations(items: Sequence[Token]) -> Iterator[Tuple[Token, ...]]:
    """Yield each distinct ordering of ``items`` once, in lexicographic order.

    Classic next-permutation over the sorted keys, so tokens that compare
    equal are never swapped into a duplicate ordering.
    """

    current = sorted(items, key=Token.sort_key)
    keys = [token.sort_key() for token in current]
    while True:
        yield tuple(current)
        pivot = len(keys) - 2
        while pivot >= 0 and keys[pivot] >= keys[pivot + 1]:
            pivot -= 1
        if pivot < 0:
            return
        swap = len(keys) - 1
        while keys[swap] <= keys[pivot]:
            swap -= 1
        keys[pivot], keys[swap] = keys[swap], keys[pivot]
        current[pivot], current[swap] = current[swap], current[pivot]
        keys[pivot + 1:] = reversed(keys[pivot + 1:])
        current[pivot + 1:] = reversed(current[pivot + 1:])


def dead_directions(board: Board, cell: Cell) -> Set[Direction]:
    """Directions from ``cell`` that lead straight off the board or into a blocker."""

    dead = set()
    for direction in Direction:
        neighbour = direction.step(cell)
        if not inside(neighbour):
            dead.add(direction)
            continue
        token = board.get(neighbour)
        if token is not None and token.kind is TokenKind.CELL_BLOCKER:
            dead.add(direction)
    return dead


def is_effective_corner(board: Board, cell: Cell) -> bool:
    dead = dead_directions(board, cell)
    vertical = Direction.NORTH in dead or Direction.SOUTH in dead
    horizontal = Direction.EAST in dead or Direction.WEST in dead
    return vertical and horizontal


def lonely_cells(board: Board) -> Set[Cell]:
    """Tokens sharing neither their row nor their column with another token."""

    partners = [
        cell for cell, token in board.tokens() if token.kind is not TokenKind.CELL_BLOCKER
    ]
    lonely = set()
    for cell, token in board.tokens():
        if token.kind in _NEVER_LONELY:
            continue
        aligned = any(
            other != cell and (other[0] == cell[0] or other[1] == cell[1])
            for other in partners
        )
        if not aligned:
            lonely.add(cell)
    return lonely


def _aligned(first: Cell, second: Cell) -> bool:
    return first[0] == second[0] or first[1] == second[1]


def lightable_targets(board: Board, remaining: Iterable[Token], exclude: Optional[Cell] = None) -> int:
    """Upper bound on how many target mirrors can still be lit."""

    count = sum(1 for token in remaining if token.kind is TokenKind.TARGET_MIRROR)
    for cell, token in board.tokens():
        if token.kind is not TokenKind.TARGET_MIRROR or cell == exclude:
            continue
        if token.orientation is None:
            if len(dead_directions(board, cell)) < 4:
                count += 1
        elif target_face(token.orientation) not in dead_directions(board, cell):
            count += 1
    return count


def _laser_ray_legal(board: Board, cell: Cell, direction: Direction, unplaced: int) -> bool:
    position = direction.step(cell)
    empty_run = 0
    while inside(position):
        token = board.get(position)
        if token is not None:
            if token.kind is not TokenKind.CELL_BLOCKER:
                return True
            break
        empty_run += 1
        position = direction.step(position)
    return unplaced > 0 and empty_run > 0


def legal_orientations(
    board: Board,
    cell: Cell,
    remaining: Sequence[Token] = (),
    required_targets: int = 0,
) -> List[Direction]:
    """Orientations worth trying for the token at ``cell``."""

    token = board.get(cell)
    if token is None:
        return []
    dead = dead_directions(board, cell)
    kind = token.kind

    if kind is TokenKind.LASER:
        unplaced = len(remaining)
        return [
            direction
            for direction in ORIENTATIONS[kind]
            if direction not in dead and _laser_ray_legal(board, cell, direction, unplaced)
        ]
    if kind is TokenKind.CHECKPOINT:
        return [
            direction
            for direction in ORIENTATIONS[kind]
            if not dead.intersection(open_axis(direction))
        ]
    if kind is TokenKind.TARGET_MIRROR:
        spare = lightable_targets(board, remaining, exclude=cell) >= required_targets
        return [
            direction
            for direction in ORIENTATIONS[kind]
            if target_face(direction) not in dead or (spare and not token.must_be_lit)
        ]
    return list(ORIENTATIONS[kind])


def placement_allowed(
    board: Board,
    cell: Cell,
    token: Token,
    remaining_after: Sequence[Token] = (),
    required_targets: int = 0,
) -> bool:
    """Whether ``token`` may be dropped on the empty ``cell``.

    ``remaining_after`` are the tokens still unplaced once this one is down.
    """

    kind = token.kind
    if kind in (TokenKind.CHECKPOINT, TokenKind.BEAM_SPLITTER) and is_effective_corner(board, cell):
        return False

    if kind is TokenKind.TARGET_MIRROR and len(dead_directions(board, cell)) == 4:
        if token.must_be_lit:
            return False
        if lightable_targets(board, remaining_after) < required_targets:
            return False

    lonely_before = lonely_cells(board)
    to_place = len(remaining_after) + 1
    # With more tokens left than lonely ones, a later placement can still
    # pair them up, so this one need not.
    if not lonely_before or len(lonely_before) < to_place:
        return True
    placed = board.place(cell, token)
    if len(lonely_cells(placed)) >= len(lonely_before):
        return False

    if len(lonely_before) == to_place:
        return _justifies_lonely(board, cell, lonely_before)
    return True


def _justifies_lonely(board: Board, cell: Cell, lonely: Set[Cell]) -> bool:
    others = [
        other for other, token in board.tokens() if token.kind is not TokenKind.CELL_BLOCKER
    ]
    for partner in lonely:
        if not _aligned(cell, partner):
            continue
        if board.get(partner).kind is TokenKind.LASER:
            return True
        if any(other != partner and _aligned(cell, other) for other in others):
            return True
    return False


def laser_branches(state: SearchState) -> List[SearchState]:
    """Place and/or orient the laser; no trace is possible before that."""

    board = state.board
    lasers = board.find(TokenKind.LASER)
    if lasers:
        return orientation_branches(state, lasers[0])

    laser_token = next(token for token in state.remaining if token.kind is TokenKind.LASER)
    remaining = list(state.remaining)
    remaining.remove(laser_token)
    children = []
    for cell in SPIRAL_ORDER:
        if not board.is_empty(cell):
            continue
        placed = board.place(cell, laser_token.oriented(None))
        for direction in legal_orientations(placed, cell, remaining, state.required_targets):
            children.append(
                state.child(
                    board=placed.orient(cell, direction),
                    remaining=tuple(remaining),
                    order_fixed=state.order_fixed or not remaining,
                    pending=None,
                )
            )
    return children


def ordering_branches(state: SearchState) -> List[SearchState]:
    return [
        state.child(remaining=ordering, order_fixed=True)
        for ordering in unique_permutations(state.remaining)
    ]


def orientation_branches(state: SearchState, cell: Cell) -> List[SearchState]:
    return [
        state.child(board=state.board.orient(cell, direction), pending=None)
        for direction in legal_orientations(
            state.board, cell, state.remaining, state.required_targets
        )
    ]


def placement_branches(state: SearchState, candidates: Iterable[Cell]) -> List[SearchState]:
    """Drop the next token on every legal candidate cell, unoriented."""

    if not state.remaining:
        return []
    token, rest = state.remaining[0], state.remaining[1:]
    candidate_set = set(candidates)
    children = []
    for cell in SPIRAL_ORDER:
        if cell not in candidate_set or not state.board.is_empty(cell):
            continue
        if not placement_allowed(state.board, cell, token, rest, state.required_targets):
            continue
        children.append(
            state.child(
                board=state.board.place(cell, token.oriented(None)),
                remaining=rest,
                pending=cell,
            )
        )
    return children


def generate_children(state: SearchState, result: Optional[TraceResult] = None) -> List[SearchState]:
    """Expand ``state`` given the trace of its board (if it could be traced)."""

    if not state.laser_ready:
        return laser_branches(state)
    if not state.order_fixed:
        return ordering_branches(state)
    if result is None:
        raise ValueError("A traceable state needs its trace result")
    if result.outcome is Outcome.PENDING:
        return orientation_branches(state, result.pending)
    if result.outcome is Outcome.BLOCKED and state.remaining:
        return placement_branches(state, result.swept)
    return []
