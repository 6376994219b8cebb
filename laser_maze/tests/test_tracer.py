import pytest

from laser_maze.board import Board, Direction, Token, TokenKind
from laser_maze.optics import canonical, interact
from laser_maze.tracer import LightTracer, Outcome, trace

N, E, S, W = Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST


def board_with(*placements) -> Board:
    return Board.from_tokens(
        [((2, 0), Token(TokenKind.LASER, E))]
        + [(cell, Token(kind, orientation)) for cell, kind, orientation in placements]
    )


def test_empty_row_escapes_and_records_swept_cells():
    result = trace(board_with())

    assert result.outcome is Outcome.BLOCKED
    assert result.escaped
    assert result.swept == {(2, 1), (2, 2), (2, 3), (2, 4)}
    assert result.touched == {(2, 0)}


def test_double_mirror_turns_beam():
    result = trace(board_with(((2, 2), TokenKind.DOUBLE_MIRROR, N)))

    assert (2, 2) in result.touched
    assert result.swept == {(2, 1), (3, 2), (4, 2)}
    assert result.escaped


def test_target_lights_when_struck_on_its_face():
    result = trace(board_with(((2, 4), TokenKind.TARGET_MIRROR, W)), required_targets=1)

    assert result.outcome is Outcome.SOLVED
    assert result.lit_targets == {(2, 4)}
    assert not result.escaped


def test_target_reflects_and_blocks():
    reflected = trace(board_with(((2, 4), TokenKind.TARGET_MIRROR, N)))
    assert not reflected.lit_targets
    assert (3, 4) in reflected.swept

    blocked = trace(board_with(((2, 4), TokenKind.TARGET_MIRROR, S)))
    assert blocked.escaped
    assert blocked.outcome is Outcome.BLOCKED
    assert not blocked.lit_targets


def test_lit_count_must_match_required_targets():
    result = trace(board_with(((2, 4), TokenKind.TARGET_MIRROR, W)), required_targets=0)

    assert result.lit_targets == {(2, 4)}
    assert result.outcome is Outcome.BLOCKED


def test_checkpoint_passes_only_along_its_axis():
    passed = trace(board_with(((2, 2), TokenKind.CHECKPOINT, E)))
    assert passed.activated == {(2, 2)}
    assert (2, 4) in passed.swept

    stopped = trace(board_with(((2, 2), TokenKind.CHECKPOINT, N)))
    assert not stopped.activated
    assert stopped.escaped
    assert (2, 3) not in stopped.swept


def test_beam_splitter_reflects_and_transmits():
    result = trace(board_with(((2, 2), TokenKind.BEAM_SPLITTER, N)))

    assert result.beams == 3
    assert {(3, 2), (4, 2), (2, 3), (2, 4)} <= result.swept


def test_cell_blocker_absorbs_the_beam():
    result = trace(board_with(((2, 2), TokenKind.CELL_BLOCKER, None)))

    assert not result.escaped
    assert result.outcome is Outcome.SOLVED
    assert (2, 3) not in result.swept


def test_beam_ending_on_a_blocker_can_solve():
    # The splitter's transmitted beam runs into the blocker; the reflected
    # one lights the target below.
    board = board_with(
        ((2, 2), TokenKind.BEAM_SPLITTER, N),
        ((2, 4), TokenKind.CELL_BLOCKER, None),
        ((4, 2), TokenKind.TARGET_MIRROR, N),
    )

    result = trace(board, required_targets=1)

    assert result.lit_targets == {(4, 2)}
    assert not result.escaped
    assert result.outcome is Outcome.SOLVED


def test_unoriented_token_leaves_trace_pending():
    result = trace(board_with(((2, 3), TokenKind.TARGET_MIRROR, None)), unplaced=1)

    assert result.outcome is Outcome.PENDING
    assert result.pending == (2, 3)
    assert result.swept == {(2, 1), (2, 2)}


def test_unplaced_tokens_block_a_lit_board():
    result = trace(board_with(((2, 4), TokenKind.TARGET_MIRROR, W)), required_targets=1, unplaced=1)

    assert result.lit_targets == {(2, 4)}
    assert result.outcome is Outcome.BLOCKED


def test_untouched_token_blocks_solution():
    board = board_with(((2, 4), TokenKind.TARGET_MIRROR, W), ((0, 0), TokenKind.DOUBLE_MIRROR, N))

    assert trace(board, required_targets=1).outcome is Outcome.BLOCKED


def test_unlit_must_be_lit_target_blocks_solution():
    board = board_with(((2, 4), TokenKind.TARGET_MIRROR, W)).place(
        (2, 2), Token(TokenKind.TARGET_MIRROR, E, must_be_lit=True)
    )
    result = trace(board, required_targets=1)

    assert (2, 2) in result.touched
    assert (2, 2) not in result.lit_targets
    assert result.outcome is Outcome.BLOCKED


def test_split_beam_lights_two_targets():
    board = Board.from_tokens(
        [
            ((4, 0), Token(TokenKind.LASER, E)),
            ((4, 1), Token(TokenKind.BEAM_SPLITTER, E)),
            ((4, 2), Token(TokenKind.TARGET_MIRROR, W)),
            ((3, 1), Token(TokenKind.TARGET_MIRROR, S)),
        ]
    )

    result = trace(board, required_targets=2)

    assert result.outcome is Outcome.SOLVED
    assert result.lit_targets == {(4, 2), (3, 1)}


def test_splitter_loop_terminates():
    board = Board.from_tokens(
        [
            ((1, 0), Token(TokenKind.LASER, E)),
            ((1, 1), Token(TokenKind.BEAM_SPLITTER, E)),
            ((1, 3), Token(TokenKind.BEAM_SPLITTER, N)),
            ((3, 3), Token(TokenKind.BEAM_SPLITTER, E)),
            ((3, 1), Token(TokenKind.BEAM_SPLITTER, N)),
        ]
    )

    result = trace(board)

    assert result.looped
    assert result.steps <= 100 + result.beams
    assert result.outcome is Outcome.BLOCKED


def test_tracer_requires_an_oriented_laser():
    with pytest.raises(ValueError):
        LightTracer(Board())
    with pytest.raises(ValueError):
        LightTracer(Board().place((0, 0), Token(TokenKind.LASER)))


def test_step_advances_one_cell_at_a_time():
    tracer = LightTracer(board_with())

    tracer.step()
    assert tracer.state.swept == {(2, 1)}
    assert not tracer.finished

    result = tracer.run()
    assert tracer.finished
    assert result.steps == 5


@pytest.mark.parametrize("kind", [TokenKind.CHECKPOINT, TokenKind.DOUBLE_MIRROR, TokenKind.BEAM_SPLITTER])
def test_two_fold_pieces_fold_opposite_orientations(kind: TokenKind):
    assert canonical(kind, S) is N
    assert canonical(kind, W) is E
    for travel in Direction:
        assert interact(Token(kind, S), travel) == interact(Token(kind, N), travel)


def test_laser_back_absorbs_and_sides_block():
    laser = Token(TokenKind.LASER, N)

    assert not interact(laser, S).blocked
    assert not interact(laser, S).outputs
    assert interact(laser, N).blocked
    assert interact(laser, E).blocked
