import pytest

from laser_maze.board import (
    CORNERS,
    SPIRAL_ORDER,
    Board,
    Direction,
    Token,
    TokenKind,
    all_cells,
)
from laser_maze.errors import BoardError, CellOccupied, OutOfRange


def test_spiral_order_visits_outer_ring_first():
    assert len(SPIRAL_ORDER) == 25
    assert set(SPIRAL_ORDER) == set(all_cells())
    assert SPIRAL_ORDER[:7] == ((0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (1, 4), (2, 4))
    assert SPIRAL_ORDER[15] == (1, 0)
    assert SPIRAL_ORDER[16] == (1, 1)
    assert SPIRAL_ORDER[-1] == (2, 2)
    assert CORNERS <= set(SPIRAL_ORDER[:16])


def test_direction_rotation_and_names():
    assert Direction.NORTH.turn_right() is Direction.EAST
    assert Direction.NORTH.turn_left() is Direction.WEST
    assert Direction.EAST.reverse() is Direction.WEST
    assert Direction.SOUTH.rotate(-3) is Direction.WEST
    assert Direction.from_name("south") is Direction.SOUTH
    assert Direction.NORTH.step((2, 2)) == (1, 2)
    with pytest.raises(ValueError):
        Direction.from_name("up")


def test_token_kind_names():
    assert TokenKind.from_name("TargetMirror") is TokenKind.TARGET_MIRROR
    assert TokenKind.from_name("target_mirror") is TokenKind.TARGET_MIRROR
    assert TokenKind.from_name("CELL_BLOCKER") is TokenKind.CELL_BLOCKER
    with pytest.raises(ValueError):
        TokenKind.from_name("Prism")


def test_token_normalises_flags():
    assert not Token(TokenKind.DOUBLE_MIRROR, must_be_lit=True).must_be_lit
    assert Token(TokenKind.CELL_BLOCKER, Direction.EAST).orientation is None
    assert not Token(TokenKind.CELL_BLOCKER).needs_orientation
    assert Token(TokenKind.CHECKPOINT).needs_orientation
    assert Token(TokenKind.TARGET_MIRROR, must_be_lit=True).sort_key() < Token(
        TokenKind.TARGET_MIRROR
    ).sort_key()


def test_place_returns_new_board(laser_east_board: Board):
    empty = Board()
    assert len(empty) == 0
    assert len(laser_east_board) == 1
    assert laser_east_board.get((2, 0)).kind is TokenKind.LASER
    assert (2, 0) in laser_east_board
    assert laser_east_board.is_empty((2, 1))


def test_place_rejects_occupied_and_out_of_range(laser_east_board: Board):
    with pytest.raises(CellOccupied) as occupied:
        laser_east_board.place((2, 0), Token(TokenKind.CHECKPOINT))
    assert occupied.value.cell == (2, 0)

    with pytest.raises(OutOfRange):
        laser_east_board.place((5, 0), Token(TokenKind.CHECKPOINT))
    with pytest.raises(BoardError):
        laser_east_board.place((0, -1), Token(TokenKind.CHECKPOINT))
    with pytest.raises(ValueError):
        Board({(7, 7): Token(TokenKind.LASER)})


def test_orient_and_remove(laser_east_board: Board):
    board = laser_east_board.place((2, 3), Token(TokenKind.TARGET_MIRROR))
    oriented = board.orient((2, 3), Direction.WEST)

    assert board.get((2, 3)).orientation is None
    assert oriented.get((2, 3)).orientation is Direction.WEST
    assert oriented.remove((2, 3)) == laser_east_board
    with pytest.raises(KeyError):
        board.orient((0, 0), Direction.NORTH)


def test_board_equality_ignores_insertion_order():
    laser = ((4, 0), Token(TokenKind.LASER, Direction.NORTH))
    target = ((0, 4), Token(TokenKind.TARGET_MIRROR, Direction.WEST))

    first = Board.from_tokens([laser, target])
    second = Board.from_tokens([target, laser])

    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second}) == 1


def test_board_queries():
    board = Board.from_tokens(
        [
            ((4, 0), Token(TokenKind.LASER, Direction.NORTH)),
            ((0, 4), Token(TokenKind.TARGET_MIRROR)),
            ((0, 2), Token(TokenKind.TARGET_MIRROR)),
        ]
    )

    assert board.find(TokenKind.TARGET_MIRROR) == [(0, 2), (0, 4)]
    assert board.count(TokenKind.TARGET_MIRROR) == 2
    assert board.row_occupancy(0) == 2
    assert board.column_occupancy(0) == 1
    assert len(board.empty_cells()) == 22
    assert [cell for cell, _token in board] == [(0, 2), (0, 4), (4, 0)]


def test_to_text_renders_symbols_and_facing():
    board = Board.from_tokens(
        [
            ((2, 0), Token(TokenKind.LASER, Direction.EAST)),
            ((2, 4), Token(TokenKind.TARGET_MIRROR, must_be_lit=True)),
            ((0, 0), Token(TokenKind.CELL_BLOCKER)),
        ]
    )

    lines = board.to_text().splitlines()

    assert len(lines) == 5
    assert lines[0].split() == ["##", ".", ".", ".", "."]
    assert lines[2].split() == ["L>", ".", ".", ".", "t?"]
    assert lines[4].split() == ["."] * 5
