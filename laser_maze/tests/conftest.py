import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from laser_maze.board import Board, Direction, Token, TokenKind  # noqa: E402
from laser_maze.solver import Puzzle  # noqa: E402


@pytest.fixture
def laser_east_board() -> Board:
    return Board().place((2, 0), Token(TokenKind.LASER, Direction.EAST))


@pytest.fixture
def checkpoint_puzzle() -> Puzzle:
    return Puzzle(
        name="checkpoint",
        placements=[((2, 0), Token(TokenKind.LASER, Direction.EAST))],
        to_add=[Token(TokenKind.CHECKPOINT)],
        targets=0,
    )


@pytest.fixture
def intro_puzzle() -> Puzzle:
    return Puzzle(
        name="intro",
        placements=[((2, 0), Token(TokenKind.LASER, Direction.EAST))],
        to_add=[Token(TokenKind.TARGET_MIRROR)],
        targets=1,
    )


@pytest.fixture
def corner_relay_puzzle() -> Puzzle:
    return Puzzle(
        name="corner_relay",
        placements=[
            ((4, 0), Token(TokenKind.LASER, Direction.NORTH)),
            ((0, 4), Token(TokenKind.TARGET_MIRROR, Direction.WEST, must_be_lit=True)),
        ],
        to_add=[Token(TokenKind.DOUBLE_MIRROR)],
        targets=1,
    )
