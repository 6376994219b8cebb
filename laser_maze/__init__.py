"""Laser maze solver package."""

from .board import Board, Direction, Token, TokenKind
from .challenges import ChallengeLoader, parse_puzzle, solution_record
from .errors import LaserMazeError, ValidationError
from .solver import LaserMazeSolver, Puzzle, SolveJob, SolveResult, SolveStatus, validate
from .tracer import LightTracer, Outcome, trace

__all__ = [
    "Board",
    "ChallengeLoader",
    "Direction",
    "LaserMazeError",
    "LaserMazeSolver",
    "LightTracer",
    "Outcome",
    "Puzzle",
    "SolveJob",
    "SolveResult",
    "SolveStatus",
    "Token",
    "TokenKind",
    "ValidationError",
    "parse_puzzle",
    "solution_record",
    "trace",
    "validate",
]
