"""Command line entry point for solving laser maze challenges."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from .challenges import ChallengeLoader, default_challenge_root, load_file, solution_record
from .errors import LaserMazeError
from .solver import LaserMazeSolver, SolveStatus

CHALLENGE_ENV_VAR = "LASER_MAZE_CHALLENGE_ROOT"

EXIT_SOLVED = 0
EXIT_NO_SOLUTION = 1
EXIT_INVALID = 2

logger = logging.getLogger(__name__)


def resolve_challenge_root() -> Path:
    """Directory holding challenge files, overridable through the environment."""

    value = os.environ.get(CHALLENGE_ENV_VAR)
    if value:
        return Path(value).expanduser()
    return default_challenge_root()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="laser-maze", description="Solve 5x5 laser maze challenges"
    )
    parser.add_argument("challenge", nargs="?", help="Name of a challenge in the challenge directory.")
    parser.add_argument("--file", type=Path, help="Solve the challenge stored in this JSON file.")
    parser.add_argument(
        "--list-challenges",
        action="store_true",
        help="Print the available challenge names and exit.",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the solution record as JSON."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log search progress."
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    loader = ChallengeLoader(resolve_challenge_root())
    if args.list_challenges:
        for name in loader.available():
            print(name)
        return EXIT_SOLVED

    if args.file is None and not args.challenge:
        parser.error("a challenge name or --file is required")

    try:
        puzzle = load_file(args.file) if args.file is not None else loader.load(args.challenge)
        result = LaserMazeSolver(puzzle).solve()
    except FileNotFoundError as exc:
        print(f"Challenge not found: {exc}")
        return EXIT_INVALID
    except LaserMazeError as exc:
        logger.debug("Rejected challenge", exc_info=True)
        print(f"Invalid challenge: {exc}")
        return EXIT_INVALID

    if args.json:
        print(json.dumps(solution_record(result, puzzle.name), indent=2))
    elif result.status is SolveStatus.FOUND:
        print(f"{puzzle.name}: solved after {result.states_explored} states")
        print(result.board.to_text())
    else:
        print(f"{puzzle.name}: no solution ({result.states_explored} states explored)")

    return EXIT_SOLVED if result.solved else EXIT_NO_SOLUTION
