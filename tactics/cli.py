"""Command-line entry point for the tactics trainer.

Fetches puzzles from the tactics service and runs the solving loop in
the terminal:

    tactics-trainer --rating=1200-1800 --tags mateIn2,fork
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from tactics.client import PuzzleClient
from tactics.config import Settings
from tactics.errors import FetchError, ParseError
from tactics.models import FilterCriteria
from tactics.render import (
    describe_result,
    prompt_text,
    render_board,
    render_help,
    render_puzzle_header,
)
from tactics.session import Session

log = logging.getLogger(__name__)


def parse_rating(value: str) -> tuple[int, int]:
    """Parse ``LOW-HIGH`` into inclusive integer bounds.

    Raises:
        argparse.ArgumentTypeError: Malformed or inverted range.
    """
    parts = value.strip().split("-")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise argparse.ArgumentTypeError(
            f"Could not parse rating '{value}', make sure it's in the form '500-1200'"
        )
    try:
        low, high = (int(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Could not parse rating '{value}', make sure it's in the form '500-1200'"
        ) from None
    if low > high:
        raise argparse.ArgumentTypeError(
            f"Rating range is inverted: {low}-{high} (lower bound must come first)"
        )
    return low, high


def parse_tags(values: list[str] | None) -> frozenset[str]:
    """Flatten repeated and comma-separated --tags values."""
    tags: set[str] = set()
    for value in values or []:
        tags.update(t.strip() for t in value.split(",") if t.strip())
    return frozenset(tags)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tactics-trainer",
        description="Solve chess tactics puzzles in the terminal",
    )
    parser.add_argument(
        "-r", "--rating", type=parse_rating, default=None,
        help="Rating range of the tactics to fetch. Try 0-1200 for easy, "
             "1200-1800 for intermediate, or 1800-3000 for difficult tactics.",
    )
    parser.add_argument(
        "-t", "--tags", action="append", default=None,
        help="Comma-separated themes, e.g. mateIn1,fork. Every tactic returned "
             "will have one of these tags. May be repeated.",
    )
    parser.add_argument(
        "-n", "--max-puzzles", type=int, default=0,
        help="Stop after this many puzzles (0 = until you quit)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log requests and state changes",
    )
    return parser


def build_criteria(args: argparse.Namespace) -> FilterCriteria:
    low, high = args.rating if args.rating else (None, None)
    return FilterCriteria(tags=parse_tags(args.tags), rating_min=low, rating_max=high)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _confirm(console: Console, question: str) -> bool:
    answer = console.input(f"{question} [Y/n] ").strip().lower()
    return answer in ("", "y", "yes")


def play_puzzle(session: Session, console: Console) -> bool:
    """Run the prompt loop for the loaded puzzle.

    Returns:
        False if the user asked to quit, True once the puzzle is finished.
    """
    puzzle = session.puzzle
    board = session.board
    opponent = not puzzle.turn

    console.print()
    console.print(render_puzzle_header(puzzle))
    console.print(render_board(board.board))

    while not session.state.is_finished:
        console.print()
        reply = console.input(prompt_text(board.turn)).strip()
        command = reply.lower()

        if command in ("q", "quit", "exit"):
            session.abandon()
            return False
        if command in ("s", "show"):
            console.print(render_board(board.board))
            continue
        if command in ("f", "fen"):
            console.print(board.fen, markup=False, highlight=False)
            continue
        if command in ("?", "help"):
            console.print(render_help())
            continue
        if command in ("h", "hint"):
            console.print(f"Move the piece on [bold]{session.hint_square()}[/bold].")
            continue

        result = session.submit(reply) if reply else session.reveal()
        console.print(describe_result(result, opponent))
        if result.accepted and not session.state.is_finished:
            console.print(render_board(board.board))

    return True


def run(session: Session, console: Console, max_puzzles: int = 0) -> int:
    """Play puzzles until the user stops. Returns the process exit code."""
    played = 0
    while True:
        try:
            session.next_puzzle()
        except (FetchError, ParseError) as e:
            console.print(f"[red]Failed to get a new tactic from the server: {escape(str(e))}[/red]")
            if played == 0:
                return 1
            if not _confirm(console, "Try again?"):
                break
            continue

        played += 1
        if not play_puzzle(session, console):
            break
        if max_puzzles and played >= max_puzzles:
            break
        console.print()
        if not _confirm(console, "Next puzzle?"):
            break

    console.print(f"\nSolved {session.solved}, failed {session.failed}.")
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for tactics-trainer."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_puzzles < 0:
        parser.error("--max-puzzles must not be negative")

    setup_logging(args.verbose)

    try:
        settings = Settings.from_env()
        criteria = build_criteria(args)
    except ValueError as e:
        parser.error(str(e))

    log.debug("Filters: %s", criteria.to_params() or "none")
    console = Console()
    session = Session(
        PuzzleClient(settings),
        criteria,
        fetch_attempts=settings.fetch_attempts,
    )

    try:
        code = run(session, console, max_puzzles=args.max_puzzles)
    except (EOFError, KeyboardInterrupt):
        console.print(f"\nSolved {session.solved}, failed {session.failed}.")
        code = 0
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
