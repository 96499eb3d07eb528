"""Rich rendering for the tactics trainer.

Draws the board from the side to move's point of view, the puzzle
header, and the prompt help table.
"""

from __future__ import annotations

import chess
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tactics.models import MoveResult, Outcome, Puzzle

# Unicode piece symbols
_PIECE_SYMBOLS = {
    "K": "\u2654", "Q": "\u2655", "R": "\u2656", "B": "\u2657",
    "N": "\u2658", "P": "\u2659",
    "k": "\u265a", "q": "\u265b", "r": "\u265c", "b": "\u265d",
    "n": "\u265e", "p": "\u265f",
}

_LIGHT_SQ = "grey85"
_DARK_SQ = "grey50"
_HIGHLIGHT = "yellow"
_CHECK = "red"

HELP_ROWS = [
    ("Any move, ex. Qxd7 or d1d7", "Attempt to solve the tactic with the given move"),
    ("No input", "Reveal the answer, and continue the tactic if there are more moves"),
    ("'h' or 'hint'", "Show which piece should move"),
    ("'f' or 'fen'", "Print out the current board, in FEN notation"),
    ("'s' or 'show'", "Show the current board"),
    ("'?' or 'help'", "Display this help"),
    ("'q' or 'quit'", "Exit without scoring the current puzzle"),
]


def side_name(color: chess.Color) -> str:
    return "White" if color == chess.WHITE else "Black"


def prompt_text(turn: chess.Color) -> str:
    return f"{side_name(turn)} to move, enter the best move, or '?' for help: "


def square_style(board: chess.Board, square: chess.Square, marked: frozenset[int] = frozenset()) -> str:
    """Background for one square: check beats last-move marking beats the checkerboard."""
    if board.is_check() and square == board.king(board.turn):
        return f"on {_CHECK}"
    if square in marked:
        return f"on {_HIGHLIGHT}"
    light = (chess.square_file(square) + chess.square_rank(square)) % 2 == 1
    return f"on {_LIGHT_SQ if light else _DARK_SQ}"


def render_board(
    board: chess.Board,
    flipped: bool | None = None,
    last_move: chess.Move | None = None,
    title: str = "Tactics Trainer",
) -> Panel:
    """Draw a position as a Rich Panel.

    The side to move sits at the bottom unless ``flipped`` says otherwise,
    and the last move played is marked unless another move is given.
    """
    if flipped is None:
        flipped = board.turn == chess.BLACK
    if last_move is None and board.move_stack:
        last_move = board.peek()
    marked = frozenset((last_move.from_square, last_move.to_square)) if last_move else frozenset()

    # SQUARES_180 runs a8..h8, a7..h7, ... as seen from White
    order = list(reversed(chess.SQUARES_180)) if flipped else list(chess.SQUARES_180)
    file_names = chess.FILE_NAMES[::-1] if flipped else chess.FILE_NAMES

    grid = Table(show_header=False, show_edge=False, pad_edge=False, box=None, padding=(0, 1))
    grid.add_column(width=2, justify="right")
    for _ in file_names:
        grid.add_column(width=3, justify="center")

    for start in range(0, 64, 8):
        squares = order[start:start + 8]
        label = Text(chess.RANK_NAMES[chess.square_rank(squares[0])], style="bold")
        cells = []
        for sq in squares:
            piece = board.piece_at(sq)
            glyph = _PIECE_SYMBOLS[piece.symbol()] if piece else " "
            cells.append(Text(f" {glyph} ", style=square_style(board, sq, marked)))
        grid.add_row(label, *cells)

    grid.add_row(Text("  "), *(Text(f" {name} ", style="bold") for name in file_names))
    return Panel(grid, title=title, border_style="blue", expand=False)


def render_puzzle_header(puzzle: Puzzle) -> Text:
    """One-line summary: id, rating, themes and who is to move."""
    text = Text()
    text.append(f"Puzzle {puzzle.id}", style="bold")
    if puzzle.rating:
        text.append(f"  rating {puzzle.rating}")
    if puzzle.tags:
        text.append(f"  [{', '.join(sorted(puzzle.tags))}]", style="italic")
    text.append(f"  {side_name(puzzle.turn)} to move, {puzzle.user_moves} move(s) to find")
    return text


def render_help() -> Table:
    table = Table(show_header=False, border_style="dim")
    table.add_column(style="bold")
    table.add_column()
    for command, meaning in HELP_ROWS:
        table.add_row(command, meaning)
    return table


def describe_result(result: MoveResult, opponent: chess.Color) -> str:
    """Rich markup for what happened after a submission.

    Args:
        result: Result of the submission.
        opponent: Color of the side that replies to the user.
    """
    if result.kind == "illegal":
        return f"[red]{escape(result.message)}. Try again.[/red]"
    if result.kind == "unparseable":
        return f"[red]{escape(result.message)}. Use SAN (e.g. Nf3) or UCI (e.g. g1f3).[/red]"
    if result.kind == "incorrect":
        return (
            f"[red]{result.move_san} is not the correct move.[/red] "
            f"The correct move was [bold]{result.expected_san}[/bold]."
        )

    prefix = "[green]Correct![/green] " if result.kind == "correct" else (
        f"The correct move was [bold]{result.move_san}[/bold]. "
    )
    if result.reply_san:
        prefix += f"{side_name(opponent)} responds with [bold]{result.reply_san}[/bold]. "
    if result.outcome == Outcome.SOLVED:
        prefix += "[green]Completed this tactic.[/green]"
    elif result.outcome == Outcome.FAILED:
        prefix += "[yellow]Completed this tactic with help.[/yellow]"
    return prefix.rstrip()
