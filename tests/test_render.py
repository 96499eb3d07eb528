"""Pytest tests for Rich rendering helpers."""

from __future__ import annotations

import io

import chess
from rich.console import Console

from tactics.models import MoveResult, Outcome, Puzzle
from tactics.render import (
    describe_result,
    prompt_text,
    render_board,
    render_help,
    render_puzzle_header,
    square_style,
)


def _render(renderable) -> str:
    console = Console(file=io.StringIO(), width=80, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestRenderBoard:

    def test_white_at_bottom_for_white_to_move(self):
        out = _render(render_board(chess.Board()))
        lines = [line for line in out.splitlines() if line.strip()]
        rank_lines = [line for line in lines if "♔" in line or "♚" in line]
        # Black king row is printed before the white king row
        assert "♚" in rank_lines[0]
        assert "♔" in rank_lines[1]
        assert out.index(" a ") < out.index(" h ")

    def test_flipped_for_black_to_move(self):
        board = chess.Board()
        board.push_uci("e2e4")
        out = _render(render_board(board))
        assert out.index(" h ") < out.index(" a ")
        assert out.index("♔") < out.index("♚")

    def test_explicit_orientation(self):
        out = _render(render_board(chess.Board(), flipped=True))
        assert out.index(" h ") < out.index(" a ")

    def test_title(self):
        assert "Puzzle 42" in _render(render_board(chess.Board(), title="Puzzle 42"))


class TestSquareStyle:

    def test_checkerboard(self):
        board = chess.Board()
        assert square_style(board, chess.A1) == "on grey50"
        assert square_style(board, chess.H1) == "on grey85"

    def test_last_move_marked(self):
        board = chess.Board()
        assert square_style(board, chess.E4, frozenset({chess.E2, chess.E4})) == "on yellow"

    def test_king_in_check_wins_over_marking(self):
        board = chess.Board("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")
        assert board.is_check()
        assert square_style(board, chess.E1, frozenset({chess.E1})) == "on red"
        assert square_style(board, chess.E8) == "on grey85"


class TestText:

    def test_prompt(self):
        assert prompt_text(chess.WHITE) == "White to move, enter the best move, or '?' for help: "
        assert prompt_text(chess.BLACK).startswith("Black to move")

    def test_header(self):
        puzzle = Puzzle(
            id="abc", fen=chess.STARTING_FEN, solution=("e2e4", "e7e5", "g1f3"),
            tags=frozenset({"fork", "short"}), rating=1450,
        )
        out = _render(render_puzzle_header(puzzle))
        assert "Puzzle abc" in out
        assert "rating 1450" in out
        assert "[fork, short]" in out
        assert "White to move, 2 move(s) to find" in out

    def test_help_lists_commands(self):
        out = _render(render_help())
        for command in ("'f' or 'fen'", "'s' or 'show'", "'q' or 'quit'"):
            assert command in out


class TestDescribeResult:

    def test_correct_with_reply(self):
        result = MoveResult(kind="correct", outcome=Outcome.IN_PROGRESS,
                            move_san="Qxf7+", reply_san="Kd8")
        assert _render(describe_result(result, chess.BLACK)).strip() == (
            "Correct! Black responds with Kd8."
        )

    def test_correct_and_solved(self):
        result = MoveResult(kind="correct", outcome=Outcome.SOLVED, move_san="Qxf7#")
        assert _render(describe_result(result, chess.BLACK)).strip() == (
            "Correct! Completed this tactic."
        )

    def test_revealed(self):
        result = MoveResult(kind="revealed", outcome=Outcome.FAILED, move_san="Qxf7#")
        out = _render(describe_result(result, chess.BLACK))
        assert "The correct move was Qxf7#." in out
        assert "with help" in out

    def test_incorrect(self):
        result = MoveResult(kind="incorrect", outcome=Outcome.FAILED,
                            move_san="d4", expected_san="e4")
        out = _render(describe_result(result, chess.BLACK))
        assert "d4 is not the correct move. The correct move was e4." in out

    def test_illegal_message_is_escaped(self):
        result = MoveResult(kind="unparseable", outcome=Outcome.IN_PROGRESS,
                            message="Not a move: [bold]")
        assert "Not a move: [bold]" in _render(describe_result(result, chess.WHITE))
