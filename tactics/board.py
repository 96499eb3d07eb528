"""Board state for puzzle solving.

BoardState owns a python-chess Board and is the only place that
applies moves. The session loop talks to it through the RulesBoard
protocol so tests can swap in a fake board.
"""

from __future__ import annotations

import re
from typing import Protocol

import chess

from tactics.errors import IllegalMoveError, ParseError

UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$", re.I)
CASTLE_ZERO = {"0-0": "O-O", "0-0-0": "O-O-O", "o-o": "O-O", "o-o-o": "O-O-O"}


class RulesBoard(Protocol):
    """Capabilities the session loop needs from a chess position."""

    @property
    def fen(self) -> str: ...

    @property
    def turn(self) -> chess.Color: ...

    @property
    def board(self) -> chess.Board: ...

    def parse(self, text: str) -> chess.Move: ...

    def is_legal(self, move: chess.Move | str) -> bool: ...

    def apply(self, move: chess.Move | str) -> str: ...

    def san(self, move: chess.Move | str) -> str: ...


def _to_move(move: chess.Move | str) -> chess.Move:
    if isinstance(move, chess.Move):
        return move
    try:
        return chess.Move.from_uci(move.strip().lower())
    except (ValueError, AttributeError) as e:
        raise IllegalMoveError(str(move)) from e


class BoardState:
    """A legal chess position that only ever advances by legal moves."""

    def __init__(self, board: chess.Board) -> None:
        self._board = board

    @classmethod
    def from_fen(cls, fen: str) -> "BoardState":
        """Build a board from FEN.

        Raises:
            ParseError: If the FEN is not valid or describes an impossible position.
        """
        try:
            board = chess.Board(fen)
        except (ValueError, TypeError) as e:
            raise ParseError(f"Invalid FEN '{fen}': {e}") from e
        if not board.is_valid():
            raise ParseError(f"Invalid position '{fen}': {board.status()!r}")
        return cls(board)

    # ---------------- Position queries -----------------
    @property
    def fen(self) -> str:
        return self._board.fen()

    @property
    def turn(self) -> chess.Color:
        return self._board.turn

    @property
    def last_move(self) -> chess.Move | None:
        return self._board.peek() if self._board.move_stack else None

    @property
    def board(self) -> chess.Board:
        """A copy of the underlying board, for rendering."""
        return self._board.copy()

    def is_check(self) -> bool:
        return self._board.is_check()

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def copy(self) -> "BoardState":
        return BoardState(self._board.copy())

    # ---------------- Moves -----------------
    def is_legal(self, move: chess.Move | str) -> bool:
        try:
            mv = _to_move(move)
        except IllegalMoveError:
            return False
        return mv in self._board.legal_moves

    def san(self, move: chess.Move | str) -> str:
        mv = _to_move(move)
        if mv not in self._board.legal_moves:
            raise IllegalMoveError(mv.uci(), self.fen)
        return self._board.san(mv)

    def apply(self, move: chess.Move | str) -> str:
        """Push a legal move and return its SAN.

        Raises:
            IllegalMoveError: If the move is not legal here. The board is unchanged.
        """
        mv = _to_move(move)
        if mv not in self._board.legal_moves:
            raise IllegalMoveError(mv.uci(), self.fen)
        san = self._board.san(mv)
        self._board.push(mv)
        return san

    def parse(self, text: str) -> chess.Move:
        """Parse user input in SAN or UCI into a legal move.

        Raises:
            IllegalMoveError: Well-formed move that is not legal here.
            ValueError: Text that is not a move at all.
        """
        token = text.strip()
        if not token:
            raise ValueError("Empty move")
        token = CASTLE_ZERO.get(token.lower(), token)

        try:
            if UCI_RE.match(token):
                # parse_uci maps king-takes-rook castling onto the standard move
                mv = self._board.parse_uci(token.lower())
            else:
                mv = self._board.parse_san(token)
        except chess.IllegalMoveError as e:
            raise IllegalMoveError(token, self.fen) from e
        except chess.AmbiguousMoveError as e:
            raise ValueError(f"Ambiguous move: {token}") from e
        except chess.InvalidMoveError as e:
            raise ValueError(f"Not a move: {token}") from e

        # "--", "0000" and "Z0" parse to the null move, which is never playable
        if not mv or mv not in self._board.legal_moves:
            raise IllegalMoveError(token, self.fen)
        return mv
