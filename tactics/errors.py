"""Error taxonomy for the tactics trainer."""

from __future__ import annotations


class TacticsError(Exception):
    """Base class for every error raised by this package."""


class FetchError(TacticsError):
    """The puzzle service could not be reached or returned a bad response."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(TacticsError):
    """A puzzle record is malformed or its solution line is not playable."""


class IllegalMoveError(TacticsError, ValueError):
    """A move is not legal in the current position."""

    def __init__(self, move: str, fen: str | None = None) -> None:
        super().__init__(f"Illegal move: {move}")
        self.move = move
        self.fen = fen


class FilterError(TacticsError, ValueError):
    """Filter criteria are invalid, e.g. an inverted rating range."""
