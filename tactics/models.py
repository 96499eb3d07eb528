"""Shared data models for the tactics trainer.

Puzzle and FilterCriteria are the contract between the puzzle client
and the session loop. SessionState is the explicit value threaded
through every session transition.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import chess

from tactics.errors import FilterError


class Phase(str, enum.Enum):
    """Where the session loop currently is."""

    AWAITING_PUZZLE = "awaiting_puzzle"
    IN_PROGRESS = "in_progress"
    SOLVED = "solved"
    FAILED = "failed"


class Outcome(str, enum.Enum):
    """Result of a single puzzle attempt."""

    IN_PROGRESS = "in_progress"
    SOLVED = "solved"
    FAILED = "failed"


@dataclass(frozen=True)
class Puzzle:
    """A position plus the known solution line.

    ``solution`` alternates user move and opponent reply, user first,
    as UCI strings. ``fen`` is the position the user has to solve.
    """

    id: str
    fen: str
    solution: tuple[str, ...]
    tags: frozenset[str] = frozenset()
    rating: int = 0
    setup_move: str | None = None
    popularity: int | None = None
    rating_deviation: int | None = None
    plays: int | None = None
    game_url: str | None = None

    @property
    def turn(self) -> chess.Color:
        """Side to move in the starting position."""
        return chess.Board(self.fen).turn

    @property
    def user_moves(self) -> int:
        """Number of moves the user has to find."""
        return (len(self.solution) + 1) // 2


@dataclass(frozen=True)
class FilterCriteria:
    """Puzzle filters sent on every fetch. Empty means any puzzle."""

    tags: frozenset[str] = frozenset()
    rating_min: int | None = None
    rating_max: int | None = None

    def __post_init__(self) -> None:
        if (
            self.rating_min is not None
            and self.rating_max is not None
            and self.rating_min > self.rating_max
        ):
            raise FilterError(
                f"Rating range is inverted: {self.rating_min}-{self.rating_max}"
            )

    def is_empty(self) -> bool:
        return not self.tags and self.rating_min is None and self.rating_max is None

    def to_params(self) -> dict[str, str]:
        """Serialize to query parameters, omitting unset filters."""
        params: dict[str, str] = {}
        if self.rating_min is not None:
            params["rating_gte"] = str(self.rating_min)
        if self.rating_max is not None:
            params["rating_lte"] = str(self.rating_max)
        if self.tags:
            params["tags"] = ",".join(sorted(self.tags))
        return params


@dataclass(frozen=True)
class SessionState:
    """Everything the session loop knows about the current attempt."""

    phase: Phase = Phase.AWAITING_PUZZLE
    puzzle: Puzzle | None = None
    index: int = 0
    revealed: bool = False
    last_reply: str | None = None

    @property
    def outcome(self) -> Outcome:
        if self.phase == Phase.SOLVED:
            return Outcome.SOLVED
        if self.phase == Phase.FAILED:
            return Outcome.FAILED
        return Outcome.IN_PROGRESS

    @property
    def is_finished(self) -> bool:
        return self.phase in (Phase.SOLVED, Phase.FAILED)


@dataclass(frozen=True)
class MoveResult:
    """What happened to one submission at the prompt."""

    kind: str  # correct | incorrect | illegal | unparseable | revealed
    outcome: Outcome
    move_san: str | None = None
    expected_san: str | None = None
    reply_san: str | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.kind in ("correct", "revealed")
