"""Puzzle session loop.

Session drives one puzzle at a time through
AWAITING_PUZZLE -> IN_PROGRESS -> SOLVED | FAILED -> AWAITING_PUZZLE.
The state is an immutable SessionState value replaced on every
transition; the board is the only mutable piece and only ever advances
along the puzzle's solution line.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Protocol

import chess

from tactics.board import BoardState, RulesBoard
from tactics.errors import FetchError, IllegalMoveError, ParseError
from tactics.models import FilterCriteria, MoveResult, Outcome, Phase, Puzzle, SessionState

log = logging.getLogger(__name__)


class PuzzleSource(Protocol):
    def fetch(self, criteria: FilterCriteria) -> Puzzle: ...


def canonical(move: chess.Move) -> tuple[int, int, int | None]:
    """Compare moves by the board change they make, not by notation."""
    return (move.from_square, move.to_square, move.promotion)


class Session:
    """Runs puzzles from a PuzzleSource against a RulesBoard."""

    def __init__(
        self,
        client: PuzzleSource,
        criteria: FilterCriteria | None = None,
        board_factory: Callable[[str], RulesBoard] = BoardState.from_fen,
        fetch_attempts: int = 1,
    ) -> None:
        if fetch_attempts < 1:
            raise ValueError(f"fetch_attempts must be at least 1, got {fetch_attempts}")
        self._client = client
        self._criteria = criteria or FilterCriteria()
        self._board_factory = board_factory
        self._fetch_attempts = fetch_attempts
        self.state = SessionState()
        self.board: RulesBoard | None = None
        self.solved = 0
        self.failed = 0

    @property
    def puzzle(self) -> Puzzle | None:
        return self.state.puzzle

    # ---------------- Loading -----------------
    def next_puzzle(self) -> Puzzle:
        """Fetch and load the next puzzle, retrying up to fetch_attempts.

        Raises:
            FetchError: Last fetch failure once all attempts are used.
            ParseError: Last integrity failure once all attempts are used.
        """
        self.board = None
        self.state = SessionState()
        attempt = 1
        while True:
            try:
                puzzle = self._client.fetch(self._criteria)
                self._check_integrity(puzzle)
                board = self._board_factory(puzzle.fen)
                break
            except (FetchError, ParseError) as e:
                log.warning(
                    "Puzzle fetch attempt %d/%d failed: %s",
                    attempt, self._fetch_attempts, e,
                )
                if attempt >= self._fetch_attempts:
                    raise
                attempt += 1

        self.board = board
        self.state = SessionState(phase=Phase.IN_PROGRESS, puzzle=puzzle)
        log.debug("Loaded puzzle %s", puzzle.id)
        return puzzle

    def _check_integrity(self, puzzle: Puzzle) -> None:
        """Replay the full solution on a scratch board."""
        if not puzzle.solution:
            raise ParseError(f"Puzzle {puzzle.id}: empty solution")
        scratch = self._board_factory(puzzle.fen)
        for i, uci in enumerate(puzzle.solution):
            try:
                scratch.apply(scratch.parse(uci))
            except ValueError as e:
                raise ParseError(
                    f"Puzzle {puzzle.id}: solution move '{uci}' at step {i} is illegal"
                ) from e

    # ---------------- Moves -----------------
    def _require_in_progress(self) -> tuple[Puzzle, RulesBoard]:
        puzzle, board = self.state.puzzle, self.board
        if self.state.phase != Phase.IN_PROGRESS or puzzle is None or board is None:
            raise RuntimeError(f"No puzzle in progress (phase: {self.state.phase.value})")
        return puzzle, board

    def _expected_move(self) -> chess.Move:
        puzzle, board = self._require_in_progress()
        uci = puzzle.solution[self.state.index]
        try:
            return board.parse(uci)
        except ValueError as e:
            raise ParseError(f"Puzzle {puzzle.id}: solution move '{uci}' is illegal") from e

    def expected_san(self) -> str:
        """SAN of the move the user is expected to find."""
        _, board = self._require_in_progress()
        return board.san(self._expected_move())

    def hint_square(self) -> str:
        """Square of the piece that should move."""
        return chess.square_name(self._expected_move().from_square)

    def check(self, text: str) -> MoveResult:
        """Judge a move without changing any state."""
        puzzle, board = self._require_in_progress()
        try:
            move = board.parse(text)
        except IllegalMoveError as e:
            return MoveResult(kind="illegal", outcome=Outcome.IN_PROGRESS, message=str(e))
        except ValueError as e:
            return MoveResult(kind="unparseable", outcome=Outcome.IN_PROGRESS, message=str(e))

        expected = self._expected_move()
        move_san = board.san(move)
        expected_san = board.san(expected)
        if canonical(move) != canonical(expected):
            return MoveResult(
                kind="incorrect",
                outcome=Outcome.FAILED,
                move_san=move_san,
                expected_san=expected_san,
                message=f"{move_san} is not the correct move",
            )

        outcome = Outcome.IN_PROGRESS
        if self.state.index + 2 >= len(puzzle.solution):
            outcome = Outcome.FAILED if self.state.revealed else Outcome.SOLVED
        return MoveResult(
            kind="correct",
            outcome=outcome,
            move_san=move_san,
            expected_san=expected_san,
        )

    def submit(self, text: str) -> MoveResult:
        """Play the user's move if it is the expected one.

        Illegal or unparseable input leaves the state untouched. A legal
        but wrong move fails the puzzle without touching the board.
        """
        result = self.check(text)
        if result.kind == "correct":
            return self._advance(self._expected_move(), kind="correct")
        if result.kind == "incorrect":
            self._finish(Phase.FAILED)
        return result

    def reveal(self) -> MoveResult:
        """Play the expected move for the user; the puzzle counts as failed."""
        self._require_in_progress()
        self.state = replace(self.state, revealed=True)
        return self._advance(self._expected_move(), kind="revealed")

    def give_up(self) -> None:
        self._require_in_progress()
        self.state = replace(self.state, revealed=True)
        self._finish(Phase.FAILED)

    def abandon(self) -> None:
        """Drop the current puzzle without scoring it."""
        puzzle, _ = self._require_in_progress()
        self.board = None
        self.state = SessionState()
        log.debug("Puzzle %s abandoned", puzzle.id)

    def _advance(self, move: chess.Move, kind: str) -> MoveResult:
        puzzle, board = self._require_in_progress()
        move_san = board.apply(move)
        index = self.state.index + 1
        reply_san = None

        if index < len(puzzle.solution):
            reply_san = board.apply(board.parse(puzzle.solution[index]))
            index += 1

        self.state = replace(self.state, index=index, last_reply=reply_san)
        outcome = Outcome.IN_PROGRESS
        if index >= len(puzzle.solution):
            phase = Phase.FAILED if self.state.revealed else Phase.SOLVED
            self._finish(phase)
            outcome = self.state.outcome

        return MoveResult(
            kind=kind,
            outcome=outcome,
            move_san=move_san,
            expected_san=move_san,
            reply_san=reply_san,
        )

    def _finish(self, phase: Phase) -> None:
        self.state = replace(self.state, phase=phase)
        if phase == Phase.SOLVED:
            self.solved += 1
        else:
            self.failed += 1
        log.debug("Puzzle %s finished: %s", self.state.puzzle.id, phase.value)
