"""HTTP client for the tactics puzzle service.

One GET per fetch, filters as query parameters, no retries and no
caching. Records follow the Lichess puzzle convention: ``moves[0]`` is
the opponent move that sets up the puzzle, ``moves[1:]`` the solution
(alternating: player solution move, opponent forced response).
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request

import chess

from tactics.config import Settings
from tactics.errors import FetchError, ParseError
from tactics.models import FilterCriteria, Puzzle

log = logging.getLogger(__name__)


def _split(value) -> list[str]:
    """Accept either a JSON list or a space-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    raise ParseError(f"Expected a list or string, got {type(value).__name__}")


def _optional_int(record: dict, *keys: str) -> int | None:
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Field '{key}' is not an integer: {value!r}") from e
    return None


def _replay(board: chess.Board, uci_moves: list[str], puzzle_id: str) -> None:
    """Push each move in order, failing on the first illegal one."""
    for i, uci in enumerate(uci_moves):
        try:
            board.push(board.parse_uci(uci.lower()))
        except ValueError as e:
            raise ParseError(
                f"Puzzle {puzzle_id}: illegal move '{uci}' at step {i} "
                f"(FEN: {board.fen()})"
            ) from e


def parse_puzzle(record: dict, setup_move_first: bool = True) -> Puzzle:
    """Convert an API record into a Puzzle, checking the solution is playable.

    Args:
        record: Decoded JSON object from the puzzle service.
        setup_move_first: Whether ``moves[0]`` is the opponent's setup move.

    Returns:
        A Puzzle whose ``fen`` is the position the user must solve.

    Raises:
        ParseError: Missing fields, bad FEN, or an unplayable solution line.
    """
    if not isinstance(record, dict):
        raise ParseError(f"Puzzle record must be an object, got {type(record).__name__}")

    for key in ("id", "fen", "moves"):
        if key not in record:
            raise ParseError(f"Puzzle record missing field '{key}'")

    puzzle_id = str(record["id"])
    moves = _split(record["moves"])

    fen = record["fen"]
    if not isinstance(fen, str):
        raise ParseError(f"Puzzle {puzzle_id}: invalid FEN {fen!r}")
    try:
        board = chess.Board(fen)
    except ValueError as e:
        raise ParseError(f"Puzzle {puzzle_id}: invalid FEN {fen!r}") from e

    setup_move = None
    if setup_move_first and moves:
        setup_move, moves = moves[0], moves[1:]
        _replay(board, [setup_move], puzzle_id)
    if not moves:
        raise ParseError(f"Puzzle {puzzle_id}: empty solution")

    start_fen = board.fen()
    _replay(board, moves, puzzle_id)

    return Puzzle(
        id=puzzle_id,
        fen=start_fen,
        solution=tuple(m.lower() for m in moves),
        tags=frozenset(_split(record.get("tags"))),
        rating=_optional_int(record, "rating") or 0,
        setup_move=setup_move.lower() if setup_move else None,
        popularity=_optional_int(record, "popularity"),
        rating_deviation=_optional_int(record, "rating_deviation", "ratingDeviation"),
        plays=_optional_int(record, "number_plays", "nbPlays"),
        game_url=record.get("game_link") or record.get("gameUrl"),
    )


class PuzzleClient:
    """Fetches one puzzle per call from the tactics service."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def build_url(self, criteria: FilterCriteria) -> str:
        params = criteria.to_params()
        url = self._settings.tactic_endpoint
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        return url

    def fetch(self, criteria: FilterCriteria | None = None) -> Puzzle:
        """Fetch a puzzle matching ``criteria``.

        Raises:
            FetchError: Transport failure, non-2xx status or a non-JSON body.
            ParseError: The record does not describe a playable puzzle.
        """
        criteria = criteria or FilterCriteria()
        url = self.build_url(criteria)
        request = urllib.request.Request(
            url,
            headers={
                "User-Agent": self._settings.user_agent,
                "Accept": "application/json",
            },
            method="GET",
        )
        log.debug("Fetching puzzle: %s", url)

        try:
            with urllib.request.urlopen(request, timeout=self._settings.timeout_s) as rsp:
                status = rsp.status
                body = rsp.read()
        except urllib.error.HTTPError as e:
            log.warning("Puzzle service returned HTTP %s for %s", e.code, url)
            raise FetchError(f"Puzzle service returned HTTP {e.code}", status=e.code) from e
        except (urllib.error.URLError, OSError) as e:
            log.warning("Puzzle service unreachable: %s", e)
            raise FetchError(f"Could not reach puzzle service: {e}") from e

        if not 200 <= status < 300:
            raise FetchError(f"Puzzle service returned HTTP {status}", status=status)

        try:
            record = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("Puzzle service returned a non-JSON body")
            raise FetchError("Puzzle service returned malformed JSON", status=status) from e

        puzzle = parse_puzzle(record, setup_move_first=self._settings.setup_move_first)
        log.debug("Got puzzle %s (rating %d, %d moves)", puzzle.id, puzzle.rating, len(puzzle.solution))
        return puzzle
