"""Shared test fixtures.

Fixtures:
    opening_puzzle   - Start position, solution [e2e4, e7e5].
    two_step_puzzle  - Start position, two user moves with replies.
    castling_puzzle  - User castles short, opponent castles long.
    promotion_puzzle - User promotes to a queen, opponent king steps away.
    lichess_record   - API record in Lichess format (setup move first).
    fake_client      - Factory for a client that replays canned results.
"""

from __future__ import annotations

import chess
import pytest

from tactics.models import Puzzle

SCHOLAR_FEN = "r1bqkbnr/pppp1ppp/2n5/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR b KQkq - 3 3"
SCHOLAR_PUZZLE_FEN = "r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 4 4"


class FakeClient:
    """Returns (or raises) canned results in order, recording each criteria."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls: list = []

    def fetch(self, criteria):
        self.calls.append(criteria)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture()
def opening_puzzle() -> Puzzle:
    return Puzzle(
        id="opening",
        fen=chess.STARTING_FEN,
        solution=("e2e4", "e7e5"),
        tags=frozenset({"opening"}),
        rating=600,
    )


@pytest.fixture()
def two_step_puzzle() -> Puzzle:
    return Puzzle(
        id="twostep",
        fen=chess.STARTING_FEN,
        solution=("e2e4", "e7e5", "g1f3", "b8c6"),
        rating=800,
    )


@pytest.fixture()
def castling_puzzle() -> Puzzle:
    return Puzzle(
        id="castle",
        fen="r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
        solution=("e1g1", "e8c8"),
    )


@pytest.fixture()
def promotion_puzzle() -> Puzzle:
    return Puzzle(
        id="promo",
        fen="8/P7/8/8/8/8/8/k6K w - - 0 1",
        solution=("a7a8q", "a1b2"),
        tags=frozenset({"promotion"}),
        rating=1000,
    )


@pytest.fixture()
def lichess_record() -> dict:
    return {
        "id": "scholar",
        "fen": SCHOLAR_FEN,
        "moves": ["g8f6", "h5f7"],
        "tags": ["mateIn1", "opening", "short"],
        "rating": 812,
        "rating_deviation": 75,
        "popularity": 94,
        "number_plays": 5120,
        "game_link": "https://lichess.org/abcdefgh#6",
    }


@pytest.fixture()
def fake_client():
    return FakeClient
