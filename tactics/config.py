"""Configuration for the tactics trainer.

Settings come from environment variables. Unset variables fall back to
defaults that talk to the public tactics server.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_SERVER_URL = "https://tactics.exoapi.app"
DEFAULT_USER_AGENT = "tactics-trainer-cli"


def _flag(value: Any) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    env = os.environ.get(name)
    if env is None or env == "":
        return default
    return cast(env) if cast else env


@dataclass(frozen=True)
class Settings:
    server_url: str = DEFAULT_SERVER_URL
    timeout_s: float = 10.0
    fetch_attempts: int = 3
    # Lichess-style records list the opponent's setup move first
    setup_move_first: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def tactic_endpoint(self) -> str:
        return f"{self.server_url.rstrip('/')}/api/v1/tactic"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from TACTICS_* environment variables.

        Raises:
            ValueError: If a numeric variable does not parse or is out of range.
        """
        settings = cls(
            server_url=_get("TACTICS_SERVER_URL", DEFAULT_SERVER_URL),
            timeout_s=_get("TACTICS_TIMEOUT_S", 10.0, cast=float),
            fetch_attempts=_get("TACTICS_FETCH_ATTEMPTS", 3, cast=int),
            setup_move_first=_get("TACTICS_SETUP_MOVE_FIRST", True, cast=_flag),
            user_agent=_get("TACTICS_USER_AGENT", DEFAULT_USER_AGENT),
        )
        if settings.fetch_attempts < 1:
            raise ValueError(
                f"TACTICS_FETCH_ATTEMPTS must be at least 1, got {settings.fetch_attempts}"
            )
        if settings.timeout_s <= 0:
            raise ValueError(
                f"TACTICS_TIMEOUT_S must be positive, got {settings.timeout_s}"
            )
        return settings
