"""Runtime configuration, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from foodhub.domain.exceptions import ValidationError
from foodhub.domain.model.order import ReturnBound

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    order_number_attempts: int = 5
    return_bound: ReturnBound = ReturnBound.REMAINING

    @staticmethod
    def from_env(environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        attempts_raw = env.get("FOODHUB_ORDER_NUMBER_ATTEMPTS", "5")
        try:
            attempts = int(attempts_raw)
        except ValueError:
            raise ValidationError(
                f"FOODHUB_ORDER_NUMBER_ATTEMPTS must be an integer, got {attempts_raw!r}"
            ) from None
        if attempts < 1:
            raise ValidationError("FOODHUB_ORDER_NUMBER_ATTEMPTS must be at least 1")

        log_level = env.get("FOODHUB_LOG_LEVEL", "INFO").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValidationError(
                f"FOODHUB_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {log_level!r}"
            )

        bound_raw = env.get("FOODHUB_RETURN_BOUND", ReturnBound.REMAINING.value)
        try:
            bound = ReturnBound(bound_raw.strip().lower())
        except ValueError:
            raise ValidationError(
                f"FOODHUB_RETURN_BOUND must be 'remaining' or 'ordered', got {bound_raw!r}"
            ) from None

        return Settings(
            database_url=env.get(
                "FOODHUB_DATABASE_URL",
                f"sqlite:///{_DATA_DIR / 'foodhub.sqlite3'}",
            ),
            log_level=log_level,
            order_number_attempts=attempts,
            return_bound=bound,
        )
