"""
Configuration settings for the OTRUST client.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, TypeVar

from otrust.common.exceptions import ValidationError

T = TypeVar("T", int, float)

CLAIM_TYPES: tuple[str, ...] = ("factual", "opinion", "analysis", "reference")
PROOF_ACTIONS: tuple[str, ...] = ("confirmed", "disputed", "invalidated")
SORT_FIELDS: tuple[str, ...] = ("newest", "oldest", "credibility")
CLAIM_MIN_LENGTH = 3
CLAIM_MAX_LENGTH = 5000

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(value: str | int) -> int:
    """Translate a level name (debug, info, warn, error) into a logging level."""
    if isinstance(value, int):
        return value
    try:
        return LOG_LEVELS[value.strip().lower()]
    except KeyError as err:
        msg = f"Invalid log level: {value}"
        raise ValidationError(msg, "log_level") from err


def _env_number(name: str, default: str, cast: Callable[[str], T]) -> T:
    """Read a positive number from the environment."""
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError as err:
        msg = f"{name} must be a positive number, got {raw!r}"
        raise ValidationError(msg, name) from err
    if not value > 0:
        msg = f"{name} must be a positive number, got {raw!r}"
        raise ValidationError(msg, name)
    return value


class Config:
    """Central configuration class for all client settings."""

    def __init__(self, config_dir: Path | str | None = None) -> None:
        # Server settings
        self.DEFAULT_SERVER_URL: str = os.getenv(
            "OTRUST_SERVER_URL", "http://localhost:3000"
        )
        self.REQUEST_TIMEOUT: float = _env_number("OTRUST_REQUEST_TIMEOUT", "10", float)
        self.MAX_WORKERS: int = _env_number("OTRUST_MAX_WORKERS", "8", int)

        # File paths
        self.CONFIG_DIR: Path = Path(
            config_dir
            or os.getenv("OTRUST_CONFIG_DIR", str(Path.home() / ".otrust"))
        ).expanduser()
        self.CONFIG_FILE_PATH: Path = self.CONFIG_DIR / "config.json"

        # Key settings
        self.KEY_SIZE: int = 2048
        self.PUBLIC_EXPONENT: int = 65537

        # Claim and proof constraints
        self.CLAIM_TYPES: tuple[str, ...] = CLAIM_TYPES
        self.PROOF_ACTIONS: tuple[str, ...] = PROOF_ACTIONS
        self.SORT_FIELDS: tuple[str, ...] = SORT_FIELDS
        self.CLAIM_MIN_LENGTH: int = CLAIM_MIN_LENGTH
        self.CLAIM_MAX_LENGTH: int = CLAIM_MAX_LENGTH
        self.DEFAULT_CONFIDENCE: float = 1.0

        # Logging
        self.LOG_LEVEL: int = parse_log_level(os.getenv("OTRUST_LOG_LEVEL", "warn"))
