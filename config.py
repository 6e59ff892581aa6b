"""Configuration for the chatterchain bot.

Settings come from environment variables.  A ``.env`` file in the working
directory is loaded first, without overriding variables that are already
set.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from chain import DEFAULT_MAX_WALK_LENGTH, ChainProperties
from phraser import DEFAULT_HAIKU_ATTEMPTS
from store import DB_PATH

logger = logging.getLogger(__name__)

DEFAULT_LOCALES: Dict[str, str] = {
    "WELCOME_MESSAGE": (
        "Hello! I am chatterchain. Talk to me and I will generate random "
        "messages based on the things you say."
    ),
    "AVAILABLE_COMMANDS": "Available commands",
    "ERR_MALFORMED_ARGUMENTS": "The arguments provided are not correct",
    "ERR_UNKNOWN_COMMAND": "I don't understand that command",
    "ERR_IMPOSSIBLE_HAIKU": "I am not feeling inspired for poetry today, sorry :(",
    "NO_TRANSITIONS": "I don't know any transitions for that word yet",
}


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing."""


@dataclass(frozen=True)
class Config:
    token: Optional[str] = None
    database_path: Path = DB_PATH
    mutation_probability: float = 0.2
    max_walk_length: int = DEFAULT_MAX_WALK_LENGTH
    haiku_attempts: int = DEFAULT_HAIKU_ATTEMPTS
    listen_to_ayy_lmao: bool = True
    log_level: str = "INFO"
    locales: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LOCALES))

    def chain_properties(self) -> ChainProperties:
        return ChainProperties(
            mutation_probability=self.mutation_probability,
            max_walk_length=self.max_walk_length,
        )

    def require_token(self) -> str:
        if not self.token:
            raise ConfigurationError("TELEGRAM_TOKEN not set")
        return self.token


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_float(name: str, value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={value!r}, using {default}")
        return default


def _parse_int(name: str, value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={value!r}, using {default}")
        return default


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a :class:`Config` from *environ* (``os.environ`` by default)."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    locales = {
        key: environ.get(f"LOCALE_{key}", text) for key, text in DEFAULT_LOCALES.items()
    }
    return Config(
        token=environ.get("TELEGRAM_TOKEN"),
        database_path=Path(environ.get("DATABASE_PATH", str(DB_PATH))),
        mutation_probability=_parse_float(
            "MUTATION_PROBABILITY", environ.get("MUTATION_PROBABILITY"), 0.2
        ),
        max_walk_length=_parse_int(
            "MAX_WALK_LENGTH", environ.get("MAX_WALK_LENGTH"), DEFAULT_MAX_WALK_LENGTH
        ),
        haiku_attempts=_parse_int(
            "HAIKU_ATTEMPTS", environ.get("HAIKU_ATTEMPTS"), DEFAULT_HAIKU_ATTEMPTS
        ),
        listen_to_ayy_lmao=_parse_bool(environ.get("LISTEN_TO_AYY_LMAO"), True),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        locales=locales,
    )
