"""Settings for the hint resolution CLI and service.

Read from environment variables, with a ``.env`` file at the repository
root loaded first when present:

    HINTS_SOURCES      comma-separated built-in hint sources (default: all)
    HINTS_FILES        JSON hint databases, separated by os.pathsep
    HINTS_FACTS        default fact base snapshot path
    HINTS_DUMP_FORMAT  text or json (default: text)
    LOG_LEVEL          logging level (default: INFO)
    CORS_ORIGINS       comma-separated origins for the HTTP service (default: *)
    PORT               HTTP port (default: 8080)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from src.hints.sources import HINT_SOURCES

logger = logging.getLogger(__name__)

DEFAULT_ENV_PATH = Path(__file__).parent.parent / ".env"
DUMP_FORMATS = ("text", "json")


@dataclass
class Settings:
    """Resolved settings."""

    hint_sources: list[str] = field(default_factory=lambda: list(HINT_SOURCES))
    hint_files: list[Path] = field(default_factory=list)
    facts_path: Path | None = None
    dump_format: str = "text"
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    port: int = 8080


def _split(value: str | None, sep: str) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(sep) if part.strip()]


def load_settings(env_path: Path | None = DEFAULT_ENV_PATH) -> Settings:
    """Build settings from the environment.

    Raises:
        ValueError: If HINTS_DUMP_FORMAT or PORT is invalid
    """
    if env_path is not None and env_path.exists():
        load_dotenv(env_path)

    dump_format = os.getenv("HINTS_DUMP_FORMAT", "text").lower()
    if dump_format not in DUMP_FORMATS:
        raise ValueError(f"HINTS_DUMP_FORMAT must be one of {DUMP_FORMATS}, got {dump_format!r}")

    port = os.getenv("PORT", "8080")
    if not port.isdigit():
        raise ValueError(f"PORT must be an integer, got {port!r}")

    facts = os.getenv("HINTS_FACTS")
    sources = _split(os.getenv("HINTS_SOURCES"), ",")

    return Settings(
        hint_sources=sources or list(HINT_SOURCES),
        hint_files=[Path(p) for p in _split(os.getenv("HINTS_FILES"), os.pathsep)],
        facts_path=Path(facts) if facts else None,
        dump_format=dump_format,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split(os.getenv("CORS_ORIGINS", "*"), ",") or ["*"],
        port=int(port),
    )
