"""Hint source backed by a JSON hint database document.

Document format:
    {
      "units": [
        {"name": "JacksonAutoConfiguration", "kind": "configuration",
         "type_name": "org.springframework.boot.autoconfigure.jackson.JacksonAutoConfiguration",
         "imports": ["JacksonObjectMapperConfiguration"]}
      ],
      "records": [
        {"unit": "JacksonAutoConfiguration",
         "requests": [{"type": "com.fasterxml.jackson.databind.ObjectMapper",
                       "access": ["PUBLIC_CONSTRUCTORS", "PUBLIC_METHODS"]}]}
      ]
    }

Entries are handed to the registry as raw mappings so that a malformed
entry is reported and skipped instead of rejecting the whole file.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from functools import cached_property
from pathlib import Path
from typing import Any

from src.hints.errors import HintSourceError

logger = logging.getLogger(__name__)


class JsonHintSource:
    """HintSource reading a hint database from a JSON file."""

    def __init__(self, path: str | Path, name: str | None = None) -> None:
        self.path = Path(path)
        self._name = name or self.path.stem

    @property
    def name(self) -> str:
        return self._name

    @cached_property
    def _document(self) -> Mapping[str, Any]:
        if not self.path.exists():
            raise HintSourceError(f"Hint database not found: {self.path}")
        try:
            document = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise HintSourceError(f"Hint database is not valid JSON: {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise HintSourceError(f"Hint database must be a JSON object: {self.path}")

        logger.debug(
            f"Loaded hint database {self.path}: "
            f"{len(document.get('units', []))} units, {len(document.get('records', []))} records"
        )
        return document

    def _entries(self, key: str) -> list[Any]:
        entries = self._document.get(key, [])
        if not isinstance(entries, list):
            raise HintSourceError(f"'{key}' must be a list in hint database: {self.path}")
        return entries

    def configuration_units(self) -> Iterable[Any]:
        return self._entries("units")

    def all_hint_records(self) -> Iterable[Any]:
        return self._entries("records")
