"""Hint source registry.

Maps source names to factory functions. This is the explicit registration
list of known hint sources; nothing is loaded dynamically.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from src.hints.errors import HintSourceError

from .base import HintSource, StaticHintSource
from .builtin import spring_core, spring_jackson, spring_webmvc, spring_xml
from .json_source import JsonHintSource

logger = logging.getLogger(__name__)

# Type alias for hint source factory functions
HintSourceFactory = Callable[[], HintSource]

# Registry mapping source names to factory functions
HINT_SOURCES: dict[str, HintSourceFactory] = {
    "spring-core": spring_core,
    "spring-xml": spring_xml,
    "spring-jackson": spring_jackson,
    "spring-webmvc": spring_webmvc,
}


def load_sources(names: Iterable[str]) -> list[HintSource]:
    """Instantiate built-in hint sources by name.

    Args:
        names: Source names from HINT_SOURCES, in registration order

    Returns:
        The hint sources, duplicates removed

    Raises:
        HintSourceError: If a name is not registered
    """
    sources: list[HintSource] = []
    seen: set[str] = set()
    for name in names:
        if name in seen:
            continue
        factory = HINT_SOURCES.get(name)
        if factory is None:
            raise HintSourceError(
                f"Unknown hint source: {name}. Known sources: {', '.join(sorted(HINT_SOURCES))}"
            )
        seen.add(name)
        sources.append(factory())
    logger.debug(f"Loaded {len(sources)} built-in hint sources")
    return sources


__all__ = [
    "HINT_SOURCES",
    "HintSource",
    "HintSourceFactory",
    "JsonHintSource",
    "StaticHintSource",
    "load_sources",
]
