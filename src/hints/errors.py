"""Exceptions raised by the hint resolution engine."""

from __future__ import annotations

from typing import Any


class HintError(Exception):
    """Base class for hint resolution errors."""

    pass


class UnresolvableConditionError(HintError):
    """Raised when a condition references something the closed world cannot answer.

    The resolver never lets this escape: it is caught, reported as a
    diagnostic, and the condition evaluates to False.
    """

    def __init__(self, condition: Any, reason: str):
        self.condition = condition
        self.reason = reason
        super().__init__(reason)


class UnknownTypeError(HintError):
    """Raised when a type handle is requested for a type outside the closed world."""

    pass


class HintSourceError(HintError):
    """Raised when a hint source cannot be located or loaded."""

    pass
