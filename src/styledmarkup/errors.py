"""Exception hierarchy raised by the engine."""

from __future__ import annotations

from typing import Optional


class StyledMarkupError(Exception):
    """Base class for all engine errors."""


class MarkupParseError(StyledMarkupError):
    """Markup is malformed (unbalanced tags or invalid syntax)."""

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" (line {line}, column {column or 0})"
        super().__init__(f"Malformed markup: {message}{location}")


class ResourceNotFoundError(StyledMarkupError):
    """A named image could not be found by the image loader."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        detail = f": {reason}" if reason else ""
        super().__init__(f"Image not found: {name!r}{detail}")
