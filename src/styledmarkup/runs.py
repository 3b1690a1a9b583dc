"""Styled runs: the engine's output content units."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from styledmarkup.attributes import EMPTY_STYLE, StyleAttributeSet
from styledmarkup.resources import ImageHandle

SPECIAL_TAG_PREFIX = "sm:"

# Placeholder character renderers use for an inline image.
OBJECT_REPLACEMENT = "\ufffc"


class SpecialCharacter(Enum):
    """Built-in atoms, addressable from markup as ``<sm:NAME/>``."""

    NO_BREAK_SPACE = "noBreakSpace"
    EM_DASH = "emDash"
    LINE_SEPARATOR = "lineSeparator"
    TAB = "tab"

    @property
    def char(self) -> str:
        return _SPECIAL_CHARS[self]

    @property
    def tag(self) -> str:
        return f"{SPECIAL_TAG_PREFIX}{self.value}"

    @classmethod
    def from_tag(cls, name: str) -> Optional[SpecialCharacter]:
        """Return the atom named by element *name*, or ``None``."""
        if not name.startswith(SPECIAL_TAG_PREFIX):
            return None
        try:
            return cls(name[len(SPECIAL_TAG_PREFIX):])
        except ValueError:
            return None


_SPECIAL_CHARS = {
    SpecialCharacter.NO_BREAK_SPACE: "\u00a0",
    SpecialCharacter.EM_DASH: "\u2014",
    SpecialCharacter.LINE_SEPARATOR: "\u2028",
    SpecialCharacter.TAB: "\t",
}


@dataclass(frozen=True)
class Tab:
    """A tab that indents following lines to the column it ends at."""

    head_indent: float = 0.0


class RunKind(Enum):
    TEXT = "text"
    IMAGE = "image"
    SPECIAL = "special"


@dataclass(frozen=True)
class StyledRun:
    kind: RunKind
    style: StyleAttributeSet = field(default=EMPTY_STYLE)
    text: str = ""
    image: Optional[ImageHandle] = None
    special: Optional[SpecialCharacter] = None

    # -- constructors -------------------------------------------------------

    @classmethod
    def text_run(cls, text: str, style: StyleAttributeSet = EMPTY_STYLE) -> StyledRun:
        return cls(RunKind.TEXT, style, text=text)

    @classmethod
    def image_run(cls, image: ImageHandle, style: StyleAttributeSet = EMPTY_STYLE) -> StyledRun:
        return cls(RunKind.IMAGE, style, image=image)

    @classmethod
    def special_run(
        cls, special: SpecialCharacter, style: StyleAttributeSet = EMPTY_STYLE
    ) -> StyledRun:
        return cls(RunKind.SPECIAL, style, special=special)

    # -- helpers ------------------------------------------------------------

    @property
    def content(self) -> str:
        """Character content of the run as it would appear in plain text."""
        if self.kind is RunKind.TEXT:
            return self.text
        if self.kind is RunKind.SPECIAL and self.special is not None:
            return self.special.char
        return OBJECT_REPLACEMENT

    def restyled(self, style: StyleAttributeSet) -> StyledRun:
        """Return a copy with *style* merged underneath this run's own style."""
        return StyledRun(
            self.kind, style.merge(self.style),
            text=self.text, image=self.image, special=self.special,
        )


def coalesce(runs: Iterable[StyledRun]) -> list[StyledRun]:
    """Merge adjacent text runs that carry equal styles; drop empty text."""
    result: list[StyledRun] = []
    for run in runs:
        if run.kind is RunKind.TEXT:
            if not run.text:
                continue
            if result and result[-1].kind is RunKind.TEXT and result[-1].style == run.style:
                result[-1] = StyledRun.text_run(result[-1].text + run.text, run.style)
                continue
        result.append(run)
    return result


def plain_text(runs: Iterable[StyledRun]) -> str:
    return "".join(run.content for run in runs)
