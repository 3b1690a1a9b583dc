"""Build run sequences piecewise, without markup.

Usage::

    runs = compose(
        [styled("You're going to need a\\n", preamble), "Bigger", boat],
        base_style=base,
    )

Composition shares :class:`~styledmarkup.runs.StyledRun` with the resolver,
so a renderer cannot tell which path produced a sequence.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Optional, Union

from styledmarkup.attributes import EMPTY_STYLE, StyleAttributeSet
from styledmarkup.resources import ImageHandle
from styledmarkup.runs import SpecialCharacter, StyledRun, Tab

Piece = Union[str, StyledRun, Sequence[StyledRun], ImageHandle, SpecialCharacter, Tab]


def styled(
    text: str, style: Optional[StyleAttributeSet] = None, **attributes: Any
) -> StyledRun:
    """Return a text run styled with *style* plus keyword *attributes*."""
    run_style = style if style is not None else EMPTY_STYLE
    if attributes:
        run_style = run_style.derive(**attributes)
    return StyledRun.text_run(text, run_style)


def _piece_runs(piece: Piece, base: StyleAttributeSet) -> list[StyledRun]:
    if isinstance(piece, str):
        return [StyledRun.text_run(piece, base)] if piece else []
    if isinstance(piece, StyledRun):
        return [piece]
    if isinstance(piece, ImageHandle):
        return [StyledRun.image_run(piece, base)]
    if isinstance(piece, SpecialCharacter):
        return [StyledRun.special_run(piece, base)]
    if isinstance(piece, Tab):
        return [StyledRun.special_run(SpecialCharacter.TAB, base.derive(head_indent=piece.head_indent))]
    if isinstance(piece, Sequence) and all(isinstance(run, StyledRun) for run in piece):
        return list(piece)
    raise TypeError(f"Cannot compose piece of type {type(piece).__name__}: {piece!r}")


def compose(
    pieces: Iterable[Piece],
    base_style: Optional[StyleAttributeSet] = None,
    separator: Optional[Piece] = None,
) -> list[StyledRun]:
    """Concatenate *pieces* in order, with *separator* between consecutive ones.

    Raw strings and bare atoms (images, special characters, tabs) take
    *base_style*; runs that are already styled are kept as they are.
    """
    base = base_style if base_style is not None else EMPTY_STYLE
    separator_runs = _piece_runs(separator, base) if separator is not None else []

    result: list[StyledRun] = []
    for index, piece in enumerate(pieces):
        if index and separator_runs:
            result.extend(separator_runs)
        result.extend(_piece_runs(piece, base))
    return result
