"""Renderer adapters turning styled runs into concrete output formats.

Each adapter applies the attributes it understands and silently skips the
rest.  :class:`HtmlRenderer` produces inline ``<span>`` markup with CSS,
:class:`JsonRenderer` a lossless description of the runs, and
:class:`TextRenderer` the bare characters.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any, Union
from xml.etree.ElementTree import Element, SubElement, tostring

from styledmarkup.attributes import (
    Alignment,
    NumberCase,
    NumberSpacing,
    SmallCaps,
    StyleAttributeSet,
)
from styledmarkup.runs import RunKind, SpecialCharacter, StyledRun, plain_text

_DEFAULT_FONT_SIZE_PT = 12.0

_ALIGN_MAP = {
    Alignment.LEFT: "left",
    Alignment.CENTER: "center",
    Alignment.RIGHT: "right",
    Alignment.JUSTIFIED: "justify",
    Alignment.NATURAL: "start",
}

_SMALL_CAPS_MAP = {
    SmallCaps.FROM_LOWERCASE: "small-caps",
    SmallCaps.FROM_UPPERCASE: "all-small-caps",
}


def _num(value: float) -> str:
    return f"{value:g}"


_SCALAR_TYPES = (str, int, float, bool)

_DATA_KEY_RE = re.compile(r"[a-z0-9_-]+")


def scalar_extras(style: StyleAttributeSet) -> dict[str, Any]:
    """Return the ``extra_attributes`` entries with plain scalar values.

    Other values are opaque to every renderer and are skipped.
    """
    return {
        key: value for key, value in style.extra_attributes.items()
        if isinstance(value, _SCALAR_TYPES)
    }


def run_to_dict(run: StyledRun) -> dict[str, Any]:
    """Return a JSON-compatible description of *run*."""
    data: dict[str, Any] = {"kind": run.kind.value}
    if run.kind is RunKind.TEXT:
        data["text"] = run.text
    elif run.kind is RunKind.SPECIAL and run.special is not None:
        data["special"] = run.special.value
        data["text"] = run.special.char
    elif run.image is not None:
        data["image"] = {
            "name": run.image.name,
            "uri": run.image.uri,
            "media_type": run.image.media_type,
        }
    style = run.style.to_dict()
    if "extra_attributes" in style:
        extras = scalar_extras(run.style)
        if extras:
            style["extra_attributes"] = extras
        else:
            del style["extra_attributes"]
    data["style"] = style
    return data


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

class HtmlRenderer:
    """Render runs as a ``<div>`` of inline HTML elements."""

    media_type = "text/html"
    suffix = ".html"

    def render(self, runs: Iterable[StyledRun]) -> str:
        runs = list(runs)
        container = Element("div")
        container.set("class", "styledmarkup")
        container_css = ["white-space: pre-wrap"]
        for run in runs:
            alignment = run.style.get("alignment")
            if alignment is not None:
                container_css.append(f"text-align: {_ALIGN_MAP[alignment]}")
                break
        container.set("style", "; ".join(container_css))

        for run in runs:
            self._render_run(container, run)
        return tostring(container, encoding="unicode", method="html")

    # -- per-kind -----------------------------------------------------------

    def _render_run(self, parent: Element, run: StyledRun) -> None:
        if run.kind is RunKind.IMAGE and run.image is not None:
            img = SubElement(parent, "img")
            img.set("src", run.image.uri)
            img.set("alt", run.image.name)
            self._apply_style(img, run.style)
            return
        if run.kind is RunKind.SPECIAL and run.special is SpecialCharacter.LINE_SEPARATOR:
            SubElement(parent, "br")
            return

        span = SubElement(parent, "span")
        span.text = run.content
        if run.kind is RunKind.SPECIAL and run.special is SpecialCharacter.TAB:
            span.set("class", "tab")
            indent = run.style.get("head_indent", 0.0)
            extra = f"display: inline-block; min-width: {_num(indent)}pt"
            self._apply_style(span, run.style, extra)
            return
        self._apply_style(span, run.style)

    def _apply_style(self, elem: Element, style: StyleAttributeSet, extra: str = "") -> None:
        declarations = self.css_declarations(style)
        if extra:
            declarations.append(extra)
        if declarations:
            elem.set("style", "; ".join(declarations))
        for key, value in scalar_extras(style).items():
            name = key.lower()
            if _DATA_KEY_RE.fullmatch(name):
                elem.set(f"data-{name}", str(value))

    def css_declarations(self, style: StyleAttributeSet) -> list[str]:
        """Return CSS declarations for the attributes HTML can express."""
        css: list[str] = []
        font = style.font
        if font is not None:
            css.append(f"font-family: '{font.name}'")
            css.append(f"font-size: {_num(font.size_pt)}pt")
        if "color" in style:
            css.append(f"color: {style['color']}")
        if "background_color" in style:
            css.append(f"background-color: {style['background_color']}")
        if "tracking" in style:
            size = font.size_pt if font is not None else _DEFAULT_FONT_SIZE_PT
            css.append(f"letter-spacing: {_num(style['tracking'].points(size))}pt")
        if "line_height_multiple" in style:
            css.append(f"line-height: {_num(style['line_height_multiple'])}")
        if "baseline_offset" in style:
            css.append(f"vertical-align: {_num(style['baseline_offset'])}pt")
        if "small_caps" in style:
            css.append(f"font-variant-caps: {_SMALL_CAPS_MAP[style['small_caps']]}")

        numeric: list[str] = []
        if "number_case" in style:
            numeric.append("lining-nums" if style["number_case"] is NumberCase.UPPER else "oldstyle-nums")
        if "number_spacing" in style:
            numeric.append(
                "tabular-nums" if style["number_spacing"] is NumberSpacing.MONOSPACED else "proportional-nums"
            )
        if style.get("ordinals"):
            numeric.append("ordinal")
        if numeric:
            css.append(f"font-variant-numeric: {' '.join(numeric)}")

        features: list[str] = []
        if style.get("scientific_inferiors"):
            features.append('"sinf"')
        for number in sorted(style.get("stylistic_alternates", ())):
            features.append(f'"ss{number:02d}"')
        if features:
            css.append(f"font-feature-settings: {', '.join(features)}")
        return css


# ---------------------------------------------------------------------------
# JSON / text
# ---------------------------------------------------------------------------

class JsonRenderer:
    media_type = "application/json"
    suffix = ".json"

    def render(self, runs: Iterable[StyledRun]) -> str:
        return json.dumps([run_to_dict(run) for run in runs], ensure_ascii=False, indent=2)


class TextRenderer:
    media_type = "text/plain"
    suffix = ".txt"

    def render(self, runs: Iterable[StyledRun]) -> str:
        return plain_text(runs)


RENDERERS = {
    "html": HtmlRenderer,
    "json": JsonRenderer,
    "text": TextRenderer,
}

Renderer = Union[HtmlRenderer, JsonRenderer, TextRenderer]

FORMATS = list(RENDERERS)


def get_renderer(fmt: str) -> Renderer:
    """Return a renderer instance for output format *fmt*."""
    try:
        return RENDERERS[fmt]()
    except KeyError:
        raise ValueError(
            f"Unknown format {fmt!r}. Choose from: {', '.join(RENDERERS)}"
        ) from None
