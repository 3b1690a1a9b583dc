"""High-level parse -> resolve -> render orchestration.

Ties together a parser, a rule-set preset and a renderer into a single
public API for styling markup text or files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from styledmarkup.log import get_logger
from styledmarkup.parser import MarkdownParser, MarkupParser
from styledmarkup.renderer import FORMATS, get_renderer
from styledmarkup.resolver import MarkupResolver
from styledmarkup.resources import ImageLoader
from styledmarkup.runs import StyledRun
from styledmarkup.style_manager import StyleManager

logger = get_logger(__name__)


class Converter:
    """Style markup with a rule set and render the result.

    Usage::

        converter = Converter(style_preset="list")
        html = converter.convert_text("<li>One</li><li>Two</li>")

        # Markdown input, JSON output
        converter = Converter(style_preset="markdown", markdown=True)
        converter.convert_file("notes.md", "notes.json", fmt="json")
    """

    STYLE_PRESETS = StyleManager.PRESETS
    FORMATS = FORMATS

    def __init__(
        self,
        style_preset: str = "default",
        *,
        style_manager: Optional[StyleManager] = None,
        markdown: bool = False,
        image_loader: Optional[ImageLoader] = None,
    ) -> None:
        self.style_manager = style_manager or StyleManager(style_preset)
        self.parser: Union[MarkupParser, MarkdownParser] = (
            MarkdownParser() if markdown else MarkupParser()
        )
        self.resolver = MarkupResolver(self.style_manager.rules, image_loader=image_loader)

    def resolve_text(self, text: str) -> list[StyledRun]:
        """Parse *text* and return its styled runs.

        Raises:
            MarkupParseError: *text* is not well-formed markup.
            ResourceNotFoundError: an inserted image is unknown to the loader.
        """
        tree = self.parser.parse(text)
        runs = self.resolver.resolve(tree, self.style_manager.base_style)
        logger.debug("Resolved %d runs with preset %r", len(runs), self.style_manager.preset)
        return runs

    def convert_text(self, text: str, fmt: str = "html") -> str:
        """Style *text* and render it in output format *fmt*."""
        renderer = get_renderer(fmt)
        return renderer.render(self.resolve_text(text))

    def convert_file(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        *,
        fmt: str = "html",
        encoding: str = "utf-8",
    ) -> None:
        """Read a markup file and write the rendered output."""
        input_path = Path(input_path)
        output_path = Path(output_path)

        text = input_path.read_text(encoding=encoding)
        rendered = self.convert_text(text, fmt)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding="utf-8")
