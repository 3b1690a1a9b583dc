"""Markup parsers producing the tree consumed by the resolver.

:class:`MarkupParser` reads the XML-like markup used in rule-styled strings
(``"I want <red>red.</red>"``).  :class:`MarkdownParser` uses mistune v3 to
turn Markdown into the same :class:`MarkupNode` tree, with HTML-style element
names, so one rule table can style both sources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union
from xml.parsers import expat

import mistune

from styledmarkup.errors import MarkupParseError
from styledmarkup.log import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Tree definitions
# ---------------------------------------------------------------------------

class NodeType(Enum):
    DOCUMENT = "document"
    ELEMENT = "element"
    TEXT = "text"


@dataclass
class MarkupNode:
    type: NodeType
    name: str = ""
    text: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[MarkupNode] = field(default_factory=list)

    @classmethod
    def document(cls, *children: MarkupNode) -> MarkupNode:
        return cls(type=NodeType.DOCUMENT, children=list(children))

    @classmethod
    def element(
        cls, name: str, *children: MarkupNode, **attributes: str
    ) -> MarkupNode:
        return cls(
            type=NodeType.ELEMENT,
            name=name,
            attributes=dict(attributes),
            children=list(children),
        )

    @classmethod
    def of_text(cls, text: str) -> MarkupNode:
        return cls(type=NodeType.TEXT, text=text)

    @property
    def is_self_closing(self) -> bool:
        return self.type is NodeType.ELEMENT and not self.children


def extract_text(node: MarkupNode) -> str:
    """Recursively extract plain text from a subtree."""
    parts: list[str] = []
    if node.text:
        parts.append(node.text)
    for child in node.children:
        parts.append(extract_text(child))
    return "".join(parts)


def _append_text(parent: MarkupNode, text: str) -> None:
    if not text:
        return
    if parent.children and parent.children[-1].type is NodeType.TEXT:
        parent.children[-1].text += text
    else:
        parent.children.append(MarkupNode.of_text(text))


# ---------------------------------------------------------------------------
# XML-like markup
# ---------------------------------------------------------------------------

class MarkupParser:
    """Parse rule-styled markup into a ``DOCUMENT`` :class:`MarkupNode`.

    Markup is a fragment by default and gets wrapped in an internal root
    element, so ``"a <b>c</b>"`` is valid.  Pass ``wrap=False`` to parse a
    complete XML document instead; its root element then becomes the single
    child of the returned document.

    Element names are taken verbatim, prefixes included, so ``<sm:emDash/>``
    needs no namespace declaration.
    """

    ROOT_ELEMENT = "styledmarkup"

    def __init__(self, *, wrap: bool = True) -> None:
        self.wrap = wrap

    def parse(self, markup: str) -> MarkupNode:
        document = MarkupNode.document()
        stack: list[MarkupNode] = [document]

        def start_element(name: str, attrs: dict[str, str]) -> None:
            node = MarkupNode.element(name)
            node.attributes = dict(attrs)
            stack[-1].children.append(node)
            stack.append(node)

        def end_element(_name: str) -> None:
            stack.pop()

        def character_data(data: str) -> None:
            _append_text(stack[-1], data)

        # No namespace separator: "sm:emDash" stays a plain element name.
        parser = expat.ParserCreate("utf-8")
        parser.buffer_text = True
        parser.StartElementHandler = start_element
        parser.EndElementHandler = end_element
        parser.CharacterDataHandler = character_data

        try:
            data = markup.encode("utf-8")
        except UnicodeEncodeError as exc:
            line = markup.count("\n", 0, exc.start) + 1
            column = exc.start - (markup.rfind("\n", 0, exc.start) + 1)
            raise MarkupParseError(
                f"invalid character {markup[exc.start]!r}", line=line, column=column,
            ) from None

        if self.wrap:
            tag = self.ROOT_ELEMENT.encode("ascii")
            data = b"<" + tag + b">" + data + b"</" + tag + b">"
        try:
            parser.Parse(data, True)
        except expat.ExpatError as exc:
            column = exc.offset
            if self.wrap and exc.lineno == 1:
                column = max(0, column - len(self.ROOT_ELEMENT) - 2)
            logger.debug("Rejected markup: %s", exc)
            raise MarkupParseError(
                expat.ErrorString(exc.code), line=exc.lineno, column=column,
            ) from None

        if self.wrap:
            root = document.children[0]
            document.children = root.children
        return document


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

_Converted = Union[MarkupNode, list[MarkupNode], None]


class MarkdownParser:
    """Parse Markdown text into a :class:`MarkupNode` tree.

    Element names follow HTML: ``p``, ``h1``..``h6``, ``strong``, ``em``,
    ``del``, ``code``, ``pre``, ``ul``, ``ol``, ``li``, ``blockquote``,
    ``a``, ``img``, ``hr``, ``br`` and the table elements.
    """

    def __init__(self) -> None:
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["table", "strikethrough", "task_lists"],
        )

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> MarkupNode:
        """Return a ``DOCUMENT`` node for *markdown_text*."""
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        return MarkupNode.document(*self._convert_tokens(tokens))

    # -- token conversion ---------------------------------------------------

    def _convert_tokens(self, tokens: list[dict[str, Any]]) -> list[MarkupNode]:
        nodes: list[MarkupNode] = []
        for tok in tokens:
            converted = self._convert_token(tok)
            if converted is None:
                continue
            if isinstance(converted, list):
                nodes.extend(converted)
            else:
                nodes.append(converted)
        return nodes

    def _convert_token(self, tok: dict[str, Any]) -> _Converted:
        ttype = tok.get("type", "")
        handler = getattr(self, f"_handle_{ttype}", None)
        if handler:
            return handler(tok)
        # Unknown tokens degrade to their raw text.
        raw = tok.get("raw", tok.get("text", ""))
        if raw:
            return MarkupNode.of_text(str(raw))
        if isinstance(tok.get("children"), list):
            return self._convert_tokens(tok["children"])
        return None

    def _children(self, tok: dict[str, Any]) -> list[MarkupNode]:
        children = tok.get("children")
        if children is None:
            raw = tok.get("raw", tok.get("text", ""))
            return [MarkupNode.of_text(raw)] if raw else []
        if isinstance(children, str):
            return [MarkupNode.of_text(children)]
        return self._convert_tokens(children)

    def _wrap(self, name: str, tok: dict[str, Any], **attributes: str) -> MarkupNode:
        return MarkupNode.element(name, *self._children(tok), **attributes)

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict) -> MarkupNode:
        level = tok.get("attrs", {}).get("level", tok.get("level", 1))
        level = max(1, min(6, int(level)))
        return self._wrap(f"h{level}", tok)

    def _handle_paragraph(self, tok: dict) -> MarkupNode:
        return self._wrap("p", tok)

    def _handle_block_text(self, tok: dict) -> list[MarkupNode]:
        """Tight list item content: no paragraph of its own."""
        return self._children(tok)

    def _handle_block_code(self, tok: dict) -> MarkupNode:
        attrs = tok.get("attrs", {})
        raw = tok.get("raw", tok.get("text", ""))
        info = attrs.get("info", tok.get("info", "")) or ""
        node = MarkupNode.element("pre", MarkupNode.of_text(str(raw)))
        if info:
            node.attributes["lang"] = info.split()[0]
        return node

    def _handle_block_quote(self, tok: dict) -> MarkupNode:
        return self._wrap("blockquote", tok)

    def _handle_thematic_break(self, _tok: dict) -> MarkupNode:
        return MarkupNode.element("hr")

    def _handle_blank_line(self, _tok: dict) -> None:
        return None

    def _handle_block_html(self, tok: dict) -> MarkupNode:
        return MarkupNode.of_text(str(tok.get("raw", "")))

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict) -> MarkupNode:
        attrs = tok.get("attrs", {})
        if attrs.get("ordered", False):
            node = self._wrap("ol", tok)
            start = attrs.get("start", 1) or 1
            if start != 1:
                node.attributes["start"] = str(start)
            return node
        return self._wrap("ul", tok)

    def _handle_list_item(self, tok: dict) -> MarkupNode:
        return self._wrap("li", tok)

    def _handle_task_list_item(self, tok: dict) -> MarkupNode:
        checked = bool(tok.get("attrs", {}).get("checked", False))
        return self._wrap("li", tok, checked="true" if checked else "false")

    # -- tables -------------------------------------------------------------

    def _handle_table(self, tok: dict) -> MarkupNode:
        return self._wrap("table", tok)

    def _handle_table_head(self, tok: dict) -> MarkupNode:
        # The head holds its cells directly; give them an explicit row.
        row = MarkupNode.element("tr", *self._children(tok))
        return MarkupNode.element("thead", row)

    def _handle_table_body(self, tok: dict) -> MarkupNode:
        return self._wrap("tbody", tok)

    def _handle_table_row(self, tok: dict) -> MarkupNode:
        return self._wrap("tr", tok)

    def _handle_table_cell(self, tok: dict) -> MarkupNode:
        attrs = tok.get("attrs", {})
        node = self._wrap("th" if attrs.get("head") else "td", tok)
        if attrs.get("align"):
            node.attributes["align"] = attrs["align"]
        return node

    # -- inline handlers ----------------------------------------------------

    def _handle_text(self, tok: dict) -> MarkupNode:
        raw = tok.get("raw", tok.get("text", tok.get("children", "")))
        return MarkupNode.of_text(raw if isinstance(raw, str) else "")

    def _handle_strong(self, tok: dict) -> MarkupNode:
        return self._wrap("strong", tok)

    def _handle_emphasis(self, tok: dict) -> MarkupNode:
        return self._wrap("em", tok)

    def _handle_strikethrough(self, tok: dict) -> MarkupNode:
        return self._wrap("del", tok)

    def _handle_codespan(self, tok: dict) -> MarkupNode:
        raw = tok.get("raw", tok.get("text", tok.get("children", "")))
        return MarkupNode.element("code", MarkupNode.of_text(str(raw)))

    def _handle_inline_html(self, tok: dict) -> MarkupNode:
        return MarkupNode.of_text(str(tok.get("raw", "")))

    def _handle_link(self, tok: dict) -> MarkupNode:
        attrs = tok.get("attrs", {})
        node = self._wrap("a", tok, href=attrs.get("url", tok.get("link", "")))
        if attrs.get("title"):
            node.attributes["title"] = attrs["title"]
        return node

    def _handle_image(self, tok: dict) -> MarkupNode:
        attrs = tok.get("attrs", {})
        alt = extract_text(MarkupNode.document(*self._children(tok)))
        return MarkupNode.element(
            "img", src=attrs.get("url", tok.get("src", "")), alt=alt,
        )

    def _handle_linebreak(self, _tok: dict) -> MarkupNode:
        return MarkupNode.element("br")

    def _handle_softbreak(self, _tok: dict) -> Optional[MarkupNode]:
        return MarkupNode.of_text("\n")
