"""Tests for the markup and Markdown parsers."""

from __future__ import annotations

from pathlib import Path

import pytest

from styledmarkup.errors import MarkupParseError
from styledmarkup.parser import (
    MarkdownParser,
    MarkupNode,
    MarkupParser,
    NodeType,
    extract_text,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def find_elements(root: MarkupNode, name: str) -> list[MarkupNode]:
    """Recursively collect all elements called *name* under *root*."""
    found: list[MarkupNode] = []
    if root.type is NodeType.ELEMENT and root.name == name:
        found.append(root)
    for child in root.children:
        found.extend(find_elements(child, name))
    return found


def first_element(root: MarkupNode, name: str) -> MarkupNode:
    nodes = find_elements(root, name)
    assert nodes, f"No <{name}> element found"
    return nodes[0]


@pytest.fixture
def parser() -> MarkupParser:
    return MarkupParser()


@pytest.fixture
def md_parser() -> MarkdownParser:
    return MarkdownParser()


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

class TestMarkup:
    def test_plain_text(self, parser: MarkupParser) -> None:
        doc = parser.parse("just text")
        assert doc.type is NodeType.DOCUMENT
        assert len(doc.children) == 1
        assert doc.children[0].type is NodeType.TEXT
        assert doc.children[0].text == "just text"

    def test_empty_markup(self, parser: MarkupParser) -> None:
        doc = parser.parse("")
        assert doc.type is NodeType.DOCUMENT
        assert doc.children == []

    def test_document_order(self, parser: MarkupParser) -> None:
        doc = parser.parse("I want <red>red.</red> And <b>bold</b>")
        kinds = [(c.type, c.name or c.text) for c in doc.children]
        assert kinds == [
            (NodeType.TEXT, "I want "),
            (NodeType.ELEMENT, "red"),
            (NodeType.TEXT, " And "),
            (NodeType.ELEMENT, "b"),
        ]

    def test_nested_elements(self, parser: MarkupParser) -> None:
        doc = parser.parse("<a><b>text</b></a>")
        outer = doc.children[0]
        assert outer.name == "a"
        inner = outer.children[0]
        assert inner.name == "b"
        assert inner.children[0].text == "text"

    def test_self_closing_element(self, parser: MarkupParser) -> None:
        doc = parser.parse("hit it <racket/>")
        racket = first_element(doc, "racket")
        assert racket.is_self_closing
        assert racket.children == []

    def test_attributes_preserved(self, parser: MarkupParser) -> None:
        doc = parser.parse('<a href="https://example.com" title="x">link</a>')
        link = first_element(doc, "a")
        assert link.attributes == {"href": "https://example.com", "title": "x"}

    def test_entities_decoded(self, parser: MarkupParser) -> None:
        doc = parser.parse("a &amp; b &lt;li&gt;")
        assert extract_text(doc) == "a & b <li>"

    def test_prefixed_names_kept_verbatim(self, parser: MarkupParser) -> None:
        doc = parser.parse("Hello<sm:noBreakSpace/>World")
        special = doc.children[1]
        assert special.type is NodeType.ELEMENT
        assert special.name == "sm:noBreakSpace"

    def test_whitespace_preserved(self, parser: MarkupParser) -> None:
        doc = parser.parse("  two\n  lines  ")
        assert extract_text(doc) == "  two\n  lines  "

    def test_unwrapped_document(self) -> None:
        doc = MarkupParser(wrap=False).parse("<quote>hi</quote>")
        assert len(doc.children) == 1
        assert doc.children[0].name == "quote"

    def test_fixture_file(self, parser: MarkupParser) -> None:
        sample = FIXTURES_DIR / "sample.xml"
        doc = parser.parse(sample.read_text(encoding="utf-8"))
        assert find_elements(doc, "b")
        assert find_elements(doc, "sm:emDash")


class TestMalformed:
    @pytest.mark.parametrize(
        "markup",
        ["<a>unclosed", "<a>x</b>", "stray</a>", "<a", "<b><i>x</b></i>", "&nbsp;"],
    )
    def test_malformed_rejected(self, parser: MarkupParser, markup: str) -> None:
        with pytest.raises(MarkupParseError):
            parser.parse(markup)

    def test_unencodable_character(self, parser: MarkupParser) -> None:
        with pytest.raises(MarkupParseError) as excinfo:
            parser.parse("ok\nab\ud800c")
        err = excinfo.value
        assert err.line == 2
        assert err.column == 2
        assert "invalid character" in str(err)

    def test_non_ascii_text(self, parser: MarkupParser) -> None:
        doc = parser.parse("<b>caf\u00e9 \U0001f351</b>")
        assert extract_text(doc) == "caf\u00e9 \U0001f351"

    def test_error_location(self, parser: MarkupParser) -> None:
        with pytest.raises(MarkupParseError) as excinfo:
            parser.parse("fine\n<a>x</b>")
        err = excinfo.value
        assert err.line == 2
        assert err.column is not None
        assert "Malformed markup" in str(err)


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

class TestMarkdown:
    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, md_parser: MarkdownParser, level: int) -> None:
        doc = md_parser.parse(f"{'#' * level} Heading {level}")
        heading = first_element(doc, f"h{level}")
        assert extract_text(heading) == f"Heading {level}"

    def test_paragraph_inline(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("Some **bold**, *italic* and `code`.")
        para = first_element(doc, "p")
        assert extract_text(first_element(para, "strong")) == "bold"
        assert extract_text(first_element(para, "em")) == "italic"
        assert extract_text(first_element(para, "code")) == "code"

    def test_strikethrough(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("~~gone~~")
        assert extract_text(first_element(doc, "del")) == "gone"

    def test_unordered_list(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("- one\n- two\n")
        ul = first_element(doc, "ul")
        items = find_elements(ul, "li")
        assert [extract_text(li) for li in items] == ["one", "two"]

    def test_ordered_list_start(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("3. three\n4. four\n")
        ol = first_element(doc, "ol")
        assert ol.attributes["start"] == "3"

    def test_task_list(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("- [x] done\n- [ ] todo\n")
        items = find_elements(doc, "li")
        assert [li.attributes.get("checked") for li in items] == ["true", "false"]

    def test_link(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("[site](https://example.com)")
        link = first_element(doc, "a")
        assert link.attributes["href"] == "https://example.com"
        assert extract_text(link) == "site"

    def test_image(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("![a bee](bee.png)")
        img = first_element(doc, "img")
        assert img.attributes == {"src": "bee.png", "alt": "a bee"}
        assert img.is_self_closing

    def test_code_block_language(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("```python\nprint('hi')\n```\n")
        pre = first_element(doc, "pre")
        assert pre.attributes["lang"] == "python"
        assert "print('hi')" in extract_text(pre)

    def test_blockquote(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("> quoted")
        assert "quoted" in extract_text(first_element(doc, "blockquote"))

    def test_thematic_break(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("above\n\n---\n\nbelow")
        assert first_element(doc, "hr").is_self_closing

    def test_table(self, md_parser: MarkdownParser) -> None:
        doc = md_parser.parse("| A | B |\n|---|--:|\n| 1 | 2 |\n")
        table = first_element(doc, "table")
        assert [extract_text(th) for th in find_elements(table, "th")] == ["A", "B"]
        cells = find_elements(table, "td")
        assert [extract_text(td) for td in cells] == ["1", "2"]
        assert cells[1].attributes.get("align") == "right"

    def test_fixture_file(self, md_parser: MarkdownParser) -> None:
        sample = FIXTURES_DIR / "sample.md"
        doc = md_parser.parse(sample.read_text(encoding="utf-8"))
        assert find_elements(doc, "h1")
        assert len(find_elements(doc, "li")) == 2
        assert find_elements(doc, "blockquote")
