"""Named rule-set presets and JSON rule-set files.

A preset pairs a base style with a :class:`~styledmarkup.rules.RuleTable`
(default, markdown, quote, list, kerning, ordinals, chemistry, alternates).
Custom rule sets are loaded from JSON::

    {
      "extends": "default",
      "base": {"font": {"name": "Georgia", "size": 16}},
      "rules": [
        {"style": "red", "attributes": {"color": "#ec594d"}},
        {"enter": "li", "text": "• "},
        {"exit": "li", "text": "\\n"}
      ]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from styledmarkup.attributes import (
    Alignment,
    FontDescriptor,
    NumberCase,
    SmallCaps,
    StyleAttributeSet,
    Tracking,
)
from styledmarkup.composer import compose
from styledmarkup.log import get_logger
from styledmarkup.rules import EnterRule, ExitRule, Insertion, RuleTable, StyleRule
from styledmarkup.runs import SpecialCharacter, Tab

logger = get_logger(__name__)

_ACCENT_RED = "#ec594d"
_DARK_GRAY = "#555555"
_WHITE = "#ffffff"
_BLACK = "#000000"
_CODE_BACKGROUND = "#0000ff1a"  # blue at 10% opacity


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleSet:
    """A base style plus the rules cascading from it."""

    name: str
    base: StyleAttributeSet
    rules: RuleTable
    description: str = ""
    sample: str = ""


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _build_default() -> RuleSet:
    """Build the **default** preset: serif body, bold/italic/code tags."""
    base = StyleAttributeSet(font=FontDescriptor("Georgia", 16), color="#333333")
    code = StyleAttributeSet(
        font=FontDescriptor("Menlo-Regular", 14), background_color=_CODE_BACKGROUND,
    )
    return RuleSet(
        name="default",
        base=base,
        rules=RuleTable([
            StyleRule("b", StyleAttributeSet(font=FontDescriptor("Georgia-Bold", 16))),
            StyleRule("strong", StyleAttributeSet(font=FontDescriptor("Georgia-Bold", 16))),
            StyleRule("i", StyleAttributeSet(font=FontDescriptor("Georgia-Italic", 16))),
            StyleRule("em", StyleAttributeSet(font=FontDescriptor("Georgia-Italic", 16))),
            StyleRule("code", code),
            EnterRule("br", Insertion.of_special(SpecialCharacter.LINE_SEPARATOR)),
        ]),
        description="Serif body text with <b>, <i>, <code> and <br/>.",
        sample="Plain, <b>bold</b>, <i>italic</i> and <code>code</code>.",
    )


def _build_markdown() -> RuleSet:
    """Build the **markdown** preset for trees from :class:`MarkdownParser`."""
    body = StyleAttributeSet(
        font=FontDescriptor("HelveticaNeue", 14), line_height_multiple=1.4, color=_BLACK,
    )
    heading_sizes = {1: 28.0, 2: 22.0, 3: 18.0, 4: 16.0, 5: 14.0, 6: 13.0}

    rules: list = []
    for level, size in heading_sizes.items():
        name = f"h{level}"
        rules.append(StyleRule(name, StyleAttributeSet(
            font=FontDescriptor("HelveticaNeue-Bold", size), paragraph_spacing_after=size / 2,
        )))
        rules.append(ExitRule(name, Insertion.of_text("\n")))

    rules.extend([
        ExitRule("p", Insertion.of_text("\n")),
        StyleRule("strong", StyleAttributeSet(font=FontDescriptor("HelveticaNeue-Bold", 14))),
        StyleRule("em", StyleAttributeSet(font=FontDescriptor("HelveticaNeue-Italic", 14))),
        StyleRule("del", StyleAttributeSet(extra_attributes={"strikethrough": True})),
        StyleRule("code", StyleAttributeSet(
            font=FontDescriptor("Menlo-Regular", 13), background_color=_CODE_BACKGROUND,
        )),
        StyleRule("pre", StyleAttributeSet(
            font=FontDescriptor("Menlo-Regular", 13), line_height_multiple=1.2,
        )),
        StyleRule("blockquote", StyleAttributeSet(
            font=FontDescriptor("Georgia-Italic", 14), color=_DARK_GRAY,
        )),
        StyleRule("a", StyleAttributeSet(color="#2769dd", extra_attributes={"link": True})),
        StyleRule("li", StyleAttributeSet(paragraph_spacing_after=4)),
        EnterRule("li", Insertion.of_runs(compose(["\u2022", Tab(12.0)]))),
        ExitRule("li", Insertion.of_text("\n")),
        EnterRule("hr", Insertion.of_special(SpecialCharacter.EM_DASH)),
        ExitRule("hr", Insertion.of_text("\n")),
        EnterRule("br", Insertion.of_special(SpecialCharacter.LINE_SEPARATOR)),
        ExitRule("tr", Insertion.of_text("\n")),
        ExitRule("th", Insertion.of_special(SpecialCharacter.TAB)),
        ExitRule("td", Insertion.of_special(SpecialCharacter.TAB)),
        StyleRule("th", StyleAttributeSet(font=FontDescriptor("HelveticaNeue-Bold", 14))),
    ])
    return RuleSet(
        name="markdown",
        base=body,
        rules=RuleTable(rules),
        description="Rules for Markdown parsed with --markdown.",
        sample="# Title\n\nSome **bold** and *italic* text.\n\n- one\n- two\n",
    )


def _build_quote() -> RuleSet:
    """Build the **quote** preset: highlighted phrases and an inline image."""
    accent = StyleAttributeSet(font=FontDescriptor("SuperClarendon-Black", 18))
    base = StyleAttributeSet(
        font=FontDescriptor("GillSans-Light", 18),
        line_height_multiple=1.8,
        color=_DARK_GRAY,
    )
    racket = StyleAttributeSet(color=_ACCENT_RED, baseline_offset=-4.0)
    return RuleSet(
        name="quote",
        base=base,
        rules=RuleTable([
            StyleRule("black", accent.derive(color=_WHITE, background_color=_BLACK)),
            StyleRule("red", accent.derive(color=_WHITE, background_color=_ACCENT_RED)),
            StyleRule("signed", accent.derive(color=_ACCENT_RED)),
            EnterRule("racket", Insertion.of_image("Tennis Racket", racket)),
        ]),
        description="Highlighted phrases, a signature and a racket image.",
        sample=(
            "I want to be different. If everyone is wearing "
            "<black><sm:noBreakSpace/>black,<sm:noBreakSpace/></black> I want to be "
            "wearing <red><sm:noBreakSpace/>red.<sm:noBreakSpace/></red>\n"
            "<signed><sm:emDash/>Maria Sharapova</signed> <racket/>"
        ),
    )


def _build_list() -> RuleSet:
    """Build the **list** preset: bullet items with enter/exit insertions."""
    item = StyleAttributeSet(
        font=FontDescriptor("AvenirNextCondensed-Medium", 18), paragraph_spacing_after=10.0,
    )
    code = StyleAttributeSet(
        font=FontDescriptor("Menlo-Regular", 16), background_color=_CODE_BACKGROUND,
    )
    bullet = compose(["\U0001f351 \u2192", Tab(4.0)])
    return RuleSet(
        name="list",
        base=StyleAttributeSet(),
        rules=RuleTable([
            StyleRule("li", item),
            StyleRule("code", code),
            EnterRule("li", Insertion.of_runs(bullet)),
            ExitRule("li", Insertion.of_text("\n")),
        ]),
        description="<li> items with a bullet and tab on enter, newline on exit.",
        sample=(
            "<li>This list is defined with XML.</li>"
            "<li>Each row is an <code>&lt;li&gt;</code> tag.</li>"
        ),
    )


def _build_kerning() -> RuleSet:
    """Build the **kerning** preset: large type and single-character tracking."""
    base = StyleAttributeSet(
        alignment=Alignment.CENTER,
        color=_ACCENT_RED,
        font=FontDescriptor("AvenirNext-Medium", 16),
        line_spacing=20,
    )
    return RuleSet(
        name="kerning",
        base=base,
        rules=RuleTable([
            StyleRule("large", StyleAttributeSet(
                font=FontDescriptor("AvenirNext-Heavy", 64), line_spacing=40,
            )),
            StyleRule("kern", StyleAttributeSet(tracking=Tracking.adobe(-80))),
        ]),
        description="Large centred type with negative tracking on <kern>.",
        sample="GO<sm:noBreakSpace/>AHEAD,\n<large>MAKE\nMY\nDA<kern>Y.</kern></large>",
    )


def _garamond() -> StyleAttributeSet:
    return StyleAttributeSet(
        font=FontDescriptor("EBGaramond12-Regular", 24), line_height_multiple=1.2,
    )


def _build_ordinals() -> RuleSet:
    """Build the **ordinals** preset: lining numbers with ordinal suffixes."""
    garamond = _garamond()
    return RuleSet(
        name="ordinals",
        base=garamond,
        rules=RuleTable([
            StyleRule("number", garamond.derive(color=_ACCENT_RED, number_case=NumberCase.UPPER)),
            StyleRule("ordinal", garamond.derive(ordinals=True)),
        ]),
        description="Numbers in lining figures with OpenType ordinals.",
        sample="Today is my <number>111<ordinal>th</ordinal></number> birthday!",
    )


def _build_chemistry() -> RuleSet:
    """Build the **chemistry** preset: small-cap names, scientific inferiors."""
    garamond = _garamond()
    return RuleSet(
        name="chemistry",
        base=garamond,
        rules=RuleTable([
            StyleRule("name", garamond.derive(small_caps=SmallCaps.FROM_LOWERCASE)),
            StyleRule("chemical", garamond.derive(color=_ACCENT_RED)),
            StyleRule("number", garamond.derive(scientific_inferiors=True)),
        ]),
        description="Small-cap names and chemical formulas with inferiors.",
        sample=(
            "<name>Johnny</name> thought it was <chemical>H<number>2</number>O</chemical> "
            "but it was <chemical>H<number>2</number>SO<number>4</number></chemical>."
        ),
    )


def _build_alternates() -> RuleSet:
    """Build the **alternates** preset: stylistic set six for passwords."""
    callout = StyleAttributeSet(color=_ACCENT_RED)
    return RuleSet(
        name="alternates",
        base=StyleAttributeSet(font=FontDescriptor("Helvetica", 18)),
        rules=RuleTable([
            StyleRule("callout", callout),
            StyleRule("password", callout.derive(stylistic_alternates={6})),
        ]),
        description="Stylistic alternate set six on <password>.",
        sample="My password, <callout>68Il14</callout>, reads better as <password>68Il14</password>.",
    )


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

_PRESET_BUILDERS = {
    "default": _build_default,
    "markdown": _build_markdown,
    "quote": _build_quote,
    "list": _build_list,
    "kerning": _build_kerning,
    "ordinals": _build_ordinals,
    "chemistry": _build_chemistry,
    "alternates": _build_alternates,
}


def rule_set_from_dict(data: dict[str, Any], *, name: str = "custom") -> RuleSet:
    """Build a :class:`RuleSet` from a decoded JSON rule-set document."""
    if not isinstance(data, dict):
        raise ValueError("Rule set must be a JSON object")
    base = StyleAttributeSet.from_dict(data.get("base"))
    rules = RuleTable.from_dicts(data.get("rules", []))
    parent_name = data.get("extends")
    if parent_name:
        parent = StyleManager(parent_name).rule_set
        base = parent.base.merge(base)
        rules = parent.rules.extend(rules)
    return RuleSet(
        name=str(data.get("name", name)),
        base=base,
        rules=rules,
        description=str(data.get("description", "")),
        sample=str(data.get("sample", "")),
    )


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Select a rule-set preset, or wrap one loaded from a file.

    Usage::

        sm = StyleManager("quote")
        runs = resolve(tree, sm.base_style, sm.rules)

        custom = StyleManager.from_file("rules.json")
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "default", *, rule_set: Optional[RuleSet] = None) -> None:
        if rule_set is None:
            if preset not in _PRESET_BUILDERS:
                raise ValueError(
                    f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
                )
            rule_set = _PRESET_BUILDERS[preset]()
        self.preset = rule_set.name
        self.rule_set = rule_set

    @classmethod
    def from_file(cls, path: Union[str, Path], *, encoding: str = "utf-8") -> StyleManager:
        """Load a JSON rule-set file."""
        path = Path(path)
        data = json.loads(path.read_text(encoding=encoding))
        rule_set = rule_set_from_dict(data, name=path.stem)
        logger.debug("Loaded rule set %r from %s (%d elements)", rule_set.name, path, len(rule_set.rules))
        return cls(rule_set=rule_set)

    # -- public API ---------------------------------------------------------

    @property
    def base_style(self) -> StyleAttributeSet:
        return self.rule_set.base

    @property
    def rules(self) -> RuleTable:
        return self.rule_set.rules

    @property
    def sample(self) -> str:
        return self.rule_set.sample

    @classmethod
    def describe_presets(cls) -> dict[str, str]:
        """Return ``{preset: description}`` for every built-in preset."""
        return {name: builder().description for name, builder in _PRESET_BUILDERS.items()}
