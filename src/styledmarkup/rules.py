"""Rule tables mapping element names to styles and insertions.

Three rule kinds exist::

    StyleRule("red", red_style)                 # cascade a style delta
    EnterRule("li", Insertion.of_text("• "))   # emit before the children
    ExitRule("li", Insertion.of_text("\\n"))       # emit after the children

A :class:`RuleTable` folds any number of rules into one
:class:`RuleLookup` per element name.  Names without rules look up as
:data:`EMPTY_LOOKUP`, which makes the element transparent.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from styledmarkup.attributes import EMPTY_STYLE, StyleAttributeSet
from styledmarkup.resources import ImageHandle
from styledmarkup.runs import SpecialCharacter, StyledRun


# ---------------------------------------------------------------------------
# Insertions
# ---------------------------------------------------------------------------

class InsertionKind(Enum):
    TEXT = "text"
    RUNS = "runs"
    IMAGE = "image"
    SPECIAL = "special"


@dataclass(frozen=True)
class Insertion:
    """Content emitted when entering or leaving an element.

    ``style`` holds the insertion's own attributes; they are merged over the
    style current at the insertion point.
    """

    kind: InsertionKind
    text: str = ""
    runs: tuple[StyledRun, ...] = ()
    image: Union[str, ImageHandle, None] = None
    special: Optional[SpecialCharacter] = None
    style: StyleAttributeSet = field(default=EMPTY_STYLE)

    @classmethod
    def of_text(cls, text: str, style: StyleAttributeSet = EMPTY_STYLE) -> Insertion:
        return cls(InsertionKind.TEXT, text=text, style=style)

    @classmethod
    def of_runs(cls, runs: Iterable[StyledRun]) -> Insertion:
        return cls(InsertionKind.RUNS, runs=tuple(runs))

    @classmethod
    def of_image(
        cls, image: Union[str, ImageHandle], style: StyleAttributeSet = EMPTY_STYLE
    ) -> Insertion:
        """Insert an image, either a concrete handle or a name for the loader."""
        return cls(InsertionKind.IMAGE, image=image, style=style)

    @classmethod
    def of_special(
        cls, special: SpecialCharacter, style: StyleAttributeSet = EMPTY_STYLE
    ) -> Insertion:
        return cls(InsertionKind.SPECIAL, special=special, style=style)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Insertion:
        """Build an insertion from a config entry.

        Exactly one of ``text``, ``image`` or ``special`` must be present;
        ``attributes`` is optional.
        """
        style = StyleAttributeSet.from_dict(data.get("attributes"))
        present = [key for key in ("text", "image", "special") if key in data]
        if len(present) != 1:
            raise ValueError(
                f"Insertion needs exactly one of 'text', 'image', 'special', got {present}"
            )
        if "text" in data:
            return cls.of_text(str(data["text"]), style)
        if "image" in data:
            return cls.of_image(str(data["image"]), style)
        try:
            special = SpecialCharacter(data["special"])
        except ValueError:
            choices = ", ".join(s.value for s in SpecialCharacter)
            raise ValueError(
                f"Unknown special character {data['special']!r}. Choose from: {choices}"
            ) from None
        return cls.of_special(special, style)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StyleRule:
    element: str
    style: StyleAttributeSet


@dataclass(frozen=True)
class EnterRule:
    element: str
    insertion: Insertion


@dataclass(frozen=True)
class ExitRule:
    element: str
    insertion: Insertion


Rule = Union[StyleRule, EnterRule, ExitRule]


@dataclass(frozen=True)
class RuleLookup:
    style: Optional[StyleAttributeSet] = None
    on_enter: Optional[Insertion] = None
    on_exit: Optional[Insertion] = None


EMPTY_LOOKUP = RuleLookup()


class RuleTable:
    """Immutable mapping from element name to its :class:`RuleLookup`.

    Several style rules for one element merge in declaration order.  For
    enter and exit insertions the last declared rule wins.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        table: dict[str, RuleLookup] = {}
        for rule in rules:
            if not isinstance(rule, (StyleRule, EnterRule, ExitRule)):
                raise TypeError(f"Not a rule: {rule!r}")
            current = table.get(rule.element, EMPTY_LOOKUP)
            if isinstance(rule, StyleRule):
                style = rule.style if current.style is None else current.style.merge(rule.style)
                table[rule.element] = replace(current, style=style)
            elif isinstance(rule, EnterRule):
                table[rule.element] = replace(current, on_enter=rule.insertion)
            else:
                table[rule.element] = replace(current, on_exit=rule.insertion)
        self._table = table

    def lookup(self, element: str) -> RuleLookup:
        return self._table.get(element, EMPTY_LOOKUP)

    def names(self) -> list[str]:
        """Return the element names covered by at least one rule."""
        return sorted(self._table)

    def extend(self, other: Union[RuleTable, Iterable[Rule]]) -> RuleTable:
        """Return a new table with *other* layered over this one.

        Styles merge; insertions from *other* replace existing ones.
        """
        if not isinstance(other, RuleTable):
            other = RuleTable(other)
        combined = RuleTable(())
        combined._table = dict(self._table)
        for name, lookup in other._table.items():
            current = combined._table.get(name, EMPTY_LOOKUP)
            style = current.style
            if lookup.style is not None:
                style = lookup.style if style is None else style.merge(lookup.style)
            combined._table[name] = RuleLookup(
                style=style,
                on_enter=lookup.on_enter or current.on_enter,
                on_exit=lookup.on_exit or current.on_exit,
            )
        return combined

    def __contains__(self, element: object) -> bool:
        return element in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"RuleTable({', '.join(self.names())})"

    @classmethod
    def from_dicts(cls, entries: Sequence[Mapping[str, Any]]) -> RuleTable:
        """Build a table from config entries.

        Each entry names its kind by key::

            {"style": "red", "attributes": {"color": "#ff0000"}}
            {"enter": "li", "text": "• "}
            {"exit": "li", "text": "\\n"}
            {"enter": "racket", "image": "Tennis Racket",
             "attributes": {"baseline_offset": -4}}
        """
        rules: list[Rule] = []
        for index, entry in enumerate(entries):
            kinds = [key for key in ("style", "enter", "exit") if key in entry]
            if len(kinds) != 1:
                raise ValueError(
                    f"Rule #{index} needs exactly one of 'style', 'enter', 'exit'"
                )
            kind = kinds[0]
            element = str(entry[kind])
            if kind == "style":
                rules.append(StyleRule(element, StyleAttributeSet.from_dict(entry.get("attributes"))))
                continue
            insertion = Insertion.from_dict({k: v for k, v in entry.items() if k != kind})
            rules.append(EnterRule(element, insertion) if kind == "enter" else ExitRule(element, insertion))
        return cls(rules)


EMPTY_RULES = RuleTable()
