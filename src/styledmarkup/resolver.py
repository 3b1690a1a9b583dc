"""Resolve a markup tree into a flat sequence of styled runs.

The resolver walks the tree depth first over an explicit stack of open
elements, each carrying its style:

1. entering an element pushes ``merge(top, rule.style)`` (or ``top``
   unchanged) and emits the enter insertion with the pushed style;
2. children are visited in order, text nodes emitted with the top style;
3. leaving the element emits the exit insertion, still with the element's
   own style, and then pops.

Output is in document order whatever order the rules were declared in.
Elements without rules are transparent.  Besides the rule table, the
self-closing ``<sm:noBreakSpace/>``, ``<sm:emDash/>``,
``<sm:lineSeparator/>`` and ``<sm:tab/>`` elements emit built-in atoms.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Optional

from styledmarkup.attributes import EMPTY_STYLE, StyleAttributeSet
from styledmarkup.log import get_logger
from styledmarkup.parser import MarkupNode, NodeType
from styledmarkup.resources import ImageHandle, ImageLoader, load_image
from styledmarkup.rules import (
    EMPTY_LOOKUP,
    EMPTY_RULES,
    Insertion,
    InsertionKind,
    RuleLookup,
    RuleTable,
)
from styledmarkup.runs import SpecialCharacter, StyledRun

logger = get_logger(__name__)


@dataclass
class _Frame:
    """An open element: its remaining children, rules and pushed style."""

    children: Iterator[MarkupNode]
    lookup: RuleLookup
    style: StyleAttributeSet


class MarkupResolver:
    """Apply a :class:`RuleTable` to markup trees.

    The resolver holds configuration only; each call builds its own style
    stack, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        rules: RuleTable = EMPTY_RULES,
        *,
        image_loader: Optional[ImageLoader] = None,
    ) -> None:
        self.rules = rules
        self.image_loader = image_loader

    # -- public API ---------------------------------------------------------

    def resolve(
        self, tree: MarkupNode, base_style: StyleAttributeSet = EMPTY_STYLE
    ) -> list[StyledRun]:
        """Return every run for *tree*; a missing image aborts the call."""
        return list(self.iter_resolve(tree, base_style))

    def iter_resolve(
        self, tree: MarkupNode, base_style: StyleAttributeSet = EMPTY_STYLE
    ) -> Iterator[StyledRun]:
        """Yield runs for *tree* in document order.

        A missing image raises :class:`~styledmarkup.errors.ResourceNotFoundError`
        at its insertion point; runs yielded before it stay valid.
        """
        # Explicit stack: nesting depth never grows the call stack.
        frames: list[_Frame] = [_Frame(iter((tree,)), EMPTY_LOOKUP, base_style)]
        while frames:
            frame = frames[-1]
            node = next(frame.children, None)
            if node is None:
                if frame.lookup.on_exit is not None:
                    yield from self._insert(frame.lookup.on_exit, frame.style)
                frames.pop()
                continue

            if node.type is NodeType.TEXT:
                if node.text:
                    yield StyledRun.text_run(node.text, frame.style)
            elif node.type is NodeType.DOCUMENT:
                frames.append(_Frame(iter(node.children), EMPTY_LOOKUP, frame.style))
            else:
                entered = self._enter(node, frame.style)
                yield from self._open(node, entered)
                frames.append(entered)

    # -- traversal ----------------------------------------------------------

    def _enter(self, node: MarkupNode, top: StyleAttributeSet) -> _Frame:
        lookup = self.rules.lookup(node.name)
        if node.name not in self.rules and SpecialCharacter.from_tag(node.name) is None:
            logger.debug("No rules for <%s>; treating as transparent", node.name)
        style = top if lookup.style is None else top.merge(lookup.style)
        return _Frame(iter(node.children), lookup, style)

    def _open(self, node: MarkupNode, frame: _Frame) -> Iterator[StyledRun]:
        if frame.lookup.on_enter is not None:
            yield from self._insert(frame.lookup.on_enter, frame.style)
        special = SpecialCharacter.from_tag(node.name)
        if special is not None:
            yield StyledRun.special_run(special, frame.style)

    def _insert(self, insertion: Insertion, style: StyleAttributeSet) -> Iterator[StyledRun]:
        own = style.merge(insertion.style)
        if insertion.kind is InsertionKind.TEXT:
            if insertion.text:
                yield StyledRun.text_run(insertion.text, own)
        elif insertion.kind is InsertionKind.RUNS:
            for run in insertion.runs:
                yield run.restyled(style)
        elif insertion.kind is InsertionKind.IMAGE:
            yield StyledRun.image_run(self._image(insertion.image), own)
        elif insertion.kind is InsertionKind.SPECIAL and insertion.special is not None:
            yield StyledRun.special_run(insertion.special, own)

    def _image(self, image: object) -> ImageHandle:
        if isinstance(image, ImageHandle):
            return image
        return load_image(self.image_loader, str(image))


def resolve(
    tree: MarkupNode,
    base_style: StyleAttributeSet = EMPTY_STYLE,
    rules: RuleTable = EMPTY_RULES,
    *,
    image_loader: Optional[ImageLoader] = None,
) -> list[StyledRun]:
    """Resolve *tree* against *rules* starting from *base_style*."""
    return MarkupResolver(rules, image_loader=image_loader).resolve(tree, base_style)
