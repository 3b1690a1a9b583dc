"""Cascading rule-based styling for XML-like markup and Markdown."""

from styledmarkup.attributes import (
    Alignment,
    FontDescriptor,
    NumberCase,
    NumberSpacing,
    SmallCaps,
    StyleAttributeSet,
    Tracking,
    merge,
)
from styledmarkup.composer import compose, styled
from styledmarkup.errors import MarkupParseError, ResourceNotFoundError, StyledMarkupError
from styledmarkup.parser import MarkdownParser, MarkupNode, MarkupParser, NodeType
from styledmarkup.resolver import MarkupResolver, resolve
from styledmarkup.resources import DirectoryImageLoader, ImageHandle, MappingImageLoader
from styledmarkup.rules import EnterRule, ExitRule, Insertion, RuleTable, StyleRule
from styledmarkup.runs import RunKind, SpecialCharacter, StyledRun, Tab, coalesce

__version__ = "0.1.0"

__all__ = [
    "Alignment",
    "DirectoryImageLoader",
    "EnterRule",
    "ExitRule",
    "FontDescriptor",
    "ImageHandle",
    "Insertion",
    "MappingImageLoader",
    "MarkdownParser",
    "MarkupNode",
    "MarkupParseError",
    "MarkupParser",
    "MarkupResolver",
    "NodeType",
    "NumberCase",
    "NumberSpacing",
    "ResourceNotFoundError",
    "RuleTable",
    "RunKind",
    "SmallCaps",
    "SpecialCharacter",
    "StyleAttributeSet",
    "StyleRule",
    "StyledMarkupError",
    "StyledRun",
    "Tab",
    "Tracking",
    "__version__",
    "coalesce",
    "compose",
    "merge",
    "resolve",
    "styled",
]
