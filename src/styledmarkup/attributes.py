"""Immutable style attribute sets and their merge operation.

A :class:`StyleAttributeSet` is an ordered, read-only mapping from attribute
name to a typed value.  Sets are never mutated: :func:`merge` and
:meth:`StyleAttributeSet.derive` return new sets in which the overriding side
wins key by key, so cascading a parent style into a child is a single call.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Optional


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FontDescriptor:
    """Font requested by name and point size; resolved by the host renderer."""

    name: str
    size_pt: float = 12.0

    def derive(self, **overrides: Any) -> FontDescriptor:
        """Return a copy with selected fields overridden."""
        return replace(self, **overrides)


class TrackingUnit(Enum):
    POINT = "point"
    ADOBE = "adobe"  # 1/1000 em


@dataclass(frozen=True)
class Tracking:
    """Inter-character spacing, either absolute or relative to the font size."""

    value: float
    unit: TrackingUnit = TrackingUnit.POINT

    @classmethod
    def point(cls, value: float) -> Tracking:
        return cls(float(value), TrackingUnit.POINT)

    @classmethod
    def adobe(cls, value: float) -> Tracking:
        return cls(float(value), TrackingUnit.ADOBE)

    def points(self, font_size_pt: float) -> float:
        """Return the tracking in points for a font of *font_size_pt*."""
        if self.unit is TrackingUnit.ADOBE:
            return self.value * font_size_pt / 1000.0
        return self.value


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFIED = "justified"
    NATURAL = "natural"


class SmallCaps(Enum):
    FROM_LOWERCASE = "from_lowercase"
    FROM_UPPERCASE = "from_uppercase"


class NumberCase(Enum):
    UPPER = "upper"  # lining figures
    LOWER = "lower"  # old-style figures


class NumberSpacing(Enum):
    MONOSPACED = "monospaced"
    PROPORTIONAL = "proportional"


EXTRA_ATTRIBUTES = "extra_attributes"

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


# ---------------------------------------------------------------------------
# Coercion / encoding per attribute
# ---------------------------------------------------------------------------

def _coerce_color(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"Color value out of range: {value:#x}")
        return f"#{value:06x}"
    if isinstance(value, str) and _COLOR_RE.match(value):
        return value.lower()
    raise ValueError(
        f"Invalid color {value!r}; expected '#rrggbb', '#rrggbbaa' or an int"
    )


def _coerce_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number, got {value!r}")
    return float(value)


def _coerce_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected a bool, got {value!r}")
    return value


def _enum_coercer(enum_cls: type[Enum]) -> Callable[[Any], Enum]:
    def coerce(value: Any) -> Enum:
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(value)
        except ValueError:
            choices = ", ".join(str(m.value) for m in enum_cls)
            raise ValueError(
                f"Invalid {enum_cls.__name__} {value!r}. Choose from: {choices}"
            ) from None

    return coerce


def _coerce_font(value: Any) -> FontDescriptor:
    if isinstance(value, FontDescriptor):
        return value
    if isinstance(value, Mapping) and "name" in value:
        return FontDescriptor(
            name=str(value["name"]),
            size_pt=_coerce_float(value.get("size", 12.0)),
        )
    raise ValueError(f"Invalid font {value!r}; expected FontDescriptor or {{'name', 'size'}}")


def _coerce_tracking(value: Any) -> Tracking:
    if isinstance(value, Tracking):
        return value
    if isinstance(value, Mapping) and len(value) == 1:
        (unit, amount), = value.items()
        try:
            return Tracking(_coerce_float(amount), TrackingUnit(unit))
        except ValueError:
            pass
    raise ValueError(f"Invalid tracking {value!r}; expected {{'point': n}} or {{'adobe': n}}")


def _coerce_alternates(value: Any) -> frozenset[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        value = (value,)
    if not isinstance(value, Iterable) or isinstance(value, (str, bytes)):
        raise ValueError(f"Invalid stylistic alternates {value!r}")
    sets = frozenset(value)
    for number in sets:
        if isinstance(number, bool) or not isinstance(number, int) or not 1 <= number <= 20:
            raise ValueError(f"Stylistic set must be an int in 1..20, got {number!r}")
    return sets


def _coerce_extra(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"extra_attributes must be a mapping, got {value!r}")
    return MappingProxyType({str(k): v for k, v in value.items()})


def _identity(value: Any) -> Any:
    return value


def _encode_enum(value: Enum) -> str:
    return value.value


_ATTRIBUTES: dict[str, tuple[Callable[[Any], Any], Callable[[Any], Any]]] = {
    "font": (_coerce_font, lambda f: {"name": f.name, "size": f.size_pt}),
    "color": (_coerce_color, _identity),
    "background_color": (_coerce_color, _identity),
    "tracking": (_coerce_tracking, lambda t: {t.unit.value: t.value}),
    "line_spacing": (_coerce_float, _identity),
    "line_height_multiple": (_coerce_float, _identity),
    "paragraph_spacing_after": (_coerce_float, _identity),
    "baseline_offset": (_coerce_float, _identity),
    "head_indent": (_coerce_float, _identity),
    "alignment": (_enum_coercer(Alignment), _encode_enum),
    "small_caps": (_enum_coercer(SmallCaps), _encode_enum),
    "number_case": (_enum_coercer(NumberCase), _encode_enum),
    "number_spacing": (_enum_coercer(NumberSpacing), _encode_enum),
    "ordinals": (_coerce_bool, _identity),
    "scientific_inferiors": (_coerce_bool, _identity),
    "stylistic_alternates": (_coerce_alternates, sorted),
    EXTRA_ATTRIBUTES: (_coerce_extra, dict),
}

ATTRIBUTE_NAMES: tuple[str, ...] = tuple(_ATTRIBUTES)


def _coerce(key: str, value: Any) -> Any:
    try:
        coerce, _ = _ATTRIBUTES[key]
    except KeyError:
        raise ValueError(
            f"Unknown style attribute {key!r}. Use {EXTRA_ATTRIBUTES!r} for "
            f"custom metadata; known attributes: {', '.join(ATTRIBUTE_NAMES)}"
        ) from None
    return coerce(value)


# ---------------------------------------------------------------------------
# StyleAttributeSet
# ---------------------------------------------------------------------------

class StyleAttributeSet(Mapping[str, Any]):
    """Read-only, ordered bag of typed style attributes.

    Usage::

        accent = StyleAttributeSet(font=FontDescriptor("Clarendon", 18))
        red = accent.derive(color="#ffffff", background_color="#ec594d")
        merged = merge(base, red)

    ``None`` values are treated as "unset" and dropped.
    """

    __slots__ = ("_attrs",)

    def __init__(
        self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> None:
        attrs: dict[str, Any] = {}
        for source in (attributes or {}, kwargs):
            for key, value in source.items():
                if value is None:
                    continue
                attrs[key] = _coerce(key, value)
        self._attrs = attrs

    @classmethod
    def _from_trusted(cls, attrs: dict[str, Any]) -> StyleAttributeSet:
        instance = cls.__new__(cls)
        instance._attrs = attrs
        return instance

    # -- Mapping protocol ---------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self._attrs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attrs)

    def __len__(self) -> int:
        return len(self._attrs)

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._attrs.items())
        return f"StyleAttributeSet({body})"

    def __hash__(self) -> int:
        # extra_attributes may hold unhashable values; equal sets still hash equal.
        return hash(frozenset(
            (key, value) for key, value in self._attrs.items() if key != EXTRA_ATTRIBUTES
        ))

    # -- merging ------------------------------------------------------------

    def merge(self, overrides: Mapping[str, Any]) -> StyleAttributeSet:
        """Return a new set with *overrides* applied on top of this one."""
        if not isinstance(overrides, StyleAttributeSet):
            overrides = StyleAttributeSet(overrides)
        if not overrides:
            return self
        if not self:
            return overrides
        merged = dict(self._attrs)
        for key, value in overrides._attrs.items():
            if key == EXTRA_ATTRIBUTES and key in merged:
                value = MappingProxyType({**merged[key], **value})
            merged[key] = value
        return StyleAttributeSet._from_trusted(merged)

    def derive(self, **attributes: Any) -> StyleAttributeSet:
        """Return a copy with the given attributes added or overridden."""
        return self.merge(StyleAttributeSet(**attributes))

    # -- convenience accessors ----------------------------------------------

    @property
    def font(self) -> Optional[FontDescriptor]:
        return self._attrs.get("font")

    @property
    def extra_attributes(self) -> Mapping[str, Any]:
        return self._attrs.get(EXTRA_ATTRIBUTES, MappingProxyType({}))

    # -- (de)serialisation ----------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation."""
        return {key: _ATTRIBUTES[key][1](value) for key, value in self._attrs.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> StyleAttributeSet:
        """Build a set from the output of :meth:`to_dict` (or a config file)."""
        return cls(data or {})


EMPTY_STYLE = StyleAttributeSet()


def merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> StyleAttributeSet:
    """Right-biased merge: keys in *overrides* win, unset keys inherit *base*."""
    if not isinstance(base, StyleAttributeSet):
        base = StyleAttributeSet(base)
    return base.merge(overrides)
