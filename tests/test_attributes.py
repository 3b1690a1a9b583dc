"""Tests for style attribute sets and merging."""

from __future__ import annotations

import pytest

from styledmarkup.attributes import (
    EMPTY_STYLE,
    Alignment,
    FontDescriptor,
    NumberCase,
    SmallCaps,
    StyleAttributeSet,
    Tracking,
    TrackingUnit,
    merge,
)


@pytest.fixture
def base() -> StyleAttributeSet:
    return StyleAttributeSet(
        font=FontDescriptor("GillSans-Light", 18),
        color="#555555",
        line_height_multiple=1.8,
    )


class TestConstruction:
    def test_keyword_attributes(self, base: StyleAttributeSet) -> None:
        assert base["font"] == FontDescriptor("GillSans-Light", 18)
        assert base["color"] == "#555555"
        assert base.font.size_pt == 18

    def test_int_color_normalised(self) -> None:
        style = StyleAttributeSet(color=0x2769DD)
        assert style["color"] == "#2769dd"

    def test_color_lowercased(self) -> None:
        assert StyleAttributeSet(color="#EC594D")["color"] == "#ec594d"

    def test_invalid_color_rejected(self) -> None:
        with pytest.raises(ValueError):
            StyleAttributeSet(color="red")

    def test_unknown_attribute_rejected(self) -> None:
        with pytest.raises(ValueError, match="extra_attributes"):
            StyleAttributeSet(storyboard="Catalog")

    def test_none_means_unset(self) -> None:
        style = StyleAttributeSet(color=None, ordinals=True)
        assert "color" not in style
        assert len(style) == 1

    def test_enum_from_string(self) -> None:
        style = StyleAttributeSet(alignment="center", number_case="lower")
        assert style["alignment"] is Alignment.CENTER
        assert style["number_case"] is NumberCase.LOWER

    def test_invalid_enum_rejected(self) -> None:
        with pytest.raises(ValueError, match="SmallCaps"):
            StyleAttributeSet(small_caps="sometimes")

    def test_bool_attribute_requires_bool(self) -> None:
        with pytest.raises(ValueError):
            StyleAttributeSet(ordinals=1)

    def test_stylistic_alternates_range(self) -> None:
        assert StyleAttributeSet(stylistic_alternates={6})["stylistic_alternates"] == frozenset({6})
        with pytest.raises(ValueError):
            StyleAttributeSet(stylistic_alternates={21})

    def test_is_immutable(self, base: StyleAttributeSet) -> None:
        with pytest.raises(TypeError):
            base["color"] = "#000000"  # type: ignore[index]
        with pytest.raises(AttributeError):
            base.color = "#000000"  # type: ignore[attr-defined]

    def test_extra_attributes_are_read_only(self) -> None:
        style = StyleAttributeSet(extra_attributes={"Storyboard": "Catalog"})
        with pytest.raises(TypeError):
            style.extra_attributes["Storyboard"] = "Other"  # type: ignore[index]


class TestMerge:
    def test_overrides_win(self, base: StyleAttributeSet) -> None:
        merged = merge(base, StyleAttributeSet(color="#ffffff"))
        assert merged["color"] == "#ffffff"
        assert merged["font"] == base["font"]

    def test_base_unchanged(self, base: StyleAttributeSet) -> None:
        merge(base, StyleAttributeSet(color="#ffffff"))
        assert base["color"] == "#555555"

    def test_key_order_preserved(self, base: StyleAttributeSet) -> None:
        merged = base.merge(StyleAttributeSet(ordinals=True, color="#000000"))
        assert list(merged) == ["font", "color", "line_height_multiple", "ordinals"]

    def test_right_biased_idempotence(self, base: StyleAttributeSet) -> None:
        b = StyleAttributeSet(color="#ffffff", background_color="#000000")
        assert merge(base, merge(base, b)) == merge(base, b)

    def test_associative(self, base: StyleAttributeSet) -> None:
        b = StyleAttributeSet(color="#ffffff", extra_attributes={"a": 1})
        c = StyleAttributeSet(color="#000000", ordinals=True, extra_attributes={"b": 2})
        assert merge(merge(base, b), c) == merge(base, merge(b, c))

    def test_extra_attributes_merge_per_key(self) -> None:
        a = StyleAttributeSet(extra_attributes={"Storyboard": "A", "keep": True})
        b = StyleAttributeSet(extra_attributes={"Storyboard": "B"})
        merged = a.merge(b)
        assert dict(merged.extra_attributes) == {"Storyboard": "B", "keep": True}

    def test_empty_merges_are_identity(self, base: StyleAttributeSet) -> None:
        assert base.merge(EMPTY_STYLE) is base
        assert EMPTY_STYLE.merge(base) is base

    def test_merge_accepts_plain_mapping(self, base: StyleAttributeSet) -> None:
        assert base.merge({"color": "#111111"})["color"] == "#111111"

    def test_derive(self, base: StyleAttributeSet) -> None:
        derived = base.derive(small_caps=SmallCaps.FROM_LOWERCASE)
        assert derived["small_caps"] is SmallCaps.FROM_LOWERCASE
        assert derived["color"] == "#555555"
        assert "small_caps" not in base


class TestTracking:
    def test_point_tracking(self) -> None:
        assert Tracking.point(6).points(16) == 6

    def test_adobe_tracking_scales_with_font(self) -> None:
        tracking = Tracking.adobe(-80)
        assert tracking.unit is TrackingUnit.ADOBE
        assert tracking.points(64) == pytest.approx(-5.12)


class TestSerialisation:
    def test_to_dict(self) -> None:
        style = StyleAttributeSet(
            font=FontDescriptor("EBGaramond12-Regular", 24),
            tracking=Tracking.adobe(-80),
            number_case=NumberCase.UPPER,
            stylistic_alternates={6, 2},
        )
        assert style.to_dict() == {
            "font": {"name": "EBGaramond12-Regular", "size": 24.0},
            "tracking": {"adobe": -80.0},
            "number_case": "upper",
            "stylistic_alternates": [2, 6],
        }

    def test_from_dict_restores_set(self) -> None:
        style = StyleAttributeSet(
            font=FontDescriptor("Menlo-Regular", 16),
            background_color="#0000ff1a",
            baseline_offset=-4,
            extra_attributes={"Storyboard": "Catalog"},
        )
        assert StyleAttributeSet.from_dict(style.to_dict()) == style

    def test_from_dict_rejects_bad_tracking(self) -> None:
        with pytest.raises(ValueError):
            StyleAttributeSet.from_dict({"tracking": {"furlong": 3}})


class TestHashing:
    def test_equal_sets_hash_equal(self) -> None:
        a = StyleAttributeSet(color="#ff0000", extra_attributes={"tags": ["x"]})
        b = StyleAttributeSet(color="#FF0000", extra_attributes={"tags": ["x"]})
        assert a == b
        assert hash(a) == hash(b)

    def test_usable_as_dict_key(self) -> None:
        cache = {StyleAttributeSet(ordinals=True): "ordinal"}
        assert cache[StyleAttributeSet(ordinals=True)] == "ordinal"
