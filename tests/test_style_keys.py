"""Tests for extragrid.style_keys module."""

from extragrid.style_keys import (
    MAX_STYLE_PROPERTIES,
    from_interchange_style,
    sanitize_style,
    to_interchange_style,
)


class TestSanitizeStyle:
    """Tests for style sanitization."""

    def test_trims_keys_and_stringifies_values(self) -> None:
        assert sanitize_style({" color ": "red", "fontSize": 12}) == {
            "color": "red",
            "fontSize": "12",
        }

    def test_drops_empty_keys_and_none_values(self) -> None:
        assert sanitize_style({"": "x", "  ": "y", "color": None, "a": "b"}) == {"a": "b"}

    def test_empty_is_absent(self) -> None:
        assert sanitize_style({}) is None
        assert sanitize_style({"color": None}) is None
        assert sanitize_style(None) is None
        assert sanitize_style("bold") is None

    def test_caps_property_count(self) -> None:
        style = {f"k{i}": str(i) for i in range(500)}
        result = sanitize_style(style)
        assert result is not None
        assert len(result) == MAX_STYLE_PROPERTIES


class TestToInterchange:
    """Tests for canonical -> interchange mapping."""

    def test_vertical_middle_becomes_center(self) -> None:
        assert to_interchange_style({"verticalAlign": "middle"}) == {"verticalAlign": "center"}
        assert to_interchange_style({"verticalAlign": "top"}) == {"verticalAlign": "top"}

    def test_white_space(self) -> None:
        assert to_interchange_style({"whiteSpace": "normal"}) == {"wrap": True}
        assert to_interchange_style({"whiteSpace": "nowrap"}) == {"wrap": False}
        assert to_interchange_style({"whiteSpace": "pre"}) is None

    def test_font_weight(self) -> None:
        assert to_interchange_style({"fontWeight": "bold"}) == {"bold": True}
        assert to_interchange_style({"fontWeight": "700"}) == {"bold": True}
        assert to_interchange_style({"fontWeight": "600"}) == {"bold": True}
        assert to_interchange_style({"fontWeight": "400"}) is None
        assert to_interchange_style({"fontWeight": "normal"}) is None

    def test_italic_and_decoration(self) -> None:
        assert to_interchange_style({"fontStyle": "italic"}) == {"italic": True}
        assert to_interchange_style({"textDecoration": "underline line-through"}) == {
            "underline": True,
            "strike": True,
        }

    def test_font_size_is_numeric(self) -> None:
        assert to_interchange_style({"fontSize": "12px"}) == {"fontSize": 12}
        assert to_interchange_style({"fontSize": "12"}) == {"fontSize": 12}
        assert to_interchange_style({"fontSize": 12}) == {"fontSize": 12}
        assert to_interchange_style({"fontSize": "large"}) == {"fontSize": "large"}

    def test_sizing_keys_are_not_mapped(self) -> None:
        assert to_interchange_style({"width": "100px", "height": "20px"}) is None

    def test_passthrough_keys(self) -> None:
        style = {
            "textAlign": "right",
            "fontFamily": "Arial",
            "color": "#ff0000",
            "background": "#00ff00",
        }
        assert to_interchange_style(style) == style


class TestFromInterchange:
    """Tests for interchange -> canonical mapping."""

    def test_aliases(self) -> None:
        assert from_interchange_style({"hAlign": "left"}) == {"textAlign": "left"}
        assert from_interchange_style({"vAlign": "CENTER"}) == {"verticalAlign": "middle"}
        assert from_interchange_style({"fontColor": "red"}) == {"color": "red"}
        assert from_interchange_style({"fillColor": "#eee"}) == {"background": "#eee"}

    def test_first_alias_wins(self) -> None:
        assert from_interchange_style({"textAlign": "left", "hAlign": "right"}) == {
            "textAlign": "left"
        }
        assert from_interchange_style({"color": "red", "foreColor": "blue"}) == {
            "color": "red"
        }
        assert from_interchange_style({"bgColor": "#111", "backgroundColor": "#222"}) == {
            "background": "#111"
        }

    def test_wrap(self) -> None:
        assert from_interchange_style({"wrapText": True}) == {"whiteSpace": "normal"}
        assert from_interchange_style({"wordWrap": False}) == {"whiteSpace": "nowrap"}
        assert from_interchange_style({"wrap": "yes"}) is None

    def test_flags(self) -> None:
        assert from_interchange_style({"bold": True, "italic": True}) == {
            "fontWeight": "bold",
            "fontStyle": "italic",
        }
        assert from_interchange_style({"bold": False}) is None

    def test_decoration(self) -> None:
        assert from_interchange_style({"underline": True}) == {"textDecoration": "underline"}
        assert from_interchange_style({"strike": True}) == {"textDecoration": "line-through"}
        assert from_interchange_style({"underline": True, "strike": True}) == {
            "textDecoration": "underline line-through"
        }

    def test_font_size(self) -> None:
        assert from_interchange_style({"fontSize": 11}) == {"fontSize": "11px"}
        assert from_interchange_style({"fontSize": "14.5"}) == {"fontSize": "15px"}
        assert from_interchange_style({"fontSize": "big"}) == {"fontSize": "big"}

    def test_unknown_keys_are_ignored(self) -> None:
        assert from_interchange_style({"index": 0, "value": "x"}) is None
        assert from_interchange_style(None) is None

    def test_roundtrip_of_supported_properties(self) -> None:
        style = {
            "textAlign": "center",
            "verticalAlign": "middle",
            "whiteSpace": "normal",
            "fontFamily": "Arial",
            "fontSize": "12px",
            "color": "#333333",
            "background": "#ffffff",
            "fontWeight": "bold",
            "fontStyle": "italic",
            "textDecoration": "underline",
        }
        assert from_interchange_style(to_interchange_style(style)) == style
