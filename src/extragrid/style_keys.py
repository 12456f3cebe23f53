"""
Style vocabulary normalization.

The grid stores styles in a canonical CSS-like vocabulary. The interchange
format uses a spreadsheet vocabulary with several aliases per concept. This
module sanitizes canonical style records and maps them in both directions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from extragrid.utils import px_to_number, round_half_up, stringify_value, to_finite_number

MAX_STYLE_PROPERTIES = 200

CANONICAL_STYLE_KEYS: tuple[str, ...] = (
    "textAlign",
    "verticalAlign",
    "whiteSpace",
    "fontFamily",
    "fontSize",
    "color",
    "background",
    "fontWeight",
    "fontStyle",
    "textDecoration",
    "width",
    "height",
)

# Interchange aliases per concept, in precedence order (first present wins).
TEXT_ALIGN_ALIASES = ("textAlign", "hAlign")
VERTICAL_ALIGN_ALIASES = ("verticalAlign", "vAlign")
WRAP_ALIASES = ("wrap", "wordWrap", "wrapText")
COLOR_ALIASES = ("color", "fontColor", "foreColor")
BACKGROUND_ALIASES = ("background", "bgColor", "backColor", "backgroundColor", "fillColor")

Style = dict[str, str]


def sanitize_style(
    style: Any, max_properties: int = MAX_STYLE_PROPERTIES
) -> Style | None:
    """Normalize a style record for storage.

    Keys are trimmed and empty keys dropped, None values are skipped, other
    values are coerced to strings. At most ``max_properties`` entries are
    kept. An empty result is returned as None: absence and emptiness both
    mean "no override at this layer".
    """
    if not isinstance(style, Mapping):
        return None
    out: Style = {}
    for key, value in style.items():
        if len(out) >= max_properties:
            break
        if value is None:
            continue
        name = str(key).strip()
        if not name:
            continue
        out[name] = stringify_value(value)
    return out or None


def _present(value: Any) -> bool:
    return value is not None and value != "" and value is not False


def _first_present(style: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        value = style.get(alias)
        if _present(value):
            return value
    return None


def to_interchange_style(style: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Map a canonical style to the interchange vocabulary.

    Properties without an interchange counterpart (width, height) are
    dropped. Booleans are only ever emitted as ``True`` for bold, italic,
    underline and strike. Returns None when nothing maps.
    """
    if not isinstance(style, Mapping):
        return None
    out: dict[str, Any] = {}

    if _present(style.get("textAlign")):
        out["textAlign"] = str(style["textAlign"])

    if _present(style.get("verticalAlign")):
        vertical = str(style["verticalAlign"]).lower()
        out["verticalAlign"] = "center" if vertical == "middle" else vertical

    if _present(style.get("whiteSpace")):
        white_space = str(style["whiteSpace"]).lower()
        if white_space == "normal":
            out["wrap"] = True
        elif white_space == "nowrap":
            out["wrap"] = False

    if _present(style.get("fontFamily")):
        out["fontFamily"] = str(style["fontFamily"])

    font_size = style.get("fontSize")
    if font_size is not None and font_size != "":
        size = px_to_number(font_size)
        out["fontSize"] = size if size is not None else str(font_size)

    if _present(style.get("color")):
        out["color"] = str(style["color"])

    background = _first_present(style, ("background", "backgroundColor"))
    if background is not None:
        out["background"] = str(background)

    if _present(style.get("fontWeight")) and is_bold(style["fontWeight"]):
        out["bold"] = True

    if _present(style.get("fontStyle")) and str(style["fontStyle"]).lower() == "italic":
        out["italic"] = True

    if _present(style.get("textDecoration")):
        decoration = str(style["textDecoration"]).lower()
        if "underline" in decoration:
            out["underline"] = True
        if "line-through" in decoration:
            out["strike"] = True

    return out or None


def is_bold(weight: Any) -> bool:
    """Whether a CSS font weight is "bold" or a numeric weight of at least 600."""
    text = str(weight).strip().lower()
    if text == "bold":
        return True
    number = to_finite_number(text)
    return number is not None and number >= 600


def from_interchange_style(style: Any) -> Style | None:
    """Map an interchange style record (any alias) to the canonical vocabulary.

    When several aliases of one concept are present on the same record the
    first one in alias order wins. The boolean flags ``bold``/``italic`` take
    precedence over a canonical ``fontWeight``/``fontStyle`` on the same
    record. Returns None when nothing maps.
    """
    if not isinstance(style, Mapping):
        return None
    out: Style = {}

    text_align = _first_present(style, TEXT_ALIGN_ALIASES)
    if text_align is not None:
        out["textAlign"] = str(text_align)

    vertical = _first_present(style, VERTICAL_ALIGN_ALIASES)
    if vertical is not None:
        vertical = str(vertical).lower()
        out["verticalAlign"] = "middle" if vertical == "center" else vertical

    for alias in WRAP_ALIASES:
        wrap = style.get(alias)
        if isinstance(wrap, bool):
            out["whiteSpace"] = "normal" if wrap else "nowrap"
            break

    if _present(style.get("fontFamily")):
        out["fontFamily"] = str(style["fontFamily"])

    font_size = style.get("fontSize")
    if font_size is not None and font_size != "" and not isinstance(font_size, bool):
        number = to_finite_number(font_size)
        out["fontSize"] = f"{round_half_up(number)}px" if number is not None else str(font_size)

    color = _first_present(style, COLOR_ALIASES)
    if color is not None:
        out["color"] = str(color)

    background = _first_present(style, BACKGROUND_ALIASES)
    if background is not None:
        out["background"] = str(background)

    if style.get("bold") is True:
        out["fontWeight"] = "bold"
    elif _present(style.get("fontWeight")):
        out["fontWeight"] = str(style["fontWeight"])

    if style.get("italic") is True:
        out["fontStyle"] = "italic"
    elif _present(style.get("fontStyle")):
        out["fontStyle"] = str(style["fontStyle"])

    underline = style.get("underline") is True
    strike = style.get("strike") is True
    if underline and strike:
        out["textDecoration"] = "underline line-through"
    elif underline:
        out["textDecoration"] = "underline"
    elif strike:
        out["textDecoration"] = "line-through"
    elif _present(style.get("textDecoration")):
        out["textDecoration"] = str(style["textDecoration"])

    return out or None
