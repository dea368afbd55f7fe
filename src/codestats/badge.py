"""SVG badge generation for codestats.

Generates a shields.io-style flat badge showing a user's level.
Pure functions, no side effects, no external dependencies.
"""

from __future__ import annotations

from html import escape

# (minimum level, hex color), highest first
_LEVEL_HEX: list[tuple[int, str]] = [
    (40, "dc2626"),
    (30, "7c3aed"),
    (20, "0891b2"),
    (10, "d97706"),
    (5, "6b7280"),
    (0, "b45309"),
]

_LABEL = "code::stats"
_LABEL_BG = "555555"
_FONT_SIZE = 11
_FONT_FAMILY = "DejaVu Sans,Verdana,Geneva,sans-serif"


def _text_width(text: str) -> int:
    """Estimate pixel width of text at 11px DejaVu Sans."""
    widths = {
        "f": 4, "i": 4, "j": 4, "l": 4, "r": 4, "t": 5,
        "m": 10, "w": 9, "W": 10, "M": 10,
        " ": 4, ".": 4, ",": 4, ":": 4, "/": 5,
    }
    return sum(widths.get(ch, 7) for ch in text)


def _badge_hex(level: int) -> str:
    for min_level, hex_color in _LEVEL_HEX:
        if level >= min_level:
            return hex_color
    return _LEVEL_HEX[-1][1]


def generate_badge_svg(
    username: str,
    level: int,
    total_xp: int = 0,
    percentage: float = 0.0,
) -> str:
    """Generate a shields.io flat-style SVG badge string.

    Layout: [code::stats | alice Lv.12]
    """
    value_text = f"{username} Lv.{level}"
    right_hex = _badge_hex(level)

    label_w = _text_width(_LABEL) + 20
    value_w = _text_width(value_text) + 20
    total_w = label_w + value_w
    height = 20

    label_cx = label_w // 2
    value_cx = label_w + value_w // 2

    tooltip = f"{username}: Level {level}"
    if total_xp > 0:
        tooltip += f" - {total_xp:,} XP"
    if percentage > 0:
        tooltip += f" ({percentage:.0%} to next)"

    value_text = escape(value_text)
    tooltip = escape(tooltip)

    return f'''<svg xmlns="http://www.w3.org/2000/svg" width="{total_w}" height="{height}" role="img" aria-label="{tooltip}">
  <title>{tooltip}</title>
  <linearGradient id="s" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <clipPath id="r">
    <rect width="{total_w}" height="{height}" rx="3" fill="#fff"/>
  </clipPath>
  <g clip-path="url(#r)">
    <rect width="{label_w}" height="{height}" fill="#{_LABEL_BG}"/>
    <rect x="{label_w}" width="{value_w}" height="{height}" fill="#{right_hex}"/>
    <rect width="{total_w}" height="{height}" fill="url(#s)"/>
  </g>
  <g fill="#fff" text-anchor="middle" font-family="{_FONT_FAMILY}" text-rendering="geometricPrecision" font-size="{_FONT_SIZE}">
    <text aria-hidden="true" x="{label_cx}.5" y="15" fill="#010101" fill-opacity=".3">{_LABEL}</text>
    <text x="{label_cx}.5" y="14">{_LABEL}</text>
    <text aria-hidden="true" x="{value_cx}.5" y="15" fill="#010101" fill-opacity=".3">{value_text}</text>
    <text x="{value_cx}.5" y="14">{value_text}</text>
  </g>
</svg>
'''
