"""
Deterministic series colours.

Runs of the same line share a base colour (picked from the palette by line
name, or given by the line's `base_color`); each run then gets a small hue,
saturation and lightness shift derived from its series id.
"""

import re
import colorsys

from marey.const import PALETTE

HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{6})$")

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
U32_MASK = 0xFFFFFFFF


def fnv1a(text: str) -> int:
    """
    32-bit FNV-1a over the UTF-16 code units of `text`, as an unsigned int.
    """

    data = text.encode("utf-16-be")
    h = FNV_OFFSET_BASIS

    for i in range(0, len(data), 2):
        h ^= (data[i] << 8) | data[i + 1]
        h = (h * FNV_PRIME) & U32_MASK

    return h


def _signed(h: int) -> int:
    return h - (1 << 32) if h >= (1 << 31) else h


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def base_color_for_group(group: str) -> str:
    return PALETTE[abs(_signed(fnv1a(group))) % len(PALETTE)]


def _variation(series_id: str) -> tuple[float, float, float]:
    h = fnv1a(series_id)

    a = abs(_signed(h))
    b = h >> 1
    c = h >> 2

    # hue: +-10 degrees
    dh = ((a % 21) - 10) / 360
    # saturation: +-0.10
    ds = ((b % 21) - 10) * 0.01
    # lightness: +-0.12
    dl = ((c % 25) - 12) * 0.01

    return (dh, ds, dl)


def _hex_to_hls(color: str) -> tuple[float, float, float]:
    match = HEX_COLOR_RE.match(color)
    if match is None:
        return (0.0, 0.5, 0.0)

    value = int(match[1], 16)
    r = ((value >> 16) & 0xFF) / 255
    g = ((value >> 8) & 0xFF) / 255
    b = (value & 0xFF) / 255

    return colorsys.rgb_to_hls(r, g, b)


def _to_hex(r: float, g: float, b: float) -> str:
    def channel(x: float) -> str:
        return f"{int(x * 255 + 0.5):02x}"

    return f"#{channel(r)}{channel(g)}{channel(b)}"


def color_for(series_id: str, group: str | None = None, base: str | None = None) -> str:
    """
    Colour of a series, stable across calls and processes.
    """

    base_hex = base if base is not None else base_color_for_group(group or series_id)
    dh, ds, dl = _variation(series_id)
    h, l, s = _hex_to_hls(base_hex)

    h2 = (h + dh) % 1.0
    l2 = _clamp01(l + dl)
    s2 = _clamp01(s + ds)

    return _to_hex(*colorsys.hls_to_rgb(h2, l2, s2))
