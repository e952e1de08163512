"""RGBA colors and the channel interpolation used by every palette."""

from __future__ import annotations

import math

import numpy as np
from matplotlib import colors as mpl_colors

Color = tuple[int, int, int, int]

BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)
RED: Color = (255, 0, 0, 255)
GREEN: Color = (0, 255, 0, 255)
BLUE: Color = (0, 0, 255, 255)


def rgba(r: int, g: int, b: int, a: int = 255) -> Color:
    """Build a color from 8-bit channel values."""

    channels = (r, g, b, a)
    for value in channels:
        if isinstance(value, bool) or int(value) != value or not 0 <= value <= 255:
            raise ValueError(f"channel values must be integers in [0, 255], got {channels!r}")
    return tuple(int(value) for value in channels)  # type: ignore[return-value]


def as_color(value) -> Color:
    """Check that ``value`` is an ``(r, g, b, a)`` sequence of bytes and return it as a tuple."""

    channels = tuple(value)
    if len(channels) != 4:
        raise ValueError(f"colors need four channels (r, g, b, a), got {channels!r}")
    return rgba(*channels)


def from_unit_rgba(values) -> Color:
    """Convert a matplotlib-style ``(r, g, b, a)`` tuple of floats in [0, 1] to bytes."""

    return tuple(int(round(float(np.clip(v, 0.0, 1.0)) * 255)) for v in values)  # type: ignore[return-value]


def parse_color(text: str) -> Color:
    """Parse ``#rrggbb``, ``#rrggbbaa`` or any color name matplotlib knows."""

    try:
        return from_unit_rgba(mpl_colors.to_rgba(text.strip()))
    except ValueError as exc:
        raise ValueError(f"invalid color {text!r}") from exc


def to_hex(color: Color) -> str:
    return "#" + "".join(f"{channel:02x}" for channel in color)


def interpolate_channel(a: int, b: int, p: float) -> int:
    """Blend two channel bytes.

    ``p`` is eased with a square root first. ``p = 0`` yields ``b`` and
    ``p = 1`` yields ``a``.
    """

    eased = math.sqrt(p)
    value = round(eased * float(a) + (1.0 - eased) * float(b))
    return min(max(value, 0), 255)


def interpolate_colors(first: Color, second: Color, p: float) -> Color:
    return tuple(interpolate_channel(a, b, p) for a, b in zip(first, second))  # type: ignore[return-value]


def interpolate_color_arrays(first: np.ndarray, second: np.ndarray, p: np.ndarray) -> np.ndarray:
    """Vectorized :func:`interpolate_colors`.

    ``first`` and ``second`` broadcast against ``p[..., None]``; the result has
    a trailing axis of four uint8 channels.
    """

    eased = np.sqrt(np.asarray(p, dtype=np.float64))[..., None]
    first = np.asarray(first, dtype=np.float64)
    second = np.asarray(second, dtype=np.float64)
    values = np.rint(eased * first + (1.0 - eased) * second)
    return np.clip(values, 0, 255).astype(np.uint8)
