"""Palettes mapping iterated points to colors."""

from __future__ import annotations

import abc
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable

import matplotlib
import numpy as np

from .color import (
    BLACK,
    GREEN,
    RED,
    Color,
    as_color,
    from_unit_rgba,
    interpolate_color_arrays,
    interpolate_colors,
)
from .errors import InvalidGradientStop
from .grid import Grid
from .point import Point

LOW_SENTINEL = -0.01
HIGH_SENTINEL = 1.01


class ColorPalette(abc.ABC):
    """Base class for palettes calibrated against an iterated grid.

    ``max_iterations`` is the largest escape count among points outside the
    set. When no point escaped it is 0 and every ratio is taken as 0.

    Subclasses implement :meth:`_escaped_color`. Rendering goes through
    :meth:`color_array`, whose default calls that hook once per point;
    override :meth:`_escaped_color_array` with a vectorized version for speed.
    Overriding :meth:`color` alone does not change rendered images.
    """

    def __init__(self, grid: Grid, in_set_color: Color) -> None:
        self._in_set_color = as_color(in_set_color)
        self._max_iterations = grid.max_escape_iterations()

    @property
    def in_set_color(self) -> Color:
        return self._in_set_color

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @property
    def is_degenerate(self) -> bool:
        return self._max_iterations == 0

    def ratio(self, iteration_count: int) -> float:
        if self._max_iterations == 0:
            return 0.0
        return min(max(iteration_count / self._max_iterations, 0.0), 1.0)

    def ratio_array(self, iterations: np.ndarray) -> np.ndarray:
        iterations = np.asarray(iterations)
        if self._max_iterations == 0:
            return np.zeros(iterations.shape, dtype=np.float64)
        return np.clip(iterations / self._max_iterations, 0.0, 1.0)

    def color(self, point: Point) -> Color:
        if point.in_set:
            return self._in_set_color
        return self._escaped_color(self.ratio(point.iteration_count))

    def color_array(self, iterations: np.ndarray, in_set: np.ndarray) -> np.ndarray:
        """Colors for arrays of iteration counts and membership flags.

        Element for element this matches :meth:`color`.
        """

        iterations = np.asarray(iterations)
        in_set = np.asarray(in_set, dtype=bool)
        out = self._escaped_color_array(self.ratio_array(iterations))
        out[in_set] = self._in_set_color
        return out

    @abc.abstractmethod
    def _escaped_color(self, ratio: float) -> Color:
        ...

    def _escaped_color_array(self, ratios: np.ndarray) -> np.ndarray:
        ratios = np.asarray(ratios, dtype=np.float64)
        out = np.empty(ratios.shape + (4,), dtype=np.uint8)
        for index in np.ndindex(ratios.shape):
            out[index] = self._escaped_color(float(ratios[index]))
        return out


class LinearPalette(ColorPalette):
    """Two-color palette blended on the square root of the escape ratio."""

    def __init__(self, grid: Grid, low_color: Color, high_color: Color, in_set_color: Color) -> None:
        super().__init__(grid, in_set_color)
        self._low_color = as_color(low_color)
        self._high_color = as_color(high_color)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(low_color={self._low_color!r}, high_color={self._high_color!r}, "
            f"in_set_color={self._in_set_color!r}, max_iterations={self._max_iterations})"
        )

    @property
    def low_color(self) -> Color:
        return self._low_color

    @property
    def high_color(self) -> Color:
        return self._high_color

    def _escaped_color(self, ratio: float) -> Color:
        return interpolate_colors(self._low_color, self._high_color, ratio)

    def _escaped_color_array(self, ratios: np.ndarray) -> np.ndarray:
        return interpolate_color_arrays(self._low_color, self._high_color, ratios)


@dataclass(frozen=True)
class GradientStop:
    """A color reached at ``percent`` of the escape range."""

    percent: float
    color: Color


class MultiColorGradient(ColorPalette):
    """Piecewise gradient through an ordered list of stops.

    ``min_color`` and ``max_color`` are bound to sentinel stops just outside
    [0, 1], so every ratio has a stop on each side. Stops sharing a percent are
    kept in insertion order and the first one is used for coloring.
    """

    def __init__(
        self,
        grid: Grid,
        stops: Iterable[GradientStop],
        min_color: Color,
        max_color: Color,
        in_set_color: Color,
    ) -> None:
        super().__init__(grid, in_set_color)

        explicit = [GradientStop(float(stop.percent), as_color(stop.color)) for stop in stops]
        for stop in explicit:
            if not 0.0 <= stop.percent <= 1.0:
                raise InvalidGradientStop(f"stop percent must be within [0, 1], got {stop.percent!r}")

        explicit.append(GradientStop(LOW_SENTINEL, as_color(min_color)))
        explicit.append(GradientStop(HIGH_SENTINEL, as_color(max_color)))
        self._stops = tuple(sorted(explicit, key=lambda stop: stop.percent))

        effective: list[GradientStop] = []
        for stop in self._stops:
            if effective and effective[-1].percent == stop.percent:
                continue
            effective.append(stop)
        self._percents = [stop.percent for stop in effective]
        self._colors = [stop.color for stop in effective]
        self._percent_array = np.array(self._percents, dtype=np.float64)
        self._color_array = np.array(self._colors, dtype=np.float64)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(stops={self._stops!r}, in_set_color={self._in_set_color!r}, "
            f"max_iterations={self._max_iterations})"
        )

    @property
    def stops(self) -> tuple[GradientStop, ...]:
        return self._stops

    def bracket(self, ratio: float) -> tuple[int, int]:
        """Indices of the effective stops surrounding ``ratio``."""

        low = bisect_right(self._percents, ratio) - 1
        return low, low + 1

    def _escaped_color(self, ratio: float) -> Color:
        low, high = self.bracket(ratio)
        low_percent = self._percents[low]
        t = (ratio - low_percent) / (self._percents[high] - low_percent)
        return interpolate_colors(self._colors[high], self._colors[low], t)

    def _escaped_color_array(self, ratios: np.ndarray) -> np.ndarray:
        low = np.searchsorted(self._percent_array, ratios, side="right") - 1
        high = low + 1
        low_percent = self._percent_array[low]
        t = (ratios - low_percent) / (self._percent_array[high] - low_percent)
        return interpolate_color_arrays(self._color_array[high], self._color_array[low], t)


def colormap_stops(name: str, count: int, *, invert: bool = False) -> list[GradientStop]:
    """Sample a matplotlib colormap at ``count`` evenly spaced percents."""

    if count < 2:
        raise ValueError(f"count must be at least 2, got {count}")
    try:
        cmap = matplotlib.colormaps[name]
    except KeyError as exc:
        raise ValueError(f"unknown colormap {name!r}") from exc

    percents = np.linspace(0.0, 1.0, count)
    samples = cmap(1.0 - percents if invert else percents)
    return [GradientStop(float(p), from_unit_rgba(rgba)) for p, rgba in zip(percents, samples)]


def colormap_gradient(
    grid: Grid,
    name: str,
    count: int,
    in_set_color: Color = BLACK,
    *,
    invert: bool = False,
) -> MultiColorGradient:
    """Gradient palette following a matplotlib colormap."""

    stops = colormap_stops(name, count, invert=invert)
    return MultiColorGradient(grid, stops, stops[0].color, stops[-1].color, in_set_color)


def default_palette(grid: Grid) -> LinearPalette:
    """Green to red with black inside the set."""

    return LinearPalette(grid, GREEN, RED, BLACK)
