"""Public API for Mandelbrot grid iteration and coloring."""

from .color import BLACK, BLUE, GREEN, RED, WHITE, Color, interpolate_colors, parse_color, rgba
from .errors import GridNotIterated, IndexOutOfRange, InvalidDimension, InvalidGradientStop
from .grid import ENGINES, Grid, GridParameters
from .image import ImageRenderer, PixelBuffer
from .palette import (
    ColorPalette,
    GradientStop,
    LinearPalette,
    MultiColorGradient,
    colormap_gradient,
    colormap_stops,
    default_palette,
)
from .point import BAILOUT_SQUARED, DEFAULT_LIMITS, MAX_ITERATIONS, IterationLimits, Point, PointArena

__all__ = [
    "BAILOUT_SQUARED",
    "BLACK",
    "BLUE",
    "Color",
    "ColorPalette",
    "DEFAULT_LIMITS",
    "ENGINES",
    "GREEN",
    "GradientStop",
    "Grid",
    "GridNotIterated",
    "GridParameters",
    "ImageRenderer",
    "IndexOutOfRange",
    "InvalidDimension",
    "InvalidGradientStop",
    "IterationLimits",
    "LinearPalette",
    "MAX_ITERATIONS",
    "MultiColorGradient",
    "PixelBuffer",
    "Point",
    "PointArena",
    "RED",
    "WHITE",
    "colormap_gradient",
    "colormap_stops",
    "default_palette",
    "interpolate_colors",
    "parse_color",
    "rgba",
]
