"""Turn an iterated grid into an RGBA pixel buffer."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .color import Color
from .errors import GridNotIterated, IndexOutOfRange
from .grid import Grid
from .palette import ColorPalette


@dataclass(frozen=True)
class PixelBuffer:
    """Pixels addressed ``[col, row]`` in grid orientation.

    ``pixels`` has shape ``(width, height, 4)``; row 0 is the bottom of the
    sampled region.
    """

    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[1])

    def __getitem__(self, key: tuple[int, int]) -> Color:
        col, row = key
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexOutOfRange(f"pixel ({col}, {row}) outside buffer of {self.width}x{self.height}")
        return tuple(int(channel) for channel in self.pixels[col, row])  # type: ignore[return-value]

    def to_array(self) -> np.ndarray:
        """Return a ``(height, width, 4)`` array with the top row first."""

        return np.ascontiguousarray(np.flipud(self.pixels.transpose(1, 0, 2)))


class ImageRenderer:
    """Color every grid point with a palette."""

    def __init__(self, *, require_processed: bool = True) -> None:
        self.require_processed = require_processed

    def render(self, grid: Grid, palette: ColorPalette) -> PixelBuffer:
        if self.require_processed and not grid.is_processed:
            raise GridNotIterated("iterate_all() must finish before the grid is rendered")

        pixels = palette.color_array(grid.iteration_counts(), grid.membership())
        return PixelBuffer(pixels=pixels)
