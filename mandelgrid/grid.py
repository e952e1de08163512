"""Rectangular grids of points and the parallel iteration pass."""

from __future__ import annotations

import math
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from .errors import IndexOutOfRange, InvalidDimension
from .point import DEFAULT_LIMITS, IterationLimits, Point, PointArena

ENGINES = ("tensorflow", "python")

# Ranges handed to each worker when no chunk size is given.
CHUNKS_PER_WORKER = 4


@dataclass(frozen=True)
class GridParameters:
    """Construction parameters for a grid of samples."""

    center_real: float
    center_imag: float
    width: int
    height: int
    pixel_pitch: float

    @property
    def center(self) -> complex:
        return complex(self.center_real, self.center_imag)

    def validate(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidDimension(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidDimension(f"{name} must be positive, got {value}")
        try:
            pitch = float(self.pixel_pitch)
        except (TypeError, ValueError) as exc:
            raise InvalidDimension(f"pixel_pitch must be a real number, got {self.pixel_pitch!r}") from exc
        if not math.isfinite(pitch) or pitch <= 0.0:
            raise InvalidDimension(f"pixel_pitch must be positive and finite, got {self.pixel_pitch!r}")


def partition(count: int, chunk_size: int) -> list[tuple[int, int]]:
    """Split ``range(count)`` into consecutive ``(start, stop)`` ranges."""

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [(start, min(start + chunk_size, count)) for start in range(0, count, chunk_size)]


def default_workers() -> int:
    return os.cpu_count() or 1


class Grid:
    """A ``width`` x ``height`` block of points centered on ``center``.

    Points are stored column-major: ``point_at(0, 0)`` is the bottom-left
    sample, the column index moves right and the row index moves up.
    """

    def __init__(
        self,
        center: complex,
        width: int,
        height: int,
        pixel_pitch: float,
        *,
        limits: IterationLimits = DEFAULT_LIMITS,
    ) -> None:
        center = complex(center)
        params = GridParameters(center.real, center.imag, width, height, pixel_pitch)
        params.validate()

        self._params = params
        self._center = center
        self._width = int(width)
        self._height = int(height)
        self._pixel_pitch = float(pixel_pitch)

        half_width = 0.5 * self._pixel_pitch * self._width
        half_height = 0.5 * self._pixel_pitch * self._height
        self._bottom_left = center - complex(half_width, half_height)

        xs = self._bottom_left.real + np.arange(self._width, dtype=np.float64) * self._pixel_pitch
        ys = self._bottom_left.imag + np.arange(self._height, dtype=np.float64) * self._pixel_pitch
        self._arena = PointArena(np.repeat(xs, self._height), np.tile(ys, self._width), limits)

    @classmethod
    def from_parameters(cls, params: GridParameters, *, limits: IterationLimits = DEFAULT_LIMITS) -> Grid:
        params.validate()
        return cls(params.center, params.width, params.height, params.pixel_pitch, limits=limits)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(center={self._center!r}, width={self._width}, "
            f"height={self._height}, pixel_pitch={self._pixel_pitch!r})"
        )

    def __len__(self) -> int:
        return self._width * self._height

    def __iter__(self) -> Iterator[Point]:
        arena = self._arena
        for index in range(len(self)):
            yield arena.point(index)

    @property
    def parameters(self) -> GridParameters:
        return self._params

    @property
    def center(self) -> complex:
        return self._center

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixel_pitch(self) -> float:
        return self._pixel_pitch

    @property
    def bottom_left(self) -> complex:
        return self._bottom_left

    @property
    def limits(self) -> IterationLimits:
        return self._arena.limits

    @property
    def arena(self) -> PointArena:
        return self._arena

    def index_of(self, col: int, row: int) -> int:
        if not (0 <= col < self._width and 0 <= row < self._height):
            raise IndexOutOfRange(
                f"point ({col}, {row}) outside grid of {self._width}x{self._height}"
            )
        return col * self._height + row

    def point_at(self, col: int, row: int) -> Point:
        return self._arena.point(self.index_of(col, row))

    def columns(self) -> list[list[Point]]:
        """Return the points as ``columns[col][row]``."""

        arena = self._arena
        height = self._height
        return [
            [arena.point(col * height + row) for row in range(height)]
            for col in range(self._width)
        ]

    @property
    def is_processed(self) -> bool:
        return bool(np.all(self._arena.processed))

    def iteration_counts(self) -> np.ndarray:
        return self._arena.iterations.reshape(self._width, self._height)

    def membership(self) -> np.ndarray:
        return self._arena.in_set.reshape(self._width, self._height)

    def max_escape_iterations(self) -> int:
        """Largest iteration count among points that escaped, or 0 if none did."""

        escaped = self._arena.iterations[~self._arena.in_set]
        if escaped.size == 0:
            return 0
        return int(escaped.max())

    def iterate_all(
        self,
        *,
        workers: Optional[int] = None,
        chunk_size: Optional[int] = None,
        engine: str = "tensorflow",
        device: Optional[str] = None,
    ) -> None:
        """Determine membership of every point, blocking until all are done.

        The arena is split into disjoint index ranges that run on a thread
        pool. Points already processed are left untouched.
        """

        if engine not in ENGINES:
            raise ValueError(f"unknown engine {engine!r}; choose from {', '.join(ENGINES)}")

        if workers is None:
            workers = default_workers()
        if workers <= 0:
            raise ValueError(f"workers must be positive, got {workers}")
        if chunk_size is None:
            chunk_size = max(1, math.ceil(len(self) / (workers * CHUNKS_PER_WORKER)))

        if engine == "tensorflow":
            def task(bounds):
                self._iterate_range_tensorflow(*bounds, device=device)
        else:
            def task(bounds):
                self._iterate_range_python(*bounds)

        ranges = partition(len(self), chunk_size)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(task, bounds) for bounds in ranges]
            for future in futures:
                future.result()

    def _iterate_range_python(self, start: int, stop: int) -> None:
        arena = self._arena
        for index in range(start, stop):
            arena.point(index).determine_membership()

    def _iterate_range_tensorflow(self, start: int, stop: int, *, device: Optional[str] = None) -> None:
        from .kernel import escape

        arena = self._arena
        pending = np.flatnonzero(~arena.processed[start:stop]) + start
        if pending.size == 0:
            return

        result = escape(
            arena.real[pending],
            arena.imag[pending],
            arena.z_real[pending],
            arena.z_imag[pending],
            arena.limits,
            device=device,
        )
        arena.z_real[pending] = result.z_real
        arena.z_imag[pending] = result.z_imag
        arena.iterations[pending] += result.steps
        arena.in_set[pending] = result.in_set
        arena.processed[pending] = True
