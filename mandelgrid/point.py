"""Single-point state for the Mandelbrot recurrence."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

MAX_ITERATIONS = 10000
BAILOUT_SQUARED = 4.0


@dataclass(frozen=True)
class IterationLimits:
    """Iteration cap and squared bailout radius shared by every point."""

    max_iterations: int = MAX_ITERATIONS
    bailout_squared: float = BAILOUT_SQUARED

    def __post_init__(self) -> None:
        if int(self.max_iterations) != self.max_iterations or self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        if not self.bailout_squared > 0.0:
            raise ValueError(f"bailout_squared must be positive, got {self.bailout_squared!r}")


DEFAULT_LIMITS = IterationLimits()


def step(zr: float, zi: float, cr: float, ci: float) -> tuple[float, float]:
    """Return ``Z**2 + C`` computed on the real and imaginary parts."""

    return zr * zr - zi * zi + cr, 2.0 * zr * zi + ci


class PointArena:
    """Flat storage for a collection of points.

    Every field lives in its own numpy array so that a grid can hand disjoint
    index ranges to different workers without any of them touching the same
    memory.
    """

    def __init__(self, real: np.ndarray, imag: np.ndarray, limits: IterationLimits = DEFAULT_LIMITS) -> None:
        real = np.ascontiguousarray(real, dtype=np.float64).reshape(-1)
        imag = np.ascontiguousarray(imag, dtype=np.float64).reshape(-1)
        if real.shape != imag.shape:
            raise ValueError("real and imag must have the same number of elements")

        self.limits = limits
        self.real = real
        self.imag = imag
        self.z_real = np.zeros_like(real)
        self.z_imag = np.zeros_like(real)
        self.iterations = np.zeros(real.shape, dtype=np.int64)
        self.in_set = np.zeros(real.shape, dtype=bool)
        self.processed = np.zeros(real.shape, dtype=bool)

    def __len__(self) -> int:
        return self.real.shape[0]

    def point(self, index: int) -> Point:
        return Point._bind(self, index)


class Point:
    """A complex coordinate tracked through ``Z <- Z**2 + C``."""

    __slots__ = ("_arena", "_index")

    def __init__(self, real: float, imag: float, *, limits: IterationLimits = DEFAULT_LIMITS) -> None:
        self._arena = PointArena(np.array([real]), np.array([imag]), limits)
        self._index = 0

    @classmethod
    def _bind(cls, arena: PointArena, index: int) -> Point:
        point = cls.__new__(cls)
        point._arena = arena
        point._index = index
        return point

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(location={self.location!r}, current={self.current!r}, "
            f"iteration_count={self.iteration_count}, in_set={self.in_set}, processed={self.processed})"
        )

    @property
    def limits(self) -> IterationLimits:
        return self._arena.limits

    @property
    def location(self) -> complex:
        i = self._index
        return complex(self._arena.real[i], self._arena.imag[i])

    @property
    def current(self) -> complex:
        i = self._index
        return complex(self._arena.z_real[i], self._arena.z_imag[i])

    @property
    def iteration_count(self) -> int:
        return int(self._arena.iterations[self._index])

    @property
    def in_set(self) -> bool:
        return bool(self._arena.in_set[self._index])

    @property
    def processed(self) -> bool:
        return bool(self._arena.processed[self._index])

    @property
    def squared_modulus(self) -> float:
        i = self._index
        zr = float(self._arena.z_real[i])
        zi = float(self._arena.z_imag[i])
        return zr * zr + zi * zi

    def iterate(self) -> None:
        """Advance the point by one step of the recurrence.

        A processed point is final and is left unchanged.
        """

        arena, i = self._arena, self._index
        if arena.processed[i]:
            return
        zr, zi = step(
            float(arena.z_real[i]),
            float(arena.z_imag[i]),
            float(arena.real[i]),
            float(arena.imag[i]),
        )
        arena.z_real[i] = zr
        arena.z_imag[i] = zi
        arena.iterations[i] += 1

    def determine_membership(self) -> bool:
        """Iterate until bailout or the cap and return whether the point is in the set.

        Calling this again on a processed point returns the cached result
        without iterating further.
        """

        arena, i = self._arena, self._index
        if arena.processed[i]:
            return bool(arena.in_set[i])

        max_iterations = arena.limits.max_iterations
        bailout = arena.limits.bailout_squared
        cr = float(arena.real[i])
        ci = float(arena.imag[i])
        zr = float(arena.z_real[i])
        zi = float(arena.z_imag[i])

        steps = 0
        while steps < max_iterations and zr * zr + zi * zi < bailout:
            zr, zi = step(zr, zi, cr, ci)
            steps += 1

        arena.z_real[i] = zr
        arena.z_imag[i] = zi
        arena.iterations[i] += steps
        arena.in_set[i] = zr * zr + zi * zi < bailout
        arena.processed[i] = True
        return bool(arena.in_set[i])
