import pytest

from mandelgrid import Grid, IterationLimits

# Small cap keeps in-set points cheap; every point used below either escapes
# within three steps or cycles through exact small integers.
LIMITS = IterationLimits(max_iterations=200)


def integer_grid():
    """4x4 grid over the integer lattice {-2, -1, 0, 1} x {-2i, -i, 0, i}."""

    return Grid(0j, 4, 4, 1.0, limits=LIMITS)


@pytest.fixture
def fresh_grid():
    return integer_grid()


@pytest.fixture
def iterated_grid():
    grid = integer_grid()
    grid.iterate_all(engine="python", workers=2)
    return grid


@pytest.fixture
def escape_grid():
    """Two escaping points: c = 1 (two steps) and c = 2 (one step)."""

    grid = Grid(complex(2.0, 0.5), 2, 1, 1.0, limits=LIMITS)
    grid.iterate_all(engine="python", workers=1)
    return grid


@pytest.fixture
def in_set_grid():
    """Four points near the origin, all inside the main cardioid."""

    grid = Grid(0j, 2, 2, 0.1, limits=LIMITS)
    grid.iterate_all(engine="python", workers=1)
    return grid
