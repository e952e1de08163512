"""Exception types raised by the grid and palette layers."""


class InvalidDimension(ValueError):
    """Grid width, height or pixel pitch is not a positive value."""


class IndexOutOfRange(IndexError):
    """A point was requested outside ``[0, width) x [0, height)``."""


class InvalidGradientStop(ValueError):
    """A gradient stop percent lies outside ``[0, 1]``."""


class GridNotIterated(RuntimeError):
    """A grid was rendered before every point had been processed."""
