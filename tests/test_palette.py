import matplotlib
import numpy as np
import pytest

from mandelgrid import (
    BLACK,
    BLUE,
    GREEN,
    RED,
    WHITE,
    GradientStop,
    InvalidGradientStop,
    LinearPalette,
    MultiColorGradient,
    Point,
    colormap_gradient,
    colormap_stops,
    default_palette,
    interpolate_colors,
)
from mandelgrid.color import from_unit_rgba
from mandelgrid.palette import HIGH_SENTINEL, LOW_SENTINEL

GREY = (128, 128, 128, 255)
GOLD = (255, 215, 0, 255)


def assert_color_array_matches_points(grid, palette):
    colors = palette.color_array(grid.iteration_counts(), grid.membership())
    for col in range(grid.width):
        for row in range(grid.height):
            expected = palette.color(grid.point_at(col, row))
            assert tuple(int(v) for v in colors[col, row]) == expected, (col, row)


# Linear palette

def test_linear_calibration(iterated_grid):
    palette = LinearPalette(iterated_grid, GREEN, RED, BLACK)

    assert palette.max_iterations == 3
    assert not palette.is_degenerate


def test_linear_in_set_color(iterated_grid):
    palette = LinearPalette(iterated_grid, GREEN, RED, BLUE)

    assert palette.color(iterated_grid.point_at(2, 2)) == BLUE


def test_linear_slowest_escape_gets_low_color(iterated_grid):
    palette = LinearPalette(iterated_grid, GREEN, RED, BLACK)

    # c = -1 - i escapes after 3 steps, the calibration maximum.
    assert palette.color(iterated_grid.point_at(1, 1)) == GREEN


def test_linear_intermediate_ratio(iterated_grid):
    palette = LinearPalette(iterated_grid, GREEN, RED, BLACK)

    assert palette.color(iterated_grid.point_at(0, 0)) == interpolate_colors(GREEN, RED, 1 / 3)
    assert palette.color(iterated_grid.point_at(3, 2)) == interpolate_colors(GREEN, RED, 2 / 3)


def test_linear_ignores_in_set_points_for_calibration(iterated_grid):
    # In-set points carry the full iteration cap but must not be the maximum.
    assert iterated_grid.iteration_counts().max() == 200
    assert LinearPalette(iterated_grid, GREEN, RED, BLACK).max_iterations == 3


def test_linear_degenerate_calibration(in_set_grid):
    palette = LinearPalette(in_set_grid, GREEN, RED, BLACK)

    assert palette.max_iterations == 0
    assert palette.is_degenerate
    for point in in_set_grid:
        assert palette.color(point) == BLACK


def test_linear_degenerate_calibration_with_escaped_point(in_set_grid):
    palette = LinearPalette(in_set_grid, GREEN, RED, BLACK)
    outsider = Point(2.0, 0.0)
    outsider.determine_membership()

    # Every ratio is 0, which the blend maps to its second color.
    assert palette.ratio(outsider.iteration_count) == 0.0
    assert palette.color(outsider) == RED

    colors = palette.color_array(np.array([1, 7, 0]), np.array([False, False, True]))
    assert [tuple(int(v) for v in c) for c in colors] == [RED, RED, BLACK]


def test_linear_ratio_is_clamped(escape_grid):
    palette = LinearPalette(escape_grid, GREEN, RED, BLACK)

    assert palette.ratio(50) == 1.0
    assert palette.ratio(-1) == 0.0


def test_linear_color_array_matches_color(iterated_grid):
    assert_color_array_matches_points(iterated_grid, LinearPalette(iterated_grid, GREEN, RED, BLACK))


def test_default_palette(iterated_grid):
    palette = default_palette(iterated_grid)

    assert palette.low_color == GREEN
    assert palette.high_color == RED
    assert palette.in_set_color == BLACK


# Multi-color gradient

def test_gradient_sorted_stops(fresh_grid):
    lowest = GradientStop(0.25, BLACK)
    highest = GradientStop(0.75, WHITE)

    gradient = MultiColorGradient(fresh_grid, [highest, lowest], RED, GREEN, BLUE)

    assert [stop.color for stop in gradient.stops] == [RED, BLACK, WHITE, GREEN]
    assert [stop.percent for stop in gradient.stops] == [LOW_SENTINEL, 0.25, 0.75, HIGH_SENTINEL]
    assert LOW_SENTINEL == pytest.approx(-0.01)
    assert HIGH_SENTINEL == pytest.approx(1.01)


def test_gradient_without_explicit_stops(escape_grid):
    gradient = MultiColorGradient(escape_grid, [], RED, BLUE, BLACK)

    assert [stop.color for stop in gradient.stops] == [RED, BLUE]
    assert_color_array_matches_points(escape_grid, gradient)


@pytest.mark.parametrize("percent", [-0.5, 1.5, -0.01, 1.01])
def test_gradient_rejects_stops_outside_unit_range(fresh_grid, percent):
    with pytest.raises(InvalidGradientStop):
        MultiColorGradient(fresh_grid, [GradientStop(percent, WHITE)], RED, BLUE, BLACK)


def test_gradient_calibration(iterated_grid, in_set_grid):
    assert MultiColorGradient(iterated_grid, [], RED, BLUE, BLACK).max_iterations == 3
    assert MultiColorGradient(in_set_grid, [], RED, BLUE, BLACK).is_degenerate


def test_gradient_in_set_color(iterated_grid):
    gradient = MultiColorGradient(iterated_grid, [GradientStop(0.5, WHITE)], RED, BLUE, GREY)

    assert gradient.color(iterated_grid.point_at(2, 1)) == GREY


def test_gradient_hits_stop_color_exactly(escape_grid):
    gradient = MultiColorGradient(escape_grid, [GradientStop(0.5, GOLD)], RED, BLUE, BLACK)

    # c = 2 escapes after one step out of a maximum of two: ratio 0.5.
    assert gradient.color(escape_grid.point_at(1, 0)) == GOLD


def test_gradient_blends_within_bracket(escape_grid):
    gradient = MultiColorGradient(escape_grid, [GradientStop(0.5, GOLD)], RED, BLUE, BLACK)

    # c = 1 reaches the maximum: ratio 1.0, between the 0.5 stop and the max sentinel.
    t = (1.0 - 0.5) / (HIGH_SENTINEL - 0.5)
    assert gradient.color(escape_grid.point_at(0, 0)) == interpolate_colors(BLUE, GOLD, t)


def test_gradient_bracket(escape_grid):
    gradient = MultiColorGradient(escape_grid, [GradientStop(0.25, WHITE), GradientStop(0.75, GOLD)], RED, BLUE, BLACK)

    assert gradient.bracket(0.0) == (0, 1)
    assert gradient.bracket(0.25) == (1, 2)
    assert gradient.bracket(0.5) == (1, 2)
    assert gradient.bracket(1.0) == (2, 3)


def test_gradient_duplicate_percents_first_inserted_wins(escape_grid):
    first = GradientStop(0.5, GOLD)
    second = GradientStop(0.5, WHITE)

    gradient = MultiColorGradient(escape_grid, [first, second], RED, BLUE, BLACK)
    assert [stop.color for stop in gradient.stops] == [RED, GOLD, WHITE, BLUE]
    assert gradient.color(escape_grid.point_at(1, 0)) == GOLD

    swapped = MultiColorGradient(escape_grid, [second, first], RED, BLUE, BLACK)
    assert [stop.color for stop in swapped.stops] == [RED, WHITE, GOLD, BLUE]
    assert swapped.color(escape_grid.point_at(1, 0)) == WHITE


def test_gradient_duplicates_match_vectorized(escape_grid):
    gradient = MultiColorGradient(
        escape_grid, [GradientStop(0.5, GOLD), GradientStop(0.5, WHITE)], RED, BLUE, BLACK
    )

    assert_color_array_matches_points(escape_grid, gradient)


def test_gradient_degenerate_calibration(in_set_grid):
    gradient = MultiColorGradient(in_set_grid, [GradientStop(0.0, GOLD)], RED, BLUE, BLACK)
    outsider = Point(2.0, 0.0)
    outsider.determine_membership()

    assert gradient.color(outsider) == GOLD
    for point in in_set_grid:
        assert gradient.color(point) == BLACK


def test_gradient_color_array_matches_color(iterated_grid):
    stops = [GradientStop(0.1, GREEN), GradientStop(0.4, GOLD), GradientStop(0.9, WHITE)]
    gradient = MultiColorGradient(iterated_grid, stops, RED, BLUE, BLACK)

    assert_color_array_matches_points(iterated_grid, gradient)


# Colormap gradients

def test_colormap_stops():
    stops = colormap_stops("viridis", 5)
    cmap = matplotlib.colormaps["viridis"]

    assert [stop.percent for stop in stops] == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert stops[0].color == from_unit_rgba(cmap(0.0))
    assert stops[-1].color == from_unit_rgba(cmap(1.0))


def test_colormap_stops_invert():
    stops = colormap_stops("viridis", 4)
    inverted = colormap_stops("viridis", 4, invert=True)

    assert [stop.color for stop in inverted] == [stop.color for stop in reversed(stops)]


def test_colormap_stops_invalid():
    with pytest.raises(ValueError):
        colormap_stops("no-such-colormap", 4)
    with pytest.raises(ValueError):
        colormap_stops("viridis", 1)


def test_colormap_gradient(iterated_grid):
    gradient = colormap_gradient(iterated_grid, "inferno", 8, WHITE)

    assert len(gradient.stops) == 10
    assert gradient.stops[0].color == gradient.stops[1].color
    assert gradient.in_set_color == WHITE
    assert_color_array_matches_points(iterated_grid, gradient)


# Color validation

@pytest.mark.parametrize("colors", [
    ((0, 255, 0), RED, BLACK),
    (GREEN, (255, 0, 0, 255, 0), BLACK),
    (GREEN, RED, (0, 0, 300, 255)),
])
def test_linear_rejects_malformed_colors(fresh_grid, colors):
    with pytest.raises(ValueError):
        LinearPalette(fresh_grid, *colors)


def test_gradient_rejects_malformed_colors(fresh_grid):
    with pytest.raises(ValueError):
        MultiColorGradient(fresh_grid, [GradientStop(0.5, (255, 255, 255))], RED, BLUE, BLACK)
    with pytest.raises(ValueError):
        MultiColorGradient(fresh_grid, [], (255, 0, 0), BLUE, BLACK)


def test_palette_colors_are_int_tuples(fresh_grid):
    palette = LinearPalette(fresh_grid, np.array(GREEN), [255, 0, 0, 255], BLACK)

    assert palette.low_color == GREEN
    assert palette.high_color == RED
    assert all(type(channel) is int for channel in palette.low_color)
