import math

import pytest

from mandelview import (
    DEFAULT_VIEWPORT,
    ConfigurationError,
    Viewport,
    pixel_to_plane,
    recenter,
    reset_viewport,
    sampling_grid,
    translate,
)


def test_translate():
    assert translate(10, 0, 20, 0, 400) == 200


def test_translate_handles_offset_ranges():
    assert translate(5, 0, 10, -1, 1) == 0
    assert translate(-1, -1, 1, 100, 200) == 100


@pytest.mark.parametrize("extent", [0.0, -1.0, math.inf, math.nan])
def test_invalid_extent_is_rejected(extent):
    with pytest.raises(ConfigurationError):
        Viewport(center_x=0.0, center_y=0.0, extent=extent)


def test_non_finite_center_is_rejected():
    with pytest.raises(ConfigurationError):
        Viewport(center_x=math.nan, center_y=0.0, extent=1.0)


def test_first_and_last_pixels_map_to_opposite_corners():
    viewport = Viewport(center_x=-0.5, center_y=0.0, extent=3.0)
    width = height = 1280
    step = 3.0 / 1280

    top_left = pixel_to_plane(0, 0, viewport, width, height)
    bottom_right = pixel_to_plane(width - 1, height - 1, viewport, width, height)

    assert top_left == complex(-2.0, -1.5)
    assert bottom_right.real == pytest.approx(1.0 - step)
    assert bottom_right.imag == pytest.approx(1.5 - step)


def test_mapping_is_monotonic_on_both_axes():
    viewport = Viewport(center_x=0.25, center_y=-0.1, extent=0.5)
    grid = sampling_grid(viewport, 16, 16)
    reals = [grid.pixel_to_plane(x, 7).real for x in range(16)]
    imags = [grid.pixel_to_plane(3, y).imag for y in range(16)]
    assert reals == sorted(reals) and len(set(reals)) == 16
    assert imags == sorted(imags) and len(set(imags)) == 16
    # Moving along one axis never changes the other coordinate.
    assert len({grid.pixel_to_plane(x, 7).imag for x in range(16)}) == 1


def test_non_square_image_shares_one_extent():
    grid = sampling_grid(Viewport(0.0, 0.0, 2.0), 40, 20)
    assert grid.x_step == pytest.approx(2.0 / 40)
    assert grid.y_step == pytest.approx(2.0 / 20)
    assert grid.x_min == grid.y_min == -1.0


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-4, 4)])
def test_non_positive_dimensions_are_rejected(width, height):
    with pytest.raises(ConfigurationError):
        sampling_grid(DEFAULT_VIEWPORT, width, height)


def test_click_at_center_only_zooms():
    viewport = recenter(0.0, 0.0, 1280, 1280, reset_viewport())
    assert (viewport.center_x, viewport.center_y) == (-0.5, 0.0)
    assert viewport.extent == 3.0 / 4.0


def test_click_moves_center_to_the_clicked_point():
    start = reset_viewport()
    width = height = 1280
    px, py = 960, 320
    clicked = pixel_to_plane(px, py, start, width, height)

    viewport = recenter(px - width / 2, py - height / 2, width, height, start)

    assert viewport.center_x == pytest.approx(clicked.real)
    assert viewport.center_y == pytest.approx(clicked.imag)
    assert viewport.extent == pytest.approx(0.75)


def test_custom_zoom_factor():
    viewport = recenter(0, 0, 100, 100, Viewport(1.0, 1.0, 8.0), zoom_factor=2.0)
    assert viewport == Viewport(1.0, 1.0, 4.0)


def test_reset_is_idempotent():
    first = reset_viewport()
    second = reset_viewport()
    assert first == second == Viewport(center_x=-0.5, center_y=0.0, extent=3.0)
