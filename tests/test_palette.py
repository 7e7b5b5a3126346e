import pytest

from mandelview import ConfigurationError, build_palette
from mandelview.palette import INSIDE_COLOR


@pytest.mark.parametrize("max_iterations", [1, 2, 3, 7, 48, 100, 768])
def test_saturation_entry_is_black(max_iterations):
    palette = build_palette(max_iterations)
    assert len(palette) == max_iterations + 1
    assert palette[max_iterations] == (0, 0, 0, 255)


@pytest.mark.parametrize("max_iterations", [5, 48, 768])
def test_every_entry_is_an_opaque_rgba_color(max_iterations):
    palette = build_palette(max_iterations)
    for i in range(max_iterations + 1):
        color = palette[i]
        assert len(color) == 4
        assert all(0 <= channel <= 255 for channel in color)
        assert color[3] == 255


def test_reference_palette_ramps():
    palette = build_palette(768)
    assert palette[0] == (0, 0, 0, 255)
    assert palette[100] == (100, 0, 0, 255)
    assert palette[255] == (255, 0, 0, 255)
    assert palette[256] == (255, 0, 0, 255)
    assert palette[300] == (255, 44, 0, 255)
    assert palette[511] == (255, 255, 0, 255)
    assert palette[512] == (255, 255, 0, 255)
    assert palette[600] == (255, 255, 88, 255)
    assert palette[767] == (255, 255, 255, 255)
    assert palette[768] == INSIDE_COLOR


def test_channels_are_monotonic_below_saturation():
    palette = build_palette(96)
    colors = palette.colors[:-1].astype(int)
    assert (colors[1:, :3] >= colors[:-1, :3]).all()


@pytest.mark.parametrize("index", [-1, 49, 1000])
def test_out_of_range_lookup_fails(index):
    palette = build_palette(48)
    with pytest.raises(IndexError):
        palette[index]


def test_palette_is_read_only_and_cached():
    palette = build_palette(48)
    assert build_palette(48) is palette
    with pytest.raises(ValueError):
        palette.colors[0, 0] = 1


def test_non_positive_bound_is_rejected():
    with pytest.raises(ConfigurationError):
        build_palette(0)
