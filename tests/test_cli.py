import numpy as np
import pytest

import zoom
from mandelview.persistence import PngFrameStore

SMALL = ["--width", "16", "--height", "16", "--max-iterations", "24", "--workers", "2"]


def test_renders_default_view(tmp_path, capsys):
    output = tmp_path / "out.png"
    assert zoom.main([*SMALL, "--output", str(output)]) == 0
    assert output.exists()
    assert PngFrameStore(output).load().shape == (16, 16, 4)
    assert "extent=3 " in capsys.readouterr().out


def test_clicks_zoom_in(tmp_path, capsys):
    output = tmp_path / "out.png"
    assert zoom.main([*SMALL, "--output", str(output), "--click", "8", "8", "--click", "8", "8"]) == 0
    out = capsys.readouterr().out
    assert "center=(-0.5, 0)" in out
    assert "extent=0.1875 " in out


def test_output_gets_png_suffix(tmp_path):
    assert zoom.main([*SMALL, "--output", str(tmp_path / "frame")]) == 0
    assert (tmp_path / "frame.png").exists()


@pytest.mark.parametrize(
    "args",
    [
        ["--extent", "0"],
        ["--width", "0"],
        ["--workers", "0"],
        ["--click", "99", "0"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(tmp_path, args):
    with pytest.raises(SystemExit) as excinfo:
        zoom.main([*SMALL, "--output", str(tmp_path / "out.png"), *args])
    assert excinfo.value.code == 2


def test_shards_option_gives_same_image(tmp_path):
    single = tmp_path / "single.png"
    sharded = tmp_path / "sharded.png"
    assert zoom.main([*SMALL, "--output", str(single)]) == 0
    assert zoom.main([*SMALL, "--output", str(sharded), "--aggregator-shards", "3", "--channel-capacity", "2"]) == 0
    assert np.array_equal(PngFrameStore(single).load(), PngFrameStore(sharded).load())
