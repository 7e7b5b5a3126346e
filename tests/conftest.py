import matplotlib

matplotlib.use("Agg")

import pytest

from mandelview import RenderSettings


@pytest.fixture
def small_settings():
    return RenderSettings(width=24, height=24, max_iterations=48, workers=4, channel_capacity=16)
