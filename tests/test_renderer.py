import numpy as np
import pytest

from qlspectrumlib.errors import RenderUnavailable
from qlspectrumlib.models import FrequencyRange
from qlspectrumlib.renderer import (
    DB_CEIL, DB_FLOOR, bin_range, color_lut, normalization_window, ramp_rgb,
    render, spectrogram_color,
)


@pytest.mark.parametrize("boundary", [0.05, 0.33, 0.66])
def test_color_ramp_is_continuous_at_breakpoints(boundary):
    below = np.array(ramp_rgb(boundary - 1e-9)) * 255
    at = np.array(ramp_rgb(boundary)) * 255
    np.testing.assert_allclose(below, at, atol=1.0)


def test_color_ramp_endpoints():
    assert spectrogram_color(0.0) == (0, 0, 0)
    assert spectrogram_color(0.04) == (0, 0, 0)
    assert spectrogram_color(1.0) == (255, 255, 127)


def test_lut_is_opaque_and_fixed():
    lut = color_lut()
    assert lut.shape == (256, 4)
    assert (lut[:, 3] == 255).all()
    assert tuple(lut[255, :3]) == spectrogram_color(1.0)
    assert lut is color_lut()


def test_full_band_bin_range():
    assert bin_range(FrequencyRange(0.0, 22050.0), 22050.0, 1024) == (0, 1023)
    assert bin_range(FrequencyRange(1000.0, 2000.0), 22050.0, 1024) == (46, 92)


def test_normalization_window_is_clamped():
    rng = np.random.default_rng(0)
    table = rng.uniform(-300.0, 200.0, size=(500, 64)).astype(np.float32)
    lo, hi = normalization_window(table, 0, 63)
    assert lo >= DB_FLOOR
    assert hi <= DB_CEIL


def test_normalization_window_without_finite_values():
    table = np.full((10, 8), -np.inf, dtype=np.float32)
    assert normalization_window(table, 0, 7) == (DB_FLOOR, DB_CEIL)


def test_normalization_window_uses_visible_bins_only():
    table = np.full((10, 8), -60.0, dtype=np.float32)
    table[:, 0] = -90.0
    assert normalization_window(table, 1, 7) == (-60.0, -60.0)
    assert normalization_window(table, 0, 7) == (-90.0, -60.0)


def _ramp_table():
    # 10 frames x 8 bins, only the top bin is loud
    table = np.full((10, 8), -80.0, dtype=np.float32)
    table[:, 7] = 0.0
    return table


def test_render_puts_high_frequencies_on_top():
    image, resolved = render(_ramp_table(), 10, 8, 16.0, None, 12, 8,
                             max_workers=3)
    assert image.shape == (8, 12, 4)
    assert image.dtype == np.uint8
    assert resolved == FrequencyRange(0.0, 8.0)
    assert (image[..., 3] == 255).all()
    assert tuple(image[0, 0, :3]) == spectrogram_color(1.0)
    assert tuple(image[-1, 0, :3]) == (0, 0, 0)


def test_render_is_independent_of_worker_count():
    rng = np.random.default_rng(1)
    table = rng.uniform(-100.0, 0.0, size=(40, 32)).astype(np.float32)
    single, _ = render(table, 40, 32, 64.0, None, 50, 37, max_workers=1)
    multi, _ = render(table, 40, 32, 64.0, None, 50, 37, max_workers=4)
    np.testing.assert_array_equal(single, multi)


def test_render_treats_non_finite_as_background():
    table = _ramp_table().copy()
    table[:, 7] = np.nan
    image, _ = render(table, 10, 8, 16.0, None, 4, 8)
    assert (image[..., :3] == 0).all()


def test_render_below_floor_uses_inverted_window():
    table = np.full((10, 8), -120.0, dtype=np.float32)
    table[:, 7] = -110.0
    assert normalization_window(table, 0, 7) == (-100.0, -110.0)
    image, _ = render(table, 10, 8, 16.0, None, 4, 8)
    # (-110 - -100) / (-110 - -100) == 1.0, the brightest color
    assert tuple(image[0, 0, :3]) == spectrogram_color(1.0)
    assert tuple(image[-1, 0, :3]) == spectrogram_color(1.0)


def test_render_frequency_sub_range():
    _image, resolved = render(_ramp_table(), 10, 8, 16.0,
                              FrequencyRange(2.0, 20.0), 4, 4)
    assert resolved == FrequencyRange(2.0, 8.0)


def test_render_unavailable():
    with pytest.raises(RenderUnavailable):
        render(np.zeros((0, 8), dtype=np.float32), 0, 8, 16.0, None, 4, 4)
    with pytest.raises(RenderUnavailable):
        render(np.zeros((4, 0), dtype=np.float32), 4, 0, 16.0, None, 4, 4)
