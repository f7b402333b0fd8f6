import pytest

from qlspectrumlib.models import FrequencyRange, TimeRange
from qlspectrumlib.viewport import Selection, is_reset_click, selection_to_ranges


def test_small_drag_is_a_reset_click():
    # 5 x 3 pixels on an 800 x 400 viewport
    assert is_reset_click(Selection(100, 100, 105, 103))


def test_drag_large_in_one_axis_is_a_zoom():
    assert not is_reset_click(Selection(100, 100, 102, 140))
    assert not is_reset_click(Selection(100, 100, 110, 100))


def test_selection_maps_to_time_and_frequency():
    time_range, freq_range = selection_to_ranges(
        Selection(600, 300, 200, 100), (800, 400),
        TimeRange(0.0, 8.0), FrequencyRange(0.0, 20000.0))
    assert time_range.lo == pytest.approx(2.0)
    assert time_range.hi == pytest.approx(6.0)
    # y = 100 is a quarter down from the top edge
    assert freq_range.lo == pytest.approx(5000.0)
    assert freq_range.hi == pytest.approx(15000.0)


def test_selection_is_relative_to_visible_ranges():
    time_range, freq_range = selection_to_ranges(
        Selection(0, 0, 400, 400), (800, 400),
        TimeRange(2.0, 4.0), FrequencyRange(1000.0, 3000.0))
    assert time_range.lo == pytest.approx(2.0)
    assert time_range.hi == pytest.approx(3.0)
    assert freq_range.lo == pytest.approx(1000.0)
    assert freq_range.hi == pytest.approx(3000.0)


def test_selection_outside_viewport_is_clamped():
    time_range, _ = selection_to_ranges(
        Selection(-50, 10, 900, 300), (800, 400),
        TimeRange(0.0, 10.0), FrequencyRange(0.0, 100.0))
    assert time_range == TimeRange(0.0, 10.0)
