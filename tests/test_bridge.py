import pytest

pytest.importorskip("pytestqt")

from PySide6.QtCore import QSizeF

from qlspectrumgui.bridge import ControllerBridge
from qlspectrumgui.image import to_qimage
from qlspectrumlib.models import TimeRange, ViewMode

from .conftest import CountingEngine


@pytest.fixture
def bridge(qtbot):
    b = ControllerBridge(CountingEngine())
    yield b
    b.close()


def _wait_displaying(qtbot, bridge):
    qtbot.waitUntil(lambda: bridge.state.mode is ViewMode.DISPLAYING,
                    timeout=10000)


def test_load_file_through_qt_event_loop(qtbot, bridge, tone_file):
    with qtbot.waitSignal(bridge.stateChanged, timeout=10000):
        bridge.loadFile(tone_file)
    _wait_displaying(qtbot, bridge)
    assert bridge.state.cached_full is bridge.state.displayed


def test_zoom_and_reset(qtbot, bridge, tone_file):
    bridge.loadFile(tone_file)
    _wait_displaying(qtbot, bridge)

    bridge.zoomTo(0.0, 0.0, 80.0, 80.0, QSizeF(160.0, 80.0))
    qtbot.waitUntil(lambda: bridge.state.zoomed
                    and bridge.state.mode is ViewMode.DISPLAYING,
                    timeout=10000)
    assert bridge.state.time_range.hi == pytest.approx(0.5)

    bridge.resetView()
    assert bridge.state.time_range == TimeRange(0.0, 1.0)


def test_to_qimage_copies_pixels(qtbot, bridge, tone_file):
    bridge.loadFile(tone_file)
    _wait_displaying(qtbot, bridge)
    result = bridge.state.displayed
    img = to_qimage(result)
    assert (img.width(), img.height()) == (result.width, result.height)
    r, g, b, a = result.image[0, 0]
    color = img.pixelColor(0, 0)
    assert (color.red(), color.green(), color.blue(), color.alpha()) == (r, g, b, a)
