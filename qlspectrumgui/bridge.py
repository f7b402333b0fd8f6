"""Qt side of the view-state controller.

:class:`ControllerBridge` lives on the GUI thread.  Engine completions are
emitted from worker threads through a queued signal, so the controller
only ever mutates its state on the GUI thread.
"""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QSizeF, Qt, Signal, Slot

from qlspectrumlib.controller import SpectrogramController
from qlspectrumlib.engine import SpectrogramEngine
from qlspectrumlib.log import dbg
from qlspectrumlib.models import ViewState
from qlspectrumlib.viewport import Selection


class ControllerBridge(QObject):
    """Exposes a :class:`SpectrogramController` through Qt signals."""

    stateChanged = Signal(object)      # ViewState
    _completion = Signal(object)       # zero-arg callable from a worker thread

    def __init__(self, engine: SpectrogramEngine | None = None, parent=None):
        super().__init__(parent)
        self._completion.connect(self._run_completion,
                                 Qt.ConnectionType.QueuedConnection)
        self._controller = SpectrogramController(
            engine, post=self._completion.emit)
        self._unsubscribe = self._controller.subscribe(self.stateChanged.emit)

    @property
    def controller(self) -> SpectrogramController:
        return self._controller

    @property
    def state(self) -> ViewState:
        return self._controller.state

    @Slot(str)
    def loadFile(self, path: str):
        dbg(f"load {path}")
        self._controller.load_file(path)

    @Slot(float, float, float, float, QSizeF)
    def zoomTo(self, x0: float, y0: float, x1: float, y1: float,
               viewport: QSizeF):
        self._controller.zoom_to(Selection(x0, y0, x1, y1),
                                 (viewport.width(), viewport.height()))

    @Slot()
    def resetView(self):
        self._controller.reset_view()

    def close(self):
        """Detach listeners and stop the worker pool."""
        self._unsubscribe()
        self._controller.shutdown(wait=True)

    @Slot(object)
    def _run_completion(self, apply: Callable[[], None]):
        apply()
