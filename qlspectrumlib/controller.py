"""View-state controller: sequences load / zoom / reset generation requests.

All public methods and every state transition run on the *interactive*
thread (the one that owns the controller).  Engine calls run on a thread
pool; their completions are handed back through ``post`` and applied one
at a time on the interactive thread.

Each request is tagged with a monotonically increasing id.  A completion
whose id is no longer current is dropped, so a reset or a newer request
always wins over results still in flight.
"""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import replace
from functools import partial
from typing import Callable

from .engine import SpectrogramEngine
from .errors import SpectrogramError
from .events import EventBus
from .log import dbg
from .models import (
    AudioSource,
    FrequencyRange,
    SpectrogramResult,
    TimeRange,
    ViewState,
)
from .viewport import Selection, is_reset_click, selection_to_ranges

log = logging.getLogger(__name__)

ERROR_MESSAGE = "Could not generate spectrogram"


class SpectrogramController:
    """Owns the :class:`ViewState` and drives the engine.

    Parameters:
        engine:    Engine used for every generation; defaults to a fresh
                   :class:`SpectrogramEngine`.
        executor:  Work pool for engine calls.  When omitted the controller
                   creates and owns one.
        post:      Callable that schedules a zero-argument callable on the
                   interactive thread.  When omitted, completions queue up
                   until :meth:`process_completions` drains them.
        event_bus: Bus used for ``state.changed`` and ``generation.*``
                   notifications.
    """

    def __init__(
        self,
        engine: SpectrogramEngine | None = None,
        *,
        executor: Executor | None = None,
        post: Callable[[Callable[[], None]], None] | None = None,
        event_bus: EventBus | None = None,
    ):
        self._engine = engine or SpectrogramEngine()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="qlspectrum-gen")
        self._completions: queue.SimpleQueue = queue.SimpleQueue()
        self._post = post or self._completions.put
        self.events = event_bus or EventBus()
        self._state = ViewState()
        self._request_id = 0

    # ── Observation ─────────────────────────────────────────────────────────

    @property
    def state(self) -> ViewState:
        return self._state

    def subscribe(self, handler: Callable[[ViewState], None]) -> Callable[[], None]:
        """Call *handler(state)* after every transition.  Returns an unsubscriber."""
        def on_changed(state: ViewState) -> None:
            handler(state)
        return self.events.subscribe("state.changed", on_changed)

    # ── Operations ──────────────────────────────────────────────────────────

    def load(self, source: AudioSource) -> None:
        """Drop everything from the previous file and render *source* in full."""
        self._set_state(ViewState(source=source, is_loading=True))
        self._dispatch("load", source, None, None, cache_full=True)

    def zoom(self, time_range: TimeRange, frequency_range: FrequencyRange) -> None:
        """Render a sub-range.  No-op until a source has been loaded.

        The previous image stays in ``displayed`` while the zoom renders.
        """
        source = self._state.source
        if source is None:
            return
        self._set_state(replace(self._state, is_loading=True,
                                error=None, error_detail=None))
        self._dispatch("zoom", source, time_range, frequency_range,
                       cache_full=False)

    def reset_zoom(self) -> None:
        """Show the full view again, from the cache when there is one."""
        state = self._state
        if state.cached_full is not None:
            self._request_id += 1  # results still in flight are now stale
            self._set_state(replace(
                state, displayed=state.cached_full, is_loading=False,
                error=None, error_detail=None, zoomed=False))
            return
        if state.source is None:
            return
        self._set_state(replace(state, displayed=None, is_loading=True,
                                error=None, error_detail=None))
        self._dispatch("reset", state.source, None, None, cache_full=True)

    # ── Inbound commands from the view ──────────────────────────────────────

    def load_file(self, path: str) -> None:
        try:
            source = self._engine.open(path)
        except SpectrogramError as e:
            log.warning("Cannot load %s: %s", path, e)
            self._request_id += 1
            self._set_state(ViewState(error=ERROR_MESSAGE, error_detail=str(e)))
            return
        self.load(source)

    def zoom_to(self, selection: Selection,
                viewport_size: tuple[float, float]) -> None:
        """Zoom into a dragged rectangle; a click resets a zoomed view."""
        displayed = self._state.displayed
        if displayed is None:
            return
        if is_reset_click(selection):
            if self._state.zoomed or displayed.is_zoomed:
                self.reset_zoom()
            return
        time_range, frequency_range = selection_to_ranges(
            selection, viewport_size,
            displayed.time_range, displayed.frequency_range)
        self.zoom(time_range, frequency_range)

    def reset_view(self) -> None:
        self.reset_zoom()

    # ── Completion handling ─────────────────────────────────────────────────

    def process_completions(self, block: bool = False,
                            timeout: float | None = None) -> int:
        """Apply queued completions on the calling (interactive) thread.

        With *block*, waits up to *timeout* seconds for the first one.
        Returns the number of completions applied.
        """
        count = 0
        try:
            if block:
                self._completions.get(timeout=timeout)()
                count += 1
            while True:
                self._completions.get_nowait()()
                count += 1
        except queue.Empty:
            pass
        return count

    def run_until_idle(self, timeout: float | None = None) -> ViewState:
        """Drain completions until no request is loading.

        Raises ``TimeoutError`` if a wait exceeds *timeout*.
        """
        while self._state.is_loading:
            if not self.process_completions(block=True, timeout=timeout):
                raise TimeoutError("Spectrogram generation did not finish in time")
        return self._state

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()

    # ── Internal helpers ────────────────────────────────────────────────────

    def _set_state(self, state: ViewState) -> None:
        self._state = state
        self.events.emit("state.changed", state=state)

    def _dispatch(self, kind: str, source: AudioSource,
                  time_range: TimeRange | None,
                  frequency_range: FrequencyRange | None, *,
                  cache_full: bool) -> None:
        self._request_id += 1
        request_id = self._request_id
        dbg(f"{kind} request {request_id} for {source.file_name}")
        self.events.emit("generation.start", request_id=request_id, kind=kind)
        future = self._executor.submit(
            self._engine.generate, source, time_range, frequency_range)
        future.add_done_callback(
            lambda f: self._post(partial(self._complete, request_id, kind,
                                         cache_full, f)))

    def _complete(self, request_id: int, kind: str, cache_full: bool,
                  future: Future) -> None:
        if request_id != self._request_id:
            dbg(f"dropping stale {kind} result {request_id} "
                f"(current {self._request_id})")
            return
        try:
            result: SpectrogramResult = future.result()
        except SpectrogramError as e:
            log.warning("%s request %d failed: %s", kind, request_id, e)
            self._fail(request_id, kind, str(e))
            return
        except Exception as e:
            log.exception("%s request %d crashed", kind, request_id)
            self._fail(request_id, kind, str(e))
            return

        state = replace(self._state, displayed=result, is_loading=False,
                        error=None, error_detail=None,
                        zoomed=not cache_full)
        if cache_full:
            state = replace(state, cached_full=result)
        self._set_state(state)
        self.events.emit("generation.complete", request_id=request_id,
                         kind=kind, ok=True)

    def _fail(self, request_id: int, kind: str, detail: str) -> None:
        self._set_state(replace(self._state, displayed=None, is_loading=False,
                                error=ERROR_MESSAGE, error_detail=detail))
        self.events.emit("generation.complete", request_id=request_id,
                         kind=kind, ok=False)
