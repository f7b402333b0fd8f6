from __future__ import annotations

import os
import threading

import numpy as np
import pytest
import soundfile as sf

from qlspectrumlib.engine import SpectrogramEngine

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

SMALL = {"image_width": 160, "image_height": 80, "max_workers": 2}


def write_tone(path, seconds=1.0, sr=8000, freq=1000.0, channels=1,
               amplitude=0.5):
    n = int(seconds * sr)
    t = np.arange(n) / sr
    tone = (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
    if channels > 1:
        # remaining channels are silent so channel 0 is identifiable
        data = np.zeros((n, channels), dtype=np.float32)
        data[:, 0] = tone
    else:
        data = tone
    sf.write(str(path), data, sr, subtype="FLOAT")
    return str(path)


@pytest.fixture
def tone_file(tmp_path):
    return write_tone(tmp_path / "tone.wav")


@pytest.fixture
def small_engine():
    return SpectrogramEngine(SMALL)


class CountingEngine(SpectrogramEngine):
    """Engine that records every generate() call.

    When ``gate`` is set, zoom calls (any call with a time range) block
    until it is released.  ``blocked`` maps a time range to an event that
    holds back only calls for that range.
    """

    def __init__(self, config=None):
        super().__init__(config or SMALL)
        self.calls = []
        self.gate: threading.Event | None = None
        self.blocked: dict = {}
        self._lock = threading.Lock()

    @property
    def call_count(self):
        with self._lock:
            return len(self.calls)

    def generate(self, source, time_range=None, frequency_range=None,
                 width=None, height=None):
        with self._lock:
            self.calls.append((time_range, frequency_range))
            hold = self.blocked.get(time_range)
        if self.gate is not None and time_range is not None:
            self.gate.wait(timeout=10)
        if hold is not None:
            hold.wait(timeout=10)
        return super().generate(source, time_range, frequency_range,
                                width, height)


@pytest.fixture
def counting_engine():
    return CountingEngine()
