from __future__ import annotations

import os

import numpy as np
import soundfile as sf

from .errors import DecodeFailed
from .models import AudioSource

# soundfile reports decoder problems as RuntimeError subclasses and
# unreadable paths as OSError / ValueError depending on the platform.
_DECODE_ERRORS = (RuntimeError, OSError, ValueError)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def open_source(filepath: str) -> AudioSource:
    """Probe an audio file and return an :class:`AudioSource` handle.

    Only metadata is read here; samples are pulled on demand by
    :func:`read_mono`.
    """
    if not os.path.isfile(filepath):
        raise DecodeFailed(f"Audio file not found: {filepath}")
    try:
        info = sf.info(filepath)
    except _DECODE_ERRORS as e:
        raise DecodeFailed(f"Cannot open {os.path.basename(filepath)}: {e}") from e
    if info.samplerate <= 0:
        raise DecodeFailed(f"Invalid sample rate in {os.path.basename(filepath)}")
    return AudioSource(
        path=filepath,
        file_name=os.path.basename(filepath),
        sample_rate=int(info.samplerate),
        total_samples=int(info.frames),
        channels=int(info.channels),
    )


def read_mono(source: AudioSource, start: int, stop: int) -> np.ndarray:
    """Read channel 0 of the ``[start, stop)`` sample window as float32."""
    start = max(0, int(start))
    stop = min(source.total_samples, int(stop))
    if stop <= start:
        return np.zeros(0, dtype=np.float32)
    try:
        data, _sr = sf.read(source.path, start=start, stop=stop,
                            dtype="float32", always_2d=True)
    except _DECODE_ERRORS as e:
        raise DecodeFailed(f"Cannot read {source.file_name}: {e}") from e
    return np.ascontiguousarray(data[:, 0])


# ---------------------------------------------------------------------------
# Axis labels
# ---------------------------------------------------------------------------

def format_time_label(seconds: float) -> str:
    """``mm:ss.cc`` with truncated hundredths."""
    whole = int(seconds)
    m = whole // 60
    s = whole % 60
    cs = int((seconds % 1) * 100)
    return f"{m:02d}:{s:02d}.{cs:02d}"


def format_frequency_label(hz: float) -> str:
    if hz >= 1000:
        return f"{hz / 1000:.1f}kHz"
    return f"{hz:.0f}Hz"
