"""Windowed-FFT analysis: mono samples to a decibel magnitude table."""

from __future__ import annotations

from functools import lru_cache

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy.fft import rfft
from scipy.signal import get_window

from .errors import EmptySelection
from .models import TimeRange, resolve_time_range

FFT_SIZE = 2048
HOP_SIZE = FFT_SIZE // 4
NUM_BINS = FFT_SIZE // 2

# Frames transformed per scipy.fft call; bounds the scratch memory used
# for long files.
_BLOCK_FRAMES = 512


@lru_cache(maxsize=4)
def hann_window(n_fft: int = FFT_SIZE) -> np.ndarray:
    """Symmetric Hann window, ``0.5 - 0.5*cos(2*pi*i/(n-1))``."""
    win = get_window("hann", n_fft, fftbins=False).astype(np.float32)
    win.setflags(write=False)
    return win


def frame_count(num_samples: int, n_fft: int = FFT_SIZE,
                hop: int = HOP_SIZE) -> int:
    return max(1, (num_samples - n_fft) // hop)


def sample_window(time_range: TimeRange, sample_rate: float,
                  total_samples: int) -> tuple[int, int]:
    """Map a resolved time range onto a ``[start, stop)`` sample window."""
    start = min(int(time_range.lo * sample_rate), total_samples)
    stop = min(int(time_range.hi * sample_rate), total_samples)
    return start, max(start, stop)


def select_samples(requested_time_range: TimeRange | None,
                   sample_rate: float, total_samples: int,
                   ) -> tuple[TimeRange, int, int]:
    """Resolve a time request into ``(resolved, start, stop)`` samples.

    Raises ``EmptySelection`` when the window holds no samples.
    """
    resolved = resolve_time_range(requested_time_range,
                                  total_samples / float(sample_rate))
    start, stop = sample_window(resolved, sample_rate, total_samples)
    if stop <= start:
        raise EmptySelection(
            f"Time range {resolved.lo:.3f}-{resolved.hi:.3f} s contains no samples")
    return resolved, start, stop


def magnitude_table(samples: np.ndarray, n_fft: int = FFT_SIZE,
                    hop: int = HOP_SIZE) -> np.ndarray:
    """Short-time magnitude spectrum in dB re. unit amplitude.

    Returns a float32 array of shape ``(num_frames, n_fft // 2)``.  Frames
    that run past the end of *samples* are zero-padded.  Zero magnitudes
    become ``-inf`` and are left for the renderer to clamp.
    """
    samples = np.asarray(samples, dtype=np.float32)
    n = samples.size
    if n == 0:
        raise EmptySelection("No samples to analyze")
    num_frames = frame_count(n, n_fft, hop)
    num_bins = n_fft // 2

    padded_len = (num_frames - 1) * hop + n_fft
    buf = np.zeros(padded_len, dtype=np.float32)
    buf[:min(n, padded_len)] = samples[:padded_len]
    frames = sliding_window_view(buf, n_fft)[::hop]
    window = hann_window(n_fft)

    table = np.empty((num_frames, num_bins), dtype=np.float32)
    for b0 in range(0, num_frames, _BLOCK_FRAMES):
        b1 = min(b0 + _BLOCK_FRAMES, num_frames)
        spectrum = rfft(frames[b0:b1] * window, axis=1)
        mags = np.abs(spectrum[:, :num_bins])
        with np.errstate(divide="ignore", invalid="ignore"):
            table[b0:b1] = 20.0 * np.log10(mags)
    table.setflags(write=False)
    return table


def analyze(samples: np.ndarray, sample_rate: float,
            requested_time_range: TimeRange | None = None,
            ) -> tuple[np.ndarray, TimeRange]:
    """Analyze the requested slice of an in-memory mono signal.

    Returns ``(table, resolved_time_range)``.  The resolved range is the
    request clamped to the signal's duration and may be narrower than what
    was asked for.
    """
    samples = np.asarray(samples)
    resolved, start, stop = select_samples(requested_time_range,
                                           sample_rate, samples.size)
    return magnitude_table(samples[start:stop]), resolved
