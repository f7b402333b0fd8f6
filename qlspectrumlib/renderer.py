"""Spectrogram rendering: dB table to an RGBA image through a color ramp."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache

import numpy as np

from .errors import RenderUnavailable
from .models import FrequencyRange, resolve_frequency_range

DB_FLOOR = -100.0
DB_CEIL = 0.0
NORM_SAMPLE_FRAMES = 100

# Ramp breakpoints in normalized intensity.
_BLACK_END = 0.05
_BLUE_END = 0.33
_CYAN_END = 0.66


# ---------------------------------------------------------------------------
# Color ramp
# ---------------------------------------------------------------------------

def ramp_rgb(v: float) -> tuple[float, float, float]:
    """Unscaled ramp value: black, dark blue, cyan, then pale yellow."""
    if v < _BLACK_END:
        return 0.0, 0.0, 0.0
    if v < _BLUE_END:
        t = (v - _BLACK_END) / (_BLUE_END - _BLACK_END)
        return 0.0, 0.1 * t, 0.5 * t
    if v < _CYAN_END:
        t = (v - _BLUE_END) / (_CYAN_END - _BLUE_END)
        return 0.0, 0.1 + 0.8 * t, 0.5 + 0.5 * t
    t = (v - _CYAN_END) / (1.0 - _CYAN_END)
    return t, 0.9 + 0.1 * t, 1.0 - 0.5 * t


def spectrogram_color(v: float) -> tuple[int, int, int]:
    """8-bit color for normalized intensity *v*, channels truncated."""
    r, g, b = ramp_rgb(v)
    return int(r * 255), int(g * 255), int(b * 255)


@lru_cache(maxsize=1)
def color_lut() -> np.ndarray:
    """(256, 4) uint8 RGBA lookup table, fully opaque."""
    lut = np.zeros((256, 4), dtype=np.uint8)
    lut[:, 3] = 255
    for i in range(256):
        lut[i, :3] = spectrogram_color(i / 255.0)
    lut.setflags(write=False)
    return lut


# ---------------------------------------------------------------------------
# Range helpers
# ---------------------------------------------------------------------------

def bin_range(frequency_range: FrequencyRange, nyquist: float,
              num_bins: int) -> tuple[int, int]:
    """Inclusive ``(min_bin, max_bin)`` covering *frequency_range*."""
    bin_width = nyquist / num_bins
    last = num_bins - 1
    min_bin = min(max(int(frequency_range.lo // bin_width), 0), last)
    max_bin = min(max(int(frequency_range.hi // bin_width), min_bin), last)
    return min_bin, max_bin


def normalization_window(table: np.ndarray, min_bin: int, max_bin: int,
                         sample_frames: int = NORM_SAMPLE_FRAMES,
                         ) -> tuple[float, float]:
    """dB span used to normalize the visible bins.

    Scans about *sample_frames* evenly spaced frames instead of the whole
    table.  The lower bound never rises above 0 dB; both ends are clamped
    to ``[DB_FLOOR, DB_CEIL]``.  With no finite samples the window falls
    back to the full floor-to-ceiling span.
    """
    num_frames = table.shape[0]
    step = max(1, num_frames // sample_frames)
    sampled = table[::step, min_bin:max_bin + 1]
    finite = sampled[np.isfinite(sampled)]
    if finite.size == 0:
        return DB_FLOOR, DB_CEIL
    min_val = max(min(float(finite.min()), 0.0), DB_FLOOR)
    max_val = min(float(finite.max()), DB_CEIL)
    return min_val, max_val


# ---------------------------------------------------------------------------
# Image synthesis
# ---------------------------------------------------------------------------

def _default_workers() -> int:
    return min(os.cpu_count() or 4, 8)


def _fill_rows(out: np.ndarray, row_lo: int, row_hi: int,
               table: np.ndarray, frame_idx: np.ndarray, row_bins: np.ndarray,
               min_val: float, span: float, lut: np.ndarray) -> None:
    """Write image rows ``[row_lo, row_hi)``.  Touches only that slice."""
    values = table[frame_idx[None, :], row_bins[row_lo:row_hi, None]]
    values = np.where(np.isfinite(values), values, min_val)
    # an inverted window (all data below the floor) still uses the same
    # formula; only a flat window is special-cased
    if span != 0:
        norm = np.clip((values - min_val) / span, 0.0, 1.0)
    else:
        norm = np.zeros(values.shape, dtype=np.float32)
    out[row_lo:row_hi] = lut[(norm * 255.0).astype(np.intp)]


def render(table: np.ndarray, num_frames: int, num_bins: int,
           sample_rate: float,
           requested_frequency_range: FrequencyRange | None,
           out_width: int, out_height: int, *,
           db_window: tuple[float, float] | None = None,
           max_workers: int | None = None,
           ) -> tuple[np.ndarray, FrequencyRange]:
    """Render a dB table into a ``(out_height, out_width, 4)`` RGBA image.

    Image row 0 is the top of the selected frequency window.  Rows are
    split into contiguous bands and filled in parallel; each band writes a
    disjoint slice of the output and only reads the (read-only) table and
    lookup table.
    """
    if num_frames <= 0 or num_bins <= 0:
        raise RenderUnavailable("Nothing to render: no frames or no bins")
    if out_width <= 0 or out_height <= 0:
        raise ValueError(f"Invalid image size {out_width}x{out_height}")

    resolved = resolve_frequency_range(requested_frequency_range, sample_rate)
    min_bin, max_bin = bin_range(resolved, sample_rate / 2.0, num_bins)
    if db_window is None:
        db_window = normalization_window(table, min_bin, max_bin)
    min_val, max_val = db_window
    span = max_val - min_val
    lut = color_lut()

    frame_idx = (np.arange(out_width, dtype=np.int64) * num_frames) // out_width
    render_bins = max(1, max_bin - min_bin + 1)
    # y counts up from the bottom of the image
    y = (out_height - 1) - np.arange(out_height, dtype=np.int64)
    row_bins = np.clip(min_bin + (y * render_bins) // out_height,
                       min_bin, max_bin)

    out = np.empty((out_height, out_width, 4), dtype=np.uint8)
    workers = min(max_workers or _default_workers(), out_height)
    band = -(-out_height // workers)
    if workers <= 1:
        _fill_rows(out, 0, out_height, table, frame_idx, row_bins,
                   min_val, span, lut)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_fill_rows, out, lo, min(lo + band, out_height),
                            table, frame_idx, row_bins, min_val, span, lut)
                for lo in range(0, out_height, band)
            ]
            for future in futures:
                future.result()
    return out, resolved
