from __future__ import annotations

import time
from typing import Any

from .analyzer import magnitude_table, select_samples
from .audio import open_source, read_mono
from .config import default_config, validate_config
from .errors import EmptySelection
from .log import dbg, timed
from .models import (
    AudioSource,
    FrequencyRange,
    SpectrogramResult,
    TimeRange,
    resolve_frequency_range,
)
from .renderer import bin_range, normalization_window, render


class SpectrogramEngine:
    """Decode, analyze and render one spectrogram per call.

    ``generate`` is synchronous and CPU-bound.  It holds no per-call state,
    so a single engine may serve concurrent calls from a worker pool.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = {**default_config(), **(config or {})}
        validate_config(self.config)

    @property
    def default_size(self) -> tuple[int, int]:
        return self.config["image_width"], self.config["image_height"]

    def open(self, path: str) -> AudioSource:
        return open_source(path)

    def generate(
        self,
        source: AudioSource,
        time_range: TimeRange | None = None,
        frequency_range: FrequencyRange | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> SpectrogramResult:
        """Produce a rendered result for *source*.

        Absent ranges mean the full extent.  Raises ``DecodeFailed``,
        ``EmptySelection`` or ``RenderUnavailable``.
        """
        width = width or self.config["image_width"]
        height = height or self.config["image_height"]
        t_start = time.perf_counter()

        resolved_time, start, stop = select_samples(
            time_range, source.sample_rate, source.total_samples)

        with timed(f"decode {source.file_name} [{start}:{stop}]"):
            samples = read_mono(source, start, stop)
        if samples.size == 0:
            raise EmptySelection(f"No samples decoded from {source.file_name}")

        with timed("analyze"):
            table = magnitude_table(samples)
        num_frames, num_bins = table.shape

        resolved_freq = resolve_frequency_range(frequency_range,
                                                source.sample_rate)
        min_bin, max_bin = bin_range(resolved_freq, source.nyquist, num_bins)
        db_window = normalization_window(
            table, min_bin, max_bin, self.config["norm_sample_frames"])

        with timed(f"render {width}x{height}"):
            image, resolved_freq = render(
                table, num_frames, num_bins, source.sample_rate,
                resolved_freq, width, height,
                db_window=db_window,
                max_workers=self.config["max_workers"],
            )
        image.setflags(write=False)

        dt = (time.perf_counter() - t_start) * 1000
        dbg(f"generate {source.file_name}: {num_frames} frames x "
            f"{num_bins} bins, dB window {db_window[0]:.1f}..{db_window[1]:.1f}, "
            f"{dt:.1f} ms")
        return SpectrogramResult(
            image=image,
            time_range=resolved_time,
            frequency_range=resolved_freq,
            duration=source.duration,
            sample_rate=float(source.sample_rate),
            num_frames=num_frames,
            num_bins=num_bins,
            db_window=db_window,
        )


def generate_spectrogram(
    path: str,
    time_range: TimeRange | None = None,
    frequency_range: FrequencyRange | None = None,
    width: int | None = None,
    height: int | None = None,
    config: dict[str, Any] | None = None,
) -> SpectrogramResult:
    """Open *path* and render it in one call."""
    engine = SpectrogramEngine(config)
    return engine.generate(engine.open(path), time_range, frequency_range,
                           width, height)
