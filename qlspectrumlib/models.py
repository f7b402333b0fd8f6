from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

# A view whose visible span is below this fraction of the full extent
# counts as zoomed.
ZOOM_SPAN_FRACTION = 0.99


class ViewMode(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR = "error"


@dataclass(frozen=True)
class AudioSource:
    """Handle to a decodable audio file.  Only channel 0 is ever analyzed."""
    path: str
    file_name: str
    sample_rate: int
    total_samples: int
    channels: int = 1

    @property
    def duration(self) -> float:
        return self.total_samples / self.sample_rate

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2.0


@dataclass(frozen=True)
class _Range:
    lo: float
    hi: float

    def __post_init__(self):
        if not (math.isfinite(self.lo) and math.isfinite(self.hi)):
            raise ValueError(f"{type(self).__name__} bounds must be finite")
        if self.lo < 0 or self.lo > self.hi:
            raise ValueError(
                f"{type(self).__name__} requires 0 <= lo <= hi, "
                f"got [{self.lo}, {self.hi}]")

    @property
    def span(self) -> float:
        return self.hi - self.lo

    def contains(self, other: _Range) -> bool:
        return self.lo <= other.lo and other.hi <= self.hi


@dataclass(frozen=True)
class TimeRange(_Range):
    """Closed interval in seconds."""


@dataclass(frozen=True)
class FrequencyRange(_Range):
    """Closed interval in Hz."""


def _clamp_into(lo: float, hi: float, extent: float) -> tuple[float, float]:
    lo = min(max(lo, 0.0), extent)
    hi = min(max(hi, lo), extent)
    return lo, hi


def resolve_time_range(requested: TimeRange | None,
                       duration: float) -> TimeRange:
    """Resolve an optional time window against ``[0, duration]``.

    ``None`` means the full extent.  Bounds past the end of the source are
    pulled back onto it, so the result is always a subset of the extent.
    """
    if requested is None:
        return TimeRange(0.0, duration)
    return TimeRange(*_clamp_into(requested.lo, requested.hi, duration))


def resolve_frequency_range(requested: FrequencyRange | None,
                            sample_rate: float) -> FrequencyRange:
    """Resolve an optional frequency window against ``[0, nyquist]``."""
    nyquist = sample_rate / 2.0
    if requested is None:
        return FrequencyRange(0.0, nyquist)
    return FrequencyRange(*_clamp_into(requested.lo, requested.hi, nyquist))


@dataclass(frozen=True)
class SpectrogramResult:
    """A rendered spectrogram plus the ranges it covers.

    ``image`` is a read-only ``(height, width, 4)`` uint8 RGBA array, row 0
    at the highest frequency.  ``db_window`` is the ``(min, max)`` decibel
    span that was mapped onto the color ramp.
    """
    image: np.ndarray
    time_range: TimeRange
    frequency_range: FrequencyRange
    duration: float
    sample_rate: float
    num_frames: int
    num_bins: int
    db_window: tuple[float, float]

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def is_zoomed(self) -> bool:
        time_zoomed = self.time_range.span < self.duration * ZOOM_SPAN_FRACTION
        freq_zoomed = (self.frequency_range.span
                       < (self.sample_rate / 2.0) * ZOOM_SPAN_FRACTION)
        return time_zoomed or freq_zoomed


@dataclass(frozen=True)
class ViewState:
    """Snapshot of everything the rendering layer observes.

    Instances are immutable; the controller publishes a new one on every
    transition.
    """
    source: AudioSource | None = None
    displayed: SpectrogramResult | None = None
    cached_full: SpectrogramResult | None = None
    is_loading: bool = False
    error: str | None = None
    error_detail: str | None = None
    zoomed: bool = False

    @property
    def mode(self) -> ViewMode:
        if self.is_loading:
            return ViewMode.LOADING
        if self.error is not None:
            return ViewMode.ERROR
        if self.displayed is not None:
            return ViewMode.DISPLAYING
        return ViewMode.UNLOADED

    @property
    def file_name(self) -> str | None:
        return self.source.file_name if self.source is not None else None

    @property
    def time_range(self) -> TimeRange | None:
        return self.displayed.time_range if self.displayed else None

    @property
    def frequency_range(self) -> FrequencyRange | None:
        return self.displayed.frequency_range if self.displayed else None
