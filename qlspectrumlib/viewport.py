"""Pixel selections on the displayed image mapped to time/frequency ranges."""

from __future__ import annotations

from dataclasses import dataclass

from .models import FrequencyRange, TimeRange

# Drags smaller than this in both axes are clicks.
RESET_CLICK_PX = 10.0


@dataclass(frozen=True)
class Selection:
    """Drag from ``(x0, y0)`` to ``(x1, y1)`` in viewport pixels.

    Pixel y = 0 is the top edge (highest frequency).
    """
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def left(self) -> float:
        return min(self.x0, self.x1)

    @property
    def right(self) -> float:
        return max(self.x0, self.x1)

    @property
    def top(self) -> float:
        return min(self.y0, self.y1)

    @property
    def bottom(self) -> float:
        return max(self.y0, self.y1)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


def is_reset_click(selection: Selection) -> bool:
    return selection.width < RESET_CLICK_PX and selection.height < RESET_CLICK_PX


def _fraction(value: float, extent: float) -> float:
    return min(max(value / extent, 0.0), 1.0)


def selection_to_ranges(
    selection: Selection,
    viewport_size: tuple[float, float],
    time_range: TimeRange,
    frequency_range: FrequencyRange,
) -> tuple[TimeRange, FrequencyRange]:
    """Convert a pixel selection into ranges inside the visible ones.

    Pixels outside the viewport are clamped onto its edges.
    """
    width, height = viewport_size
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid viewport size {width}x{height}")

    new_time = TimeRange(
        time_range.lo + _fraction(selection.left, width) * time_range.span,
        time_range.lo + _fraction(selection.right, width) * time_range.span,
    )
    # top pixel edge is the upper frequency bound
    new_freq = FrequencyRange(
        frequency_range.lo
        + (1.0 - _fraction(selection.bottom, height)) * frequency_range.span,
        frequency_range.lo
        + (1.0 - _fraction(selection.top, height)) * frequency_range.span,
    )
    return new_time, new_freq
