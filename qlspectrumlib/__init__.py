from ._version import __version__
from .errors import (
    SpectrogramError,
    DecodeFailed,
    EmptySelection,
    RenderUnavailable,
)
from .models import (
    AudioSource,
    TimeRange,
    FrequencyRange,
    SpectrogramResult,
    ViewMode,
    ViewState,
    resolve_time_range,
    resolve_frequency_range,
)
from .audio import open_source, read_mono, format_time_label, format_frequency_label
from .analyzer import analyze, magnitude_table, FFT_SIZE, HOP_SIZE
from .renderer import render, color_lut, spectrogram_color
from .engine import SpectrogramEngine, generate_spectrogram
from .controller import SpectrogramController, ERROR_MESSAGE
from .viewport import Selection, is_reset_click, selection_to_ranges
from .config import (
    default_config,
    merge_configs,
    validate_config,
    load_preset,
    save_preset,
    ConfigError,
    ParamSpec,
    SPECTROGRAM_PARAMS,
)
from .events import EventBus

__all__ = [
    "__version__",
    "SpectrogramError",
    "DecodeFailed",
    "EmptySelection",
    "RenderUnavailable",
    "AudioSource",
    "TimeRange",
    "FrequencyRange",
    "SpectrogramResult",
    "ViewMode",
    "ViewState",
    "resolve_time_range",
    "resolve_frequency_range",
    "open_source",
    "read_mono",
    "format_time_label",
    "format_frequency_label",
    "analyze",
    "magnitude_table",
    "FFT_SIZE",
    "HOP_SIZE",
    "render",
    "color_lut",
    "spectrogram_color",
    "SpectrogramEngine",
    "generate_spectrogram",
    "SpectrogramController",
    "ERROR_MESSAGE",
    "Selection",
    "is_reset_click",
    "selection_to_ranges",
    "default_config",
    "merge_configs",
    "validate_config",
    "load_preset",
    "save_preset",
    "ConfigError",
    "ParamSpec",
    "SPECTROGRAM_PARAMS",
    "EventBus",
]
