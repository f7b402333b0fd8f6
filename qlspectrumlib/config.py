from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

PRESET_SCHEMA_VERSION = "1.0"


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class ConfigFieldError:
    """A single validation error for one configuration field.

    Attributes:
        key:     The config key that failed validation.
        value:   The offending value.
        message: Human-readable explanation of what is wrong.
    """
    key: str
    value: Any
    message: str


@dataclass(frozen=True)
class ParamSpec:
    """Declarative specification for a single configuration parameter."""
    key: str
    type: type | tuple              # expected Python type(s)
    default: Any
    label: str                       # short UI label
    description: str = ""            # longer tooltip / help text
    min: float | int | None = None   # inclusive lower bound
    max: float | int | None = None   # inclusive upper bound
    nullable: bool = False           # True if None is valid


SPECTROGRAM_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="image_width", type=int, default=1200, min=1, max=16384,
        label="Image width (px)",
        description="Width of the rendered spectrogram image.",
    ),
    ParamSpec(
        key="image_height", type=int, default=600, min=1, max=16384,
        label="Image height (px)",
        description="Height of the rendered spectrogram image.",
    ),
    ParamSpec(
        key="max_workers", type=int, default=None, min=1, nullable=True,
        label="Render threads",
        description=(
            "Upper bound on threads used to fill image rows. Empty means "
            "the CPU count, capped at 8."
        ),
    ),
    ParamSpec(
        key="norm_sample_frames", type=int, default=100, min=1,
        label="Normalization sample frames",
        description=(
            "Roughly how many evenly spaced frames are scanned to find the "
            "dB range that is mapped onto the color ramp."
        ),
    ),
]


def default_config() -> dict[str, Any]:
    """Returns the built-in default configuration."""
    return {p.key: p.default for p in SPECTROGRAM_PARAMS}


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge config dicts left-to-right; later values override earlier ones."""
    result: dict[str, Any] = {}
    for cfg in configs:
        result.update(cfg)
    return result


def load_preset(path: str) -> dict[str, Any]:
    """
    Load a JSON preset file. Returns a partial config dict.
    Raises ConfigError if the file cannot be read or parsed.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Preset file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in preset file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read preset file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Preset file must contain a JSON object, got {type(data).__name__}")

    return {k: v for k, v in data.items() if k not in ("schema_version", "_description")}


def save_preset(config: dict[str, Any], path: str, *, description: str | None = None) -> None:
    """Save the non-default values of *config* as a JSON preset file."""
    preset: dict[str, Any] = {"schema_version": PRESET_SCHEMA_VERSION}
    if description:
        preset["_description"] = description

    defaults = default_config()
    for k, v in config.items():
        if k.startswith("_"):
            continue
        if k in defaults and defaults[k] == v:
            continue
        preset[k] = v

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(preset, f, indent=4, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Validation  (ParamSpec-driven)
# ---------------------------------------------------------------------------

def validate_param_values(
    params: list[ParamSpec],
    values: dict[str, Any],
) -> list[ConfigFieldError]:
    """Validate *values* against a list of :class:`ParamSpec` definitions.

    Only keys present in *values* are checked; missing keys are not errors
    (they will receive their default).
    """
    errors: list[ConfigFieldError] = []

    for spec in params:
        if spec.key not in values:
            continue
        value = values[spec.key]

        if value is None:
            if not spec.nullable:
                errors.append(ConfigFieldError(
                    spec.key, value, f"{spec.label} must not be empty."))
            continue

        # bool is an int subclass; never accept it for numeric fields
        if isinstance(value, bool) or not isinstance(value, spec.type):
            errors.append(ConfigFieldError(
                spec.key, value,
                f"{spec.label} must be {_type_label(spec.type)}, "
                f"got {type(value).__name__}.",
            ))
            continue

        if spec.min is not None and value < spec.min:
            errors.append(ConfigFieldError(
                spec.key, value, f"{spec.label} must be at least {spec.min}."))
            continue
        if spec.max is not None and value > spec.max:
            errors.append(ConfigFieldError(
                spec.key, value, f"{spec.label} must be at most {spec.max}."))

    return errors


def validate_config(config: dict[str, Any]) -> None:
    """Validate a flat config dict.

    Raises :class:`ConfigError` listing every invalid field.
    """
    errors = validate_param_values(SPECTROGRAM_PARAMS, config)
    if errors:
        lines = [e.message for e in errors]
        raise ConfigError(
            "Configuration has invalid values:\n  • " + "\n  • ".join(lines)
        )


def _type_label(t) -> str:
    """Human-readable label for an expected type or tuple of types."""
    if isinstance(t, tuple):
        return " or ".join(x.__name__ for x in t)
    return t.__name__
