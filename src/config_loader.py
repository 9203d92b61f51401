"""Configuration loader that parses and validates user-provided TOML."""

from __future__ import annotations

import math
import tomllib
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from .datatypes import (
    AppConfig,
    CaptureConfig,
    CLIConfig,
    EncoderConfig,
    OutputFormat,
    PathsConfig,
    RenderConfig,
    ResolutionTier,
)


class ConfigError(ValueError):
    """Raised when the configuration file is malformed or fails validation."""


_FORMAT_ALIASES: Dict[str, OutputFormat] = {
    "mov": OutputFormat.ALPHA,
    "mp4": OutputFormat.OPAQUE,
}


def _coerce_bool(value: Any, dotted_key: str) -> bool:
    """Return a bool, coercing simple 0/1 representations when necessary."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"0", "1"}:
            return normalized == "1"
        if normalized in {"true", "false"}:
            return normalized == "true"
    raise ConfigError(f"{dotted_key} must be a boolean (use true/false).")


def _coerce_enum(value: Any, dotted_key: str, enum_type: type[Enum]) -> Enum:
    """Return an enum member, matching values or member names case-insensitively."""

    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_type:
            if normalized in {str(member.value).lower(), member.name.lower()}:
                return member
        if enum_type is OutputFormat and normalized in _FORMAT_ALIASES:
            return _FORMAT_ALIASES[normalized]
    raise ConfigError(
        f"{dotted_key} must be one of: {', '.join(str(member.value) for member in enum_type)}"
    )


def coerce_resolution(value: Any, dotted_key: str = "render.resolution") -> ResolutionTier:
    """Resolve ``m``/``h``/``q`` shorthands or tier names to a ResolutionTier."""

    return ResolutionTier(_coerce_enum(value, dotted_key, ResolutionTier))


def coerce_output_format(value: Any, dotted_key: str = "render.output_format") -> OutputFormat:
    """Resolve ``alpha``/``opaque`` or the ``mov``/``mp4`` container aliases."""

    return OutputFormat(_coerce_enum(value, dotted_key, OutputFormat))


def _sanitize_section(raw: dict[str, Any], name: str, cls):
    """
    Coerce a raw TOML table into an instance of ``cls`` with cleaned booleans and enums.

    Parameters:
        raw (dict[str, Any]): Raw TOML section data.
        name (str): Section name used when reporting validation errors.
        cls: Dataclass type used to construct the section object.

    Returns:
        Any: Instantiated dataclass populated with values from ``raw``.

    Raises:
        ConfigError: If the section is not a table or contains invalid keys or values.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    cleaned: Dict[str, Any] = {}
    cls_fields = {field.name: field for field in fields(cls)}
    bool_fields = {name for name, field in cls_fields.items() if field.type is bool}
    enum_fields = {
        field_name: field.type
        for field_name, field in cls_fields.items()
        if isinstance(field.type, type) and issubclass(field.type, Enum)
    }
    nested_fields = {
        name: field.type
        for name, field in cls_fields.items()
        if is_dataclass(field.type)
    }
    for key, value in raw.items():
        if key in bool_fields:
            cleaned[key] = _coerce_bool(value, f"{name}.{key}")
        elif key in enum_fields:
            cleaned[key] = _coerce_enum(value, f"{name}.{key}", enum_fields[key])
        elif key in nested_fields:
            if not isinstance(value, dict):
                raise ConfigError(f"[{name}.{key}] must be a table")
            cleaned[key] = _sanitize_section(value, f"{name}.{key}", nested_fields[key])
        else:
            cleaned[key] = value
    try:
        return cls(**cleaned)
    except TypeError as exc:
        raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc


def _normalize_float(value: Any, dotted_key: str) -> float:
    """Return ``value`` as a finite float, raising ConfigError otherwise."""

    if isinstance(value, bool):
        raise ConfigError(f"{dotted_key} must be a number")
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{dotted_key} must be a number") from exc
    if not math.isfinite(numeric):
        raise ConfigError(f"{dotted_key} must be a finite number")
    return numeric


def _normalize_positive_int(value: Any, dotted_key: str) -> int:
    """Return ``value`` as an int > 0."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{dotted_key} must be an integer")
    if value <= 0:
        raise ConfigError(f"{dotted_key} must be > 0")
    return value


def validate_config(app: AppConfig) -> AppConfig:
    """Validate and normalise an assembled AppConfig in place."""

    render = app.render
    render.fps = _normalize_positive_int(render.fps, "render.fps")
    scale = _normalize_float(render.device_scale_factor, "render.device_scale_factor")
    if scale <= 0:
        raise ConfigError("render.device_scale_factor must be > 0")
    render.device_scale_factor = scale
    duration = _normalize_float(render.duration_seconds, "render.duration_seconds")
    if duration <= 0:
        raise ConfigError("render.duration_seconds must be > 0")
    render.duration_seconds = duration
    render.resolution = coerce_resolution(render.resolution)
    render.output_format = coerce_output_format(render.output_format)

    capture = app.capture
    if isinstance(capture.settle_delay_ms, bool) or not isinstance(capture.settle_delay_ms, int):
        raise ConfigError("capture.settle_delay_ms must be an integer")
    if capture.settle_delay_ms < 0:
        raise ConfigError("capture.settle_delay_ms must be >= 0")
    capture.load_timeout_ms = _normalize_positive_int(capture.load_timeout_ms, "capture.load_timeout_ms")
    capture.selector_timeout_ms = _normalize_positive_int(
        capture.selector_timeout_ms, "capture.selector_timeout_ms"
    )
    browser = str(capture.browser).strip().lower()
    if browser not in {"chromium", "firefox", "webkit"}:
        raise ConfigError("capture.browser must be 'chromium', 'firefox', or 'webkit'")
    capture.browser = browser

    encoder = app.encoder
    if not str(encoder.ffmpeg_path).strip():
        raise ConfigError("encoder.ffmpeg_path must be set")
    encoder.ffmpeg_path = str(encoder.ffmpeg_path).strip()
    timeout_value = _normalize_float(encoder.timeout_seconds, "encoder.timeout_seconds")
    if timeout_value < 0:
        raise ConfigError("encoder.timeout_seconds must be >= 0")
    encoder.timeout_seconds = timeout_value
    if isinstance(encoder.x264_crf, bool) or not isinstance(encoder.x264_crf, int):
        raise ConfigError("encoder.x264_crf must be an integer")
    if encoder.x264_crf < 0 or encoder.x264_crf > 51:
        raise ConfigError("encoder.x264_crf must be between 0 and 51")
    preset = str(encoder.x264_preset).strip().lower()
    valid_presets = {
        "ultrafast",
        "superfast",
        "veryfast",
        "faster",
        "fast",
        "medium",
        "slow",
        "slower",
        "veryslow",
        "placebo",
    }
    if preset not in valid_presets:
        raise ConfigError(f"encoder.x264_preset must be one of: {', '.join(sorted(valid_presets))}")
    encoder.x264_preset = preset
    for key in ("maxrate", "bufsize"):
        raw_rate = str(getattr(encoder, key)).strip()
        if not raw_rate:
            raise ConfigError(f"encoder.{key} must be set")
        setattr(encoder, key, raw_rate)

    work_dir = str(app.paths.work_dir or "").strip()
    app.paths.work_dir = work_dir
    return app


def load_config(path: str | Path | None) -> AppConfig:
    """
    Load and validate an application configuration from a TOML file.

    A ``None`` path or a path that does not exist yields the defaults. The file
    is parsed as UTF-8 TOML (a BOM is accepted), every known section is coerced
    into its dataclass, and the assembled configuration is validated.

    Returns:
        AppConfig: The validated and normalized application configuration.

    Raises:
        ConfigError: If the file is not UTF-8, TOML parsing fails, or any validation rule is violated.
    """

    if path is None or not Path(path).is_file():
        return validate_config(AppConfig())

    with open(path, "rb") as handle:
        raw_bytes = handle.read()
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        raw = tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError("Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML: {exc}") from exc

    app = AppConfig(
        render=_sanitize_section(raw.get("render", {}), "render", RenderConfig),
        capture=_sanitize_section(raw.get("capture", {}), "capture", CaptureConfig),
        encoder=_sanitize_section(raw.get("encoder", {}), "encoder", EncoderConfig),
        paths=_sanitize_section(raw.get("paths", {}), "paths", PathsConfig),
        cli=_sanitize_section(raw.get("cli", {}), "cli", CLIConfig),
    )
    return validate_config(app)
