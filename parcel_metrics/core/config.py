"""Pipeline configuration loaded from environment variables.

All values have defaults matching the behaviour callers expect without
any configuration: a 50 MiB upload limit, spherical-earth area, sequential
measurement, and shapefile reprojection to WGS 84 when a ``.prj`` is
present.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out of
    its valid range, so bad configuration surfaces at startup rather than
    on the first request.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from parcel_metrics.core.constants import (
    DEFAULT_ALLOWED_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE_BYTES,
    EARTH_MODEL_SPHERE,
    EARTH_MODELS,
)
from parcel_metrics.core.exceptions import PipelineError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable pipeline configuration.

    Attributes:
        max_file_size_bytes: Largest accepted upload, checked by ingress.
        earth_model: ``"sphere"`` (spherical-excess area) or ``"wgs84"``.
        measure_workers: Thread count for per-feature measurement
            (``1`` measures sequentially).
        reproject_shapefiles: Transform shapefile coordinates to WGS 84
            when the sibling ``.prj`` declares another CRS.
        allowed_extensions: Lower-cased extensions accepted by ingress.
    """

    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES
    earth_model: str = EARTH_MODEL_SPHERE
    measure_workers: int = 1
    reproject_shapefiles: bool = True
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a boolean
                flag is not recognisable.
            ValueError: If a numeric environment variable cannot be parsed
                (e.g. ``PARCEL_MEASURE_WORKERS=abc``).
        """
        extensions_raw = os.getenv("PARCEL_ALLOWED_EXTENSIONS", "")
        extensions = (
            _parse_extensions(extensions_raw) if extensions_raw else DEFAULT_ALLOWED_EXTENSIONS
        )
        config = cls(
            max_file_size_bytes=int(
                os.getenv("PARCEL_MAX_FILE_SIZE_BYTES", str(DEFAULT_MAX_FILE_SIZE_BYTES))
            ),
            earth_model=os.getenv("PARCEL_EARTH_MODEL", EARTH_MODEL_SPHERE).strip().lower(),
            measure_workers=int(os.getenv("PARCEL_MEASURE_WORKERS", "1")),
            reproject_shapefiles=_parse_bool(
                "PARCEL_REPROJECT_SHAPEFILES", os.getenv("PARCEL_REPROJECT_SHAPEFILES", "true")
            ),
            allowed_extensions=extensions,
        )
        _validate(config)
        return config


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigValidationError(key, raw, "must be a boolean (true/false)")


def _parse_extensions(raw: str) -> tuple[str, ...]:
    """Parse ``".shp, kml"`` into ``(".shp", ".kml")``."""
    extensions: list[str] = []
    for token in raw.split(","):
        token = token.strip().lower()
        if not token:
            continue
        extensions.append(token if token.startswith(".") else f".{token}")
    return tuple(extensions)


def _validate(config: PipelineConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.max_file_size_bytes <= 0:
        raise ConfigValidationError(
            "PARCEL_MAX_FILE_SIZE_BYTES",
            config.max_file_size_bytes,
            "must be > 0 (bytes)",
        )

    if config.earth_model not in EARTH_MODELS:
        raise ConfigValidationError(
            "PARCEL_EARTH_MODEL",
            config.earth_model,
            f"must be one of {sorted(EARTH_MODELS)}",
        )

    if config.measure_workers < 1:
        raise ConfigValidationError(
            "PARCEL_MEASURE_WORKERS",
            config.measure_workers,
            "must be >= 1",
        )

    if not config.allowed_extensions:
        raise ConfigValidationError(
            "PARCEL_ALLOWED_EXTENSIONS",
            config.allowed_extensions,
            "must list at least one extension",
        )
