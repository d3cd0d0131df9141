"""Property file pipeline: dispatch → decode → measure → aggregate.

``process_property_file`` is the core entry point. It selects a decoder
from the declared file name's extension (never by sniffing content),
decodes the file, and aggregates the measurements into a
``PropertyReport``. Every failure is a typed ``PipelineError``; no
partial report is ever returned and nothing is retried.

``run_property_upload`` wraps the pipeline for upload endpoints: ingress
checks, processing and formatting, with the outcome reported as a
success/failure envelope instead of an exception.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from parcel_metrics.activities.aggregate import aggregate
from parcel_metrics.activities.decode import decode_kml_file, decode_shapefile
from parcel_metrics.activities.format_report import format_report
from parcel_metrics.core.config import PipelineConfig
from parcel_metrics.core.constants import KML_EXTENSIONS, SHAPEFILE_EXTENSION
from parcel_metrics.core.exceptions import PipelineError, UnsupportedFormatError
from parcel_metrics.core.ingress import declared_extension, validate_upload
from parcel_metrics.models.report import FORMAT_KML, FORMAT_SHAPEFILE

if TYPE_CHECKING:
    from parcel_metrics.models.feature import Feature
    from parcel_metrics.models.report import PropertyReport

logger = logging.getLogger("parcel_metrics.orchestrators.property_pipeline")


class SourceFormat(enum.Enum):
    """Supported input formats. Each member knows how to decode its files."""

    KML = FORMAT_KML
    SHAPEFILE = FORMAT_SHAPEFILE

    def decode(
        self, file_path: Path, *, source_filename: str, config: PipelineConfig
    ) -> list[Feature]:
        """Decode ``file_path`` with this format's decoder."""
        if self is SourceFormat.KML:
            return decode_kml_file(file_path, source_filename=source_filename)
        return decode_shapefile(
            file_path,
            source_filename=source_filename,
            reproject=config.reproject_shapefiles,
        )


def detect_format(declared_file_name: str) -> SourceFormat:
    """Select the input format from the declared name's extension (case-insensitive).

    Raises:
        UnsupportedFormatError: If the extension is not ``.kml``, ``.kmz`` or ``.shp``.
    """
    extension = declared_extension(declared_file_name)
    if extension in KML_EXTENSIONS:
        return SourceFormat.KML
    if extension == SHAPEFILE_EXTENSION:
        return SourceFormat.SHAPEFILE
    raise UnsupportedFormatError(extension)


def process_property_file(
    file_path: Path | str,
    declared_file_name: str,
    *,
    config: PipelineConfig | None = None,
) -> PropertyReport:
    """Decode and measure a property boundary file.

    Args:
        file_path: Path to the stored file (for shapefiles, the ``.shp``;
            its ``.shx``/``.dbf``/``.prj`` siblings share its base name).
        declared_file_name: Client-supplied name; its extension selects
            the decoder.
        config: Pipeline configuration (defaults to ``PipelineConfig()``).

    Returns:
        The aggregated ``PropertyReport``.

    Raises:
        UnsupportedFormatError: Unknown extension.
        MissingFileError: The file does not exist.
        NoGeometryFoundError: The file holds no geometry.
        NoPolygonFoundError: The file holds geometry but no polygon.
        EmptyFeatureSetError: The aggregator received no features.
        DecodeError: The file is structurally malformed.
    """
    config = config or PipelineConfig()
    source_format = detect_format(declared_file_name)

    logger.info(
        "Processing property file | file=%s | format=%s",
        declared_file_name,
        source_format.value,
    )

    features = source_format.decode(
        Path(file_path), source_filename=declared_file_name, config=config
    )
    return aggregate(
        features,
        source_format.value,
        earth_model=config.earth_model,
        max_workers=config.measure_workers,
        source_file=declared_file_name,
    )


# ---------------------------------------------------------------------------
# Upload envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Result of ``run_property_upload``.

    Attributes:
        success: Whether a report was produced.
        message: Summary text on success, error text on failure.
        data: Structured report on success, else ``None``.
        error: ``PipelineError.to_error_dict()`` on failure, else ``None``.
        report: The ``PropertyReport`` on success.
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: dict[str, object] | None = None
    report: PropertyReport | None = field(default=None, repr=False)


def run_property_upload(
    file_path: Path | str,
    declared_file_name: str,
    *,
    config: PipelineConfig | None = None,
) -> UploadOutcome:
    """Validate, process and format an uploaded property file.

    ``PipelineError`` failures are returned as ``success=False`` outcomes;
    any other exception propagates.
    """
    config = config or PipelineConfig()
    try:
        validate_upload(file_path, declared_file_name, config=config)
        report = process_property_file(file_path, declared_file_name, config=config)
    except PipelineError as exc:
        logger.warning(
            "Property file rejected | file=%s | code=%s | error=%s",
            declared_file_name,
            exc.code,
            exc.message,
        )
        return UploadOutcome(
            success=False,
            message=f"Could not process file: {exc.message}",
            error=exc.to_error_dict(),
        )

    formatted = format_report(report, file_name=declared_file_name)
    return UploadOutcome(
        success=True,
        message=formatted.summary,
        data=formatted.structured,
        report=report,
    )
