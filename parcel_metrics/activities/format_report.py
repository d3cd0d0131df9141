"""Result formatting: structured object plus a human-readable summary.

Pure projection of a ``PropertyReport``: no measurement happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from parcel_metrics.models.measurement import Measurement
    from parcel_metrics.models.report import PropertyReport


@dataclass(frozen=True, slots=True)
class FormattedReport:
    """A report rendered for callers.

    Attributes:
        summary: Multi-line text suitable for a chat-style message.
        structured: JSON-serialisable dict.
    """

    summary: str
    structured: dict[str, Any]


def format_report(report: PropertyReport, *, file_name: str = "") -> FormattedReport:
    """Render a report as summary text and a structured dict."""
    file_name = file_name or report.source_file
    return FormattedReport(
        summary=render_summary(report, file_name=file_name),
        structured=render_structured(report, file_name=file_name),
    )


def render_structured(report: PropertyReport, *, file_name: str = "") -> dict[str, Any]:
    return {
        "format": report.source_format,
        "fileName": file_name or "unknown",
        "totalArea": {
            "squareMeters": report.total_area,
            "hectares": report.total_area_hectares,
            "squareKilometers": report.total_area_km2,
        },
        "polygonCount": report.polygon_count,
        "polygons": [_structured_polygon(m) for m in report.polygons],
        "geoJson": report.to_feature_collection(),
    }


def _structured_polygon(measurement: Measurement) -> dict[str, Any]:
    return {
        "area": {
            "squareMeters": measurement.area,
            "hectares": measurement.area_hectares,
            "squareKilometers": measurement.area_km2,
        },
        "centroid": measurement.centroid.to_dict(),
        "bbox": measurement.bbox.to_dict(),
        "properties": dict(measurement.attributes),
    }


def render_summary(report: PropertyReport, *, file_name: str = "") -> str:
    """Build the multi-line summary.

    The per-polygon breakdown is only included when the file holds more
    than one polygon.
    """
    lines = ["Property information", ""]
    if file_name:
        lines.append(f"File: {file_name}")
    lines.append(f"Format: {report.source_format.upper()}")
    lines.append(f"Polygons: {report.polygon_count}")
    lines.append("")
    lines.append("Total area:")
    lines.append(f"  - {report.total_area_hectares:,} hectares")
    lines.append(f"  - {report.total_area_km2:,} km²")

    if report.polygons:
        first = report.polygons[0].centroid
        lines.append("")
        lines.append("Property centre:")
        lines.append(f"  - Latitude: {first.latitude}")
        lines.append(f"  - Longitude: {first.longitude}")

        if report.polygon_count > 1:
            lines.append("")
            lines.append("Per-polygon details:")
            for number, measurement in enumerate(report.polygons, start=1):
                centroid = measurement.centroid
                lines.append(f"  Polygon {number}:")
                lines.append(f"  - Area: {measurement.area_hectares:,} ha")
                lines.append(f"  - Centre: {centroid.latitude}, {centroid.longitude}")

    return "\n".join(lines)
