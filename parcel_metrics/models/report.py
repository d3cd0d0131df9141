"""Aggregate report for one submitted file."""

from __future__ import annotations

from dataclasses import dataclass, field

from parcel_metrics.models.feature import Feature
from parcel_metrics.models.measurement import Measurement

FORMAT_KML = "kml"
FORMAT_SHAPEFILE = "shapefile"


@dataclass(frozen=True, slots=True)
class PropertyReport:
    """Measurements of every polygon in a file plus their totals.

    ``total_area_hectares`` and ``total_area_km2`` are derived from the
    unrounded ``total_area``, not from the per-polygon rounded values.

    Attributes:
        source_format: ``"kml"`` or ``"shapefile"``.
        total_area: Sum of the raw per-polygon areas in square metres.
        total_area_hectares: ``total_area / 10 000`` rounded to 4 decimals.
        total_area_km2: ``total_area / 1 000 000`` rounded to 6 decimals.
        polygon_count: Number of measured features.
        polygons: Measurements in decode order.
        features: The decoded features, for downstream reuse.
        source_file: Declared name of the submitted file.
    """

    source_format: str
    total_area: float
    total_area_hectares: float
    total_area_km2: float
    polygon_count: int
    polygons: tuple[Measurement, ...]
    features: tuple[Feature, ...] = field(default_factory=tuple)
    source_file: str = ""

    def to_feature_collection(self) -> dict[str, object]:
        """Return the decoded geometry as a GeoJSON FeatureCollection."""
        return {
            "type": "FeatureCollection",
            "features": [feature.to_dict() for feature in self.features],
        }

    def to_dict(self) -> dict[str, object]:
        """Serialise to the flat wire shape."""
        return {
            "format": self.source_format,
            "fileName": self.source_file,
            "totalArea": self.total_area,
            "totalAreaHectares": self.total_area_hectares,
            "totalAreaKm2": self.total_area_km2,
            "polygonCount": self.polygon_count,
            "polygons": [m.to_dict() for m in self.polygons],
            "geoJson": self.to_feature_collection(),
        }
