"""Per-polygon measurement model.

A ``Measurement`` is derived once from one ``Feature`` and never changed.
Rounded fields are computed in ``Measurement.from_raw`` from the raw
square-metre and degree values, so rounding happens exactly once and is
never re-derived from already-rounded numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from parcel_metrics.core.constants import (
    COORDINATE_DECIMALS,
    HECTARE_DECIMALS,
    KM2_DECIMALS,
    SQ_METRES_PER_HECTARE,
    SQ_METRES_PER_KM2,
)


def to_hectares(area_m2: float) -> float:
    """Convert square metres to hectares, rounded to 4 decimals."""
    return round(area_m2 / SQ_METRES_PER_HECTARE, HECTARE_DECIMALS)


def to_km2(area_m2: float) -> float:
    """Convert square metres to square kilometres, rounded to 6 decimals."""
    return round(area_m2 / SQ_METRES_PER_KM2, KM2_DECIMALS)


def _round_coord(value: float) -> float:
    return round(value, COORDINATE_DECIMALS)


@dataclass(frozen=True, slots=True)
class Centroid:
    """Centroid in WGS 84 decimal degrees."""

    longitude: float
    latitude: float

    def to_dict(self) -> dict[str, float]:
        return {"longitude": self.longitude, "latitude": self.latitude}


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box in WGS 84 decimal degrees."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def to_dict(self) -> dict[str, float]:
        return {
            "minLon": self.min_lon,
            "minLat": self.min_lat,
            "maxLon": self.max_lon,
            "maxLat": self.max_lat,
        }


@dataclass(frozen=True, slots=True)
class Measurement:
    """Geometric metrics for one feature.

    Attributes:
        area: Area in square metres, unrounded.
        area_hectares: ``area / 10 000`` rounded to 4 decimals.
        area_km2: ``area / 1 000 000`` rounded to 6 decimals.
        centroid: Vertex-average centroid, 6 decimals.
        bbox: Bounding box over all ring vertices, 6 decimals.
        attributes: Attribute row of the measured feature.
    """

    area: float
    area_hectares: float
    area_km2: float
    centroid: Centroid
    bbox: BoundingBox
    attributes: dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_raw(
        cls,
        area_m2: float,
        centroid: tuple[float, float],
        bbox: tuple[float, float, float, float],
        attributes: dict[str, object] | None = None,
    ) -> Measurement:
        """Build a measurement from unrounded values, applying all rounding rules."""
        min_lon, min_lat, max_lon, max_lat = bbox
        return cls(
            area=area_m2,
            area_hectares=to_hectares(area_m2),
            area_km2=to_km2(area_m2),
            centroid=Centroid(
                longitude=_round_coord(centroid[0]),
                latitude=_round_coord(centroid[1]),
            ),
            bbox=BoundingBox(
                min_lon=_round_coord(min_lon),
                min_lat=_round_coord(min_lat),
                max_lon=_round_coord(max_lon),
                max_lat=_round_coord(max_lat),
            ),
            attributes=dict(attributes or {}),
        )

    def to_dict(self) -> dict[str, object]:
        """Serialise using the wire keys consumed downstream."""
        return {
            "area": self.area,
            "areaHectares": self.area_hectares,
            "areaKm2": self.area_km2,
            "centroid": self.centroid.to_dict(),
            "bbox": self.bbox.to_dict(),
            "properties": dict(self.attributes),
        }
