"""Canonical geometry and feature model.

Both decoders (KML and Shapefile) produce ``Feature`` objects: a
``Geometry`` plus the attribute row carried over from the source file.
Coordinates are always WGS 84 ``(longitude, latitude)`` pairs in decimal
degrees.

Ring winding is not normalised here. Consumers that need a specific
orientation (the area computation does) orient the rings themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

Coordinate = tuple[float, float]
Ring = tuple[Coordinate, ...]
PolygonRings = tuple[Ring, ...]

POLYGON = "Polygon"
MULTIPOLYGON = "MultiPolygon"


@dataclass(frozen=True, slots=True)
class Geometry:
    """A polygon or multi-polygon in WGS 84.

    Attributes:
        geom_type: ``"Polygon"`` or ``"MultiPolygon"``.
        polygons: One entry per polygon; each entry is the exterior ring
            followed by any interior rings (holes). Every ring is closed.
    """

    geom_type: str
    polygons: tuple[PolygonRings, ...]

    @classmethod
    def from_polygons(cls, polygons: list[list[list[Coordinate]]]) -> Geometry:
        """Build a geometry, choosing ``Polygon`` for one part and ``MultiPolygon`` otherwise."""
        frozen = tuple(tuple(tuple(ring) for ring in rings) for rings in polygons)
        geom_type = POLYGON if len(frozen) == 1 else MULTIPOLYGON
        return cls(geom_type=geom_type, polygons=frozen)

    @property
    def rings(self) -> list[Ring]:
        """Every ring of every polygon, exterior rings first within each polygon."""
        return [ring for rings in self.polygons for ring in rings]

    @property
    def vertices(self) -> list[Coordinate]:
        """All ring vertices including the closing vertex of each ring."""
        return [coord for ring in self.rings for coord in ring]

    def to_shapely(self) -> BaseGeometry:
        """Return the equivalent shapely ``Polygon`` or ``MultiPolygon``."""
        from shapely.geometry import MultiPolygon, Polygon

        parts = [Polygon(rings[0], holes=list(rings[1:])) for rings in self.polygons]
        if self.geom_type == POLYGON:
            return parts[0]
        return MultiPolygon(parts)

    def to_geojson(self) -> dict[str, object]:
        """Serialise to a GeoJSON geometry dict."""
        polygons = [[[list(c) for c in ring] for ring in rings] for rings in self.polygons]
        if self.geom_type == POLYGON:
            return {"type": POLYGON, "coordinates": polygons[0]}
        return {"type": MULTIPOLYGON, "coordinates": polygons}


@dataclass(frozen=True, slots=True)
class Feature:
    """A decoded polygon geometry plus its attribute row.

    Attributes:
        geometry: The polygon or multi-polygon.
        attributes: Source attributes (DBF row, KML name/description/
            ExtendedData). Empty when the source carries none.
        source_file: Name of the file the feature was decoded from.
        feature_index: Zero-based position of the source record
            (shapefile record number or KML placemark number).
    """

    geometry: Geometry
    attributes: dict[str, object] = field(default_factory=dict)
    source_file: str = ""
    feature_index: int = 0

    @property
    def display_name(self) -> str:
        """Human-facing label used in logs."""
        for key in ("name", "NAME", "Name"):
            value = self.attributes.get(key)
            if value not in (None, ""):
                return str(value)
        return f"Feature {self.feature_index}"

    @property
    def has_holes(self) -> bool:
        """Whether any polygon of this feature has interior rings."""
        return any(len(rings) > 1 for rings in self.geometry.polygons)

    def to_dict(self) -> dict[str, object]:
        """Serialise to a GeoJSON Feature dict."""
        return {
            "type": "Feature",
            "geometry": self.geometry.to_geojson(),
            "properties": dict(self.attributes),
        }
