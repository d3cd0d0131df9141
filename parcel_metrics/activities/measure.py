"""Geometry measurement activity.

Computes area, centroid and bounding box for one polygon or
multi-polygon feature.

- Area is geodesic, computed by pyproj directly on longitude/latitude.
  The default earth model is a sphere of radius 6 378 137 m (spherical
  excess); ``"wgs84"`` selects the WGS 84 ellipsoid. Every polygon is
  oriented before the call so holes subtract from their exterior and the
  result does not depend on the winding of the source rings.
- Centroid is the unweighted mean of the ring vertices (closing vertex
  excluded) over all rings. It is a planar approximation in degree space,
  adequate at parcel scale, not a geodesic centre of mass.
- Bounding box is the min/max over all ring vertices.

Rounding is applied once, in ``Measurement.from_raw``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from parcel_metrics.core.constants import (
    EARTH_MODEL_SPHERE,
    EARTH_MODEL_WGS84,
    SPHERE_RADIUS_M,
)
from parcel_metrics.core.exceptions import MeasurementError
from parcel_metrics.models.feature import Feature, Geometry
from parcel_metrics.models.measurement import Measurement

if TYPE_CHECKING:
    from pyproj import Geod

logger = logging.getLogger("parcel_metrics.activities.measure")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def measure(
    feature: Feature | Geometry,
    *,
    earth_model: str = EARTH_MODEL_SPHERE,
) -> Measurement:
    """Measure a feature (or a bare geometry).

    Args:
        feature: A decoded Feature, or a Geometry with no attributes.
        earth_model: ``"sphere"`` (default) or ``"wgs84"``.

    Returns:
        A Measurement with rounded derived fields.

    Raises:
        MeasurementError: If the geometry has no vertices or the earth
            model is unknown.
    """
    if isinstance(feature, Feature):
        geometry = feature.geometry
        attributes = feature.attributes
        name = feature.display_name
    else:
        geometry = feature
        attributes = {}
        name = geometry.geom_type

    area_m2 = compute_area_m2(geometry, earth_model=earth_model)
    centroid = compute_centroid(geometry)
    bbox = compute_bbox(geometry)

    logger.info(
        "Feature measured | feature=%s | area=%.2f m2 | bbox=[%.6f, %.6f, %.6f, %.6f] | "
        "centroid=(%.6f, %.6f) | earth_model=%s",
        name,
        area_m2,
        *bbox,
        *centroid,
        earth_model,
    )

    return Measurement.from_raw(area_m2, centroid, bbox, attributes)


# ---------------------------------------------------------------------------
# Area
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def get_geod(earth_model: str = EARTH_MODEL_SPHERE) -> Geod:
    """Return the pyproj ``Geod`` for an earth model.

    Raises:
        MeasurementError: If the earth model is unknown.
    """
    from pyproj import Geod

    if earth_model == EARTH_MODEL_SPHERE:
        return Geod(a=SPHERE_RADIUS_M, f=0.0)
    if earth_model == EARTH_MODEL_WGS84:
        return Geod(ellps="WGS84")
    msg = f"Unknown earth model {earth_model!r}"
    raise MeasurementError(msg)


def compute_area_m2(geometry: Geometry, *, earth_model: str = EARTH_MODEL_SPHERE) -> float:
    """Compute the area of a polygon or multi-polygon in square metres.

    Holes are subtracted from their exterior ring.

    Raises:
        MeasurementError: If the geometry is empty.
    """
    _validate_geometry(geometry, "area computation")

    from shapely.geometry import MultiPolygon
    from shapely.geometry.polygon import orient

    shape = geometry.to_shapely()
    parts = list(shape.geoms) if isinstance(shape, MultiPolygon) else [shape]
    oriented = MultiPolygon([orient(part, sign=1.0) for part in parts])

    area_m2, _perimeter = get_geod(earth_model).geometry_area_perimeter(oriented)
    return abs(float(area_m2))


# ---------------------------------------------------------------------------
# Centroid
# ---------------------------------------------------------------------------


def compute_centroid(geometry: Geometry) -> tuple[float, float]:
    """Compute the vertex-average centroid as ``(lon, lat)``.

    Each ring contributes its distinct vertices once; the closing vertex
    that repeats the first point is excluded.

    Raises:
        MeasurementError: If the geometry is empty.
    """
    _validate_geometry(geometry, "centroid computation")

    from shapely.geometry import MultiPoint

    points: list[tuple[float, float]] = []
    for ring in geometry.rings:
        closed = len(ring) > 1 and ring[0] == ring[-1]
        points.extend(ring[:-1] if closed else ring)

    centroid = MultiPoint(points).centroid
    return (centroid.x, centroid.y)


# ---------------------------------------------------------------------------
# Bounding Box
# ---------------------------------------------------------------------------


def compute_bbox(geometry: Geometry) -> tuple[float, float, float, float]:
    """Compute ``(min_lon, min_lat, max_lon, max_lat)`` over every ring vertex.

    Raises:
        MeasurementError: If the geometry is empty.
    """
    _validate_geometry(geometry, "bbox computation")

    from shapely.geometry import MultiPoint

    min_lon, min_lat, max_lon, max_lat = MultiPoint(geometry.vertices).bounds
    return (min_lon, min_lat, max_lon, max_lat)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_geometry(geometry: Geometry, context: str) -> None:
    """Raise ``MeasurementError`` if the geometry has no polygon with vertices."""
    if not geometry.polygons or not any(ring for ring in geometry.rings):
        msg = f"Empty geometry: no coordinates provided for {context}"
        raise MeasurementError(msg)
