"""Validation helpers shared by the KML and Shapefile decoders.

Responsibilities:
- Decoder exception classes
- Coordinate bounds checking (WGS 84)
- Ring structure validation (closure, vertex count, distinct points)
- Shapely polygon checks (zero area, self-intersection warning)
"""

from __future__ import annotations

import logging

from parcel_metrics.activities.decode._constants import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_DISTINCT_VERTICES,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    MIN_RING_VERTICES,
)
from parcel_metrics.core.exceptions import DecodeError

logger = logging.getLogger("parcel_metrics.activities.decode")

Coordinate = tuple[float, float]


# ---------------------------------------------------------------------------
# Exceptions (public API, re-exported from __init__)
# ---------------------------------------------------------------------------


class KmlParseError(DecodeError):
    """Raised when a KML or KMZ document cannot be parsed."""

    default_stage = "decode_kml"
    default_code = "KML_PARSE_FAILED"


class ShapefileDecodeError(DecodeError):
    """Raised when a ``.shp`` stream is malformed."""

    default_stage = "decode_shapefile"
    default_code = "SHAPEFILE_DECODE_FAILED"


class GeometryValidationError(DecodeError):
    """Raised when a decoded polygon is structurally unusable."""

    default_code = "GEOMETRY_INVALID"


class InvalidCoordinateError(GeometryValidationError):
    """Raised when coordinates are outside valid WGS 84 bounds."""

    default_code = "COORDINATE_INVALID"


# ---------------------------------------------------------------------------
# Coordinate validation
# ---------------------------------------------------------------------------


def validate_coordinates(coords: list[Coordinate], feature_name: str) -> None:
    """Validate that all coordinates are within WGS 84 bounds.

    Raises:
        InvalidCoordinateError: If any coordinate is out of bounds.
    """
    for lon, lat in coords:
        if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE):
            msg = (
                f"Longitude {lon} out of WGS 84 range [{MIN_LONGITUDE}, {MAX_LONGITUDE}] "
                f"in '{feature_name}'"
            )
            raise InvalidCoordinateError(msg)
        if not (MIN_LATITUDE <= lat <= MAX_LATITUDE):
            msg = (
                f"Latitude {lat} out of WGS 84 range [{MIN_LATITUDE}, {MAX_LATITUDE}] "
                f"in '{feature_name}'"
            )
            raise InvalidCoordinateError(msg)


# ---------------------------------------------------------------------------
# Ring validation
# ---------------------------------------------------------------------------


def validate_ring(coords: list[Coordinate], feature_name: str) -> list[Coordinate]:
    """Validate a ring has enough vertices and is closed.

    Returns the (possibly auto-closed) coordinate list.

    Raises:
        GeometryValidationError: If the ring has fewer than 3 distinct points.
    """
    if len(coords) < MIN_DISTINCT_VERTICES:
        msg = (
            f"Polygon ring has only {len(coords)} point(s), need at least "
            f"{MIN_DISTINCT_VERTICES} in '{feature_name}'"
        )
        raise GeometryValidationError(msg)

    if coords[0] != coords[-1]:
        logger.warning("Auto-closing unclosed ring in '%s'", feature_name)
        coords = [*coords, coords[0]]

    if len(coords) < MIN_RING_VERTICES:
        msg = (
            f"Polygon ring has fewer than {MIN_RING_VERTICES} vertices "
            f"(including closure) in '{feature_name}'"
        )
        raise GeometryValidationError(msg)

    if len(set(coords)) < MIN_DISTINCT_VERTICES:
        msg = (
            f"Polygon ring has fewer than {MIN_DISTINCT_VERTICES} distinct points "
            f"in '{feature_name}'"
        )
        raise GeometryValidationError(msg)

    return coords


# ---------------------------------------------------------------------------
# Whole-polygon validation
# ---------------------------------------------------------------------------


def validate_polygon(
    rings: list[list[Coordinate]], feature_name: str
) -> list[list[Coordinate]]:
    """Validate an exterior ring plus holes and return the cleaned rings.

    Any failing ring, exterior or hole, rejects the whole polygon.

    Raises:
        GeometryValidationError: If any ring is unusable or the polygon
            has zero area.
    """
    if not rings or not rings[0]:
        msg = f"Polygon has no exterior ring in '{feature_name}'"
        raise GeometryValidationError(msg)

    validate_coordinates(rings[0], feature_name)
    exterior = validate_ring(rings[0], feature_name)

    holes: list[list[Coordinate]] = []
    for hole in rings[1:]:
        hole_name = f"{feature_name} (hole)"
        validate_coordinates(hole, hole_name)
        holes.append(validate_ring(hole, hole_name))

    validate_shapely_polygon(exterior, holes, feature_name)
    return [exterior, *holes]


def validate_shapely_polygon(
    exterior: list[Coordinate],
    holes: list[list[Coordinate]],
    feature_name: str,
) -> None:
    """Check the polygon with shapely.

    Self-intersecting polygons are logged but kept unchanged, so the
    measured area is that of the submitted rings.

    Raises:
        GeometryValidationError: If the polygon cannot be built or has zero area.
    """
    from shapely.geometry import Polygon

    try:
        poly = Polygon(exterior, holes)
    except Exception as exc:
        msg = f"Cannot create polygon for '{feature_name}': {exc}"
        raise GeometryValidationError(msg) from exc

    if poly.area == 0:
        msg = f"Zero-area polygon in '{feature_name}'"
        raise GeometryValidationError(msg)

    if not poly.is_valid:
        logger.warning(
            "Polygon '%s' is not valid (self-intersection?), measuring as given",
            feature_name,
        )
