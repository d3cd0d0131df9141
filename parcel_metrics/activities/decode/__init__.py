"""Geometry decoding: KML/KMZ and ESRI Shapefile to canonical Features.

The decoders are split into focused stages:
- **_validation**: coordinate bounds, ring structure, shapely checks
- **_normalization**: raw coord → tuple, namespace stripping, attributes
- **_kml_parser**: lxml element-tree walker for KML and KMZ
- **_shapefile_parser**: pyshp record reader with ``.dbf``/``.prj`` sidecars

Both decoders keep only Polygon/MultiPolygon geometry and preserve source
order. A polygon that fails validation fails the whole file with a
``GeometryValidationError`` naming the feature and the file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from parcel_metrics.activities.decode._constants import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    MIN_RING_VERTICES,
)
from parcel_metrics.activities.decode._kml_parser import load_kml_root, parse_kml_bytes
from parcel_metrics.activities.decode._normalization import (
    coords_to_tuples,
    parse_coordinates_text,
)
from parcel_metrics.activities.decode._shapefile_parser import (
    find_sibling,
    parse_shapefile,
)
from parcel_metrics.activities.decode._validation import (
    GeometryValidationError,
    InvalidCoordinateError,
    KmlParseError,
    ShapefileDecodeError,
    validate_coordinates,
    validate_polygon,
    validate_ring,
)
from parcel_metrics.core.exceptions import MissingFileError
from parcel_metrics.models.feature import Feature

logger = logging.getLogger("parcel_metrics.activities.decode")

__all__ = [
    "MAX_LATITUDE",
    "MAX_LONGITUDE",
    "MIN_LATITUDE",
    "MIN_LONGITUDE",
    "MIN_RING_VERTICES",
    "GeometryValidationError",
    "InvalidCoordinateError",
    "KmlParseError",
    "ShapefileDecodeError",
    "coords_to_tuples",
    "decode_kml",
    "decode_kml_file",
    "decode_shapefile",
    "find_sibling",
    "load_kml_root",
    "parse_coordinates_text",
    "validate_coordinates",
    "validate_polygon",
    "validate_ring",
]


def decode_kml(data: bytes, *, source_filename: str = "") -> list[Feature]:
    """Decode KML (or KMZ) bytes into polygon features.

    Args:
        data: Raw file contents.
        source_filename: Name recorded on each Feature and used in messages.

    Returns:
        One Feature per polygon Placemark, in document order.

    Raises:
        KmlParseError: If the payload is not readable KML/KMZ.
        NoGeometryFoundError: If the document contains no geometry.
        NoPolygonFoundError: If it contains geometry but no polygon.
        GeometryValidationError: If any polygon is malformed or out of bounds.
    """
    source_filename = source_filename or "<bytes>"
    logger.info("Decoding KML | file=%s | bytes=%d", source_filename, len(data))
    features = parse_kml_bytes(data, source_filename)
    logger.info("Decoded %d polygon feature(s) from %s", len(features), source_filename)
    return features


def decode_kml_file(kml_path: Path | str, *, source_filename: str = "") -> list[Feature]:
    """Read a KML/KMZ file from disk and decode it.

    Raises:
        MissingFileError: If the file does not exist.
        KmlParseError: If the file cannot be read or parsed.
        NoGeometryFoundError: If the document contains no geometry.
        NoPolygonFoundError: If it contains geometry but no polygon.
        GeometryValidationError: If any polygon is malformed or out of bounds.
    """
    kml_path = Path(kml_path)
    if not kml_path.is_file():
        raise MissingFileError(str(kml_path), stage="decode_kml")
    try:
        data = kml_path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read KML file: {exc}"
        raise KmlParseError(msg) from exc
    return decode_kml(data, source_filename=source_filename or kml_path.name)


def decode_shapefile(
    shp_path: Path | str, *, source_filename: str = "", reproject: bool = True
) -> list[Feature]:
    """Decode a ``.shp`` file (with sibling ``.shx``/``.dbf``/``.prj``) into polygon features.

    Args:
        shp_path: Path to the ``.shp`` file.
        source_filename: Name recorded on each Feature (defaults to the file name).
        reproject: Transform to WGS 84 when the ``.prj`` declares another CRS.

    Returns:
        One Feature per polygon record, in record order.

    Raises:
        MissingFileError: If the ``.shp`` file is absent.
        ShapefileDecodeError: If the ``.shp`` stream is malformed.
        NoGeometryFoundError: If the file holds zero records.
        NoPolygonFoundError: If no record is a polygon.
        GeometryValidationError: If any polygon record is malformed or out of bounds.
    """
    shp_path = Path(shp_path)
    source_filename = source_filename or shp_path.name
    logger.info("Decoding Shapefile | file=%s", source_filename)
    features = parse_shapefile(shp_path, source_filename, reproject=reproject)
    logger.info("Decoded %d polygon feature(s) from %s", len(features), source_filename)
    return features
