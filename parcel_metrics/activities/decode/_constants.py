"""Shared constants for geometry decoding."""

from __future__ import annotations

# WGS 84 coordinate bounds
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0

# Minimum vertices for a valid ring (3 distinct + closing = 4)
MIN_RING_VERTICES = 4
MIN_DISTINCT_VERTICES = 3

WGS84_EPSG = 4326

# ZIP local-file-header magic; a KMZ is a ZIP archive holding KML
ZIP_MAGIC = b"PK\x03\x04"
KMZ_DEFAULT_MEMBER = "doc.kml"

# KML elements that carry geometry (namespace-stripped local names)
KML_GEOMETRY_TAGS = (
    "Point",
    "LineString",
    "LinearRing",
    "Polygon",
    "MultiGeometry",
    "Model",
    "Track",
    "MultiTrack",
)
