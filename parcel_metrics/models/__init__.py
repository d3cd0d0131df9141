"""Data models.

- Geometry / Feature: decoded polygon geometry with its attribute row
- Measurement: area, centroid and bounding box of one feature
- PropertyReport: totals and measurements for one submitted file
"""

from parcel_metrics.models.feature import MULTIPOLYGON, POLYGON, Feature, Geometry
from parcel_metrics.models.measurement import BoundingBox, Centroid, Measurement
from parcel_metrics.models.report import FORMAT_KML, FORMAT_SHAPEFILE, PropertyReport

__all__ = [
    "FORMAT_KML",
    "FORMAT_SHAPEFILE",
    "MULTIPOLYGON",
    "POLYGON",
    "BoundingBox",
    "Centroid",
    "Feature",
    "Geometry",
    "Measurement",
    "PropertyReport",
]
