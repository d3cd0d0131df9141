"""Parcel boundary measurement pipeline.

Decodes user-submitted land-parcel geometry (ESRI Shapefile, KML or KMZ),
measures each polygon's area, centroid and bounding box on a spherical
earth, and aggregates the results into a single property report.
"""

__version__ = "0.1.0"
