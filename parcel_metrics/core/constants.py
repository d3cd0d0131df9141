"""Shared pipeline constants: single source of truth.

Unit conversions, rounding precision and the file-extension tables used by
the dispatcher, the ingress checks and the shapefile sidecar lookup.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

SQ_METRES_PER_HECTARE: float = 10_000.0
SQ_METRES_PER_KM2: float = 1_000_000.0

# ---------------------------------------------------------------------------
# Rounding (decimal places)
# ---------------------------------------------------------------------------

HECTARE_DECIMALS: int = 4
KM2_DECIMALS: int = 6
COORDINATE_DECIMALS: int = 6

# ---------------------------------------------------------------------------
# Earth models
# ---------------------------------------------------------------------------

EARTH_MODEL_SPHERE: str = "sphere"
"""Sphere of radius ``SPHERE_RADIUS_M`` (spherical-excess area)."""

EARTH_MODEL_WGS84: str = "wgs84"
"""WGS 84 ellipsoid."""

EARTH_MODELS: frozenset[str] = frozenset({EARTH_MODEL_SPHERE, EARTH_MODEL_WGS84})

SPHERE_RADIUS_M: float = 6_378_137.0

# ---------------------------------------------------------------------------
# File extensions
# ---------------------------------------------------------------------------

KML_EXTENSIONS: frozenset[str] = frozenset({".kml", ".kmz"})
SHAPEFILE_EXTENSION: str = ".shp"
SHAPEFILE_INDEX_EXTENSION: str = ".shx"
SHAPEFILE_ATTRIBUTE_EXTENSION: str = ".dbf"
SHAPEFILE_PROJECTION_EXTENSION: str = ".prj"

DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (".shp", ".kml", ".kmz")

DEFAULT_MAX_FILE_SIZE_BYTES: int = 50 * 1024 * 1024
