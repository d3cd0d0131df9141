"""pyshp-based ESRI Shapefile decoder.

The ``.shp`` geometry stream is read record by record until exhaustion.
Sibling files are looked up next to it under the same base name:

- ``.shx`` (index): optional; without it records are read sequentially.
- ``.dbf`` (attributes): optional; missing or corrupt files degrade to
  empty attribute rows.
- ``.prj`` (CRS): optional; a projected or non-WGS 84 CRS is transformed
  to EPSG:4326 with pyproj.
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import shapefile

from parcel_metrics.activities.decode._constants import WGS84_EPSG
from parcel_metrics.activities.decode._normalization import (
    coords_to_tuples,
    normalize_attribute_value,
)
from parcel_metrics.activities.decode._validation import (
    GeometryValidationError,
    ShapefileDecodeError,
    validate_polygon,
)
from parcel_metrics.core.constants import (
    SHAPEFILE_ATTRIBUTE_EXTENSION,
    SHAPEFILE_EXTENSION,
    SHAPEFILE_INDEX_EXTENSION,
    SHAPEFILE_PROJECTION_EXTENSION,
)
from parcel_metrics.core.exceptions import (
    MissingFileError,
    NoGeometryFoundError,
    NoPolygonFoundError,
)
from parcel_metrics.models.feature import Feature, Geometry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pyproj import Transformer

logger = logging.getLogger("parcel_metrics.activities.decode")

POLYGON_SHAPE_TYPES = frozenset({shapefile.POLYGON, shapefile.POLYGONZ, shapefile.POLYGONM})

Coordinate = tuple[float, float]


def parse_shapefile(
    shp_path: Path, source_filename: str, *, reproject: bool = True
) -> list[Feature]:
    """Decode a shapefile into polygon features, one per polygon record.

    Raises:
        MissingFileError: If the ``.shp`` file does not exist.
        ShapefileDecodeError: If the ``.shp`` stream is malformed.
        NoGeometryFoundError: If the file holds zero records.
        NoPolygonFoundError: If no record is a polygon.
        GeometryValidationError: If any polygon record fails validation.
    """
    if not shp_path.is_file():
        raise MissingFileError(str(shp_path), stage="decode_shapefile")

    base = base_path(shp_path)
    shx_path = find_sibling(base, SHAPEFILE_INDEX_EXTENSION)
    dbf_path = find_sibling(base, SHAPEFILE_ATTRIBUTE_EXTENSION)
    prj_path = find_sibling(base, SHAPEFILE_PROJECTION_EXTENSION)

    transformer = build_transformer(prj_path, source_filename) if reproject else None
    attribute_rows = read_attribute_rows(dbf_path, source_filename)

    features: list[Feature] = []
    record_count = 0

    with contextlib.ExitStack() as stack:
        readers: dict[str, Any] = {"shp": stack.enter_context(shp_path.open("rb"))}
        if shx_path is not None:
            readers["shx"] = stack.enter_context(shx_path.open("rb"))
        else:
            logger.warning(
                "No .shx index next to %s, reading records sequentially", source_filename
            )

        for idx, shape in iter_shapes(readers, source_filename):
            record_count += 1
            attributes = attribute_rows[idx] if idx < len(attribute_rows) else {}
            feature = _shape_to_feature(
                shape, attributes, idx, source_filename, transformer
            )
            if feature is not None:
                features.append(feature)

    if record_count == 0:
        msg = f"No geometry found in Shapefile {source_filename}"
        raise NoGeometryFoundError(msg, stage="decode_shapefile")
    if not features:
        msg = f"No polygon found in Shapefile {source_filename}"
        raise NoPolygonFoundError(msg, stage="decode_shapefile")

    return features


# ---------------------------------------------------------------------------
# Sibling files
# ---------------------------------------------------------------------------


def base_path(shp_path: Path) -> Path:
    """Strip a ``.shp`` suffix (any case); other names are already the base."""
    if shp_path.suffix.lower() == SHAPEFILE_EXTENSION:
        return shp_path.with_suffix("")
    return shp_path


def find_sibling(base: Path, extension: str) -> Path | None:
    """Locate ``base + extension``, accepting lower- or upper-case extensions."""
    for candidate in (extension, extension.upper()):
        path = base.with_name(base.name + candidate)
        if path.is_file():
            return path
    return None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def iter_shapes(
    readers: dict[str, Any], source_filename: str
) -> Iterator[tuple[int, shapefile.Shape]]:
    """Yield ``(record_index, shape)`` pairs lazily, in file order.

    Raises:
        ShapefileDecodeError: If the header or any record is malformed.
    """
    try:
        reader = shapefile.Reader(**readers)
        for idx, shape in enumerate(reader.iterShapes()):
            yield idx, shape
    except Exception as exc:
        msg = f"Malformed Shapefile {source_filename}: {exc}"
        raise ShapefileDecodeError(msg) from exc


def read_attribute_rows(dbf_path: Path | None, source_filename: str) -> list[dict[str, object]]:
    """Read every DBF row as a dict, or return ``[]`` if the file is absent or unreadable.

    Rows are read by position so that row ``i`` always belongs to shape
    ``i``; a row flagged as deleted yields ``{}`` in its slot.
    """
    if dbf_path is None:
        logger.warning("No .dbf next to %s, features will carry no attributes", source_filename)
        return []

    try:
        with dbf_path.open("rb") as dbf_file:
            reader = shapefile.Reader(dbf=dbf_file, encodingErrors="replace")
            field_names = [f[0] for f in reader.fields[1:]]  # skip DeletionFlag
            rows: list[dict[str, object]] = []
            for idx in range(reader.numRecords):
                record = reader.record(idx)
                if record is None:
                    logger.debug("Deleted .dbf row %d in %s", idx, source_filename)
                    rows.append({})
                    continue
                rows.append(
                    {
                        name: normalize_attribute_value(value)
                        for name, value in zip(field_names, record, strict=False)
                    }
                )
            return rows
    except Exception as exc:
        logger.warning(
            "Unreadable .dbf for %s, ignoring attributes: %s",
            source_filename,
            exc,
        )
        return []


def _shape_to_feature(
    shape: shapefile.Shape,
    attributes: dict[str, object],
    idx: int,
    source_filename: str,
    transformer: Transformer | None,
) -> Feature | None:
    """Convert a polygon record into a Feature, or ``None`` for non-polygon records.

    Raises:
        ShapefileDecodeError: If pyshp cannot describe the record's geometry.
        GeometryValidationError: If any polygon of the record fails validation.
    """
    if shape.shapeType not in POLYGON_SHAPE_TYPES:
        logger.debug(
            "Dropping record %d of %s: shape type %s is not a polygon",
            idx,
            source_filename,
            shape.shapeType,
        )
        return None

    display_name = f"record {idx}"
    polygons: list[list[list[Coordinate]]] = []
    try:
        for rings in _geo_interface_polygons(shape, display_name, source_filename):
            if transformer is not None:
                rings = [_transform_ring(ring, transformer) for ring in rings]
            polygons.append(validate_polygon(rings, display_name))
    except GeometryValidationError as exc:
        msg = f"Invalid polygon in {display_name} of {source_filename}: {exc.message}"
        raise type(exc)(msg, stage="decode_shapefile") from exc

    if not polygons:
        return None

    return Feature(
        geometry=Geometry.from_polygons(polygons),
        attributes=attributes,
        source_file=source_filename,
        feature_index=idx,
    )


def _geo_interface_polygons(
    shape: shapefile.Shape, display_name: str, source_filename: str
) -> list[list[list[Coordinate]]]:
    """Group a shape's parts into ``[exterior, *holes]`` polygons via pyshp."""
    try:
        geo = shape.__geo_interface__
    except Exception as exc:
        msg = f"Unreadable {display_name} in {source_filename}: {exc}"
        raise ShapefileDecodeError(msg) from exc

    geom_type = geo.get("type")
    coordinates = geo.get("coordinates", [])
    if geom_type == "Polygon":
        return [[coords_to_tuples(ring) for ring in coordinates]]
    if geom_type == "MultiPolygon":
        return [[coords_to_tuples(ring) for ring in rings] for rings in coordinates]
    msg = f"Unexpected geometry type {geom_type!r} for {display_name} in {source_filename}"
    raise ShapefileDecodeError(msg)


# ---------------------------------------------------------------------------
# CRS
# ---------------------------------------------------------------------------


def build_transformer(prj_path: Path | None, source_filename: str) -> Transformer | None:
    """Return a transformer to WGS 84 lon/lat, or ``None`` when none is needed.

    No ``.prj``, an unparseable ``.prj``, or a ``.prj`` that already
    declares EPSG:4326 all leave coordinates untouched.
    """
    if prj_path is None:
        return None

    from pyproj import CRS, Transformer
    from pyproj.exceptions import CRSError

    try:
        crs = CRS.from_wkt(prj_path.read_text(errors="replace"))
    except (CRSError, OSError) as exc:
        logger.warning(
            "Unreadable .prj for %s, assuming WGS 84 coordinates: %s",
            source_filename,
            exc,
        )
        return None

    if crs.to_epsg() == WGS84_EPSG:
        return None

    logger.info(
        "Reprojecting %s | source_crs=%s | target=EPSG:%d",
        source_filename,
        crs.name,
        WGS84_EPSG,
    )
    return Transformer.from_crs(crs, f"EPSG:{WGS84_EPSG}", always_xy=True)


def _transform_ring(ring: list[Coordinate], transformer: Transformer) -> list[Coordinate]:
    xs = [c[0] for c in ring]
    ys = [c[1] for c in ring]
    lons, lats = transformer.transform(xs, ys)
    return [(float(lon), float(lat)) for lon, lat in zip(lons, lats, strict=True)]
