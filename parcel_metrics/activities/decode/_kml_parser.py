"""lxml-based KML/KMZ decoder.

Walks the element tree in document order and emits one Feature per
Placemark that carries at least one ``<Polygon>``. Placemarks whose
geometry is only points, lines or other kinds are dropped since they
carry no area. A ``<Polygon>`` that fails validation fails the whole file.
"""

from __future__ import annotations

import io
import logging
import zipfile
from typing import TYPE_CHECKING

from parcel_metrics.activities.decode._constants import (
    KML_GEOMETRY_TAGS,
    KMZ_DEFAULT_MEMBER,
    ZIP_MAGIC,
)
from parcel_metrics.activities.decode._normalization import (
    extract_placemark_attributes,
    parse_coordinates_text,
    strip_namespaces,
)
from parcel_metrics.activities.decode._validation import (
    GeometryValidationError,
    KmlParseError,
    validate_polygon,
)
from parcel_metrics.core.exceptions import NoGeometryFoundError, NoPolygonFoundError
from parcel_metrics.models.feature import Feature, Geometry

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger("parcel_metrics.activities.decode")


def parse_kml_bytes(data: bytes, source_filename: str) -> list[Feature]:
    """Decode KML or KMZ bytes into polygon features.

    Raises:
        KmlParseError: If the payload is not a readable KMZ archive, not
            well-formed XML, or not a KML document.
        NoGeometryFoundError: If no Placemark carries any geometry.
        NoPolygonFoundError: If geometry exists but none of it is a polygon.
        GeometryValidationError: If any polygon is malformed or out of bounds.
    """
    root = load_kml_root(data, source_filename)

    features: list[Feature] = []
    geometry_count = 0

    for idx, placemark in enumerate(root.iter("Placemark")):
        if next(placemark.iter(*KML_GEOMETRY_TAGS), None) is None:
            continue
        geometry_count += 1

        attributes = extract_placemark_attributes(placemark)
        display_name = str(attributes.get("name") or f"Feature {idx}")

        polygons = _parse_placemark_polygons(placemark, display_name, source_filename)
        if not polygons:
            logger.debug("Dropping non-polygon placemark '%s' in %s", display_name, source_filename)
            continue

        features.append(
            Feature(
                geometry=Geometry.from_polygons(polygons),
                attributes=attributes,
                source_file=source_filename,
                feature_index=idx,
            )
        )

    if geometry_count == 0:
        msg = f"No geometry found in KML file {source_filename}"
        raise NoGeometryFoundError(msg, stage="decode_kml")
    if not features:
        msg = f"No polygon found in KML file {source_filename}"
        raise NoPolygonFoundError(msg, stage="decode_kml")

    return features


def load_kml_root(data: bytes, source_filename: str) -> _Element:
    """Unpack (if KMZ), parse and namespace-strip a KML document.

    Raises:
        KmlParseError: If the payload cannot be read as KML.
    """
    from lxml import etree  # type: ignore[attr-defined]

    if data[:4] == ZIP_MAGIC:
        data = _extract_kml_from_kmz(data, source_filename)

    if not data.strip():
        msg = f"KML file is empty: {source_filename}"
        raise KmlParseError(msg)

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root: _Element = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"Not valid XML in {source_filename}: {exc}"
        raise KmlParseError(msg) from exc

    strip_namespaces(root)
    if root.tag != "kml":
        msg = f"Not a KML file: root element is <{root.tag}> in {source_filename}"
        raise KmlParseError(msg)

    return root


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _extract_kml_from_kmz(data: bytes, source_filename: str) -> bytes:
    """Return the ``doc.kml`` member of a KMZ archive, else its first ``.kml``."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = zf.namelist()
            kml_name = next((n for n in names if n.lower() == KMZ_DEFAULT_MEMBER), None)
            if kml_name is None:
                kml_name = next((n for n in names if n.lower().endswith(".kml")), None)
            if kml_name is None:
                msg = f"No .kml document found in KMZ archive {source_filename}"
                raise KmlParseError(msg)
            return zf.read(kml_name)
    except zipfile.BadZipFile as exc:
        msg = f"Corrupt KMZ archive {source_filename}: {exc}"
        raise KmlParseError(msg) from exc


def _parse_placemark_polygons(
    placemark: _Element, display_name: str, source_filename: str
) -> list[list[list[tuple[float, float]]]]:
    """Collect every polygon under a Placemark, including MultiGeometry members.

    Raises:
        GeometryValidationError: If any polygon fails validation.
    """
    polygon_elems = list(placemark.iter("Polygon"))
    polygons: list[list[list[tuple[float, float]]]] = []

    for poly_idx, polygon_elem in enumerate(polygon_elems):
        part_name = display_name
        if len(polygon_elems) > 1:
            part_name = f"{display_name} (part {poly_idx})"

        try:
            rings = _parse_polygon_rings(polygon_elem)
            polygons.append(validate_polygon(rings, part_name))
        except GeometryValidationError as exc:
            msg = f"Invalid polygon '{part_name}' in {source_filename}: {exc.message}"
            raise type(exc)(msg, stage="decode_kml") from exc

    return polygons


def _parse_polygon_rings(polygon_elem: _Element) -> list[list[tuple[float, float]]]:
    """Return ``[exterior, *holes]`` for a namespace-stripped ``<Polygon>``."""
    outer = polygon_elem.find("outerBoundaryIs/LinearRing/coordinates")
    exterior: list[tuple[float, float]] = []
    if outer is not None and outer.text:
        exterior = parse_coordinates_text(outer.text.strip())

    rings = [exterior]
    for inner in polygon_elem.findall("innerBoundaryIs/LinearRing/coordinates"):
        if inner.text:
            ring = parse_coordinates_text(inner.text.strip())
            if ring:
                rings.append(ring)
    return rings
