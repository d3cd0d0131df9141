"""Coordinate and attribute normalization helpers for decoding.

Responsibilities:
- Convert raw coordinate arrays to clean ``(lon, lat)`` tuples
- Parse KML coordinate text strings
- Strip XML namespaces so KML 2.1, 2.2 and un-namespaced documents
  share one set of element paths
- Extract KML Placemark attributes (name, description, ExtendedData)
- Coerce DBF cell values to plain scalars
"""

from __future__ import annotations

import datetime
import re
from decimal import Decimal
from typing import TYPE_CHECKING

from parcel_metrics.activities.decode._validation import GeometryValidationError

if TYPE_CHECKING:
    from lxml.etree import _Element

Coordinate = tuple[float, float]

_TUPLE_COMMA_SPACING = re.compile(r"\s*,\s*")

# ---------------------------------------------------------------------------
# Coordinate normalization
# ---------------------------------------------------------------------------


def coords_to_tuples(raw_coords: object) -> list[Coordinate]:
    """Convert GeoJSON-style coordinate arrays to ``(lon, lat)`` tuples.

    Drops Z/M values (third and later elements) if present.

    Raises:
        GeometryValidationError: If any coordinate element is malformed.
    """
    if not isinstance(raw_coords, list | tuple):
        return []
    coords: list[Coordinate] = []
    for idx, c in enumerate(raw_coords):
        if not isinstance(c, list | tuple):
            msg = (
                f"Malformed coordinate at index {idx}: expected list/tuple, got {type(c).__name__}"
            )
            raise GeometryValidationError(msg)
        if len(c) < 2:
            msg = (
                f"Malformed coordinate at index {idx}: expected at least 2 elements, got {len(c)}"
            )
            raise GeometryValidationError(msg)
        try:
            lon = float(c[0])
            lat = float(c[1])
        except (TypeError, ValueError) as exc:
            msg = (
                f"Malformed coordinate at index {idx}: cannot convert to float "
                f"(lon={c[0]!r}, lat={c[1]!r})"
            )
            raise GeometryValidationError(msg) from exc
        coords.append((lon, lat))
    return coords


def parse_coordinates_text(text: str) -> list[Coordinate]:
    """Parse KML coordinate text (``lon,lat[,alt] lon,lat[,alt] ...``) to tuples.

    Whitespace around the commas inside a tuple is tolerated.

    Raises:
        GeometryValidationError: If a tuple lacks a numeric longitude or latitude.
    """
    coords: list[Coordinate] = []
    for idx, token in enumerate(_TUPLE_COMMA_SPACING.sub(",", text).split()):
        parts = token.split(",")
        try:
            coords.append((float(parts[0]), float(parts[1])))
        except (IndexError, ValueError) as exc:
            msg = f"Malformed coordinate tuple at index {idx}: {token!r}"
            raise GeometryValidationError(msg) from exc
    return coords


# ---------------------------------------------------------------------------
# KML element helpers
# ---------------------------------------------------------------------------


def strip_namespaces(root: _Element) -> None:
    """Replace every element tag with its local name, in place."""
    from lxml import etree  # type: ignore[attr-defined]

    for elem in root.iter():
        # Comments and processing instructions have non-string tags
        if not isinstance(elem.tag, str):
            continue
        elem.tag = etree.QName(elem).localname
    etree.cleanup_namespaces(root)


def _element_text(elem: _Element | None) -> str:
    if elem is None or not elem.text:
        return ""
    return elem.text.strip()


def extract_placemark_attributes(placemark: _Element) -> dict[str, object]:
    """Extract the attribute row of a namespace-stripped Placemark.

    Handles both KML metadata patterns:
    - ``ExtendedData/Data/value``: untyped key-value pairs.
    - ``ExtendedData/SchemaData/SimpleData``: typed fields defined by a
      ``<Schema>`` element.
    """
    attributes: dict[str, object] = {}

    name = _element_text(placemark.find("name"))
    if name:
        attributes["name"] = name
    description = _element_text(placemark.find("description"))
    if description:
        attributes["description"] = description

    for data_elem in placemark.findall("ExtendedData/Data"):
        key = data_elem.get("name", "")
        value = _element_text(data_elem.find("value"))
        if key and value:
            attributes[key] = value

    for simple_data in placemark.findall("ExtendedData/SchemaData/SimpleData"):
        key = simple_data.get("name", "")
        value = _element_text(simple_data)
        if key and value:
            attributes[key] = value

    return attributes


# ---------------------------------------------------------------------------
# DBF value coercion
# ---------------------------------------------------------------------------


def normalize_attribute_value(value: object) -> object:
    """Coerce a DBF cell to a JSON-friendly scalar."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").strip()
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value
