"""Shared pytest fixtures for the parcel measurement test suite.

Fixture files are written into ``tmp_path`` per test: KML documents as
text, KMZ as a ZIP around a KML document, and shapefiles with pyshp's
writer.
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
import shapefile

from tests.builders import (
    FARM_BLOCK_A,
    FARM_BLOCK_A_HOLE,
    FARM_BLOCK_B,
    POINT_XML,
    kml_document,
    placemark_xml,
    polygon_xml,
)

# ---------------------------------------------------------------------------
# KML fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_kml(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing KML text to ``tmp_path / name``."""

    def _write(text: str, name: str = "farm.kml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def write_kmz(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a KMZ archive holding one KML member."""

    def _write(text: str, name: str = "farm.kmz", member: str = "doc.kml") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr(member, text)
        return path

    return _write


@pytest.fixture()
def single_polygon_kml(write_kml: Callable[..., Path]) -> Path:
    """KML with one farm polygon carrying ExtendedData."""
    return write_kml(
        kml_document(
            placemark_xml("Block A", polygon_xml(FARM_BLOCK_A), {"owner": "Fazenda Boa Vista"})
        )
    )


@pytest.fixture()
def two_polygon_kml(write_kml: Callable[..., Path]) -> Path:
    """KML with two polygon Placemarks and one Point Placemark between them."""
    return write_kml(
        kml_document(
            placemark_xml("Block A", polygon_xml(FARM_BLOCK_A)),
            placemark_xml("Gate", POINT_XML),
            placemark_xml("Block B", polygon_xml(FARM_BLOCK_B)),
        )
    )


# ---------------------------------------------------------------------------
# Shapefile fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_polygon_shapefile(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a polygon shapefile (``.shp``/``.shx``/``.dbf``).

    Each polygon is given as a list of rings; each record gets a ``NAME``
    and ``CROP`` attribute. Returns the ``.shp`` path.
    """

    def _write(
        polygons: list[list[list[tuple[float, float]]]],
        name: str = "farm",
        names: list[str] | None = None,
    ) -> Path:
        base = tmp_path / name
        with shapefile.Writer(str(base), shapeType=shapefile.POLYGON) as writer:
            writer.field("NAME", "C", size=40)
            writer.field("CROP", "C", size=20)
            for idx, rings in enumerate(polygons):
                writer.poly([list(ring) for ring in rings])
                label = names[idx] if names else f"Talhao {idx + 1}"
                writer.record(label, "soy")
        return base.with_suffix(".shp")

    return _write


@pytest.fixture()
def write_line_shapefile(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a polyline-only shapefile."""

    def _write(name: str = "roads") -> Path:
        base = tmp_path / name
        with shapefile.Writer(str(base), shapeType=shapefile.POLYLINE) as writer:
            writer.field("NAME", "C", size=40)
            writer.line([[(-55.52, -12.54), (-55.50, -12.52)]])
            writer.record("Access road")
        return base.with_suffix(".shp")

    return _write


@pytest.fixture()
def farm_shapefile(write_polygon_shapefile: Callable[..., Path]) -> Path:
    """Two-record polygon shapefile: Block A (with a hole) and Block B."""
    return write_polygon_shapefile(
        [[FARM_BLOCK_A, FARM_BLOCK_A_HOLE], [FARM_BLOCK_B]],
        names=["Block A", "Block B"],
    )
