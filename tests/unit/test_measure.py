"""Tests for the measurement activity.

Covers:
- Spherical area against a known 1 km² square at the equator
- Winding independence and hole subtraction
- Vertex-average centroid and bounding box
- Earth model selection
- Rounding applied once, in Measurement.from_raw
"""

from __future__ import annotations

import pytest

from parcel_metrics.activities.measure import (
    compute_area_m2,
    compute_bbox,
    compute_centroid,
    get_geod,
    measure,
)
from parcel_metrics.core.exceptions import MeasurementError
from parcel_metrics.models.feature import Feature, Geometry
from parcel_metrics.models.measurement import Measurement
from tests.builders import (
    EQUATOR_KM_SQUARE,
    FARM_BLOCK_A,
    FARM_BLOCK_A_HOLE,
    FARM_BLOCK_B,
)


def _polygon(*rings: list[tuple[float, float]]) -> Geometry:
    return Geometry.from_polygons([list(rings)])


class TestArea:
    """Geodesic area in square metres."""

    def test_equator_square_is_one_km2(self) -> None:
        """A 1 km square on the equator measures about 1 km²."""
        area = compute_area_m2(_polygon(EQUATOR_KM_SQUARE))
        assert area == pytest.approx(1_000_000.0, rel=0.005)

    def test_winding_does_not_matter(self) -> None:
        """Clockwise and counter-clockwise rings give the same area."""
        clockwise = compute_area_m2(_polygon(FARM_BLOCK_A))
        counter_clockwise = compute_area_m2(_polygon(list(reversed(FARM_BLOCK_A))))
        assert clockwise > 0
        assert clockwise == pytest.approx(counter_clockwise)

    def test_hole_is_subtracted(self) -> None:
        """Hole area is removed from the exterior's."""
        outer = compute_area_m2(_polygon(FARM_BLOCK_A))
        hole = compute_area_m2(_polygon(FARM_BLOCK_A_HOLE))
        holed = compute_area_m2(_polygon(FARM_BLOCK_A, FARM_BLOCK_A_HOLE))
        assert holed == pytest.approx(outer - hole, rel=1e-9)

    def test_multipolygon_sums_parts(self) -> None:
        """MultiPolygon area is the sum of its parts."""
        multi = Geometry.from_polygons([[FARM_BLOCK_A], [FARM_BLOCK_B]])
        expected = compute_area_m2(_polygon(FARM_BLOCK_A)) + compute_area_m2(
            _polygon(FARM_BLOCK_B)
        )
        assert compute_area_m2(multi) == pytest.approx(expected, rel=1e-9)

    def test_wgs84_differs_from_sphere(self) -> None:
        """The ellipsoid changes the area slightly."""
        sphere = compute_area_m2(_polygon(FARM_BLOCK_B), earth_model="sphere")
        ellipsoid = compute_area_m2(_polygon(FARM_BLOCK_B), earth_model="wgs84")
        assert sphere != ellipsoid
        assert ellipsoid == pytest.approx(sphere, rel=0.01)

    def test_unknown_earth_model(self) -> None:
        """An unknown model name raises MeasurementError."""
        with pytest.raises(MeasurementError, match="Unknown earth model"):
            compute_area_m2(_polygon(FARM_BLOCK_B), earth_model="flat")

    def test_geod_is_cached(self) -> None:
        """get_geod returns one instance per model."""
        assert get_geod("sphere") is get_geod("sphere")

    def test_empty_geometry(self) -> None:
        """A geometry with no polygons cannot be measured."""
        with pytest.raises(MeasurementError, match="Empty geometry"):
            compute_area_m2(Geometry(geom_type="Polygon", polygons=()))


class TestCentroidAndBbox:
    """Centroid is the vertex mean; bbox spans every vertex."""

    def test_centroid_excludes_closing_vertex(self) -> None:
        """The repeated closing vertex does not bias the mean."""
        lon, lat = compute_centroid(_polygon(FARM_BLOCK_A))
        assert lon == pytest.approx(-55.51)
        assert lat == pytest.approx(-12.5325)

    def test_centroid_of_triangle_is_vertex_mean(self) -> None:
        """Triangle centroid is the plain vertex mean."""
        triangle = [(0.0, 0.0), (3.0, 0.0), (0.0, 3.0), (0.0, 0.0)]
        assert compute_centroid(_polygon(triangle)) == pytest.approx((1.0, 1.0))

    def test_bbox(self) -> None:
        """The bbox spans every part of a MultiPolygon."""
        bbox = compute_bbox(Geometry.from_polygons([[FARM_BLOCK_A], [FARM_BLOCK_B]]))
        assert bbox == pytest.approx((-55.52, -12.54, -55.48, -12.525))

    def test_centroid_lies_within_bbox(self) -> None:
        """The centroid stays inside the bbox and valid ranges."""
        result = measure(Geometry.from_polygons([[FARM_BLOCK_A, FARM_BLOCK_A_HOLE]]))
        assert result.bbox.min_lon <= result.centroid.longitude <= result.bbox.max_lon
        assert result.bbox.min_lat <= result.centroid.latitude <= result.bbox.max_lat
        assert -180 <= result.centroid.longitude <= 180
        assert -90 <= result.centroid.latitude <= 90


class TestMeasure:
    """``measure`` wires the computations into a rounded Measurement."""

    def test_feature_attributes_are_copied(self) -> None:
        """Feature attributes are copied, not shared."""
        feature = Feature(geometry=_polygon(FARM_BLOCK_B), attributes={"name": "Block B"})
        result = measure(feature)
        assert result.attributes == {"name": "Block B"}
        assert result.attributes is not feature.attributes

    def test_rounding_from_raw_area(self) -> None:
        """Hectares and km² are rounded from the raw area."""
        result = measure(_polygon(EQUATOR_KM_SQUARE))
        assert result.area_hectares == round(result.area / 10_000, 4)
        assert result.area_km2 == round(result.area / 1_000_000, 6)
        assert result.area_hectares == pytest.approx(100.0, rel=0.005)

    def test_from_raw_rounds_coordinates(self) -> None:
        """from_raw rounds centroid and bbox to 6 decimals."""
        result = Measurement.from_raw(
            12_345.678_9,
            (-55.123_456_789, -12.987_654_321),
            (-55.2, -13.000_000_4, -55.0, -12.9),
        )
        assert result.area == 12_345.678_9
        assert result.area_hectares == 1.2346
        assert result.area_km2 == 0.012346
        assert result.centroid.longitude == -55.123457
        assert result.centroid.latitude == -12.987654
        assert result.bbox.min_lat == -13.0
        assert result.attributes == {}

    def test_to_dict_keys(self) -> None:
        """Measurement dicts use camelCase keys."""
        result = measure(_polygon(FARM_BLOCK_B)).to_dict()
        assert set(result) == {"area", "areaHectares", "areaKm2", "centroid", "bbox", "properties"}
        assert set(result["bbox"]) == {"minLon", "minLat", "maxLon", "maxLat"}
