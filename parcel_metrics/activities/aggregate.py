"""Aggregation activity: measure every feature and total the areas."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial, reduce
from typing import TYPE_CHECKING

from parcel_metrics.activities.measure import measure
from parcel_metrics.core.constants import EARTH_MODEL_SPHERE
from parcel_metrics.core.exceptions import EmptyFeatureSetError
from parcel_metrics.models.measurement import to_hectares, to_km2
from parcel_metrics.models.report import PropertyReport

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parcel_metrics.models.feature import Feature
    from parcel_metrics.models.measurement import Measurement

logger = logging.getLogger("parcel_metrics.activities.aggregate")


def aggregate(
    features: Sequence[Feature],
    source_format: str,
    *,
    earth_model: str = EARTH_MODEL_SPHERE,
    max_workers: int = 1,
    source_file: str = "",
) -> PropertyReport:
    """Measure each feature and fold the results into a ``PropertyReport``.

    Per-polygon measurements keep the order of ``features``. The totals
    in hectares and km² are derived from the summed raw area, never from
    the per-polygon rounded values.

    Args:
        features: Decoded features, in decode order.
        source_format: ``"kml"`` or ``"shapefile"``.
        earth_model: Earth model passed to ``measure``.
        max_workers: Threads used for measurement; ``1`` measures inline.
        source_file: Declared name of the submitted file.

    Raises:
        EmptyFeatureSetError: If ``features`` is empty.
    """
    features = tuple(features)
    if not features:
        msg = f"Cannot aggregate an empty feature set for {source_file or source_format}"
        raise EmptyFeatureSetError(msg)

    measurements = measure_all(features, earth_model=earth_model, max_workers=max_workers)
    total_area = reduce(lambda acc, m: acc + m.area, measurements, 0.0)

    report = PropertyReport(
        source_format=source_format,
        total_area=total_area,
        total_area_hectares=to_hectares(total_area),
        total_area_km2=to_km2(total_area),
        polygon_count=len(measurements),
        polygons=measurements,
        features=features,
        source_file=source_file,
    )

    logger.info(
        "Report aggregated | file=%s | format=%s | polygons=%d | total=%.4f ha",
        source_file,
        source_format,
        report.polygon_count,
        report.total_area_hectares,
    )
    return report


def measure_all(
    features: Sequence[Feature],
    *,
    earth_model: str = EARTH_MODEL_SPHERE,
    max_workers: int = 1,
) -> tuple[Measurement, ...]:
    """Measure features independently, returning results in input order."""
    measure_one = partial(measure, earth_model=earth_model)
    if max_workers <= 1 or len(features) <= 1:
        return tuple(measure_one(f) for f in features)

    with ThreadPoolExecutor(max_workers=min(max_workers, len(features))) as pool:
        # Executor.map yields results in submission order
        return tuple(pool.map(measure_one, features))
