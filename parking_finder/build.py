"""Build steps that turn raw API dumps into the served artifacts."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable

import pandas as pd

from . import config
from .catalog import region_frame
from .landmarks import LANDMARKS, build_landmark_aggregates
from .models import Landmark, LandmarkAggregate, ParkingLot
from .normalize import NormalizeStats, index_operations, normalize
from .storage import DataStore

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    records_processed: int
    records_output: int
    output_path: Path
    free_count: int = 0
    sido_counts: Dict[str, int] = field(default_factory=dict)


def sido_counts(lots: Iterable[ParkingLot]) -> pd.Series:
    """Lots per province, largest first."""
    frame = region_frame(lots)
    if frame.empty:
        return pd.Series(dtype=int)
    return frame.groupby("sido")["parking_count"].sum().sort_values(ascending=False)


def build_catalog(store: DataStore) -> BuildResult:
    facilities = store.load_raw("facility")
    operations = store.load_raw("operation")
    if not facilities:
        logger.warning("No raw facility records found in %s. Skipping catalog build.", store.data_dir)

    stats = NormalizeStats()
    lots = normalize(facilities, index_operations(operations), stats=stats)
    logger.info("Normalization summary: %s", stats.as_dict())

    counts = sido_counts(lots)
    for sido, count in counts.items():
        logger.info("  %s: %s lots", sido, f"{int(count):,}")
    free_count = sum(1 for lot in lots if lot.is_free)
    logger.info("Total: %s lots (free: %s)", f"{len(lots):,}", f"{free_count:,}")

    output_path = store.save_catalog(lots)
    return BuildResult(
        records_processed=stats.records_in,
        records_output=len(lots),
        output_path=output_path,
        free_count=free_count,
        sido_counts={str(sido): int(count) for sido, count in counts.items()},
    )


def build_landmarks(
    store: DataStore,
    *,
    landmarks: Iterable[Landmark] = LANDMARKS,
    radius_km: float = config.LANDMARK_RADIUS_KM,
) -> Dict[str, LandmarkAggregate]:
    lots = store.load_catalog()
    logger.info("Loaded %s lots from %s", len(lots), store.catalog_path)
    if not lots:
        logger.warning("Catalog is empty. Run the build stage first.")
    aggregates = build_landmark_aggregates(lots, landmarks, radius_km)
    store.save_landmarks(aggregates)
    return aggregates


__all__ = ["BuildResult", "build_catalog", "build_landmarks", "sido_counts"]
