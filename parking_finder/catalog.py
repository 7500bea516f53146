"""Read-only lookup structures over the normalized lot catalog."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from . import geo
from .models import ParkingLot, ParkingType, Region, Sigungu
from .regions import sido_to_slug, sigungu_to_slug

logger = logging.getLogger(__name__)


def type_stats(lots: Iterable[ParkingLot]) -> Dict[ParkingType, int]:
    stats = {parking_type: 0 for parking_type in ParkingType}
    for lot in lots:
        stats[lot.parking_type] += 1
    return stats


def build_regions(lots: Iterable[ParkingLot]) -> List[Region]:
    """Province -> district rollup in first-appearance order."""
    counts: Dict[str, Dict[str, int]] = {}
    for lot in lots:
        districts = counts.setdefault(lot.sido, {})
        districts[lot.sigungu] = districts.get(lot.sigungu, 0) + 1

    return [
        Region(
            sido=sido,
            sido_code=sido_to_slug(sido),
            sigungu=[
                Sigungu(name=name, code=sigungu_to_slug(name), parking_count=count)
                for name, count in districts.items()
            ],
        )
        for sido, districts in counts.items()
    ]


def region_frame(lots: Iterable[ParkingLot]) -> pd.DataFrame:
    """One row per (sido, sigungu) with lot, free lot and capacity totals."""
    columns = ["sido", "sigungu", "parking_count", "free_count", "capacity"]
    rows = [
        {"sido": lot.sido, "sigungu": lot.sigungu, "is_free": lot.is_free, "capacity": lot.capacity}
        for lot in lots
    ]
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows)
    grouped = (
        df.groupby(["sido", "sigungu"], sort=False)
        .agg(
            parking_count=("is_free", "size"),
            free_count=("is_free", "sum"),
            capacity=("capacity", "sum"),
        )
        .reset_index()
    )
    grouped["free_count"] = grouped["free_count"].astype(int)
    return grouped[columns]


@dataclass(frozen=True)
class CatalogIndex:
    """Derived lookups over an immutable lot collection."""

    lots: Tuple[ParkingLot, ...]
    by_id: Mapping[str, ParkingLot]
    by_region: Mapping[str, Mapping[str, Tuple[ParkingLot, ...]]]
    free_only: Tuple[ParkingLot, ...]
    type_stats: Mapping[ParkingType, int]

    @property
    def total(self) -> int:
        return len(self.lots)

    def get(self, lot_id: str) -> Optional[ParkingLot]:
        return self.by_id.get(lot_id)

    def ids(self) -> List[str]:
        return [lot.id for lot in self.lots]

    def by_sido(self, sido: str) -> List[ParkingLot]:
        lots: List[ParkingLot] = []
        for group in self.by_region.get(sido, {}).values():
            lots.extend(group)
        return lots

    def by_sigungu(self, sido: str, sigungu: str) -> List[ParkingLot]:
        return list(self.by_region.get(sido, {}).get(sigungu, ()))

    def free(self, sido: Optional[str] = None, sigungu: Optional[str] = None) -> List[ParkingLot]:
        return [
            lot
            for lot in self.free_only
            if (sido is None or lot.sido == sido) and (sigungu is None or lot.sigungu == sigungu)
        ]

    def by_parking_type(self, parking_type: ParkingType) -> List[ParkingLot]:
        return [lot for lot in self.lots if lot.parking_type is parking_type]

    def regions(self) -> List[Region]:
        return build_regions(self.lots)

    def sigungu_list(self, sido: str) -> List[str]:
        return sorted(self.by_region.get(sido, {}).keys())

    def region_count(self, sido: str) -> int:
        return sum(len(group) for group in self.by_region.get(sido, {}).values())

    def near(self, lat: float, lng: float, radius_km: float = 1.0, max_count: int = 50) -> List[geo.NearbyLot]:
        return geo.find_near(self.lots, lat, lng, radius_km, max_count)

    def nearest_others(self, lot: ParkingLot, k: int = 5) -> List[ParkingLot]:
        return geo.find_nearest_others(self.lots, lot, k)


def build_catalog_index(lots: Sequence[ParkingLot]) -> CatalogIndex:
    by_id: Dict[str, ParkingLot] = {}
    grouped: Dict[str, Dict[str, List[ParkingLot]]] = {}
    for lot in lots:
        if lot.id in by_id:
            logger.warning("Duplicate lot id %s in catalog; keeping first", lot.id)
            continue
        by_id[lot.id] = lot
        grouped.setdefault(lot.sido, {}).setdefault(lot.sigungu, []).append(lot)

    ordered = tuple(by_id.values())
    by_region = {
        sido: MappingProxyType({sigungu: tuple(group) for sigungu, group in districts.items()})
        for sido, districts in grouped.items()
    }
    return CatalogIndex(
        lots=ordered,
        by_id=MappingProxyType(by_id),
        by_region=MappingProxyType(by_region),
        free_only=tuple(lot for lot in ordered if lot.is_free),
        type_stats=MappingProxyType(type_stats(ordered)),
    )


__all__ = [
    "CatalogIndex",
    "build_catalog_index",
    "build_regions",
    "region_frame",
    "type_stats",
]
