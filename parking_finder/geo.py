"""Distance metrics and proximity search over lots.

Two metrics are used for radius searches and they do not agree exactly:

* ``planar``: equirectangular approximation, used by the on-page "near" views.
* ``haversine``: great-circle distance, used when aggregating landmarks.

``find_nearest_others`` ranks by raw degree distance, which is enough for the
"nearby lots" widget and much cheaper.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from .models import ParkingLot

EARTH_RADIUS_KM = 6371.0
KM_PER_DEG_LAT = 111.32

DistanceFn = Callable[[float, float, float, float], float]


@dataclass(frozen=True)
class NearbyLot:
    lot: ParkingLot
    distance_km: float

    @property
    def distance_m(self) -> int:
        return distance_m(self.distance_km)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def planar_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Equirectangular distance; longitude is scaled at the first point's latitude."""
    km_per_deg_lng = KM_PER_DEG_LAT * math.cos(math.radians(lat1))
    d_lat = (lat2 - lat1) * KM_PER_DEG_LAT
    d_lng = (lng2 - lng1) * km_per_deg_lng
    return math.sqrt(d_lat * d_lat + d_lng * d_lng)


def degree_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    return math.sqrt((lat2 - lat1) ** 2 + (lng2 - lng1) ** 2)


METRICS: Dict[str, DistanceFn] = {
    "planar": planar_distance_km,
    "haversine": haversine_km,
}


def distance_m(distance_km: float) -> int:
    """Kilometers to whole meters, rounding halves up."""
    return int(math.floor(distance_km * 1000 + 0.5))


def find_near(
    lots: Iterable[ParkingLot],
    lat: float,
    lng: float,
    radius_km: float = 1.0,
    max_count: Optional[int] = 50,
    *,
    metric: str = "planar",
) -> List[NearbyLot]:
    """Lots within ``radius_km`` of a point, nearest first.

    Lots still at the (0, 0) placeholder position are skipped. ``max_count=None``
    returns every hit.
    """
    try:
        distance_fn = METRICS[metric]
    except KeyError:
        raise ValueError(f"Unsupported distance metric: {metric}") from None

    hits: List[NearbyLot] = []
    for lot in lots:
        if lot.lat == 0:
            continue
        distance = distance_fn(lat, lng, lot.lat, lot.lng)
        if distance <= radius_km:
            hits.append(NearbyLot(lot=lot, distance_km=distance))

    hits.sort(key=lambda hit: hit.distance_km)
    if max_count is None:
        return hits
    return hits[: max(0, int(max_count))]


def find_nearest_others(lots: Iterable[ParkingLot], lot: ParkingLot, k: int = 5) -> List[ParkingLot]:
    candidates = [
        (degree_distance(lot.lat, lot.lng, other.lat, other.lng), other)
        for other in lots
        if other.id != lot.id
    ]
    candidates.sort(key=lambda pair: pair[0])
    return [other for _, other in candidates[: max(0, int(k))]]


__all__ = [
    "NearbyLot",
    "EARTH_RADIUS_KM",
    "KM_PER_DEG_LAT",
    "METRICS",
    "haversine_km",
    "planar_distance_km",
    "degree_distance",
    "distance_m",
    "find_near",
    "find_nearest_others",
]
