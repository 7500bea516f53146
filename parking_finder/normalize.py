"""Normalization of raw facility/operation records into catalog lots."""
from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from . import config
from .models import OperationType, ParkingLot, ParkingType
from .regions import extract_sido, extract_sigungu, sido_rank

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# (name markers, type) in priority order; no match means a public lot
PARKING_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], ParkingType], ...] = (
    (("민영", "민간"), ParkingType.PRIVATE),
    (("노상",), ParkingType.ON_STREET),
    (("노외",), ParkingType.OFF_STREET),
)


@dataclass
class NormalizeStats:
    """Counts for a normalization run."""

    records_in: int = 0
    duplicates: int = 0
    rejected: Counter = field(default_factory=Counter)
    lots_out: int = 0

    def as_dict(self) -> Dict[str, int]:
        result = {
            "records_in": self.records_in,
            "duplicates": self.duplicates,
            "lots_out": self.lots_out,
        }
        for reason, count in sorted(self.rejected.items()):
            result[f"rejected_{reason}"] = count
        return result


def parse_int(value: object) -> int:
    """Leading-integer parse; anything unparsable is 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else 0


def parse_coordinate(value: object) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else None


def format_time(raw: object) -> str:
    """``"0930"`` -> ``"09:30"``; malformed input gives ``""``."""
    if raw is None:
        return ""
    text = str(raw).strip()
    if len(text) < 4 or not text[:4].isdigit():
        return ""
    return f"{text[:2]}:{text[2:4]}"


def classify_parking_type(name: str) -> ParkingType:
    for markers, parking_type in PARKING_TYPE_RULES:
        if any(marker in name for marker in markers):
            return parking_type
    return ParkingType.PUBLIC


def in_bounds(lat: float, lng: float) -> bool:
    lat_min, lat_max = config.LAT_BOUNDS
    lng_min, lng_max = config.LNG_BOUNDS
    return lat_min < lat < lat_max and lng_min < lng < lng_max


def index_operations(operations: Iterable[Mapping[str, object]]) -> Dict[str, Mapping[str, object]]:
    """Key operation records by ``prk_center_id``; later records replace earlier ones."""
    indexed: Dict[str, Mapping[str, object]] = {}
    for record in operations:
        center_id = record.get("prk_center_id")
        if center_id:
            indexed[str(center_id)] = record
    return indexed


def _day_hours(operation: Optional[Mapping[str, object]], day: str) -> Tuple[str, str]:
    if not operation:
        return "", ""
    hours = operation.get(day)
    if not isinstance(hours, Mapping):
        return "", ""
    return format_time(hours.get("opertn_start_time")), format_time(hours.get("opertn_end_time"))


def _section(operation: Optional[Mapping[str, object]], key: str) -> Mapping[str, object]:
    if not operation:
        return {}
    section = operation.get(key)
    return section if isinstance(section, Mapping) else {}


def _rejection_reason(record: Mapping[str, object]) -> Optional[str]:
    lat = parse_coordinate(record.get("prk_plce_entrc_la"))
    lng = parse_coordinate(record.get("prk_plce_entrc_lo"))
    if lat is None or lng is None:
        return "coordinates"
    if not in_bounds(lat, lng):
        return "bounds"
    if not extract_sido(str(record.get("prk_plce_adres") or "")):
        return "region"
    if not record.get("prk_plce_nm"):
        return "name"
    return None


def normalize_record(
    facility: Mapping[str, object],
    operation: Optional[Mapping[str, object]] = None,
) -> Optional[ParkingLot]:
    """Build a lot from one facility record and its operation record.

    Returns ``None`` for records that cannot be placed in the catalog.
    """
    if _rejection_reason(facility) is not None:
        return None
    return _build_lot(facility, operation)


def _build_lot(facility: Mapping[str, object], operation: Optional[Mapping[str, object]]) -> ParkingLot:
    address = str(facility.get("prk_plce_adres") or "")
    name = str(facility["prk_plce_nm"])

    weekday_open, weekday_close = _day_hours(operation, "Monday")
    weekday_open = weekday_open or config.DEFAULT_OPEN
    weekday_close = weekday_close or config.DEFAULT_CLOSE
    sat_open, sat_close = _day_hours(operation, "Saturday")
    sun_open, sun_close = _day_hours(operation, "Sunday")

    basic = _section(operation, "basic_info")
    fixed = _section(operation, "fxamt_info")
    base_fee = parse_int(basic.get("parking_chrge_bs_chrge"))
    add_fee = parse_int(basic.get("parking_chrge_adit_unit_chrge"))
    is_free = base_fee == 0 and add_fee == 0

    return ParkingLot(
        id=str(facility["prk_center_id"]),
        name=name,
        address=address,
        phone="",
        sido=extract_sido(address),
        sigungu=extract_sigungu(address),
        parking_type=classify_parking_type(name),
        operation_type=OperationType.FREE if is_free else OperationType.METERED,
        capacity=parse_int(facility.get("prk_cmprt_co")),
        weekday_open=weekday_open,
        weekday_close=weekday_close,
        sat_open=sat_open or weekday_open,
        sat_close=sat_close or weekday_close,
        sun_open=sun_open or weekday_open,
        sun_close=sun_close or weekday_close,
        base_time=parse_int(basic.get("parking_chrge_bs_time")) or config.DEFAULT_BASE_TIME,
        base_fee=base_fee,
        add_time=parse_int(basic.get("parking_chrge_adit_unit_time")) or config.DEFAULT_ADD_TIME,
        add_fee=add_fee,
        daily_max=parse_int(fixed.get("parking_chrge_one_day_chrge")),
        monthly_fee=parse_int(fixed.get("parking_chrge_mon_unit_chrge")),
        lat=parse_coordinate(facility.get("prk_plce_entrc_la")),
        lng=parse_coordinate(facility.get("prk_plce_entrc_lo")),
    )


def sort_catalog(lots: Iterable[ParkingLot]) -> List[ParkingLot]:
    return sorted(lots, key=lambda lot: (sido_rank(lot.sido), lot.sigungu))


def normalize(
    facility_records: Iterable[Mapping[str, object]],
    operation_records_by_id: Mapping[str, Mapping[str, object]],
    *,
    stats: Optional[NormalizeStats] = None,
) -> List[ParkingLot]:
    """Deduplicate, validate, convert and order raw facility records."""
    stats = stats if stats is not None else NormalizeStats()
    seen: set[str] = set()
    lots: List[ParkingLot] = []

    for facility in facility_records:
        stats.records_in += 1
        center_id = str(facility.get("prk_center_id"))
        if center_id in seen:
            stats.duplicates += 1
            continue
        seen.add(center_id)

        reason = _rejection_reason(facility)
        if reason is not None:
            stats.rejected[reason] += 1
            logger.debug("Dropping facility %s (%s)", center_id, reason)
            continue

        lots.append(_build_lot(facility, operation_records_by_id.get(center_id)))

    lots = sort_catalog(lots)
    stats.lots_out = len(lots)
    logger.info("Normalized %s facility records into %s lots", stats.records_in, stats.lots_out)
    return lots


__all__ = [
    "NormalizeStats",
    "PARKING_TYPE_RULES",
    "parse_int",
    "parse_coordinate",
    "format_time",
    "classify_parking_type",
    "in_bounds",
    "index_operations",
    "normalize_record",
    "normalize",
    "sort_catalog",
]
