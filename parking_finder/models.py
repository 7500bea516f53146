"""Domain types for the parking lot catalog."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping


class ParkingType(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    OFF_STREET = "off_street"
    ON_STREET = "on_street"

    @property
    def label(self) -> str:
        return PARKING_TYPE_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "ParkingType":
        for member, text in PARKING_TYPE_LABELS.items():
            if text == label or member.value == label:
                return member
        raise ValueError(f"Unknown parking type: {label!r}")


class OperationType(str, Enum):
    METERED = "metered"
    SUBSCRIPTION = "subscription"
    FREE = "free"

    @property
    def label(self) -> str:
        return OPERATION_TYPE_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "OperationType":
        for member, text in OPERATION_TYPE_LABELS.items():
            if text == label or member.value == label:
                return member
        raise ValueError(f"Unknown operation type: {label!r}")


# Display strings, as written to the catalog artifact and rendered on pages
PARKING_TYPE_LABELS: Dict[ParkingType, str] = {
    ParkingType.PUBLIC: "공영",
    ParkingType.PRIVATE: "민영",
    ParkingType.OFF_STREET: "노외",
    ParkingType.ON_STREET: "노상",
}

OPERATION_TYPE_LABELS: Dict[OperationType, str] = {
    OperationType.METERED: "시간제",
    OperationType.SUBSCRIPTION: "월정액",
    OperationType.FREE: "무료",
}

# Types operated by a local government
PUBLIC_TYPES = frozenset({ParkingType.PUBLIC, ParkingType.OFF_STREET, ParkingType.ON_STREET})


@dataclass(frozen=True)
class ParkingLot:
    """A single normalized parking facility.

    ``is_free`` is derived from the tariff and cannot be set independently.
    """

    id: str
    name: str
    address: str
    sido: str
    sigungu: str
    lat: float
    lng: float
    phone: str = ""
    parking_type: ParkingType = ParkingType.PUBLIC
    operation_type: OperationType = OperationType.METERED
    capacity: int = 0
    weekday_open: str = "00:00"
    weekday_close: str = "23:59"
    sat_open: str = "00:00"
    sat_close: str = "23:59"
    sun_open: str = "00:00"
    sun_close: str = "23:59"
    base_time: int = 30
    base_fee: int = 0
    add_time: int = 10
    add_fee: int = 0
    daily_max: int = 0
    monthly_fee: int = 0

    @property
    def is_free(self) -> bool:
        return self.base_fee == 0 and self.add_fee == 0

    @property
    def is_24_hours(self) -> bool:
        return self.weekday_open == "00:00" and self.weekday_close == "23:59"

    @property
    def is_public(self) -> bool:
        return self.parking_type in PUBLIC_TYPES

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys of the catalog artifact."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "sido": self.sido,
            "sigungu": self.sigungu,
            "parkingType": self.parking_type.label,
            "operationType": self.operation_type.label,
            "capacity": self.capacity,
            "weekdayOpen": self.weekday_open,
            "weekdayClose": self.weekday_close,
            "satOpen": self.sat_open,
            "satClose": self.sat_close,
            "sunOpen": self.sun_open,
            "sunClose": self.sun_close,
            "baseTime": self.base_time,
            "baseFee": self.base_fee,
            "addTime": self.add_time,
            "addFee": self.add_fee,
            "dailyMax": self.daily_max,
            "monthlyFee": self.monthly_fee,
            "isFree": self.is_free,
            "lat": self.lat,
            "lng": self.lng,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParkingLot":
        # isFree in the artifact is ignored; it is recomputed from the tariff.
        return cls(
            id=str(data["id"]),
            name=data["name"],
            address=data.get("address", ""),
            phone=data.get("phone", ""),
            sido=data["sido"],
            sigungu=data.get("sigungu", ""),
            parking_type=ParkingType.from_label(data.get("parkingType", "공영")),
            operation_type=OperationType.from_label(data.get("operationType", "시간제")),
            capacity=int(data.get("capacity", 0)),
            weekday_open=data.get("weekdayOpen", "00:00"),
            weekday_close=data.get("weekdayClose", "23:59"),
            sat_open=data.get("satOpen", "00:00"),
            sat_close=data.get("satClose", "23:59"),
            sun_open=data.get("sunOpen", "00:00"),
            sun_close=data.get("sunClose", "23:59"),
            base_time=int(data.get("baseTime", 0)),
            base_fee=int(data.get("baseFee", 0)),
            add_time=int(data.get("addTime", 0)),
            add_fee=int(data.get("addFee", 0)),
            daily_max=int(data.get("dailyMax", 0)),
            monthly_fee=int(data.get("monthlyFee", 0)),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
        )


@dataclass(frozen=True)
class Sigungu:
    name: str
    code: str
    parking_count: int


@dataclass(frozen=True)
class Region:
    sido: str
    sido_code: str
    sigungu: List[Sigungu] = field(default_factory=list)

    @property
    def parking_count(self) -> int:
        return sum(entry.parking_count for entry in self.sigungu)


@dataclass(frozen=True)
class Landmark:
    name: str
    slug: str
    lat: float
    lng: float
    category: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "lat": self.lat,
            "lng": self.lng,
            "category": self.category,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Landmark":
        return cls(
            name=data["name"],
            slug=data["slug"],
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            category=data.get("category", ""),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class LotSummary:
    """Distance-annotated projection of a lot inside a landmark aggregate."""

    name: str
    address: str
    distance: int
    capacity: int = 0
    parking_type: str = ""
    weekday_open: str = ""
    weekday_close: str = ""
    base_time: int = 0
    base_fee: int = 0
    add_time: int = 0
    add_fee: int = 0
    daily_max: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "capacity": self.capacity,
            "parkingType": self.parking_type,
            "weekdayOpen": self.weekday_open,
            "weekdayClose": self.weekday_close,
            "baseTime": self.base_time,
            "baseFee": self.base_fee,
            "addTime": self.add_time,
            "addFee": self.add_fee,
            "dailyMax": self.daily_max,
            "distance": self.distance,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LotSummary":
        return cls(
            name=data["name"],
            address=data.get("address", ""),
            distance=int(data["distance"]),
            capacity=int(data.get("capacity", 0)),
            parking_type=data.get("parkingType", ""),
            weekday_open=data.get("weekdayOpen", ""),
            weekday_close=data.get("weekdayClose", ""),
            base_time=int(data.get("baseTime", 0)),
            base_fee=int(data.get("baseFee", 0)),
            add_time=int(data.get("addTime", 0)),
            add_fee=int(data.get("addFee", 0)),
            daily_max=int(data.get("dailyMax", 0)),
        )


@dataclass(frozen=True)
class LandmarkAggregate:
    landmark: Landmark
    total: int
    free: int
    paid: int
    public: int
    avg_base_fee: int
    avg_add_fee: int
    avg_daily_max: int
    top_free: List[LotSummary] = field(default_factory=list)
    top_public: List[LotSummary] = field(default_factory=list)
    cheapest: List[LotSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "landmark": self.landmark.to_dict(),
            "total": self.total,
            "free": self.free,
            "paid": self.paid,
            "public": self.public,
            "avgBaseFee": self.avg_base_fee,
            "avgAddFee": self.avg_add_fee,
            "avgDailyMax": self.avg_daily_max,
            "topFree": [entry.to_dict() for entry in self.top_free],
            "topPublic": [entry.to_dict() for entry in self.top_public],
            "cheapest": [entry.to_dict() for entry in self.cheapest],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LandmarkAggregate":
        return cls(
            landmark=Landmark.from_dict(data["landmark"]),
            total=int(data["total"]),
            free=int(data["free"]),
            paid=int(data["paid"]),
            public=int(data["public"]),
            avg_base_fee=int(data.get("avgBaseFee", 0)),
            avg_add_fee=int(data.get("avgAddFee", 0)),
            avg_daily_max=int(data.get("avgDailyMax", 0)),
            top_free=[LotSummary.from_dict(entry) for entry in data.get("topFree", [])],
            top_public=[LotSummary.from_dict(entry) for entry in data.get("topPublic", [])],
            cheapest=[LotSummary.from_dict(entry) for entry in data.get("cheapest", [])],
        )


__all__ = [
    "ParkingType",
    "OperationType",
    "PARKING_TYPE_LABELS",
    "OPERATION_TYPE_LABELS",
    "PUBLIC_TYPES",
    "ParkingLot",
    "Sigungu",
    "Region",
    "Landmark",
    "LotSummary",
    "LandmarkAggregate",
]
