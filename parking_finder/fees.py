"""Parking fee computation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from . import config
from .models import ParkingLot


@dataclass(frozen=True)
class FeeQuote:
    lot: ParkingLot
    minutes: int
    fee: int


def is_unbillable(lot: ParkingLot) -> bool:
    """A paid lot without a base billing window; fees for it are reported as 0."""
    return not lot.is_free and lot.base_time == 0


def calculate_fee(lot: ParkingLot, minutes: int) -> int:
    """Fee for parking ``minutes`` at ``lot``.

    The base fee covers up to and including ``base_time`` minutes. Every
    started ``add_time`` block after that costs ``add_fee``. A positive
    ``daily_max`` caps the total.
    """
    if lot.is_free or minutes <= 0:
        return 0
    if lot.base_time == 0:
        return 0

    fee = lot.base_fee
    if minutes > lot.base_time and lot.add_time > 0:
        remaining = minutes - lot.base_time
        blocks = -(-remaining // lot.add_time)
        fee += blocks * lot.add_fee

    if lot.daily_max > 0:
        fee = min(fee, lot.daily_max)
    return fee


def fee_table(lot: ParkingLot, durations: Sequence[int] = config.QUICK_DURATIONS) -> List[Tuple[int, int]]:
    return [(minutes, calculate_fee(lot, minutes)) for minutes in durations]


def compare_fees(lots: Iterable[ParkingLot], minutes: int) -> List[FeeQuote]:
    """Quotes for ``minutes`` of parking, cheapest first."""
    quotes = [FeeQuote(lot=lot, minutes=minutes, fee=calculate_fee(lot, minutes)) for lot in lots]
    quotes.sort(key=lambda quote: quote.fee)
    return quotes


def format_fee(fee: int) -> str:
    return f"{fee:,}원"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}분"
    hours, rest = divmod(minutes, 60)
    if rest:
        return f"{hours}시간 {rest}분"
    return f"{hours}시간"


__all__ = [
    "FeeQuote",
    "calculate_fee",
    "is_unbillable",
    "fee_table",
    "compare_fees",
    "format_fee",
    "format_duration",
]
