"""Tests for fees.py: tiered billing, daily cap and display helpers."""

import pytest

from parking_finder.fees import (
    calculate_fee,
    compare_fees,
    fee_table,
    format_duration,
    format_fee,
    is_unbillable,
)


@pytest.fixture
def capped_lot(make_lot):
    return make_lot(base_time=30, base_fee=1000, add_time=10, add_fee=500, daily_max=10000)


class TestCalculateFee:
    def test_within_base_window(self, capped_lot):
        assert calculate_fee(capped_lot, 20) == 1000

    def test_exactly_base_time_charges_base_only(self, capped_lot):
        assert calculate_fee(capped_lot, 30) == 1000

    def test_one_full_increment(self, capped_lot):
        assert calculate_fee(capped_lot, 40) == 1500

    def test_partial_increment_rounds_up(self, capped_lot):
        assert calculate_fee(capped_lot, 41) == 2000
        assert calculate_fee(capped_lot, 45) == 2000

    def test_daily_cap(self, capped_lot):
        assert calculate_fee(capped_lot, 600) == 10000

    def test_cap_never_exceeded(self, capped_lot):
        assert all(calculate_fee(capped_lot, minutes) <= 10000 for minutes in range(0, 1500, 7))

    def test_uncapped_when_daily_max_zero(self, make_lot):
        lot = make_lot(daily_max=0)
        assert calculate_fee(lot, 600) == 1000 + 57 * 500

    @pytest.mark.parametrize("minutes", [0, -5])
    def test_non_positive_minutes(self, capped_lot, minutes):
        assert calculate_fee(capped_lot, minutes) == 0

    def test_free_lot_is_always_zero(self, make_lot):
        lot = make_lot(base_fee=0, add_fee=0, daily_max=5000)
        assert lot.is_free
        assert all(calculate_fee(lot, minutes) == 0 for minutes in (1, 30, 61, 1440))

    def test_zero_base_time_is_unbillable(self, make_lot):
        lot = make_lot(base_time=0)
        assert is_unbillable(lot)
        assert calculate_fee(lot, 120) == 0

    def test_zero_add_time_charges_no_increments(self, make_lot):
        lot = make_lot(add_time=0)
        assert calculate_fee(lot, 300) == 1000

    def test_paid_by_add_fee_only(self, make_lot):
        lot = make_lot(base_fee=0, add_fee=300)
        assert not lot.is_free
        assert calculate_fee(lot, 30) == 0
        assert calculate_fee(lot, 50) == 600


class TestFeeHelpers:
    def test_fee_table_uses_quick_durations(self, capped_lot):
        table = fee_table(capped_lot)
        assert [minutes for minutes, _ in table] == [30, 60, 120, 180, 360, 720]
        assert table[1] == (60, 2500)

    def test_compare_fees_cheapest_first(self, make_lot):
        cheap = make_lot(id="cheap", base_fee=500, add_fee=100)
        pricey = make_lot(id="pricey", base_fee=3000, add_fee=1000)
        free = make_lot(id="free", base_fee=0, add_fee=0)

        quotes = compare_fees([pricey, cheap, free], 60)

        assert [quote.lot.id for quote in quotes] == ["free", "cheap", "pricey"]
        assert quotes[1].fee == 800

    def test_format_fee(self):
        assert format_fee(12500) == "12,500원"

    @pytest.mark.parametrize(
        "minutes,expected",
        [(45, "45분"), (60, "1시간"), (150, "2시간 30분")],
    )
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected
