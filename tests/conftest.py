"""Shared fixtures for the parking_finder test suite."""

import pytest

from parking_finder.models import ParkingLot, ParkingType
from parking_finder.storage import DataStore


def build_lot(**overrides) -> ParkingLot:
    values = {
        "id": "L1",
        "name": "역삼 공영주차장",
        "address": "서울특별시 강남구 역삼동 1",
        "sido": "서울",
        "sigungu": "강남구",
        "lat": 37.5,
        "lng": 127.0,
        "parking_type": ParkingType.PUBLIC,
        "base_time": 30,
        "base_fee": 1000,
        "add_time": 10,
        "add_fee": 500,
        "daily_max": 0,
    }
    values.update(overrides)
    return ParkingLot(**values)


@pytest.fixture
def make_lot():
    return build_lot


@pytest.fixture
def store(tmp_path):
    return DataStore(tmp_path / "data")


def facility_record(**overrides) -> dict:
    record = {
        "prk_center_id": "F1",
        "prk_plce_nm": "역삼 공영주차장",
        "prk_plce_adres": "서울특별시 강남구 역삼동 1",
        "prk_plce_entrc_la": "37.5",
        "prk_plce_entrc_lo": "127.03",
        "prk_cmprt_co": "120",
    }
    record.update(overrides)
    return record


def operation_record(center_id="F1", **overrides) -> dict:
    record = {
        "prk_center_id": center_id,
        "Monday": {"opertn_start_time": "0900", "opertn_end_time": "1800"},
        "basic_info": {
            "parking_chrge_bs_time": "30",
            "parking_chrge_bs_chrge": "1000",
            "parking_chrge_adit_unit_time": "10",
            "parking_chrge_adit_unit_chrge": "500",
        },
        "fxamt_info": {
            "parking_chrge_one_day_chrge": "10000",
            "parking_chrge_mon_unit_chrge": "150000",
        },
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_facility():
    return facility_record


@pytest.fixture
def make_operation():
    return operation_record
