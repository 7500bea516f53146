"""Tests for storage.py: JSON artifacts and fetch checkpoints."""

import json

import pytest

from parking_finder.models import Landmark, LandmarkAggregate, OperationType, ParkingType
from parking_finder.storage import DataStore, FetchProgress, StreamProgress


class TestFetchProgress:
    def test_camel_case_keys(self):
        progress = FetchProgress(facility_page=12, facility_total=12000, operation_done=True)

        assert progress.to_dict() == {
            "facilityPage": 12,
            "facilityTotal": 12000,
            "operationPage": 0,
            "operationTotal": 0,
            "facilityDone": False,
            "operationDone": True,
        }

    def test_stream_view_and_update(self):
        progress = FetchProgress()
        progress.update("operation", StreamProgress(page=3, total=2500, done=True))

        assert progress.stream("operation") == StreamProgress(page=3, total=2500, done=True)
        assert progress.stream("facility") == StreamProgress()
        assert not progress.complete

    def test_from_dict_tolerates_missing_keys(self):
        progress = FetchProgress.from_dict({"facilityPage": 4})
        assert progress.facility_page == 4
        assert progress.operation_total == 0


class TestDataStore:
    def test_missing_files_load_empty(self, store):
        assert store.load_raw("facility") == []
        assert store.load_catalog() == ()
        assert store.load_landmarks() == {}
        assert store.load_progress() == FetchProgress()

    def test_unknown_stream(self, store):
        with pytest.raises(ValueError):
            store.raw_path("weather")

    def test_raw_must_be_a_list(self, store):
        store.data_dir.mkdir(parents=True)
        store.facility_path.write_text('{"not": "a list"}', encoding="utf-8")
        with pytest.raises(ValueError):
            store.load_raw("facility")

    def test_raw_round_trip_keeps_korean_text(self, store):
        store.save_raw("operation", [{"prk_center_id": "A", "name": "공영주차장"}])

        assert "공영주차장" in store.operation_path.read_text(encoding="utf-8")
        assert store.load_raw("operation") == [{"prk_center_id": "A", "name": "공영주차장"}]
        assert not store.operation_path.with_suffix(".json.tmp").exists()

    def test_progress_round_trip(self, store):
        progress = FetchProgress(facility_page=7, facility_total=7000, facility_done=True)
        store.save_progress(progress)

        assert json.loads(store.progress_path.read_text(encoding="utf-8"))["facilityDone"] is True
        assert store.load_progress() == progress

    def test_catalog_round_trip(self, store, make_lot):
        lots = [
            make_lot(id="A", parking_type=ParkingType.ON_STREET, daily_max=8000),
            make_lot(id="B", base_fee=0, add_fee=0, operation_type=OperationType.FREE),
        ]

        path = store.save_catalog(lots)

        records = json.loads(path.read_text(encoding="utf-8"))
        assert records[0]["parkingType"] == "노상"
        assert records[0]["dailyMax"] == 8000
        assert records[1]["isFree"] is True
        assert store.load_catalog() == tuple(lots)

    def test_landmarks_round_trip(self, store):
        landmark = Landmark("서울역", "seoul-station", 37.5547, 126.9707, "서울 역세권", "서울 중구")
        aggregate = LandmarkAggregate(
            landmark=landmark, total=3, free=1, paid=2, public=2,
            avg_base_fee=1000, avg_add_fee=500, avg_daily_max=0,
            top_free=[], top_public=[], cheapest=[],
        )

        store.save_landmarks({"seoul-station": aggregate})

        assert store.load_landmarks() == {"seoul-station": aggregate}

    def test_data_dir_created_on_first_write(self, tmp_path):
        store = DataStore(tmp_path / "nested" / "data")

        assert store.load_catalog() == ()
        assert not store.data_dir.exists()

        store.save_progress(FetchProgress())
        assert store.data_dir.is_dir()
