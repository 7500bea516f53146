"""Tests for build.py: raw dumps to catalog, catalog to landmark aggregates."""

import json

from parking_finder.build import build_catalog, build_landmarks, sido_counts
from parking_finder.models import Landmark


def _seed_raw(store, make_facility, make_operation):
    store.save_raw(
        "facility",
        [
            make_facility(prk_center_id="B1", prk_plce_adres="부산광역시 해운대구 우동 1", prk_plce_entrc_la="35.16", prk_plce_entrc_lo="129.16"),
            make_facility(prk_center_id="S1"),
            make_facility(prk_center_id="S2", prk_plce_adres="서울특별시 중구 명동 1"),
            make_facility(prk_center_id="S2"),
            make_facility(prk_center_id="X1", prk_plce_entrc_lo="0"),
        ],
    )
    store.save_raw("operation", [make_operation("S1"), make_operation("B1")])


class TestBuildCatalog:
    def test_writes_sorted_catalog(self, store, make_facility, make_operation):
        _seed_raw(store, make_facility, make_operation)

        result = build_catalog(store)

        assert result.records_processed == 5
        assert result.records_output == 3
        assert result.free_count == 1
        assert result.sido_counts == {"서울": 2, "부산": 1}
        assert result.output_path == store.catalog_path

        records = json.loads(store.catalog_path.read_text(encoding="utf-8"))
        assert [record["id"] for record in records] == ["S1", "S2", "B1"]
        assert records[1]["isFree"] is True

    def test_empty_raw_writes_empty_catalog(self, store):
        result = build_catalog(store)

        assert result.records_output == 0
        assert result.sido_counts == {}
        assert store.load_catalog() == ()


def test_sido_counts_descending(make_lot):
    lots = [make_lot(id="a", sido="부산"), make_lot(id="b"), make_lot(id="c"), make_lot(id="d", sido="제주")]
    counts = sido_counts(lots)
    assert list(counts.index)[0] == "서울"
    assert int(counts["서울"]) == 2


def test_build_landmarks(store, make_lot):
    landmark = Landmark("테스트역", "test-station", 37.5, 127.0, "서울 역세권", "")
    store.save_catalog([make_lot(id=f"L{i}", lat=37.5 + i * 0.001) for i in range(6)])

    aggregates = build_landmarks(store, landmarks=[landmark])

    assert aggregates["test-station"].total == 6
    assert store.load_landmarks() == aggregates
