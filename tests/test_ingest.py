"""Unit tests for ingest.py: paging, retry handling and resumable checkpoints."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from parking_finder.ingest import IngestionStats, ParkingDataIngestor, total_pages
from parking_finder.storage import FetchProgress, StreamProgress


# =========================================================================
# Helpers
# =========================================================================

def _mock_response(status_code=200, json_data=None, text=None):
    """Create a mock requests.Response object."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    if json_data is not None:
        resp.json.return_value = json_data
        resp.text = text if text is not None else json.dumps(json_data)
    else:
        resp.json.side_effect = ValueError("No JSON")
        resp.text = text or ""
    if not resp.ok:
        resp.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status_code}")
    return resp


def _page(key, items, total, result_code="00"):
    return {"resultCode": result_code, "totalCount": str(total), key: items}


def _paged_session(key, total, failing_pages=()):
    """Session whose get() serves ``total`` records in pages of 1000."""

    def fake_get(url, params=None, timeout=None):
        page = int(params["pageNo"])
        if page in failing_pages:
            return _mock_response(500)
        start = (page - 1) * 1000
        count = max(0, min(1000, total - start))
        items = [{"prk_center_id": f"{key}-{start + i}"} for i in range(count)]
        return _mock_response(200, _page(key, items, total))

    session = MagicMock(spec=requests.Session)
    session.get.side_effect = fake_get
    return session


def _ingestor(store, session, **kwargs):
    options = {"service_key": "KEY%3D", "retry_delay": 0, "sleep_seconds": 0, "max_retries": 1}
    options.update(kwargs)
    return ParkingDataIngestor(store, session=session, **options)


# =========================================================================
# fetch_page
# =========================================================================

class TestFetchPage:
    def test_success(self, store):
        session = MagicMock(spec=requests.Session)
        session.get.return_value = _mock_response(200, _page("PrkSttusInfo", [{"prk_center_id": "A"}], 1))

        result = _ingestor(store, session).fetch_page("facility", 1)

        assert result.items == [{"prk_center_id": "A"}]
        assert result.total_count == 1
        url = session.get.call_args.args[0]
        assert url.endswith("/PrkSttusInfo?serviceKey=KEY%3D")
        assert session.get.call_args.kwargs["params"] == {"numOfRows": "1000", "pageNo": "1", "format": "2"}

    @patch("parking_finder.ingest.time.sleep")
    def test_retries_then_succeeds(self, mock_sleep, store):
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = [
            _mock_response(200, text="<OpenAPI_ServiceResponse>SERVICE ERROR</OpenAPI_ServiceResponse>"),
            requests.ConnectionError("reset"),
            _mock_response(200, _page("PrkOprInfo", [], 0)),
        ]

        result = _ingestor(store, session, max_retries=5, retry_delay=5).fetch_page("operation", 3)

        assert result is not None
        assert session.get.call_count == 3
        assert [call.args[0] for call in mock_sleep.call_args_list] == [5, 10]

    @patch("parking_finder.ingest.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep, store):
        session = MagicMock(spec=requests.Session)
        session.get.return_value = _mock_response(503)

        result = _ingestor(store, session, max_retries=3, retry_delay=1).fetch_page("facility", 1)

        assert result is None
        assert session.get.call_count == 3
        assert mock_sleep.call_count == 2

    @pytest.mark.parametrize(
        "payload",
        [
            {"resultCode": "99", "totalCount": "0"},
            {"resultCode": "00", "totalCount": "5", "PrkSttusInfo": "oops"},
        ],
    )
    def test_bad_payload_is_a_failed_page(self, store, payload):
        session = MagicMock(spec=requests.Session)
        session.get.return_value = _mock_response(200, payload)

        assert _ingestor(store, session).fetch_page("facility", 1) is None

    def test_error_forwarding_body(self, store):
        session = MagicMock(spec=requests.Session)
        session.get.return_value = _mock_response(200, text="Error forwarding request")

        assert _ingestor(store, session).fetch_page("facility", 1) is None


# =========================================================================
# collect / run
# =========================================================================

class TestCollect:
    def test_collects_every_page(self, store):
        session = _paged_session("PrkSttusInfo", total=2500)
        stats = IngestionStats()

        progress = _ingestor(store, session).collect("facility", StreamProgress(), stats=stats)

        assert progress == StreamProgress(page=3, total=2500, done=True)
        assert len(store.load_raw("facility")) == 2500
        assert session.get.call_count == 3
        assert stats.pages_fetched == 3
        assert stats.records_fetched == 2500

    def test_max_pages_limits_collection(self, store):
        session = _paged_session("PrkSttusInfo", total=5000)

        progress = _ingestor(store, session).collect("facility", StreamProgress(), max_pages=2)

        assert progress.page == 2
        assert progress.done
        assert len(store.load_raw("facility")) == 2000

    def test_failed_page_is_skipped(self, store):
        session = _paged_session("PrkSttusInfo", total=3000, failing_pages={2})
        stats = IngestionStats()

        progress = _ingestor(store, session).collect("facility", StreamProgress(), stats=stats)

        assert progress.page == 3
        assert progress.done
        assert len(store.load_raw("facility")) == 2000
        assert stats.pages_failed == 1

    @patch("parking_finder.config.MAX_CONSECUTIVE_FAILS", 2)
    def test_stops_after_consecutive_failures(self, store):
        session = _paged_session("PrkSttusInfo", total=6000, failing_pages={2, 3, 4})

        progress = _ingestor(store, session).collect("facility", StreamProgress())

        assert progress.page == 1
        assert not progress.done
        # page 1, then pages 2 and 3 fail and collection stops
        assert session.get.call_count == 3

    def test_first_page_failure_keeps_progress(self, store):
        session = _paged_session("PrkSttusInfo", total=3000, failing_pages={1})

        progress = _ingestor(store, session).collect("facility", StreamProgress())

        assert progress == StreamProgress(page=0, total=0, done=False)
        assert store.load_raw("facility") == []

    def test_resume_appends_after_checkpoint(self, store):
        store.save_raw("facility", [{"prk_center_id": f"old-{i}"} for i in range(1000)])
        session = _paged_session("PrkSttusInfo", total=2000)

        progress = _ingestor(store, session).collect(
            "facility", StreamProgress(page=1, total=2000), resume=True
        )

        assert progress == StreamProgress(page=2, total=2000, done=True)
        assert session.get.call_count == 1
        assert session.get.call_args.kwargs["params"]["pageNo"] == "2"
        assert len(store.load_raw("facility")) == 2000


class TestRun:
    def test_runs_both_streams_and_checkpoints(self, store):
        facility = _paged_session("PrkSttusInfo", total=1500)
        operation = _paged_session("PrkOprInfo", total=800)
        session = MagicMock(spec=requests.Session)

        def route(url, params=None, timeout=None):
            target = facility if "PrkSttusInfo" in url else operation
            return target.get(url, params=params, timeout=timeout)

        session.get.side_effect = route
        progress = FetchProgress()

        stats = _ingestor(store, session).run(progress)

        assert progress.complete
        saved = store.load_progress()
        assert saved.facility_page == 2 and saved.operation_page == 1
        assert saved.facility_done and saved.operation_done
        assert stats.records_fetched == 2300

    def test_completed_streams_are_skipped(self, store):
        session = MagicMock(spec=requests.Session)
        progress = FetchProgress(facility_done=True, operation_done=True)

        _ingestor(store, session).run(progress)

        session.get.assert_not_called()

    @patch("parking_finder.config.SAVE_EVERY_PAGES", 1)
    def test_interrupted_run_resumes_without_duplicates(self, store):
        facility = _paged_session("PrkSttusInfo", total=5000)
        operation = _paged_session("PrkOprInfo", total=0)
        crash_on_page = {"page": 3}

        def route(url, params=None, timeout=None):
            if "PrkSttusInfo" in url:
                if int(params["pageNo"]) == crash_on_page["page"]:
                    raise KeyboardInterrupt
                return facility.get(url, params=params, timeout=timeout)
            return operation.get(url, params=params, timeout=timeout)

        session = MagicMock(spec=requests.Session)
        session.get.side_effect = route

        with pytest.raises(KeyboardInterrupt):
            _ingestor(store, session).run(FetchProgress())

        saved = store.load_progress()
        assert (saved.facility_page, saved.facility_total, saved.facility_done) == (2, 5000, False)
        assert len(store.load_raw("facility")) == 2000

        crash_on_page["page"] = None
        _ingestor(store, session).run(store.load_progress(), resume=True)

        records = store.load_raw("facility")
        assert len(records) == 5000
        assert len({record["prk_center_id"] for record in records}) == 5000
        assert store.load_progress().complete


def test_total_pages():
    assert total_pages(0) == 0
    assert total_pages(1000) == 1
    assert total_pages(1001) == 2
