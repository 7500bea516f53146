"""Utilities to collect parking facility data from the KOTSA open data API."""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import requests

from . import config
from .storage import DataStore, FetchProgress, StreamProgress

logger = logging.getLogger(__name__)

# stream name -> (endpoint, payload key)
STREAMS: Dict[str, tuple[str, str]] = {
    "facility": (config.FACILITY_ENDPOINT, config.FACILITY_ENDPOINT),
    "operation": (config.OPERATION_ENDPOINT, config.OPERATION_ENDPOINT),
}


class ParkingFinderError(Exception):
    """Base error for the parking data pipeline."""


class ParkingAPIError(ParkingFinderError):
    """The API answered, but not with a usable page of records."""


@dataclass
class PageResult:
    items: List[dict]
    total_count: int


@dataclass
class IngestionStats:
    """Capture summary statistics for a collection run."""

    records_fetched: int = 0
    pages_fetched: int = 0
    pages_failed: int = 0
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, int]:
        return {
            "records_fetched": self.records_fetched,
            "pages_fetched": self.pages_fetched,
            "pages_failed": self.pages_failed,
            "duration_seconds": int((datetime.now(timezone.utc) - self.start_time).total_seconds()),
        }


def _parse_total(value: object) -> int:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return 0


def total_pages(total_count: int, rows_per_page: int = config.ROWS_PER_PAGE) -> int:
    return math.ceil(total_count / rows_per_page)


class ParkingDataIngestor:
    """Fetches facility and operation records page by page into the data store."""

    def __init__(
        self,
        store: DataStore,
        *,
        service_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        rows_per_page: int = config.ROWS_PER_PAGE,
        max_retries: int = config.MAX_RETRIES,
        retry_delay: float = config.RETRY_DELAY_SECONDS,
        sleep_seconds: float = config.DEFAULT_SLEEP_SECONDS,
    ) -> None:
        self.store = store
        self.session = session or requests.Session()
        self.service_key = service_key if service_key is not None else config.SERVICE_KEY
        self.rows_per_page = rows_per_page
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep_seconds = sleep_seconds

    def _request_page(self, endpoint: str, data_key: str, page: int) -> PageResult:
        # The service key is issued pre-encoded and must not be encoded again.
        url = f"{config.API_BASE_URL}/{endpoint}?serviceKey={self.service_key}"
        params = {
            "numOfRows": str(self.rows_per_page),
            "pageNo": str(page),
            "format": "2",
        }
        response = self.session.get(url, params=params, timeout=config.HTTP_TIMEOUT)
        response.raise_for_status()

        text = response.text
        if "<OpenAPI_ServiceResponse>" in text or "Error forwarding" in text:
            raise ParkingAPIError("API server error")

        try:
            data = response.json()
        except ValueError as exc:
            raise ParkingAPIError("Response is not JSON") from exc
        if not isinstance(data, dict):
            raise ParkingAPIError("Unexpected payload from parking API")

        result_code = str(data.get("resultCode", ""))
        if result_code not in {"0", "00"}:
            raise ParkingAPIError(f"resultCode: {result_code}")

        items = data.get(data_key) or []
        if not isinstance(items, list):
            raise ParkingAPIError(f"Expected a list under {data_key}")
        return PageResult(items=items, total_count=_parse_total(data.get("totalCount")))

    def fetch_page(self, stream: str, page: int) -> Optional[PageResult]:
        """Fetch one page with retries. Returns ``None`` once retries are exhausted."""
        endpoint, data_key = STREAMS[stream]
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._request_page(endpoint, data_key, page)
            except (requests.RequestException, ParkingAPIError) as exc:
                if attempt < self.max_retries:
                    delay = self.retry_delay * attempt
                    logger.warning(
                        "[%s] page %s attempt %s/%s failed (%s); retrying in %ss",
                        endpoint,
                        page,
                        attempt,
                        self.max_retries,
                        exc,
                        delay,
                    )
                    time.sleep(delay)
                else:
                    logger.error("[%s] page %s failed after %s attempts: %s", endpoint, page, attempt, exc)
        return None

    def collect(
        self,
        stream: str,
        progress: StreamProgress,
        *,
        max_pages: Optional[int] = None,
        resume: bool = False,
        stats: Optional[IngestionStats] = None,
        on_checkpoint: Optional[Callable[[StreamProgress], None]] = None,
    ) -> StreamProgress:
        """Collect one stream, appending to (``resume``) or replacing the raw dump.

        ``on_checkpoint`` is called with the stream position each time the raw
        dump is saved mid-stream, so the progress file never lags the records.
        """
        stats = stats or IngestionStats()
        items: List[dict] = self.store.load_raw(stream) if resume else []
        if items:
            logger.info("Loaded %s existing %s records", len(items), stream)

        total = progress.total
        last_page = progress.page
        start_page = progress.page + 1

        if total == 0:
            first = self.fetch_page(stream, 1)
            if first is None:
                logger.error("Could not fetch the first %s page; keeping existing data", stream)
                stats.pages_failed += 1
                return StreamProgress(page=progress.page, total=0, done=False)
            total = first.total_count
            items.extend(first.items)
            stats.pages_fetched += 1
            stats.records_fetched += len(first.items)
            last_page = max(last_page, 1)
            start_page = max(start_page, 2)

        page_limit = total_pages(total, self.rows_per_page)
        if max_pages is not None:
            page_limit = min(page_limit, max_pages)
        logger.info("[%s] %s records over %s pages (collecting up to page %s)", stream, total, total_pages(total, self.rows_per_page), page_limit)

        consecutive_failures = 0
        for page in range(start_page, page_limit + 1):
            result = self.fetch_page(stream, page)
            if result is not None:
                items.extend(result.items)
                last_page = page
                consecutive_failures = 0
                stats.pages_fetched += 1
                stats.records_fetched += len(result.items)
                logger.debug("[%s] fetched page %s/%s", stream, page, page_limit)

                if page % config.SAVE_EVERY_PAGES == 0:
                    self.store.save_raw(stream, items)
                    if on_checkpoint is not None:
                        on_checkpoint(StreamProgress(page=page, total=total))
                    logger.info("Checkpoint: %s %s records (page %s/%s)", len(items), stream, page, page_limit)
            else:
                stats.pages_failed += 1
                consecutive_failures += 1
                if consecutive_failures >= config.MAX_CONSECUTIVE_FAILS:
                    logger.warning("%s consecutive failures on %s; stopping collection", consecutive_failures, stream)
                    break

            if self.sleep_seconds:
                time.sleep(self.sleep_seconds)

        self.store.save_raw(stream, items)
        logger.info("[%s] collected %s records (last page %s)", stream, len(items), last_page)
        return StreamProgress(page=last_page, total=total, done=last_page >= page_limit)

    def _checkpoint(self, progress: FetchProgress, stream: str, position: StreamProgress) -> None:
        progress.update(stream, position)
        self.store.save_progress(progress)

    def run(self, progress: FetchProgress, *, max_pages: Optional[int] = None, resume: bool = False) -> IngestionStats:
        stats = IngestionStats()
        for stream in STREAMS:
            current = progress.stream(stream)
            if current.done:
                logger.info("[%s] already complete", stream)
                continue
            progress.update(
                stream,
                self.collect(
                    stream,
                    current,
                    max_pages=max_pages,
                    resume=resume,
                    stats=stats,
                    on_checkpoint=lambda position: self._checkpoint(progress, stream, position),
                ),
            )
            self.store.save_progress(progress)

        if not progress.complete:
            logger.warning("Collection incomplete; rerun with --resume to continue")
        logger.info("Collection completed: %s", stats.as_dict())
        return stats


def run_collection(
    *,
    data_dir: Optional[str] = None,
    service_key: Optional[str] = None,
    max_pages: Optional[int] = None,
    resume: bool = False,
    sleep_seconds: float = config.DEFAULT_SLEEP_SECONDS,
) -> IngestionStats:
    store = DataStore(data_dir or config.DATA_DIR)
    progress = store.load_progress() if resume else FetchProgress()
    ingestor = ParkingDataIngestor(store, service_key=service_key, sleep_seconds=sleep_seconds)
    return ingestor.run(progress, max_pages=max_pages, resume=resume)


__all__ = [
    "ParkingFinderError",
    "ParkingAPIError",
    "ParkingDataIngestor",
    "IngestionStats",
    "PageResult",
    "STREAMS",
    "run_collection",
    "total_pages",
]
