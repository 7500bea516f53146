"""Configuration constants for the parking facility data pipeline."""
from __future__ import annotations

import os
from pathlib import Path

# Base URL for the KOTSA parking information API (data.go.kr)
API_BASE_URL: str = "http://apis.data.go.kr/B553881/Parking"

# Endpoint (and payload key) for facility records: name, address, coordinates, capacity
FACILITY_ENDPOINT: str = "PrkSttusInfo"

# Endpoint (and payload key) for operation records: opening hours and tariffs
OPERATION_ENDPOINT: str = "PrkOprInfo"

# Service key issued by data.go.kr. Already URL-encoded, so it is appended to the query verbatim.
SERVICE_KEY: str = os.environ.get("PARKING_API_KEY", "")

# Records per API page
ROWS_PER_PAGE: int = 1000

# Attempts per page before the page is skipped
MAX_RETRIES: int = 5

# Backoff unit between attempts (seconds); attempt n waits n * RETRY_DELAY_SECONDS
RETRY_DELAY_SECONDS: float = 5.0

# Collection of a stream stops after this many failed pages in a row
MAX_CONSECUTIVE_FAILS: int = 10

# Raw records are flushed to disk every N pages
SAVE_EVERY_PAGES: int = 50

# Timeout (seconds) for HTTP requests to the parking API
HTTP_TIMEOUT: int = 30

# Default sleep duration between API requests (seconds)
DEFAULT_SLEEP_SECONDS: float = 0.15

# Directory holding raw API dumps, progress checkpoints and derived artifacts
DATA_DIR: Path = Path("data")

RAW_FACILITY_FILE: str = "raw-facilities.json"
RAW_OPERATION_FILE: str = "raw-operations.json"
PROGRESS_FILE: str = "fetch-progress.json"
CATALOG_FILE: str = "parking-lots.json"
LANDMARK_FILE: str = "landmark-parking.json"

# Valid coordinate window for the Korean peninsula and Jeju (exclusive bounds)
LAT_BOUNDS: tuple[float, float] = (30.0, 40.0)
LNG_BOUNDS: tuple[float, float] = (124.0, 132.0)

# Billing-unit defaults applied when the source omits base/additional time (minutes)
DEFAULT_BASE_TIME: int = 30
DEFAULT_ADD_TIME: int = 10

# Opening hours assumed when the source has no weekday schedule
DEFAULT_OPEN: str = "00:00"
DEFAULT_CLOSE: str = "23:59"

# Radius used for landmark aggregation (km)
LANDMARK_RADIUS_KM: float = 1.0

# Landmarks with fewer lots than this are hidden from listings and blog output
MIN_LANDMARK_LOTS: int = 5

# Length of each ranked list inside a landmark aggregate
TOP_N: int = 5

# Durations (minutes) shown in fee tables
QUICK_DURATIONS: tuple[int, ...] = (30, 60, 120, 180, 360, 720)

# Public site linked from generated blog posts
SITE_URL: str = "https://parking.mustarddata.com"
