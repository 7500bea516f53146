"""Korean public parking lot catalog pipeline."""

from .build import build_catalog
from .catalog import CatalogIndex, build_catalog_index
from .cli import main as cli_main
from .fees import calculate_fee
from .geo import find_near, find_nearest_others
from .ingest import IngestionStats, ParkingDataIngestor, run_collection
from .landmarks import build_landmark_aggregate
from .models import ParkingLot

__all__ = [
    "cli_main",
    "CatalogIndex",
    "build_catalog_index",
    "calculate_fee",
    "find_near",
    "find_nearest_others",
    "IngestionStats",
    "ParkingDataIngestor",
    "run_collection",
    "build_landmark_aggregate",
    "ParkingLot",
    "build_catalog",
]
