"""Persistence utilities for raw API dumps and derived catalog artifacts."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from . import config
from .models import LandmarkAggregate, ParkingLot

logger = logging.getLogger(__name__)


@dataclass
class StreamProgress:
    page: int = 0
    total: int = 0
    done: bool = False


@dataclass
class FetchProgress:
    """Checkpoint of the last successfully fetched page per data stream."""

    facility_page: int = 0
    facility_total: int = 0
    operation_page: int = 0
    operation_total: int = 0
    facility_done: bool = False
    operation_done: bool = False

    _KEYS = {
        "facility_page": "facilityPage",
        "facility_total": "facilityTotal",
        "operation_page": "operationPage",
        "operation_total": "operationTotal",
        "facility_done": "facilityDone",
        "operation_done": "operationDone",
    }

    def stream(self, name: str) -> StreamProgress:
        return StreamProgress(
            page=getattr(self, f"{name}_page"),
            total=getattr(self, f"{name}_total"),
            done=getattr(self, f"{name}_done"),
        )

    def update(self, name: str, stream: StreamProgress) -> None:
        setattr(self, f"{name}_page", stream.page)
        setattr(self, f"{name}_total", stream.total)
        setattr(self, f"{name}_done", stream.done)

    @property
    def complete(self) -> bool:
        return self.facility_done and self.operation_done

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, name) for name, key in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FetchProgress":
        values = {name: data[key] for name, key in cls._KEYS.items() if key in data}
        return cls(**values)


class DataStore:
    """JSON artifacts under a single data directory."""

    def __init__(self, data_dir: Path | str = config.DATA_DIR) -> None:
        self.data_dir = Path(data_dir)

    @property
    def facility_path(self) -> Path:
        return self.data_dir / config.RAW_FACILITY_FILE

    @property
    def operation_path(self) -> Path:
        return self.data_dir / config.RAW_OPERATION_FILE

    @property
    def progress_path(self) -> Path:
        return self.data_dir / config.PROGRESS_FILE

    @property
    def catalog_path(self) -> Path:
        return self.data_dir / config.CATALOG_FILE

    @property
    def landmark_path(self) -> Path:
        return self.data_dir / config.LANDMARK_FILE

    def raw_path(self, stream: str) -> Path:
        if stream == "facility":
            return self.facility_path
        if stream == "operation":
            return self.operation_path
        raise ValueError(f"Unknown data stream: {stream}")

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write_json(self, path: Path, payload: Any, *, indent: int | None = None) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=indent)
        tmp_path.replace(path)

    def load_raw(self, stream: str) -> List[dict]:
        records = self._read_json(self.raw_path(stream), [])
        if not isinstance(records, list):
            raise ValueError(f"Expected a JSON array in {self.raw_path(stream)}")
        return records

    def save_raw(self, stream: str, records: List[dict]) -> None:
        self._write_json(self.raw_path(stream), records)
        logger.debug("Saved %s raw %s records", len(records), stream)

    def load_progress(self) -> FetchProgress:
        data = self._read_json(self.progress_path, None)
        return FetchProgress.from_dict(data) if data else FetchProgress()

    def save_progress(self, progress: FetchProgress) -> None:
        self._write_json(self.progress_path, progress.to_dict(), indent=2)

    def load_catalog(self) -> Tuple[ParkingLot, ...]:
        records = self._read_json(self.catalog_path, [])
        return tuple(ParkingLot.from_dict(record) for record in records)

    def save_catalog(self, lots: List[ParkingLot]) -> Path:
        self._write_json(self.catalog_path, [lot.to_dict() for lot in lots], indent=2)
        logger.info("Wrote catalog to %s (%s lots)", self.catalog_path, len(lots))
        return self.catalog_path

    def load_landmarks(self) -> Dict[str, LandmarkAggregate]:
        data = self._read_json(self.landmark_path, {})
        return {slug: LandmarkAggregate.from_dict(entry) for slug, entry in data.items()}

    def save_landmarks(self, aggregates: Mapping[str, LandmarkAggregate]) -> Path:
        payload = {slug: aggregate.to_dict() for slug, aggregate in aggregates.items()}
        self._write_json(self.landmark_path, payload, indent=2)
        logger.info("Wrote landmark aggregates to %s (%s landmarks)", self.landmark_path, len(payload))
        return self.landmark_path


__all__ = ["DataStore", "FetchProgress", "StreamProgress"]
