"""Command line interface for the parking facility data pipeline."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Optional

from . import config
from .build import build_catalog, build_landmarks
from .blog import generate_posts
from .catalog import build_catalog_index
from .fees import calculate_fee, fee_table, format_duration, format_fee, is_unbillable
from .ingest import run_collection
from .landmarks import LandmarkDirectory, find_landmark
from .storage import DataStore

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Korean public parking lot data pipeline")
    parser.add_argument(
        "command",
        choices=["fetch", "build", "landmarks", "blog", "fee", "near"],
        help="Pipeline stage or query to execute",
    )
    parser.add_argument("--data-dir", dest="data_dir", default=str(config.DATA_DIR), help="Directory for raw and derived JSON artifacts")
    parser.add_argument("--service-key", dest="service_key", default=None, help="data.go.kr service key (defaults to $PARKING_API_KEY)")
    parser.add_argument("--resume", dest="resume", action="store_true", help="Continue a previous collection from its checkpoint")
    parser.add_argument("--pages", dest="max_pages", type=int, default=None, help="Maximum number of pages to collect per stream")
    parser.add_argument("--sleep", dest="sleep_seconds", type=float, default=config.DEFAULT_SLEEP_SECONDS, help="Sleep duration between API requests")
    parser.add_argument("--radius", dest="radius_km", type=float, default=None, help="Search radius in kilometers")
    parser.add_argument("--date", dest="post_date", default=None, help="Blog post date (YYYY-MM-DD), defaults to today")
    parser.add_argument("--output", dest="output_path", default=None, help="Output directory for generated blog posts")
    parser.add_argument("--id", dest="lot_id", default=None, help="Parking lot identifier for the fee query")
    parser.add_argument("--minutes", dest="minutes", type=int, default=None, help="Parking duration in minutes for the fee query")
    parser.add_argument("--lat", dest="lat", type=float, default=None, help="Latitude for the near query")
    parser.add_argument("--lng", dest="lng", type=float, default=None, help="Longitude for the near query")
    parser.add_argument("--landmark", dest="landmark", default=None, help="Landmark slug for the near query")
    parser.add_argument("--limit", dest="limit", type=int, default=10, help="Maximum number of results for the near query")
    parser.add_argument("--verbose", dest="verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def _run_fee(store: DataStore, args: argparse.Namespace) -> int:
    if not args.lot_id:
        raise ValueError("The fee command requires --id")
    index = build_catalog_index(store.load_catalog())
    lot = index.get(args.lot_id)
    if lot is None:
        print(f"Parking lot not found: {args.lot_id}")
        return 1

    print(f"{lot.name} ({lot.sido} {lot.sigungu}, {lot.parking_type.label})")
    if lot.is_free:
        print("무료")
        return 0
    if is_unbillable(lot):
        logger.warning("Lot %s has fees but no base time; fees are reported as 0", lot.id)

    rows = [(args.minutes, calculate_fee(lot, args.minutes))] if args.minutes is not None else fee_table(lot)
    for minutes, fee in rows:
        print(f"{format_duration(minutes)}\t{format_fee(fee)}")
    if lot.daily_max > 0:
        print(f"일 최대 요금: {format_fee(lot.daily_max)}")
    return 0


def _run_near(store: DataStore, args: argparse.Namespace) -> int:
    if args.landmark:
        directory = LandmarkDirectory(store.load_landmarks())
        aggregate = directory.get(args.landmark)
        if aggregate is not None:
            print(
                f"{aggregate.landmark.name}: {aggregate.total} lots "
                f"(free {aggregate.free}, paid {aggregate.paid}, public {aggregate.public})"
            )
            for entry in aggregate.top_free:
                print(f"  [free] {entry.name}\t{entry.distance}m")
            for entry in aggregate.cheapest:
                print(f"  [paid] {entry.name}\t{format_fee(entry.base_fee)}/{entry.base_time}분\t{entry.distance}m")
            return 0
        landmark = find_landmark(args.landmark)
        if landmark is None:
            print(f"Landmark not found: {args.landmark}")
            return 1
        lat, lng = landmark.lat, landmark.lng
    elif args.lat is not None and args.lng is not None:
        lat, lng = args.lat, args.lng
    else:
        raise ValueError("The near command requires --landmark or both --lat and --lng")

    index = build_catalog_index(store.load_catalog())
    radius = args.radius_km if args.radius_km is not None else config.LANDMARK_RADIUS_KM
    hits = index.near(lat, lng, radius, args.limit)
    if not hits:
        print("No parking lots found in range")
        return 0
    for hit in hits:
        fee = "무료" if hit.lot.is_free else f"1시간 {format_fee(calculate_fee(hit.lot, 60))}"
        print(f"{hit.distance_m}m\t{hit.lot.name}\t{fee}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    store = DataStore(args.data_dir)

    if args.command == "fetch":
        run_collection(
            data_dir=args.data_dir,
            service_key=args.service_key,
            max_pages=args.max_pages,
            resume=args.resume,
            sleep_seconds=args.sleep_seconds,
        )
        return 0

    if args.command == "build":
        build_catalog(store)
        return 0

    if args.command == "landmarks":
        radius = args.radius_km if args.radius_km is not None else config.LANDMARK_RADIUS_KM
        build_landmarks(store, radius_km=radius)
        return 0

    if args.command == "blog":
        post_date = args.post_date or date.today().isoformat()
        output_dir = args.output_path or str(store.data_dir / "posts")
        generate_posts(store.load_landmarks(), output_dir, post_date)
        return 0

    if args.command == "fee":
        return _run_fee(store, args)

    if args.command == "near":
        return _run_near(store, args)

    raise ValueError(f"Unsupported command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
