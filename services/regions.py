"""Latest-record-per-city aggregation grouped by region.

The pipeline is a fixed sequence of pure stages so that each one can be unit
tested without a database::

    filter_by_city -> order_newest_first -> latest_per_city
        -> sort_by_city -> group_by_region -> sort_regions

``RegionQuery`` pushes the first two stages down to MongoDB and runs every
stage over the documents it gets back.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List

from pymongo import DESCENDING
from pymongo.collection import Collection

from models.records import RegionView, WeatherRecord
from services.timefmt import as_utc

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("timestamp", DESCENDING), ("_id", DESCENDING)]


def normalize_query(q: str | None) -> str:
    return q or ""


def has_city_filter(q: str | None) -> bool:
    """Empty or whitespace-only queries match every city."""
    return bool(normalize_query(q).strip())


def filter_by_city(records: Iterable[WeatherRecord], q: str | None) -> List[WeatherRecord]:
    if not has_city_filter(q):
        return list(records)
    needle = normalize_query(q).casefold()
    return [record for record in records if needle in str(record.get("city", "")).casefold()]


def _newest_first_key(record: WeatherRecord) -> tuple:
    record_id = record.get("_id")
    return (as_utc(record["timestamp"]), record_id is not None, record_id if record_id is not None else 0)


def order_newest_first(records: Iterable[WeatherRecord]) -> List[WeatherRecord]:
    """Sort by timestamp descending, breaking ties on the highest ``_id``."""
    return sorted(records, key=_newest_first_key, reverse=True)


def latest_per_city(records: Iterable[WeatherRecord]) -> List[WeatherRecord]:
    """Keep the first record seen for each city; input must be newest first."""
    seen: set[str] = set()
    latest: List[WeatherRecord] = []
    for record in records:
        city = record["city"]
        if city in seen:
            continue
        seen.add(city)
        latest.append(record)
    return latest


def sort_by_city(records: Iterable[WeatherRecord]) -> List[WeatherRecord]:
    return sorted(records, key=lambda record: record["city"])


def group_by_region(records: Iterable[WeatherRecord]) -> List[RegionView]:
    groups: Dict[str, RegionView] = {}
    for record in records:
        region = record["region"]
        view = groups.get(region)
        if view is None:
            view = groups[region] = RegionView(region=region)
        view.provinces.append(record)
    return list(groups.values())


def sort_regions(regions: Iterable[RegionView]) -> List[RegionView]:
    return sorted(regions, key=lambda view: view.region)


def build_region_views(records: Iterable[WeatherRecord], q: str | None = None) -> List[RegionView]:
    filtered = filter_by_city(records, q)
    latest = latest_per_city(order_newest_first(filtered))
    return sort_regions(group_by_region(sort_by_city(latest)))


def city_filter(q: str | None) -> Dict[str, Any]:
    """MongoDB filter matching ``q`` as a literal, case-insensitive substring."""
    if not has_city_filter(q):
        return {}
    return {"city": {"$regex": re.escape(normalize_query(q)), "$options": "i"}}


class RegionQuery:
    """Runs the region pipeline against the ``records`` collection."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def fetch(self, q: str | None = None) -> List[RegionView]:
        cursor = self.collection.find(city_filter(q)).sort(NEWEST_FIRST)
        regions = build_region_views(cursor, q)
        logger.debug(
            "Built region views",
            extra={"query": q or None, "region_count": len(regions)},
        )
        return regions
