"""Unit tests for the region aggregation stages."""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from bson import ObjectId

from models.records import RegionView
from services.regions import (
    RegionQuery,
    build_region_views,
    city_filter,
    filter_by_city,
    group_by_region,
    latest_per_city,
    order_newest_first,
    sort_by_city,
    sort_regions,
)

BASE = datetime(2024, 3, 5, 10, 0)


def _record(city: str, region: str, minutes: int = 0, record_id: int | None = None, **fields) -> dict:
    """Helper to build weather records with offsets from a fixed base time."""

    record = {"city": city, "region": region, "timestamp": BASE + timedelta(minutes=minutes), **fields}
    if record_id is not None:
        record["_id"] = record_id
    return record


def test_filter_by_city_is_case_insensitive_substring() -> None:
    records = [
        _record("Chiang Mai", "North"),
        _record("Chiang Rai", "North"),
        _record("Bangkok", "Central"),
    ]

    assert [r["city"] for r in filter_by_city(records, "chiang")] == ["Chiang Mai", "Chiang Rai"]
    assert [r["city"] for r in filter_by_city(records, "KOK")] == ["Bangkok"]


def test_filter_by_city_with_empty_query_keeps_everything() -> None:
    records = [_record("Bangkok", "Central"), _record("Phuket", "South")]

    assert filter_by_city(records, "") == records
    assert filter_by_city(records, None) == records
    assert filter_by_city(records, "   ") == records


def test_order_newest_first_breaks_ties_on_highest_id() -> None:
    older = _record("Bangkok", "Central", minutes=0, record_id=1)
    tie_low = _record("Bangkok", "Central", minutes=5, record_id=2)
    tie_high = _record("Bangkok", "Central", minutes=5, record_id=3)

    ordered = order_newest_first([older, tie_low, tie_high])

    assert [r["_id"] for r in ordered] == [3, 2, 1]


def test_latest_per_city_keeps_first_seen_record() -> None:
    newest = _record("Bangkok", "Central", minutes=10, temperature=33)
    stale = _record("Bangkok", "Central", minutes=0, temperature=30)
    other = _record("Phuket", "South", minutes=3)

    latest = latest_per_city([newest, other, stale])

    assert latest == [newest, other]


def test_sort_and_group_preserve_city_order_within_region() -> None:
    records = sort_by_city(
        [
            _record("Nan", "North"),
            _record("Songkhla", "South"),
            _record("Chiang Mai", "North"),
            _record("Krabi", "South"),
        ]
    )

    regions = group_by_region(records)

    assert [view.region for view in regions] == ["North", "South"]
    assert [r["city"] for r in regions[0].provinces] == ["Chiang Mai", "Nan"]
    assert [r["city"] for r in regions[1].provinces] == ["Krabi", "Songkhla"]


def test_sort_regions_orders_by_name() -> None:
    regions = [RegionView(region="South"), RegionView(region="Central"), RegionView(region="North")]

    assert [view.region for view in sort_regions(regions)] == ["Central", "North", "South"]


def test_build_region_views_returns_latest_record_per_city() -> None:
    records = [
        _record("Phuket", "South", minutes=1, temperature=29),
        _record("Bangkok", "Central", minutes=0, temperature=31),
        _record("Bangkok", "Central", minutes=30, temperature=34),
        _record("Chiang Mai", "North", minutes=20, temperature=24),
        _record("Ayutthaya", "Central", minutes=5, temperature=32),
        _record("Phuket", "South", minutes=40, temperature=30),
    ]

    regions = build_region_views(records)

    assert [view.region for view in regions] == ["Central", "North", "South"]
    central = regions[0].provinces
    assert [r["city"] for r in central] == ["Ayutthaya", "Bangkok"]
    assert central[1]["temperature"] == 34
    assert regions[2].provinces[0]["temperature"] == 30


def test_build_region_views_with_query_drops_empty_regions() -> None:
    records = [
        _record("Bangkok", "Central"),
        _record("Chiang Mai", "North"),
        _record("Chiang Rai", "North"),
    ]

    regions = build_region_views(records, "chiang")

    assert [view.region for view in regions] == ["North"]
    assert all("chiang" in r["city"].lower() for r in regions[0].provinces)


def test_city_filter_escapes_regex_metacharacters() -> None:
    assert city_filter("") == {}
    assert city_filter("a.b") == {"city": {"$regex": r"a\.b", "$options": "i"}}


def test_region_query_against_collection(gateway) -> None:
    gateway.records.insert_many(
        [
            _record("Bangkok", "Central", minutes=0, temperature=31),
            _record("Bangkok", "Central", minutes=15, temperature=35),
            _record("Chiang Mai", "North", minutes=5),
            _record("Hat Yai", "South", minutes=5),
        ]
    )

    regions = RegionQuery(gateway.records).fetch("BANG")

    assert len(regions) == 1
    assert regions[0].region == "Central"
    assert len(regions[0].provinces) == 1
    assert regions[0].provinces[0]["temperature"] == 35


def test_region_query_treats_query_literally(gateway) -> None:
    gateway.records.insert_many(
        [
            _record("Bangkok", "Central"),
            _record("Nakhon (Si) Thammarat", "South"),
        ]
    )

    assert RegionQuery(gateway.records).fetch(".*") == []
    regions = RegionQuery(gateway.records).fetch("(si)")
    assert [r["city"] for r in regions[0].provinces] == ["Nakhon (Si) Thammarat"]


def test_query_with_leading_space_is_matched_unchanged(gateway) -> None:
    records = [_record("Chiang Mai", "North"), _record("Maitri", "North")]
    gateway.records.insert_many([dict(record) for record in records])

    assert [r["city"] for r in filter_by_city(records, " mai")] == ["Chiang Mai"]
    assert city_filter(" mai") == {"city": {"$regex": re.escape(" mai"), "$options": "i"}}
    regions = RegionQuery(gateway.records).fetch(" mai")
    cities = [r["city"] for view in regions for r in view.provinces]
    assert cities == ["Chiang Mai"]
    assert all(" mai" in city.lower() for city in cities)


def test_region_query_prefers_later_insert_on_identical_timestamp(gateway) -> None:
    first_id = ObjectId()
    later_id = ObjectId()
    assert later_id > first_id
    gateway.records.insert_one(_record("Bangkok", "Central", minutes=5, temperature=30) | {"_id": first_id})
    gateway.records.insert_one(_record("Bangkok", "Central", minutes=5, temperature=32) | {"_id": later_id})

    regions = RegionQuery(gateway.records).fetch()

    assert len(regions[0].provinces) == 1
    assert regions[0].provinces[0]["_id"] == later_id
    assert regions[0].provinces[0]["temperature"] == 32
