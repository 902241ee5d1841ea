"""Dashboard view model assembly."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from datastore.mongo import MongoGateway
from models.records import DashboardView, RegionView
from services.regions import NEWEST_FIRST, RegionQuery, normalize_query
from services.timefmt import format_timestamp

logger = logging.getLogger(__name__)

DISPLAY_LOCALE = "th-TH"
RECENT_SENSOR_LIMIT = 5


class DashboardService:
    """Combines the per-region weather view with the latest sensor readings."""

    def __init__(self, gateway: MongoGateway, sensor_limit: int = RECENT_SENSOR_LIMIT) -> None:
        self.gateway = gateway
        self.sensor_limit = sensor_limit

    def build(self, q: str | None = None) -> DashboardView:
        query = normalize_query(q)
        regions = RegionQuery(self.gateway.records).fetch(query)
        for region in regions:
            for province in region.provinces:
                province["formatted_timestamp"] = format_timestamp(province["timestamp"])

        sensors = self.recent_sensors()
        logger.info(
            "Dashboard built",
            extra={
                "query": query or None,
                "region_count": len(regions),
                "province_count": _province_count(regions),
                "sensor_count": len(sensors),
            },
        )
        return DashboardView(regions=regions, sensors=sensors, query=query, locale=DISPLAY_LOCALE)

    def recent_sensors(self) -> List[Dict[str, Any]]:
        cursor = self.gateway.sensors.find({}).sort(NEWEST_FIRST).limit(self.sensor_limit)
        sensors = list(cursor)
        for sensor in sensors:
            sensor["formatted_timestamp"] = format_timestamp(sensor["timestamp"])
        return sensors


def _province_count(regions: List[RegionView]) -> int:
    return sum(len(region.provinces) for region in regions)
