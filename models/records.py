"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

# Weather records are owned by an external producer and carry arbitrary extra
# fields, so they travel through the services as raw MongoDB documents.
WeatherRecord = Dict[str, Any]


@dataclass(slots=True)
class SensorReading:
    """A single temperature/humidity reading posted by a device."""

    temperature: float
    humidity: float
    timestamp: datetime

    def to_document(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "timestamp": self.timestamp,
        }


@dataclass(slots=True)
class RegionView:
    """Latest record per city for one region, cities in ascending order."""

    region: str
    provinces: List[WeatherRecord] = field(default_factory=list)


@dataclass
class DashboardView:
    regions: List[RegionView]
    sensors: List[Dict[str, Any]]
    query: str
    locale: str
