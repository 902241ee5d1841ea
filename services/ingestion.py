"""Validation and persistence of readings posted by sensor devices."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from app.schemas import SensorReadingIn
from datastore.mongo import MongoGateway
from models.records import SensorReading

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Bad Request: Missing temperature or humidity."
NOT_AN_OBJECT_MESSAGE = "Bad Request: Body must be a JSON object."


class ReadingValidationError(ValueError):
    """Raised when a posted reading cannot be accepted."""


def parse_reading(payload: Any) -> SensorReadingIn:
    """Validate a decoded JSON body into a typed reading.

    ``None`` counts as absent. Values are coerced to float; anything that is
    not a finite number is rejected.
    """
    if payload is None:
        raise ReadingValidationError(MISSING_FIELDS_MESSAGE)
    if not isinstance(payload, Mapping):
        raise ReadingValidationError(NOT_AN_OBJECT_MESSAGE)
    if payload.get("temperature") is None or payload.get("humidity") is None:
        raise ReadingValidationError(MISSING_FIELDS_MESSAGE)

    try:
        return SensorReadingIn.model_validate(
            {"temperature": payload["temperature"], "humidity": payload["humidity"]}
        )
    except ValidationError as exc:
        field = exc.errors()[0]["loc"][0]
        raise ReadingValidationError(f"Bad Request: {field} must be a number.") from exc


class IngestionService:

    def __init__(
        self,
        gateway: MongoGateway,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.gateway = gateway
        self.clock = clock

    def record(self, reading: SensorReadingIn) -> SensorReading:
        """Stamp ``reading`` with the server time and append it to ``sensors``."""
        stored = SensorReading(
            temperature=reading.temperature,
            humidity=reading.humidity,
            timestamp=self.clock(),
        )
        self.gateway.sensors.insert_one(stored.to_document())
        logger.info(
            "Received and saved sensor data",
            extra={"temperature": stored.temperature, "humidity": stored.humidity},
        )
        return stored
