"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from app.schemas import MessageResponse
from datastore.mongo import MongoGateway
from services.ingestion import IngestionService, ReadingValidationError, parse_reading

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gateway(request: Request) -> MongoGateway:
    return request.app.state.gateway


def get_ingestion_service(gateway: MongoGateway = Depends(get_gateway)) -> IngestionService:
    return IngestionService(gateway)


@router.post(
    "/api/sensor",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    summary="Store a temperature/humidity reading sent by a device.",
)
def ingest_sensor_reading(
    payload: Any = Body(None),
    service: IngestionService = Depends(get_ingestion_service),
) -> Any:
    try:
        reading = parse_reading(payload)
    except ReadingValidationError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": str(exc)},
        )

    try:
        service.record(reading)
    except Exception:
        logger.exception("Error saving sensor data", extra={"collection": "sensors"})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal Server Error"},
        )
    return MessageResponse(message="Sensor data saved successfully.")


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
