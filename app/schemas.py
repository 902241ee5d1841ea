"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SensorReadingIn(BaseModel):
    """Reading posted by a device; numeric strings are coerced to float."""

    temperature: float = Field(..., allow_inf_nan=False, description="Temperature in Celsius.")
    humidity: float = Field(..., allow_inf_nan=False, description="Relative humidity in percent.")


class MessageResponse(BaseModel):
    """Plain acknowledgement or error payload."""

    message: str
