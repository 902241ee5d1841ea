from __future__ import annotations
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from datastore.mongo import MongoGateway, build_gateway
from logging_config import configure_logging
from settings import get_settings

STATIC_DIR = Path(__file__).resolve().parent / "static"


async def _request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Bad Request: Body must be valid JSON."},
    )


def create_app(gateway: Optional[MongoGateway] = None) -> FastAPI:
    """Build the application; without ``gateway`` one is created from settings at startup."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        storage = gateway if gateway is not None else build_gateway(get_settings())
        storage.connect()
        app.state.gateway = storage
        try:
            yield
        finally:
            storage.close()

    app = FastAPI(
        title="Weather Dashboard",
        description="Latest weather per city grouped by region, plus device sensor ingestion.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
