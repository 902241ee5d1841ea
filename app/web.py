from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from fastapi.templating import Jinja2Templates

from app.api import get_gateway
from datastore.mongo import MongoGateway
from services.dashboard import DashboardService

logger = logging.getLogger(__name__)

# "An error occurred"; shown to the user instead of any internal detail.
DASHBOARD_ERROR_MESSAGE = "เกิดข้อผิดพลาด"

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_dashboard_service(gateway: MongoGateway = Depends(get_gateway)) -> DashboardService:
    return DashboardService(gateway)


router = APIRouter(include_in_schema=False)


@router.get("/", name="dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    q: str = "",
    service: DashboardService = Depends(get_dashboard_service),
) -> Response:
    try:
        view = service.build(q)
    except Exception:
        logger.exception("Failed to build dashboard", extra={"query": q or None})
        return PlainTextResponse(
            DASHBOARD_ERROR_MESSAGE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "regions": view.regions,
            "sensors": view.sensors,
            "query": view.query,
            "locale": view.locale,
        },
    )
