"""Detailed health check route."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from calendar_trello.api.dependencies import get_sync_service
from calendar_trello.health import run_health_check
from calendar_trello.sync.service import CalendarBoardSync

router = APIRouter()


class CheckDetailResponse(BaseModel):
    name: str
    status: str
    message: str


class HealthCheckResponse(BaseModel):
    overall_status: str
    timestamp: datetime
    details: list[CheckDetailResponse]


@router.get("/health-check", response_model=HealthCheckResponse)
async def health_check(
    sync: CalendarBoardSync = Depends(get_sync_service),
) -> JSONResponse:
    """Check configuration, Google authentication and Trello access."""
    report = await run_health_check(sync)
    body = HealthCheckResponse(
        overall_status=report.overall_status.value,
        timestamp=report.timestamp,
        details=[
            CheckDetailResponse(name=d.name, status=d.status.value, message=d.message)
            for d in report.details
        ],
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if report.healthy else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )
