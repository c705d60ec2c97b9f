from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from travel_search.search.schemas import HealthData, HealthResponse


router = APIRouter(prefix="/health", tags=["ops"])


@router.get("", summary="Health check", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(
        data=HealthData(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            environment=request.app.state.settings.app_env,
        )
    )
