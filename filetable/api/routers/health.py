"""
Liveness and database readiness checks.

Routes: GET /health, GET /health/db

Dependencies: fastapi, sqlalchemy
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db import get_async_db
from filetable.configs import get_settings


class HealthResponse(BaseModel):
    service: str
    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


def _healthy(message: str) -> HealthResponse:
    return HealthResponse(service=get_settings().service_name, status="healthy", message=message)


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return _healthy("API process is up")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(db: AsyncSession = Depends(get_async_db)) -> HealthResponse:
    """503 when the workflow database does not answer a trivial query."""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database unavailable: {e}") from e
    return _healthy("Workflow database reachable")
