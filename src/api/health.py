from __future__ import annotations

import uuid
from typing import Any, Literal
from typing_extensions import TypedDict

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.utils.config import Settings, get_settings


logger = structlog.get_logger(__name__)
router = APIRouter()


class HealthChecks(TypedDict, total=False):
    config: bool
    store: bool | Literal["unknown"]
    store_backend: str
    pending_writes: int


class HealthResponse(BaseModel):
    ok: bool
    version: str
    checks: HealthChecks


@router.get("/health", response_model=HealthResponse, tags=["system"])
async def health(request: Request, settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Return basic service health.

    - Confirms config loads
    - Exposes app version
    - Probes the counter store with a read (absent key is fine)
    """
    request_id = str(uuid.uuid4())

    store = getattr(request.app.state, "store", None)
    store_ok: bool | Literal["unknown"] = "unknown"
    if store is not None:
        try:
            await store.get("health:probe")
            store_ok = True
        except Exception as exc:  # noqa: BLE001 - reported as an unhealthy check
            store_ok = False
            logger.warning("health_store_probe_failed", request_id=request_id, error=str(exc))

    detached = getattr(request.app.state, "detached_tasks", None)
    checks: HealthChecks = {
        "config": True,  # settings loaded if we are here
        "store": store_ok,
        "store_backend": type(store).__name__ if store is not None else "none",
        "pending_writes": detached.pending if detached is not None else 0,
    }
    payload: dict[str, Any] = {
        "ok": store_ok is not False,
        "version": settings.app_version,
        "checks": checks,
    }

    logger.info("health_check", request_id=request_id, **payload)
    return HealthResponse(**payload)
