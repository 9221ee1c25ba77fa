from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.repositories.counters import CounterRepository
from src.services.counters import CounterService
from src.services.routing import RouteError, resolve, split_raw_path


router = APIRouter(tags=["counters"])
logger = structlog.get_logger(__name__)


def get_counter_service(request: Request) -> CounterService:
    """Build the service from the per-process store and detached task set."""
    state = request.app.state
    return CounterService(CounterRepository(state.store, state.detached_tasks))


def _raw_path(request: Request) -> str:
    # Keys are matched on the still percent-encoded path, never the decoded one
    raw = request.scope.get("raw_path")
    if raw is None:
        return request.url.path
    return raw.decode("utf-8", errors="replace").split("?", 1)[0]


def _first_keys_param(request: Request) -> Optional[str]:
    values = request.query_params.getlist("keys")
    return values[0] if values else None


async def _serve(request: Request, service: CounterService) -> Response:
    request_id = str(uuid.uuid4())
    mode, rest = split_raw_path(_raw_path(request))
    try:
        req = resolve(mode, rest, _first_keys_param(request))
    except RouteError as err:
        logger.info(
            "counter_request_rejected",
            request_id=request_id,
            mode=mode,
            status_code=err.status_code,
            reason=err.message,
        )
        raise HTTPException(status_code=err.status_code, detail=err.message)

    body = await service.handle(req, request_id=request_id)
    return Response(content=body.content, media_type=body.media_type, headers=body.headers)


@router.get("/{mode}")
async def counter_without_key(
    request: Request,
    service: CounterService = Depends(get_counter_service),
) -> Response:
    return await _serve(request, service)


@router.get("/{mode}/{rest:path}")
async def counter_with_key(
    request: Request,
    service: CounterService = Depends(get_counter_service),
) -> Response:
    return await _serve(request, service)
