from __future__ import annotations

import asyncio
from typing import Dict, Iterable

import structlog

from src.repositories.counters import CounterRepository
from src.services import renderers
from src.services.routing import Mode, RenderRequest


logger = structlog.get_logger(__name__)


_INCREMENT_RENDERERS = {
    Mode.BADGE: renderers.render_badge,
    Mode.BADGEN: renderers.render_badgen,
    Mode.SHIELDS: renderers.render_shields,
}


class CounterService:
    """Run one render request: count (or just read), then render."""

    def __init__(self, counters: CounterRepository):
        self.counters = counters

    async def views_many(self, keys: Iterable[str]) -> Dict[str, int]:
        """Read all keys concurrently; duplicate keys collapse into one entry."""
        keys = list(keys)
        values = await asyncio.gather(*(self.counters.read(k) for k in keys))
        return dict(zip(keys, values))

    async def handle(self, req: RenderRequest, *, request_id: str) -> renderers.RenderedBody:
        if req.mode is Mode.STATS_BATCH:
            views_by_key = await self.views_many(req.keys)
            logger.info("stats_batch_served", request_id=request_id, keys=len(req.keys))
            return renderers.render_stats_batch(views_by_key)

        if not req.mode.increments:
            views = await self.counters.read(req.key)
            logger.info("stats_served", request_id=request_id, key=req.key, views=views)
            return renderers.render_stats(views)

        views = await self.counters.increment(req.key)
        logger.info("badge_served", request_id=request_id, mode=req.mode.value, key=req.key, views=views)
        return _INCREMENT_RENDERERS[req.mode](views)
