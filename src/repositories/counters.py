from __future__ import annotations

import structlog

from src.adapters.kv_store import KeyValueStore
from src.adapters.metrics import Metrics
from src.utils.background import DetachedTasks


logger = structlog.get_logger(__name__)

KEY_PREFIX = "visits:"


def store_key(key: str) -> str:
    return f"{KEY_PREFIX}{key}"


def parse_count(raw: str | None) -> int:
    """Decode a stored counter; absent, garbage and negative values read as 0."""
    if raw is None:
        return 0
    try:
        value = int(raw.strip())
    except ValueError:
        return 0
    return value if value > 0 else 0


class CounterRepository:
    """Visit counters persisted as decimal strings in a key-value store.

    increment() is a read-modify-write without compare-and-swap: two
    concurrent increments of one key may both read N and both write N + 1.
    Under-counting under concurrent load on a single key is accepted.
    """

    def __init__(self, store: KeyValueStore, detached: DetachedTasks):
        self.store = store
        self.detached = detached

    async def _load(self, key: str) -> int:
        raw = await self.store.get(store_key(key))
        return parse_count(raw)

    async def read(self, key: str) -> int:
        try:
            return await self._load(key)
        except Exception as exc:  # noqa: BLE001 - store faults degrade to zero
            Metrics.inc("counter_read_failed")
            logger.warning("counter_read_failed", key=key, error=str(exc))
            return 0

    async def increment(self, key: str) -> int:
        """Return current + 1; the write is detached and not awaited."""
        try:
            current = await self._load(key)
        except Exception as exc:  # noqa: BLE001 - store faults degrade to zero
            # Skip the write: persisting 1 here would reset a counter we could not read
            Metrics.inc("counter_read_failed")
            logger.warning("counter_read_failed", key=key, error=str(exc), write_skipped=True)
            return 1

        new_value = current + 1
        self.detached.spawn(
            self.store.put(store_key(key), str(new_value)),
            name=f"put:{store_key(key)}",
        )
        Metrics.inc("counter_increment")
        logger.info("counter_incremented", key=key, views=new_value)
        return new_value
