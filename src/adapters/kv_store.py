from __future__ import annotations

from typing import Dict, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import KvEntry


class KeyValueStore(Protocol):
    """Minimal string key-value contract the counters depend on.

    - get(key) -> stored string or None when absent
    - put(key, value) -> completes once the store has accepted the write
    """

    async def get(self, key: str) -> Optional[str]: ...

    async def put(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store for local runs and tests; contents die with the process."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class SqlKeyValueStore:
    """Key-value store backed by the kv_entries table.

    Each call opens its own short session so concurrent reads (batch stats)
    never share a connection-bound session.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    async def get(self, key: str) -> Optional[str]:
        async with self.session_maker() as session:  # type: ignore[misc]
            stmt = select(KvEntry.value).where(KvEntry.key == key)
            res = await session.execute(stmt)
            return res.scalar_one_or_none()

    async def put(self, key: str, value: str) -> None:
        async with self.session_maker() as session:  # type: ignore[misc]
            stmt = update(KvEntry).where(KvEntry.key == key).values(value=value)
            res = await session.execute(stmt)
            if res.rowcount:
                await session.commit()
                return
            session.add(KvEntry(key=key, value=value))
            try:
                await session.commit()
            except IntegrityError:
                # Another writer inserted the row first; last write wins
                await session.rollback()
                await session.execute(stmt)
                await session.commit()
