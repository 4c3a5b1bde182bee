from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from typing import Literal, Protocol

import redis

from zombiemath.api.models import LeaderboardEntry, LeaderboardTable
from zombiemath.lock import LeaderboardBusyError, leaderboard_lock

logger = logging.getLogger(__name__)


class LeaderboardStore(Protocol):
    async def load(self) -> list[LeaderboardEntry]: ...

    async def save(self, entries: Sequence[LeaderboardEntry]) -> bool: ...

    def locked(self) -> AbstractContextManager[None]:
        """Exclusive section for a load-merge-save; raises LeaderboardBusyError if taken."""
        ...


class InMemoryLeaderboardStore:
    """Process-local store; handy for dev servers and tests."""

    def __init__(self, entries: Sequence[LeaderboardEntry] = ()) -> None:
        self.entries: list[LeaderboardEntry] = list(entries)

    async def load(self) -> list[LeaderboardEntry]:
        return list(self.entries)

    async def save(self, entries: Sequence[LeaderboardEntry]) -> bool:
        self.entries = list(entries)
        return True

    def locked(self) -> AbstractContextManager[None]:
        # load and save never yield to the loop, so a merge cannot interleave.
        return nullcontext()


class RedisLeaderboardStore:
    """Whole table stored as one JSON document under `key`."""

    def __init__(self, *, r: redis.Redis, key: str, lock_ttl_ms: int = 5_000) -> None:
        self.r = r
        self.key = key
        self.lock_ttl_ms = lock_ttl_ms

    async def load(self) -> list[LeaderboardEntry]:
        raw = self.r.get(self.key)
        if not raw:
            return []
        return LeaderboardTable.model_validate_json(raw).entries

    async def save(self, entries: Sequence[LeaderboardEntry]) -> bool:
        table = LeaderboardTable(entries=list(entries))
        return bool(self.r.set(self.key, table.model_dump_json()))

    def locked(self) -> AbstractContextManager[None]:
        return leaderboard_lock(r=self.r, key=self.key, ttl_ms=self.lock_ttl_ms)


def sort_and_truncate(entries: Sequence[LeaderboardEntry], *, size: int) -> list[LeaderboardEntry]:
    return sorted(entries, key=lambda e: e.time, reverse=True)[:size]


def qualifies(entries: Sequence[LeaderboardEntry], time: float, *, size: int) -> bool:
    """Does `time` earn a place in a top-`size` table sorted descending?"""

    if len(entries) < size:
        return True
    return time > entries[size - 1].time


class LeaderboardCoordinator:
    """Fetch / qualify / submit protocol against a store.

    Storage problems never reach the game: a failed load reads as an empty
    table and a failed save is only logged.

    Saves merge one entry into whatever the store holds at save time, under the
    store's lock, so sessions finishing together don't overwrite each other.
    """

    def __init__(
        self,
        *,
        store: LeaderboardStore,
        size: int = 10,
        lock_attempts: int = 20,
        lock_retry_seconds: float = 0.05,
    ) -> None:
        self.store = store
        self.size = size
        self.lock_attempts = lock_attempts
        self.lock_retry_seconds = lock_retry_seconds

    async def fetch(self) -> list[LeaderboardEntry]:
        try:
            entries = await self.store.load()
        except Exception as e:
            # Any storage problem (connection, bad JSON, schema) reads as an empty table.
            logger.warning("leaderboard load failed, using empty table: %s", e)
            return []
        return sort_and_truncate(entries, size=self.size)

    def qualifies(self, entries: Sequence[LeaderboardEntry], time: float) -> bool:
        return qualifies(entries, time, size=self.size)

    def insert(self, entries: Sequence[LeaderboardEntry], entry: LeaderboardEntry) -> list[LeaderboardEntry]:
        return sort_and_truncate([*entries, entry], size=self.size)

    async def record(self, entry: LeaderboardEntry) -> list[LeaderboardEntry] | None:
        """Merge `entry` into the stored table and save it.

        Returns the table as saved, or None if the save failed. An unreadable
        stored table fails the save rather than being overwritten.
        """

        for attempt in range(1, self.lock_attempts + 1):
            try:
                with self.store.locked():
                    merged = self.insert(await self.store.load(), entry)
                    ok = await self.store.save(merged)
            except LeaderboardBusyError:
                logger.debug("leaderboard locked, retrying (attempt %d/%d)", attempt, self.lock_attempts)
                await asyncio.sleep(self.lock_retry_seconds)
                continue
            except Exception as e:
                logger.warning("leaderboard save failed: %s", e)
                return None

            if not ok:
                logger.warning("leaderboard save was rejected by the store")
                return None
            return merged

        logger.warning("leaderboard save failed: table stayed locked after %d attempts", self.lock_attempts)
        return None

    async def handle(self, request: LeaderboardRequest) -> LeaderboardResponse:
        if request.kind == "load":
            entries = await self.fetch()
            return LeaderboardResponse(kind="load", generation=request.generation, entries=entries, ok=True)

        if request.entry is None:
            raise ValueError("save request needs an entry")
        saved = await self.record(request.entry)
        if saved is None:
            return LeaderboardResponse(kind="save", generation=request.generation, ok=False)
        return LeaderboardResponse(kind="save", generation=request.generation, entries=saved, ok=True)


@dataclass(frozen=True, slots=True)
class LeaderboardRequest:
    """Outbox message from a session; `generation` ties it to one playthrough.

    A save carries only the new `entry`; the table is merged at save time.
    """

    kind: Literal["load", "save"]
    generation: int
    entry: LeaderboardEntry | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardResponse:
    kind: Literal["load", "save"]
    generation: int
    entries: list[LeaderboardEntry] = field(default_factory=list)
    ok: bool = True
