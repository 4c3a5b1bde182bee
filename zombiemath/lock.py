from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

import redis


class LeaderboardBusyError(ValueError):
    """Another writer holds the leaderboard lock."""


@contextmanager
def leaderboard_lock(*, r: redis.Redis, key: str, ttl_ms: int = 5_000) -> Iterator[None]:
    """Best-effort exclusive lock around a read-merge-write of one leaderboard key.

    The TTL bounds how long a crashed writer can block the table.
    """

    lock_key = f"lock:{key}"
    token = uuid4().hex
    if not r.set(lock_key, token, nx=True, px=ttl_ms):
        raise LeaderboardBusyError(f"Leaderboard {key} is busy")
    try:
        yield
    finally:
        # Only release our own lock; after a TTL expiry someone else may hold it.
        if r.get(lock_key) in (token, token.encode()):
            r.delete(lock_key)
