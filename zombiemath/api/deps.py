from __future__ import annotations

from functools import lru_cache

import redis

from zombiemath.infra.redis_client import create_redis
from zombiemath.leaderboard import LeaderboardCoordinator, RedisLeaderboardStore
from zombiemath.settings import GameSettings, get_leaderboard_key, settings_from_env


@lru_cache(maxsize=1)
def get_settings() -> GameSettings:
    return settings_from_env()


@lru_cache(maxsize=1)
def _shared_redis() -> redis.Redis:
    return create_redis()


def get_redis() -> redis.Redis:
    # One client for the process: leaderboard saves run after the request that queued them.
    return _shared_redis()


def make_coordinator(*, r: redis.Redis, settings: GameSettings) -> LeaderboardCoordinator:
    store = RedisLeaderboardStore(r=r, key=get_leaderboard_key())
    return LeaderboardCoordinator(store=store, size=settings.leaderboard_size)
