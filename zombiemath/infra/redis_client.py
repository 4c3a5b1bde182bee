from __future__ import annotations

import os

import redis


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def get_socket_timeout() -> float:
    # Leaderboard I/O runs in the game's event loop; a dead server must fail fast.
    return float(os.environ.get("REDIS_SOCKET_TIMEOUT", "2.0"))


def create_redis() -> redis.Redis:
    # decode_responses=True => the stored leaderboard JSON comes back as str
    return redis.Redis.from_url(
        get_redis_url(),
        decode_responses=True,
        socket_timeout=get_socket_timeout(),
        socket_connect_timeout=get_socket_timeout(),
    )
