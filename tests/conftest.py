from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    This makes REDIS_URL / ZOMBIEMATH_* overrides available to tests without
    needing to manually export them in your shell.

    In CI, we *don't* auto-load `.env` by default so tuning overrides on a dev
    machine can't leak into the expected numbers.
    """

    # Opt-in in CI with: ZOMBIEMATH_LOAD_DOTENV_FOR_TESTS=1
    if os.environ.get("CI") and os.environ.get("ZOMBIEMATH_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient wired to a fakeredis leaderboard and an empty session registry."""

    import fakeredis
    from fastapi.testclient import TestClient

    from zombiemath.api.deps import get_redis, get_settings
    from zombiemath.main import app
    from zombiemath.session_store import sessions
    from zombiemath.settings import DEFAULT_SETTINGS

    r = fakeredis.FakeRedis(decode_responses=True)

    app.dependency_overrides[get_redis] = lambda: r
    # Tests assert on default tuning; ignore any ZOMBIEMATH_* in the environment.
    app.dependency_overrides[get_settings] = lambda: DEFAULT_SETTINGS
    sessions.clear()
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
    sessions.clear()
