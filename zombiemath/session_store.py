from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from uuid import UUID, uuid4

from zombiemath.leaderboard import LeaderboardCoordinator
from zombiemath.session import GameSession
from zombiemath.settings import DEFAULT_SETTINGS, GameSettings

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-process map of live sessions keyed by id.

    Sessions are frame-driven simulation objects, so they stay in memory; only
    the leaderboard is persisted. Every lookup through `require_session` counts
    as activity; `evict_idle` drops sessions nobody has touched for a while.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._sessions: dict[UUID, GameSession] = {}
        self._last_seen: dict[UUID, float] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def create_session(
        self,
        *,
        leaderboard: LeaderboardCoordinator | None,
        settings: GameSettings = DEFAULT_SETTINGS,
        seed: int | None = None,
    ) -> GameSession:
        session_id = uuid4()
        rng = random.Random(seed) if seed is not None else random.Random()
        session = GameSession(session_id=session_id, settings=settings, rng=rng, leaderboard=leaderboard)
        self._sessions[session_id] = session
        self._last_seen[session_id] = self._clock()
        return session

    def get_session(self, session_id: UUID) -> GameSession | None:
        return self._sessions.get(session_id)

    def require_session(self, session_id: UUID) -> GameSession:
        session = self.get_session(session_id)
        if session is None:
            raise KeyError("Session not found")
        self._last_seen[session_id] = self._clock()
        return session

    def remove(self, session_id: UUID) -> GameSession | None:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def evict_idle(self, *, max_idle_seconds: float) -> list[UUID]:
        """Remove sessions idle for longer than `max_idle_seconds`; returns their ids."""

        cutoff = self._clock() - max_idle_seconds
        stale = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for sid in stale:
            self.remove(sid)
        if stale:
            logger.info("evicted %d idle session(s)", len(stale))
        return stale

    def clear(self) -> None:
        self._sessions.clear()
        self._last_seen.clear()


sessions = SessionRegistry()
