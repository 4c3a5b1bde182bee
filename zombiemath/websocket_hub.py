from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from fastapi import WebSocket

from zombiemath.api.models import LeaderboardPhase, SessionPhase
from zombiemath.session import GameSession

logger = logging.getLogger(__name__)

PhaseKey = tuple[SessionPhase, LeaderboardPhase | None]


def phase_key(session: GameSession) -> PhaseKey:
    return session.phase, session.leaderboard_phase


@dataclass(slots=True)
class _Watchers:
    last_phase: PhaseKey
    sockets: set[WebSocket] = field(default_factory=set)


class SessionNotifier:
    """Pushes phase changes to clients watching a session over WebSocket.

    Only phase transitions are pushed (`session_updated`); per-frame state is
    pulled through the snapshot route. `publish` compares against the last phase
    sent for that session, so routes can call it after any operation.
    """

    def __init__(self) -> None:
        self._by_session: dict[UUID, _Watchers] = {}

    def watcher_count(self, session_id: UUID) -> int:
        watchers = self._by_session.get(session_id)
        return len(watchers.sockets) if watchers else 0

    async def watch(self, session: GameSession, websocket: WebSocket) -> None:
        await websocket.accept()
        watchers = self._by_session.setdefault(session.session_id, _Watchers(last_phase=phase_key(session)))
        watchers.sockets.add(websocket)

    def unwatch(self, session_id: UUID, websocket: WebSocket) -> None:
        watchers = self._by_session.get(session_id)
        if watchers is None:
            return
        watchers.sockets.discard(websocket)
        if not watchers.sockets:
            del self._by_session[session_id]

    async def publish(self, session: GameSession) -> bool:
        """Send `session_updated` if the session's phase moved since the last push."""

        watchers = self._by_session.get(session.session_id)
        if watchers is None:
            return False

        key = phase_key(session)
        if key == watchers.last_phase:
            return False
        watchers.last_phase = key

        phase, leaderboard_phase = key
        await self._send(
            session.session_id,
            {
                "type": "session_updated",
                "session_id": str(session.session_id),
                "generation": session.generation,
                "phase": phase.value,
                "leaderboard_phase": leaderboard_phase.value if leaderboard_phase else None,
            },
        )
        return True

    async def retire(self, session_id: UUID) -> None:
        """Tell watchers the session is gone and stop tracking it."""

        await self._send(session_id, {"type": "session_closed", "session_id": str(session_id)})
        self._by_session.pop(session_id, None)

    async def _send(self, session_id: UUID, payload: dict[str, object]) -> None:
        watchers = self._by_session.get(session_id)
        if watchers is None:
            return
        for ws in list(watchers.sockets):
            try:
                await ws.send_json(payload)
            except Exception as e:
                logger.debug("dropping websocket for session %s: %s", session_id, e)
                watchers.sockets.discard(ws)


notifier = SessionNotifier()
