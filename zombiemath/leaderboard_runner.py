from __future__ import annotations

import asyncio
import logging

from zombiemath.leaderboard import LeaderboardRequest
from zombiemath.session import GameSession

logger = logging.getLogger(__name__)


async def handle_request(*, session: GameSession, request: LeaderboardRequest) -> bool:
    """Run one leaderboard request and hand the response back to the session.

    Returns True if a response was delivered.
    """

    if session.leaderboard is None:
        return False

    response = await session.leaderboard.handle(request)
    session.deliver(response)
    return True


class LeaderboardRunner:
    """Runs session leaderboard requests as background tasks.

    The session never waits on them: responses land in its inbox and are
    applied on a later tick.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[bool]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def dispatch(self, session: GameSession) -> int:
        """Start a task for every queued request. Must be called from a running event loop."""

        requests = session.drain_requests()
        for request in requests:
            logger.debug("dispatching %s for session %s (generation %d)", request.kind, session.session_id, request.generation)
            task = asyncio.create_task(handle_request(session=session, request=request))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return len(requests)

    async def flush(self) -> None:
        """Wait for every in-flight request."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks))


runner = LeaderboardRunner()
