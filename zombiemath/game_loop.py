from __future__ import annotations

import asyncio

from zombiemath.api.models import SessionSnapshot
from zombiemath.leaderboard_runner import LeaderboardRunner
from zombiemath.session import GameSession

FRAME_MS = 1000 / 60


async def run_frames(
    *,
    session: GameSession,
    runner: LeaderboardRunner,
    frames: int,
    start_ms: float = 0.0,
    frame_ms: float = FRAME_MS,
) -> SessionSnapshot:
    """Drive `session` headlessly for `frames` animation frames.

    Yields to the event loop after every frame so leaderboard requests can
    complete in the background, the way they would behind a real renderer.
    """

    for i in range(frames):
        session.tick(start_ms + i * frame_ms)
        runner.dispatch(session)
        await asyncio.sleep(0)

    return session.snapshot()
