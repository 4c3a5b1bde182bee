from __future__ import annotations

import fakeredis
import pytest

from zombiemath.lock import LeaderboardBusyError, leaderboard_lock


def test_second_holder_is_refused_until_release() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    with leaderboard_lock(r=r, key="board"):
        assert r.get("lock:board") is not None
        with pytest.raises(LeaderboardBusyError):
            with leaderboard_lock(r=r, key="board"):
                pass

    assert r.get("lock:board") is None
    with leaderboard_lock(r=r, key="board"):
        pass


def test_expired_lock_taken_by_someone_else_is_left_alone() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    with leaderboard_lock(r=r, key="board"):
        # Simulate our TTL running out and another writer taking over.
        r.set("lock:board", "other-writer")

    assert r.get("lock:board") == "other-writer"
