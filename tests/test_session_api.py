from __future__ import annotations

import time
from uuid import UUID, uuid4

import fakeredis
import pytest
from fastapi.testclient import TestClient

from zombiemath.core.entities import Enemy
from zombiemath.session_store import sessions


def _kill_via_registry(session_id: str) -> None:
    session = sessions.get_session(UUID(session_id))
    assert session is not None
    st = session.state
    st.player.health = 1
    st.enemies.append(Enemy(x=st.player.x, y=st.player.y, speed=0.4))


def _tick_until(client: TestClient, session_id: str, *, start_ms: float, leave: str) -> dict:
    """Keep ticking until the leaderboard phase moves past `leave`."""

    t = start_ms
    for _ in range(50):
        data = client.post(f"/session/{session_id}/tick", json={"timestamp_ms": t}).json()
        if data["leaderboard_phase"] != leave:
            return data
        t += 16.0
        time.sleep(0.01)
    raise AssertionError(f"session stuck in {leave}")


def test_healthcheck_and_info(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "zombiemath"


def test_create_and_fetch_session(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    resp = client.post("/session", json={})
    assert resp.status_code == 201
    data = resp.json()

    assert data["phase"] == "playing"
    assert data["leaderboard_phase"] is None
    assert data["player"] == {"x": 400.0, "y": 300.0, "health": 5, "max_health": 5}
    assert set(data["facts"]) == {"left", "right", "up", "down"}

    again = client.get(f"/session/{data['session_id']}")
    assert again.status_code == 200
    assert again.json()["facts"] == data["facts"]


def test_seeded_sessions_get_the_same_facts(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    a = client.post("/session", json={"seed": 99}).json()
    b = client.post("/session", json={"seed": 99}).json()

    assert a["session_id"] != b["session_id"]
    assert a["facts"] == b["facts"]


def test_unknown_session_is_404(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.get(f"/session/{uuid4()}").status_code == 404
    assert client.post(f"/session/{uuid4()}/tick", json={"timestamp_ms": 0}).status_code == 404


def test_answer_moves_player(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    data = client.post("/session", json={"seed": 1}).json()
    sid = data["session_id"]
    left = data["facts"]["left"]

    miss = client.post(f"/session/{sid}/answer", json={"text": "banana"})
    assert miss.status_code == 200
    assert miss.json()["matched"] is None

    hit = client.post(f"/session/{sid}/answer", json={"text": str(left["answer"])}).json()
    assert hit["matched"] == "left"
    distance = 144.0 if left["hard"] else 96.0
    assert hit["snapshot"]["player"]["x"] == 400.0 - distance
    assert hit["snapshot"]["facts"]["left"]["solved"] is True


def test_tick_advances_timer(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = client.post("/session", json={}).json()["session_id"]

    client.post(f"/session/{sid}/tick", json={"timestamp_ms": 1000})
    data = client.post(f"/session/{sid}/tick", json={"timestamp_ms": 1040}).json()

    assert abs(data["timer"] - 0.04) < 1e-9
    assert len(data["enemies"]) == 1


def test_game_over_leaderboard_round_trip(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    sid = client.post("/session", json={}).json()["session_id"]

    _kill_via_registry(sid)
    dead = client.post(f"/session/{sid}/tick", json={"timestamp_ms": 0}).json()
    assert dead["phase"] == "game_over"
    assert dead["player"]["health"] == 0

    data = _tick_until(client, sid, start_ms=16.0, leave="loading")
    assert data["leaderboard_phase"] == "initials"
    assert data["qualified"] is True

    # Initials are only accepted now, and only letters count.
    assert client.post(f"/session/{sid}/initials/submit").status_code == 422
    assert client.post(f"/session/{sid}/initials", json={"letters": "a-b"}).json()["initials"] == "AB"
    assert client.delete(f"/session/{sid}/initials/last").json()["initials"] == "A"
    assert client.post(f"/session/{sid}/initials", json={"letters": "bc"}).json()["initials"] == "ABC"

    shown = client.post(f"/session/{sid}/initials/submit").json()
    assert shown["leaderboard_phase"] == "display"
    assert [e["initials"] for e in shown["leaderboard"]] == ["ABC"]

    entries: list[dict] = []
    for _ in range(50):
        entries = client.get("/leaderboard").json()["entries"]
        if entries:
            break
        time.sleep(0.01)
    assert [e["initials"] for e in entries] == ["ABC"]
    assert "ABC" in r.get("zombiemath:leaderboard")

    restarted = client.post(f"/session/{sid}/restart").json()
    assert restarted["phase"] == "playing"
    assert restarted["generation"] == 1
    assert restarted["leaderboard"][0]["initials"] == "ABC"


def test_protocol_misuse_is_422(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = client.post("/session", json={}).json()["session_id"]

    assert client.post(f"/session/{sid}/restart").status_code == 422
    assert client.post(f"/session/{sid}/initials", json={"letters": "ABC"}).status_code == 422
    assert client.delete(f"/session/{sid}/initials/last").status_code == 422


def test_delete_session(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = client.post("/session", json={}).json()["session_id"]

    res = client.delete(f"/session/{sid}")
    assert res.status_code == 204
    assert sessions.get_session(UUID(sid)) is None

    assert client.get(f"/session/{sid}").status_code == 404
    assert client.delete(f"/session/{sid}").status_code == 404


def test_idle_sessions_are_dropped_when_new_ones_start(
    client_and_redis: tuple[TestClient, fakeredis.FakeRedis], monkeypatch: pytest.MonkeyPatch
) -> None:
    client, _ = client_and_redis
    old = client.post("/session", json={}).json()["session_id"]

    # An hour later the first session has long passed the default idle limit.
    later = time.monotonic() + 3600.0
    monkeypatch.setattr(sessions, "_clock", lambda: later)
    new = client.post("/session", json={}).json()["session_id"]

    assert client.get(f"/session/{old}").status_code == 404
    assert client.get(f"/session/{new}").status_code == 200
    assert len(sessions) == 1
