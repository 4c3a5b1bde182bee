from __future__ import annotations

from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from zombiemath.answers import parse_answer
from zombiemath.api.deps import get_redis, get_settings, make_coordinator
from zombiemath.api.models import (
    AnswerRequest,
    AnswerResponse,
    InitialsRequest,
    LeaderboardResponse,
    SessionCreateRequest,
    SessionSnapshot,
    TickRequest,
)
from zombiemath.leaderboard_runner import runner
from zombiemath.session import GameSession
from zombiemath.session_store import sessions
from zombiemath.settings import GameSettings
from zombiemath.websocket_hub import notifier

router = APIRouter()


def _require_session(session_id: UUID) -> GameSession:
    try:
        return sessions.require_session(session_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from e


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    session = sessions.get_session(session_id)
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await notifier.watch(session, websocket)
    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        notifier.unwatch(session_id, websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=SessionSnapshot, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    r: redis.Redis = Depends(get_redis),
    settings: GameSettings = Depends(get_settings),
) -> SessionSnapshot:
    for stale_id in sessions.evict_idle(max_idle_seconds=settings.session_idle_seconds):
        await notifier.retire(stale_id)

    session = sessions.create_session(
        leaderboard=make_coordinator(r=r, settings=settings),
        settings=settings,
        seed=payload.seed,
    )
    return session.snapshot()


@router.get("/session/{session_id}", response_model=SessionSnapshot)
async def get_session_route(session_id: UUID) -> SessionSnapshot:
    return _require_session(session_id).snapshot()


@router.delete("/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_id: UUID) -> Response:
    if sessions.remove(session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    await notifier.retire(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/session/{session_id}/tick", response_model=SessionSnapshot)
async def tick_route(session_id: UUID, payload: TickRequest) -> SessionSnapshot:
    session = _require_session(session_id)

    session.tick(payload.timestamp_ms)
    runner.dispatch(session)

    await notifier.publish(session)
    return session.snapshot()


@router.post("/session/{session_id}/answer", response_model=AnswerResponse)
async def answer_route(session_id: UUID, payload: AnswerRequest) -> AnswerResponse:
    session = _require_session(session_id)

    value = parse_answer(payload.text)
    matched = session.submit_answer(value) if value is not None else None
    return AnswerResponse(matched=matched.value if matched else None, snapshot=session.snapshot())


@router.post("/session/{session_id}/initials", response_model=SessionSnapshot)
async def enter_initials_route(session_id: UUID, payload: InitialsRequest) -> SessionSnapshot:
    session = _require_session(session_id)
    try:
        session.enter_initials(payload.letters)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return session.snapshot()


@router.delete("/session/{session_id}/initials/last", response_model=SessionSnapshot)
async def erase_initial_route(session_id: UUID) -> SessionSnapshot:
    session = _require_session(session_id)
    try:
        session.erase_initial()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return session.snapshot()


@router.post("/session/{session_id}/initials/submit", response_model=SessionSnapshot)
async def submit_initials_route(session_id: UUID) -> SessionSnapshot:
    session = _require_session(session_id)
    try:
        session.submit_initials()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    runner.dispatch(session)
    await notifier.publish(session)
    return session.snapshot()


@router.post("/session/{session_id}/restart", response_model=SessionSnapshot)
async def restart_route(session_id: UUID) -> SessionSnapshot:
    session = _require_session(session_id)
    try:
        session.restart()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    await notifier.publish(session)
    return session.snapshot()


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard_route(
    r: redis.Redis = Depends(get_redis),
    settings: GameSettings = Depends(get_settings),
) -> LeaderboardResponse:
    coordinator = make_coordinator(r=r, settings=settings)
    return LeaderboardResponse(entries=await coordinator.fetch())
