from __future__ import annotations

from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from bias_game.actions import dispatch_choice, restart_game, start_game
from bias_game.api.deps import get_redis
from bias_game.api.models import (
    ChoiceRequest,
    ChoiceResponse,
    CurrentStimulusResponse,
    FinalScore,
    ResponseLogResponse,
    Session,
    SessionCreateRequest,
    SessionListResponse,
    Stimulus,
)
from bias_game.assets.singleton import get_assets
from bias_game.collaborators import RedisRecorder
from bias_game.controller import SessionNotComplete, current_stimulus, final_score, is_complete
from bias_game.core.inputs import normalize_choice
from bias_game.lock import SessionBusy
from bias_game.session_store import SessionNotFound, get_session, list_sessions, require_session
from bias_game.streams import CueStream, read_stream
from bias_game.websocket_hub import hub

router = APIRouter()


def _seeds_for(payload: SessionCreateRequest | None) -> list[Stimulus]:
    if payload is not None and payload.stimuli is not None:
        return list(payload.stimuli)
    return get_assets().seed_stimuli()


def _http_error(e: ValueError) -> HTTPException:
    if isinstance(e, SessionNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, (SessionBusy, SessionNotComplete)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    sid = str(session_id)
    await hub.connect(sid, websocket)

    try:
        # Keep the socket open; a "ping" is answered so clients can confirm the subscription.
        while True:
            if await websocket.receive_text() == "ping":
                await websocket.send_json({"type": "pong", "session_id": sid, "subscribers": hub.subscriber_count(sid)})
    except WebSocketDisconnect:
        await hub.disconnect(sid, websocket)
    except Exception:
        await hub.disconnect(sid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=Session, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest | None = None,
    r: redis.Redis = Depends(get_redis),
) -> Session:
    try:
        return await start_game(r=r, seeds=_seeds_for(payload), seed=payload.seed if payload else None)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/session", response_model=SessionListResponse)
async def list_sessions_route(r: redis.Redis = Depends(get_redis)) -> SessionListResponse:
    return SessionListResponse(sessions=list_sessions(r=r))


@router.get("/session/{session_id}", response_model=Session)
async def get_session_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> Session:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.get("/session/{session_id}/stimulus", response_model=CurrentStimulusResponse)
async def current_stimulus_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> CurrentStimulusResponse:
    try:
        session = require_session(r=r, session_id=session_id)
    except ValueError as e:
        raise _http_error(e) from e

    return CurrentStimulusResponse(
        stimulus=current_stimulus(session),
        position=session.position,
        total=session.total,
        complete=is_complete(session),
    )


@router.post("/session/{session_id}/choice", response_model=ChoiceResponse)
async def choice_route(
    session_id: UUID,
    payload: ChoiceRequest,
    r: redis.Redis = Depends(get_redis),
) -> ChoiceResponse:
    try:
        event = normalize_choice(payload)
        if event is None:
            # Unmapped key or a short swipe: not a choice, nothing changes.
            session = require_session(r=r, session_id=session_id)
            return ChoiceResponse(applied=False, reason="no_choice", session=session)

        outcome = await dispatch_choice(r=r, session_id=session_id, event=event)
    except ValueError as e:
        raise _http_error(e) from e

    return ChoiceResponse(
        applied=outcome.result.applied,
        reason=outcome.result.reason,
        response=outcome.result.response,
        session=outcome.session,
    )


@router.post("/session/{session_id}/restart", response_model=Session)
async def restart_session_route(
    session_id: UUID,
    payload: SessionCreateRequest | None = None,
    r: redis.Redis = Depends(get_redis),
) -> Session:
    try:
        return await restart_game(
            r=r,
            session_id=session_id,
            seeds=_seeds_for(payload),
            seed=payload.seed if payload else None,
        )
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/session/{session_id}/score", response_model=FinalScore)
async def final_score_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> FinalScore:
    try:
        return final_score(require_session(r=r, session_id=session_id))
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/session/{session_id}/responses", response_model=ResponseLogResponse)
async def response_log_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> ResponseLogResponse:
    try:
        require_session(r=r, session_id=session_id)
    except ValueError as e:
        raise _http_error(e) from e

    recorder = RedisRecorder(r=r, session_id=str(session_id))
    return ResponseLogResponse(session_id=session_id, responses=recorder.load())


@router.get("/session/{session_id}/cues")
async def cue_stream_route(
    session_id: UUID,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read a session's audio cue stream."""

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    stream = CueStream(session_id=str(session_id))
    try:
        messages = read_stream(r=r, stream=stream, start=start, end=end, count=count)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return {"session_id": str(session_id), "stream": stream.key, "messages": messages}
