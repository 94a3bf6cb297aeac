from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

import redis

from bias_game.api.models import Session

logger = logging.getLogger(__name__)

SESSIONS_SET_KEY = "bias_game:sessions"
SESSION_KEY_PREFIX = "bias_game:session:"  # + {uuid}


class SessionNotFound(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _session_key(session_id: UUID) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def save_session(*, r: redis.Redis, session: Session) -> None:
    session.last_updated_at = _now()
    r.set(_session_key(session.session_id), session.model_dump_json())
    r.sadd(SESSIONS_SET_KEY, str(session.session_id))


def get_session(*, r: redis.Redis, session_id: UUID) -> Session | None:
    raw = r.get(_session_key(session_id))
    if not raw:
        return None
    return Session.model_validate_json(raw)


def require_session(*, r: redis.Redis, session_id: UUID) -> Session:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise SessionNotFound("Session not found")
    return session


def list_sessions(*, r: redis.Redis) -> list[Session]:
    ids = sorted(r.smembers(SESSIONS_SET_KEY))
    out: list[Session] = []
    for sid in ids:
        try:
            session_id = UUID(sid)
        except ValueError:
            logger.warning({"event": "session_index_bad_id", "value": sid})
            continue
        session = get_session(r=r, session_id=session_id)
        if session is not None:
            out.append(session)
    out.sort(key=lambda s: s.created_at, reverse=True)
    return out
