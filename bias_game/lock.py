from __future__ import annotations

from contextlib import contextmanager
from uuid import uuid4

import redis

from bias_game.config import settings


class SessionBusy(ValueError):
    pass


def _lock_key(session_id: str) -> str:
    return f"lock:session:{session_id}"


def _release(*, r: redis.Redis, key: str, token: str) -> None:
    # Delete only while the key still holds our token; after a TTL expiry it may belong to someone else.
    with r.pipeline() as pipe:
        try:
            pipe.watch(key)
            if pipe.get(key) != token:
                pipe.unwatch()
                return
            pipe.multi()
            pipe.delete(key)
            pipe.execute()
        except redis.WatchError:
            # Key changed hands between GET and DEL; it is no longer ours.
            return


@contextmanager
def session_lock(*, r: redis.Redis, session_id: str, ttl_ms: int | None = None):
    """Per-session lock serializing every state transition.

    A second input arriving while the lock is held is dropped with SessionBusy
    rather than queued.
    """

    key = _lock_key(session_id)
    token = uuid4().hex
    acquired = r.set(key, token, nx=True, px=ttl_ms or settings.session_lock_ttl_ms)
    if not acquired:
        raise SessionBusy("Session is busy")
    try:
        yield
    finally:
        _release(r=r, key=key, token=token)
