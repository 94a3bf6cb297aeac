from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class SessionWebSocketHub:
    """In-process WebSocket fan-out keyed by session_id.

    Every client watching a session (usually the one browser tab playing it)
    receives the presenter events for that session. Payloads must be
    JSON-serializable dicts. Sockets that fail a send are dropped.
    """

    def __init__(self) -> None:
        self._by_session: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    def subscriber_count(self, session_id: str) -> int:
        return len(self._by_session.get(session_id, ()))

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_session[session_id].add(websocket)
        logger.debug({"event": "ws_connected", "session_id": session_id, "subscribers": self.subscriber_count(session_id)})

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._by_session.get(session_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._by_session.pop(session_id, None)
        logger.debug({"event": "ws_disconnected", "session_id": session_id})

    async def broadcast(self, session_id: str, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._by_session.get(session_id, set()))

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            logger.debug({"event": "ws_dropped", "session_id": session_id, "count": len(dead)})
            async with self._lock:
                for ws in dead:
                    self._by_session.get(session_id, set()).discard(ws)


hub = SessionWebSocketHub()
