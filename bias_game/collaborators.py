"""Collaborators driven by the dispatch layer.

The controller never calls these directly. They only read what they are
handed; none of them mutates a Session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime

import redis
from pydantic import TypeAdapter

from bias_game.api.models import Response, Stimulus
from bias_game.config import settings
from bias_game.core.session_text import GAME_OVER_BANNER, feedback_glyph, game_over_text, score_text
from bias_game.streams import CueStream, publish_to_stream
from bias_game.websocket_hub import SessionWebSocketHub, hub as default_hub

_RESPONSE_LOG = TypeAdapter(list[Response])


class Presenter(ABC):
    @abstractmethod
    async def on_stimulus_shown(self, stimulus: Stimulus) -> None:
        raise NotImplementedError

    @abstractmethod
    async def on_feedback(self, was_correct: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    async def on_score_changed(self, score: int, total: int, final: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    async def on_game_over(self, score: int, total: int) -> None:
        raise NotImplementedError


class Notifier(ABC):
    @abstractmethod
    def reset(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_feedback(self, was_correct: bool) -> None:
        raise NotImplementedError


class Recorder(ABC):
    @abstractmethod
    def reset(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_response_recorded(self, response: Response) -> None:
        raise NotImplementedError


class HubPresenter(Presenter):
    """Pushes presentation events to every WebSocket watching the session.

    The client decides how long feedback stays on screen; `feedback_display_ms`
    is only advertised alongside the feedback event.
    """

    def __init__(
        self,
        *,
        session_id: str,
        hub: SessionWebSocketHub | None = None,
        feedback_display_ms: int | None = None,
    ) -> None:
        self.session_id = session_id
        self.hub = hub or default_hub
        self.feedback_display_ms = settings.feedback_display_ms if feedback_display_ms is None else feedback_display_ms

    async def _send(self, payload: dict[str, object]) -> None:
        await self.hub.broadcast(self.session_id, {"session_id": self.session_id, **payload})

    async def on_stimulus_shown(self, stimulus: Stimulus) -> None:
        await self._send(
            {
                "type": "stimulus_shown",
                "label": stimulus.label,
                # Slide-in direction on the client follows the expected side.
                "slide_from": stimulus.correct_category.value,
            }
        )

    async def on_feedback(self, was_correct: bool) -> None:
        await self._send(
            {
                "type": "feedback",
                "was_correct": was_correct,
                "glyph": feedback_glyph(was_correct),
                "display_ms": self.feedback_display_ms,
            }
        )

    async def on_score_changed(self, score: int, total: int, final: bool) -> None:
        await self._send(
            {
                "type": "score_changed",
                "score": score,
                "total": total,
                "final": final,
                "text": score_text(score, total, final=final),
            }
        )

    async def on_game_over(self, score: int, total: int) -> None:
        await self._send(
            {
                "type": "game_over",
                "score": score,
                "total": total,
                "banner": GAME_OVER_BANNER,
                "text": game_over_text(score, total),
            }
        )


class StreamNotifier(Notifier):
    """Emits the `correct` / `incorrect` cue to the session's Redis stream."""

    def __init__(self, *, r: redis.Redis, session_id: str) -> None:
        self.r = r
        self.stream = CueStream(session_id=session_id)

    def reset(self) -> None:
        self.r.delete(self.stream.key)

    def on_feedback(self, was_correct: bool) -> None:
        publish_to_stream(
            r=self.r,
            stream=self.stream,
            fields={
                "type": "cue",
                "cue": "correct" if was_correct else "incorrect",
                "ts": datetime.now(tz=UTC).isoformat(),
            },
        )


def response_log_key(session_id: str, *, base_key: str | None = None) -> str:
    return f"{base_key or settings.response_log_key}:{session_id}"


class RedisRecorder(Recorder):
    """Keeps the session's response log as one JSON array under a fixed key.

    Every append rewrites the whole array; `reset` overwrites it with `[]` so a
    new session never merges with the previous one.
    """

    def __init__(self, *, r: redis.Redis, session_id: str, base_key: str | None = None) -> None:
        self.r = r
        self.key = response_log_key(session_id, base_key=base_key)

    def load(self) -> list[Response]:
        raw = self.r.get(self.key)
        if not raw:
            return []
        return _RESPONSE_LOG.validate_json(raw)

    def _store(self, responses: list[Response]) -> None:
        self.r.set(self.key, _RESPONSE_LOG.dump_json(responses))

    def reset(self) -> None:
        self._store([])

    def on_response_recorded(self, response: Response) -> None:
        responses = self.load()
        responses.append(response)
        self._store(responses)


@dataclass(frozen=True, slots=True)
class SessionCollaborators:
    presenter: Presenter
    notifier: Notifier
    recorder: Recorder


def build_collaborators(*, r: redis.Redis, session_id: str) -> SessionCollaborators:
    return SessionCollaborators(
        presenter=HubPresenter(session_id=session_id),
        notifier=StreamNotifier(r=r, session_id=session_id),
        recorder=RedisRecorder(r=r, session_id=session_id),
    )
