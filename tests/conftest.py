from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

from bias_game.api.models import Response, Stimulus
from bias_game.collaborators import Notifier, Presenter, Recorder, SessionCollaborators


@pytest.fixture(scope="session", autouse=True)
def _init_assets_from_test_fixtures() -> None:
    """Initialize assets from `tests/assets` so tests never read the repo's real stimuli."""

    from bias_game.assets.singleton import init_assets, reset_assets_for_tests

    reset_assets_for_tests()
    test_root = Path(__file__).resolve().parent
    init_assets(project_root=test_root)


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis(redis_client: fakeredis.FakeRedis) -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    from bias_game.api.deps import get_redis
    from bias_game.main import app

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield redis_client

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, redis_client
    app.dependency_overrides.clear()


class RecordingPresenter(Presenter):
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def on_stimulus_shown(self, stimulus: Stimulus) -> None:
        self.calls.append(("stimulus_shown", stimulus.label))

    async def on_feedback(self, was_correct: bool) -> None:
        self.calls.append(("feedback", was_correct))

    async def on_score_changed(self, score: int, total: int, final: bool) -> None:
        self.calls.append(("score_changed", score, total, final))

    async def on_game_over(self, score: int, total: int) -> None:
        self.calls.append(("game_over", score, total))


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.cues: list[bool] = []
        self.resets = 0

    def reset(self) -> None:
        self.resets += 1
        self.cues = []

    def on_feedback(self, was_correct: bool) -> None:
        self.cues.append(was_correct)


class MemoryRecorder(Recorder):
    def __init__(self) -> None:
        self.responses: list[Response] = []
        self.resets = 0

    def reset(self) -> None:
        self.resets += 1
        self.responses = []

    def on_response_recorded(self, response: Response) -> None:
        self.responses.append(response)


@pytest.fixture()
def collaborators() -> SessionCollaborators:
    return SessionCollaborators(
        presenter=RecordingPresenter(),
        notifier=RecordingNotifier(),
        recorder=MemoryRecorder(),
    )
