from __future__ import annotations

from uuid import uuid4

import fakeredis
from fastapi.testclient import TestClient

APPLE_BANANA = [
    {"label": "Apple", "correct_category": "left"},
    {"label": "Banana", "correct_category": "right"},
]


def _other(category: str) -> str:
    return "right" if category == "left" else "left"


def test_post_session_uses_asset_seed_set(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    resp = client.post("/session")
    assert resp.status_code == 201
    data = resp.json()

    # tests/assets/stimuli.csv has five words.
    assert len(data["order"]) == 5
    assert data["position"] == 0
    assert data["score"] == 0
    assert data["log"] == []
    assert data["phase"] == "in_progress"


def test_play_session_to_completion(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis

    resp = client.post("/session", json={"stimuli": APPLE_BANANA, "seed": 7})
    assert resp.status_code == 201
    session = resp.json()
    sid = session["session_id"]

    cur = client.get(f"/session/{sid}/stimulus").json()
    assert cur["stimulus"] == session["order"][0]
    assert (cur["position"], cur["total"], cur["complete"]) == (0, 2, False)

    # Final score is not available mid-game.
    assert client.get(f"/session/{sid}/score").status_code == 409

    first = session["order"][0]
    resp1 = client.post(f"/session/{sid}/choice", json={"source": "click", "category": first["correct_category"]})
    assert resp1.status_code == 200
    body1 = resp1.json()
    assert body1["applied"] is True
    assert body1["reason"] == "accepted"
    assert body1["response"] == {"label": first["label"], "chosen_category": first["correct_category"], "was_correct": True}
    assert body1["session"]["score"] == 1

    second = session["order"][1]
    wrong_key = "ArrowLeft" if second["correct_category"] == "right" else "ArrowRight"
    resp2 = client.post(f"/session/{sid}/choice", json={"source": "key", "key": wrong_key})
    body2 = resp2.json()
    assert body2["applied"] is True
    assert body2["response"]["was_correct"] is False
    assert body2["session"]["phase"] == "complete"

    cur2 = client.get(f"/session/{sid}/stimulus").json()
    assert cur2["stimulus"] is None
    assert cur2["complete"] is True

    assert client.get(f"/session/{sid}/score").json() == {"score": 1, "total": 2}

    # Stale submission: 200, nothing changes.
    stale = client.post(f"/session/{sid}/choice", json={"source": "click", "category": "left"})
    assert stale.status_code == 200
    assert stale.json()["applied"] is False
    assert stale.json()["reason"] == "already_complete"
    assert stale.json()["session"]["position"] == 2

    log = client.get(f"/session/{sid}/responses").json()
    assert [r["label"] for r in log["responses"]] == [first["label"], second["label"]]

    cues = client.get(f"/session/{sid}/cues").json()
    assert cues["stream"] == f"cues:{sid}"
    assert [m["fields"]["cue"] for m in cues["messages"]] == ["correct", "incorrect"]

    assert r.get(f"gameData:{sid}") is not None


def test_non_choice_inputs_are_ignored(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = client.post("/session", json={"stimuli": APPLE_BANANA}).json()["session_id"]

    resp = client.post(f"/session/{sid}/choice", json={"source": "key", "key": "Enter"})
    assert resp.status_code == 200
    assert resp.json()["applied"] is False
    assert resp.json()["reason"] == "no_choice"

    short = client.post(f"/session/{sid}/choice", json={"source": "swipe", "start_x": 100, "end_x": 110})
    assert short.json()["reason"] == "no_choice"
    assert short.json()["session"]["position"] == 0


def test_swipe_is_a_choice(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = client.post("/session", json={"stimuli": APPLE_BANANA}).json()["session_id"]

    resp = client.post(f"/session/{sid}/choice", json={"source": "swipe", "start_x": 10, "end_x": 200})
    assert resp.json()["applied"] is True
    assert resp.json()["response"]["chosen_category"] == "right"


def test_invalid_category_is_rejected(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    sid = client.post("/session", json={"stimuli": APPLE_BANANA}).json()["session_id"]

    resp = client.post(f"/session/{sid}/choice", json={"source": "click", "category": "up"})
    assert resp.status_code == 422

    assert client.get(f"/session/{sid}").json()["position"] == 0


def test_empty_seed_set_is_rejected(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    resp = client.post("/session", json={"stimuli": []})
    assert resp.status_code == 422
    assert client.get("/session").json() == {"sessions": []}


def test_restart_clears_score_log_and_cues(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    session = client.post("/session", json={"stimuli": APPLE_BANANA}).json()
    sid = session["session_id"]
    client.post(f"/session/{sid}/choice", json={"category": session["order"][0]["correct_category"]})

    resp = client.post(f"/session/{sid}/restart", json={"stimuli": APPLE_BANANA})
    assert resp.status_code == 200
    data = resp.json()
    assert data["session_id"] == sid
    assert (data["position"], data["score"], data["log"]) == (0, 0, [])

    assert client.get(f"/session/{sid}/responses").json()["responses"] == []
    assert client.get(f"/session/{sid}/cues").json()["messages"] == []
    assert len(client.get("/session").json()["sessions"]) == 1


def test_unknown_session_returns_404(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    missing = uuid4()

    assert client.get(f"/session/{missing}").status_code == 404
    assert client.get(f"/session/{missing}/stimulus").status_code == 404
    assert client.get(f"/session/{missing}/score").status_code == 404
    assert client.post(f"/session/{missing}/choice", json={"category": "left"}).status_code == 404
    assert client.post(f"/session/{missing}/restart").status_code == 404


def test_busy_session_returns_409(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    sid = client.post("/session", json={"stimuli": APPLE_BANANA}).json()["session_id"]

    r.set(f"lock:session:{sid}", "1")
    resp = client.post(f"/session/{sid}/choice", json={"category": "left"})
    assert resp.status_code == 409
    r.delete(f"lock:session:{sid}")

    assert client.get(f"/session/{sid}").json()["position"] == 0


def test_cue_stream_count_bounds(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.get(f"/session/{uuid4()}/cues?count=0").status_code == 422
