from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID, uuid4

import redis

from bias_game.api.models import Session, Stimulus
from bias_game.collaborators import SessionCollaborators, build_collaborators
from bias_game.controller import SubmitResult, current_stimulus, is_complete, start_session, submit
from bias_game.core.events import InputEvent
from bias_game.core.session_text import session_summary
from bias_game.lock import session_lock
from bias_game.session_store import require_session, save_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActionResult:
    session: Session
    result: SubmitResult


async def _present_next(*, session: Session, collaborators: SessionCollaborators) -> None:
    presenter = collaborators.presenter
    stimulus = current_stimulus(session)
    if stimulus is not None:
        await presenter.on_stimulus_shown(stimulus)
        return
    await presenter.on_score_changed(session.score, session.total, True)
    await presenter.on_game_over(session.score, session.total)


async def start_game(
    *,
    r: redis.Redis,
    seeds: Sequence[Stimulus],
    seed: int | None = None,
    session_id: UUID | None = None,
    collaborators: SessionCollaborators | None = None,
) -> Session:
    """Create a session (or replace the one stored under `session_id`).

    Raises ConfigurationError for an empty seed set before anything is
    persisted or presented.
    """

    sid = session_id or uuid4()
    collaborators = collaborators or build_collaborators(r=r, session_id=str(sid))

    with session_lock(r=r, session_id=str(sid)):
        session = start_session(seeds, seed=seed, session_id=sid)
        collaborators.recorder.reset()
        collaborators.notifier.reset()
        save_session(r=r, session=session)

        logger.info({"event": "session_started", "session_id": str(sid), "total": session.total, "seed": session.seed})

        await collaborators.presenter.on_score_changed(session.score, session.total, False)
        await _present_next(session=session, collaborators=collaborators)

    return session


async def restart_game(
    *,
    r: redis.Redis,
    session_id: UUID,
    seeds: Sequence[Stimulus],
    seed: int | None = None,
    collaborators: SessionCollaborators | None = None,
) -> Session:
    require_session(r=r, session_id=session_id)
    logger.info({"event": "session_restart", "session_id": str(session_id)})
    return await start_game(r=r, seeds=seeds, seed=seed, session_id=session_id, collaborators=collaborators)


async def dispatch_choice(
    *,
    r: redis.Redis,
    session_id: UUID,
    event: InputEvent,
    collaborators: SessionCollaborators | None = None,
) -> ActionResult:
    """Single entry point for every classification input.

    Applies a choice by:
    - acquiring the per-session lock (a busy session drops the input)
    - loading the session
    - submitting the choice through the controller
    - persisting the session
    - fanning the outcome out to recorder, presenter and notifier
    """

    sid = str(session_id)
    collaborators = collaborators or build_collaborators(r=r, session_id=sid)

    with session_lock(r=r, session_id=sid):
        session = require_session(r=r, session_id=session_id)
        result = submit(session, event.category)

        if not result.applied:
            logger.debug({"event": "stale_submission", "session_id": sid, "source": event.source.value})
            return ActionResult(session=session, result=result)

        save_session(r=r, session=session)
        response = result.response
        assert response is not None

        logger.debug(
            {
                "event": "choice_applied",
                "session_id": sid,
                "source": event.source.value,
                "label": response.label,
                "chosen": response.chosen_category.value,
                "was_correct": response.was_correct,
            }
        )

        collaborators.recorder.on_response_recorded(response)
        await collaborators.presenter.on_score_changed(session.score, session.total, False)
        await collaborators.presenter.on_feedback(response.was_correct)
        collaborators.notifier.on_feedback(response.was_correct)
        await _present_next(session=session, collaborators=collaborators)

        if is_complete(session):
            logger.info({"event": "session_complete", "summary": session_summary(session)})

    return ActionResult(session=session, result=result)
