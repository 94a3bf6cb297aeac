"""Session state machine operations.

Every operation takes the Session explicitly and never closes over shared
state, so several sessions can run side by side and tests can drive one
directly.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from bias_game.api.models import Category, FinalScore, Response, Session, SessionPhase, Stimulus, SubmitReason
from bias_game.fsm import SessionFSM


class ConfigurationError(ValueError):
    pass


class SessionNotComplete(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class SubmitResult:
    """Result of submitting a choice.

    - `applied`: whether the session state mutated.
    - `response`: the recorded answer; None for a stale submission.
    """

    applied: bool
    reason: SubmitReason
    response: Response | None = None


def _now() -> datetime:
    return datetime.now(tz=UTC)


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def shuffled(seeds: Sequence[Stimulus], *, seed: int) -> list[Stimulus]:
    """Return a uniformly shuffled copy of `seeds`.

    Uses `random.Random.shuffle` (Fisher-Yates). Not cryptographic; a fixed
    `seed` reproduces the same order.
    """

    order = list(seeds)
    random.Random(seed).shuffle(order)
    return order


def start_session(
    seeds: Sequence[Stimulus],
    *,
    seed: int | None = None,
    session_id: UUID | None = None,
) -> Session:
    if not seeds:
        raise ConfigurationError("At least one stimulus is required to start a session")

    if seed is None:
        seed = new_seed()

    now = _now()
    return Session(
        session_id=session_id or uuid4(),
        created_at=now,
        last_updated_at=now,
        seed=seed,
        order=shuffled(seeds, seed=seed),
        position=0,
        score=0,
        log=[],
        phase=SessionPhase.in_progress,
    )


def is_complete(session: Session) -> bool:
    return session.position == len(session.order)


def current_stimulus(session: Session) -> Stimulus | None:
    if is_complete(session):
        return None
    return session.order[session.position]


def submit(session: Session, chosen: Category) -> SubmitResult:
    if is_complete(session):
        return SubmitResult(applied=False, reason="already_complete")

    stimulus = session.order[session.position]
    was_correct = Category(chosen) == stimulus.correct_category
    response = Response(label=stimulus.label, chosen_category=chosen, was_correct=was_correct)

    position = session.position + 1
    fsm = SessionFSM(session)
    if position == len(session.order):
        fsm.finish()
    else:
        fsm.answered()

    # Counters only move after the FSM accepted the transition.
    session.score += 1 if was_correct else 0
    session.log.append(response)
    session.position = position
    fsm.sync_phase_to_model()

    return SubmitResult(applied=True, reason="accepted", response=response)


def final_score(session: Session) -> FinalScore:
    if not is_complete(session):
        raise SessionNotComplete("Session is still in progress")
    return FinalScore(score=session.score, total=len(session.order))
