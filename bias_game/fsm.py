from __future__ import annotations

from statemachine import State, StateMachine

from bias_game.api.models import Session, SessionPhase


class SessionFSM(StateMachine):
    """FSM wrapper around Session.

    - phases: in progress -> complete
    - `answered` keeps the session in progress, `finish` consumes the last stimulus.
    - the controller mutates counters; the FSM only guards transitions.
    """

    in_progress = State(
        SessionPhase.in_progress.value,
        value=SessionPhase.in_progress.value,
        initial=True,
    )
    complete = State(SessionPhase.complete.value, value=SessionPhase.complete.value, final=True)

    answered = in_progress.to.itself()
    finish = in_progress.to(complete)

    def __init__(self, session: Session):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
