from __future__ import annotations

from bias_game.api.models import Session

CORRECT_GLYPH = "✔"
INCORRECT_GLYPH = "✘"
GAME_OVER_BANNER = "🎉 Game Over!"


def feedback_glyph(was_correct: bool) -> str:
    return CORRECT_GLYPH if was_correct else INCORRECT_GLYPH


def score_text(score: int, total: int, *, final: bool = False) -> str:
    if final:
        return f"Final Score: {score} / {total}"
    return f"Score: {score}"


def game_over_text(score: int, total: int) -> str:
    return f"You scored {score} out of {total}!"


def session_summary(session: Session) -> str:
    """One-line summary for logs and debugging."""

    state = "complete" if session.position == len(session.order) else "in progress"
    return f"session {session.session_id}: {session.position}/{len(session.order)} answered, score {session.score} ({state})"
