from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Category(StrEnum):
    left = "left"
    right = "right"


class SessionPhase(StrEnum):
    in_progress = "in_progress"
    complete = "complete"


class InputSource(StrEnum):
    click = "click"
    key = "key"
    swipe = "swipe"


class Stimulus(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    correct_category: Category


class Response(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    chosen_category: Category
    was_correct: bool


class Session(BaseModel):
    session_id: UUID
    created_at: datetime
    last_updated_at: datetime

    # Shuffle seed, kept for reproducibility/debugging.
    seed: int

    order: list[Stimulus]
    position: int = 0
    score: int = 0
    log: list[Response] = Field(default_factory=list)

    phase: SessionPhase = SessionPhase.in_progress

    @model_validator(mode="after")
    def _check_counters(self) -> "Session":
        if not 0 <= self.position <= len(self.order):
            raise ValueError("position must be within 0..len(order)")
        if not 0 <= self.score <= self.position:
            raise ValueError("score must be within 0..position")
        if len(self.log) != self.position:
            raise ValueError("log must hold exactly one response per answered stimulus")
        return self

    @property
    def total(self) -> int:
        return len(self.order)


class FinalScore(BaseModel):
    score: int
    total: int


class SessionCreateRequest(BaseModel):
    # When omitted, the seed set is loaded from the stimulus assets.
    stimuli: list[Stimulus] | None = None
    seed: int | None = None


class ChoiceRequest(BaseModel):
    """Raw classification signal from one input source.

    - click: `category` ("left"/"right" or the button id)
    - key: `key` (e.g. "ArrowLeft")
    - swipe: `start_x` / `end_x` screen coordinates
    """

    source: InputSource = InputSource.click
    category: str | None = None
    key: str | None = None
    start_x: float | None = None
    end_x: float | None = None


SubmitReason = Literal["accepted", "already_complete", "no_choice"]


class ChoiceResponse(BaseModel):
    applied: bool
    reason: SubmitReason
    response: Response | None = None
    session: Session


class CurrentStimulusResponse(BaseModel):
    stimulus: Stimulus | None
    position: int
    total: int
    complete: bool


class SessionListResponse(BaseModel):
    sessions: list[Session]


class ResponseLogResponse(BaseModel):
    session_id: UUID
    responses: list[Response]
