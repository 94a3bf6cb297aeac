from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from bias_game.api.models import Category, InputSource


@dataclass(frozen=True, slots=True)
class InputEvent:
    """A classification choice, already normalized from its input source."""

    category: Category
    source: InputSource
    ts: datetime

    @staticmethod
    def now(*, category: Category, source: InputSource) -> "InputEvent":
        return InputEvent(category=category, source=source, ts=datetime.now(tz=UTC))
