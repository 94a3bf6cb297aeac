"""Normalize click / key / swipe signals into InputEvents.

Each source maps onto exactly one of `left` / `right`. Signals that are not a
choice at all (an unrelated key, a short swipe) normalize to None; a category
outside the two valid values raises InvalidCategory.
"""

from __future__ import annotations

from bias_game.api.models import Category, ChoiceRequest, InputSource
from bias_game.config import settings
from bias_game.core.events import InputEvent


class InvalidCategory(ValueError):
    pass


_BUTTON_IDS: dict[str, Category] = {
    "left-button": Category.left,
    "right-button": Category.right,
}

_KEYS: dict[str, Category] = {
    "ArrowLeft": Category.left,
    "ArrowRight": Category.right,
}


def parse_category(value: str | None) -> Category:
    raw = (value or "").strip().casefold()
    if raw in _BUTTON_IDS:
        return _BUTTON_IDS[raw]
    try:
        return Category(raw)
    except ValueError as e:
        allowed = ",".join(c.value for c in Category)
        raise InvalidCategory(f"Invalid category '{value}' (allowed: {allowed})") from e


def from_click(value: str | None) -> InputEvent:
    return InputEvent.now(category=parse_category(value), source=InputSource.click)


def from_key(key: str | None) -> InputEvent | None:
    category = _KEYS.get(key or "")
    if category is None:
        return None
    return InputEvent.now(category=category, source=InputSource.key)


def from_swipe(start_x: float, end_x: float, *, threshold_px: float | None = None) -> InputEvent | None:
    threshold = settings.swipe_threshold_px if threshold_px is None else threshold_px
    dx = end_x - start_x
    if abs(dx) <= threshold:
        return None
    category = Category.right if dx > 0 else Category.left
    return InputEvent.now(category=category, source=InputSource.swipe)


def normalize_choice(req: ChoiceRequest) -> InputEvent | None:
    if req.source == InputSource.click:
        return from_click(req.category)
    if req.source == InputSource.key:
        return from_key(req.key)
    if req.start_x is None or req.end_x is None:
        raise ValueError("swipe input requires start_x and end_x")
    return from_swipe(req.start_x, req.end_x)
