from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


class Settings(BaseModel):
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    # Base key of the persisted response log; the session id is appended.
    response_log_key: str = os.getenv("RESPONSE_LOG_KEY", "gameData")
    feedback_display_ms: int = int(os.getenv("FEEDBACK_DISPLAY_MS", "600"))
    swipe_threshold_px: float = float(os.getenv("SWIPE_THRESHOLD_PX", "30"))
    session_lock_ttl_ms: int = int(os.getenv("SESSION_LOCK_TTL_MS", "5000"))
    strict_assets: bool = _env_flag("BIAS_GAME_STRICT_ASSETS")


settings = Settings()
