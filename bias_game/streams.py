from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, cast

import redis


@dataclass(frozen=True, slots=True)
class CueStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"cues:{self.session_id}"


def publish_to_stream(*, r: redis.Redis, stream: CueStream, fields: Mapping[str, str]) -> str:
    """Append an entry to a session's cue stream."""

    # redis-py stubs expect field/value unions; we only use string fields/values.
    stream_id = r.xadd(stream.key, {str(k): str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def read_stream(
    *,
    r: redis.Redis,
    stream: CueStream,
    start: str = "-",
    end: str = "+",
    count: int = 20,
) -> list[dict[str, object]]:
    entries = r.xrange(stream.key, min=start, max=end, count=count)
    return [{"id": mid, "fields": fields} for mid, fields in entries]
