"""Data models for podcast production."""

import base64
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone

from podcast_producer.constants import AUDIO_MIME_TYPE, VIDEO_MIME_TYPE


@dataclass
class ScriptSegment:
    speaker: str       # speaker role, e.g. "host" or "interviewer"
    text: str          # cleaned spoken words, never empty


@dataclass
class CombinedAudio:
    """Byte-for-byte splice of every synthesized chunk, in script order."""

    data: bytes
    mime_type: str = AUDIO_MIME_TYPE

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @classmethod
    def from_base64(cls, payload: str, mime_type: str = AUDIO_MIME_TYPE) -> "CombinedAudio":
        return cls(data=base64.b64decode(payload), mime_type=mime_type)

    def to_payload(self) -> dict:
        return {"audio": self.to_base64(), "mime_type": self.mime_type}


@dataclass
class VideoBlob:
    data: bytes
    mime_type: str = VIDEO_MIME_TYPE


@dataclass
class GeneratedScript:
    script: str
    title: str
    description: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Podcast:
    """One episode in the library. Stage outputs are filled in as they complete."""

    title: str
    topic: str
    duration: str
    script: str
    description: str = ""
    thumbnail_url: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    status: str = "completed"
    slug: str = ""
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Podcast":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
