"""
Data models for the ytscribe transcript service.
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from ytscribe.utils.helpers import seconds_to_minutes


class FailureKind(str, Enum):
    """Why a caption source could not produce lines."""
    NOT_AVAILABLE = "not_available"
    TRANSIENT = "transient"


class CaptionLine(BaseModel):
    """A single timed caption line, times in seconds."""
    start: float = Field(ge=0)
    duration: float = Field(ge=0)
    text: str

    @field_validator('text')
    def validate_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('caption text must not be empty')
        return v

    @property
    def end(self) -> float:
        return self.start + self.duration


class CaptionTrack(BaseModel):
    """A caption track listed in the video page metadata.

    The signed URL expires; tracks are rebuilt on every metadata fetch.
    """
    language_code: str
    display_name: str = ""
    is_auto_generated: bool = False
    signed_url: str = ""


class LanguageOption(BaseModel):
    """A caption language as exposed to API clients."""
    name: str
    code: str


class VideoMetadata(BaseModel):
    """Typed view over the video page metadata."""
    video_id: str
    title: str = ""
    description: str = ""
    duration_seconds: int = 0
    author: str = ""
    channel_id: str = ""
    category: str = ""
    publish_date: Optional[str] = None
    thumbnail_url: str = ""
    keywords: List[str] = Field(default_factory=list)
    available_tracks: List[CaptionTrack] = Field(default_factory=list)

    @property
    def duration_minutes(self) -> int:
        return seconds_to_minutes(self.duration_seconds)

    @property
    def canonical_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"

    @property
    def embed_url(self) -> str:
        return f"https://www.youtube.com/embed/{self.video_id}"

    @property
    def languages(self) -> List[LanguageOption]:
        """Available caption languages, de-duplicated by code in listed order."""
        seen = set()
        options = []
        for track in self.available_tracks:
            if track.language_code in seen:
                continue
            seen.add(track.language_code)
            options.append(LanguageOption(name=track.display_name or track.language_code,
                                          code=track.language_code))
        return options
