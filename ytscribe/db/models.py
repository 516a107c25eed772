"""
Cached record models for the transcript service.

Records are stored as JSON documents with camelCase field names.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ytscribe.models.schemas import LanguageOption, VideoMetadata
from ytscribe.utils.helpers import get_timestamp


class CachedRecord(BaseModel):
    """Base for documents kept in the cache store."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class TranscriptRecord(CachedRecord):
    """Single-language transcript of a video, keyed by video id."""
    video_id: str
    title: str = ""
    duration: int = 0  # minutes
    transcript: str = ""
    language: str = ""
    available_languages: List[LanguageOption] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    canonical_url: str = ""
    description: str = ""
    publish_date: Optional[str] = None
    author: str = ""
    channel_id: str = ""
    category: str = ""
    thumbnail_url: str = ""
    updated_at: str = Field(default_factory=get_timestamp)

    @classmethod
    def from_metadata(cls, metadata: VideoMetadata, transcript: str = "", language: str = "") -> "TranscriptRecord":
        """Project video metadata into a record."""
        return cls(
            video_id=metadata.video_id,
            title=metadata.title,
            duration=metadata.duration_minutes,
            transcript=transcript,
            language=language,
            available_languages=metadata.languages,
            tags=list(metadata.keywords),
            canonical_url=metadata.canonical_url,
            description=metadata.description,
            publish_date=metadata.publish_date,
            author=metadata.author,
            channel_id=metadata.channel_id,
            category=metadata.category,
            thumbnail_url=metadata.thumbnail_url,
        )


class LanguageTranscript(CachedRecord):
    """One language variant inside a multilingual record."""
    language: str
    transcript: str
    updated_at: str = Field(default_factory=get_timestamp)


class MultilingualRecord(CachedRecord):
    """All fetched language variants of a video in one document."""
    video_id: str
    title: str = ""
    duration: int = 0
    available_languages: List[LanguageOption] = Field(default_factory=list)
    canonical_url: str = ""
    default_language: str = ""  # picked by the track selection policy
    transcripts: List[LanguageTranscript] = Field(default_factory=list)
    updated_at: str = Field(default_factory=get_timestamp)

    def transcript_for(self, language: str) -> Optional[LanguageTranscript]:
        for entry in self.transcripts:
            if entry.language == language:
                return entry
        return None

    def with_transcript(self, language: str, transcript: str) -> "MultilingualRecord":
        """Copy of the record with the language variant added or replaced."""
        entries = [entry for entry in self.transcripts if entry.language != language]
        entries.append(LanguageTranscript(language=language, transcript=transcript))
        return self.model_copy(update={"transcripts": entries, "updated_at": get_timestamp()})


class SummaryRecord(CachedRecord):
    """Generated markdown summary of a video."""
    summary: str = ""
    tags: List[str] = Field(default_factory=list)
    model: str = ""
    video_id: str = ""
    title: str = ""
    duration: int = 0
    canonical_url: str = ""
    updated_at: str = Field(default_factory=get_timestamp)
