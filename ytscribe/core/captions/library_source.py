"""
Caption source backed by the youtube-transcript-api library.
"""

import asyncio
from typing import List, Optional

from youtube_transcript_api import (
    YouTubeTranscriptApi,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
)

from ytscribe.core.captions.base import CaptionSource
from ytscribe.core.exceptions import CaptionSourceError
from ytscribe.models.schemas import CaptionLine
from ytscribe.utils.helpers import collapse_whitespace

# Errors that only mean "this video has no captions in that language"
_NOT_AVAILABLE_ERRORS = (NoTranscriptFound, TranscriptsDisabled, VideoUnavailable)


class LibraryCaptionSource(CaptionSource):
    """Fetch captions through the youtube-transcript-api library."""

    name = "transcript-api"

    def __init__(self, api: Optional[YouTubeTranscriptApi] = None):
        self.api = api or YouTubeTranscriptApi()

    def _fetch_sync(self, video_id: str, language: str) -> List[CaptionLine]:
        fetched = self.api.fetch(video_id, languages=[language])
        lines = []
        for snippet in fetched:
            text = collapse_whitespace(snippet.text)
            if not text:
                continue
            lines.append(CaptionLine(
                start=max(float(snippet.start), 0.0),
                duration=max(float(snippet.duration), 0.0),
                text=text,
            ))
        return lines

    async def fetch(self, video_id: str, language: str) -> List[CaptionLine]:
        try:
            lines = await asyncio.to_thread(self._fetch_sync, video_id, language)
        except _NOT_AVAILABLE_ERRORS as e:
            raise CaptionSourceError.not_available(
                f"{type(e).__name__} for {video_id} ({language})", self.name
            ) from e
        except Exception as e:
            raise CaptionSourceError.transient(f"{type(e).__name__}: {e}", self.name) from e

        if not lines:
            raise CaptionSourceError.not_available(
                f"empty transcript for {video_id} ({language})", self.name
            )
        return lines
