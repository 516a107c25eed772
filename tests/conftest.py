"""
Configuration for pytest tests.
"""

import os

# Set before the application config is imported
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "false")
os.environ.pop("REDIS_URL", None)

import pytest
import httpx

from ytscribe.core.captions.base import CaptionSource
from ytscribe.core.exceptions import CaptionSourceError
from ytscribe.core.summarizer import TranscriptSummarizer
from ytscribe.core.transcript_fetcher import TranscriptFetcher
from ytscribe.core.transcript_service import TranscriptService
from ytscribe.core.video_info import validate_youtube_url
from ytscribe.models.schemas import CaptionLine, CaptionTrack, VideoMetadata
from ytscribe.utils.caching import MemoryCacheStore

TEST_VIDEO_ID = "abc12345678"
TEST_VIDEO_URL = f"https://www.youtube.com/watch?v={TEST_VIDEO_ID}"
MODEL_URL = "https://models.test/chatgpt"


class FakeResolver:
    """Resolver returning fixed metadata and counting calls."""

    def __init__(self, metadata: VideoMetadata, error: Exception = None):
        self.metadata = metadata
        self.error = error
        self.calls = 0

    async def resolve_id(self, video_id):
        self.calls += 1
        if self.error:
            raise self.error
        return self.metadata.model_copy(update={"video_id": video_id})

    async def resolve(self, url):
        return await self.resolve_id(validate_youtube_url(url))


class FakeSource(CaptionSource):
    """Caption source returning fixed lines or raising a fixed error."""

    def __init__(self, name, lines=None, error=None):
        self.name = name
        self.lines = lines or []
        self.error = error
        self.calls = []

    async def fetch(self, video_id, language):
        self.calls.append((video_id, language))
        if self.error:
            raise self.error
        return list(self.lines)


def make_lines(*texts, step=2.0):
    return [CaptionLine(start=i * step, duration=step, text=text) for i, text in enumerate(texts)]


def make_summarizer(handler, **kwargs):
    kwargs.setdefault("endpoints", {"chatgpt": MODEL_URL})
    kwargs.setdefault("api_key", "test-key")
    kwargs.setdefault("shared_secret", None)
    return TranscriptSummarizer(transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture
def sample_metadata():
    """Metadata for a 10 minute video with English and German tracks."""
    return VideoMetadata(
        video_id=TEST_VIDEO_ID,
        title="Test Video",
        description="Line one\r\nLine two\r\nLine three",
        duration_seconds=605,
        author="Test Author",
        channel_id="UC123",
        category="Education",
        publish_date="2024-03-01",
        thumbnail_url="https://i.ytimg.com/vi/abc12345678/hqdefault.jpg",
        keywords=[],
        available_tracks=[
            CaptionTrack(language_code="de", display_name="German", signed_url="https://captions.test/de"),
            CaptionTrack(language_code="en", display_name="English (auto-generated)",
                         is_auto_generated=True, signed_url="https://captions.test/en-asr"),
            CaptionTrack(language_code="en", display_name="English", signed_url="https://captions.test/en"),
        ],
    )


@pytest.fixture
def memory_store():
    return MemoryCacheStore()


@pytest.fixture
def caption_lines():
    return make_lines("hello world", "this is a test", "of the captions")


@pytest.fixture
def sources(caption_lines):
    """Three sources; the library source fails, yt-dlp succeeds."""
    return [
        FakeSource("transcript-api", error=CaptionSourceError.not_available("no captions", "transcript-api")),
        FakeSource("yt-dlp", lines=caption_lines),
        FakeSource("scrape", lines=make_lines("scraped")),
    ]


@pytest.fixture
def model_calls():
    return []


@pytest.fixture
def summarizer(model_calls):
    def handler(request):
        model_calls.append(request)
        return httpx.Response(200, json={"summary": "## Overview\nPython testing explained with pytest fixtures."})

    return make_summarizer(handler)


@pytest.fixture
def service(sample_metadata, sources, memory_store, summarizer):
    return TranscriptService(
        resolver=FakeResolver(sample_metadata),
        fetcher=TranscriptFetcher(sources),
        store=memory_store,
        summarizer=summarizer,
        default_language="en",
    )
