"""
Tests for the HTTP API.
"""

import json
import pytest
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient

from ytscribe.api.app import app
from ytscribe.api.routes import get_service
from ytscribe.core.exceptions import PrivateVideo
from ytscribe.utils.caching import MemoryCacheStore, WriteMode

from conftest import TEST_VIDEO_ID, TEST_VIDEO_URL, FakeResolver, make_summarizer


class CountingStore(MemoryCacheStore):
    """Memory store that records every write."""

    def __init__(self):
        super().__init__()
        self.writes = []

    async def set(self, key, record, mode=WriteMode.OVERWRITE):
        self.writes.append((key, mode))
        await super().set(key, record, mode)


@pytest.fixture
def memory_store():
    return CountingStore()


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "ytscribe"
    assert "x-process-time" in response.headers


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"


def test_health_tools(client):
    with patch("ytscribe.core.transcript_service.shutil.which", side_effect=lambda name: f"/usr/bin/{name}"), \
            patch("ytscribe.core.transcript_service.cookie_file_readable", return_value=True):
        response = client.get("/health/tools")

    data = response.json()
    assert response.status_code == 200
    assert data["ok"] is True
    assert data["ytDlp"]["path"] == "/usr/bin/yt-dlp"


def test_health_tools_reports_missing_binary(client):
    with patch("ytscribe.core.transcript_service.shutil.which", return_value=None), \
            patch("ytscribe.core.transcript_service.cookie_file_readable", return_value=True):
        data = client.get("/health/tools").json()

    assert data["ok"] is False
    assert data["ytDlp"]["available"] is False


def test_debug_uses_forwarded_address(client):
    response = client.get("/debug", headers={"x-forwarded-for": "203.0.113.7, 10.0.0.1"})
    assert response.json()["ip"] == "203.0.113.7"
    assert "region" in response.json()


def test_invalid_url_is_400(client):
    response = client.post("/smart-transcript", json={"url": "https://example.com/watch?v=abc12345678"})
    assert response.status_code == 400
    assert "message" in response.json()


def test_missing_url_is_400(client):
    response = client.post("/smart-transcript", json={})
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid request")


def test_video_without_tracks_is_404(client, service, sample_metadata):
    service.resolver = FakeResolver(sample_metadata.model_copy(update={"available_tracks": []}))

    response = client.post("/simple-transcript-v2", json={"url": TEST_VIDEO_URL})

    assert response.status_code == 404
    assert "captions" in response.json()["message"].lower()


def test_private_video_is_403(client, service, sample_metadata):
    service.resolver = FakeResolver(sample_metadata, error=PrivateVideo("Video is private"))

    response = client.post("/transcript", json={"url": TEST_VIDEO_URL})

    assert response.status_code == 403
    assert response.json() == {"message": "Video is private"}


def test_full_transcript_envelope(client, sources):
    response = client.post("/transcript", json={"url": TEST_VIDEO_URL})

    body = response.json()
    assert response.status_code == 200
    assert body["code"] == 100000
    assert body["message"] == "success"
    data = body["data"]
    assert data["videoId"] == TEST_VIDEO_ID
    assert data["videoInfo"]["embedUrl"] == f"https://www.youtube.com/embed/{TEST_VIDEO_ID}"
    assert [entry["code"] for entry in data["language_code"]] == ["de", "en"]
    assert data["transcripts"]["en"]["custom"][1] == {"start": 2.0, "end": 4.0, "text": "this is a test"}


def test_simple_transcript_uses_default_language(client, sources):
    response = client.post("/simple-transcript", json={"url": TEST_VIDEO_URL})

    assert response.json() == {
        "duration": 10,
        "title": "Test Video",
        "transcript": "hello world this is a test of the captions",
        "transcriptLanguageCode": "en",
    }
    assert sources[1].calls == [(TEST_VIDEO_ID, "en")]


def test_simple_transcript_v2_lists_languages(client):
    response = client.post("/simple-transcript-v2", json={"url": TEST_VIDEO_URL, "lang": "de"})

    data = response.json()
    assert data["transcriptLanguageCode"] == "de"
    assert data["languages"] == [
        {"name": "German", "code": "de"},
        {"name": "English (auto-generated)", "code": "en"},
    ]


def test_simple_transcript_v2_unknown_language_is_404(client):
    response = client.post("/simple-transcript-v2", json={"url": TEST_VIDEO_URL, "lang": "ja"})
    assert response.status_code == 404


def test_simple_transcript_v3_caches_each_language(client, service, sources, memory_store):
    first = client.post("/simple-transcript-v3", json={"url": "https://youtu.be/abc12345678"})
    second = client.post("/simple-transcript-v3", json={"url": TEST_VIDEO_URL, "lang": "de"})
    third = client.post("/simple-transcript-v3", json={"url": TEST_VIDEO_URL, "lang": "de"})

    assert first.json()["transcriptLanguageCode"] == "en"
    assert second.json()["transcriptLanguageCode"] == "de"
    assert third.json() == second.json()
    assert service.resolver.calls == 1
    assert len(sources[1].calls) == 2
    document = memory_store._memory_cache[f"multilingual:{TEST_VIDEO_ID}"]
    assert '"language": "en"' in document and '"language": "de"' in document


def test_smart_transcript_is_idempotent(client, service, sources, memory_store):
    first = client.post("/smart-transcript", json={"url": TEST_VIDEO_URL})
    second = client.post("/smart-transcript", json={"url": f"https://www.youtube.com/shorts/{TEST_VIDEO_ID}"})

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["duration"] == 10
    assert first.json()["transcriptLanguageCode"] == "en"
    assert service.resolver.calls == 1
    assert [len(source.calls) for source in sources] == [1, 1, 0]
    assert memory_store.writes == [(f"transcripts:{TEST_VIDEO_ID}", WriteMode.OVERWRITE)]


def test_smart_transcript_caches_other_languages_separately(client, service, sources, memory_store):
    english = client.post("/smart-transcript", json={"url": TEST_VIDEO_URL})
    first = client.post("/smart-transcript", json={"url": TEST_VIDEO_URL, "lang": "de"})
    second = client.post("/smart-transcript", json={"url": TEST_VIDEO_URL, "lang": "de"})
    again = client.post("/smart-transcript", json={"url": TEST_VIDEO_URL})

    assert english.json()["transcriptLanguageCode"] == "en"
    assert first.json()["transcriptLanguageCode"] == "de"
    assert first.json() == second.json()
    assert again.json() == english.json()
    assert sources[1].calls == [(TEST_VIDEO_ID, "en"), (TEST_VIDEO_ID, "de")]
    assert memory_store.writes == [
        (f"transcripts:{TEST_VIDEO_ID}", WriteMode.OVERWRITE),
        (f"transcripts:{TEST_VIDEO_ID}:de", WriteMode.OVERWRITE),
    ]


def test_simple_transcript_v3_default_after_explicit_language(client, sources):
    german = client.post("/simple-transcript-v3", json={"url": TEST_VIDEO_URL, "lang": "de"})
    default = client.post("/simple-transcript-v3", json={"url": TEST_VIDEO_URL})
    cached = client.post("/simple-transcript-v3", json={"url": TEST_VIDEO_URL})

    assert german.json()["transcriptLanguageCode"] == "de"
    assert default.json()["transcriptLanguageCode"] == "en"
    assert cached.json() == default.json()
    assert sources[1].calls == [(TEST_VIDEO_ID, "de"), (TEST_VIDEO_ID, "en")]


def test_smart_transcript_v2_details(client):
    data = client.post("/smart-transcript-v2", json={"url": TEST_VIDEO_URL}).json()

    assert data["tags"] == []
    assert data["description"] == "Line one\r\nLine two\r\nLine three"
    assert data["canonicalUrl"] == TEST_VIDEO_URL
    assert data["publishDate"] == "2024-03-01"


def test_smart_summary_is_idempotent(client, model_calls, memory_store):
    first = client.post("/smart-summary", json={"url": TEST_VIDEO_URL, "model": "chatgpt"})
    second = client.post("/smart-summary-firebase", json={"url": TEST_VIDEO_URL, "model": "chatgpt"})

    assert first.status_code == 200
    assert first.json() == second.json()
    assert len(model_calls) == 1
    summary = first.json()["summary"]
    assert summary.startswith("---\ntitle: \"Test Video\"\n")
    assert "## Overview" in summary
    assert "pytest" in first.json()["tags"]
    assert memory_store.writes == [
        (f"transcripts:{TEST_VIDEO_ID}", WriteMode.OVERWRITE),
        (f"summaries:{TEST_VIDEO_ID}", WriteMode.OVERWRITE),
        (f"transcripts:{TEST_VIDEO_ID}", WriteMode.MERGE),
    ]


def test_smart_summary_tags_go_to_language_variant(client, sources, memory_store):
    client.post("/smart-transcript", json={"url": TEST_VIDEO_URL})
    response = client.post("/smart-summary", json={"url": TEST_VIDEO_URL, "lang": "de"})

    assert response.status_code == 200
    assert sources[1].calls == [(TEST_VIDEO_ID, "en"), (TEST_VIDEO_ID, "de")]
    assert memory_store.writes == [
        (f"transcripts:{TEST_VIDEO_ID}", WriteMode.OVERWRITE),
        (f"transcripts:{TEST_VIDEO_ID}:de", WriteMode.OVERWRITE),
        (f"summaries:{TEST_VIDEO_ID}", WriteMode.OVERWRITE),
        (f"transcripts:{TEST_VIDEO_ID}:de", WriteMode.MERGE),
    ]
    primary = json.loads(memory_store._memory_cache[f"transcripts:{TEST_VIDEO_ID}"])
    variant = json.loads(memory_store._memory_cache[f"transcripts:{TEST_VIDEO_ID}:de"])
    assert primary["tags"] == []
    assert variant["tags"] == response.json()["tags"]
    assert variant["transcript"] == "hello world this is a test of the captions"


def test_smart_summary_v2_sends_video_id_only(client, model_calls, sources):
    response = client.post("/smart-summary-firebase-v2", json={"url": TEST_VIDEO_URL})

    assert response.status_code == 200
    assert b"messages" not in model_calls[0].content
    assert all(source.calls == [] for source in sources)


def test_smart_summary_v3_includes_metadata(client):
    data = client.post("/smart-summary-firebase-v3", json={"url": TEST_VIDEO_URL}).json()

    assert data["videoId"] == TEST_VIDEO_ID
    assert data["title"] == "Test Video"
    assert data["duration"] == 10
    assert data["canonicalUrl"] == TEST_VIDEO_URL


def test_smart_summary_unknown_model_is_400(client, model_calls):
    response = client.post("/smart-summary", json={"url": TEST_VIDEO_URL, "model": "llama"})

    assert response.status_code == 400
    assert model_calls == []


def test_smart_summary_upstream_failure_is_502(client, service):
    service.summarizer = make_summarizer(lambda request: httpx.Response(400, text="bad prompt"))

    response = client.post("/smart-summary", json={"url": TEST_VIDEO_URL})

    assert response.status_code == 502
    assert response.json()["upstreamStatus"] == 400
    assert response.json()["details"] == "bad prompt"


def test_raw_captions(client):
    response = client.get("/api/transcript", params={"videoId": TEST_VIDEO_ID})

    data = response.json()
    assert data["videoId"] == TEST_VIDEO_ID
    assert data["lang"] == "en"
    assert data["captions"][0] == {"start": 0.0, "duration": 2.0, "text": "hello world"}


def test_raw_captions_invalid_id(client):
    response = client.get("/api/transcript", params={"videoId": "bad"})
    assert response.status_code == 400
