"""
Tests for the summary model client.
"""

import json
import asyncio
import pytest

import httpx

from ytscribe.core.exceptions import InvalidModel, ModelRequestFailed
from ytscribe.core.summarizer import extract_generated_text, is_retryable_error

from conftest import MODEL_URL, TEST_VIDEO_ID, make_summarizer


def recording_sleep():
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    return sleep, delays


def test_retries_retryable_statuses_with_backoff():
    statuses = iter([503, 503, 200])
    requests = []

    def handler(request):
        requests.append(request)
        status = next(statuses)
        if status == 200:
            return httpx.Response(200, json={"summary": "done"})
        return httpx.Response(status, text="busy")

    sleep, delays = recording_sleep()
    summarizer = make_summarizer(handler, base_delay=0.5, max_attempts=3, sleep=sleep)

    summary = asyncio.run(summarizer.summarize("chatgpt", transcript="text", video_id=TEST_VIDEO_ID))

    assert summary == "done"
    assert len(requests) == 3
    assert len(delays) == 2
    assert delays[0] >= 0.5
    assert delays[1] >= 1.0
    assert sum(delays) >= 0.5 + 2 * 0.5


def test_gives_up_after_max_attempts():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(429, text="slow down")

    sleep, delays = recording_sleep()
    summarizer = make_summarizer(handler, base_delay=0.1, max_attempts=3, sleep=sleep)

    with pytest.raises(ModelRequestFailed) as exc_info:
        asyncio.run(summarizer.summarize("chatgpt", transcript="text", video_id=TEST_VIDEO_ID))

    assert len(requests) == 3
    assert exc_info.value.upstream_status == 429
    assert exc_info.value.details == "slow down"


def test_non_retryable_status_fails_immediately():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(401, json={"error": "bad key"})

    sleep, delays = recording_sleep()
    summarizer = make_summarizer(handler, sleep=sleep)

    with pytest.raises(ModelRequestFailed) as exc_info:
        asyncio.run(summarizer.summarize("chatgpt", transcript="text", video_id=TEST_VIDEO_ID))

    assert len(requests) == 1
    assert delays == []
    assert exc_info.value.status_code == 502
    assert exc_info.value.to_dict()["upstreamStatus"] == 401


def test_transport_error_is_not_retried():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    sleep, delays = recording_sleep()
    summarizer = make_summarizer(handler, sleep=sleep)

    with pytest.raises(ModelRequestFailed):
        asyncio.run(summarizer.summarize("chatgpt", transcript="text", video_id=TEST_VIDEO_ID))
    assert delays == []


def test_unknown_model_is_rejected_before_any_request():
    def handler(request):
        raise AssertionError("no request expected")

    summarizer = make_summarizer(handler)

    with pytest.raises(InvalidModel) as exc_info:
        asyncio.run(summarizer.summarize("gpt-x", transcript="text", video_id=TEST_VIDEO_ID))
    assert exc_info.value.status_code == 400


def test_request_headers_and_transcript_payload():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  chat summary "}}]})

    summarizer = make_summarizer(handler, shared_secret="s3cret")
    summary = asyncio.run(
        summarizer.summarize("ChatGPT", transcript="full text", video_id=TEST_VIDEO_ID, title="Title")
    )

    assert summary == "chat summary"
    request = requests[0]
    assert str(request.url) == MODEL_URL
    assert request.headers["x-api-key"] == "test-key"
    assert request.headers["authorization"] == "Bearer s3cret"
    payload = json.loads(request.content)
    assert payload["videoId"] == TEST_VIDEO_ID
    assert any("full text" in message["content"] for message in payload["messages"])


def test_video_id_only_payload():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="plain summary")

    summarizer = make_summarizer(handler)
    summary = asyncio.run(summarizer.summarize("chatgpt", video_id=TEST_VIDEO_ID))

    assert summary == "plain summary"
    payload = json.loads(requests[0].content)
    assert "messages" not in payload
    assert payload["url"] == f"https://www.youtube.com/watch?v={TEST_VIDEO_ID}"


def test_empty_reply_is_a_failure():
    summarizer = make_summarizer(lambda request: httpx.Response(200, json={"summary": ""}))

    with pytest.raises(ModelRequestFailed):
        asyncio.run(summarizer.summarize("chatgpt", transcript="text", video_id=TEST_VIDEO_ID))


def test_extract_generated_text_shapes():
    assert extract_generated_text(httpx.Response(200, json={"content": "a"})) == "a"
    assert extract_generated_text(httpx.Response(200, json="b")) == "b"
    assert extract_generated_text(httpx.Response(200, text="c\n")) == "c"
    assert extract_generated_text(httpx.Response(200, json={"other": 1})) == ""


def test_is_retryable_error():
    request = httpx.Request("POST", MODEL_URL)

    def status_error(status):
        response = httpx.Response(status, request=request)
        return httpx.HTTPStatusError("error", request=request, response=response)

    assert is_retryable_error(status_error(503))
    assert is_retryable_error(status_error(429))
    assert not is_retryable_error(status_error(400))
    assert not is_retryable_error(ValueError("x"))
