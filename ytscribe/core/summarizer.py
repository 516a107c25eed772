"""
Client for the external summary model endpoints.
"""

import asyncio
from typing import Any, Dict, Mapping, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from ytscribe.config import config
from ytscribe.core.exceptions import InvalidModel, ModelRequestFailed
from ytscribe.core.prompts import build_summary_messages
from ytscribe.utils.helpers import truncate_text
from ytscribe.utils.logger import logging

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})

_TEXT_FIELDS = ("summary", "content", "text", "result", "output")


def is_retryable_error(error: BaseException) -> bool:
    """Only HTTP responses with a retryable status are worth another attempt."""
    return (
        isinstance(error, httpx.HTTPStatusError)
        and error.response.status_code in RETRYABLE_STATUSES
    )


def _log_retry(retry_state):
    error = retry_state.outcome.exception()
    status = error.response.status_code if isinstance(error, httpx.HTTPStatusError) else None
    logging.warning(
        f"Model endpoint returned {status}; retrying in {retry_state.next_action.sleep:.1f}s "
        f"(attempt {retry_state.attempt_number})"
    )


def extract_generated_text(response: httpx.Response) -> str:
    """Pull the generated text out of a model endpoint response."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()

    if isinstance(data, str):
        return data.strip()
    if isinstance(data, dict):
        for field in _TEXT_FIELDS:
            value = data.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") or {}
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content.strip()
    return ""


class TranscriptSummarizer:
    """Send transcripts (or video ids) to a configured model endpoint."""

    def __init__(
        self,
        endpoints: Optional[Mapping[str, Optional[str]]] = None,
        api_key: Optional[str] = config.MODEL_API_KEY,
        shared_secret: Optional[str] = config.MODEL_SHARED_SECRET,
        timeout: float = config.MODEL_TIMEOUT,
        max_attempts: int = config.MODEL_RETRY_ATTEMPTS,
        base_delay: float = config.MODEL_RETRY_BASE_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep=asyncio.sleep,
    ):
        """
        Initialize the summarizer.

        Args:
            endpoints: Model name to endpoint URL; defaults to the configured endpoints
            api_key: Sent as ``x-api-key``
            shared_secret: Sent as a bearer token when set
            timeout: Per-request timeout in seconds
            max_attempts: Attempts for retryable statuses
            base_delay: First backoff delay; doubles on every attempt
            transport: Optional httpx transport (tests)
            sleep: Coroutine used to wait between attempts
        """
        self.endpoints = {
            name.lower(): url
            for name, url in (endpoints if endpoints is not None else config.MODEL_ENDPOINTS).items()
            if url
        }
        self.api_key = api_key
        self.shared_secret = shared_secret
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.transport = transport
        self.sleep = sleep

    def endpoint_for(self, model: str) -> str:
        """Endpoint URL for a model name; raises InvalidModel for unknown names."""
        url = self.endpoints.get((model or "").lower())
        if not url:
            available = ", ".join(sorted(self.endpoints)) or "none configured"
            raise InvalidModel(f"Invalid model '{model}'. Available models: {available}")
        return url

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        if self.shared_secret:
            headers["Authorization"] = f"Bearer {self.shared_secret}"
        return headers

    async def post_with_retry(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        """
        POST a payload, retrying 429/5xx responses with exponential backoff.

        Raises:
            ModelRequestFailed: on a non-retryable status, a transport error,
                or when every attempt failed
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_retryable_error),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay),
            sleep=self.sleep,
            before_sleep=_log_retry,
            reraise=True,
        )
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                async for attempt in retrying:
                    with attempt:
                        response = await client.post(url, json=payload, headers=self._headers())
                        response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                details = truncate_text(e.response.text, 1000)
                logging.error(f"Model endpoint failed with HTTP {status}: {details}")
                raise ModelRequestFailed(
                    f"Model request failed with status {status}", upstream_status=status, details=details
                ) from e
            except httpx.HTTPError as e:
                logging.error(f"Model endpoint request error: {e!r}")
                raise ModelRequestFailed(f"Model request failed: {e}", details=str(e)) from e
        return response

    async def summarize(
        self,
        model: str,
        transcript: Optional[str] = None,
        video_id: Optional[str] = None,
        title: str = "",
    ) -> str:
        """
        Generate a summary.

        Args:
            model: Configured model name (chatgpt, deepseek, anthropic)
            transcript: Transcript text to summarize; when omitted only the
                video identifier is sent and the endpoint fetches the transcript
            video_id: Video identifier
            title: Video title, added to the prompt

        Returns:
            Generated summary text
        """
        url = self.endpoint_for(model)
        if transcript:
            payload = {
                "model": model,
                "videoId": video_id,
                "messages": build_summary_messages(transcript, title),
            }
        elif video_id:
            payload = {
                "model": model,
                "videoId": video_id,
                "url": f"https://www.youtube.com/watch?v={video_id}",
            }
        else:
            raise ValueError("A transcript or a video id is required")

        logging.info(f"Requesting summary for {video_id} from model '{model}'")
        response = await self.post_with_retry(url, payload)
        summary = extract_generated_text(response)
        if not summary:
            raise ModelRequestFailed(
                "Model endpoint returned an empty summary",
                upstream_status=response.status_code,
                details=truncate_text(response.text, 1000),
            )
        return summary
