"""
Caption source that requests the signed caption-track URL directly.
"""

from pathlib import Path
from typing import List, Optional, Union

import httpx

from ytscribe.config import config
from ytscribe.core.captions.base import CaptionSource
from ytscribe.core.captions.cookies import load_netscape_cookies
from ytscribe.core.captions.parsers import parse_transcript_xml, parse_transcript_json3
from ytscribe.core.exceptions import CaptionSourceError, TransientError
from ytscribe.models.schemas import CaptionLine, CaptionTrack
from ytscribe.utils.error_handling import log_diagnostic_info
from ytscribe.utils.logger import logging

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://www.youtube.com/",
}


def pick_track(tracks: List[CaptionTrack], language: str) -> Optional[CaptionTrack]:
    """The track for ``language``, falling back to the first listed track."""
    for track in tracks:
        if track.language_code == language:
            return track
    return tracks[0] if tracks else None


class ScrapeCaptionSource(CaptionSource):
    """Scrape the signed caption URL listed in the video metadata."""

    name = "scrape"

    def __init__(
        self,
        resolver,
        cookies_file: Union[str, Path] = config.COOKIES_FILE,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.resolver = resolver
        self.cookies_file = Path(cookies_file)
        self.timeout = timeout
        self.transport = transport

    async def _get(self, client: httpx.AsyncClient, url: Union[str, httpx.URL]) -> httpx.Response:
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise CaptionSourceError.transient(
                f"caption request failed with HTTP {e.response.status_code}", self.name
            ) from e
        except httpx.HTTPError as e:
            raise CaptionSourceError.transient(f"caption request failed: {e}", self.name) from e

    async def fetch(self, video_id: str, language: str) -> List[CaptionLine]:
        try:
            metadata = await self.resolver.resolve_id(video_id)
        except TransientError as e:
            raise CaptionSourceError.transient(f"metadata lookup failed: {e.message}", self.name) from e

        track = pick_track(metadata.available_tracks, language)
        if track is None or not track.signed_url:
            raise CaptionSourceError.not_available("no caption tracks to scrape", self.name)

        async with httpx.AsyncClient(
            headers=BROWSER_HEADERS,
            cookies=load_netscape_cookies(self.cookies_file),
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            response = await self._get(client, track.signed_url)
            body = response.text
            logging.info(f"Manual scrape of {track.language_code} track returned {len(body)} bytes")
            log_diagnostic_info({
                "source": self.name,
                "url": track.signed_url,
                "preview": body[:300].replace("\n", ""),
            })

            lines = parse_transcript_xml(body)
            if lines:
                return lines

            json_url = httpx.URL(track.signed_url).copy_set_param("fmt", "json3")
            response = await self._get(client, json_url)
            try:
                lines = parse_transcript_json3(response.json())
            except ValueError:
                lines = []

        if not lines:
            raise CaptionSourceError.not_available("scraped caption track was empty", self.name)
        return lines
