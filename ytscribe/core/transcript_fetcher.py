"""
Transcript fallback orchestrator.

Caption sources are tried strictly one after another. Each has side effects
(subprocesses, temp files, HTTP calls), so they are never raced.
"""

import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

from ytscribe.core.captions.base import CaptionSource
from ytscribe.core.exceptions import (
    CaptionSourceError,
    NoTranscriptAvailable,
    TranscriptServiceError,
)
from ytscribe.models.schemas import CaptionLine, CaptionTrack, FailureKind
from ytscribe.utils.logger import logging


def join_transcript(lines: Sequence[CaptionLine]) -> str:
    """Join caption texts into the flat transcript string."""
    return " ".join(line.text for line in lines)


def to_segments(lines: Sequence[CaptionLine]) -> List[Dict[str, object]]:
    """Structured lines with their computed end time."""
    return [
        {"start": line.start, "end": line.start + line.duration, "text": line.text}
        for line in lines
    ]


def _is_english(track: CaptionTrack) -> bool:
    code = track.language_code.lower()
    return code == "en" or code.startswith("en-") or code.startswith("en_")


def select_track(tracks: Sequence[CaptionTrack], requested: Optional[str] = None) -> CaptionTrack:
    """
    Pick the caption track a request should use.

    An explicit language must match a track code exactly. Without one, prefer
    a manual English track, then any English track, then the first track.

    Raises:
        NoTranscriptAvailable: if nothing matches
    """
    if requested:
        for track in tracks:
            if track.language_code == requested:
                return track
        raise NoTranscriptAvailable(f"No transcript available for language '{requested}'")

    if not tracks:
        raise NoTranscriptAvailable("No caption tracks available")

    for track in tracks:
        if _is_english(track) and not track.is_auto_generated:
            return track
    for track in tracks:
        if _is_english(track):
            return track
    return tracks[0]


class TranscriptFetcher:
    """Run caption sources in order until one produces lines."""

    def __init__(self, sources: Sequence[CaptionSource]):
        self.sources = list(sources)
        self._inflight: Dict[Tuple[str, str], asyncio.Task] = {}

    async def _run_chain(self, video_id: str, language: str) -> List[CaptionLine]:
        for source in self.sources:
            try:
                lines = await source.fetch(video_id, language)
            except CaptionSourceError as e:
                if e.kind is FailureKind.NOT_AVAILABLE:
                    logging.info(f"{source.name}: no captions for {video_id} ({language}): {e.message}")
                else:
                    logging.warning(f"{source.name} failed for {video_id} ({language}), trying next source: {e.message}")
                continue
            except TranscriptServiceError:
                # Structural errors (private video, bad id) are not worth another source
                raise
            except Exception as e:
                logging.warning(f"{source.name} raised unexpectedly for {video_id} ({language}): {e!r}")
                continue

            if lines:
                logging.info(f"Fetched {len(lines)} caption lines for {video_id} ({language}) via {source.name}")
                return lines
            logging.info(f"{source.name} returned no lines for {video_id} ({language})")

        raise NoTranscriptAvailable(f"No transcript available for video {video_id} ({language})")

    async def get_transcript(self, video_id: str, language: str) -> List[CaptionLine]:
        """
        Get caption lines for a video.

        Concurrent calls for the same video and language share one run of the
        source chain.

        Raises:
            NoTranscriptAvailable: when every source is exhausted
        """
        key = (video_id, language)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run_chain(video_id, language))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        else:
            logging.info(f"Joining in-flight transcript fetch for {video_id} ({language})")
        return await asyncio.shield(task)

    async def get_transcript_text(self, video_id: str, language: str) -> str:
        return join_transcript(await self.get_transcript(video_id, language))
