"""
Request flows behind the HTTP endpoints.

Every flow follows the same path: resolve the video id, check the cache, on a
miss resolve metadata and run the caption sources, then store and return.
Responses are always built from the stored record, so a cached answer is
identical to the first one.
"""

import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ytscribe.config import config
from ytscribe.core.captions import LibraryCaptionSource, ScrapeCaptionSource, YtDlpCaptionSource
from ytscribe.core.captions.cookies import cookie_file_readable
from ytscribe.core.composer import compose, generate_tags
from ytscribe.core.exceptions import InvalidURL, NoCaptionsAvailable, NoTranscriptAvailable
from ytscribe.core.summarizer import TranscriptSummarizer
from ytscribe.core.transcript_fetcher import (
    TranscriptFetcher,
    join_transcript,
    select_track,
    to_segments,
)
from ytscribe.core.video_info import VideoInfoResolver, is_video_id, validate_youtube_url
from ytscribe.db import crud
from ytscribe.db.models import MultilingualRecord, SummaryRecord, TranscriptRecord
from ytscribe.models.schemas import VideoMetadata
from ytscribe.utils.caching import CacheStore
from ytscribe.utils.logger import logging

SUCCESS_CODE = 100000


class TranscriptService:
    """Cache-aware transcript and summary flows."""

    def __init__(
        self,
        resolver: VideoInfoResolver,
        fetcher: TranscriptFetcher,
        store: CacheStore,
        summarizer: TranscriptSummarizer,
        default_language: str = config.DEFAULT_LANGUAGE,
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.store = store
        self.summarizer = summarizer
        self.default_language = default_language

    async def _resolve_with_captions(self, url: str) -> VideoMetadata:
        metadata = await self.resolver.resolve(url)
        if not metadata.available_tracks:
            raise NoCaptionsAvailable(f"No captions available for video {metadata.video_id}")
        return metadata

    # Structured transcripts

    async def full_transcript(self, url: str) -> Dict[str, Any]:
        """Metadata plus structured lines for every caption language that can be fetched."""
        metadata = await self._resolve_with_captions(url)

        language_codes = []
        transcripts = {}
        for option in metadata.languages:
            try:
                lines = await self.fetcher.get_transcript(metadata.video_id, option.code)
            except NoTranscriptAvailable as e:
                logging.info(f"Skipping language {option.code} for {metadata.video_id}: {e.message}")
                continue
            language_codes.append(option.model_dump())
            transcripts[option.code] = {"custom": to_segments(lines)}

        if not transcripts:
            raise NoTranscriptAvailable(f"No transcript available for video {metadata.video_id}")

        return {
            "code": SUCCESS_CODE,
            "message": "success",
            "data": {
                "videoId": metadata.video_id,
                "videoInfo": {
                    "name": metadata.title,
                    "thumbnailUrl": {"hqdefault": metadata.thumbnail_url},
                    "embedUrl": metadata.embed_url,
                    "duration": metadata.duration_seconds,
                    "description": metadata.description,
                    "upload_date": metadata.publish_date,
                    "genre": metadata.category,
                    "author": metadata.author,
                    "channel_id": metadata.channel_id,
                },
                "language_code": language_codes,
                "transcripts": transcripts,
            },
        }

    async def captions(self, video_id: str, language: Optional[str] = None) -> Dict[str, Any]:
        """Raw caption lines for a video id."""
        if not is_video_id(video_id):
            raise InvalidURL(f"Not a valid YouTube video id: {video_id}")
        language = language or self.default_language
        lines = await self.fetcher.get_transcript(video_id, language)
        return {
            "videoId": video_id,
            "lang": language,
            "captions": [line.model_dump() for line in lines],
        }

    # Simple transcripts

    async def simple_transcript(self, url: str, lang: Optional[str] = None) -> Dict[str, Any]:
        metadata = await self._resolve_with_captions(url)
        language = lang or self.default_language
        text = await self.fetcher.get_transcript_text(metadata.video_id, language)
        return {
            "duration": metadata.duration_minutes,
            "title": metadata.title,
            "transcript": text,
            "transcriptLanguageCode": language,
        }

    async def simple_transcript_v2(self, url: str, lang: Optional[str] = None) -> Dict[str, Any]:
        metadata = await self._resolve_with_captions(url)
        track = select_track(metadata.available_tracks, lang)
        text = await self.fetcher.get_transcript_text(metadata.video_id, track.language_code)
        return {
            "duration": metadata.duration_minutes,
            "title": metadata.title,
            "transcript": text,
            "transcriptLanguageCode": track.language_code,
            "languages": [option.model_dump() for option in metadata.languages],
        }

    async def simple_transcript_v3(self, url: str, lang: Optional[str] = None) -> Dict[str, Any]:
        """Like v2, with every fetched language kept in one multilingual record."""
        video_id = validate_youtube_url(url)
        record = await crud.get_multilingual_record(self.store, video_id)

        if record is not None:
            language = lang or record.default_language
            if language:
                if record.transcript_for(language):
                    return self._multilingual_response(record, language)
                if language not in {option.code for option in record.available_languages}:
                    raise NoTranscriptAvailable(f"No transcript available for language '{language}'")
                text = await self.fetcher.get_transcript_text(video_id, language)
                record = await crud.store_multilingual_record(self.store, record.with_transcript(language, text))
                return self._multilingual_response(record, language)

        metadata = await self._resolve_with_captions(url)
        track = select_track(metadata.available_tracks, lang)
        text = await self.fetcher.get_transcript_text(video_id, track.language_code)
        default_language = select_track(metadata.available_tracks).language_code
        if record is None:
            record = MultilingualRecord(
                video_id=video_id,
                title=metadata.title,
                duration=metadata.duration_minutes,
                available_languages=metadata.languages,
                canonical_url=metadata.canonical_url,
                default_language=default_language,
            )
        else:
            record = record.model_copy(update={"default_language": default_language})
        record = await crud.store_multilingual_record(
            self.store, record.with_transcript(track.language_code, text)
        )
        return self._multilingual_response(record, track.language_code)

    @staticmethod
    def _multilingual_response(record: MultilingualRecord, language: str) -> Dict[str, Any]:
        entry = record.transcript_for(language)
        return {
            "duration": record.duration,
            "title": record.title,
            "transcript": entry.transcript if entry else "",
            "transcriptLanguageCode": language,
            "languages": [option.model_dump() for option in record.available_languages],
        }

    # Cached transcripts

    async def _transcript_record(self, url: str, lang: Optional[str] = None) -> Tuple[TranscriptRecord, Optional[str]]:
        """
        Cache-first transcript record.

        Returns:
            The record and the variant language it is stored under, or None
            when it is the video's primary record
        """
        video_id = validate_youtube_url(url)
        record = await crud.get_transcript_record(self.store, video_id)
        if record is not None and (lang is None or record.language == lang):
            logging.info(f"Transcript cache hit for {video_id}")
            return record, None

        if record is not None:
            variant = await crud.get_transcript_record(self.store, video_id, lang)
            if variant is not None:
                logging.info(f"Transcript cache hit for {video_id} ({lang})")
                return variant, lang

        metadata = await self._resolve_with_captions(url)
        track = select_track(metadata.available_tracks, lang)
        lines = await self.fetcher.get_transcript(video_id, track.language_code)
        fresh = TranscriptRecord.from_metadata(metadata, join_transcript(lines), track.language_code)

        if record is None:
            return await crud.store_transcript_record(self.store, fresh), None
        # The primary record keeps its language; others live under their own key
        await crud.store_transcript_record(self.store, fresh, variant=True)
        return fresh, fresh.language

    async def smart_transcript(self, url: str, lang: Optional[str] = None, detailed: bool = False) -> Dict[str, Any]:
        record, _ = await self._transcript_record(url, lang)
        response = {
            "duration": record.duration,
            "title": record.title,
            "transcript": record.transcript,
            "transcriptLanguageCode": record.language,
        }
        if detailed:
            response.update({
                "tags": record.tags,
                "description": record.description,
                "canonicalUrl": record.canonical_url,
                "publishDate": record.publish_date,
            })
        return response

    # Summaries

    async def smart_summary(
        self,
        url: str,
        model: Optional[str] = None,
        lang: Optional[str] = None,
        send_transcript: bool = True,
        include_metadata: bool = False,
    ) -> Dict[str, Any]:
        """
        Cache-first summary.

        Once a summary is stored it is returned as is; there is no regeneration.

        Args:
            url: YouTube URL
            model: Model endpoint name
            lang: Transcript language
            send_transcript: Send the transcript text; otherwise only the video id
            include_metadata: Add title, duration and canonical URL to the response
        """
        model = (model or config.DEFAULT_SUMMARY_MODEL).lower()
        self.summarizer.endpoint_for(model)
        video_id = validate_youtube_url(url)

        cached = await crud.get_summary_record(self.store, video_id)
        if cached is not None:
            logging.info(f"Summary cache hit for {video_id}")
            return self._summary_response(cached, include_metadata)

        variant = None
        if send_transcript:
            record, variant = await self._transcript_record(url, lang)
            summary = await self.summarizer.summarize(
                model, transcript=record.transcript, video_id=video_id, title=record.title
            )
        else:
            record = await crud.get_transcript_record(self.store, video_id)
            if record is None:
                record = TranscriptRecord.from_metadata(await self.resolver.resolve(url))
            summary = await self.summarizer.summarize(model, video_id=video_id)

        tags = list(record.tags)
        generated = not tags
        if generated:
            tags = generate_tags(record.title, record.description, summary)

        summary_record = SummaryRecord(
            summary=compose(record, summary, tags),
            tags=tags,
            model=model,
            video_id=video_id,
            title=record.title,
            duration=record.duration,
            canonical_url=record.canonical_url,
        )
        await crud.store_summary_record(self.store, video_id, summary_record)

        # Tags go to the transcript record the summary was built from, if it is cached
        if generated and record.transcript:
            await crud.merge_transcript_tags(self.store, video_id, tags, variant)
        return self._summary_response(summary_record, include_metadata)

    @staticmethod
    def _summary_response(record: SummaryRecord, include_metadata: bool) -> Dict[str, Any]:
        response = {"summary": record.summary, "tags": record.tags}
        if include_metadata:
            response.update({
                "videoId": record.video_id,
                "title": record.title,
                "duration": record.duration,
                "canonicalUrl": record.canonical_url,
            })
        return response


def check_tools(
    ytdlp_binary: str = config.YTDLP_BINARY,
    js_runtime: str = config.JS_RUNTIME,
    cookies_file: Path = config.COOKIES_FILE,
) -> Dict[str, Any]:
    """Report whether the collaborators of the yt-dlp caption source are usable."""
    ytdlp_path = shutil.which(ytdlp_binary)
    runtime_path = shutil.which(js_runtime)
    cookies_ok = cookie_file_readable(cookies_file)
    return {
        "ok": bool(ytdlp_path and runtime_path and cookies_ok),
        "ytDlp": {"available": ytdlp_path is not None, "path": ytdlp_path},
        "jsRuntime": {"name": js_runtime, "available": runtime_path is not None, "path": runtime_path},
        "cookies": {"readable": cookies_ok, "path": str(cookies_file)},
    }


def build_service(store: CacheStore) -> TranscriptService:
    """Wire the default resolver, caption sources and summarizer around a store."""
    resolver = VideoInfoResolver()
    fetcher = TranscriptFetcher([
        LibraryCaptionSource(),
        YtDlpCaptionSource(),
        ScrapeCaptionSource(resolver),
    ])
    return TranscriptService(resolver, fetcher, store, TranscriptSummarizer())
