"""
Keyed record operations on the cache store.
"""

from typing import List, Optional

from ytscribe.db.models import MultilingualRecord, SummaryRecord, TranscriptRecord
from ytscribe.utils.caching import CacheStore, WriteMode
from ytscribe.utils.helpers import get_timestamp
from ytscribe.utils.logger import logging

TRANSCRIPTS = "transcripts"
MULTILINGUAL = "multilingual"
SUMMARIES = "summaries"


def record_key(collection: str, video_id: str, language: Optional[str] = None) -> str:
    if language:
        return f"{collection}:{video_id}:{language}"
    return f"{collection}:{video_id}"


async def get_transcript_record(
    store: CacheStore, video_id: str, language: Optional[str] = None
) -> Optional[TranscriptRecord]:
    """
    Get a cached transcript; records without transcript text count as absent.

    Args:
        store: Cache store
        video_id: Video id
        language: Variant language; None reads the primary record
    """
    document = await store.get(record_key(TRANSCRIPTS, video_id, language))
    if not document or not document.get("transcript"):
        return None
    return TranscriptRecord.model_validate(document)


async def store_transcript_record(
    store: CacheStore, record: TranscriptRecord, variant: bool = False
) -> TranscriptRecord:
    """Write the full transcript record, replacing the stored payload.

    The first language fetched for a video is the primary record; other
    languages are stored as variants keyed by language.
    """
    language = record.language if variant else None
    await store.set(record_key(TRANSCRIPTS, record.video_id, language), record.to_document(), WriteMode.OVERWRITE)
    logging.info(f"Stored transcript for video {record.video_id} ({record.language})")
    return record


async def merge_transcript_tags(
    store: CacheStore, video_id: str, tags: List[str], language: Optional[str] = None
) -> None:
    """Add tags to a transcript record, leaving the other fields untouched."""
    await store.set(
        record_key(TRANSCRIPTS, video_id, language),
        {"tags": list(tags), "updatedAt": get_timestamp()},
        WriteMode.MERGE,
    )


async def get_multilingual_record(store: CacheStore, video_id: str) -> Optional[MultilingualRecord]:
    document = await store.get(record_key(MULTILINGUAL, video_id))
    if not document:
        return None
    return MultilingualRecord.model_validate(document)


async def store_multilingual_record(store: CacheStore, record: MultilingualRecord) -> MultilingualRecord:
    await store.set(record_key(MULTILINGUAL, record.video_id), record.to_document(), WriteMode.OVERWRITE)
    logging.info(
        f"Stored multilingual record for video {record.video_id} "
        f"({', '.join(entry.language for entry in record.transcripts)})"
    )
    return record


async def get_summary_record(store: CacheStore, video_id: str) -> Optional[SummaryRecord]:
    """Get the cached summary; a record without summary text is treated as absent."""
    document = await store.get(record_key(SUMMARIES, video_id))
    if not document or not document.get("summary"):
        return None
    return SummaryRecord.model_validate(document)


async def store_summary_record(store: CacheStore, video_id: str, record: SummaryRecord) -> SummaryRecord:
    await store.set(record_key(SUMMARIES, video_id), record.to_document(), WriteMode.OVERWRITE)
    logging.info(f"Stored summary for video {video_id}")
    return record
