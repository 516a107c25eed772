"""
Markdown summary documents with YAML frontmatter.
"""

import re
import json
from collections import Counter
from typing import Iterable, List, Optional

from ytscribe.db.models import TranscriptRecord
from ytscribe.utils.helpers import get_iso_date, normalize_newlines

TAG_LIMIT = 10
MIN_TAG_LENGTH = 4

STOPWORDS = frozenset("""
    about above after again against also because been before being below between both
    cannot could does doing down during each even every from further going have having
    here hers herself himself into itself just know like make many more most much must
    myself need only other ours ourselves over really same shall should some such than
    that their theirs them themselves then there these they thing things think this
    those through under until very want were what when where which while will with
    would your yours yourself yourselves actually right well okay yeah gonna video
    videos channel subscribe today people look said says something
""".split())

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def generate_tags(title: str, description: str, summary: str, limit: int = TAG_LIMIT) -> List[str]:
    """
    Derive fallback tags from word frequency.

    This is a keyword heuristic for videos without tags, not semantic tagging:
    words shorter than four characters and stopwords are dropped, and the most
    frequent remaining words win, ties going to the word seen first.
    """
    text = " ".join([title or "", description or "", summary or ""]).lower()
    text = _NON_ALNUM_RE.sub("", text)
    words = [w for w in text.split() if len(w) >= MIN_TAG_LENGTH and w not in STOPWORDS]
    return [word for word, _ in Counter(words).most_common(limit)]


def _quote(value: Optional[str]) -> str:
    # JSON strings are valid YAML double-quoted scalars
    return json.dumps(value or "", ensure_ascii=False)


def _block_scalar(text: str) -> str:
    lines = normalize_newlines(text).strip().split("\n")
    return "\n".join(f"  {line.rstrip()}" for line in lines)


def build_frontmatter(record: TranscriptRecord, tags: Iterable[str]) -> str:
    """YAML frontmatter block for a summary document."""
    video_url = record.canonical_url or f"https://www.youtube.com/watch?v={record.video_id}"
    author_url = f"https://www.youtube.com/channel/{record.channel_id}" if record.channel_id else ""
    parts = [
        "---",
        f"title: {_quote(record.title)}",
        f"date: {get_iso_date(record.publish_date)}",
        f"category: {_quote(record.category)}",
        "description: |",
        _block_scalar(record.description or record.title),
        f"image: {_quote(record.thumbnail_url)}",
        f"duration: {record.duration}",
        "tags:",
    ]
    parts.extend(f"  - {_quote(tag)}" for tag in tags)
    parts.extend([
        f"canonical_url: {_quote(video_url)}",
        f"author: {_quote(record.author)}",
        f"author_url: {_quote(author_url)}",
        f"video_id: {_quote(record.video_id)}",
        f"video_url: {_quote(video_url)}",
        "---",
    ])
    return "\n".join(parts) + "\n"


def compose(record: TranscriptRecord, summary: str, tags: Iterable[str]) -> str:
    """
    Build the persisted summary document.

    Args:
        record: Cached video projection (title, description, author, ...)
        summary: Model-generated markdown body
        tags: Tags for the frontmatter list

    Returns:
        Frontmatter followed by the summary body
    """
    return build_frontmatter(record, list(tags)) + "\n" + normalize_newlines(summary).strip() + "\n"
