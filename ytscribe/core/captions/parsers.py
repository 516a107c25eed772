"""
Caption format parsers.

Three payload shapes show up across the caption sources:

* legacy timedtext XML (``<text start="1.2" dur="3.4">...</text>``)
* JSON3 events (``{"events": [{"tStartMs": ..., "dDurationMs": ..., "segs": [...]}]}``)
* WebVTT, which is only reduced to a plain text blob

All parsers return times in float seconds and drop lines whose text is empty.
"""

import re
import html
from typing import Any, Dict, List, Optional

from ytscribe.models.schemas import CaptionLine
from ytscribe.utils.helpers import collapse_whitespace

_XML_HEADER_RE = re.compile(r'<\?xml[^>]*\?>')
_START_RE = re.compile(r'start="([\d.]+)"')
_DUR_RE = re.compile(r'dur="([\d.]+)"')
_TEXT_OPEN_RE = re.compile(r'<text.*?>', re.DOTALL)
_TAG_RE = re.compile(r'</?[^>]+(>|$)')

_VTT_TAG_RE = re.compile(r'<[^>]*>')
_VTT_TIMESTAMP_RE = re.compile(r'^\d{2}:\d{2}:\d{2}')
_VTT_CUE_NUMBER_RE = re.compile(r'^\d+$')
_VTT_SKIP_PREFIXES = ("NOTE", "STYLE", "Kind:", "Language:")


def _make_line(start: float, duration: float, text: str) -> Optional[CaptionLine]:
    text = collapse_whitespace(text)
    if not text:
        return None
    return CaptionLine(start=max(start, 0.0), duration=max(duration, 0.0), text=text)


def parse_transcript_xml(xml: str) -> List[CaptionLine]:
    """
    Parse the legacy timedtext XML format.

    Args:
        xml: Raw response body

    Returns:
        Caption lines in document order; empty when the body holds no ``<text>`` cues
    """
    if not xml or '<text' not in xml:
        return []

    body = _XML_HEADER_RE.sub('', xml)
    body = body.replace('<transcript>', '').replace('</transcript>', '')

    lines = []
    for chunk in body.split('</text>'):
        if not chunk.strip():
            continue
        start_match = _START_RE.search(chunk)
        if not start_match:
            continue
        dur_match = _DUR_RE.search(chunk)

        text = _TEXT_OPEN_RE.sub('', chunk, count=1)
        text = _TAG_RE.sub('', text)
        # Captions are often double-escaped (&amp;#39;)
        text = html.unescape(text.replace('&amp;', '&'))

        line = _make_line(
            float(start_match.group(1)),
            float(dur_match.group(1)) if dur_match else 0.0,
            text,
        )
        if line:
            lines.append(line)
    return lines


def parse_transcript_json3(payload: Dict[str, Any]) -> List[CaptionLine]:
    """
    Parse the JSON3 event format.

    Each event's text segments are concatenated into one line; millisecond
    fields are converted to seconds.

    Args:
        payload: Decoded JSON document

    Returns:
        Caption lines in event order
    """
    events = (payload or {}).get('events') or []
    lines = []
    for event in events:
        segs = event.get('segs')
        if not isinstance(segs, list):
            continue
        text = ''.join(seg.get('utf8', '') for seg in segs if isinstance(seg, dict))
        line = _make_line(
            (event.get('tStartMs') or 0) / 1000.0,
            (event.get('dDurationMs') or 0) / 1000.0,
            text,
        )
        if line:
            lines.append(line)
    return lines


def _is_timestamp(line: str) -> bool:
    return bool(_VTT_CUE_NUMBER_RE.match(line) or _VTT_TIMESTAMP_RE.match(line))


def clean_vtt_content(content: str) -> str:
    """
    Reduce a WebVTT document to plain text.

    Header, metadata, cue numbers, timestamp lines and inline cue markup are
    removed; the remaining lines are joined with single spaces.
    """
    output = []
    for raw in (content or '').split('\n'):
        line = raw.strip()
        if (
            not line
            or line == 'WEBVTT'
            or '-->' in line
            or line.startswith(_VTT_SKIP_PREFIXES)
            or _is_timestamp(line)
        ):
            continue

        clean = _VTT_TAG_RE.sub('', line).strip()
        if clean:
            output.append(clean)

    return ' '.join(output)
