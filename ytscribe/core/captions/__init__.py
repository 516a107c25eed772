"""
Caption sources tried by the transcript fetcher, in order of precedence.
"""

from ytscribe.core.captions.base import CaptionSource
from ytscribe.core.captions.library_source import LibraryCaptionSource
from ytscribe.core.captions.ytdlp_source import YtDlpCaptionSource
from ytscribe.core.captions.scrape_source import ScrapeCaptionSource

__all__ = [
    "CaptionSource",
    "LibraryCaptionSource",
    "YtDlpCaptionSource",
    "ScrapeCaptionSource",
]
