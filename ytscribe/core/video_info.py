"""
Video metadata resolver.

Turns a YouTube URL into a typed :class:`VideoMetadata`, including the caption
track list found in the player response.
"""

import re
import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, parse_qs

from pytubefix import YouTube
from pytubefix.exceptions import (
    BotDetection,
    InnerTubeResponseError,
    MembersOnly,
    PoTokenRequired,
    VideoPrivate,
    VideoUnavailable as PytubeVideoUnavailable,
)

from ytscribe.core.exceptions import InvalidURL, PrivateVideo, TransientError, VideoUnavailable
from ytscribe.models.schemas import CaptionTrack, VideoMetadata
from ytscribe.utils.logger import logging

_VIDEO_ID_RE = re.compile(r'^[0-9A-Za-z_-]{11}$')
_YOUTUBE_HOSTS = ('youtube.com', 'youtube-nocookie.com')
_PATH_PREFIXES = ('shorts', 'embed', 'live', 'v', 'e')

# Playability reasons that mean the video needs an account, not that it is gone
_PRIVATE_REASONS = ('private', 'sign in', 'members')
# Bot challenges also ask to sign in but clear up on a later attempt
_BOT_CHALLENGE_REASONS = ('not a bot',)


def is_video_id(value: str) -> bool:
    """Check whether a string is a bare 11-character video id."""
    return bool(value and _VIDEO_ID_RE.match(value))


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the 11-character video id from a YouTube URL.

    Accepts watch URLs (www, m., music.), youtu.be short links and
    ``/shorts/``, ``/embed/`` and ``/live/`` paths.

    Returns:
        The video id, or None if the URL is not a recognized YouTube URL
    """
    url = (url or '').strip()
    if not url:
        return None
    if '://' not in url:
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    host = (parsed.hostname or '').lower()
    segments = [s for s in parsed.path.split('/') if s]

    candidate = None
    if host == 'youtu.be' or host.endswith('.youtu.be'):
        candidate = segments[0] if segments else None
    elif any(host == h or host.endswith(f".{h}") for h in _YOUTUBE_HOSTS):
        if segments[:1] == ['watch'] or not segments:
            candidate = parse_qs(parsed.query).get('v', [None])[0]
        elif len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
            candidate = segments[1]

    if candidate and is_video_id(candidate):
        return candidate
    return None


def validate_youtube_url(url: str) -> str:
    """
    Validate a YouTube URL and return the video id.
    Raises InvalidURL if no id can be parsed.
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise InvalidURL(f"Not a valid YouTube URL: {url}")
    return video_id


def _track_name(name: Any) -> str:
    if not isinstance(name, dict):
        return str(name or '')
    if 'simpleText' in name:
        return name['simpleText']
    return ''.join(run.get('text', '') for run in name.get('runs', []))


def tracks_from_player_response(player_response: Optional[Dict[str, Any]]) -> List[CaptionTrack]:
    """
    Convert the player response caption section into caption tracks.

    A response without a captions section yields an empty list.
    """
    renderer = ((player_response or {}).get('captions') or {}).get('playerCaptionsTracklistRenderer') or {}
    tracks = []
    for raw in renderer.get('captionTracks') or []:
        code = raw.get('languageCode')
        if not code:
            continue
        tracks.append(CaptionTrack(
            language_code=code,
            display_name=_track_name(raw.get('name')) or code,
            is_auto_generated=raw.get('kind') == 'asr',
            signed_url=raw.get('baseUrl', ''),
        ))
    return tracks


def _category(player_response: Dict[str, Any]) -> str:
    microformat = (player_response.get('microformat') or {}).get('playerMicroformatRenderer') or {}
    return microformat.get('category', '')


class VideoInfoResolver:
    """Resolve video metadata through pytubefix."""

    def __init__(self, youtube_factory=YouTube):
        self.youtube_factory = youtube_factory

    def _fetch(self, video_id: str) -> VideoMetadata:
        watch_url = f"https://www.youtube.com/watch?v={video_id}"
        try:
            yt = self.youtube_factory(watch_url)
            yt.check_availability()
            player_response = yt.vid_info or {}
            publish_date = yt.publish_date
            return VideoMetadata(
                video_id=video_id,
                title=yt.title or '',
                description=yt.description or '',
                duration_seconds=int(yt.length or 0),
                author=yt.author or '',
                channel_id=yt.channel_id or '',
                category=_category(player_response),
                publish_date=publish_date.date().isoformat() if publish_date else None,
                thumbnail_url=yt.thumbnail_url or '',
                keywords=list(yt.keywords or []),
                available_tracks=tracks_from_player_response(player_response),
            )
        except (BotDetection, PoTokenRequired, InnerTubeResponseError) as e:
            logging.warning(f"Bot challenge while fetching video info for {video_id}: {e}")
            raise TransientError(f"YouTube blocked the metadata request for {video_id}") from e
        except (VideoPrivate, MembersOnly) as e:
            raise PrivateVideo(f"Video {video_id} is private or requires sign-in") from e
        except PytubeVideoUnavailable as e:
            reason = str(e).lower()
            if any(marker in reason for marker in _BOT_CHALLENGE_REASONS):
                logging.warning(f"Bot challenge while fetching video info for {video_id}: {e}")
                raise TransientError(f"YouTube blocked the metadata request for {video_id}") from e
            if any(marker in reason for marker in _PRIVATE_REASONS):
                raise PrivateVideo(f"Video {video_id} is not playable: {e}") from e
            raise VideoUnavailable(f"Video {video_id} is unavailable") from e
        except Exception as e:
            logging.error(f"Error fetching video info for {video_id}: {e}")
            raise TransientError(f"Could not fetch video info for {video_id}") from e

    async def resolve_id(self, video_id: str) -> VideoMetadata:
        """Fetch metadata for an already extracted video id."""
        if not is_video_id(video_id):
            raise InvalidURL(f"Not a valid YouTube video id: {video_id}")
        metadata = await asyncio.to_thread(self._fetch, video_id)
        logging.info(
            f"Resolved video {video_id}: '{metadata.title}' with {len(metadata.available_tracks)} caption tracks"
        )
        return metadata

    async def resolve(self, url: str) -> VideoMetadata:
        """Fetch metadata for a YouTube URL."""
        return await self.resolve_id(validate_youtube_url(url))
