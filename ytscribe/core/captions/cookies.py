"""
Netscape cookie jar shared by the yt-dlp and scrape caption sources.
"""

import http.cookiejar
from pathlib import Path
from typing import Dict, Union

from ytscribe.utils.logger import logging

_YOUTUBE_DOMAINS = ('youtube.com', 'google.com')


def cookie_file_readable(path: Union[str, Path]) -> bool:
    """Check that the cookie file exists and can be opened for reading."""
    path = Path(path)
    if not path.is_file():
        return False
    try:
        with open(path, 'r', encoding='utf-8'):
            return True
    except OSError:
        return False


def load_netscape_cookies(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load YouTube session cookies from a Netscape/Mozilla format cookie file.

    Args:
        path: Cookie file, the same one handed to yt-dlp

    Returns:
        Cookie name to value mapping; empty when the file is missing or unreadable
    """
    path = Path(path)
    if not path.is_file():
        return {}

    jar = http.cookiejar.MozillaCookieJar(str(path))
    try:
        jar.load(ignore_discard=True, ignore_expires=True)
    except (OSError, http.cookiejar.LoadError) as e:
        logging.warning(f"Could not load cookies from {path}: {e}")
        return {}

    cookies = {}
    for cookie in jar:
        if cookie.domain.lstrip('.').endswith(_YOUTUBE_DOMAINS):
            cookies[cookie.name] = cookie.value
    return cookies
