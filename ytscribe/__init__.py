"""
ytscribe: YouTube transcript and summary service.

Fetches caption tracks through an ordered chain of caption sources, caches
transcripts per video and language, and builds markdown summaries through an
external model endpoint.
"""

from ytscribe.config import config

__version__ = config.APP_VERSION
