"""
Common contract for caption sources.
"""

from abc import ABC, abstractmethod
from typing import List

from ytscribe.models.schemas import CaptionLine


class CaptionSource(ABC):
    """A strategy for obtaining caption lines for a (video, language) pair.

    Implementations return a non-empty list of lines or raise
    :class:`~ytscribe.core.exceptions.CaptionSourceError` with a failure kind.
    """

    name = "caption-source"

    @abstractmethod
    async def fetch(self, video_id: str, language: str) -> List[CaptionLine]:
        """Fetch caption lines for ``video_id`` in ``language``."""

    def __repr__(self):
        return f"<{self.__class__.__name__}(name='{self.name}')>"
