"""
Error taxonomy for the transcript service.

Every error carries the HTTP status it is surfaced with; the API layer turns
them into ``{"message": ...}`` responses.
"""

from typing import Any, Dict, Optional

from ytscribe.models.schemas import FailureKind


class TranscriptServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class InvalidURL(TranscriptServiceError):
    status_code = 400


class PrivateVideo(TranscriptServiceError):
    status_code = 403


class VideoUnavailable(TranscriptServiceError):
    status_code = 404


class NoCaptionsAvailable(TranscriptServiceError):
    status_code = 404


class NoTranscriptAvailable(TranscriptServiceError):
    status_code = 404


class TransientError(TranscriptServiceError):
    status_code = 500


class InvalidModel(TranscriptServiceError):
    status_code = 400


class StoreError(TranscriptServiceError):
    status_code = 500


class ModelRequestFailed(TranscriptServiceError):
    """The summary endpoint failed; keeps upstream status and body for diagnosis."""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None,
                 details: Optional[Any] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "upstreamStatus": self.upstream_status,
            "details": self.details,
        }


class CaptionSourceError(Exception):
    """Raised by a caption source; ``kind`` tells the orchestrator how to react."""

    def __init__(self, kind: FailureKind, message: str, source: str = ""):
        self.kind = kind
        self.message = message
        self.source = source
        super().__init__(f"[{source or 'caption source'}] {kind.value}: {message}")

    @classmethod
    def not_available(cls, message: str, source: str = "") -> "CaptionSourceError":
        return cls(FailureKind.NOT_AVAILABLE, message, source)

    @classmethod
    def transient(cls, message: str, source: str = "") -> "CaptionSourceError":
        return cls(FailureKind.TRANSIENT, message, source)
