from pydantic import BaseModel, Field
from typing import Optional, List


class VideoRequest(BaseModel):
    """Model for transcript requests."""
    url: str
    lang: Optional[str] = None


class SummaryRequest(BaseModel):
    """Model for summary requests."""
    url: str
    model: Optional[str] = None
    lang: Optional[str] = None


class LanguageResponse(BaseModel):
    name: str
    code: str


class SimpleTranscriptResponse(BaseModel):
    """Model for flat transcript responses."""
    duration: int
    title: str
    transcript: str
    transcriptLanguageCode: str
    languages: Optional[List[LanguageResponse]] = None


class CaptionResponse(BaseModel):
    start: float
    duration: float
    text: str


class CaptionsResponse(BaseModel):
    """Model for raw caption responses."""
    videoId: str
    lang: str
    captions: List[CaptionResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    message: str


class DebugResponse(BaseModel):
    ip: Optional[str]
    region: str
