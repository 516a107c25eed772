"""
API routes for the ytscribe transcript service.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from ytscribe.api.schemas import (
    VideoRequest,
    SummaryRequest,
    SimpleTranscriptResponse,
    CaptionsResponse,
    DebugResponse,
    ErrorResponse,
)
from ytscribe.config import config
from ytscribe.core.transcript_service import TranscriptService, check_tools
from ytscribe.utils.logger import logging

router = APIRouter(
    tags=["youtube"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def get_service(request: Request) -> TranscriptService:
    """Dependency returning the service built at startup."""
    return request.app.state.service


@router.post("/transcript")
async def transcript(request: VideoRequest, service: TranscriptService = Depends(get_service)):
    """Metadata plus structured transcripts for every available caption language."""
    return await service.full_transcript(request.url)


@router.post("/simple-transcript", response_model=SimpleTranscriptResponse, response_model_exclude_none=True)
async def simple_transcript(request: VideoRequest, service: TranscriptService = Depends(get_service)):
    """Flat transcript text in the requested language (English by default)."""
    return await service.simple_transcript(request.url, request.lang)


@router.post("/simple-transcript-v2", response_model=SimpleTranscriptResponse, response_model_exclude_none=True)
async def simple_transcript_v2(request: VideoRequest, service: TranscriptService = Depends(get_service)):
    """Flat transcript using the language selection policy, with the available languages."""
    return await service.simple_transcript_v2(request.url, request.lang)


@router.post("/simple-transcript-v3", response_model=SimpleTranscriptResponse, response_model_exclude_none=True)
async def simple_transcript_v3(request: VideoRequest, service: TranscriptService = Depends(get_service)):
    """Like v2, caching each fetched language in one multilingual record."""
    return await service.simple_transcript_v3(request.url, request.lang)


@router.post("/smart-transcript")
async def smart_transcript(request: VideoRequest, service: TranscriptService = Depends(get_service)):
    """Cache-first transcript."""
    return await service.smart_transcript(request.url, request.lang)


@router.post("/smart-transcript-v2")
async def smart_transcript_v2(request: VideoRequest, service: TranscriptService = Depends(get_service)):
    """Cache-first transcript with tags, description, canonical URL and publish date."""
    return await service.smart_transcript(request.url, request.lang, detailed=True)


@router.post("/smart-summary")
@router.post("/smart-summary-firebase")
async def smart_summary(request: SummaryRequest, service: TranscriptService = Depends(get_service)):
    """Cache-first summary generated from the transcript."""
    return await service.smart_summary(request.url, request.model, request.lang)


@router.post("/smart-summary-firebase-v2")
async def smart_summary_v2(request: SummaryRequest, service: TranscriptService = Depends(get_service)):
    """Cache-first summary; the model endpoint receives only the video identifier."""
    return await service.smart_summary(request.url, request.model, request.lang, send_transcript=False)


@router.post("/smart-summary-firebase-v3")
async def smart_summary_v3(request: SummaryRequest, service: TranscriptService = Depends(get_service)):
    """Cache-first summary with title, duration and canonical URL."""
    return await service.smart_summary(request.url, request.model, request.lang, include_metadata=True)


@router.get("/api/transcript", response_model=CaptionsResponse)
async def captions(
    videoId: str = Query(..., description="YouTube video ID"),
    lang: Optional[str] = Query(None, description="Caption language code"),
    service: TranscriptService = Depends(get_service),
):
    """Raw caption lines for a video id."""
    return await service.captions(videoId, lang)


@router.get("/health", response_class=PlainTextResponse)
async def health():
    return "OK"


@router.get("/health/tools")
async def health_tools():
    """Availability of yt-dlp, its JavaScript runtime and the cookie file."""
    status = check_tools()
    if not status["ok"]:
        logging.warning(f"Tool check failed: {status}")
    return status


@router.get("/debug", response_model=DebugResponse)
async def debug(request: Request):
    """Caller address as seen by the service and the deployment region."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else None
    return DebugResponse(ip=ip, region=config.REGION)
