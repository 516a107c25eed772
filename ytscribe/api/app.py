"""
FastAPI application for the ytscribe transcript service.
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ytscribe.config import config
from ytscribe.api.routes import router
from ytscribe.core.exceptions import ModelRequestFailed, TranscriptServiceError
from ytscribe.core.transcript_service import build_service
from ytscribe.db.database import init_db, close_db
from ytscribe.utils.error_handling import log_exception
from ytscribe.utils.logger import logging

# FastAPI application
app = FastAPI(
    title=config.APP_NAME,
    version=config.APP_VERSION,
    description="An API for fetching, caching and summarizing YouTube transcripts",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize components on application startup."""
    config.initialize()
    store = await init_db(config.REDIS_URL)
    app.state.store = store
    app.state.service = build_service(store)
    logging.info(f"{config.APP_NAME} v{config.APP_VERSION} ready")


@app.on_event("shutdown")
async def shutdown_event():
    store = getattr(app.state, "store", None)
    if store is not None:
        await close_db(store)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Middleware to add processing time header to responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(TranscriptServiceError)
async def service_exception_handler(request: Request, exc: TranscriptServiceError):
    """Map service errors onto their status codes."""
    if exc.status_code >= 500:
        logging.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logging.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    content = {"message": exc.message}
    if isinstance(exc, ModelRequestFailed):
        content = exc.to_dict()
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {errors}"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled exceptions."""
    log_exception(f"Unhandled error on {request.method} {request.url.path}", exc)
    return JSONResponse(
        status_code=500,
        content={"message": "An unexpected error occurred."},
    )


# Include API router
app.include_router(router)


# Root
@app.get("/")
async def root():
    """Root endpoint returning basic API information."""
    return {
        "name": config.APP_NAME,
        "version": config.APP_VERSION,
        "description": "YouTube transcript and summary API",
    }
