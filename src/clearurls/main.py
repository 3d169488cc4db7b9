"""FastAPI application exposing the cleaner over HTTP."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clearurls.cleaner import UrlCleaner
from clearurls.config import settings
from clearurls.exceptions import BatchCleaningError, ClearUrlsError
from clearurls.models import (
    CleanRequest,
    CleanResponse,
    HealthResponse,
    HtmlCleanRequest,
    HtmlCleanResponse,
    TextCleanRequest,
    TextCleanResponse,
)
from clearurls.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

_startup_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the rules once at startup; every request shares the cleaner."""
    global _startup_time
    configure_logging(settings.environment, settings.log_level)
    log = structlog.get_logger(__name__)

    log.info(
        "clearurls.startup",
        environment=settings.environment,
        rules=str(settings.rules_path or settings.rules_url or "embedded"),
    )
    app.state.cleaner = UrlCleaner.from_settings(settings)

    _startup_time = time.time()
    log.info("clearurls.ready", providers=len(app.state.cleaner.rules.providers))

    yield

    log.info("clearurls.shutdown")


app = FastAPI(
    title="ClearURLs",
    description="Strip tracking parameters and unwrap redirect links using ClearURLs rules.",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post("/clean", response_model=CleanResponse, summary="Clean a single URL")
async def clean(body: CleanRequest, request: Request) -> CleanResponse:
    """Remove tracking parameters from one URL."""
    cleaner: UrlCleaner = request.app.state.cleaner
    cleaned = cleaner.clear_url(body.url)
    return CleanResponse(url=body.url, cleaned=cleaned, changed=cleaned != body.url)


@app.post("/clean/text", response_model=TextCleanResponse, summary="Clean every URL in a text")
async def clean_text(body: TextCleanRequest, request: Request) -> TextCleanResponse:
    """Clean all URLs found in plain text or Markdown."""
    cleaner: UrlCleaner = request.app.state.cleaner
    return TextCleanResponse(text=cleaner.clear_text(body.text))


@app.post("/clean/html", response_model=HtmlCleanResponse, summary="Clean links in an HTML document")
async def clean_html(body: HtmlCleanRequest, request: Request) -> HtmlCleanResponse:
    """Clean link and image targets of an HTML document."""
    cleaner: UrlCleaner = request.app.state.cleaner
    return HtmlCleanResponse(html=cleaner.clear_html(body.html))


@app.get("/health", response_model=HealthResponse, summary="Service health check")
async def health(request: Request) -> HealthResponse:
    """Report the loaded rule count and uptime."""
    cleaner: UrlCleaner = request.app.state.cleaner
    uptime = time.time() - _startup_time if _startup_time else 0.0
    return HealthResponse(
        status="ok",
        providers=len(cleaner.rules.providers),
        strip_referral_marketing=cleaner.strips_referral_marketing,
        uptime_seconds=round(uptime, 1),
    )


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(BatchCleaningError)
async def batch_error_handler(request: Request, exc: BatchCleaningError) -> JSONResponse:
    """Report every failed item of a text or document batch."""
    logger.info("clean.batch_failed", path=request.url.path, failures=len(exc.errors))
    return JSONResponse(
        status_code=422,
        content={"detail": "Some URLs could not be cleaned.", "errors": [str(e) for e in exc.errors]},
    )


@app.exception_handler(ClearUrlsError)
async def cleaning_error_handler(request: Request, exc: ClearUrlsError) -> JSONResponse:
    """Turn a cleaning failure into a client error."""
    logger.info("clean.failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=422,
        content={"detail": "URL could not be cleaned.", "error": str(exc)},
    )
