"""
Treble API — Pattern Route Handlers
====================================

What:  The public API: root message, fetch by slug, search, upload, like.
How:   Extracts request data, delegates to PatternService, returns JSON.
       Mounted by create_app() under settings.api_prefix (default /api).

Route Inventory:
    GET  /                 → service banner
    GET  /pattern/{slug}   → single pattern (404 if unknown)
    GET  /search?q=        → matching patterns, newest first
    POST /upload           → create a pattern (201)
    POST /like/{slug}      → add one like, return the new count
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from treble_api.database import get_db_session
from treble_api.schemas.pattern import (
    ErrorResponse,
    LikeResponse,
    MessageResponse,
    PatternCreate,
    PatternResponse,
    UploadResponse,
)
from treble_api.services.pattern_service import PatternService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Patterns"])


def get_pattern_service(request: Request) -> PatternService:
    """The PatternService built by create_app() for this application."""
    return request.app.state.pattern_service


@router.get("/", response_model=MessageResponse, summary="API banner")
async def root() -> MessageResponse:
    return MessageResponse(message="Treble.yo API is running")


@router.get(
    "/pattern/{slug}",
    response_model=PatternResponse,
    responses={
        404: {"description": "Pattern not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a pattern by slug",
)
async def get_pattern(
    slug: str,
    db: AsyncSession = Depends(get_db_session),
    service: PatternService = Depends(get_pattern_service),
) -> PatternResponse:
    pattern = await service.get_by_slug(db, slug)
    return PatternResponse.model_validate(pattern)


@router.get(
    "/search",
    response_model=List[PatternResponse],
    responses={
        400: {"description": "Missing search query", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Search patterns by name, author or description",
    description=(
        "Case-insensitive substring match against pattern name, author name "
        "and description. Results are ordered newest first."
    ),
)
async def search_patterns(
    q: Optional[str] = Query(default=None, description="Text to search for (required)"),
    db: AsyncSession = Depends(get_db_session),
    service: PatternService = Depends(get_pattern_service),
) -> List[PatternResponse]:
    # q is declared optional so a missing value reaches the service's 400
    # instead of FastAPI's 422
    patterns = await service.search(db, q or "")
    return [PatternResponse.model_validate(p) for p in patterns]


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={
        400: {
            "description": "Missing field, duplicate slug, blocked term, or bad file type",
            "model": ErrorResponse,
        },
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Upload a new pattern",
)
async def upload_pattern(
    candidate: PatternCreate,
    db: AsyncSession = Depends(get_db_session),
    service: PatternService = Depends(get_pattern_service),
) -> UploadResponse:
    """
    Create a pattern record.

    The document and thumbnail are hosted elsewhere; only their URLs are
    stored. Checks run in a fixed order (slug, moderation, file types) and
    the first failure is returned as a 400.
    """
    logger.info("Received upload request: slug=%s", candidate.slug)
    pattern = await service.create(db, candidate)
    return UploadResponse(message="Pattern uploaded successfully", slug=pattern.slug)


@router.post(
    "/like/{slug}",
    response_model=LikeResponse,
    responses={
        404: {"description": "Pattern not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Like a pattern",
)
async def like_pattern(
    slug: str,
    db: AsyncSession = Depends(get_db_session),
    service: PatternService = Depends(get_pattern_service),
) -> LikeResponse:
    likes = await service.increment_like(db, slug)
    return LikeResponse(likes=likes)
