"""
Treble API — Pattern Service (Record Store)
============================================

What:  Business logic for the pattern record: lookup, search, create, like.
Why:   Keeps validation order and storage rules out of the route handlers.
How:   Receives the request's AsyncSession for every call and the
       ModerationFilter once, at construction.

Create Flow (POST /upload):
    ┌──────────┐    ┌─────────────┐    ┌────────────┐    ┌────────────┐    ┌────────┐
    │  Schema  │───▶│ Slug unused │───▶│ Moderation │───▶│ File types │───▶│ Insert │
    │ (fields) │    │  (lookup)   │    │ (4 fields) │    │ (doc, img) │    │  (DB)  │
    └──────────┘    └─────────────┘    └────────────┘    └────────────┘    └────────┘

    The first failing step raises; nothing is written before the insert.
    The insert itself can still hit the unique slug index when two creates
    race past the lookup, and that surfaces as the same DuplicateSlugError.

Like Flow (POST /like/{slug}):
    A single UPDATE ... SET likes = likes + 1 ... RETURNING likes, so
    concurrent likes on one slug never lose an increment.

Write operations commit before returning. The session dependency's own
commit runs after the response is sent, too late to turn a failed write
into an error response.
"""

import logging
from typing import List

from pydantic.alias_generators import to_camel
from sqlalchemy import desc, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from treble_api.exceptions import (
    DatabaseError,
    DuplicateSlugError,
    NotFoundError,
    ValidationError,
)
from treble_api.models.pattern import Pattern
from treble_api.schemas.pattern import PatternCreate
from treble_api.services.file_types import (
    ALLOWED_DOCUMENT_EXTENSIONS,
    ALLOWED_IMAGE_EXTENSIONS,
    is_valid_document_url,
    is_valid_image_url,
    url_extension,
)
from treble_api.services.moderation import ModerationFilter

logger = logging.getLogger(__name__)

# Fields screened by the moderation filter, in check order
MODERATED_FIELDS = ("pattern_url", "pattern_name", "author_name", "description")


class PatternService:
    """
    Record store for patterns.

    Error Handling Strategy:
        Our own exceptions (ValidationError, NotFoundError) propagate as-is.
        Anything else raised while talking to the database is logged and
        wrapped in DatabaseError so the client only sees a generic 500.
    """

    def __init__(self, moderation: ModerationFilter):
        self.moderation = moderation

    async def get_by_slug(self, db: AsyncSession, slug: str) -> Pattern:
        """
        Fetch one pattern by slug.

        Raises:
            NotFoundError: no pattern has this slug (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            result = await db.execute(select(Pattern).where(Pattern.slug == slug))
            pattern = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching pattern %s: %s", slug, str(e))
            raise DatabaseError(
                message="Could not retrieve the pattern. Please try again.",
                context={"slug": slug, "error_type": type(e).__name__},
            )

        if pattern is None:
            raise NotFoundError(resource="Pattern", resource_id=slug)
        return pattern

    async def search(self, db: AsyncSession, query: str) -> List[Pattern]:
        """
        Case-insensitive substring search over name, author and description.

        Results are ordered newest first. `%` and `_` in the query are matched
        literally. An empty query is rejected instead of listing everything.
        """
        if not query:
            raise ValidationError(message="Search query is required", field="q")

        stmt = (
            select(Pattern)
            .where(
                or_(
                    Pattern.pattern_name.icontains(query, autoescape=True),
                    Pattern.author_name.icontains(query, autoescape=True),
                    Pattern.description.icontains(query, autoescape=True),
                )
            )
            .order_by(desc(Pattern.date_uploaded))
        )

        try:
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Search error for query %r: %s", query, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search patterns. Please try again.",
                context={"error_type": type(e).__name__},
            )

    def validate_candidate(self, candidate: PatternCreate) -> None:
        """
        Moderation and file-type checks for a new pattern; raises on the first failure.

        Pure (no database access), so it can run before any write.
        """
        for field in MODERATED_FIELDS:
            term = self.moderation.first_blocked_term(getattr(candidate, field))
            if term is not None:
                logger.warning(
                    "Blocked term rejected upload %s (field=%s, term=%r)",
                    candidate.slug, field, term,
                )
                raise ValidationError(message="Inappropriate Language Detected", field=to_camel(field))

        if not is_valid_document_url(candidate.pattern_url):
            raise ValidationError(
                message="Invalid file type. Only PDF, DOC, DOCX, and TXT files are allowed.",
                field="patternUrl",
                context={
                    "extension": url_extension(candidate.pattern_url),
                    "allowed": sorted(ALLOWED_DOCUMENT_EXTENSIONS),
                },
            )

        if candidate.thumbnail_url and not is_valid_image_url(candidate.thumbnail_url):
            raise ValidationError(
                message="Invalid thumbnail file type. Only .webp, .png, .jpeg, and .jpg are allowed.",
                field="thumbnailUrl",
                context={
                    "extension": url_extension(candidate.thumbnail_url),
                    "allowed": sorted(ALLOWED_IMAGE_EXTENSIONS),
                },
            )

    async def create(self, db: AsyncSession, candidate: PatternCreate) -> Pattern:
        """
        Validate and persist a new pattern with likes = 0, committed on return.

        Raises:
            DuplicateSlugError: slug already taken (lookup or unique index)
            ValidationError: blocked term or disallowed file extension
            DatabaseError: lookup or insert failed for any other reason
        """
        try:
            existing = await db.execute(select(Pattern.id).where(Pattern.slug == candidate.slug))
            slug_taken = existing.scalar_one_or_none() is not None
        except Exception as e:
            logger.error("Database error checking slug %s: %s", candidate.slug, str(e))
            raise DatabaseError(
                message="Could not save the pattern. Please try again.",
                context={"slug": candidate.slug, "error_type": type(e).__name__},
            )
        if slug_taken:
            raise DuplicateSlugError(candidate.slug)

        self.validate_candidate(candidate)

        pattern = Pattern(
            pattern_url=candidate.pattern_url,
            pattern_name=candidate.pattern_name,
            author_name=candidate.author_name,
            description=candidate.description,
            slug=candidate.slug,
            thumbnail_url=candidate.thumbnail_url,
            likes=0,
        )

        try:
            db.add(pattern)
            await db.flush()
            await db.commit()
        except IntegrityError:
            # Lost the race to a concurrent create with the same slug
            logger.info("Unique index rejected slug %s on insert", candidate.slug)
            raise DuplicateSlugError(candidate.slug, context={"race": True})
        except Exception as e:
            logger.error("Unexpected error creating pattern: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the pattern. Please try again.",
                context={"slug": candidate.slug, "error_type": type(e).__name__},
            )

        logger.info("Pattern created: %s", pattern.slug)
        return pattern

    async def increment_like(self, db: AsyncSession, slug: str) -> int:
        """
        Add one like to a pattern and return the new count.

        Raises:
            NotFoundError: no pattern has this slug
            DatabaseError: update failed
        """
        stmt = (
            update(Pattern)
            .where(Pattern.slug == slug)
            .values(likes=Pattern.likes + 1)
            .returning(Pattern.likes)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await db.execute(stmt)
            likes = result.scalar_one_or_none()
            if likes is not None:
                await db.commit()
        except Exception as e:
            logger.error("Database error liking pattern %s: %s", slug, str(e))
            raise DatabaseError(
                message="Could not record the like. Please try again.",
                context={"slug": slug, "error_type": type(e).__name__},
            )

        if likes is None:
            raise NotFoundError(resource="Pattern", resource_id=slug)
        return likes
