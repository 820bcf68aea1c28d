"""
Treble API — Pattern SQLAlchemy Model
======================================

What:  ORM model representing the `patterns` table.
Why:   Gives the single record type an explicit, typed shape instead of
       schema-on-write documents.
Who:   Used by PatternService for queries and by Alembic for migrations.

Table Design Rationale:
    - UUID primary key: internal only, never exposed in the API
    - slug: client-chosen identifier, UNIQUE at the storage level so two
      concurrent creates with the same slug cannot both commit
    - text columns are unbounded TEXT; uploads carry no length limit
    - date_uploaded: UTC with timezone, set once at creation
    - likes: CHECK (likes >= 0); only ever changed by an atomic +1 update

    Index on date_uploaded DESC:
        Search results are always returned newest first.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from treble_api.database import Base


class Pattern(Base):
    """
    A shared pattern: an externally hosted document plus its metadata.

    Lifecycle:
        1. Created by POST /upload with likes = 0
        2. likes incremented by POST /like/{slug}
        3. Never updated otherwise, never deleted
    """

    __tablename__ = "patterns"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Document & Metadata ───────────────────────────────────────────────
    pattern_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="External URL of the pattern document (.pdf/.doc/.docx/.txt)",
    )
    pattern_name: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # What: Client-supplied, human-readable identifier
    # Why unique index: closes the check-then-insert window on create
    slug: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        index=True,
        comment="Unique, immutable identifier chosen by the uploader",
    )

    thumbnail_url: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Optional external preview image (.webp/.png/.jpeg/.jpg)",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    date_uploaded: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this pattern was uploaded (UTC)",
    )

    likes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_patterns_likes_non_negative"),
        Index("idx_patterns_date_uploaded", date_uploaded.desc()),
    )

    def __repr__(self) -> str:
        return f"<Pattern(slug='{self.slug}', likes={self.likes})>"
