"""Create patterns table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `patterns` table for shared pattern metadata.
How:   UUID primary key, unique slug index, descending upload-date index,
       CHECK constraint keeping likes non-negative.

Rollback: downgrade() drops the table entirely (destructive, all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the patterns table with constraints and indexes (see treble_api/models/pattern.py)."""
    op.create_table(
        "patterns",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "pattern_url",
            sa.Text(),
            nullable=False,
            comment="External URL of the pattern document (.pdf/.doc/.docx/.txt)",
        ),
        sa.Column("pattern_name", sa.Text(), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "slug",
            sa.Text(),
            nullable=False,
            comment="Unique, immutable identifier chosen by the uploader",
        ),
        sa.Column(
            "thumbnail_url",
            sa.Text(),
            nullable=True,
            comment="Optional external preview image (.webp/.png/.jpeg/.jpg)",
        ),
        sa.Column(
            "date_uploaded",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this pattern was uploaded (UTC)",
        ),
        sa.Column(
            "likes",
            sa.Integer(),
            server_default=sa.text("0"),
            nullable=False,
        ),
        sa.CheckConstraint("likes >= 0", name="ck_patterns_likes_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Unique index doubles as the slug lookup index and the race guard on create
    op.create_index("ix_patterns_slug", "patterns", ["slug"], unique=True)

    # Search results are always ordered newest first
    op.create_index(
        "idx_patterns_date_uploaded",
        "patterns",
        [sa.text("date_uploaded DESC")],
    )


def downgrade() -> None:
    """Drop the patterns table. Destructive: all pattern records are lost."""
    op.drop_index("idx_patterns_date_uploaded", table_name="patterns")
    op.drop_index("ix_patterns_slug", table_name="patterns")
    op.drop_table("patterns")
