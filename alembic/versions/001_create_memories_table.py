"""Create memories table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `memories` table and its owner/creation-time index.
Rollback: downgrade() drops the table (all memories are lost).
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
    """Create the memories table. Column docs live in spacetime/models/memory.py."""
    op.create_table(
        "memories",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Unique identifier",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Memory text",
        ),
        sa.Column(
            "cover_url",
            sa.Text(),
            nullable=False,
            comment="URL of the externally hosted cover image",
        ),
        sa.Column(
            "is_public",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Whether non-owners may read this memory",
        ),
        sa.Column(
            "user_id",
            sa.String(255),
            nullable=False,
            comment="Owner subject identifier",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this memory was created (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Serves the list query: WHERE user_id = :sub ORDER BY created_at
    op.create_index(
        "idx_memories_user_id_created_at",
        "memories",
        ["user_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_memories_user_id_created_at", table_name="memories")
    op.drop_table("memories")
