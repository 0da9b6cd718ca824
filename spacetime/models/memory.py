"""
Spacetime API — Memory SQLAlchemy Model
=========================================

What:  ORM model representing the `memories` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by MemoryService for CRUD operations.

Table Design:
    - UUID primary key: non-sequential, generated on creation
    - content: full text, no length limit (excerpts are cut in the service)
    - cover_url: URL of an externally hosted image
    - is_public: visibility flag, false unless the owner opts in
    - user_id: `sub` claim of the owner; written once, never updated
    - created_at: UTC with timezone, drives list ordering

    Index on (user_id, created_at):
        The list endpoint always filters by owner and orders by creation time.

Generic `Uuid` / `DateTime(timezone=True)` types keep the model portable
between PostgreSQL and the SQLite store used by the test-suite.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from spacetime.database import Base


class Memory(Base):
    """
    A short text memory with a cover image, owned by one user.

    Lifecycle:
        1. Created by POST /memories with the caller as owner
        2. content / cover_url / is_public replaced by PUT /memories/{id}
        3. Removed permanently by DELETE /memories/{id}
    """

    __tablename__ = "memories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Memory text",
    )

    cover_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="URL of the externally hosted cover image",
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Whether non-owners may read this memory",
    )

    # What: Subject (`sub` claim) of the owning user
    # Immutable after creation; update_memory never writes it
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Owner subject identifier",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this memory was created (UTC)",
    )

    __table_args__ = (
        Index("idx_memories_user_id_created_at", "user_id", "created_at"),
    )

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def is_visible_to(self, user_id: str) -> bool:
        """Public memories are readable by anyone; private ones only by the owner."""
        return self.is_public or self.is_owned_by(user_id)

    def __repr__(self) -> str:
        return (
            f"<Memory(id={self.id}, user_id='{self.user_id}', "
            f"is_public={self.is_public}, created_at='{self.created_at}')>"
        )
