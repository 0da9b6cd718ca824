"""
Spacetime API — Memory Service (Business Logic)
=================================================

What:  Ownership/visibility rules and the store call behind each memory route.
Why:   Keeps business rules out of the HTTP layer so they can be tested
       with a mocked session.
How:   Each method performs at most one lookup followed by one write on the
       session it is given. Commit/rollback belongs to get_db_session.
Who:   Called by routes/memories.py.

Authorization rules:
    read   → memory.is_public OR caller is owner
    update → caller is owner
    delete → caller is owner
    Violations raise AccessDeniedError (401, empty body).

The lookup and the following write are not locked together: two
concurrent updates/deletes by the same owner may interleave.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from spacetime.exceptions import AccessDeniedError, DatabaseError, NotFoundError
from spacetime.models.memory import Memory
from spacetime.schemas.memory import (
    MemoryBody,
    MemoryResponse,
    MemorySummary,
    build_excerpt,
)

logger = logging.getLogger(__name__)


class MemoryService:
    """
    Business logic layer for memory operations.

    Stateless: the session and the caller are passed to every call.
    SQLAlchemy errors are wrapped in DatabaseError; application errors
    propagate unchanged.
    """

    async def list_memories(self, db: AsyncSession, user_id: str) -> List[MemorySummary]:
        """
        All memories owned by `user_id`, oldest first, as list summaries.

        Query plan:
            SELECT ... FROM memories WHERE user_id = :sub ORDER BY created_at ASC
            → idx_memories_user_id_created_at
        """
        try:
            result = await db.execute(
                select(Memory)
                .where(Memory.user_id == user_id)
                .order_by(asc(Memory.created_at))
            )
            memories = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing memories: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve memories. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [
            MemorySummary(
                id=memory.id,
                cover_url=memory.cover_url,
                excerpt=build_excerpt(memory.content),
            )
            for memory in memories
        ]

    async def get_memory(self, db: AsyncSession, memory_id: UUID, user_id: str) -> MemoryResponse:
        """
        Full memory, if the caller may read it.

        Raises:
            NotFoundError: No memory with this ID (→ 404)
            AccessDeniedError: Private and not owned by the caller (→ 401)
        """
        memory = await self._find_or_raise(db, memory_id)

        if not memory.is_visible_to(user_id):
            logger.info("Denied read of private memory %s to %s", memory_id, user_id)
            raise AccessDeniedError(resource_id=str(memory_id), caller=user_id)

        return MemoryResponse.model_validate(memory)

    async def create_memory(self, db: AsyncSession, user_id: str, body: MemoryBody) -> MemoryResponse:
        """Store a new memory owned by the caller and return it with its generated fields."""
        memory = Memory(
            content=body.content,
            cover_url=body.cover_url,
            is_public=body.is_public,
            user_id=user_id,
        )
        try:
            db.add(memory)
            await db.flush()  # assigns defaults without committing
        except SQLAlchemyError as e:
            logger.error("Database error creating memory: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the memory. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Memory %s created by %s (public=%s)", memory.id, user_id, memory.is_public)
        return MemoryResponse.model_validate(memory)

    async def update_memory(
        self,
        db: AsyncSession,
        memory_id: UUID,
        user_id: str,
        body: MemoryBody,
    ) -> MemoryResponse:
        """
        Replace content, cover_url and is_public of an owned memory.

        id, user_id and created_at are never touched.

        Raises:
            NotFoundError: No memory with this ID (→ 404)
            AccessDeniedError: Caller is not the owner (→ 401)
        """
        memory = await self._find_or_raise(db, memory_id)

        if not memory.is_owned_by(user_id):
            logger.info("Denied update of memory %s to %s", memory_id, user_id)
            raise AccessDeniedError(resource_id=str(memory_id), caller=user_id)

        memory.content = body.content
        memory.cover_url = body.cover_url
        memory.is_public = body.is_public
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating memory %s: %s", memory_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the memory. Please try again.",
                context={"memory_id": str(memory_id)},
            )

        logger.info("Memory %s updated by %s", memory_id, user_id)
        return MemoryResponse.model_validate(memory)

    async def delete_memory(self, db: AsyncSession, memory_id: UUID, user_id: str) -> None:
        """
        Permanently remove an owned memory.

        Raises:
            NotFoundError: No memory with this ID (→ 404)
            AccessDeniedError: Caller is not the owner (→ 401)
        """
        memory = await self._find_or_raise(db, memory_id)

        if not memory.is_owned_by(user_id):
            logger.info("Denied delete of memory %s to %s", memory_id, user_id)
            raise AccessDeniedError(resource_id=str(memory_id), caller=user_id)

        try:
            await db.delete(memory)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting memory %s: %s", memory_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the memory. Please try again.",
                context={"memory_id": str(memory_id)},
            )

        logger.info("Memory %s deleted by %s", memory_id, user_id)

    async def _find_or_raise(self, db: AsyncSession, memory_id: UUID) -> Memory:
        try:
            result = await db.execute(select(Memory).where(Memory.id == memory_id))
            memory = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching memory %s: %s", memory_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the memory. Please try again.",
                context={"memory_id": str(memory_id)},
            )

        if memory is None:
            raise NotFoundError(resource="memory", resource_id=str(memory_id))
        return memory


# ── Singleton Instance ────────────────────────────────────────────────────
memory_service = MemoryService()
