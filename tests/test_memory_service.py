"""
Spacetime API — Memory Service Unit Tests
===========================================

What:  Tests for MemoryService business rules (list, get, create, update, delete).
How:   Uses a mock DB session (no real database).

What we test:
    ✅ Excerpt projection in list results
    ✅ Not found raises NotFoundError
    ✅ Visibility rule for reads, ownership rule for writes
    ✅ Update leaves id / owner / creation time alone
    ✅ SQLAlchemy failures are wrapped in DatabaseError
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from spacetime.exceptions import AccessDeniedError, DatabaseError, NotFoundError
from spacetime.models.memory import Memory
from spacetime.schemas.memory import MemoryBody
from spacetime.services.memory_service import MemoryService


def _memory(user_id="owner", is_public=False, content="Some content"):
    return Memory(
        id=uuid4(),
        content=content,
        cover_url="http://cdn.test/cover.png",
        is_public=is_public,
        user_id=user_id,
        created_at=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


def _lookup_returns(session, memory):
    result = MagicMock()
    result.scalar_one_or_none.return_value = memory
    session.execute.return_value = result


class TestMemoryServiceList:
    """Tests for list_memories."""

    def setup_method(self):
        self.service = MemoryService()

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db_session):
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = result

        assert await self.service.list_memories(mock_db_session, "owner") == []

    @pytest.mark.asyncio
    async def test_list_projects_summaries(self, mock_db_session):
        """Long content is cut to 115 chars plus '...'; short content is kept."""
        short = _memory(content="short")
        long = _memory(content="x" * 200)
        result = MagicMock()
        result.scalars.return_value.all.return_value = [short, long]
        mock_db_session.execute.return_value = result

        items = await self.service.list_memories(mock_db_session, "owner")

        assert [item.id for item in items] == [short.id, long.id]
        assert items[0].excerpt == "short"
        assert items[1].excerpt == "x" * 115 + "..."
        assert items[1].cover_url == "http://cdn.test/cover.png"

    @pytest.mark.asyncio
    async def test_list_wraps_database_errors(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("gone"))
        )

        with pytest.raises(DatabaseError):
            await self.service.list_memories(mock_db_session, "owner")


class TestMemoryServiceGet:
    """Tests for get_memory."""

    def setup_method(self):
        self.service = MemoryService()

    @pytest.mark.asyncio
    async def test_owner_reads_private_memory(self, mock_db_session):
        memory = _memory()
        _lookup_returns(mock_db_session, memory)

        result = await self.service.get_memory(mock_db_session, memory.id, "owner")

        assert result.id == memory.id
        assert result.content == "Some content"
        assert result.user_id == "owner"
        assert result.is_public is False

    @pytest.mark.asyncio
    async def test_other_user_reads_public_memory(self, mock_db_session):
        memory = _memory(is_public=True)
        _lookup_returns(mock_db_session, memory)

        result = await self.service.get_memory(mock_db_session, memory.id, "stranger")

        assert result.id == memory.id

    @pytest.mark.asyncio
    async def test_other_user_denied_private_memory(self, mock_db_session):
        memory = _memory()
        _lookup_returns(mock_db_session, memory)

        with pytest.raises(AccessDeniedError):
            await self.service.get_memory(mock_db_session, memory.id, "stranger")

    @pytest.mark.asyncio
    async def test_missing_memory_raises_not_found(self, mock_db_session):
        _lookup_returns(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await self.service.get_memory(mock_db_session, uuid4(), "owner")


class TestMemoryServiceCreate:
    """Tests for create_memory."""

    def setup_method(self):
        self.service = MemoryService()

    @pytest.mark.asyncio
    async def test_create_assigns_caller_as_owner(self, mock_db_session):
        generated_id = uuid4()

        async def fake_flush():
            added = mock_db_session.add.call_args[0][0]
            added.id = generated_id
            added.created_at = datetime.now(timezone.utc)

        mock_db_session.flush = AsyncMock(side_effect=fake_flush)
        body = MemoryBody(content="hello", coverUrl="http://x/y.png")

        result = await self.service.create_memory(mock_db_session, "user-u", body)

        added = mock_db_session.add.call_args[0][0]
        assert isinstance(added, Memory)
        assert added.user_id == "user-u"
        assert result.id == generated_id
        assert result.user_id == "user-u"
        assert result.is_public is False


class TestMemoryServiceUpdate:
    """Tests for update_memory."""

    def setup_method(self):
        self.service = MemoryService()

    @pytest.mark.asyncio
    async def test_owner_replaces_fields(self, mock_db_session):
        memory = _memory(is_public=True)
        original_id, original_created = memory.id, memory.created_at
        _lookup_returns(mock_db_session, memory)
        body = MemoryBody(content="new text", coverUrl="http://cdn.test/new.png")

        result = await self.service.update_memory(mock_db_session, memory.id, "owner", body)

        assert result.content == "new text"
        assert result.cover_url == "http://cdn.test/new.png"
        assert result.is_public is False  # omitted → reset
        assert result.id == original_id
        assert result.user_id == "owner"
        assert result.created_at == original_created
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update_even_public_memory(self, mock_db_session):
        memory = _memory(is_public=True)
        _lookup_returns(mock_db_session, memory)
        body = MemoryBody(content="hijack", coverUrl="http://evil.test/x.png", isPublic=True)

        with pytest.raises(AccessDeniedError):
            await self.service.update_memory(mock_db_session, memory.id, "stranger", body)

        assert memory.content == "Some content"
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing_memory(self, mock_db_session):
        _lookup_returns(mock_db_session, None)
        body = MemoryBody(content="x", coverUrl="y")

        with pytest.raises(NotFoundError):
            await self.service.update_memory(mock_db_session, uuid4(), "owner", body)


class TestMemoryServiceDelete:
    """Tests for delete_memory."""

    def setup_method(self):
        self.service = MemoryService()

    @pytest.mark.asyncio
    async def test_owner_deletes(self, mock_db_session):
        memory = _memory()
        _lookup_returns(mock_db_session, memory)

        await self.service.delete_memory(mock_db_session, memory.id, "owner")

        mock_db_session.delete.assert_awaited_once_with(memory)

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, mock_db_session):
        memory = _memory(is_public=True)
        _lookup_returns(mock_db_session, memory)

        with pytest.raises(AccessDeniedError):
            await self.service.delete_memory(mock_db_session, memory.id, "stranger")

        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_missing_memory(self, mock_db_session):
        _lookup_returns(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await self.service.delete_memory(mock_db_session, uuid4(), "owner")
