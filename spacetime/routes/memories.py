"""
Spacetime API — Memory Route Handlers
=======================================

What:  GET/POST /memories and GET/PUT/DELETE /memories/{memory_id}.
Why:   The whole public surface of the service.
How:   Every route requires a bearer token (router-level dependency).
       FastAPI validates the path UUID and the JSON body; the handler then
       delegates to MemoryService and returns its result.
Who:   Called by the web and mobile frontends.

Status codes:
    200  success (DELETE answers with an empty body)
    400  malformed memory ID or body
    401  missing/invalid token (JSON) or caller lacks rights (empty body)
    404  memory does not exist
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from spacetime.database import get_db_session
from spacetime.schemas.memory import (
    ErrorResponse,
    MemoryBody,
    MemoryResponse,
    MemorySummary,
)
from spacetime.security import get_current_user_id
from spacetime.services.memory_service import memory_service

logger = logging.getLogger(__name__)

MEMORIES_PATH = "/memories"

_UNAUTHORIZED = {"description": "Missing or invalid token, or caller may not access this memory"}
_NOT_FOUND = {"description": "Memory not found", "model": ErrorResponse}
_BAD_REQUEST = {"description": "Malformed ID or body", "model": ErrorResponse}

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    tags=["Memories"],
    dependencies=[Depends(get_current_user_id)],
    responses={401: _UNAUTHORIZED},
)


@router.get(
    MEMORIES_PATH,
    response_model=List[MemorySummary],
    summary="List the caller's memories",
    description=(
        "Returns every memory owned by the caller, oldest first, as "
        "{id, coverUrl, excerpt}. The excerpt is cut at 115 characters."
    ),
)
async def list_memories(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[MemorySummary]:
    return await memory_service.list_memories(db=db, user_id=user_id)


@router.get(
    MEMORIES_PATH + "/{memory_id}",
    response_model=MemoryResponse,
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND},
    summary="Get one memory",
    description="Public memories are visible to every caller; private ones only to their owner.",
)
async def get_memory(
    memory_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.get_memory(db=db, memory_id=memory_id, user_id=user_id)


@router.post(
    MEMORIES_PATH,
    response_model=MemoryResponse,
    responses={400: _BAD_REQUEST},
    summary="Create a memory",
)
async def create_memory(
    body: MemoryBody,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.create_memory(db=db, user_id=user_id, body=body)


@router.put(
    MEMORIES_PATH + "/{memory_id}",
    response_model=MemoryResponse,
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND},
    summary="Replace a memory",
    description=(
        "Full replacement: content, coverUrl and isPublic are all overwritten. "
        "An omitted isPublic makes the memory private."
    ),
)
async def update_memory(
    memory_id: UUID,
    body: MemoryBody,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.update_memory(
        db=db, memory_id=memory_id, user_id=user_id, body=body
    )


@router.delete(
    MEMORIES_PATH + "/{memory_id}",
    response_class=Response,
    responses={200: {"description": "Memory deleted (empty body)"}, 400: _BAD_REQUEST, 404: _NOT_FOUND},
    summary="Delete a memory",
)
async def delete_memory(
    memory_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await memory_service.delete_memory(db=db, memory_id=memory_id, user_id=user_id)
    return Response(status_code=200)
