"""
Tag API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from . import service

router = APIRouter()


@router.get("/tags")
async def list_tags(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> dict:
    tags = await service.list_tags(limit=limit, offset=offset)
    return {"tags": tags, "count": len(tags)}
