"""
Tag persistence (raw SQL).

Tags are created lazily by the reconciler and never updated or deleted here.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db


async def find_tags_by_labels(
    labels: list[str],
    *,
    conn: asyncpg.Connection | None = None,
) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, label
        FROM tags
        WHERE label = ANY($1::text[])
        """,
        labels,
        conn=conn,
    )


async def insert_tags(
    labels: list[str],
    *,
    conn: asyncpg.Connection | None = None,
) -> list[dict[str, Any]]:
    """
    Batch-insert one tag per label and return the rows.

    A label inserted concurrently by another request resolves to that row
    instead of failing on the unique index.
    """
    if not labels:
        return []
    return await db.fetch_all(
        """
        INSERT INTO tags (label)
        SELECT unnest($1::text[])
        ON CONFLICT (label) DO UPDATE
        SET label = EXCLUDED.label
        RETURNING id, label
        """,
        labels,
        conn=conn,
    )


async def get_tags_by_ids(
    tag_ids: list[int],
    *,
    conn: asyncpg.Connection | None = None,
) -> list[dict[str, Any]]:
    if not tag_ids:
        return []
    return await db.fetch_all(
        """
        SELECT id, label
        FROM tags
        WHERE id = ANY($1::bigint[])
        """,
        tag_ids,
        conn=conn,
    )


async def list_tags(*, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, label
        FROM tags
        ORDER BY label ASC, id ASC
        LIMIT $1
        OFFSET $2
        """,
        limit,
        offset,
    )
