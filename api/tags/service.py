"""
Tag business logic.

`reconcile()` turns the free-text labels submitted with an article into tag
ids, creating the tags that do not exist yet:

1. de-duplicate the labels (first occurrence wins)
2. look up all known tags in one query
3. insert the unknown labels in one batch
4. return existing ids followed by the new ones
"""

from __future__ import annotations

import logging
from typing import Iterable

import asyncpg

from . import repository, schemas

logger = logging.getLogger(__name__)


def unique_labels(labels: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for label in labels:
        if label in seen:
            continue
        seen.add(label)
        ordered.append(label)
    return ordered


async def reconcile(
    labels: Iterable[str] | None,
    *,
    conn: asyncpg.Connection | None = None,
) -> list[int]:
    wanted = unique_labels(labels or [])
    if not wanted:
        return []

    existing = await repository.find_tags_by_labels(wanted, conn=conn)
    existing_labels = {str(row["label"]) for row in existing}
    new_labels = [label for label in wanted if label not in existing_labels]

    created: list[dict] = []
    if new_labels:
        created = await repository.insert_tags(new_labels, conn=conn)
        logger.info("tags_created count=%s", len(created))

    return [int(row["id"]) for row in existing] + [int(row["id"]) for row in created]


async def tags_by_id(
    tag_ids: Iterable[int],
    *,
    conn: asyncpg.Connection | None = None,
) -> dict[int, schemas.TagResponse]:
    ids = sorted({int(tag_id) for tag_id in tag_ids})
    rows = await repository.get_tags_by_ids(ids, conn=conn)
    return {int(row["id"]): schemas.TagResponse(id=int(row["id"]), label=str(row["label"])) for row in rows}


async def list_tags(*, limit: int = 100, offset: int = 0) -> list[schemas.TagResponse]:
    rows = await repository.list_tags(limit=limit, offset=offset)
    return [schemas.TagResponse(id=int(row["id"]), label=str(row["label"])) for row in rows]
