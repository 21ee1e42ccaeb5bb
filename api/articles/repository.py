"""
Article persistence (raw SQL).

Rows come back bare: `author_id` and `tag_ids` are plain ids. Joining in the
author and tag records is done by the service with explicit batched fetches
(`get_authors_by_ids`, `tags.repository.get_tags_by_ids`).

Favorite set and counter are written together in a single UPDATE, and the
counter only moves when set membership actually changed, so
`favored_count = cardinality(favored_by)` holds for every row (the table
also carries a CHECK constraint for it).
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

ARTICLE_COLUMNS = """
    id, title, slug, link, description, body, image, author_id,
    tag_ids, favored_by, favored_count, state, created_at, updated_at
"""

# Columns a partial update may write, in the order they appear in SET.
UPDATABLE_COLUMNS = ("title", "slug", "link", "description", "body", "image", "tag_ids", "state")

SORT_POPULAR = "popular"
SORT_RECENT = "recent"


async def insert_article(
    *,
    title: str,
    slug: str,
    link: str,
    description: str,
    body: str,
    image: str | None,
    author_id: int,
    tag_ids: list[int],
    state: str,
    conn: asyncpg.Connection | None = None,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO articles (title, slug, link, description, body, image, author_id, tag_ids, state)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8::bigint[], $9)
        RETURNING {ARTICLE_COLUMNS}
        """,
        title,
        slug,
        link,
        description,
        body,
        image,
        author_id,
        tag_ids,
        state,
        conn=conn,
    )
    if row is None:
        raise RuntimeError("Failed to insert article.")
    return row


async def get_article_by_id(article_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {ARTICLE_COLUMNS}
        FROM articles
        WHERE id = $1
        """,
        article_id,
    )


async def get_article_by_slug(slug: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {ARTICLE_COLUMNS}
        FROM articles
        WHERE slug = $1
        """,
        slug,
    )


async def get_article_author_id(article_id: int) -> int | None:
    row = await db.fetch_one(
        """
        SELECT author_id
        FROM articles
        WHERE id = $1
        """,
        article_id,
    )
    return int(row["author_id"]) if row is not None else None


async def list_articles(
    *,
    author_id: int | None = None,
    favored_by: int | None = None,
    tag: str | None = None,
    sort: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    List articles, newest first unless `sort` is "popular".

    Each filter is skipped when its argument is None.
    """
    return await db.fetch_all(
        f"""
        SELECT {ARTICLE_COLUMNS}
        FROM articles a
        WHERE ($1::bigint IS NULL OR a.author_id = $1)
          AND ($2::bigint IS NULL OR $2 = ANY(a.favored_by))
          AND (
            $3::text IS NULL
            OR EXISTS (
              SELECT 1
              FROM tags t
              WHERE t.id = ANY(a.tag_ids)
                AND t.label = $3
            )
          )
        ORDER BY
          CASE WHEN $4 = '{SORT_POPULAR}' THEN a.favored_count END DESC NULLS LAST,
          a.created_at DESC,
          a.id DESC
        LIMIT $5
        OFFSET $6
        """,
        author_id,
        favored_by,
        tag,
        sort or SORT_RECENT,
        limit,
        offset,
    )


async def update_article(
    article_id: int,
    fields: dict[str, Any],
    *,
    conn: asyncpg.Connection | None = None,
) -> dict[str, Any] | None:
    """
    Overwrite the given columns and return the updated row (None when missing).

    Keys outside UPDATABLE_COLUMNS are ignored.
    """
    args: list[Any] = [article_id]
    assignments: list[str] = []
    for column in UPDATABLE_COLUMNS:
        if column not in fields:
            continue
        args.append(fields[column])
        cast = "::bigint[]" if column == "tag_ids" else ""
        assignments.append(f"{column} = ${len(args)}{cast}")

    if not assignments:
        return await db.fetch_one(
            f"""
            SELECT {ARTICLE_COLUMNS}
            FROM articles
            WHERE id = $1
            """,
            article_id,
            conn=conn,
        )

    set_clause = ", ".join(assignments)
    return await db.fetch_one(
        f"""
        UPDATE articles
        SET {set_clause},
            updated_at = now()
        WHERE id = $1
        RETURNING {ARTICLE_COLUMNS}
        """,
        *args,
        conn=conn,
    )


async def delete_article(article_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        DELETE FROM articles
        WHERE id = $1
        RETURNING {ARTICLE_COLUMNS}
        """,
        article_id,
    )


async def add_favorite(article_id: int, *, user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE articles
        SET favored_by = CASE
              WHEN $2 = ANY(favored_by) THEN favored_by
              ELSE array_append(favored_by, $2::bigint)
            END,
            favored_count = CASE
              WHEN $2 = ANY(favored_by) THEN favored_count
              ELSE favored_count + 1
            END,
            updated_at = now()
        WHERE id = $1
        RETURNING {ARTICLE_COLUMNS}
        """,
        article_id,
        user_id,
    )


async def remove_favorite(article_id: int, *, user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE articles
        SET favored_by = array_remove(favored_by, $2::bigint),
            favored_count = CASE
              WHEN $2 = ANY(favored_by) THEN favored_count - 1
              ELSE favored_count
            END,
            updated_at = now()
        WHERE id = $1
        RETURNING {ARTICLE_COLUMNS}
        """,
        article_id,
        user_id,
    )


async def get_authors_by_ids(
    author_ids: list[int],
    *,
    conn: asyncpg.Connection | None = None,
) -> list[dict[str, Any]]:
    if not author_ids:
        return []
    return await db.fetch_all(
        """
        SELECT id, username
        FROM users
        WHERE id = ANY($1::bigint[])
        """,
        author_ids,
        conn=conn,
    )
