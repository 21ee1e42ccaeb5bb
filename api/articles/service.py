"""
Article business logic.

Every operation returns a joined record: the article row plus its author and
tags, fetched with explicit batched lookups. A missing article is reported as
HTTP 404; any data-store error propagates unchanged to the generic handlers in
`core.errors`.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from core import db
from tags import service as tags_service

from . import repository, schemas, slugs

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
NOT_FOUND_DETAIL = "Article not found."


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)


async def _join(rows: list[dict[str, Any]]) -> list[schemas.ArticleResponse]:
    if not rows:
        return []

    tag_ids = [int(tag_id) for row in rows for tag_id in (row.get("tag_ids") or [])]
    author_ids = sorted({int(row["author_id"]) for row in rows})

    tags = await tags_service.tags_by_id(tag_ids)
    author_rows = await repository.get_authors_by_ids(author_ids)
    authors = {
        int(a["id"]): schemas.AuthorResponse(id=int(a["id"]), username=str(a["username"]))
        for a in author_rows
    }

    joined: list[schemas.ArticleResponse] = []
    for row in rows:
        favored_by = [int(user_id) for user_id in (row.get("favored_by") or [])]
        joined.append(
            schemas.ArticleResponse(
                id=int(row["id"]),
                title=str(row["title"]),
                slug=str(row["slug"]),
                link=str(row["link"]),
                description=str(row["description"]),
                body=str(row["body"]),
                image=row.get("image"),
                author=authors[int(row["author_id"])],
                # Tags keep their stored order; ids whose tag vanished are skipped.
                tags=[tags[int(t)] for t in (row.get("tag_ids") or []) if int(t) in tags],
                favored_by=favored_by,
                favored_count=int(row["favored_count"]),
                state=schemas.PublishState(row["state"]),
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
        )
    return joined


async def _join_one(row: dict[str, Any] | None) -> schemas.ArticleResponse:
    if row is None:
        raise _not_found()
    return (await _join([row]))[0]


def _resolve_slug(title: str, slug: str | None) -> str:
    resolved = (slug or "").strip() or slugs.slugify(title)
    if not resolved:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Cannot derive a slug from the title; provide one explicitly.",
        )
    return resolved


async def create_article(payload: schemas.ArticleCreate, *, author_id: int) -> schemas.ArticleResponse:
    slug = _resolve_slug(payload.title, payload.slug)

    async with db.transaction() as conn:
        tag_ids = await tags_service.reconcile(payload.tags, conn=conn)
        row = await repository.insert_article(
            title=payload.title,
            slug=slug,
            link=slugs.article_link(slug),
            description=payload.description,
            body=payload.body,
            image=payload.image,
            author_id=author_id,
            tag_ids=tag_ids,
            state=payload.state.value,
            conn=conn,
        )

    logger.info("article_created id=%s author_id=%s tags=%s", row["id"], author_id, len(tag_ids))
    return await _join_one(row)


async def list_articles(
    *,
    author_id: int | None = None,
    favourites_only: bool = False,
    caller_id: int | None = None,
    tag: str | None = None,
    sort: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> list[schemas.ArticleResponse]:
    # Anonymous callers have no favourites; the flag is ignored for them.
    favored_by = caller_id if (favourites_only and caller_id is not None) else None
    order = repository.SORT_POPULAR if sort == repository.SORT_POPULAR else repository.SORT_RECENT

    rows = await repository.list_articles(
        author_id=author_id,
        favored_by=favored_by,
        tag=tag,
        sort=order,
        limit=limit,
        offset=offset,
    )
    return await _join(rows)


async def get_article(article_id: int) -> schemas.ArticleResponse:
    return await _join_one(await repository.get_article_by_id(article_id))


async def get_article_by_slug(slug: str) -> schemas.ArticleResponse:
    return await _join_one(await repository.get_article_by_slug(slug))


async def update_article(article_id: int, payload: schemas.ArticleUpdate) -> schemas.ArticleResponse:
    # Explicit null means "not supplied", except for `image`, where it clears the column.
    fields: dict[str, Any] = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "image"
    }
    labels = fields.pop("tags", None)
    if "slug" in fields:
        fields["slug"] = _resolve_slug(fields.get("title", ""), fields["slug"])
        fields["link"] = slugs.article_link(fields["slug"])
    if "state" in fields:
        fields["state"] = schemas.PublishState(fields["state"]).value

    async with db.transaction() as conn:
        if labels is not None:
            # Supplied tags replace the whole list; an empty list clears it.
            fields["tag_ids"] = await tags_service.reconcile(labels, conn=conn)
        row = await repository.update_article(article_id, fields, conn=conn)
        if row is None:
            raise _not_found()

    logger.info("article_updated id=%s fields=%s", article_id, ",".join(sorted(fields)))
    return await _join_one(row)


async def delete_article(article_id: int) -> schemas.ArticleResponse:
    row = await repository.delete_article(article_id)
    if row is None:
        raise _not_found()
    logger.info("article_deleted id=%s", article_id)
    return await _join_one(row)


async def favorite_article(article_id: int, *, user_id: int) -> schemas.ArticleResponse:
    return await _join_one(await repository.add_favorite(article_id, user_id=user_id))


async def unfavorite_article(article_id: int, *, user_id: int) -> schemas.ArticleResponse:
    return await _join_one(await repository.remove_favorite(article_id, user_id=user_id))
