"""
Article API endpoints.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies

from . import dependencies, schemas, service

ARTICLES_PATH = "/articles"

router = APIRouter()


@router.get(ARTICLES_PATH)
async def list_articles(
    author: int | None = Query(default=None, ge=1),
    tag: str | None = Query(default=None, min_length=1),
    is_favourite: bool = Query(default=False, alias="isFavourite"),
    sort: Literal["recent", "popular"] | None = Query(default=None),
    limit: int = Query(service.DEFAULT_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    current_user: dict | None = Depends(auth_dependencies.get_optional_user),
) -> dict:
    articles = await service.list_articles(
        author_id=author,
        favourites_only=is_favourite,
        caller_id=int(current_user["id"]) if current_user is not None else None,
        tag=tag,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    return {
        "articles": articles,
        "limit": limit,
        "offset": offset,
        "count": len(articles),
    }


# Registered before "/{article_id}" so "slug" is never parsed as an id.
@router.get(f"{ARTICLES_PATH}/slug/{{slug}}")
async def get_article_by_slug(slug: str) -> schemas.ArticleResponse:
    return await service.get_article_by_slug(slug)


@router.get(f"{ARTICLES_PATH}/{{article_id}}")
async def get_article(article_id: int) -> schemas.ArticleResponse:
    return await service.get_article(article_id)


@router.post(ARTICLES_PATH, status_code=status.HTTP_201_CREATED)
async def create_article(
    request: schemas.ArticleCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ArticleResponse:
    return await service.create_article(request, author_id=int(current_user["id"]))


@router.patch(f"{ARTICLES_PATH}/{{article_id}}")
async def update_article(
    article_id: int,
    request: schemas.ArticleUpdate,
    _: dict = Depends(dependencies.require_article_owner),
) -> schemas.ArticleResponse:
    return await service.update_article(article_id, request)


@router.delete(f"{ARTICLES_PATH}/{{article_id}}")
async def delete_article(
    article_id: int,
    _: dict = Depends(dependencies.require_article_owner),
) -> schemas.ArticleResponse:
    return await service.delete_article(article_id)


@router.post(f"{ARTICLES_PATH}/{{article_id}}/favourites", status_code=status.HTTP_201_CREATED)
async def favorite_article(
    article_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ArticleResponse:
    return await service.favorite_article(article_id, user_id=int(current_user["id"]))


@router.delete(f"{ARTICLES_PATH}/{{article_id}}/favourites")
async def unfavorite_article(
    article_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ArticleResponse:
    return await service.unfavorite_article(article_id, user_id=int(current_user["id"]))
