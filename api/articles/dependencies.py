"""
Ownership check for article mutations.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from auth import dependencies as auth_dependencies

from . import repository, service


async def require_article_owner(
    article_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    """
    Let the request through only when the caller authored the article.
    """
    author_id = await repository.get_article_author_id(article_id)
    if author_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=service.NOT_FOUND_DETAIL)
    if author_id != int(current_user["id"]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can modify this article.",
        )
    return current_user
