"""
Pydantic schemas for article endpoints.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field

from tags.schemas import TagResponse

IMAGE_URL_PATTERN = r"^https?://.+\.(jpg|jpeg|png|webp|gif|svg)(\?.*)?$"

TagLabel = Annotated[str, Field(min_length=1)]


class PublishState(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ArticleCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=30)
    slug: str | None = Field(default=None, min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    image: str | None = Field(default=None, pattern=IMAGE_URL_PATTERN)
    tags: list[TagLabel] = Field(default_factory=list)
    state: PublishState = PublishState.DRAFT


class ArticleUpdate(BaseModel):
    """
    Partial update: only fields present in the request body are written.
    """

    title: str | None = Field(default=None, min_length=2, max_length=30)
    slug: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    body: str | None = Field(default=None, min_length=1)
    image: str | None = Field(default=None, pattern=IMAGE_URL_PATTERN)
    tags: list[TagLabel] | None = None
    state: PublishState | None = None


class AuthorResponse(BaseModel):
    id: int
    username: str


class ArticleResponse(BaseModel):
    id: int
    title: str
    slug: str
    link: str
    description: str
    body: str
    image: str | None = None
    author: AuthorResponse
    tags: list[TagResponse] = Field(default_factory=list)
    favored_by: list[int] = Field(default_factory=list)
    favored_count: int = 0
    state: PublishState = PublishState.DRAFT
    created_at: datetime
    updated_at: datetime
