"""
Shared fixtures.

`store` replaces the repository functions of `tags` and `articles` (and
`core.db.transaction`) with an in-memory fake, so service and router tests
run without PostgreSQL. The fake mirrors the SQL semantics the real
repositories rely on: unique tag labels, conditional favourite updates,
newest-first / popular ordering.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from articles import repository as articles_repository
from articles import router as articles_router
from auth import dependencies as auth_dependencies
from core import db, errors
from tags import repository as tags_repository
from tags import router as tags_router

ALICE = {"id": 1, "email": "alice@example.com", "username": "alice", "is_active": True}
BOB = {"id": 2, "email": "bob@example.com", "username": "bob", "is_active": True}


class FakeStore:
    def __init__(self) -> None:
        self.users: dict[int, dict] = {ALICE["id"]: dict(ALICE), BOB["id"]: dict(BOB)}
        self.tags: dict[int, str] = {}
        self.articles: dict[int, dict[str, Any]] = {}
        self.inserted_tag_batches: list[list[str]] = []
        self.tag_lookups = 0
        self.transactions = 0
        self._next_tag_id = 1
        self._next_article_id = 1
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    # -- core.db ------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield object()

    # -- tags.repository ----------------------------------------------------

    def add_tag(self, label: str) -> int:
        tag_id = self._next_tag_id
        self._next_tag_id += 1
        self.tags[tag_id] = label
        return tag_id

    async def find_tags_by_labels(self, labels, *, conn=None):
        self.tag_lookups += 1
        return [{"id": i, "label": label} for i, label in self.tags.items() if label in labels]

    async def insert_tags(self, labels, *, conn=None):
        self.inserted_tag_batches.append(list(labels))
        by_label = {label: i for i, label in self.tags.items()}
        rows = []
        for label in labels:
            tag_id = by_label.get(label)
            if tag_id is None:
                tag_id = self.add_tag(label)
                by_label[label] = tag_id
            rows.append({"id": tag_id, "label": label})
        return rows

    async def get_tags_by_ids(self, tag_ids, *, conn=None):
        return [{"id": i, "label": self.tags[i]} for i in tag_ids if i in self.tags]

    async def list_tags(self, *, limit=100, offset=0):
        rows = sorted(({"id": i, "label": label} for i, label in self.tags.items()), key=lambda r: r["label"])
        return rows[offset : offset + limit]

    # -- articles.repository ------------------------------------------------

    def add_article(self, **overrides) -> dict[str, Any]:
        now = self._tick()
        article_id = self._next_article_id
        self._next_article_id += 1
        slug = overrides.pop("slug", f"article-{article_id}")
        row = {
            "id": article_id,
            "title": "Article",
            "slug": slug,
            "link": f"/article/{slug}",
            "description": "description",
            "body": "body",
            "image": None,
            "author_id": ALICE["id"],
            "tag_ids": [],
            "favored_by": [],
            "favored_count": 0,
            "state": "draft",
            "created_at": now,
            "updated_at": now,
        }
        row.update(overrides)
        self.articles[article_id] = row
        return dict(row)

    async def insert_article(self, *, conn=None, **fields):
        return self.add_article(**fields)

    async def get_article_by_id(self, article_id):
        row = self.articles.get(article_id)
        return dict(row) if row is not None else None

    async def get_article_by_slug(self, slug):
        for row in self.articles.values():
            if row["slug"] == slug:
                return dict(row)
        return None

    async def get_article_author_id(self, article_id):
        row = self.articles.get(article_id)
        return row["author_id"] if row is not None else None

    async def list_articles(self, *, author_id=None, favored_by=None, tag=None, sort=None, limit=20, offset=0):
        rows = list(self.articles.values())
        if author_id is not None:
            rows = [r for r in rows if r["author_id"] == author_id]
        if favored_by is not None:
            rows = [r for r in rows if favored_by in r["favored_by"]]
        if tag is not None:
            rows = [r for r in rows if any(self.tags.get(t) == tag for t in r["tag_ids"])]
        rows.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        if sort == "popular":
            rows.sort(key=lambda r: r["favored_count"], reverse=True)
        return [dict(r) for r in rows[offset : offset + limit]]

    async def update_article(self, article_id, fields, *, conn=None):
        row = self.articles.get(article_id)
        if row is None:
            return None
        for column in articles_repository.UPDATABLE_COLUMNS:
            if column in fields:
                row[column] = fields[column]
        row["updated_at"] = self._tick()
        return dict(row)

    async def delete_article(self, article_id):
        row = self.articles.pop(article_id, None)
        return dict(row) if row is not None else None

    async def add_favorite(self, article_id, *, user_id):
        row = self.articles.get(article_id)
        if row is None:
            return None
        if user_id not in row["favored_by"]:
            row["favored_by"] = row["favored_by"] + [user_id]
            row["favored_count"] += 1
        return dict(row)

    async def remove_favorite(self, article_id, *, user_id):
        row = self.articles.get(article_id)
        if row is None:
            return None
        if user_id in row["favored_by"]:
            row["favored_by"] = [u for u in row["favored_by"] if u != user_id]
            row["favored_count"] -= 1
        return dict(row)

    async def get_authors_by_ids(self, author_ids, *, conn=None):
        return [{"id": i, "username": self.users[i]["username"]} for i in author_ids if i in self.users]


@pytest.fixture()
def store(monkeypatch) -> FakeStore:
    fake = FakeStore()
    monkeypatch.setattr(db, "transaction", fake.transaction)
    for name in ("find_tags_by_labels", "insert_tags", "get_tags_by_ids", "list_tags"):
        monkeypatch.setattr(tags_repository, name, getattr(fake, name))
    for name in (
        "insert_article",
        "get_article_by_id",
        "get_article_by_slug",
        "get_article_author_id",
        "list_articles",
        "update_article",
        "delete_article",
        "add_favorite",
        "remove_favorite",
        "get_authors_by_ids",
    ):
        monkeypatch.setattr(articles_repository, name, getattr(fake, name))
    return fake


@pytest.fixture()
def app(store: FakeStore) -> FastAPI:
    app = FastAPI()
    errors.register_exception_handlers(app)
    app.include_router(articles_router.router)
    app.include_router(tags_router.router)
    return app


def _login_as(app: FastAPI, user: dict | None) -> None:
    if user is None:
        app.dependency_overrides.pop(auth_dependencies.get_current_user, None)
        app.dependency_overrides[auth_dependencies.get_optional_user] = lambda: None
        return
    app.dependency_overrides[auth_dependencies.get_current_user] = lambda: user
    app.dependency_overrides[auth_dependencies.get_optional_user] = lambda: user


@pytest.fixture()
def login_as(app: FastAPI):
    def _set(user: dict | None) -> None:
        _login_as(app, user)

    return _set


@pytest.fixture()
def client(app: FastAPI, login_as) -> TestClient:
    login_as(ALICE)
    return TestClient(app, raise_server_exceptions=False)
