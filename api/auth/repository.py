"""
Auth persistence helpers.
"""

from __future__ import annotations

from core import db


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    *,
    email: str,
    username: str,
    password_hash: str,
    is_active: bool = True,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (email, username, password_hash, is_active)
        VALUES ($1, $2, $3, $4)
        RETURNING id, email, username, is_active, created_at, updated_at
        """,
        normalize_email(email),
        username.strip(),
        password_hash,
        is_active,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, username, password_hash, is_active, created_at, updated_at
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_username(username: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, username, is_active, created_at, updated_at
        FROM users
        WHERE username = $1
        """,
        (username or "").strip(),
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, username, password_hash, is_active, created_at, updated_at
        FROM users
        WHERE id = $1
        """,
        user_id,
    )
