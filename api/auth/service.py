"""
Auth business logic.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        email=str(user_row["email"]),
        username=str(user_row["username"]),
        is_active=bool(user_row["is_active"]),
        created_at=user_row["created_at"],
    )


def _issue_token(user_row: dict) -> schemas.TokenResponse:
    access_token = security.build_access_token(
        user_id=int(user_row["id"]),
        username=str(user_row["username"]),
    )
    return schemas.TokenResponse(access_token=access_token)


async def register(payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    if await repository.get_user_by_email(payload.email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )
    if await repository.get_user_by_username(payload.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username is already taken.",
        )

    password_hash = security.hash_password(payload.password)
    user_row = await repository.create_user(
        email=payload.email,
        username=payload.username,
        password_hash=password_hash,
    )
    logger.info("user_registered id=%s", user_row["id"])
    return schemas.AuthResponse(user=_to_user_response(user_row), tokens=_issue_token(user_row))


async def login(payload: schemas.LoginRequest) -> schemas.AuthResponse:
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    if not bool(user_row.get("is_active", False)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive.",
        )

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    return schemas.AuthResponse(user=_to_user_response(user_row), tokens=_issue_token(user_row))


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        claims = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    user_row = await repository.get_user_by_id(claims.user_id)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
        )
    if not bool(user_row.get("is_active", False)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive.",
        )
    return user_row


def me(user_row: dict) -> schemas.UserResponse:
    return _to_user_response(user_row)
