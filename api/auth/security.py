"""
Password hashing and access tokens.

Access tokens are short-lived HS256 JWTs whose subject is the numeric user
id. `decode_access_token()` returns typed claims, so callers never touch the
raw payload.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

import bcrypt
import jwt

from core import settings

TOKEN_TYPE = "access"


class AuthSecurityError(RuntimeError):
    pass


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    algorithm: str
    expire_minutes: int

    @classmethod
    def from_env(cls) -> "TokenSettings":
        # Local default keeps development simple; set JWT_SECRET in production.
        return cls(
            secret=settings.env_str("JWT_SECRET", "dev-change-this-secret"),
            algorithm=settings.env_str("JWT_ALG", "HS256"),
            expire_minutes=settings.env_int("ACCESS_TOKEN_EXPIRE_MIN", 60),
        )


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    username: str
    expires_at: int


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(*, user_id: int, username: str, token_settings: TokenSettings | None = None) -> str:
    cfg = token_settings or TokenSettings.from_env()
    issued_at = int(time.time())
    payload = {
        "sub": str(user_id),
        "username": username,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + cfg.expire_minutes * 60,
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.algorithm)


def decode_access_token(token: str, *, token_settings: TokenSettings | None = None) -> AccessClaims:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    cfg = token_settings or TokenSettings.from_env()
    try:
        payload = jwt.decode(raw, cfg.secret, algorithms=[cfg.algorithm], options={"require": ["sub", "exp"]})
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    if str(payload.get("type") or "").strip().lower() != TOKEN_TYPE:
        raise AuthSecurityError("Token is not an access token.")

    subject = str(payload["sub"]).strip()
    if not subject.isdigit():
        raise AuthSecurityError("Invalid access token subject.")

    return AccessClaims(
        user_id=int(subject),
        username=str(payload.get("username") or ""),
        expires_at=int(payload["exp"]),
    )
