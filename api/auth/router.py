"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from . import dependencies, schemas, service

router = APIRouter()


@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
async def register(request: schemas.RegisterRequest) -> schemas.AuthResponse:
    return await service.register(request)


@router.post("/auth/login")
async def login(request: schemas.LoginRequest) -> schemas.AuthResponse:
    return await service.login(request)


@router.get("/auth/me")
async def me(current_user: dict = Depends(dependencies.get_current_user)) -> schemas.UserResponse:
    return service.me(current_user)
