"""
Pydantic schemas for tag endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel


class TagResponse(BaseModel):
    id: int
    label: str
