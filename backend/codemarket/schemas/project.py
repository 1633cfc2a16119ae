# codemarket/schemas/project.py
"""
Pydantic schemas for project listing endpoints.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def split_technologies(value) -> list[str]:
    """
    Accept either a list of tags or the comma-separated string sent by the
    upload form ("React, Node.js ,") and return trimmed, non-empty tags.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(t).strip() for t in value if str(t).strip()]


class ProjectCreateIn(BaseModel):
    """
    Text fields of the multipart upload form.
    Files (code archive, preview) are handled separately by the route.
    """
    title: str = Field(min_length=1, max_length=256)
    description: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=64)
    technologies: List[str] = []

    @field_validator("technologies", mode="before")
    @classmethod
    def _split_technologies(cls, v):
        return split_technologies(v)


class ProjectUpdateIn(BaseModel):
    """
    Partial update of a listed project (seller only).
    Only provided fields are changed.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    technologies: Optional[List[str]] = None

    @field_validator("technologies", mode="before")
    @classmethod
    def _split_technologies(cls, v):
        if v is None:
            return None
        return split_technologies(v)
