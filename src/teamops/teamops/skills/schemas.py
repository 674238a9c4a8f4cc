from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    displayOrder: int = Field(99, ge=1)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    displayOrder: Optional[int] = Field(None, ge=1)


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=200)
    displayOrder: int = Field(99, ge=1)


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=200)
    displayOrder: Optional[int] = Field(None, ge=1)


class SkillEvaluationCreate(BaseModel):
    """POST /api/members/{id}/skills request body"""

    skillId: int
    level: int = Field(..., ge=1, le=5)
    evaluatedAt: date
    memo: Optional[str] = Field(None, max_length=500)
