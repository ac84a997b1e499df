"""Schemas for product comments."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    product_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    product_id: int
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CommentListResponse(BaseModel):
    comments: list[CommentOut]
