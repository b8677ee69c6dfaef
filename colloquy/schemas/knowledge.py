"""Request/response schemas for knowledge items."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class KnowledgeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(default="", max_length=100000)
    category: str = Field(default="general", min_length=1, max_length=64)
    tags: str = Field(default="", max_length=512, description="Comma-separated tags")
    source: str = Field(default="manual", min_length=1, max_length=64)


class KnowledgeUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, max_length=100000)
    category: str | None = Field(default=None, min_length=1, max_length=64)
    tags: str | None = Field(default=None, max_length=512)


class KnowledgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    category: str
    tags: str
    source: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class KnowledgeListResponse(BaseModel):
    items: list[KnowledgeOut]
    total: int
