"""Request/response schemas for project CRUD."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from colloquy.models.project import ProjectStatus


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=20000)
    status: ProjectStatus = ProjectStatus.DRAFT


class ProjectUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=20000)
    status: ProjectStatus | None = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    status: ProjectStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProjectsListResponse(BaseModel):
    projects: list[ProjectOut]
    total: int
