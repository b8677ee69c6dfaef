"""Pydantic schemas for the dashboard summary."""

from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    """Counts for the signed-in user only."""

    projects: int = Field(description="All projects owned by the user")
    active_projects: int = Field(description="Projects with status ACTIVE")
    conversations: int
    knowledge_items: int
