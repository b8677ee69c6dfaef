"""Dashboard summary counts for the session owner."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from colloquy.api.deps import CurrentIdentity
from colloquy.core.database import get_db
from colloquy.models import Conversation, KnowledgeItem, Project, ProjectStatus
from colloquy.schemas.dashboard import DashboardStats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> DashboardStats:
    """Owner-scoped counts of projects, conversations and knowledge items."""
    projects = db.query(Project).filter(Project.owner_id == identity.id)
    return DashboardStats(
        projects=projects.count(),
        active_projects=projects.filter(Project.status == ProjectStatus.ACTIVE.value).count(),
        conversations=db.query(Conversation).filter(Conversation.user_id == identity.id).count(),
        knowledge_items=db.query(KnowledgeItem).filter(KnowledgeItem.user_id == identity.id).count(),
    )
