"""Project CRUD scoped to the session owner."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from colloquy.api.deps import CurrentIdentity
from colloquy.core.database import get_db
from colloquy.core.errors import NotFound
from colloquy.core.sessions import Identity
from colloquy.models import Project, ProjectStatus
from colloquy.schemas.projects import ProjectCreate, ProjectOut, ProjectsListResponse, ProjectUpdate

router = APIRouter()


def _owned_project(db: Session, identity: Identity, project_id: str) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.owner_id == identity.id)
        .first()
    )
    if project is None:
        raise NotFound("project")
    return project


@router.get("", response_model=ProjectsListResponse)
def list_projects(
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
    project_status: Annotated[ProjectStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ProjectsListResponse:
    query = db.query(Project).filter(Project.owner_id == identity.id)
    if project_status is not None:
        query = query.filter(Project.status == project_status.value)
    total = query.count()
    rows = query.order_by(Project.updated_at.desc(), Project.id).offset(offset).limit(limit).all()
    return ProjectsListResponse(projects=[ProjectOut.model_validate(p) for p in rows], total=total)


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    body: ProjectCreate,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> ProjectOut:
    project = Project(
        owner_id=identity.id,
        name=body.name.strip(),
        description=body.description,
        status=body.status.value,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return ProjectOut.model_validate(project)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: str,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> ProjectOut:
    return ProjectOut.model_validate(_owned_project(db, identity, project_id))


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: str,
    body: ProjectUpdate,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> ProjectOut:
    project = _owned_project(db, identity, project_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        project.name = changes["name"].strip()
    if "description" in changes:
        project.description = changes["description"]
    if "status" in changes:
        project.status = ProjectStatus(changes["status"]).value
    db.commit()
    db.refresh(project)
    return ProjectOut.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: str,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    project = _owned_project(db, identity, project_id)
    db.delete(project)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
