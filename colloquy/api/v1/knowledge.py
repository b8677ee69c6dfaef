"""Knowledge item CRUD scoped to the session owner."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from colloquy.api.deps import CurrentIdentity
from colloquy.core.database import get_db
from colloquy.core.errors import NotFound
from colloquy.core.sessions import Identity
from colloquy.models import KnowledgeItem
from colloquy.schemas.knowledge import (
    KnowledgeCreate,
    KnowledgeListResponse,
    KnowledgeOut,
    KnowledgeUpdate,
)

router = APIRouter()


def _owned_item(db: Session, identity: Identity, item_id: str) -> KnowledgeItem:
    item = (
        db.query(KnowledgeItem)
        .filter(KnowledgeItem.id == item_id, KnowledgeItem.user_id == identity.id)
        .first()
    )
    if item is None:
        raise NotFound("knowledge item")
    return item


@router.get("", response_model=KnowledgeListResponse)
def list_knowledge(
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
    category: Annotated[str | None, Query(max_length=64)] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> KnowledgeListResponse:
    query = db.query(KnowledgeItem).filter(KnowledgeItem.user_id == identity.id)
    if category:
        query = query.filter(KnowledgeItem.category == category)
    total = query.count()
    rows = (
        query.order_by(KnowledgeItem.updated_at.desc(), KnowledgeItem.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return KnowledgeListResponse(items=[KnowledgeOut.model_validate(k) for k in rows], total=total)


@router.post("", response_model=KnowledgeOut, status_code=status.HTTP_201_CREATED)
def create_knowledge(
    body: KnowledgeCreate,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> KnowledgeOut:
    item = KnowledgeItem(user_id=identity.id, **body.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    return KnowledgeOut.model_validate(item)


@router.get("/{item_id}", response_model=KnowledgeOut)
def get_knowledge(
    item_id: str,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> KnowledgeOut:
    return KnowledgeOut.model_validate(_owned_item(db, identity, item_id))


@router.patch("/{item_id}", response_model=KnowledgeOut)
def update_knowledge(
    item_id: str,
    body: KnowledgeUpdate,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> KnowledgeOut:
    item = _owned_item(db, identity, item_id)
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return KnowledgeOut.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_knowledge(
    item_id: str,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    item = _owned_item(db, identity, item_id)
    db.delete(item)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
