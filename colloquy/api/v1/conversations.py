"""Conversation history: list, read and delete the caller's conversations."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from colloquy.api.deps import CurrentIdentity
from colloquy.core.database import get_db
from colloquy.models import Conversation
from colloquy.schemas.chat import ConversationDetail, ConversationsListResponse, ConversationSummary
from colloquy.services.chat import get_owned_conversation

router = APIRouter()


@router.get("", response_model=ConversationsListResponse)
def list_conversations(
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ConversationsListResponse:
    """Most recently updated first."""
    rows = (
        db.query(Conversation)
        .filter(Conversation.user_id == identity.id)
        .order_by(Conversation.updated_at.desc(), Conversation.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return ConversationsListResponse(
        conversations=[ConversationSummary.model_validate(c) for c in rows]
    )


@router.get("/{conversation_id}", response_model=ConversationDetail)
def get_conversation(
    conversation_id: str,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> ConversationDetail:
    conversation = get_owned_conversation(db, identity, conversation_id)
    return ConversationDetail.model_validate(conversation)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conversation(
    conversation_id: str,
    identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    conversation = get_owned_conversation(db, identity, conversation_id)
    db.delete(conversation)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
