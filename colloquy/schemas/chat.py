"""Pydantic schemas for the chat endpoint and conversation history."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from colloquy.services.modes import ChatMode

MESSAGE_MAX_LEN = 20000


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., max_length=MESSAGE_MAX_LEN, description="User message")
    conversation_id: str | None = Field(
        default=None,
        alias="conversationId",
        description="Existing conversation to continue; omit to start a new one.",
    )
    mode: ChatMode | None = Field(
        default=None,
        description="Preset to answer with; omit for the configured defaults.",
    )


class ChatResponse(BaseModel):
    """Assistant reply plus the conversation it was stored in."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    conversation_id: str = Field(..., alias="conversationId")


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: Literal["user", "assistant"]
    content: str
    created_at: datetime | None = None


class ConversationSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ConversationDetail(ConversationSummary):
    messages: list[MessageOut]


class ConversationsListResponse(BaseModel):
    conversations: list[ConversationSummary]


class ChatModeOut(BaseModel):
    id: ChatMode
    name: str
    temperature: float
    max_tokens: int


class ChatModesResponse(BaseModel):
    """Response for GET /chat/modes."""

    modes: list[ChatModeOut]
