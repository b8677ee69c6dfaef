"""Chat endpoint: send a message to the upstream LLM and store the exchange."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from colloquy.api.deps import AppSettings, CurrentIdentity, get_llm_client
from colloquy.core.database import get_db
from colloquy.schemas.chat import ChatModeOut, ChatModesResponse, ChatRequest, ChatResponse
from colloquy.services.chat import send_message
from colloquy.services.llm import ChatCompletionClient
from colloquy.services.modes import MODE_PRESETS

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def post_chat(
    body: ChatRequest,
    identity: CurrentIdentity,
    settings: AppSettings,
    llm: Annotated[ChatCompletionClient, Depends(get_llm_client)],
    db: Annotated[Session, Depends(get_db)],
) -> ChatResponse:
    """
    Send a message, optionally continuing conversationId and answering in a preset mode.

    Requires a valid session. Provider failures come back as a classified error
    (quota_exhausted, invalid_credential, rate_limited, context_too_long, timeout, unknown)
    with a user-facing message.
    """
    result = await send_message(
        db, identity, body.message, body.conversation_id, llm, settings, mode=body.mode
    )
    return ChatResponse(response=result.reply, conversation_id=result.conversation_id)


@router.get("/modes", response_model=ChatModesResponse)
def list_modes() -> ChatModesResponse:
    """Available chat modes. Public: the presets carry no user data."""
    return ChatModesResponse(
        modes=[
            ChatModeOut(id=mode, name=p.name, temperature=p.temperature, max_tokens=p.max_tokens)
            for mode, p in MODE_PRESETS.items()
        ]
    )
