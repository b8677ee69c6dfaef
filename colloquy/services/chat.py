"""Chat orchestration: forward a user message (plus prior turns) upstream and persist the exchange."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.orm import Session

from colloquy.core.errors import NotFound, Unauthenticated, UpstreamFailure, ValidationFailure
from colloquy.core.sessions import Identity
from colloquy.models import Conversation, Message
from colloquy.services.llm import ChatCompletionClient, ProviderError
from colloquy.services.modes import ChatMode, ModePreset, get_preset

if TYPE_CHECKING:
    from colloquy.core.config import Settings

logger = logging.getLogger(__name__)

TITLE_PREFIX_LEN = 50


@dataclass(frozen=True)
class ChatResult:
    reply: str
    conversation_id: str


def title_from_message(message: str) -> str:
    """First TITLE_PREFIX_LEN characters of the message, with '...' when truncated."""
    text = " ".join(message.split())
    if len(text) <= TITLE_PREFIX_LEN:
        return text
    return text[:TITLE_PREFIX_LEN] + "..."


def get_owned_conversation(db: Session, identity: Identity, conversation_id: str) -> Conversation:
    """Load a conversation owned by identity; someone else's conversation is reported as not found."""
    conversation = (
        db.query(Conversation)
        .filter(Conversation.id == conversation_id, Conversation.user_id == identity.id)
        .first()
    )
    if conversation is None:
        raise NotFound("conversation")
    return conversation


def _build_prompt(
    history: list[Message],
    message: str,
    settings: "Settings",
    preset: ModePreset | None = None,
) -> list[dict[str, str]]:
    prompt: list[dict[str, str]] = []
    # A chosen mode replaces the configured system prompt.
    system_prompt = preset.prompt if preset else settings.CHAT_SYSTEM_PROMPT
    if system_prompt:
        prompt.append({"role": "system", "content": system_prompt})
    limit = settings.CHAT_HISTORY_LIMIT
    recent = history[-limit:] if limit else []
    prompt.extend({"role": m.role, "content": m.content} for m in recent)
    prompt.append({"role": "user", "content": message})
    return prompt


async def send_message(
    db: Session,
    identity: Identity | None,
    message: str,
    conversation_id: str | None,
    llm: ChatCompletionClient,
    settings: "Settings",
    *,
    mode: ChatMode | None = None,
) -> ChatResult:
    """
    Send a message on behalf of identity and return the assistant reply.

    Raises Unauthenticated without an identity (the provider is never called),
    ValidationFailure for a blank message, NotFound for an unknown or foreign
    conversation, and UpstreamFailure (classified) when the provider fails.
    Nothing is persisted unless the provider call succeeds. mode selects a preset
    system prompt, temperature and max_tokens; without it the configured defaults apply.
    """
    if identity is None:
        raise Unauthenticated()

    text = message.strip()
    if not text:
        raise ValidationFailure({"message": "must not be empty"})

    conversation: Conversation | None = None
    history: list[Message] = []
    if conversation_id:
        conversation = get_owned_conversation(db, identity, conversation_id)
        history = list(conversation.messages)

    preset = get_preset(mode) if mode is not None else None

    try:
        reply = await llm.complete(
            _build_prompt(history, text, settings, preset),
            temperature=preset.temperature if preset else None,
            max_tokens=preset.max_tokens if preset else None,
        )
    except ProviderError as e:
        logger.warning(
            "Chat upstream failure",
            extra={"user_id": identity.id, "error_kind": e.kind.value, "detail": e.detail},
        )
        raise UpstreamFailure(e.kind, e.detail) from e

    if conversation is None:
        conversation = Conversation(user_id=identity.id, title=title_from_message(text))
        db.add(conversation)
        db.flush()
        next_position = 0
    else:
        last = (
            db.query(func.max(Message.position))
            .filter(Message.conversation_id == conversation.id)
            .scalar()
        )
        next_position = 0 if last is None else last + 1
        conversation.updated_at = func.now()

    db.add(Message(conversation_id=conversation.id, position=next_position, role="user", content=text))
    db.add(
        Message(conversation_id=conversation.id, position=next_position + 1, role="assistant", content=reply)
    )
    db.commit()

    logger.info(
        "Chat exchange stored",
        extra={"user_id": identity.id, "conversation_id": conversation.id},
    )
    return ChatResult(reply=reply, conversation_id=conversation.id)
