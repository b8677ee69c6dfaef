"""Chat modes: named presets for the system prompt and sampling parameters."""

from dataclasses import dataclass
from enum import Enum


class ChatMode(str, Enum):
    GENERAL = "general"
    CREATIVE = "creative"
    PRECISE = "precise"
    CONCISE = "concise"


@dataclass(frozen=True)
class ModePreset:
    name: str
    prompt: str
    temperature: float
    max_tokens: int


MODE_PRESETS: dict[ChatMode, ModePreset] = {
    ChatMode.GENERAL: ModePreset(
        name="General assistant",
        prompt=(
            "You are a helpful assistant. Answer in a friendly, professional tone. "
            "Break multi-part answers into points, avoid jargon unless asked for it, "
            "and say so when you are unsure."
        ),
        temperature=0.7,
        max_tokens=2000,
    ),
    ChatMode.CREATIVE: ModePreset(
        name="Creative",
        prompt=(
            "You are a creative assistant for writing and brainstorming. "
            "Offer unusual angles, use metaphor and analogy freely, and keep the tone encouraging."
        ),
        temperature=0.9,
        max_tokens=2500,
    ),
    ChatMode.PRECISE: ModePreset(
        name="Precise",
        prompt=(
            "You are a careful, exact assistant. Ground answers in reliable facts, "
            "give concrete details in a clear structure, and state any uncertainty explicitly."
        ),
        temperature=0.3,
        max_tokens=1500,
    ),
    ChatMode.CONCISE: ModePreset(
        name="Concise",
        prompt=(
            "You are a brief assistant. Answer directly with short bullet points "
            "of no more than two sentences each, and skip background the user did not ask for."
        ),
        temperature=0.5,
        max_tokens=800,
    ),
}


def get_preset(mode: ChatMode | str) -> ModePreset:
    """Preset for mode; raises ValueError for an unknown mode name."""
    return MODE_PRESETS[ChatMode(mode)]
