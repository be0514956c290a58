"""Chat transcript models."""

import uuid
from enum import Enum
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

ChatRole = Literal["user", "model"]


class ChatState(str, Enum):
    """Lifecycle of a single chat turn."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    FAILED = "failed"


class GroundingChunk(BaseModel):
    """Web citation attached to a model reply."""

    uri: str
    title: Optional[str] = None


class ChatMessage(BaseModel):
    """One transcript entry. Instances are replaced, never mutated in place."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: ChatRole
    text: str = Field("", description="Canonical, untranslated content")
    translations: Dict[str, str] = Field(default_factory=dict, description="Language code -> translated text")
    groundingChunks: List[GroundingChunk] = Field(default_factory=list)
    isStreaming: bool = Field(False, description="True while the model reply is still arriving")

    def display_text(self, language: str) -> str:
        return self.translations.get(language) or self.text


class ChatStreamChunk(BaseModel):
    """A chat stream update; `text` is the whole reply received so far."""

    text: str = ""
    groundingChunks: List[GroundingChunk] = Field(default_factory=list)


class ChatEvent(BaseModel):
    """Update published by the chat orchestrator for every transcript change."""

    type: Literal["message_appended", "message_updated", "message_completed", "state_changed"]
    state: ChatState
    message: Optional[ChatMessage] = None
