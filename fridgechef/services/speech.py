"""Speech synthesis / recognition capability and voice command parsing."""

import logging
from enum import Enum
from typing import AsyncIterator, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class VoiceCommand(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


def parse_voice_command(transcript: Optional[str]) -> Optional[VoiceCommand]:
    """Map a recognized utterance to a step command; anything else is ignored."""
    text = (transcript or "").strip().lower()
    if "next" in text:
        return VoiceCommand.NEXT
    if "previous" in text or "back" in text:
        return VoiceCommand.PREVIOUS
    return None


class SpeechCapability(Protocol):
    """Host-provided text-to-speech and speech-to-text."""

    supported: bool

    def speak(self, text: str, language: str, on_end: Optional[Callable[[], None]] = None) -> None:
        ...

    def cancel(self) -> None:
        ...

    def recognize(self, language: str) -> AsyncIterator[str]:
        """Yield transcripts until recognition stops."""
        ...


class UnsupportedSpeech:
    """Used when the host has no speech facilities; every call is a silent no-op."""

    supported = False

    def speak(self, text: str, language: str, on_end: Optional[Callable[[], None]] = None) -> None:
        logger.debug("Speech synthesis unavailable, not speaking")

    def cancel(self) -> None:
        pass

    async def recognize(self, language: str) -> AsyncIterator[str]:
        return
        yield  # pragma: no cover
