"""
Conversation with the culinary assistant.

Per turn:  IDLE -> SENDING -> STREAMING -> IDLE,  or  ... -> FAILED -> IDLE.

Transcript entries are immutable ChatMessage models; every change replaces the
entry in a fresh list and is published as a ChatEvent to subscribers, so a
reader holding an earlier transcript never observes a half-applied update.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator, AsyncIterator, Callable, List, Optional

from fridgechef.config import settings
from fridgechef.constants import (
    CHAT_GREETING,
    CHAT_INIT_FAILED,
    CHAT_SYSTEM_INSTRUCTION,
    CHAT_TURN_FAILED,
    language_name,
)
from fridgechef.models.chat import ChatEvent, ChatMessage, ChatState
from fridgechef.models.state import ChatMessageView, ChatTranscript
from fridgechef.services.ai_client import ChatSession, RecipeAI
from fridgechef.services.translation_cache import InFlightTracker, Translator
from fridgechef.utils.exceptions import (
    ChatBusyError,
    ChatUnavailableError,
    GeminiError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ChatListener = Callable[[ChatEvent], None]

_TRANSCRIPT_OWNER = "chat"


class StreamAccumulator:
    """
    Running text of a streamed reply.

    Every fragment carries the cumulative reply so far (the chat session
    turns transport deltas into running text), so a non-empty fragment
    replaces the current text. Empty fragments change nothing.
    """

    def __init__(self) -> None:
        self.text = ""

    def apply(self, fragment: Optional[str]) -> str:
        if fragment:
            self.text = fragment
        return self.text


class ChatTurn:
    """One user turn, claimed synchronously and run once, either awaited or streamed."""

    def __init__(self, orchestrator: "ChatOrchestrator", session: ChatSession, text: str,
                 opening_events: List[ChatEvent]) -> None:
        self._orchestrator = orchestrator
        self._session = session
        self._text = text
        self._opening_events = opening_events
        self._started = False

    async def wait(self) -> ChatMessage:
        """Run the turn to completion and return the last transcript entry."""
        if self._started:
            raise RuntimeError("Chat turn already started")
        self._started = True
        await self._orchestrator._run_turn(self._session, self._text)
        return self._orchestrator.messages[-1]

    def events(self) -> AsyncGenerator[ChatEvent, None]:
        """
        Start the turn now and return every transcript change in order.

        The turn runs to completion even if the stream is never read. A reader
        that stops early cancels the turn, which then ends as a failed turn.
        Must be called with an event loop running.
        """
        queue: asyncio.Queue[Optional[ChatEvent]] = asyncio.Queue()
        unsubscribe = self._orchestrator.subscribe(queue.put_nowait)
        task = asyncio.create_task(self._run(queue, unsubscribe))
        return self._drain(queue, task, unsubscribe)

    async def _run(self, queue: asyncio.Queue[Optional[ChatEvent]], unsubscribe: Callable[[], None]) -> None:
        try:
            await self.wait()
        finally:
            unsubscribe()
            queue.put_nowait(None)

    async def _drain(
        self, queue: asyncio.Queue[Optional[ChatEvent]], task: asyncio.Task[None], unsubscribe: Callable[[], None]
    ) -> AsyncIterator[ChatEvent]:
        try:
            for event in self._opening_events:
                yield event
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
            await task
        finally:
            if not task.done():
                logger.info("Chat stream closed early, cancelling the turn")
                task.cancel()
                if not self._started:
                    # A task cancelled before its first step never runs _run_turn.
                    unsubscribe()
                    self._orchestrator._fail_turn(None)


class ChatOrchestrator:
    def __init__(self, ai: RecipeAI, translator: Translator) -> None:
        self.ai = ai
        self.translator = translator
        self.language = translator.default_language or settings.default_language
        self.is_open = False

        self._session: Optional[ChatSession] = None
        self._messages: List[ChatMessage] = []
        self._state = ChatState.IDLE
        self._listeners: List[ChatListener] = []
        self._translating = InFlightTracker()
        self._initialized = False

    # ---------------------------------------------------------------------
    # Read access
    # ---------------------------------------------------------------------

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def available(self) -> bool:
        return self._session is not None

    def display_messages(self, language: Optional[str] = None) -> List[ChatMessageView]:
        """Transcript as shown in `language`; untranslated messages keep their original text."""
        lang = language or self.language
        return [
            ChatMessageView(
                id=m.id,
                role=m.role,
                text=m.display_text(lang),
                groundingChunks=m.groundingChunks,
                isStreaming=m.isStreaming,
            )
            for m in self._messages
        ]

    def transcript(self, language: Optional[str] = None) -> ChatTranscript:
        lang = language or self.language
        return ChatTranscript(
            language=lang,
            state=self._state,
            available=self.available,
            isOpen=self.is_open,
            isTranslating=self._translating.is_running(_TRANSCRIPT_OWNER, lang),
            messages=self.display_messages(lang),
        )

    def subscribe(self, listener: ChatListener) -> Callable[[], None]:
        """Register for transcript events. Returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the assistant session once. Failure leaves an inert, apologetic transcript."""
        if self._initialized:
            return
        self._initialized = True
        try:
            self._session = await self.ai.create_chat_session(CHAT_SYSTEM_INSTRUCTION)
        except Exception as e:
            # Chat is optional; the rest of the app keeps working without it.
            logger.error("Failed to initialize chat: %s", str(e), exc_info=True)
            self._session = None
            self._append(ChatMessage(role="model", text=CHAT_INIT_FAILED))
            return
        self._append(ChatMessage(role="model", text=CHAT_GREETING))

    def set_open(self, is_open: bool) -> None:
        self.is_open = is_open

    def set_language(self, language: str) -> None:
        if language_name(language) is None:
            raise ValidationError(f"Unsupported language: {language}")
        self.language = language

    # ---------------------------------------------------------------------
    # Turns
    # ---------------------------------------------------------------------

    def send_message(self, text: str) -> ChatTurn:
        """
        Append the user's message and claim the turn.

        Raises:
            ValidationError: blank message
            ChatUnavailableError: chat failed to initialize
            ChatBusyError: a reply is still being produced
        """
        clean = (text or "").strip()
        if not clean:
            raise ValidationError("Message cannot be empty")
        if self._session is None:
            raise ChatUnavailableError("The chat assistant is not available")
        if self._state != ChatState.IDLE:
            raise ChatBusyError("The assistant is still answering the previous message")

        opening = [
            self._append(ChatMessage(role="user", text=clean)),
            self._set_state(ChatState.SENDING),
        ]
        return ChatTurn(self, self._session, clean, opening)

    def stream_message(self, text: str) -> AsyncGenerator[ChatEvent, None]:
        """Claim and start the turn now (raising like send_message) and return its event stream."""
        return self.send_message(text).events()

    async def _run_turn(self, session: ChatSession, text: str) -> None:
        accumulator = StreamAccumulator()
        reply: Optional[ChatMessage] = None
        citations = []
        try:
            async for chunk in session.send_message_stream(text):
                accumulated = accumulator.apply(chunk.text)
                citations = chunk.groundingChunks
                if reply is None:
                    self._set_state(ChatState.STREAMING)
                    reply = ChatMessage(role="model", text=accumulated, isStreaming=True)
                    self._append(reply)
                else:
                    reply = self._replace(reply.id, "message_updated", text=accumulated)

            if reply is None:
                raise GeminiError("The assistant returned an empty reply")

            self._replace(reply.id, "message_completed", isStreaming=False, groundingChunks=citations)
            self._set_state(ChatState.IDLE)
            logger.info("Chat turn completed", extra={"reply_length": len(accumulator.text)})
        except Exception as e:
            logger.error("Chat error: %s", str(e), exc_info=True)
            self._fail_turn(reply)
        finally:
            # Cancellation skips the except branch; still close the turn.
            if self._state != ChatState.IDLE:
                self._fail_turn(reply)

    def _fail_turn(self, reply: Optional[ChatMessage]) -> None:
        if reply is not None:
            current = self._find(reply.id)
            if current is not None and current.isStreaming:
                self._replace(reply.id, "message_completed", isStreaming=False)
        self._set_state(ChatState.FAILED)
        self._append(ChatMessage(role="model", text=CHAT_TURN_FAILED))
        self._set_state(ChatState.IDLE)

    # ---------------------------------------------------------------------
    # Translation
    # ---------------------------------------------------------------------

    async def translate_transcript(self, language: Optional[str] = None) -> bool:
        """
        Translate every finished message that has no translation for `language`.

        Returns False when the batch failed (nothing is recorded) or when a
        translation into the same language is already running.
        """
        lang = language or self.language
        if lang == self.translator.default_language:
            return True
        if not self._translating.begin(_TRANSCRIPT_OWNER, lang):
            return False

        try:
            pending = [m for m in self._messages if not m.isStreaming and lang not in m.translations]
            if not pending:
                return True

            translated = await self.translator.try_translate([m.text for m in pending], lang)
            if translated is None:
                return False

            for message, text in zip(pending, translated):
                current = self._find(message.id)
                if current is None or current.text != message.text:
                    continue
                self._replace(message.id, "message_updated", translations={**current.translations, lang: text})
            return True
        finally:
            self._translating.end(_TRANSCRIPT_OWNER, lang)

    # ---------------------------------------------------------------------
    # Transcript mutation (the only place messages change)
    # ---------------------------------------------------------------------

    def _publish(self, event: ChatEvent) -> ChatEvent:
        for listener in list(self._listeners):
            listener(event)
        return event

    def _set_state(self, state: ChatState) -> ChatEvent:
        self._state = state
        return self._publish(ChatEvent(type="state_changed", state=state))

    def _append(self, message: ChatMessage) -> ChatEvent:
        self._messages = self._messages + [message]
        return self._publish(ChatEvent(type="message_appended", state=self._state, message=message))

    def _find(self, message_id: str) -> Optional[ChatMessage]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def _replace(self, message_id: str, event_type: str, **changes) -> ChatMessage:
        updated: Optional[ChatMessage] = None
        messages = []
        for message in self._messages:
            if message.id == message_id:
                updated = message.model_copy(update=changes)
                messages.append(updated)
            else:
                messages.append(message)
        if updated is None:
            raise KeyError(message_id)
        self._messages = messages
        self._publish(ChatEvent(type=event_type, state=self._state, message=updated))
        return updated
