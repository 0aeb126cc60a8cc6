"""Chat message lifecycle: optimistic sends, reveal animation, feedback."""

import uuid
from datetime import UTC, datetime
from typing import Protocol

import structlog

from docquery.chat.reveal import TICK_INTERVAL, RevealAnimation
from docquery.chat.scheduler import Scheduler, TimerHandle
from docquery.chat.scroll import ScrollTracker
from docquery.core.exceptions import (
    RECOVERABLE_ERRORS,
    MessageNotFoundError,
    get_error_message,
)
from docquery.schemas.chat_schema import ChatSession, FeedbackVerdict, LocalMessage
from docquery.services.chat_service import ChatService

logger = structlog.get_logger()

CREATE_SESSION_FAILED = "Failed to create chat session"
LOAD_SESSION_FAILED = "Failed to load chat session"

STARTER_SUGGESTIONS = (
    "Summarize the key insights from my documents",
    "Find information about...",
    "Analyze the trends and patterns in",
    "Explain in simple terms:",
)


class ChatView(Protocol):
    """What the controller needs from whatever renders the conversation."""

    def render(self, messages: list[LocalMessage]) -> None: ...

    def show_error(self, message: str) -> None: ...

    def clear_composer(self) -> None: ...

    def focus_composer(self) -> None: ...


class NullView:
    """Headless view; discards every update."""

    def render(self, messages: list[LocalMessage]) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass

    def clear_composer(self) -> None:
        pass

    def focus_composer(self) -> None:
        pass


def _local_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


class ChatController:
    """Drives one conversation view.

    Every mutation replaces `messages` with a new list and is followed by a
    render and an auto-scroll attempt. Async continuations only write state
    if their conversation generation is still current; `load_existing`,
    `new_conversation` and `close` start a new generation.
    """

    def __init__(
        self,
        chat_service: ChatService,
        *,
        scheduler: Scheduler,
        view: ChatView | None = None,
        scroll: ScrollTracker | None = None,
    ) -> None:
        self._chat = chat_service
        self._scheduler = scheduler
        self._view = view or NullView()
        self._scroll = scroll

        self.messages: list[LocalMessage] = []
        self.session: ChatSession | None = None
        self.selected_document_ids: list[int] = []
        self.suggestions: list[str] = []

        self._suggestion_index = 0
        self._inflight: object | None = None
        self._loading: object | None = None
        self._generation = 0
        self._closed = False

        self._reveal: RevealAnimation | None = None
        self._reveal_message_id: str | None = None
        self._reveal_timer: TimerHandle | None = None

    @property
    def is_sending(self) -> bool:
        return self._inflight is not None

    @property
    def is_revealing(self) -> bool:
        return self._reveal is not None

    @property
    def closed(self) -> bool:
        return self._closed

    # --- Sending ---

    async def submit(self, text: str) -> bool:
        """Send a user message. Returns False if the submission was dropped."""
        text = text.strip()
        if not text or self._closed:
            return False
        if self._inflight is not None or self._loading is not None:
            return False

        token = object()
        self._inflight = token
        generation = self._generation

        now = datetime.now(UTC)
        user_message = LocalMessage(
            id=_local_id("local"),
            role="user",
            content=text,
            displayed_content=text,
            created_at=now,
        )
        placeholder = LocalMessage(
            id=_local_id("pending"),
            role="assistant",
            content="",
            created_at=now,
            is_loading=True,
        )
        self.messages = [*self.messages, user_message, placeholder]
        self._view.clear_composer()
        self._changed()

        try:
            await self._send(text, generation)
        finally:
            if self._inflight is token:
                self._inflight = None
            if self._is_current(generation):
                self._view.focus_composer()
        return True

    async def _send(self, text: str, generation: int) -> None:
        if self.session is None:
            try:
                session = await self._chat.create_session(
                    document_ids=self.selected_document_ids or None
                )
            except RECOVERABLE_ERRORS as exc:
                if not self._is_current(generation):
                    return
                logger.warning("Failed to create chat session", error=get_error_message(exc))
                self._drop_placeholder()
                self._view.show_error(CREATE_SESSION_FAILED)
                return
            if not self._is_current(generation):
                logger.info("Discarding stale session", session_id=session.id)
                return
            self.session = session

        session_id = self.session.id
        try:
            response = await self._chat.send_message(
                session_id, text, self.selected_document_ids or None
            )
        except RECOVERABLE_ERRORS as exc:
            if not self._is_current(generation):
                return
            message = get_error_message(exc)
            logger.warning("Message send failed", session_id=session_id, error=message)
            self._drop_placeholder()
            self._view.show_error(message)
            return

        # A load may have swapped the session while the send was pending.
        if (
            not self._is_current(generation)
            or self.session is None
            or self.session.id != session_id
        ):
            logger.info("Discarding stale response", session_id=session_id)
            return

        assistant = LocalMessage.from_server(response.message, streaming=True)
        self.messages = [m for m in self.messages if not m.is_loading] + [assistant]
        self.session = response.session
        self.suggestions = list(response.suggested_questions)
        self._suggestion_index = 0
        self._changed()
        self._start_reveal(assistant.id, assistant.content)

    # --- History ---

    async def load_existing(self, session_id: int) -> bool:
        """Replace the conversation with a stored session's history."""
        self._supersede()
        generation = self._generation
        token = object()
        self._loading = token
        try:
            session = await self._chat.get_session(session_id)
        except RECOVERABLE_ERRORS as exc:
            if not self._is_current(generation):
                return False
            logger.warning(
                "Failed to load chat session",
                session_id=session_id,
                error=get_error_message(exc),
            )
            self._view.show_error(LOAD_SESSION_FAILED)
            self._reset()
            return False
        finally:
            self._clear_loading(token)

        if not self._is_current(generation):
            return False

        self.session = session
        self.messages = [LocalMessage.from_server(m) for m in session.messages]
        self.selected_document_ids = list(session.document_ids)
        self.suggestions = []
        self._suggestion_index = 0
        self._changed()
        return True

    def new_conversation(self) -> None:
        self._supersede()
        self._reset()

    # --- Feedback ---

    async def feedback(
        self,
        message_id: str,
        verdict: FeedbackVerdict,
        text: str | None = None,
    ) -> bool:
        """Record a verdict; failures are logged and never shown to the user."""
        if self._find(message_id) is None or not message_id.isdigit():
            raise MessageNotFoundError
        try:
            await self._chat.submit_feedback(int(message_id), verdict, text)
        except RECOVERABLE_ERRORS as exc:
            logger.exception(
                "Failed to submit feedback",
                message_id=message_id,
                error=get_error_message(exc),
            )
            return False
        if self._closed:
            return False
        # Looked up again: the list may have changed while the call was pending.
        if not self._update_message(message_id, feedback=verdict):
            return False
        self._changed()
        return True

    # --- Document scoping and suggestions ---

    def toggle_document(self, document_id: int) -> None:
        if document_id in self.selected_document_ids:
            self.selected_document_ids = [
                d for d in self.selected_document_ids if d != document_id
            ]
        else:
            self.selected_document_ids = [*self.selected_document_ids, document_id]

    def toggle_all_documents(self, document_ids: list[int]) -> None:
        if len(self.selected_document_ids) == len(document_ids):
            self.selected_document_ids = []
        else:
            self.selected_document_ids = list(document_ids)

    def next_suggestion(self) -> str:
        """Cycle through follow-up suggestions, or the starters when there are none."""
        pool = self.suggestions or list(STARTER_SUGGESTIONS)
        suggestion = pool[self._suggestion_index % len(pool)]
        self._suggestion_index += 1
        return suggestion

    # --- Teardown ---

    def close(self) -> None:
        """Stop timers; later ticks and completions no longer touch state."""
        self._closed = True
        self._generation += 1
        self._inflight = None
        self._loading = None
        self._cancel_reveal()

    # --- Reveal animation ---

    def _start_reveal(self, message_id: str, content: str) -> None:
        self._settle_reveal()
        animation = RevealAnimation(content)
        if not content:
            self._apply_reveal(message_id, animation.settle(), done=True)
            return
        self._reveal = animation
        self._reveal_message_id = message_id
        self._reveal_timer = self._scheduler.call_every(TICK_INTERVAL, self._on_reveal_tick)

    def _on_reveal_tick(self) -> None:
        animation = self._reveal
        message_id = self._reveal_message_id
        if self._closed or animation is None or message_id is None:
            self._cancel_reveal()
            return
        displayed = animation.tick()
        if animation.settled:
            self._cancel_reveal()
        self._apply_reveal(message_id, displayed, done=animation.settled)

    def _settle_reveal(self) -> None:
        """Finish a running animation at once so its message is complete."""
        animation = self._reveal
        message_id = self._reveal_message_id
        self._cancel_reveal()
        if animation is not None and message_id is not None:
            self._apply_reveal(message_id, animation.settle(), done=True)

    def _cancel_reveal(self) -> None:
        if self._reveal_timer is not None:
            self._reveal_timer.cancel()
        self._reveal_timer = None
        self._reveal = None
        self._reveal_message_id = None

    def _apply_reveal(self, message_id: str, displayed: str, done: bool) -> None:
        if self._update_message(
            message_id, displayed_content=displayed, is_streaming=not done
        ):
            self._changed()

    # --- State helpers ---

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _supersede(self) -> None:
        self._generation += 1
        self._inflight = None
        self._loading = None
        self._cancel_reveal()

    def _clear_loading(self, token: object) -> None:
        if self._loading is token:
            self._loading = None

    def _reset(self) -> None:
        self.messages = []
        self.session = None
        self.selected_document_ids = []
        self.suggestions = []
        self._suggestion_index = 0
        self._changed()

    def _find(self, message_id: str) -> LocalMessage | None:
        return next((m for m in self.messages if m.id == message_id), None)

    def _update_message(self, message_id: str, **changes: object) -> bool:
        found = False
        updated: list[LocalMessage] = []
        for message in self.messages:
            if message.id == message_id:
                message = message.model_copy(update=changes)
                found = True
            updated.append(message)
        if found:
            self.messages = updated
        return found

    def _drop_placeholder(self) -> None:
        self.messages = [m for m in self.messages if not m.is_loading]
        self._changed()

    def _changed(self) -> None:
        self._view.render(self.messages)
        if self._scroll is not None:
            self._scroll.follow()
