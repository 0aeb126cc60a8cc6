"""Tests for the terminal shell's transcript rendering and viewport."""

from docquery.chat.scroll import ScrollTracker
from docquery.schemas.chat_schema import LocalMessage, Source
from docquery.shell import TerminalViewport, transcript_lines
from tests.factories import NOW


def _message(**fields: object) -> LocalMessage:
    defaults = {"id": "1", "role": "assistant", "content": "", "created_at": NOW}
    return LocalMessage(**{**defaults, **fields})


class TestTranscriptLines:
    """Plain-text projection of the message list."""

    def test_placeholder(self) -> None:
        assert transcript_lines([_message(id="pending-1", is_loading=True)]) == [
            "assistant: thinking..."
        ]

    def test_shows_revealed_prefix_with_cursor(self) -> None:
        message = _message(content="Hello world", displayed_content="Hel", is_streaming=True)
        assert transcript_lines([message]) == ["assistant [1]: Hel▌"]

    def test_sources_and_feedback_after_reveal(self) -> None:
        source = Source(
            document_id=7,
            document_name="policy.pdf",
            chunk_id=1,
            content="...",
            relevance_score=0.9,
            page=3,
        )
        message = _message(
            content="Yes",
            displayed_content="Yes",
            sources=[source],
            feedback="thumbs_up",
        )
        assert transcript_lines([message]) == [
            "assistant [1]: Yes",
            "    - policy.pdf p.3",
            "    (thumbs_up)",
        ]

    def test_multiline_user_message(self) -> None:
        message = _message(role="user", content="a\nb", displayed_content="a\nb")
        assert transcript_lines([message]) == ["you: a", "    b"]


class TestTerminalViewport:
    """Line-based scrolling."""

    def test_scroll_to_bottom_and_visible(self) -> None:
        viewport = TerminalViewport(client_height=3)
        viewport.lines = [str(i) for i in range(10)]
        viewport.scroll_to_bottom()
        assert viewport.visible() == ["7", "8", "9"]

    def test_scroll_by_is_clamped(self) -> None:
        viewport = TerminalViewport(client_height=3)
        viewport.lines = [str(i) for i in range(5)]
        viewport.scroll_by(-10)
        assert viewport.scroll_top == 0
        viewport.scroll_by(10)
        assert viewport.scroll_top == 2

    def test_tracker_over_terminal_viewport(self) -> None:
        viewport = TerminalViewport(client_height=3)
        viewport.lines = [str(i) for i in range(20)]
        tracker = ScrollTracker(viewport, threshold=2)
        tracker.jump_to_latest()
        viewport.scroll_by(-5)
        tracker.on_scroll()
        assert tracker.show_jump_to_latest
