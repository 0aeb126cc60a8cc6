"""Auto-scroll decision for the message list."""

from typing import Protocol

SCROLL_THRESHOLD = 100


class Viewport(Protocol):
    """Scrollable container; units are whatever the renderer measures in."""

    @property
    def scroll_top(self) -> float: ...

    @property
    def scroll_height(self) -> float: ...

    @property
    def client_height(self) -> float: ...

    def scroll_to_bottom(self) -> None: ...


class ScrollTracker:
    """Follows new content only while the user is at (or near) the bottom."""

    def __init__(self, viewport: Viewport, threshold: float = SCROLL_THRESHOLD) -> None:
        self._viewport = viewport
        self._threshold = threshold
        self.at_bottom = True

    @property
    def distance_from_bottom(self) -> float:
        vp = self._viewport
        return vp.scroll_height - vp.scroll_top - vp.client_height

    @property
    def show_jump_to_latest(self) -> bool:
        return not self.at_bottom

    def on_scroll(self) -> None:
        """Re-evaluate after the user scrolls."""
        self.at_bottom = self.distance_from_bottom <= self._threshold

    def follow(self) -> bool:
        """Scroll to the bottom after a content change, unless scrolled up."""
        if not self.at_bottom:
            return False
        self._viewport.scroll_to_bottom()
        return True

    def jump_to_latest(self) -> None:
        self.at_bottom = True
        self._viewport.scroll_to_bottom()
