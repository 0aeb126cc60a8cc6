"""Reveal animation: simulated token streaming of an already-complete answer."""

import math
from enum import StrEnum

CHARS_PER_TICK = 3
TICK_INTERVAL = 0.015


class RevealState(StrEnum):
    IDLE = "idle"
    REVEALING = "revealing"
    SETTLED = "settled"


class RevealAnimation:
    """Cursor over `text` advanced by a fixed number of characters per tick.

    IDLE -> REVEALING(cursor) -> SETTLED. `displayed` is always a prefix of
    `text` and equals it once settled.
    """

    def __init__(self, text: str, chars_per_tick: int = CHARS_PER_TICK) -> None:
        if chars_per_tick < 1:
            raise ValueError("chars_per_tick must be positive")
        self.text = text
        self.chars_per_tick = chars_per_tick
        self.cursor = 0
        self.state = RevealState.IDLE

    @property
    def displayed(self) -> str:
        if self.state is RevealState.SETTLED:
            return self.text
        return self.text[: self.cursor]

    @property
    def settled(self) -> bool:
        return self.state is RevealState.SETTLED

    @property
    def total_ticks(self) -> int:
        """Ticks needed to settle; empty text still takes one."""
        return max(1, math.ceil(len(self.text) / self.chars_per_tick))

    def tick(self) -> str:
        """Advance one step and return the text to display."""
        if self.settled:
            return self.text
        self.cursor += self.chars_per_tick
        if self.cursor >= len(self.text):
            self.cursor = len(self.text)
            self.state = RevealState.SETTLED
        else:
            self.state = RevealState.REVEALING
        return self.displayed

    def settle(self) -> str:
        """Jump to the end, e.g. when a newer answer supersedes this one."""
        self.cursor = len(self.text)
        self.state = RevealState.SETTLED
        return self.text
