"""
Flashcard Deck Controller.

One card per study point. The deck owns navigation state (current index,
shuffle order) and autoplay state (enabled flag, interval, countdown).

Autoplay is driven by a single tick source: every tick decrements the
countdown, and the tick that would take it to zero advances the card and
refills the countdown. The countdown display and the card advance can
therefore never drift apart. AutoplayTicker supplies one-second ticks from
an asyncio task and is cancelled as soon as autoplay is disabled or the
deck is closed.
"""
from __future__ import annotations

import asyncio
import random
from collections.abc import Callable, Sequence
from enum import Enum

from loguru import logger

from studybuddy.core.errors import ValidationError

DEFAULT_INTERVAL_MS = 3000


class AutoplaySpeed(int, Enum):
    """Autoplay speeds offered once autoplay is on."""

    SLOW = 12000
    NORMAL = 8000
    FAST = 4000


class DeckEvent(str, Enum):
    """Deck notifications consumed by the autoplay ticker."""

    AUTOPLAY_ON = "autoplay_on"
    AUTOPLAY_OFF = "autoplay_off"
    COUNTDOWN_RESET = "countdown_reset"
    CLOSED = "closed"


# Key name -> deck operation
KEY_BINDINGS: dict[str, str] = {
    "ArrowRight": "next",
    " ": "next",
    "ArrowLeft": "prev",
    "Enter": "toggle_autoplay",
}

EMPTY_MESSAGE = "No content available for flashcards."


class FlashcardDeck:
    """
    Navigation and autoplay state over a list of study points.

    The displayed card is ``points[order[current_index]]``.
    """

    def __init__(
        self,
        points: Sequence[str],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        rng: random.Random | None = None,
    ):
        self.points: list[str] = list(points)
        self.order: list[int] = list(range(len(self.points)))
        self.current_index = 0
        self.autoplay_enabled = False
        self.autoplay_interval_ms = interval_ms
        self.seconds_remaining = self.interval_seconds
        self.closed = False
        self._rng = rng or random.Random()
        self._listeners: list[Callable[[DeckEvent], None]] = []

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def can_navigate(self) -> bool:
        """Previous/Next are disabled for zero or one card."""
        return self.count > 1 and not self.closed

    @property
    def interval_seconds(self) -> int:
        return max(1, self.autoplay_interval_ms // 1000)

    @property
    def current_card(self) -> str | None:
        if self.is_empty:
            return None
        return self.points[self.order[self.current_index]]

    @property
    def position_label(self) -> str:
        if self.is_empty:
            return EMPTY_MESSAGE
        return f"Card {self.current_index + 1} of {self.count}"

    @property
    def progress(self) -> float:
        """Fraction of the deck reached, 0.0 for an empty deck."""
        if self.is_empty:
            return 0.0
        return (self.current_index + 1) / self.count

    @property
    def autoplay_progress(self) -> float:
        """Fraction of the current autoplay interval already elapsed."""
        total = self.interval_seconds
        return (total - self.seconds_remaining) / total

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self) -> None:
        if not self.can_navigate:
            return
        self.current_index = (self.current_index + 1) % self.count
        self._restart_countdown()

    def prev(self) -> None:
        if not self.can_navigate:
            return
        self.current_index = (self.current_index - 1 + self.count) % self.count
        self._restart_countdown()

    def shuffle(self) -> None:
        if self.is_empty or self.closed:
            return
        order = list(self.order)
        self._rng.shuffle(order)
        self.order = order
        self.current_index = 0

    def reset(self) -> None:
        self.current_index = 0
        self.order = list(range(self.count))
        if self.autoplay_enabled:
            self._set_autoplay(False)

    def load(self, points: Sequence[str]) -> None:
        """Replace the study points (e.g. another summarization was selected)."""
        self.points = list(points)
        self.reset()

    # ------------------------------------------------------------------
    # Autoplay
    # ------------------------------------------------------------------

    def toggle_autoplay(self) -> None:
        if self.is_empty or self.closed:
            return
        self._set_autoplay(not self.autoplay_enabled)

    def set_autoplay_speed(self, interval_ms: int) -> None:
        """Pick one of the offered speeds (12000, 8000 or 4000 ms)."""
        try:
            speed = AutoplaySpeed(interval_ms)
        except ValueError:
            allowed = ", ".join(str(s.value) for s in AutoplaySpeed)
            raise ValidationError(f"Autoplay interval must be one of {allowed} ms") from None
        self.autoplay_interval_ms = speed.value
        self.seconds_remaining = self.interval_seconds
        if self.autoplay_enabled:
            self._emit(DeckEvent.COUNTDOWN_RESET)

    def tick(self) -> bool:
        """
        Advance the autoplay clock by one second.

        Returns:
            True when this tick advanced to the next card
        """
        if not self.autoplay_enabled or self.closed or self.is_empty:
            return False
        if self.seconds_remaining <= 1:
            self.current_index = (self.current_index + 1) % self.count
            self.seconds_remaining = self.interval_seconds
            return True
        self.seconds_remaining -= 1
        return False

    # ------------------------------------------------------------------
    # Keyboard and lifecycle
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Apply a key binding; returns False for unbound keys."""
        action = KEY_BINDINGS.get(key)
        if action is None:
            return False
        getattr(self, action)()
        return True

    def subscribe(self, listener: Callable[[DeckEvent], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[DeckEvent], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def close(self) -> None:
        """Tear down: stop autoplay and refuse further ticks."""
        if self.closed:
            return
        self.autoplay_enabled = False
        self.closed = True
        self._emit(DeckEvent.CLOSED)
        self._listeners.clear()

    def _set_autoplay(self, enabled: bool) -> None:
        self.autoplay_enabled = enabled
        self.seconds_remaining = self.interval_seconds
        self._emit(DeckEvent.AUTOPLAY_ON if enabled else DeckEvent.AUTOPLAY_OFF)

    def _restart_countdown(self) -> None:
        # Manual navigation during autoplay restarts the full interval
        if self.autoplay_enabled:
            self.seconds_remaining = self.interval_seconds
            self._emit(DeckEvent.COUNTDOWN_RESET)

    def _emit(self, event: DeckEvent) -> None:
        for listener in list(self._listeners):
            listener(event)


class AutoplayTicker:
    """
    Drives FlashcardDeck.tick() from an asyncio task.

    The task runs only while the deck's autoplay is on. Turning autoplay
    off, or closing the deck, cancels it immediately.
    """

    def __init__(
        self,
        deck: FlashcardDeck,
        tick_seconds: float = 1.0,
        on_tick: Callable[[FlashcardDeck, bool], None] | None = None,
    ):
        self.deck = deck
        self.tick_seconds = tick_seconds
        self.on_tick = on_tick
        self._task: asyncio.Task | None = None
        deck.subscribe(self._on_deck_event)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking; must be called from a running event loop."""
        self.stop()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run())

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def detach(self) -> None:
        """Cancel ticking and stop following the deck."""
        self.stop()
        self.deck.unsubscribe(self._on_deck_event)

    async def aclose(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.deck.unsubscribe(self._on_deck_event)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            if not self.deck.autoplay_enabled or self.deck.closed:
                return
            advanced = self.deck.tick()
            if self.on_tick is not None:
                self.on_tick(self.deck, advanced)

    def _on_deck_event(self, event: DeckEvent) -> None:
        if event in (DeckEvent.AUTOPLAY_ON, DeckEvent.COUNTDOWN_RESET):
            # Realign the tick phase with the refilled countdown
            self.start()
        else:
            logger.debug(f"Autoplay ticker stopping ({event.value})")
            self.stop()
