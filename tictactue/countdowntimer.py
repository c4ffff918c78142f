"""A countdown clock advanced in fixed steps."""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CountdownTimer:
    """Counts down from an initial time in steps of ``UPDATE_INTERVAL_MS``.

    The clock does not run by itself: each call to :meth:`tick` stands for
    one elapsed interval and only has an effect while the clock is active.
    When the time reaches zero, ``on_expired`` is called.
    """

    UPDATE_INTERVAL_MS = 100
    DEFAULT_INITIAL_MS = 10_000

    def __init__(
        self,
        initial_time: int = DEFAULT_INITIAL_MS,
        on_expired: Optional[Callable[[], None]] = None,
    ) -> None:
        initial_time = max(0, initial_time)
        self._initial_ms = initial_time
        self._current_ms = initial_time
        self._running = False
        self._times_up = False
        self._active = False
        self.on_expired = on_expired

    @property
    def initial_time(self) -> int:
        return self._initial_ms

    @property
    def current_time(self) -> int:
        return self._current_ms

    @property
    def current_time_text(self) -> str:
        """Remaining time as ``mm:ss`` from one minute up, else ``s.t``."""
        ms = self._current_ms % 86_400_000
        if self._current_ms >= 60_000:
            return f"{(ms // 60_000) % 60:02d}:{(ms // 1000) % 60:02d}"
        return f"{(ms // 1000) % 60}.{(ms % 1000) // 100}"

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_times_up(self) -> bool:
        return self._times_up

    def set_initial_time(self, milliseconds: int) -> None:
        """Set the starting time (negative becomes zero) and reset the clock."""
        milliseconds = max(0, milliseconds)
        if milliseconds == self._initial_ms:
            return
        self._initial_ms = milliseconds
        self.reset()
        logger.debug("Initial time set to: %d ms", milliseconds)

    def pause(self) -> None:
        if self._running:
            self._active = False
            self._running = False
            logger.debug("Timer paused. Remaining: %d ms", self._current_ms)

    def resume(self) -> None:
        if not self._running and not self._times_up and self._current_ms > 0:
            self._active = True
            self._running = True
            logger.debug("Timer resumed. Remaining: %d ms", self._current_ms)
        elif self._times_up:
            logger.debug("Cannot resume, timer has expired. Reset first.")
        elif self._current_ms <= 0:
            logger.debug("Cannot resume, current time is zero. Reset first.")

    def reset(self) -> None:
        """Stop counting and restore the initial time; the running flag is left as is."""
        self._active = False
        self._current_ms = self._initial_ms
        self._times_up = False
        logger.debug("Timer reset to initial time.")

    def start(self) -> None:
        """Start or resume; reset first if the time has run out."""
        if self._running:
            logger.debug("Timer already running.")
            return
        if self._times_up or self._current_ms <= 0:
            self.reset()
        if self._current_ms > 0:
            self.resume()
        else:
            logger.debug("Cannot start timer: initial time is 0.")

    def tick(self) -> None:
        """Advance the clock by one update interval if it is counting."""
        if not self._active:
            return
        self._current_ms -= self.UPDATE_INTERVAL_MS
        if self._current_ms <= 0:
            self._current_ms = 0
            self._active = False
            self._times_up = True
            logger.debug("Timer expired!")
            if self.on_expired is not None:
                self.on_expired()