"""Looping alert sound state with fade-out."""

import asyncio
from datetime import datetime
from typing import Callable, Optional

from ...logging_config import get_logger
from ...models.alerts import SoundState

logger = get_logger(__name__)


class AlertSound:
    """Tracks whether the alert sound should be playing.

    The browser client renders the actual audio from ``state()``. A faded stop
    keeps the sound marked as playing until the fade timer ends; an immediate
    stop clears it at once.
    """

    def __init__(self, fade_seconds: float = 1.5, now: Optional[Callable[[], datetime]] = None):
        self.fade_seconds = fade_seconds
        self._now = now or (lambda: datetime.now().astimezone())
        self._playing = False
        self._fading = False
        self._started_at: Optional[datetime] = None
        self._fade_handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def is_fading(self) -> bool:
        return self._fading

    def play(self) -> None:
        self._cancel_fade()
        if self._playing:
            return
        self._playing = True
        self._started_at = self._now()
        logger.info("Alert sound started")

    def stop(self, fade: bool = True) -> None:
        if not self._playing:
            return

        if fade and self.fade_seconds > 0:
            if self._fading:
                return
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._fading = True
                self._fade_handle = loop.call_later(self.fade_seconds, self._finish)
                logger.debug(f"Alert sound fading out over {self.fade_seconds}s")
                return

        self._finish()

    def _cancel_fade(self) -> None:
        if self._fade_handle is not None:
            self._fade_handle.cancel()
            self._fade_handle = None
        self._fading = False

    def _finish(self) -> None:
        self._cancel_fade()
        self._playing = False
        self._started_at = None
        logger.info("Alert sound stopped")

    def state(self) -> SoundState:
        return SoundState(is_playing=self._playing, fading=self._fading, started_at=self._started_at)
