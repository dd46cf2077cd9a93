"""Cancellation handles for listener registrations."""

from typing import Callable, Optional


class Subscription:
    """Cancellation handle for an event subscription."""

    def __init__(self, cancel: Optional[Callable[[], None]] = None):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> bool:
        """Cancel the subscription. Returns False if it was already cancelled."""
        if not self._active:
            return False
        self._active = False
        if self._cancel is not None:
            self._cancel()
        return True
