"""Self-expiring user notifications.

Every toast is removed exactly once, ``lifetime`` seconds after it was
created. Manual dismissal only hides it earlier; the expiry still happens on
schedule and is a no-op for an already dismissed toast.
"""

import logging
import time
from collections.abc import Callable

from legendstudio.models.toast import Toast, ToastSeverity

logger = logging.getLogger(__name__)

TOAST_LIFETIME = 5.0

_LOG_LEVELS: dict[ToastSeverity, int] = {
    ToastSeverity.INFO: logging.INFO,
    ToastSeverity.SUCCESS: logging.INFO,
    ToastSeverity.WARNING: logging.WARNING,
    ToastSeverity.ERROR: logging.ERROR,
}


class ToastCenter:
    """Collects toasts and expires them against an injectable clock.

    Args:
        lifetime: Seconds a toast stays visible.
        clock: Monotonic clock; tests pass a fake.
    """

    def __init__(
        self,
        lifetime: float = TOAST_LIFETIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.lifetime = lifetime
        self._clock = clock
        self._toasts: list[Toast] = []
        self._expiries: dict[str, float] = {}
        self._listeners: list[Callable[[Toast], None]] = []

    def subscribe(self, listener: Callable[[Toast], None]) -> None:
        """Register a callable invoked for every new toast (e.g. the CLI printer)."""
        self._listeners.append(listener)

    def add(self, message: str, severity: ToastSeverity = ToastSeverity.INFO) -> Toast:
        """Create a toast and schedule its removal."""
        self._expire()
        toast = Toast(message=message, severity=severity, created_at=self._clock())
        self._toasts.append(toast)
        self._expiries[toast.id] = toast.created_at + self.lifetime
        logger.log(_LOG_LEVELS[severity], "%s", message)
        for listener in self._listeners:
            listener(toast)
        return toast

    def info(self, message: str) -> Toast:
        return self.add(message, ToastSeverity.INFO)

    def success(self, message: str) -> Toast:
        return self.add(message, ToastSeverity.SUCCESS)

    def warning(self, message: str) -> Toast:
        return self.add(message, ToastSeverity.WARNING)

    def error(self, message: str) -> Toast:
        return self.add(message, ToastSeverity.ERROR)

    def dismiss(self, toast_id: str) -> None:
        """Hide a toast before it expires."""
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    def active(self) -> list[Toast]:
        """Return the toasts that are still visible, oldest first."""
        self._expire()
        return list(self._toasts)

    def _expire(self) -> None:
        now = self._clock()
        due = [tid for tid, deadline in self._expiries.items() if deadline <= now]
        for toast_id in due:
            del self._expiries[toast_id]
            self._toasts = [t for t in self._toasts if t.id != toast_id]
