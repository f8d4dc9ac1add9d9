"""Unit tests for the self-expiring toast channel."""

from legendstudio.core.toasts import ToastCenter
from legendstudio.models.toast import Toast, ToastSeverity


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestToastCenter:
    def test_toast_expires_after_lifetime(self) -> None:
        clock = FakeClock()
        toasts = ToastCenter(lifetime=5.0, clock=clock)
        toasts.info("hello")
        clock.now += 4.9
        assert [t.message for t in toasts.active()] == ["hello"]
        clock.now += 0.1
        assert toasts.active() == []

    def test_each_toast_has_its_own_deadline(self) -> None:
        clock = FakeClock()
        toasts = ToastCenter(lifetime=5.0, clock=clock)
        toasts.info("first")
        clock.now += 3
        toasts.warning("second")
        clock.now += 3
        assert [t.message for t in toasts.active()] == ["second"]

    def test_severity_helpers(self) -> None:
        toasts = ToastCenter()
        toasts.success("a")
        toasts.error("b")
        assert [t.severity for t in toasts.active()] == [
            ToastSeverity.SUCCESS,
            ToastSeverity.ERROR,
        ]

    def test_dismiss(self) -> None:
        toasts = ToastCenter()
        toast = toasts.info("bye")
        toasts.dismiss(toast.id)
        assert toasts.active() == []

    def test_listeners_notified(self) -> None:
        seen: list[Toast] = []
        toasts = ToastCenter()
        toasts.subscribe(seen.append)
        toasts.warning("careful")
        assert [(t.message, t.severity) for t in seen] == [("careful", ToastSeverity.WARNING)]
