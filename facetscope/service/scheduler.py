from __future__ import annotations

import logging

from PySide6 import QtCore


log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 150


class Debouncer(QtCore.QObject):
    """Collapses bursts of ``trigger()`` calls into one ``fired`` signal.

    Every trigger restarts a single-shot QTimer; ``fired`` is emitted once the
    quiet period elapses. Runs on the owning thread's event loop, so a
    trigger issued from a ``fired`` handler starts a new cycle instead of
    re-entering the current one.
    """

    fired = QtCore.Signal()

    def __init__(self, interval_ms: int = DEFAULT_DEBOUNCE_MS, parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(interval_ms)))
        self._timer.timeout.connect(self._fire)
        self._firing = False

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def is_pending(self) -> bool:
        return self._timer.isActive()

    def trigger(self) -> None:
        self._timer.start()

    def cancel(self) -> bool:
        """Discard a pending signal. Returns True if one was pending."""
        pending = self._timer.isActive()
        self._timer.stop()
        return pending

    def flush(self) -> bool:
        """Fire immediately if a signal is pending."""
        if not self._timer.isActive() or self._firing:
            return False
        self._timer.stop()
        self._fire()
        return True

    def _fire(self) -> None:
        log.debug("Debounced signal firing after %d ms quiet period", self._timer.interval())
        self._firing = True
        try:
            self.fired.emit()
        finally:
            self._firing = False
