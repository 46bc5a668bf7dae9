"""Cancellable sleeping for retry backoff and cool-down pauses."""

import signal
import threading
from typing import Iterable


class Pacer:
    """
    Sleeps that return early once a shutdown has been requested.

    One Pacer is shared by the fetcher (retry backoff) and the backfill
    driver (cool-down pauses) so a single SIGINT/SIGTERM stops both.
    """

    def __init__(self):
        self._stop = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def sleep(self, seconds: float) -> bool:
        """
        Wait up to the given number of seconds.

        Returns:
            True if the full delay elapsed, False if cancelled
        """
        if seconds <= 0:
            return not self._stop.is_set()
        return not self._stop.wait(seconds)

    def cancel(self) -> None:
        self._stop.set()

    def install_signal_handlers(
        self,
        signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        """
        Route shutdown signals to cancel(); must be called from the main thread.

        The handler only sets the stop flag. The driver notices it and logs
        the interruption from normal code.
        """
        def _handler(signum, frame):
            self.cancel()

        for signum in signals:
            signal.signal(signum, _handler)
