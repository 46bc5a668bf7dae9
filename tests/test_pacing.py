"""
Tests for cancellable pauses.
"""

import os
import signal
import time

from articlefill.logger import StructuredLogger
from articlefill.pacing import Pacer


class TestPacer:

    def test_sleep_completes(self):
        pacer = Pacer()
        assert pacer.sleep(0.01) is True
        assert not pacer.cancelled

    def test_zero_sleep(self):
        assert Pacer().sleep(0) is True

    def test_cancelled_sleep_returns_immediately(self):
        pacer = Pacer()
        pacer.cancel()

        start = time.monotonic()
        assert pacer.sleep(30) is False
        assert time.monotonic() - start < 1
        assert pacer.cancelled

    def test_signal_cancels(self):
        pacer = Pacer()
        previous = signal.getsignal(signal.SIGUSR1)
        try:
            pacer.install_signal_handlers(signals=(signal.SIGUSR1,))
            os.kill(os.getpid(), signal.SIGUSR1)
            # Handler runs on the main thread at the next bytecode boundary
            for _ in range(100):
                if pacer.cancelled:
                    break
                time.sleep(0.01)
            assert pacer.cancelled
        finally:
            signal.signal(signal.SIGUSR1, previous)

    def test_signal_handler_only_sets_flag(self, monkeypatch):
        """The handler sets the stop flag and logs nothing."""
        def fail(self, message, **kwargs):
            raise AssertionError(f"logged from signal handler: {message}")

        for level in ("debug", "info", "warning", "error", "critical"):
            monkeypatch.setattr(StructuredLogger, level, fail)

        pacer = Pacer()
        previous = signal.getsignal(signal.SIGUSR1)
        try:
            pacer.install_signal_handlers(signals=(signal.SIGUSR1,))
            handler = signal.getsignal(signal.SIGUSR1)
            handler(signal.SIGUSR1, None)
        finally:
            signal.signal(signal.SIGUSR1, previous)

        assert pacer.cancelled
