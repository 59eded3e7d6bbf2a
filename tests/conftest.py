import sys
import threading
import time
from typing import List, Optional

import pytest

from pulse import api
from pulse.config import Config
from pulse.errors import TransportError, Unreachable
from pulse.transport import Transport


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, isolated tests")
    config.addinivalue_line("markers", "integration: tests running the dispatcher thread")


class RecordingTransport(Transport):
    """
    In-memory transport recording every attempt.

    Args:
        failures: Number of leading attempts that fail, None to always fail.
        error: The error raised by failing attempts.
    """

    def __init__(self, failures: Optional[int] = 0, error: Optional[TransportError] = None):
        self.failures = failures
        self.error = error or Unreachable("connection refused")
        self.bodies: List[bytes] = []
        self.call_times: List[float] = []
        self.timeouts: List[float] = []
        self.closed = False
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.call_times)

    def send(self, body: bytes, timeout: float) -> None:
        with self._lock:
            self.call_times.append(time.monotonic())
            self.timeouts.append(timeout)
            if self.failures is None or len(self.call_times) <= self.failures:
                raise self.error
            self.bodies.append(body)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> Config:
    return Config(
        public_key="test_key",
        project_id="test_project",
        host="pulse.example.com",
        attach_stacktrace=False,
    )


@pytest.fixture
def transport_factory():
    return RecordingTransport


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture(autouse=True)
def reset_pulse():
    """
    Release the process-wide client and restore interpreter hooks.
    """
    excepthook = sys.excepthook
    threading_excepthook = threading.excepthook
    yield
    api.shutdown(timeout=0)
    sys.excepthook = excepthook
    threading.excepthook = threading_excepthook
