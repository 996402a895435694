"""Pytest configuration and shared fixtures for curlent tests."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Callable

import pytest
from rich.console import Console

from curlent.cli.progress import ProgressReporter
from curlent.models import TransferSession, TransferStatus
from curlent.session.persistence import StateStore
from curlent.utils.shutdown import CancellationToken

GIB = 1024**3
MAGNET = "magnet:?xt=urn:btih:0123456789abcdef0123456789abcdef01234567&dn=example"


def pytest_configure(config):
    """Register project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("cli", "marks tests as CLI tests"),
        ("session", "marks tests as lifecycle/session tests"),
        ("config", "marks tests as configuration tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_user_dirs(tmp_path, monkeypatch):
    """Keep config and cache lookups inside the test's temporary directory."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "home" / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "home" / ".cache"))


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)


class FakeEngine:
    """Scripted transfer engine.

    ``status`` walks through ``statuses`` and keeps returning the last one.
    Exceptions in the script are raised instead of returned.
    """

    def __init__(
        self,
        statuses: list[TransferStatus | Exception] | None = None,
        state: bytes = b"engine-state",
        resolve_error: Exception | None = None,
        serialize_error: Exception | None = None,
    ) -> None:
        self.statuses = statuses or [TransferStatus()]
        self.state = state
        self.resolve_error = resolve_error
        self.serialize_error = serialize_error
        self.resolved: list[tuple[str, Path]] = []
        self.status_calls = 0
        self.serialize_calls = 0
        self.closed = False

    def resolve(self, identifier: str, output_dir: Path) -> Any:
        if self.resolve_error is not None:
            raise self.resolve_error
        self.resolved.append((identifier, output_dir))
        return object()

    def status(self, handle: Any) -> TransferStatus:
        item = self.statuses[min(self.status_calls, len(self.statuses) - 1)]
        self.status_calls += 1
        if isinstance(item, Exception):
            raise item
        return item

    def serialize_state(self) -> bytes:
        self.serialize_calls += 1
        if self.serialize_error is not None:
            raise self.serialize_error
        return self.state

    def restore_state(self, blob: bytes | None) -> Any:
        return blob

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Clock that records sleeps instead of blocking."""

    def __init__(self, on_sleep: Callable[[int], None] | None = None) -> None:
        self.sleeps: list[float] = []
        self.on_sleep = on_sleep
        self._now = 0.0

    def now(self) -> float:
        return self._now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += seconds
        if self.on_sleep is not None:
            self.on_sleep(len(self.sleeps))


class StubGuard:
    """Network guard answering from a script; the last answer repeats."""

    def __init__(self, answers: list[bool] | None = None) -> None:
        self.answers = answers or [True]
        self.calls: list[str] = []

    def is_up(self, interface_name: str) -> bool:
        answer = self.answers[min(len(self.calls), len(self.answers) - 1)]
        self.calls.append(interface_name)
        return answer


@pytest.fixture
def make_engine():
    """Factory for scripted engines."""
    return FakeEngine


@pytest.fixture
def make_guard():
    """Factory for scripted network guards."""
    return StubGuard


@pytest.fixture
def clock():
    """Non-blocking clock."""
    return FakeClock()


@pytest.fixture
def cancel():
    """Fresh cancellation token."""
    return CancellationToken()


@pytest.fixture
def store(tmp_path):
    """State store inside the test directory."""
    return StateStore(tmp_path / "cache" / "session_state")


@pytest.fixture
def consoles():
    """(stdout, stderr) consoles writing to in-memory buffers."""
    out = Console(file=io.StringIO(), width=80, color_system=None)
    err = Console(file=io.StringIO(), width=80, force_terminal=True, color_system=None)
    return out, err


@pytest.fixture
def reporter(consoles):
    """Reporter writing to in-memory consoles."""
    out, err = consoles
    return ProgressReporter(console=out, err_console=err)


@pytest.fixture
def make_session(tmp_path):
    """Factory for transfer sessions with test-friendly defaults."""

    def _make(**overrides: Any) -> TransferSession:
        values: dict[str, Any] = {
            "identifier": MAGNET,
            "output_dir": tmp_path / "downloads",
        }
        values.update(overrides)
        return TransferSession(**values)

    return _make
