"""Cancellation state for the transfer loop.

The token is created by the hosting process and handed to the lifecycle
controller, which polls it once per tick.
"""

from __future__ import annotations

import signal
import threading
from typing import Any, Callable

from curlent.utils.logging_config import get_logger

logger = get_logger(__name__)


class CancellationToken:
    """Thread-safe latch set by the hosting process on interrupt."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Check whether cancellation has been requested."""
        return self._event.is_set()


def install_signal_handlers(
    token: CancellationToken,
    signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM),
) -> Callable[[], None]:
    """Route termination signals into ``token``.

    Args:
        token: Token to cancel when a signal arrives
        signals: Signal numbers to intercept

    Returns:
        Callable restoring the previous handlers

    """
    previous: dict[int, Any] = {}

    def _handler(signum: int, _frame: Any) -> None:
        logger.debug("Received signal %s, cancelling", signum)
        token.cancel()

    for signum in signals:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, _handler)

    def restore() -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    return restore
