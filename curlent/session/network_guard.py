"""Kill-switch liveness check for a network interface.

The guard reads the kernel's operational state for the interface on every
call. Anything other than positive proof that the link is usable counts as
down.
"""

from __future__ import annotations

from pathlib import Path

from curlent.utils.logging_config import get_logger

logger = get_logger(__name__)

SYSFS_NET = Path("/sys/class/net")
USABLE_STATES = frozenset({"up", "unknown"})


class NetworkGuard:
    """Stateless check of an interface's operational state."""

    def __init__(self, sysfs_root: str | Path = SYSFS_NET) -> None:
        self.sysfs_root = Path(sysfs_root)

    def read_operstate(self, interface_name: str) -> str | None:
        """Return the raw operational state, or None if it cannot be read."""
        if not _is_safe_name(interface_name):
            logger.debug("Rejecting interface name %r", interface_name)
            return None
        path = self.sysfs_root / interface_name / "operstate"
        try:
            return path.read_text(encoding="ascii", errors="replace").strip().lower()
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            return None

    def is_up(self, interface_name: str) -> bool:
        """Check whether ``interface_name`` is usable right now."""
        state = self.read_operstate(interface_name)
        if state in USABLE_STATES:
            return True
        logger.debug("Interface %s reported down (operstate=%s)", interface_name, state)
        return False


def _is_safe_name(name: str) -> bool:
    if not name or name in {".", ".."}:
        return False
    return "/" not in name and "\\" not in name and "\x00" not in name
