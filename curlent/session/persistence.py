"""Persisted engine state.

A single opaque blob lives at a fixed per-user cache path and is overwritten
on every run. Loading and saving never raise: a missing or unreadable file
means "start fresh", and a failed save is logged and tolerated.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from curlent.utils.exceptions import PersistenceError
from curlent.utils.logging_config import get_logger

logger = get_logger(__name__)

STATE_FILENAME = "session_state"


def default_state_path() -> Path:
    """Return the per-user cache file for engine state."""
    cache_home = os.environ.get("XDG_CACHE_HOME")
    base = Path(cache_home) if cache_home else Path.home() / ".cache"
    return base / "curlent" / STATE_FILENAME


class StateStore:
    """Reads and writes the persisted engine state blob."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_state_path()

    def load(self) -> bytes | None:
        """Return the saved blob, or None when there is nothing usable."""
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            logger.debug("No saved state at %s", self.path)
            return None
        except OSError as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return None
        if not data:
            logger.debug("Saved state at %s is empty", self.path)
            return None
        logger.debug("Loaded %d bytes of saved state from %s", len(data), self.path)
        return data

    def save(self, blob: bytes) -> bool:
        """Write ``blob`` atomically, returning whether it succeeded."""
        try:
            self._write(blob)
        except PersistenceError as e:
            logger.warning("%s", e)
            return False
        logger.debug("Saved %d bytes of state to %s", len(blob), self.path)
        return True

    def _write(self, blob: bytes) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=self.path.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            msg = f"Failed to save state to {self.path}: {e}"
            raise PersistenceError(msg, {"path": str(self.path)}) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temporary file %s", tmp_name)
