"""Transfer engine facade.

The lifecycle controller talks to the peer-to-peer engine only through the
protocols below, so tests can substitute a scripted engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from curlent.models import TransferStatus

MAGNET_PREFIX = "magnet:"


def is_magnet(identifier: str) -> bool:
    """Check whether an identifier is a magnet URI rather than a file path."""
    return identifier.startswith(MAGNET_PREFIX)


@runtime_checkable
class TransferHandle(Protocol):
    """Opaque reference to a transfer added to an engine."""


@runtime_checkable
class TransferEngine(Protocol):
    """Capabilities the lifecycle controller needs from a transfer engine."""

    def resolve(self, identifier: str, output_dir: Path) -> TransferHandle:
        """Add a transfer.

        Raises IdentifierError (or IdentifierNotFoundError for a missing
        local descriptor) before any network activity begins.
        """
        ...

    def status(self, handle: TransferHandle) -> TransferStatus:
        """Return a best-effort snapshot of the transfer."""
        ...

    def serialize_state(self) -> bytes:
        """Serialize the engine session (peers, DHT table, resume data)."""
        ...

    def restore_state(self, blob: bytes | None) -> Any:
        """Build engine configuration from a saved blob, or defaults if unusable."""
        ...

    def close(self) -> None:
        """Stop all transfer traffic; the session is not used afterwards."""
        ...
