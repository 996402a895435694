"""Transfer engine backed by the libtorrent Python bindings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import libtorrent as lt

from curlent.engine.base import is_magnet
from curlent.models import EngineSettings, TransferStatus
from curlent.utils.exceptions import (
    EngineError,
    IdentifierError,
    IdentifierNotFoundError,
)
from curlent.utils.logging_config import get_logger

logger = get_logger(__name__)


class LibtorrentEngine:
    """Owns a libtorrent session for a single transfer."""

    def __init__(
        self,
        settings: EngineSettings | None = None,
        saved_state: bytes | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        params = self.restore_state(saved_state)
        try:
            self._session = lt.session(params)
        except RuntimeError as e:
            msg = f"Failed to start libtorrent session: {e}"
            raise EngineError(msg) from e

    def build_settings_pack(self) -> dict[str, Any]:
        """Translate EngineSettings into a libtorrent settings pack."""
        pack: dict[str, Any] = {
            "alert_mask": int(lt.alert.category_t.error_notification)
            | int(lt.alert.category_t.status_notification),
            "dht_bootstrap_nodes": ",".join(self.settings.dht_bootstrap_nodes),
            "enable_dht": True,
            "enable_lsd": self.settings.enable_lsd,
        }
        port = self.settings.listen_port
        if self.settings.interface:
            pack["listen_interfaces"] = f"{self.settings.interface}:{port}"
            pack["outgoing_interfaces"] = self.settings.interface
        else:
            pack["listen_interfaces"] = f"0.0.0.0:{port},[::]:{port}"
            pack["outgoing_interfaces"] = ""
        return pack

    def restore_state(self, blob: bytes | None) -> Any:
        """Return session params restored from ``blob``, or defaults.

        The saved settings are replaced wholesale by ``build_settings_pack``
        so no stale interface binding survives into the new session.
        """
        params = None
        if blob:
            try:
                params = lt.read_session_params(blob)
                logger.debug("Restored session state (%d bytes)", len(blob))
            except (RuntimeError, ValueError, TypeError) as e:
                logger.info("Discarding unreadable session state: %s", e)
        if params is None:
            params = lt.session_params()
        params.settings = self.build_settings_pack()
        return params

    def resolve(self, identifier: str, output_dir: Path) -> Any:
        """Add a magnet URI or torrent file to the session."""
        if is_magnet(identifier):
            try:
                atp = lt.parse_magnet_uri(identifier)
            except RuntimeError as e:
                msg = f"Invalid magnet link: {e}"
                raise IdentifierError(msg, {"identifier": identifier}) from e
        else:
            path = Path(identifier)
            if not path.is_file():
                msg = f"file not found: {identifier}"
                raise IdentifierNotFoundError(msg)
            try:
                info = lt.torrent_info(str(path))
            except RuntimeError as e:
                msg = f"Invalid torrent file {identifier}: {e}"
                raise IdentifierError(msg) from e
            atp = lt.add_torrent_params()
            atp.ti = info

        atp.save_path = str(output_dir)
        try:
            return self._session.add_torrent(atp)
        except RuntimeError as e:
            msg = f"Failed to add torrent: {e}"
            raise EngineError(msg) from e

    def status(self, handle: Any) -> TransferStatus:
        """Snapshot the transfer's status."""
        s = handle.status()
        info = handle.torrent_file() if s.has_metadata else None
        total_size = info.total_size() if info is not None else 0
        return TransferStatus(
            has_metadata=s.has_metadata,
            num_peers=max(s.num_peers, 0),
            dht_nodes=self._dht_node_count(),
            is_seeding=s.is_seeding,
            progress=min(max(s.progress, 0.0), 1.0),
            downloaded=int(total_size * s.progress),
            uploaded=max(s.total_upload, 0),
            download_rate=max(s.download_rate, 0),
            upload_rate=max(s.upload_rate, 0),
            total_size=total_size,
            name=info.name() if info is not None else s.name,
            num_files=info.num_files() if info is not None else 0,
        )

    def _dht_node_count(self) -> int:
        try:
            dht_state = self._session.session_state().dht_state
            return len(dht_state.nodes) + len(dht_state.nodes6)
        except (AttributeError, RuntimeError):
            return 0

    def serialize_state(self) -> bytes:
        """Serialize the full session state."""
        return bytes(lt.write_session_params_buf(self._session.session_state()))

    def close(self) -> None:
        """Pause the session so no further traffic is generated."""
        self._session.pause()
