"""Pydantic models for curlent.

Provides validated data models for the transfer session, engine status
snapshots and the lifecycle phase/outcome vocabulary.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_SEED_RATIO = 2.0
DEFAULT_LISTEN_PORT = 6881
DEFAULT_DHT_BOOTSTRAP_NODES: tuple[str, ...] = (
    "router.bittorrent.com:6881",
    "router.utorrent.com:6881",
    "dht.transmissionbt.com:6881",
    "dht.aelitis.com:6881",
)


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Phase(IntEnum):
    """Lifecycle phases, in the only order they may be entered."""

    AWAITING_METADATA = 0
    TRANSFERRING = 1
    SEEDING = 2
    TERMINATED = 3


class TerminalReason(str, Enum):
    """Why the lifecycle reached ``Phase.TERMINATED``."""

    COMPLETED = "completed"
    RATIO_REACHED = "ratio_reached"
    INTERRUPTED = "interrupted"
    KILL_SWITCH_TRIPPED = "kill_switch_tripped"
    ENGINE_ERROR = "engine_error"


class ExitStatus(IntEnum):
    """Process exit statuses."""

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


class OutcomeKind(str, Enum):
    """Kinds of run outcome."""

    SUCCESS = "success"
    USER_INTERRUPTED = "user_interrupted"
    KILL_SWITCH_TRIPPED = "kill_switch_tripped"
    ENGINE_ERROR = "engine_error"


_OUTCOME_EXIT_STATUS: dict[OutcomeKind, ExitStatus] = {
    OutcomeKind.SUCCESS: ExitStatus.SUCCESS,
    OutcomeKind.USER_INTERRUPTED: ExitStatus.INTERRUPTED,
    OutcomeKind.KILL_SWITCH_TRIPPED: ExitStatus.FAILURE,
    OutcomeKind.ENGINE_ERROR: ExitStatus.FAILURE,
}

_REASON_OUTCOME: dict[TerminalReason, OutcomeKind] = {
    TerminalReason.COMPLETED: OutcomeKind.SUCCESS,
    TerminalReason.RATIO_REACHED: OutcomeKind.SUCCESS,
    TerminalReason.INTERRUPTED: OutcomeKind.USER_INTERRUPTED,
    TerminalReason.KILL_SWITCH_TRIPPED: OutcomeKind.KILL_SWITCH_TRIPPED,
    TerminalReason.ENGINE_ERROR: OutcomeKind.ENGINE_ERROR,
}


class ExitOutcome(BaseModel):
    """Result of a lifecycle run."""

    kind: OutcomeKind = Field(..., description="Outcome kind")
    reason: TerminalReason = Field(..., description="Terminal reason")
    detail: str | None = Field(None, description="Error detail for engine errors")

    model_config = {"frozen": True}

    @classmethod
    def from_reason(cls, reason: TerminalReason, detail: str | None = None) -> ExitOutcome:
        """Build the outcome corresponding to a terminal reason."""
        return cls(kind=_REASON_OUTCOME[reason], reason=reason, detail=detail)

    @property
    def exit_code(self) -> int:
        """Process exit status for this outcome."""
        return int(_OUTCOME_EXIT_STATUS[self.kind])


class TransferSession(BaseModel):
    """Immutable description of a single transfer run."""

    identifier: str = Field(..., min_length=1, description="Magnet URI or torrent file path")
    output_dir: Path = Field(default=Path("."), description="Download directory")
    seed_ratio: float = Field(
        default=DEFAULT_SEED_RATIO,
        ge=0.0,
        allow_inf_nan=False,
        description="Upload/size ratio at which seeding stops",
    )
    interface: str | None = Field(None, description="Kill-switch network interface")
    quiet: bool = Field(default=False, description="Suppress all progress output")
    no_seed: bool = Field(default=False, description="Exit after download without seeding")

    model_config = {"frozen": True}

    @field_validator("interface")
    @classmethod
    def validate_interface(cls, v):
        """Treat an empty interface name as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def kill_switch_enabled(self) -> bool:
        """Whether a kill-switch interface was configured."""
        return self.interface is not None


class TransferStatus(BaseModel):
    """Point-in-time snapshot of the engine's view of a transfer."""

    has_metadata: bool = Field(default=False, description="Metadata received")
    num_peers: int = Field(default=0, ge=0, description="Connected peers")
    dht_nodes: int = Field(default=0, ge=0, description="Known DHT nodes")
    is_seeding: bool = Field(default=False, description="All wanted data present")
    progress: float = Field(default=0.0, ge=0.0, le=1.0, description="Completed fraction")
    downloaded: int = Field(default=0, ge=0, description="Downloaded bytes")
    uploaded: int = Field(default=0, ge=0, description="Uploaded bytes")
    download_rate: float = Field(default=0.0, ge=0.0, description="Download rate (bytes/s)")
    upload_rate: float = Field(default=0.0, ge=0.0, description="Upload rate (bytes/s)")
    total_size: int = Field(default=0, ge=0, description="Content size in bytes")
    name: str = Field(default="", description="Content name")
    num_files: int = Field(default=0, ge=0, description="Number of files")

    model_config = {"frozen": True}

    @property
    def seed_ratio(self) -> float:
        """Uploaded bytes over content size, 0 for empty content."""
        if self.total_size <= 0:
            return 0.0
        return self.uploaded / self.total_size


class EngineSettings(BaseModel):
    """Settings applied to the transfer engine session."""

    interface: str | None = Field(None, description="Bind listen/outgoing traffic to this interface")
    listen_port: int = Field(
        default=DEFAULT_LISTEN_PORT,
        ge=1,
        le=65535,
        description="Listen port",
    )
    dht_bootstrap_nodes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DHT_BOOTSTRAP_NODES),
        description="DHT bootstrap nodes (host:port)",
    )
    enable_lsd: bool = Field(default=True, description="Enable local service discovery")


class CurlentConfig(BaseModel):
    """Settings resolved from the config file and the command line."""

    output_dir: Path = Field(default=Path("."), description="Download directory")
    interface: str | None = Field(None, description="Kill-switch network interface")
    seed_ratio: float = Field(
        default=DEFAULT_SEED_RATIO,
        ge=0.0,
        allow_inf_nan=False,
        description="Seed ratio target",
    )
    no_seed: bool = Field(default=False, description="Skip seeding")
    quiet: bool = Field(default=False, description="Quiet mode")
    log_level: LogLevel | None = Field(None, description="Explicit log level")
    log_file: str | None = Field(None, description="Log file path")
