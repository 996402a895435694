"""Configuration management for curlent.

Settings are resolved in order: defaults, then the per-user config file,
then command-line flags. The config file holds ``key=value`` lines::

    # ~/.config/curlent/config
    output = ~/Downloads
    interface = wg0
    ratio = 1.5
    no-seed = false
    quiet = false
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from curlent.models import CurlentConfig, LogLevel, TransferSession
from curlent.utils.exceptions import ConfigurationError
from curlent.utils.logging_config import get_logger

logger = get_logger(__name__)

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})

# Config-file key -> CurlentConfig field
FILE_KEYS: dict[str, str] = {
    "output": "output_dir",
    "interface": "interface",
    "ratio": "seed_ratio",
    "no-seed": "no_seed",
    "quiet": "quiet",
    "log-level": "log_level",
    "log-file": "log_file",
}


def default_config_path() -> Path:
    """Return the per-user config file location."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "curlent" / "config"


def expand_tilde(value: str) -> str:
    """Expand a leading ``~`` to the user's home directory."""
    return os.path.expanduser(value) if value.startswith("~") else value


def parse_bool(value: str) -> bool:
    """Interpret a config-file boolean."""
    return value.strip().lower() in TRUE_VALUES


def parse_ratio(value: str, source: str = "ratio") -> float:
    """Parse a finite, non-negative seed ratio.

    Raises:
        ConfigurationError: If the value is not a finite non-negative number

    """
    try:
        ratio = float(value)
    except (TypeError, ValueError) as e:
        msg = f"Invalid ratio {value!r} in {source}"
        raise ConfigurationError(msg) from e
    if not math.isfinite(ratio) or ratio < 0:
        msg = f"Invalid ratio {value!r} in {source}: must be a finite non-negative number"
        raise ConfigurationError(msg)
    return ratio


class ConfigManager:
    """Loads the config file and merges command-line overrides."""

    def __init__(self, config_file: str | Path | None = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to the config file; defaults to the per-user location

        """
        self.config_file = Path(config_file) if config_file else default_config_path()
        self.config = self._load_config()

    def _load_config(self) -> CurlentConfig:
        """Load configuration from the config file, if present."""
        data = self.parse_file(self.config_file) if self.config_file.is_file() else {}
        return self._validate(data)

    def parse_file(self, path: Path) -> dict[str, Any]:
        """Parse ``key=value`` lines into CurlentConfig field values."""
        data: dict[str, Any] = {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read config file %s: %s", path, e)
            return data

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if not sep:
                logger.warning("%s:%d: ignoring line without '='", path, lineno)
                continue
            key = key.strip()
            value = value.strip()
            field = FILE_KEYS.get(key)
            if field is None:
                logger.warning("%s:%d: unknown key %r", path, lineno, key)
                continue
            data[field] = self._convert(field, value, f"{path}:{lineno}")
        return data

    def _convert(self, field: str, value: str, source: str) -> Any:
        if field == "output_dir":
            return Path(expand_tilde(value))
        if field == "seed_ratio":
            return parse_ratio(value, source)
        if field in ("no_seed", "quiet"):
            return parse_bool(value)
        if field == "log_level":
            try:
                return LogLevel(value.upper())
            except ValueError as e:
                msg = f"Invalid log level {value!r} in {source}"
                raise ConfigurationError(msg) from e
        if field == "log_file":
            return expand_tilde(value) or None
        return value or None

    def _validate(self, data: dict[str, Any]) -> CurlentConfig:
        try:
            return CurlentConfig(**data)
        except PydanticValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def apply_overrides(self, **overrides: Any) -> CurlentConfig:
        """Apply command-line values; ``None`` means "not given".

        Returns:
            The updated configuration

        """
        data = self.config.model_dump()
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in CurlentConfig.model_fields:
                msg = f"Unknown configuration option: {key}"
                raise ConfigurationError(msg)
            if key == "output_dir":
                value = Path(expand_tilde(str(value)))
            data[key] = value
        self.config = self._validate(data)
        return self.config

    def to_session(self, identifier: str) -> TransferSession:
        """Build the immutable transfer session for ``identifier``."""
        cfg = self.config
        return TransferSession(
            identifier=identifier,
            output_dir=cfg.output_dir,
            seed_ratio=cfg.seed_ratio,
            interface=cfg.interface,
            quiet=cfg.quiet,
            no_seed=cfg.no_seed,
        )
