"""Transfer engine facade and adapters."""

from curlent.engine.base import TransferEngine, TransferHandle, is_magnet

__all__ = ["TransferEngine", "TransferHandle", "is_magnet"]
