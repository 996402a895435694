"""Transfer session orchestration: lifecycle, kill switch and persistence."""

from curlent.session.lifecycle import LifecycleController
from curlent.session.network_guard import NetworkGuard
from curlent.session.persistence import StateStore, default_state_path

__all__ = [
    "LifecycleController",
    "NetworkGuard",
    "StateStore",
    "default_state_path",
]
