"""Lifecycle controller for a single transfer.

Drives one transfer through ``AWAITING_METADATA -> TRANSFERRING -> SEEDING``
and into ``TERMINATED``. Every tick follows the same skeleton: check for
cancellation, check the kill switch, query the engine, run the handler for
the current phase, sleep. Engine state is persisted exactly once on every
terminal transition.
"""

from __future__ import annotations

import math
import sys
from typing import Callable

from curlent.cli.progress import ProgressReporter
from curlent.engine.base import TransferEngine, TransferHandle, is_magnet
from curlent.models import (
    ExitOutcome,
    Phase,
    TerminalReason,
    TransferSession,
    TransferStatus,
)
from curlent.session.network_guard import NetworkGuard
from curlent.session.persistence import StateStore
from curlent.utils.exceptions import PhaseTransitionError
from curlent.utils.formatting import format_size
from curlent.utils.logging_config import get_logger
from curlent.utils.shutdown import CancellationToken
from curlent.utils.time import Clock

logger = get_logger(__name__)

DEFAULT_TICK_INTERVAL = 0.5

INTERRUPTED_NOTICES: dict[Phase | None, str] = {
    Phase.TRANSFERRING: "Download interrupted",
    Phase.SEEDING: "Seeding interrupted",
}


def seed_target(total_size: int, ratio: float) -> int:
    """Upload byte target for seeding ``total_size`` bytes to ``ratio``.

    Non-finite or oversized products saturate at ``sys.maxsize``.
    """
    target = total_size * ratio
    if not math.isfinite(target) or target >= sys.maxsize:
        return sys.maxsize
    return int(target)


class LifecycleController:
    """Owns the phase state machine and its tick loop."""

    def __init__(
        self,
        session: TransferSession,
        engine: TransferEngine,
        guard: NetworkGuard | None = None,
        reporter: ProgressReporter | None = None,
        store: StateStore | None = None,
        cancel: CancellationToken | None = None,
        clock: Clock | None = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        """Initialize lifecycle controller.

        Args:
            session: Transfer description
            engine: Transfer engine facade
            guard: Kill-switch guard, consulted when the session names an interface
            reporter: Output sink for progress and notices
            store: Where engine state is persisted
            cancel: Token polled once per tick
            clock: Clock providing the sleep between ticks
            tick_interval: Seconds between engine status queries

        """
        self.session = session
        self.engine = engine
        self.guard = guard or NetworkGuard()
        self.reporter = reporter or ProgressReporter(quiet=session.quiet)
        self.store = store or StateStore()
        self.cancel = cancel or CancellationToken()
        self.clock = clock or Clock()
        self.tick_interval = tick_interval

        self._phase: Phase | None = None
        self._reason: TerminalReason | None = None
        self._outcome: ExitOutcome | None = None
        self._handle: TransferHandle | None = None
        self._ticks = 0
        self._started: float | None = None
        self._handlers: dict[Phase, Callable[[TransferStatus], None]] = {
            Phase.AWAITING_METADATA: self._tick_awaiting_metadata,
            Phase.TRANSFERRING: self._tick_transferring,
            Phase.SEEDING: self._tick_seeding,
        }

    @property
    def phase(self) -> Phase | None:
        """Current phase, None before ``run`` resolves the identifier."""
        return self._phase

    @property
    def terminal_reason(self) -> TerminalReason | None:
        """Why the run terminated, once it has."""
        return self._reason

    @property
    def outcome(self) -> ExitOutcome | None:
        """Result of the run, once it has terminated."""
        return self._outcome

    @property
    def ticks(self) -> int:
        """Number of ticks executed so far."""
        return self._ticks

    def run(self) -> ExitOutcome:
        """Run the transfer to a terminal phase.

        Identifier errors propagate before any phase is entered. Everything
        that goes wrong afterwards becomes a terminal phase.
        """
        if self._outcome is not None:
            return self._outcome

        if is_magnet(self.session.identifier):
            self.reporter.info("Adding magnet link...")
        else:
            self.reporter.info(f"Loading torrent file: {self.session.identifier}")

        self._handle = self.engine.resolve(
            self.session.identifier, self.session.output_dir
        )
        self._started = self.clock.now()
        self._advance(Phase.AWAITING_METADATA)

        try:
            while self._phase is not Phase.TERMINATED:
                self.tick()
                if self._phase is not Phase.TERMINATED:
                    self.clock.sleep(self.tick_interval)
        except KeyboardInterrupt:
            return self._terminate(TerminalReason.INTERRUPTED)
        except Exception as e:
            logger.exception("Transfer loop failed")
            return self._terminate(
                TerminalReason.ENGINE_ERROR, detail=str(e) or type(e).__name__
            )

        if self._outcome is None:
            msg = "Transfer loop ended without an outcome"
            raise PhaseTransitionError(msg)
        return self._outcome

    def tick(self) -> None:
        """Execute one iteration of the loop."""
        if self._phase is None or self._phase is Phase.TERMINATED:
            return
        self._ticks += 1

        if self.cancel.is_cancelled():
            self._terminate(TerminalReason.INTERRUPTED)
            return

        if self.session.kill_switch_enabled and not self.guard.is_up(
            self.session.interface
        ):
            self._terminate(TerminalReason.KILL_SWITCH_TRIPPED)
            return

        status = self.engine.status(self._handle)
        self._handlers[self._phase](status)

    def _tick_awaiting_metadata(self, status: TransferStatus) -> None:
        if status.has_metadata:
            self.reporter.end_line()
            self.reporter.info(f"Name: {status.name}")
            self.reporter.info(f"Size: {format_size(status.total_size)}")
            self.reporter.info(f"Files: {status.num_files}")
            self.reporter.info("")
            self._advance(Phase.TRANSFERRING)
            return

        if is_magnet(self.session.identifier):
            self.reporter.update(self.reporter.render_waiting(status))

    def _tick_transferring(self, status: TransferStatus) -> None:
        if not status.is_seeding:
            self.reporter.update(self.reporter.render(status))
            return

        self.reporter.notice("")
        self.reporter.notice("Download complete!", bell=True)
        self.reporter.notice(f"Saved to: {self.session.output_dir / status.name}")
        if self.session.no_seed:
            self._terminate(TerminalReason.COMPLETED)
            return

        self.reporter.notice(f"\nSeeding to ratio {self.session.seed_ratio:.1f}...\n")
        self._advance(Phase.SEEDING)

    def _tick_seeding(self, status: TransferStatus) -> None:
        target_ratio = self.session.seed_ratio
        # A zero target is always satisfied.
        if target_ratio <= 0 or status.seed_ratio >= target_ratio:
            self.reporter.notice("")
            self.reporter.notice("Seeding complete!", bell=True)
            self._terminate(TerminalReason.RATIO_REACHED)
            return

        target_upload = seed_target(status.total_size, target_ratio)
        self.reporter.update(self.reporter.render(status, target=target_upload))

    def _advance(self, phase: Phase) -> None:
        if self._phase is not None and phase <= self._phase:
            msg = f"Cannot move from {self._phase.name} to {phase.name}"
            raise PhaseTransitionError(msg)
        logger.debug(
            "Phase %s -> %s",
            self._phase.name if self._phase is not None else "START",
            phase.name,
        )
        self._phase = phase

    def _terminate(
        self, reason: TerminalReason, detail: str | None = None
    ) -> ExitOutcome:
        if self._outcome is not None:
            return self._outcome
        last_phase = self._phase
        self._advance(Phase.TERMINATED)
        self._reason = reason
        self._outcome = ExitOutcome.from_reason(reason, detail)
        self._persist()

        self.reporter.end_line()
        if reason is TerminalReason.INTERRUPTED:
            self.reporter.notice("")
            self.reporter.notice(INTERRUPTED_NOTICES.get(last_phase, "Interrupted"))
        elapsed = self.clock.now() - self._started if self._started is not None else 0.0
        logger.info(
            "Transfer terminated in %s after %.1fs: %s",
            last_phase.name if last_phase is not None else "START",
            elapsed,
            reason.value,
        )
        return self._outcome

    def _persist(self) -> None:
        try:
            blob = self.engine.serialize_state()
        except Exception:
            logger.warning("Could not serialize engine state", exc_info=True)
            return
        self.store.save(blob)
