"""Live status line for curlent.

Turns raw engine counters into a single bounded-width line such as::

    45% [#########|          ] 230.4/512.0 MB 1.2 MB/s eta 3m 51s

and keeps it in place on stderr. Informational lines go to stdout.
"""

from __future__ import annotations

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from curlent.models import TransferStatus
from curlent.utils.console_utils import create_console
from curlent.utils.formatting import (
    estimate_eta,
    format_size,
    format_speed,
    format_time,
    get_size_unit,
    make_progress_bar,
)

MIN_BAR_WIDTH = 10
MAX_BAR_WIDTH = 50
DEFAULT_TERMINAL_WIDTH = 80


def bar_width_for(terminal_width: int, fixed_len: int) -> int:
    """Columns left for the bar after the fixed text, clamped to [10, 50]."""
    return min(max(terminal_width - fixed_len - 2, MIN_BAR_WIDTH), MAX_BAR_WIDTH)


def render_progress_line(
    done: int,
    total: int,
    rate: float,
    progress: float,
    terminal_width: int = DEFAULT_TERMINAL_WIDTH,
) -> Text:
    """Render ``done``/``total`` bytes at ``rate`` as a status line.

    Both byte counts share the unit chosen for the larger of the two.
    """
    progress = min(max(progress, 0.0), 1.0)
    unit = get_size_unit(max(done, total))
    done_str = format_size(done, unit)
    total_str = format_size(total, unit)
    speed_str = format_speed(rate)
    eta_str = format_time(estimate_eta(total - done, rate) if total > 0 else -1)
    percent = int(progress * 100)

    prefix = f"{percent:>3}% "
    suffix = f" {done_str}/{total_str} {speed_str} eta {eta_str}"
    width = bar_width_for(terminal_width, len(prefix) + 2 + len(suffix))

    line = Text(prefix)
    line.append_text(make_progress_bar(progress, width))
    line.append(suffix)
    return line


class ProgressReporter:
    """Writes status lines and one-off messages for a transfer."""

    def __init__(
        self,
        console: Console | None = None,
        err_console: Console | None = None,
        quiet: bool = False,
    ):
        """Initialize progress reporter.

        Args:
            console: Console for informational lines (stdout)
            err_console: Console for the live status line (stderr)
            quiet: Suppress all output

        """
        self.console = console or create_console()
        self.err_console = err_console or create_console(stderr=True)
        self.quiet = quiet
        self._line_active = False

    @property
    def terminal_width(self) -> int:
        """Current width of the status console."""
        return self.err_console.width or DEFAULT_TERMINAL_WIDTH

    def render(
        self,
        status: TransferStatus,
        target: int | None = None,
        terminal_width: int | None = None,
    ) -> Text:
        """Render the download line, or the seeding line when ``target`` is given.

        Args:
            status: Engine status snapshot
            target: Upload byte target while seeding; None while downloading
            terminal_width: Width to fit; defaults to the status console width

        Returns:
            Status line

        """
        width = self.terminal_width if terminal_width is None else terminal_width
        if target is None:
            return render_progress_line(
                status.downloaded,
                status.total_size,
                status.download_rate,
                status.progress,
                width,
            )
        progress = min(status.uploaded / target, 1.0) if target > 0 else 0.0
        return render_progress_line(
            status.uploaded,
            target,
            status.upload_rate,
            progress,
            width,
        )

    def render_waiting(self, status: TransferStatus) -> Text:
        """Render the line shown while metadata is being fetched."""
        return Text(
            f"Waiting for metadata... peers: {status.num_peers}, "
            f"DHT nodes: {status.dht_nodes}"
        )

    def update(self, line: Text) -> None:
        """Overwrite the current status line in place.

        Skipped when stderr is not a terminal, where the line could not be
        redrawn.
        """
        if self.quiet or not self.err_console.is_terminal:
            return
        self.err_console.control(Control.move_to_column(0))
        self.err_console.print(line, end="", no_wrap=True, overflow="crop", crop=True)
        self.err_console.control(Control((ControlType.ERASE_IN_LINE, 0)))
        self.err_console.file.flush()
        self._line_active = True

    def end_line(self) -> None:
        """Move past the status line so later output starts on a fresh line."""
        if self.quiet or not self._line_active:
            return
        self.err_console.print()
        self._line_active = False

    def info(self, message: str) -> None:
        """Print an informational line on stdout."""
        if self.quiet:
            return
        self.console.print(message, markup=False, highlight=False)

    def notice(self, message: str, bell: bool = False) -> None:
        """Print a notice on stderr, below any active status line."""
        if self.quiet:
            return
        self.end_line()
        self.err_console.print(message, markup=False, highlight=False)
        if bell:
            self.err_console.bell()
