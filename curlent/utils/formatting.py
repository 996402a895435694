"""Display formatting for byte counts, rates, durations and progress bars."""

from __future__ import annotations

from rich.text import Text

SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB")
MAX_UNIT = len(SIZE_UNITS) - 1

INFINITY = "∞"
ONE_YEAR_SECONDS = 86400 * 365

BAR_FILLED_STYLE = "green"
BAR_EMPTY_STYLE = "bright_black"


def get_size_unit(num_bytes: float) -> int:
    """Return the index of the largest unit keeping the value below 1024."""
    unit_index = 0
    size = float(num_bytes)
    while size >= 1024 and unit_index < MAX_UNIT:
        size /= 1024
        unit_index += 1
    return unit_index


def format_size(num_bytes: float, unit: int | None = None) -> str:
    """Format a byte count as ``"12.3 MB"``.

    Args:
        num_bytes: Byte count
        unit: Force a unit index into SIZE_UNITS so two values line up

    Returns:
        Human-readable size

    """
    unit_index = get_size_unit(num_bytes) if unit is None else min(max(unit, 0), MAX_UNIT)
    size = float(num_bytes) / (1024**unit_index)
    return f"{size:.1f} {SIZE_UNITS[unit_index]}"


def format_speed(bytes_per_sec: float) -> str:
    """Format a transfer rate."""
    return f"{format_size(bytes_per_sec)}/s"


def format_time(seconds: int) -> str:
    """Format a duration, omitting zero-valued leading units.

    Negative durations and durations beyond one year are shown as the
    infinity symbol.
    """
    if seconds < 0 or seconds > ONE_YEAR_SECONDS:
        return INFINITY

    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def estimate_eta(remaining: float, rate: float) -> int:
    """Whole seconds until ``remaining`` bytes arrive at ``rate``, -1 if unknown."""
    if rate <= 0:
        return -1
    return int(max(remaining, 0) // rate)


def make_progress_bar(progress: float, width: int) -> Text:
    """Build a bracketed bar with exactly ``width`` cells between the brackets.

    The filled part uses ``#`` followed by a single ``|`` boundary glyph; the
    rest is padded with dimmed blanks. A full bar has no boundary glyph.
    """
    progress = min(max(progress, 0.0), 1.0)
    filled = int(progress * width)

    bar = Text("[")
    bar.append("#" * filled, style=BAR_FILLED_STYLE)
    if filled < width:
        bar.append("|", style=BAR_FILLED_STYLE)
        bar.append(" " * (width - filled - 1), style=BAR_EMPTY_STYLE)
    bar.append("]")
    return bar
