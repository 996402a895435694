"""Command-line entry point for curlent.

    curlent <magnet_link_or_torrent_file> [OPTIONS]

Exit statuses: 0 success, 1 error or kill switch, 130 interrupted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import click

from curlent import __version__
from curlent.cli.progress import ProgressReporter
from curlent.cli.verbosity import VerbosityManager
from curlent.config.config import ConfigManager, parse_ratio
from curlent.engine.base import TransferEngine
from curlent.models import EngineSettings, ExitStatus, OutcomeKind, TransferSession
from curlent.session.lifecycle import LifecycleController
from curlent.session.network_guard import NetworkGuard
from curlent.session.persistence import StateStore
from curlent.utils.console_utils import create_console, print_error
from curlent.utils.exceptions import (
    ConfigurationError,
    CurlentError,
    EngineError,
    InterfaceDownError,
)
from curlent.utils.logging_config import get_logger, setup_logging
from curlent.utils.shutdown import CancellationToken, install_signal_handlers

logger = get_logger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _create_engine(settings: EngineSettings, saved_state: bytes | None) -> TransferEngine:
    """Build the production engine."""
    try:
        from curlent.engine.libtorrent_engine import LibtorrentEngine
    except ImportError as e:
        msg = "libtorrent is not installed (pip install 'curlent[libtorrent]')"
        raise EngineError(msg) from e
    return LibtorrentEngine(settings, saved_state)


def _validate_ratio(_ctx: click.Context, _param: click.Parameter, value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return parse_ratio(value, "--ratio")
    except ConfigurationError as e:
        raise click.BadParameter(e.message) from e


def _check_interface(session: TransferSession, guard: NetworkGuard) -> None:
    if session.kill_switch_enabled and not guard.is_up(session.interface):
        msg = f"interface {session.interface} is not up"
        raise InterfaceDownError(msg)


def run_transfer(
    session: TransferSession,
    store: StateStore | None = None,
    guard: NetworkGuard | None = None,
    cancel: CancellationToken | None = None,
    reporter: ProgressReporter | None = None,
) -> int:
    """Run one transfer end to end and return the process exit status."""
    store = store or StateStore()
    guard = guard or NetworkGuard()
    cancel = cancel or CancellationToken()
    reporter = reporter or ProgressReporter(quiet=session.quiet)

    _check_interface(session, guard)
    session.output_dir.mkdir(parents=True, exist_ok=True)

    engine = _create_engine(EngineSettings(interface=session.interface), store.load())
    controller = LifecycleController(
        session,
        engine,
        guard=guard,
        reporter=reporter,
        store=store,
        cancel=cancel,
    )
    restore_signals = install_signal_handlers(cancel)
    try:
        outcome = controller.run()
    finally:
        restore_signals()
        try:
            engine.close()
        except Exception:
            logger.debug("Engine close failed", exc_info=True)

    if outcome.kind is OutcomeKind.KILL_SWITCH_TRIPPED:
        print_error(f"Kill switch: interface {session.interface} is down")
    elif outcome.kind is OutcomeKind.ENGINE_ERROR:
        print_error(outcome.detail or "transfer failed")
    return outcome.exit_code


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("identifier", metavar="MAGNET_OR_TORRENT")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: current directory)",
)
@click.option(
    "--interface",
    "-i",
    metavar="IF",
    help="Bind to network interface with kill switch (e.g. tun0, wg0)",
)
@click.option(
    "--ratio",
    "-r",
    callback=_validate_ratio,
    metavar="RATIO",
    help="Seed ratio target (default: 2.0)",
)
@click.option("--no-seed", "-n", is_flag=True, help="Exit after download, don't seed")
@click.option("--quiet", "-q", is_flag=True, help="Quiet mode - minimal output")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file path (default: ~/.config/curlent/config)",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase log verbosity (-v: info, -vv: debug)",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write logs to this file")
@click.version_option(__version__, prog_name="curlent")
@click.pass_context
def cli(ctx, identifier, output, interface, ratio, no_seed, quiet, config_file, verbose, log_file):
    """Download a torrent from a magnet link or .torrent file, then seed it.

    Settings are read from the config file first; command-line flags override them.
    """
    err_console = create_console(stderr=True)
    try:
        config_manager = ConfigManager(config_file)
        cfg = config_manager.apply_overrides(
            output_dir=output,
            interface=interface,
            seed_ratio=ratio,
            no_seed=True if no_seed else None,
            quiet=True if quiet else None,
            log_file=log_file,
        )
    except ConfigurationError as e:
        print_error(str(e), console=err_console)
        ctx.exit(ExitStatus.FAILURE)

    verbosity = VerbosityManager.from_count(verbose, quiet=cfg.quiet)
    if cfg.log_level is not None and not verbose and not cfg.quiet:
        setup_logging(cfg.log_level.value, cfg.log_file)
    else:
        setup_logging(verbosity.logging_level, cfg.log_file)
    logger.debug("Using config file %s", config_manager.config_file)

    try:
        session = config_manager.to_session(identifier)
        code = run_transfer(session)
    except (CurlentError, OSError) as e:
        logger.debug("Fatal error before transfer loop", exc_info=True)
        print_error(str(e), console=err_console)
        code = ExitStatus.FAILURE
    ctx.exit(int(code))


def main(argv: Sequence[str] | None = None) -> int:
    """Console-script entry point; maps usage errors to exit status 1."""
    try:
        rv = cli.main(
            args=list(argv) if argv is not None else None,
            prog_name="curlent",
            standalone_mode=False,
        )
    except click.exceptions.Abort:
        return int(ExitStatus.INTERRUPTED)
    except click.ClickException as e:
        e.show()
        return int(ExitStatus.FAILURE)
    return int(rv or 0)
