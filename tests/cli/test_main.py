"""Tests for the curlent command line."""

from __future__ import annotations

import sys

import pytest
from click.testing import CliRunner

from curlent import __version__
from curlent.cli import main as cli_main
from curlent.cli.main import cli, main
from curlent.models import EngineSettings, TransferStatus
from curlent.session.persistence import default_state_path
from curlent.utils.exceptions import EngineError, IdentifierNotFoundError

pytestmark = [pytest.mark.cli]

GIB = 1024**3
MAGNET = "magnet:?xt=urn:btih:0123456789abcdef0123456789abcdef01234567"

METADATA = TransferStatus(has_metadata=True, name="example", total_size=GIB, num_files=1)
DONE = METADATA.model_copy(update={"is_seeding": True, "progress": 1.0, "downloaded": GIB})
SEEDED = DONE.model_copy(update={"uploaded": 4 * GIB})


class InstantClock:
    def now(self) -> float:
        return 0.0

    def sleep(self, seconds: float) -> None:
        return None


class FixedGuard:
    """Guard answering from a script; the last answer repeats."""

    def __init__(self, answers):
        self.answers = answers
        self.calls = 0

    def is_up(self, interface_name: str) -> bool:
        answer = self.answers[min(self.calls, len(self.answers) - 1)]
        self.calls += 1
        return answer


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def engine_factory(monkeypatch, make_engine):
    """Patch engine creation and record what the CLI asked for."""
    created = {}

    def _install(statuses=None, **kwargs):
        engine = make_engine(statuses or [METADATA, DONE], **kwargs)

        def _create(settings, saved_state):
            created["settings"] = settings
            created["saved_state"] = saved_state
            created["engine"] = engine
            return engine

        monkeypatch.setattr(cli_main, "_create_engine", _create)
        return created

    monkeypatch.setattr("curlent.session.lifecycle.Clock", InstantClock)
    return _install


@pytest.fixture
def guard(monkeypatch):
    """Patch the network guard with scripted answers."""

    def _install(answers):
        instance = FixedGuard(answers)
        monkeypatch.setattr(cli_main, "NetworkGuard", lambda: instance)
        return instance

    return _install


class TestUsage:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "MAGNET_OR_TORRENT" in result.output
        assert "--no-seed" in result.output
        assert "--interface" in result.output

    def test_short_help(self, runner):
        assert runner.invoke(cli, ["-h"]).exit_code == 0

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_identifier_exits_one(self, capsys):
        assert main([]) == 1

    @pytest.mark.parametrize("ratio", ["abc", "nan", "-1", "inf"])
    def test_invalid_ratio_exits_one(self, ratio, capsys):
        assert main([MAGNET, f"--ratio={ratio}"]) == 1
        assert "ratio" in capsys.readouterr().err.lower()

    def test_unknown_option_exits_one(self, capsys):
        assert main([MAGNET, "--bogus"]) == 1


class TestRun:
    def test_download_without_seeding(self, runner, engine_factory, tmp_path):
        created = engine_factory()
        out_dir = tmp_path / "dl"

        result = runner.invoke(cli, [MAGNET, "-n", "-o", str(out_dir)])

        assert result.exit_code == 0, result.output
        assert "Adding magnet link..." in result.output
        assert "Name: example" in result.output
        assert out_dir.is_dir()
        assert created["engine"].resolved == [(MAGNET, out_dir)]
        assert created["engine"].closed is True
        assert default_state_path().read_bytes() == b"engine-state"

    def test_saved_state_is_restored(self, runner, engine_factory, tmp_path):
        state_path = default_state_path()
        state_path.parent.mkdir(parents=True)
        state_path.write_bytes(b"previous")
        created = engine_factory()

        result = runner.invoke(cli, [MAGNET, "-n", "-o", str(tmp_path / "dl")])

        assert result.exit_code == 0, result.output
        assert created["saved_state"] == b"previous"

    def test_seeds_to_ratio(self, runner, engine_factory, tmp_path):
        engine_factory([METADATA, DONE, SEEDED])
        result = runner.invoke(cli, [MAGNET, "-r", "1.5", "-o", str(tmp_path / "dl")])
        assert result.exit_code == 0, result.output
        assert "Seeding complete!" in result.output

    def test_quiet_prints_nothing(self, runner, engine_factory, tmp_path):
        engine_factory()
        result = runner.invoke(cli, [MAGNET, "-q", "-n", "-o", str(tmp_path / "dl")])
        assert result.exit_code == 0
        assert result.output == ""

    def test_config_file_supplies_defaults(self, runner, engine_factory, tmp_path):
        engine_factory([METADATA, DONE, SEEDED])
        out_dir = tmp_path / "from-config"
        config = tmp_path / "curlent.conf"
        config.write_text(f"output = {out_dir}\nno-seed = true\n")

        result = runner.invoke(cli, [MAGNET, "-c", str(config)])

        assert result.exit_code == 0, result.output
        assert out_dir.is_dir()
        assert "Seeding complete!" not in result.output

    def test_bad_config_file(self, runner, engine_factory, tmp_path):
        config = tmp_path / "curlent.conf"
        config.write_text("ratio = many\n")
        result = runner.invoke(cli, [MAGNET, "-c", str(config)])
        assert result.exit_code == 1
        assert "Invalid ratio" in result.output

    def test_interface_passed_to_engine(self, runner, engine_factory, guard, tmp_path):
        created = engine_factory()
        guard([True])
        result = runner.invoke(cli, [MAGNET, "-n", "-i", "wg0", "-o", str(tmp_path / "dl")])
        assert result.exit_code == 0, result.output
        assert created["settings"].interface == "wg0"


class TestFailures:
    def test_interface_down_before_start(self, runner, engine_factory, guard, tmp_path):
        created = engine_factory()
        guard([False])

        result = runner.invoke(cli, [MAGNET, "-i", "wg0", "-o", str(tmp_path / "dl")])

        assert result.exit_code == 1
        assert "interface wg0 is not up" in result.output
        assert "engine" not in created

    def test_kill_switch_mid_transfer(self, runner, engine_factory, guard, tmp_path):
        created = engine_factory([METADATA])
        guard([True, True, False])

        result = runner.invoke(cli, [MAGNET, "-i", "tun0", "-o", str(tmp_path / "dl")])

        assert result.exit_code == 1
        assert "Kill switch: interface tun0 is down" in result.output
        assert created["engine"].closed is True
        assert default_state_path().exists()

    def test_missing_torrent_file(self, runner, engine_factory, tmp_path):
        engine_factory(resolve_error=IdentifierNotFoundError("file not found: gone.torrent"))
        result = runner.invoke(cli, ["gone.torrent", "-o", str(tmp_path / "dl")])
        assert result.exit_code == 1
        assert "file not found: gone.torrent" in result.output
        assert not default_state_path().exists()

    def test_engine_error_mid_transfer(self, runner, engine_factory, tmp_path):
        engine_factory([METADATA, RuntimeError("disk full")])
        result = runner.invoke(cli, [MAGNET, "-o", str(tmp_path / "dl")])
        assert result.exit_code == 1
        assert "disk full" in result.output

    def test_main_returns_exit_status(self, engine_factory, tmp_path, capsys):
        engine_factory()
        assert main([MAGNET, "-n", "-q", "-o", str(tmp_path / "dl")]) == 0


def test_engine_requires_libtorrent(monkeypatch):
    """A missing libtorrent install is reported as an engine error."""
    monkeypatch.setitem(sys.modules, "libtorrent", None)
    monkeypatch.delitem(sys.modules, "curlent.engine.libtorrent_engine", raising=False)
    with pytest.raises(EngineError, match="libtorrent is not installed"):
        cli_main._create_engine(EngineSettings(), None)
