import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

from noice import __version__
from noice.cli import main, parse_args, resolve_initial_path
from noice.errors import EntryStatUnavailable

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _run_cli(*args, cwd=None):
    env = dict(os.environ)
    env["PYTHONPATH"] = str(PROJECT_ROOT / "src")
    return subprocess.run(
        [sys.executable, "-m", "noice.cli", *args],
        cwd=cwd or PROJECT_ROOT,
        env=env,
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        check=False,
    )


def test_main_requires_interactive_terminal(tmp_path):
    result = _run_cli(str(tmp_path))
    assert result.returncode == 1
    assert "requires an interactive terminal" in result.stderr
    assert result.stdout == ""


def test_main_rejects_two_directories(tmp_path):
    result = _run_cli(str(tmp_path), str(tmp_path))
    assert result.returncode == 1
    assert "usage: noice" in result.stderr


def test_main_version():
    result = _run_cli("--version")
    assert result.returncode == 0
    assert __version__ in result.stdout


def test_write_config(tmp_path):
    target = tmp_path / "noice.toml"

    result = _run_cli("--config", str(target), "--write-config")

    assert result.returncode == 0
    assert target.exists()
    assert "[filters]" in target.read_text(encoding="utf-8")


def test_write_config_keeps_existing_file(tmp_path, capsys):
    target = tmp_path / "noice.toml"
    target.write_text("# mine\n", encoding="utf-8")

    assert main(["--config", str(target), "--write-config"]) == 0

    assert target.read_text(encoding="utf-8") == "# mine\n"
    assert "already exists" in capsys.readouterr().out


def test_parse_args_defaults():
    args = parse_args([])
    assert args.directory is None
    assert args.config is None
    assert args.write_config is False
    assert args.debug_log is None


def test_resolve_initial_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert resolve_initial_path(None) == os.getcwd()
    assert resolve_initial_path("sub") == os.path.join(os.getcwd(), "sub")


@patch("noice.cli.locale.setlocale")
@patch("noice.cli.signal.signal")
@patch("noice.cli.is_interactive", return_value=True)
def test_main_reports_stat_failure(
    mock_interactive, mock_signal, mock_setlocale, tmp_path, capsys
):
    """A fatal lstat failure is printed after the terminal is restored."""
    error = EntryStatUnavailable(str(tmp_path / "gone"), "No such file or directory")
    with patch("noice.cli.Browser") as mock_browser:
        mock_browser.return_value.browse.side_effect = error
        status = main(["--config", str(tmp_path / "absent.toml"), str(tmp_path)])

    assert status == 1
    err = capsys.readouterr().err
    assert err.strip() == f"lstat: {tmp_path / 'gone'}: No such file or directory"


@patch("noice.cli.is_interactive", return_value=True)
def test_main_unreadable_directory(mock_interactive, tmp_path, capsys):
    missing = tmp_path / "missing"

    assert main([str(missing)]) == 1
    assert capsys.readouterr().err.strip() == f"{missing}: No such file or directory"
