"""Tests for the ``yt-resolve doctor`` command (cli/doctor.py).

Dependency presence is simulated through ``sys.modules`` and
``collect_checks`` patches — no system state is inspected for real.

Coverage:
* Individual check functions return ``(label, value, status)`` tuples.
* A missing yt-dlp or httpx turns into a FAIL row and exit code 1.
* Plain-text output when Rich is not installed.
* CLI routing dispatches to ``run_doctor``.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from yt_resolve.cli import exit_codes
from yt_resolve.cli.doctor import (
    _httpx_check,
    _interpreter_check,
    _os_check,
    _python_version_check,
    _ytdlp_version_check,
    collect_checks,
    run_doctor,
)
from yt_resolve.version import __version__

_ALL_OK = [
    ("yt-resolve", __version__, "[green]OK[/green]"),
    ("Python", "3.12.0", "[green]OK[/green]"),
    ("yt-dlp", "2024.12.13", "[green]OK[/green]"),
]


# ---------------------------------------------------------------------------
# Individual check functions
# ---------------------------------------------------------------------------

class TestPythonVersionCheck:
    def test_current_interpreter_passes(self) -> None:
        label, value, status = _python_version_check()
        assert label == "Python"
        assert isinstance(value, str)
        assert "OK" in status


class TestYtdlpChecks:
    @patch.dict("sys.modules", {"yt_dlp": None, "yt_dlp.version": None})
    def test_not_installed(self) -> None:
        label, value, status = _ytdlp_version_check()
        assert label == "yt-dlp"
        assert value == "NOT INSTALLED"
        assert "FAIL" in status

    @patch.dict("sys.modules", {"yt_dlp": None, "yt_dlp.jsinterp": None})
    def test_interpreter_missing(self) -> None:
        label, _value, status = _interpreter_check()
        assert label == "sandbox"
        assert "FAIL" in status

    @patch("yt_resolve.cli.doctor.importlib.import_module", return_value=object())
    def test_interpreter_class_missing(self, _mock_import: MagicMock) -> None:
        _label, value, status = _interpreter_check()
        assert value == "JSInterpreter missing"
        assert "FAIL" in status

    @patch("yt_resolve.cli.doctor.importlib.import_module")
    def test_interpreter_present(self, mock_import: MagicMock) -> None:
        mock_import.return_value.JSInterpreter = object
        _label, _value, status = _interpreter_check()
        assert "OK" in status


class TestHttpxCheck:
    def test_installed(self) -> None:
        label, _value, status = _httpx_check()
        assert label == "httpx"
        assert "OK" in status

    @patch.dict("sys.modules", {"httpx": None})
    def test_not_installed(self) -> None:
        _label, value, status = _httpx_check()
        assert value == "NOT INSTALLED"
        assert "FAIL" in status


class TestOsCheck:
    @patch("yt_resolve.cli.doctor.platform.machine", return_value="arm64")
    @patch("yt_resolve.cli.doctor.platform.release", return_value="23.4.0")
    @patch("yt_resolve.cli.doctor.platform.system", return_value="Darwin")
    def test_darwin_is_displayed_as_macos(
        self,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
    ) -> None:
        label, value, status = _os_check()
        assert label == "OS"
        assert value == "macOS 23.4.0 (arm64)"
        assert "OK" in status


class TestCollectChecks:
    def test_order(self) -> None:
        labels = [label for label, _, _ in collect_checks()]
        assert labels == ["yt-resolve", "Python", "yt-dlp", "sandbox", "httpx", "OS"]

    def test_version_row(self) -> None:
        assert collect_checks()[0][1] == __version__


# ---------------------------------------------------------------------------
# run_doctor integration
# ---------------------------------------------------------------------------

class TestRunDoctor:
    @patch("yt_resolve.cli.doctor.collect_checks", return_value=_ALL_OK)
    def test_all_pass_returns_success(self, _mock_checks: MagicMock) -> None:
        assert run_doctor() == exit_codes.SUCCESS

    @patch(
        "yt_resolve.cli.doctor.collect_checks",
        return_value=[*_ALL_OK, ("httpx", "NOT INSTALLED", "[red]FAIL[/red]")],
    )
    def test_failure_returns_general_error(self, _mock_checks: MagicMock) -> None:
        assert run_doctor() == exit_codes.GENERAL_ERROR

    @patch("yt_resolve.cli.doctor.collect_checks", return_value=_ALL_OK)
    @patch.dict("sys.modules", {"rich": None, "rich.table": None, "rich.console": None})
    def test_plain_output_without_rich(
        self,
        _mock_checks: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_doctor() == exit_codes.SUCCESS

        err = capsys.readouterr().err
        assert "yt-resolve doctor" in err
        assert "2024.12.13" in err
        assert "[green]" not in err
        assert "All checks passed." in err


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestDoctorRouting:
    @patch("yt_resolve.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_dispatches(self, mock_run: MagicMock) -> None:
        from yt_resolve.cli.app import main

        assert main(["doctor"]) == exit_codes.SUCCESS
        mock_run.assert_called_once()

    @patch("yt_resolve.cli.doctor.run_doctor", return_value=exit_codes.GENERAL_ERROR)
    def test_doctor_failure_propagates(self, _mock_run: MagicMock) -> None:
        from yt_resolve.cli.app import main

        assert main(["doctor"]) == exit_codes.GENERAL_ERROR
