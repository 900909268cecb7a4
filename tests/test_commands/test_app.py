"""Tests for the console-script entry point."""

from __future__ import annotations

import pytest

from skyclient import app as app_module
from skyclient.exceptions import ProtocolError
from skyclient.output import OutputManager, set_output


@pytest.fixture(autouse=True)
def _plain_output(monkeypatch):
    monkeypatch.setattr(app_module, "_setup_signal_handlers", lambda: None)
    set_output(OutputManager(no_color=True))


class TestMain:
    def test_skyclient_error_exit_code(self, monkeypatch, capsys, isolated_home) -> None:
        def _boom() -> None:
            raise ProtocolError("Failed to get action URL from login flow")

        monkeypatch.setattr(app_module, "app", _boom)
        with pytest.raises(SystemExit) as exc_info:
            app_module.main()
        assert exc_info.value.code == 7
        assert capsys.readouterr().err == "Error: Failed to get action URL from login flow\n"

    def test_unexpected_error_writes_crash_log(self, monkeypatch, capsys, isolated_home) -> None:
        def _boom() -> None:
            raise ZeroDivisionError("oops")

        monkeypatch.setattr(app_module, "app", _boom)
        with pytest.raises(SystemExit) as exc_info:
            app_module.main()
        assert exc_info.value.code == 1

        logs = list((isolated_home / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "ZeroDivisionError: oops" in logs[0].read_text()
        assert "Unexpected error. Debug log:" in capsys.readouterr().err

    def test_keyboard_interrupt_exit_130(self, monkeypatch, isolated_home) -> None:
        def _interrupt() -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr(app_module, "app", _interrupt)
        with pytest.raises(SystemExit) as exc_info:
            app_module.main()
        assert exc_info.value.code == 130
