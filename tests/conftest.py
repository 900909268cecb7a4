"""Shared test fixtures for skyclient.

Provides reusable fixtures for isolating the skyclient home directory,
building settings, faking the Kratos API with :class:`httpx.MockTransport`,
managing output state and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from skyclient.models import Settings
from skyclient.output import OutputManager, reset_output, set_output


KRATOS_URL = "https://kratos.test"
ACTION_URL = f"{KRATOS_URL}/self-service/login?flow=abc-123"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the skyclient logger after every test.

    The OutputManager and the logging handler cache references to
    sys.stdout/sys.stderr at creation time. When Typer's CliRunner
    redirects those streams during a test and the test finishes, the cached
    references become stale ("I/O operation on closed file"). Resetting
    forces fresh objects on next use.
    """
    yield
    reset_output()
    logger = logging.getLogger("skyclient")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Home directory isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate skyclient state to a temporary directory.

    Points ``SKYCLIENT_HOME`` and ``SKYCLIENT_WORKSPACE`` at
    subdirectories of tmp_path and clears every other variable that feeds
    settings resolution, so that tests never touch the real ``~/.skyclient``.

    Returns:
        The skyclient home directory (not yet created).
    """
    home = tmp_path / ".skyclient"
    monkeypatch.setenv("SKYCLIENT_HOME", str(home))
    monkeypatch.setenv("SKYCLIENT_WORKSPACE", str(tmp_path / "autrikos"))
    for var in [
        "SKYCLIENT_PRESET",
        "SKYCLIENT_KRATOS_URL",
        "SKYCLIENT_TOKEN_FILE",
        "SKYCLIENT_DEBUG",
        "DEBUG",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fake Kratos host and a temporary home."""
    return _make_settings(tmp_path)


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Factory for settings with field overrides."""

    def _factory(**overrides: Any) -> Settings:
        return _make_settings(tmp_path, **overrides)

    return _factory


def _make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "kratos_url": KRATOS_URL,
        "home_dir": tmp_path / ".skyclient",
        "workspace_dir": tmp_path / "autrikos",
        "filebrowser_config_url": "https://config.test/filebrowser-settings.json",
        "docker_compose_url": "https://config.test/docker-compose.yaml",
        "mavlink_router_config_url": "https://config.test/mavlink-router.conf",
    }
    values.update(overrides)
    return Settings(**values)


# ---------------------------------------------------------------------------
# Fake Kratos
# ---------------------------------------------------------------------------


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    """Build an httpx.Response with a JSON body."""
    return httpx.Response(status_code=status_code, json=data)


def login_success_body(
    session_token: str = "st-abcdefghijklmnopqrstuvwxyz",
    user_id: str = "user-1",
    company_id: Optional[str] = "ws-9",
) -> dict[str, Any]:
    identity: dict[str, Any] = {"id": user_id}
    if company_id is not None:
        identity["metadata_public"] = {"company_id": company_id}
    return {"session_token": session_token, "session": {"identity": identity}}


class FakeKratos:
    """A scripted Kratos public API behind an httpx.MockTransport.

    Each endpoint answers with the response (or raises the exception)
    configured on the instance. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.flow: Any = json_response({"id": "abc-123", "ui": {"action": ACTION_URL}})
        self.login: Any = json_response(login_success_body())
        self.whoami: Any = json_response({"tokenized": "jwt-0123456789abcdefghijklmnop"})
        self.requests: list[httpx.Request] = []

    def _answer(self, configured: Any) -> httpx.Response:
        if isinstance(configured, Exception):
            raise configured
        return configured

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/self-service/login/api":
            return self._answer(self.flow)
        if request.method == "POST" and path == "/self-service/login":
            return self._answer(self.login)
        if request.method == "GET" and path == "/sessions/whoami":
            return self._answer(self.whoami)
        return httpx.Response(404, json={"error": {"message": "not found"}})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    def login_body(self) -> dict[str, Any]:
        posted = [r for r in self.requests if r.method == "POST"]
        return json.loads(posted[-1].content)


@pytest.fixture
def fake_kratos() -> FakeKratos:
    """A :class:`FakeKratos` with happy-path answers on every endpoint."""
    return FakeKratos()


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, unstyled output manager for tests that ignore output."""
    output = OutputManager(styled=False, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_home(isolated_home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated home with the fake Kratos URL configured."""
    monkeypatch.setenv("SKYCLIENT_KRATOS_URL", KRATOS_URL)
    return isolated_home


@pytest.fixture
def kratos_cli(cli_home: Path, fake_kratos: FakeKratos, monkeypatch: pytest.MonkeyPatch) -> FakeKratos:
    """Route ``skyclient login`` through :class:`FakeKratos`."""
    from skyclient.auth.login import perform_login

    def _perform_login(settings, credentials):
        return perform_login(settings, credentials, transport=fake_kratos.transport)

    monkeypatch.setattr("skyclient.commands.login.perform_login", _perform_login)
    return fake_kratos


@pytest.fixture
def config_server(cli_home: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, httpx.Response]:
    """Route ``skyclient setup`` downloads through a mock transport.

    Returns the mapping of URL path to response; tests may remove entries
    to simulate failed downloads (answered with 404).
    """
    from skyclient.bootstrap.provision import run_setup

    bodies: dict[str, httpx.Response] = {
        "/your-repo/config/main/filebrowser-settings.json": httpx.Response(200, text="{}"),
        "/your-repo/config/main/docker-compose.yaml": httpx.Response(200, text="services: {}\n"),
        "/your-repo/config/main/mavlink-router.conf": httpx.Response(200, text="[General]\n"),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path in bodies:
            return bodies[request.url.path]
        return httpx.Response(404, text="Not Found")

    def _run_setup(settings):
        return run_setup(settings, transport=httpx.MockTransport(handler))

    monkeypatch.setattr("skyclient.commands.setup.run_setup", _run_setup)
    return bodies
