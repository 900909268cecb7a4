"""Workstation provisioning: directories and configuration files.

:func:`run_setup` performs the whole job:

1. :func:`create_directories` -- ``~/.skyclient``, the filebrowser
   ``config``/``database`` directories and the ``~/autrikos`` workspace.
2. :func:`download_config_files` -- fetches each :class:`ConfigFile` from its
   configured URL. A network failure or an HTTP error status is not fatal:
   the built-in content from :mod:`skyclient.bootstrap.defaults` is written
   instead and the fallback is recorded in the returned :class:`SetupReport`.

Running setup twice is safe; existing directories are left alone and the
configuration files are rewritten.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx

from skyclient.bootstrap import defaults
from skyclient.client.sync_client import SyncClient
from skyclient.config import atomic_write
from skyclient.exceptions import ProvisioningError, TransportError
from skyclient.models import Settings

logger = logging.getLogger(__name__)

CONFIG_FILE_MODE = 0o644
"""Permission bits for provisioned files; containers read them as another user."""


class FileSource(str, enum.Enum):
    """Where the content of a provisioned file came from."""

    DOWNLOADED = "downloaded"
    DEFAULT = "default"


@dataclass(frozen=True)
class ConfigFile:
    """A configuration file to provision.

    Attributes:
        name: Display name (the file's base name).
        url: Download source.
        destination: Where the file is written.
        default_content: Written when the download fails.
    """

    name: str
    url: str
    destination: Path
    default_content: str


@dataclass
class ProvisionedFile:
    """Result of provisioning one :class:`ConfigFile`."""

    config_file: ConfigFile
    source: FileSource
    error: Optional[str] = None


@dataclass
class SetupReport:
    """Everything :func:`run_setup` did."""

    created_dirs: list[Path] = field(default_factory=list)
    existing_dirs: list[Path] = field(default_factory=list)
    files: list[ProvisionedFile] = field(default_factory=list)

    @property
    def fallbacks(self) -> list[ProvisionedFile]:
        """Files that were written from built-in defaults."""
        return [f for f in self.files if f.source is FileSource.DEFAULT]


def required_directories(settings: Settings) -> list[Path]:
    """Directories that must exist after setup, parents first."""
    home = settings.home_dir
    return [
        home,
        home / "filebrowser" / "config",
        home / "filebrowser" / "database",
        settings.workspace_dir,
    ]


def config_files(settings: Settings) -> list[ConfigFile]:
    """The configuration files provisioned for *settings*."""
    home = settings.home_dir
    return [
        ConfigFile(
            name="settings.json",
            url=settings.filebrowser_config_url,
            destination=home / "filebrowser" / "config" / "settings.json",
            default_content=defaults.FILEBROWSER_SETTINGS,
        ),
        ConfigFile(
            name="docker-compose.yaml",
            url=settings.docker_compose_url,
            destination=home / "docker-compose.yaml",
            default_content=defaults.DOCKER_COMPOSE,
        ),
        ConfigFile(
            name="mavlink-router.conf",
            url=settings.mavlink_router_config_url,
            destination=home / "mavlink-router.conf",
            default_content=defaults.MAVLINK_ROUTER_CONF,
        ),
    ]


def create_directories(settings: Settings, report: Optional[SetupReport] = None) -> SetupReport:
    """Create every directory in :func:`required_directories`.

    Args:
        settings: Effective settings.
        report: Report to append to; a new one is created when omitted.

    Returns:
        The report with ``created_dirs`` and ``existing_dirs`` filled in.

    Raises:
        ProvisioningError: If a directory cannot be created.
    """
    report = report or SetupReport()
    for directory in required_directories(settings):
        if directory.is_dir():
            logger.debug("Directory already exists: %s", directory)
            report.existing_dirs.append(directory)
            continue
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisioningError(f"Failed to create {directory}: {exc}") from exc
        logger.debug("Created %s", directory)
        report.created_dirs.append(directory)
    return report


def _write(path: Path, content: str) -> None:
    try:
        atomic_write(path, content, mode=CONFIG_FILE_MODE)
    except OSError as exc:
        raise ProvisioningError(f"Failed to write {path}: {exc}") from exc


def install_config_file(client: SyncClient, config_file: ConfigFile) -> ProvisionedFile:
    """Download one configuration file, falling back to its default content.

    Args:
        client: An open HTTP client.
        config_file: What to fetch and where to put it.

    Returns:
        A :class:`ProvisionedFile` recording whether the download or the
        default was used.

    Raises:
        ProvisioningError: If the destination cannot be written.
    """
    logger.debug("Downloading %s from %s", config_file.name, config_file.url)
    try:
        response = client.get(config_file.url, headers={"Accept": "*/*"})
    except TransportError as exc:
        reason = str(exc)
    else:
        if response.is_success:
            _write(config_file.destination, response.text)
            return ProvisionedFile(config_file, FileSource.DOWNLOADED)
        reason = f"HTTP {response.status_code}"

    logger.info(
        "Failed to download %s from %s (%s); writing built-in default",
        config_file.name,
        config_file.url,
        reason,
    )
    _write(config_file.destination, config_file.default_content)
    return ProvisionedFile(config_file, FileSource.DEFAULT, error=reason)


def download_config_files(
    settings: Settings,
    client: SyncClient,
    report: Optional[SetupReport] = None,
) -> SetupReport:
    """Provision every file in :func:`config_files`.

    Args:
        settings: Effective settings.
        client: An open HTTP client.
        report: Report to append to; a new one is created when omitted.

    Returns:
        The report with ``files`` filled in.
    """
    report = report or SetupReport()
    for config_file in config_files(settings):
        report.files.append(install_config_file(client, config_file))
    return report


def run_setup(
    settings: Settings,
    transport: Optional[httpx.BaseTransport] = None,
) -> SetupReport:
    """Create the directory tree and provision the configuration files.

    Args:
        settings: Effective settings.
        transport: Optional httpx transport (tests pass a mock).

    Returns:
        A :class:`SetupReport` describing every action taken.

    Raises:
        ProvisioningError: If a directory or file cannot be written.
    """
    report = create_directories(settings)
    with SyncClient(settings, transport=transport) as client:
        download_config_files(settings, client, report)
    return report
