"""Setup command -- provision the skyclient directories and config files.

Creates ``~/.skyclient`` with its filebrowser sub-directories and the
``~/autrikos`` workspace, then downloads ``settings.json``,
``docker-compose.yaml`` and ``mavlink-router.conf``. A failed download
falls back to the built-in default and is reported as a warning.
"""

from __future__ import annotations

import typer

from skyclient.bootstrap import FileSource, SetupReport, run_setup
from skyclient.commands import settings_from_context
from skyclient.exceptions import SkyclientError
from skyclient.models import Settings
from skyclient.output import error, info, success, warning


def report_setup(report: SetupReport) -> None:
    """Summarise a :class:`~skyclient.bootstrap.SetupReport` on stderr."""
    for directory in report.created_dirs:
        info(f"Created {directory}")
    success("Directory structure created successfully")
    for provisioned in report.files:
        destination = provisioned.config_file.destination
        if provisioned.source is FileSource.DEFAULT:
            warning(
                f"Failed to download {provisioned.config_file.name} "
                f"({provisioned.error}); wrote default to {destination}"
            )
        else:
            info(f"Downloaded {destination}")
    success("Configuration files setup completed")


def run_setup_step(settings: Settings) -> SetupReport:
    """Run provisioning and print its summary."""
    info("Running initial system setup...")
    report = run_setup(settings)
    report_setup(report)
    success("Initial setup completed successfully!")
    return report


def setup_command(ctx: typer.Context) -> None:
    """Create the skyclient directories and fetch configuration files.

    Safe to run repeatedly: existing directories are kept and the
    configuration files are refreshed.

    Example::

        skyclient setup
        skyclient --preset local setup
    """
    try:
        settings = settings_from_context(ctx)
        run_setup_step(settings)
    except SkyclientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
