"""Typer application and CLI entry point for skyclient.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``login``, ``setup``, ``session``, ``config``).

Invoked without a sub-command, ``skyclient`` runs the whole bootstrap:
``--setup`` provisions the workstation first, then the
operator is prompted for credentials; ``--setup-only`` stops after
provisioning.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under ``~/.skyclient/logs``.

See Also:
    :mod:`skyclient.config`: Preset and settings resolution.
    :mod:`skyclient.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from skyclient import __version__
from skyclient.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE


app = typer.Typer(
    name="skyclient",
    help="Log in to the Skyclient identity service and provision this workstation.",
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Sub-commands
# ------------------------------------------------------------------ #

from skyclient.commands.config import config_app  # noqa: E402
from skyclient.commands.login import login_command, run_login  # noqa: E402
from skyclient.commands.session import session_app  # noqa: E402
from skyclient.commands.setup import run_setup_step, setup_command  # noqa: E402

app.command("login")(login_command)
app.command("setup")(setup_command)
app.add_typer(session_app, name="session", help="Inspect or remove the stored session.")
app.add_typer(config_app, name="config", help="Show the effective configuration.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"skyclient {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    preset: Optional[str] = typer.Option(
        None, "--preset", "-p", help="Settings preset (default or local)."
    ),
    kratos_url: Optional[str] = typer.Option(
        None, "--kratos-url", help="Override the Kratos public API URL."
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        envvar=["SKYCLIENT_DEBUG", "DEBUG"],
        help="Enable debug output.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    setup: bool = typer.Option(
        False,
        "--setup",
        "-s",
        help="Run initial system setup (create directories and download configs) before login.",
    ),
    setup_only: bool = typer.Option(
        False, "--setup-only", help="Run setup only (don't perform login)."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~skyclient.output.OutputManager` and the
    ``skyclient`` logger from CLI flags, and stores the settings overrides
    in the Typer context so that sub-commands can read them via ``ctx.obj``.
    Without a sub-command it runs setup and/or login itself.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        preset: Preset name override (highest precedence).
        kratos_url: Identity service URL override (highest precedence).
        debug: Show the step-by-step login narration.
        quiet: Suppress non-essential diagnostic output.
        no_color: Disable all colour and Rich markup.
        setup: Provision the workstation before logging in.
        setup_only: Provision the workstation and skip login.
    """
    from skyclient.exceptions import SkyclientError
    from skyclient.output import OutputManager, configure_logging, error, set_output

    output = OutputManager(no_color=no_color, quiet=quiet)
    set_output(output)
    configure_logging(debug=debug, no_color=output.no_color)

    ctx.ensure_object(dict)
    ctx.obj["preset"] = preset
    ctx.obj["kratos_url"] = kratos_url

    if ctx.invoked_subcommand is not None:
        if setup or setup_only:
            error("--setup and --setup-only cannot be combined with a sub-command.")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        return

    from skyclient.commands import settings_from_context

    try:
        settings = settings_from_context(ctx)
        if setup or setup_only:
            run_setup_step(settings)
        if setup_only:
            return
        run_login(settings)
    except SkyclientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from skyclient.config import get_logs_dir

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = get_logs_dir() / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``skyclient`` console script.

    Unhandled :class:`~skyclient.exceptions.SkyclientError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from skyclient.exceptions import SkyclientError
        from skyclient.output import error

        if isinstance(exc, SkyclientError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
