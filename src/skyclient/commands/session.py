"""Session commands -- inspect and remove the stored login session.

Provides the ``skyclient session`` sub-command group. The session file is
the one written by ``skyclient login`` (``~/.skyclient/token`` by default).
"""

from __future__ import annotations

import typer

from skyclient.auth import SessionStore
from skyclient.commands import settings_from_context
from skyclient.exceptions import SkyclientError
from skyclient.output import error, info, print_table, success, suggest


session_app = typer.Typer(no_args_is_help=True)


def _mask(value: str, visible: int = 20) -> str:
    """Truncate a token for display."""
    if not value:
        return ""
    if len(value) <= visible:
        return value
    return f"{value[:visible]}..."


def _store(ctx: typer.Context) -> SessionStore:
    try:
        return SessionStore.from_settings(settings_from_context(ctx))
    except SkyclientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@session_app.command("show")
def session_show(ctx: typer.Context) -> None:
    """Show the stored session.

    Token values are truncated to their first 20 characters.

    Raises:
        typer.Exit: With code 1 if there is no readable session file.

    Example::

        skyclient session show
    """
    store = _store(ctx)
    record = store.load()
    if record is None:
        if store.exists():
            error(f"Session file at {store.path} is unreadable.")
        else:
            error(f"No session found at {store.path}.")
        suggest("Log in first: skyclient login")
        raise typer.Exit(code=1)

    info(f"Session file: {store.path}")
    rows = [
        ["email", record.email],
        ["user_id", record.user_id],
        ["workspace_id", record.workspace_id],
        ["token", _mask(record.token)],
        ["jwt_token", _mask(record.jwt_token)],
    ]
    print_table(["Field", "Value"], rows, title="Session")


@session_app.command("clear")
def session_clear(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Delete without asking for confirmation."
    ),
) -> None:
    """Delete the stored session file.

    Example::

        skyclient session clear
        skyclient session clear --force
    """
    store = _store(ctx)
    if not store.exists():
        info(f"No session found at {store.path}.")
        return

    if not force:
        confirmed = typer.confirm(f"Delete session file {store.path}?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    store.clear()
    success(f"Session removed: {store.path}")
