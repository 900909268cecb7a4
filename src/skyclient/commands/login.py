"""Login command -- authenticate against Kratos and save the session.

Prompts for an email (unless ``--email`` is given) and a hidden password,
runs :class:`~skyclient.auth.login.LoginMachine` and reports where the
session was saved.

Typical workflow::

    skyclient login
    skyclient login --email pilot@example.com
    skyclient --preset local login
"""

from __future__ import annotations

from typing import Optional

import typer

from skyclient.auth import LoginOutcome, perform_login
from skyclient.commands import settings_from_context
from skyclient.exceptions import InvalidUsageError, SkyclientError
from skyclient.models import Credentials, Settings
from skyclient.output import error, info, success, suggest


def prompt_credentials(email: Optional[str] = None) -> Credentials:
    """Ask for the email (if not supplied) and the password.

    Raises:
        InvalidUsageError: If either value is empty.
    """
    if email is None:
        email = typer.prompt("Enter your email", default="", show_default=False)
    password = typer.prompt(
        "Enter your password",
        default="",
        show_default=False,
        hide_input=True,
    )
    if not email.strip() or not password:
        raise InvalidUsageError("Email and password cannot be empty")
    return Credentials(identifier=email, secret=password)


def report_outcome(outcome: LoginOutcome) -> None:
    """Print the post-login summary to stderr."""
    record = outcome.record
    success(f"Login successful! Session saved to: {outcome.path}")
    info(f"User: {record.email} (ID: {record.user_id})")
    if record.workspace_id:
        info(f"Workspace ID: {record.workspace_id}")
    if outcome.has_bearer_token:
        info(f"JWT token: {record.jwt_token[:20]}...")
    else:
        info("Session saved without a JWT token")


def run_login(settings: Settings, email: Optional[str] = None) -> LoginOutcome:
    """Prompt for credentials, log in and report the result.

    Args:
        settings: Effective settings.
        email: Pre-filled identifier; prompted for when ``None``.

    Returns:
        The :class:`~skyclient.auth.login.LoginOutcome`.

    Raises:
        SkyclientError: Any login failure, unchanged.
    """
    info(f"Logging in to {settings.kratos_url}")
    credentials = prompt_credentials(email)
    outcome = perform_login(settings, credentials)
    report_outcome(outcome)
    return outcome


def login_command(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(
        None, "--email", "-e", help="Account email (prompted for when omitted)."
    ),
) -> None:
    """Log in with email and password and save the session.

    The session record is written to ``~/.skyclient/token`` (or the
    configured token file) with ``0600`` permissions.

    Raises:
        typer.Exit: With the error's exit code on failure (2 for empty
            credentials, 3 for rejected credentials, 6 for network errors,
            7 for unexpected responses, 8 when the session cannot be saved).

    Example::

        skyclient login
        skyclient login --email pilot@example.com
    """
    try:
        settings = settings_from_context(ctx)
        run_login(settings, email)
    except SkyclientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    suggest("Inspect it: skyclient session show")
