"""Exception hierarchy for skyclient.

All exceptions inherit from :class:`SkyclientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`skyclient.exit_codes`.
The top-level error handler in :func:`skyclient.app.main` catches
``SkyclientError``, prints its message once to stderr and exits with the
matching code, while unexpected exceptions produce a crash log and exit with
:data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SkyclientError (exit 1)
    +-- InvalidUsageError     (exit 2)
    +-- AuthenticationError   (exit 3)
    +-- TransportError        (exit 6)
    +-- ProtocolError         (exit 7)
    +-- SessionWriteError     (exit 8)
    +-- ProvisioningError     (exit 1)
    +-- ConfigError           (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from skyclient.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROTOCOL_ERROR,
    EXIT_SESSION_WRITE_ERROR,
)

if TYPE_CHECKING:
    from skyclient.models import UIMessage


class SkyclientError(Exception):
    """Base exception for all skyclient errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`skyclient.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SkyclientError):
    """Raised for invalid CLI arguments or empty credentials."""

    exit_code = EXIT_INVALID_USAGE


class AuthenticationError(SkyclientError):
    """Raised when the identity service rejects the submitted credentials.

    The message is the provider-derived :attr:`reason` so that the operator
    sees e.g. ``"The provided credentials are invalid"`` rather than a
    generic failure.

    Args:
        reason: Failure reason extracted from the login response.
        ui_messages: All ``ui.messages`` entries of the rejected flow, kept
            for verbose diagnostics.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(
        self,
        reason: str,
        ui_messages: Optional[list[UIMessage]] = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.ui_messages = list(ui_messages or [])


class TransportError(SkyclientError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class ProtocolError(SkyclientError):
    """Raised when a response is not JSON or lacks a required field."""

    exit_code = EXIT_PROTOCOL_ERROR


class SessionWriteError(SkyclientError):
    """Raised when the session record cannot be written to disk."""

    exit_code = EXIT_SESSION_WRITE_ERROR


class ConfigError(SkyclientError):
    """Raised for configuration problems (unknown preset, invalid config file)."""

    exit_code = EXIT_GENERIC_FAILURE


class ProvisioningError(SkyclientError):
    """Raised when setup cannot create a directory or write a configuration file."""

    exit_code = EXIT_GENERIC_FAILURE
