"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~skyclient.exceptions.SkyclientError` subclass.
Provisioning scripts that wrap ``skyclient`` can inspect the exit code to
tell a rejected password apart from an unreachable identity service without
parsing stderr.

Example::

    $ skyclient login --email pilot@example.com
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- credentials were rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or empty credentials."""

EXIT_AUTH_FAILURE = 3
"""The identity service rejected the credentials."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_PROTOCOL_ERROR = 7
"""The identity service answered with malformed or unexpectedly shaped JSON."""

EXIT_SESSION_WRITE_ERROR = 8
"""The session file could not be written."""

EXIT_CANCELLED = 130
"""The operator interrupted the command with Ctrl-C."""
