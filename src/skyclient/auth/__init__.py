"""Kratos email/password login for skyclient.

The main entry points are:

- :class:`KratosClient` -- the three identity-service calls (create login
  flow, submit credentials, exchange the session for a JWT).
- :class:`LoginMachine` -- runs those calls in order and persists the result.
- :class:`SessionStore` -- the ``~/.skyclient/token`` file.
- :func:`perform_login` -- convenience wrapper used by the CLI.

Typical usage::

    from skyclient.auth import perform_login

    outcome = perform_login(settings, credentials)
    print(outcome.record.user_id)
"""

from skyclient.auth.kratos import KratosClient
from skyclient.auth.login import LoginMachine, LoginOutcome, LoginState, perform_login
from skyclient.auth.session_store import SessionStore

__all__ = [
    "KratosClient",
    "LoginMachine",
    "LoginOutcome",
    "LoginState",
    "SessionStore",
    "perform_login",
]
