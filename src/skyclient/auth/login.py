"""Login state machine -- sequences the Kratos steps and persists the session.

States::

    IDLE -> FLOW_INITIATED -> CREDENTIALS_SUBMITTED -+-> AUTHENTICATED
                                                     |     -> TOKEN_EXCHANGE_ATTEMPTED
                                                     |     -> PERSISTED
                                                     +-> REJECTED

* Flow initiation, credential submission and persistence failures propagate
  unchanged and end the run.
* A rejected submission moves the machine to ``REJECTED`` and re-raises the
  :class:`~skyclient.exceptions.AuthenticationError`.
* Bearer-token exchange failures are absorbed: the machine logs a warning
  and persists the session with an empty ``jwt_token``.

Every network call happens at most once per :meth:`LoginMachine.run`.
Transitions are logged at DEBUG level on the ``skyclient.auth.login``
logger; the machine itself never writes to the console.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from skyclient.auth.kratos import KratosClient
from skyclient.auth.session_store import SessionStore
from skyclient.client.sync_client import SyncClient
from skyclient.exceptions import AuthenticationError, ProtocolError, TransportError
from skyclient.models import Credentials, SessionRecord, Settings

logger = logging.getLogger(__name__)


class LoginState(str, enum.Enum):
    """Lifecycle states of a single login attempt."""

    IDLE = "idle"
    FLOW_INITIATED = "flow_initiated"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"
    TOKEN_EXCHANGE_ATTEMPTED = "token_exchange_attempted"
    PERSISTED = "persisted"


@dataclass
class LoginOutcome:
    """What a successful run produced.

    Attributes:
        record: The session record that was written.
        path: Where it was written.
        exchange_error: The recovered token-exchange failure, or ``None``
            when a bearer token was obtained.
    """

    record: SessionRecord
    path: Path
    exchange_error: Optional[Exception] = None

    @property
    def has_bearer_token(self) -> bool:
        return bool(self.record.jwt_token)


class LoginMachine:
    """Drive one email/password login from flow creation to the session file.

    Args:
        kratos: Identity-service client bound to an open HTTP client.
        store: Destination for the session record.
    """

    def __init__(self, kratos: KratosClient, store: SessionStore) -> None:
        self._kratos = kratos
        self._store = store
        self._state = LoginState.IDLE
        self._history: list[LoginState] = [LoginState.IDLE]

    @property
    def state(self) -> LoginState:
        """The current state."""
        return self._state

    @property
    def history(self) -> list[LoginState]:
        """Every state visited so far, in order, starting with ``IDLE``."""
        return list(self._history)

    def _transition(self, new_state: LoginState) -> None:
        logger.debug("Login state: %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        self._history.append(new_state)

    def run(self, credentials: Credentials) -> LoginOutcome:
        """Run the login and persist the session.

        Args:
            credentials: Operator identifier and password. The identifier is
                stored as the record's ``email``.

        Returns:
            A :class:`LoginOutcome` describing the written record.

        Raises:
            RuntimeError: If the machine has already been run.
            TransportError: If flow initiation or submission cannot reach
                the identity service.
            ProtocolError: If flow initiation or submission gets malformed
                JSON.
            AuthenticationError: If the credentials are rejected.
            SessionWriteError: If the session file cannot be written.
        """
        if self._state is not LoginState.IDLE:
            raise RuntimeError(f"Login already ran (state: {self._state.value})")

        flow = self._kratos.initiate_login_flow()
        self._transition(LoginState.FLOW_INITIATED)

        self._transition(LoginState.CREDENTIALS_SUBMITTED)
        try:
            result = self._kratos.submit_login(flow.submission_url, credentials)
        except AuthenticationError:
            self._transition(LoginState.REJECTED)
            raise
        self._transition(LoginState.AUTHENTICATED)

        exchange_error: Optional[Exception] = None
        try:
            bearer = self._kratos.exchange_for_bearer_token(result.session_token)
        except (TransportError, ProtocolError) as exc:
            logger.warning("JWT token not available, continuing without it: %s", exc)
            bearer = ""
            exchange_error = exc
        self._transition(LoginState.TOKEN_EXCHANGE_ATTEMPTED)

        record = SessionRecord.from_login(result, credentials.identifier, bearer)
        self._store.save(record)
        self._transition(LoginState.PERSISTED)

        return LoginOutcome(
            record=record,
            path=self._store.path,
            exchange_error=exchange_error,
        )


def perform_login(
    settings: Settings,
    credentials: Credentials,
    transport: Optional[httpx.BaseTransport] = None,
) -> LoginOutcome:
    """Wire up the HTTP client, Kratos client and session store, then log in.

    Args:
        settings: Effective settings.
        credentials: Operator identifier and password.
        transport: Optional httpx transport (tests pass a mock).

    Returns:
        The :class:`LoginOutcome` of the run.
    """
    store = SessionStore.from_settings(settings)
    with SyncClient(settings, transport=transport) as http:
        machine = LoginMachine(KratosClient(settings, http), store)
        return machine.run(credentials)
