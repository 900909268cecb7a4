"""Client for the Kratos self-service login API.

Implements the three network steps of an email/password login against an
`Ory Kratos <https://www.ory.sh/kratos/>`_ public endpoint:

1. :meth:`KratosClient.initiate_login_flow` --
   ``GET {kratos_url}/self-service/login/api`` returns a flow document whose
   ``ui.action`` is the URL credentials must be posted to.
2. :meth:`KratosClient.submit_login` -- ``POST {ui.action}`` with the
   identifier and password. Success is signalled only by a non-empty
   ``session_token``; Kratos answers a failed validation with a flow
   document (sometimes HTTP 200) whose ``ui.messages`` explain why.
3. :meth:`KratosClient.exchange_for_bearer_token` --
   ``GET {kratos_url}/sessions/whoami?tokenize_as=<template>`` turns the
   session token into a signed JWT.

Each field lookup is an ordered tuple of field paths (see
:mod:`skyclient.auth.fields`), defined once at module level.

See Also:
    :class:`~skyclient.auth.login.LoginMachine` -- sequences these steps.
"""

from __future__ import annotations

import logging
from typing import Any

from skyclient.auth.fields import FieldPath, first_non_empty
from skyclient.client.sync_client import SyncClient
from skyclient.exceptions import AuthenticationError, ProtocolError
from skyclient.models import Credentials, LoginFlow, LoginResult, Settings, UIMessage

logger = logging.getLogger(__name__)

LOGIN_FLOW_PATH = "/self-service/login/api"
WHOAMI_PATH = "/sessions/whoami"

SUBMISSION_URL_FIELDS: tuple[FieldPath, ...] = (("ui", "action"),)

SESSION_TOKEN_FIELDS: tuple[FieldPath, ...] = (("session_token",),)
USER_ID_FIELDS: tuple[FieldPath, ...] = (("session", "identity", "id"),)
WORKSPACE_ID_FIELDS: tuple[FieldPath, ...] = (
    ("session", "identity", "metadata_public", "company_id"),
)

FAILURE_REASON_FIELDS: tuple[FieldPath, ...] = (
    ("ui", "messages", 0, "text"),
    ("error", "message"),
    ("message",),
)
LOGIN_FAILED_FALLBACK = "Login failed - check credentials"

BEARER_TOKEN_FIELDS: tuple[FieldPath, ...] = (
    ("tokenized",),
    ("token",),
    ("jwt",),
)


def _preview(token: str, length: int = 20) -> str:
    """Shorten a token for log output."""
    return f"{token[:length]}..." if token else "<empty>"


def _ui_messages(document: Any) -> list[UIMessage]:
    """Parse ``ui.messages`` into :class:`UIMessage` objects, skipping junk entries."""
    ui = document.get("ui") if isinstance(document, dict) else None
    raw = ui.get("messages") if isinstance(ui, dict) else None
    if not isinstance(raw, list):
        return []
    messages: list[UIMessage] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        messages.append(
            UIMessage(
                kind=item.get("type") if isinstance(item.get("type"), str) else "",
                text=item.get("text") if isinstance(item.get("text"), str) else "",
            )
        )
    return messages


def failure_reason(document: Any) -> str:
    """Derive a human-readable reason from a rejected login response.

    Tries ``ui.messages[0].text``, then ``error.message``, then ``message``,
    and falls back to :data:`LOGIN_FAILED_FALLBACK`.
    """
    return first_non_empty(document, FAILURE_REASON_FIELDS) or LOGIN_FAILED_FALLBACK


class KratosClient:
    """Talks to the Kratos public API on behalf of the login state machine.

    Args:
        settings: Supplies ``kratos_url`` and ``tokenize_template``.
        http: An open :class:`~skyclient.client.SyncClient`.

    Example::

        with SyncClient(settings) as http:
            kratos = KratosClient(settings, http)
            flow = kratos.initiate_login_flow()
            result = kratos.submit_login(flow.submission_url, credentials)
    """

    def __init__(self, settings: Settings, http: SyncClient) -> None:
        self._settings = settings
        self._http = http

    @property
    def login_flow_url(self) -> str:
        """URL that creates a new API login flow."""
        return f"{self._settings.kratos_url}{LOGIN_FLOW_PATH}"

    @property
    def whoami_url(self) -> str:
        """URL of the session introspection endpoint."""
        return f"{self._settings.kratos_url}{WHOAMI_PATH}"

    def initiate_login_flow(self) -> LoginFlow:
        """Create a login flow and return its submission URL.

        Returns:
            A :class:`~skyclient.models.LoginFlow` whose ``submission_url`` is
            the provider's ``ui.action``, unmodified.

        Raises:
            TransportError: If the identity service cannot be reached.
            ProtocolError: If the answer is not JSON or has no non-empty
                ``ui.action`` string.
        """
        logger.debug("Initiating login flow at %s", self.login_flow_url)
        _status, document = self._http.request_json("GET", self.login_flow_url)

        action = first_non_empty(document, SUBMISSION_URL_FIELDS)
        if not action:
            raise ProtocolError(
                f"Failed to get action URL from login flow at {self.login_flow_url}"
            )
        logger.debug("Login flow action URL: %s", action)
        return LoginFlow(submission_url=action)

    def submit_login(self, submission_url: str, credentials: Credentials) -> LoginResult:
        """Post the credentials to a login flow.

        Args:
            submission_url: The flow's ``ui.action``, used verbatim.
            credentials: Operator identifier and password.

        Returns:
            A :class:`~skyclient.models.LoginResult` with the session token,
            identity id and, when the identity carries one, the workspace id.

        Raises:
            TransportError: If the request cannot be sent.
            ProtocolError: If the answer is not JSON.
            AuthenticationError: If the answer carries no session token. The
                error's ``reason`` comes from :func:`failure_reason`.
        """
        logger.debug("Submitting credentials for %s", credentials.identifier)
        body = {
            "identifier": credentials.identifier,
            "password": credentials.secret.get_secret_value(),
            "method": "password",
        }
        status, document = self._http.request_json(
            "POST",
            submission_url,
            headers={"Content-Type": "application/json"},
            json_body=body,
        )

        session_token = first_non_empty(document, SESSION_TOKEN_FIELDS)
        if not session_token:
            messages = _ui_messages(document)
            reason = failure_reason(document)
            logger.debug("Login rejected (HTTP %d): %s", status, reason)
            for message in messages:
                logger.debug("  %s: %s", message.kind or "message", message.text)
            raise AuthenticationError(reason, ui_messages=messages)

        user_id = first_non_empty(document, USER_ID_FIELDS)
        workspace_id = first_non_empty(document, WORKSPACE_ID_FIELDS)
        logger.debug("Login accepted, session token %s", _preview(session_token))
        if not workspace_id:
            logger.debug("No workspace id in session.identity.metadata_public.company_id")
        return LoginResult(
            session_token=session_token,
            user_id=user_id,
            workspace_id=workspace_id,
        )

    def exchange_for_bearer_token(self, session_token: str) -> str:
        """Exchange a session token for a signed bearer (JWT) token.

        Args:
            session_token: A valid Kratos session token.

        Returns:
            The first non-empty of ``tokenized``, ``token`` or ``jwt``.

        Raises:
            TransportError: If the request cannot be sent.
            ProtocolError: If the answer is not JSON or contains none of
                the token fields.
        """
        logger.debug(
            "Exchanging session token %s via %s (template %s)",
            _preview(session_token),
            self.whoami_url,
            self._settings.tokenize_template,
        )
        _status, document = self._http.request_json(
            "GET",
            self.whoami_url,
            params={"tokenize_as": self._settings.tokenize_template},
            headers={"Authorization": f"Bearer {session_token}"},
        )

        bearer = first_non_empty(document, BEARER_TOKEN_FIELDS)
        if not bearer:
            keys = sorted(document) if isinstance(document, dict) else []
            logger.debug("whoami response fields: %s", ", ".join(keys) or "<none>")
            raise ProtocolError("Failed to extract JWT token from whoami response")
        logger.debug("Bearer token obtained: %s", _preview(bearer, 30))
        return bearer

