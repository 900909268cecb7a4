"""Synchronous HTTP client with timeout, TLS settings, and error mapping.

This module provides :class:`SyncClient`, the blocking HTTP client used by
the login flow and by provisioning downloads. It wraps :class:`httpx.Client`
and layers on:

- **Settings** -- timeout and certificate verification come from
  :class:`~skyclient.models.Settings`.
- **Error mapping** -- anything that prevents a response from arriving is
  raised as :class:`~skyclient.exceptions.TransportError`; a body that is
  not JSON is raised as :class:`~skyclient.exceptions.ProtocolError` by
  :meth:`SyncClient.request_json`.

There is deliberately no retry loop: every call is issued once and its
result inspected by the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from skyclient.exceptions import ProtocolError, TransportError
from skyclient.models import Settings

logger = logging.getLogger(__name__)


class SyncClient:
    """Synchronous HTTP client for identity-service and download calls.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        settings: Effective settings supplying ``timeout`` and
            ``verify_ssl``.
        transport: Optional :class:`httpx.BaseTransport`. Tests pass an
            :class:`httpx.MockTransport` here.

    Example::

        with SyncClient(settings) as client:
            response = client.get("https://example.com/config.json")
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        self._client = httpx.Client(
            timeout=self._settings.timeout,
            verify=self._settings.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send a single HTTP request.

        The HTTP status is not inspected here; callers decide what a
        non-2xx answer means.

        Args:
            method: HTTP method (GET, POST).
            url: Absolute URL.
            params: Query parameters.
            headers: Extra request headers.
            json_body: JSON-serialisable body (sets Content-Type automatically).

        Returns:
            The :class:`httpx.Response` from the server.

        Raises:
            TransportError: If the request cannot be sent or no response is
                received (DNS, connection refused, TLS, timeout, bad URL).
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        merged_headers: dict[str, str] = {"Accept": "application/json"}
        merged_headers.update(headers or {})

        kwargs: dict[str, Any] = {
            "method": method,
            "url": url,
            "headers": merged_headers,
            "params": params,
        }
        if json_body is not None:
            kwargs["json"] = json_body

        logger.debug("%s %s", method.upper(), url)
        try:
            response = self._client.request(**kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{method.upper()} {url} failed: {exc}") from exc

        logger.debug(
            "%s %s -> HTTP %d (%d bytes)",
            method.upper(),
            url,
            response.status_code,
            len(response.content),
        )
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request.

        Args:
            url: Absolute URL.
            **kwargs: Forwarded to :meth:`request`.

        Returns:
            The :class:`httpx.Response`.
        """
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request.

        Args:
            url: Absolute URL.
            **kwargs: Forwarded to :meth:`request`.

        Returns:
            The :class:`httpx.Response`.
        """
        return self.request("POST", url, **kwargs)

    def request_json(self, method: str, url: str, **kwargs: Any) -> tuple[int, Any]:
        """Send a request and decode the body as JSON.

        Args:
            method: HTTP method.
            url: Absolute URL.
            **kwargs: Forwarded to :meth:`request`.

        Returns:
            A ``(status_code, document)`` tuple.

        Raises:
            TransportError: If the request cannot be sent.
            ProtocolError: If the response body is not well-formed JSON.
        """
        response = self.request(method, url, **kwargs)
        try:
            document = response.json()
        except ValueError as exc:
            preview = response.text[:200] if response.content else "<empty body>"
            logger.debug("Non-JSON body from %s: %s", url, preview)
            raise ProtocolError(
                f"Invalid JSON response from {url} (HTTP {response.status_code})"
            ) from exc
        return response.status_code, document
