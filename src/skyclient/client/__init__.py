"""HTTP client module for skyclient.

Provides :class:`SyncClient`, a thin wrapper around :class:`httpx.Client`
that applies the configured timeout and TLS settings and translates
network failures and malformed JSON into the package's error taxonomy.

Example::

    from skyclient.client import SyncClient

    with SyncClient(settings) as client:
        status, document = client.request_json("GET", url)
"""

from skyclient.client.sync_client import SyncClient

__all__ = ["SyncClient"]
