"""Transport abstraction wrapped by WebClient.

The transport owns everything protocol-related. WebClient only needs two
capabilities from it: building a request for a target and executing a
request to obtain a response.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Capability set required by WebClient."""

    def build_request(self, target: Any, **kwargs: Any) -> Any: ...

    def execute(self, request: Any) -> Any: ...


class HttpxTransport:
    """Transport backed by an httpx.Client.

    Attributes:
        client: Underlying httpx client
    """

    def __init__(self, client: httpx.Client | None = None, **client_kwargs: Any) -> None:
        """Initialize the transport.

        Args:
            client: Existing httpx client to use; it is not closed by close()
            **client_kwargs: Arguments for a new httpx.Client when client is None
        """
        if client is not None and client_kwargs:
            raise ValueError("client_kwargs cannot be combined with an existing client")
        self._owns_client = client is None
        self.client = client if client is not None else httpx.Client(**client_kwargs)

    def build_request(self, target: str | httpx.URL, method: str = "GET", **kwargs: Any) -> httpx.Request:
        """Build a request for target without sending it.

        Args:
            target: Absolute URL, or a path relative to the client's base_url
            method: HTTP method
            **kwargs: Passed through to httpx.Client.build_request
                (content, data, json, params, headers, timeout, ...)

        Returns:
            Unsent httpx.Request
        """
        return self.client.build_request(method, target, **kwargs)

    def execute(self, request: httpx.Request) -> httpx.Response:
        """Send request and return the fully read response."""
        logger.debug("Sending %s %s", request.method, request.url)
        return self.client.send(request)

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self.client.close()
