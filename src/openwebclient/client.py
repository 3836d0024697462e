"""WebClient: request/response interception around a transport.

WebClient wraps a transport's two extension points:

    get_request(target)  = request_hooks(validate(transport.build_request(target)))
    get_response(request) = response_hooks(validate(transport.execute(request)))

Hooks mutate requests before they are sent and responses before they are
returned, without subclassing the transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from openwebclient import registration
from openwebclient.chain import HookChain
from openwebclient.registration import Handler, TypeFilter
from openwebclient.transport import HttpxTransport, Transport

if TYPE_CHECKING:
    from openwebclient.config import WebClientConfig

logger = logging.getLogger(__name__)


class WebClient:
    """Client decorator holding one request chain and one response chain.

    Attributes:
        transport: Object providing build_request(target) and execute(request)
        request_hooks: Transforms applied to every constructed request
        response_hooks: Transforms applied to every retrieved response
    """

    def __init__(self, transport: Transport | None = None) -> None:
        self.transport: Transport = transport if transport is not None else HttpxTransport()
        self.request_hooks: HookChain[Any] = HookChain("request")
        self.response_hooks: HookChain[Any] = HookChain("response")

    @classmethod
    def from_config(cls, config: WebClientConfig | None = None) -> WebClient:
        """Create a client with an httpx transport and hooks from configuration.

        Args:
            config: Configuration to use; defaults to get_config()

        Returns:
            WebClient with every configured hook attached
        """
        from openwebclient.config import get_config

        config = config or get_config()
        if config.debug:
            logging.getLogger("openwebclient").setLevel(logging.DEBUG)

        client = cls(HttpxTransport(**config.client_kwargs()))

        for hook_config, handler in config.load_hooks():
            registration.add_handler(client, hook_config.on, handler, once=hook_config.once)
            logger.debug(f"Attached configured {hook_config.on} hook: {hook_config.hook_path}")

        return client

    # ------------------------------------------------------------------
    # Extension points
    # ------------------------------------------------------------------

    def get_request(self, target: Any, **kwargs: Any) -> Any:
        """Build a request for target and run it through the request hooks.

        Args:
            target: Address understood by the transport (URL or path)
            **kwargs: Passed through to transport.build_request

        Returns:
            The (possibly mutated) request

        Raises:
            NullValueError: If the transport or the last hook yields None
        """
        request = self.request_hooks.validate(self.transport.build_request(target, **kwargs))
        return self.request_hooks.validate(self.request_hooks.aggregate()(request))

    def get_response(self, request: Any) -> Any:
        """Execute request and run the response through the response hooks.

        Raises:
            NullValueError: If the transport or the last hook yields None
        """
        response = self.response_hooks.validate(self.transport.execute(request))
        return self.response_hooks.validate(self.response_hooks.aggregate()(response))

    # ------------------------------------------------------------------
    # Convenience operations
    # ------------------------------------------------------------------

    def open(self, target: Any, method: str = "GET", **kwargs: Any) -> Any:
        """Issue a request for target and return the hooked response."""
        return self.get_response(self.get_request(target, method=method, **kwargs))

    def download_bytes(self, target: Any, **kwargs: Any) -> bytes:
        """Return the body of target as bytes."""
        return self.open(target, **kwargs).content

    def download_string(self, target: Any, encoding: str | None = None, **kwargs: Any) -> str:
        """Return the body of target decoded as text.

        Args:
            target: Address to fetch
            encoding: Overrides the charset advertised by the response
        """
        response = self.open(target, **kwargs)
        if encoding is not None:
            return response.content.decode(encoding)
        return response.text

    def upload_bytes(self, target: Any, data: bytes, method: str = "POST", **kwargs: Any) -> bytes:
        """Send data to target and return the response body."""
        return self.open(target, method=method, content=data, **kwargs).content

    def upload_string(
        self,
        target: Any,
        data: str,
        method: str = "POST",
        encoding: str = "utf-8",
        **kwargs: Any,
    ) -> str:
        """Send text to target and return the response body as text."""
        response = self.open(target, method=method, content=data.encode(encoding), **kwargs)
        return response.text

    def close(self) -> None:
        """Close the transport if it supports closing."""
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> WebClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Fluent registration
    # ------------------------------------------------------------------

    def add_request_handler(self, handler: Handler, of: TypeFilter = None) -> WebClient:
        """Add a handler called for each request (of type of)."""
        return registration.add_request_handler(self, handler, of)

    def add_http_request_handler(self, handler: Handler) -> WebClient:
        """Add a handler called for each httpx.Request."""
        return registration.add_http_request_handler(self, handler)

    def add_one_time_request_handler(self, handler: Handler, of: TypeFilter = None) -> WebClient:
        """Add a handler called for the next request (of type of) only."""
        return registration.add_one_time_request_handler(self, handler, of)

    def add_one_time_http_request_handler(self, handler: Handler) -> WebClient:
        """Add a handler called for the next httpx.Request only."""
        return registration.add_one_time_http_request_handler(self, handler)

    def add_response_handler(self, handler: Handler, of: TypeFilter = None) -> WebClient:
        """Add a handler called for each response (of type of)."""
        return registration.add_response_handler(self, handler, of)

    def add_http_response_handler(self, handler: Handler) -> WebClient:
        """Add a handler called for each httpx.Response."""
        return registration.add_http_response_handler(self, handler)

    def add_one_time_response_handler(self, handler: Handler, of: TypeFilter = None) -> WebClient:
        """Add a handler called for the next response (of type of) only."""
        return registration.add_one_time_response_handler(self, handler, of)

    def add_one_time_http_response_handler(self, handler: Handler) -> WebClient:
        """Add a handler called for the next httpx.Response only."""
        return registration.add_one_time_http_response_handler(self, handler)

    def remove_request_handler(self, handler: Handler) -> WebClient:
        """Detach the most recently added permanent request handler."""
        return registration.remove_handler(self, "request", handler)

    def remove_response_handler(self, handler: Handler) -> WebClient:
        """Detach the most recently added permanent response handler."""
        return registration.remove_handler(self, "response", handler)

    def __repr__(self) -> str:
        return (
            f"<WebClient transport={type(self.transport).__name__} "
            f"request_hooks={len(self.request_hooks)} response_hooks={len(self.response_hooks)}>"
        )
