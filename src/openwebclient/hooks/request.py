"""Request handler factories."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from openwebclient.registration import hook_factory

logger = logging.getLogger(__name__)

RequestHandler = Callable[[httpx.Request], None]


@hook_factory
def timeout(seconds: float) -> RequestHandler:
    """Set the connect/read/write/pool timeout of each request.

    httpx reads per-request timeouts from the "timeout" extension, so this
    takes effect even though the request has already been built.
    """
    value = httpx.Timeout(seconds).as_dict()

    def set_timeout(request: httpx.Request) -> None:
        request.extensions["timeout"] = dict(value)
        logger.debug(
            "Set request timeout to %ss",
            seconds,
            extra={"event": "timeout_set", "url": str(request.url)},
        )

    return set_timeout


@hook_factory
def header(name: str, value: str) -> RequestHandler:
    """Set a header on each request, replacing any existing value."""

    def set_header(request: httpx.Request) -> None:
        request.headers[name] = value
        logger.debug("Set header %s", name, extra={"event": "header_set", "header": name})

    return set_header


@hook_factory
def user_agent(value: str) -> RequestHandler:
    """Set the User-Agent header."""
    return header("User-Agent", value)


@hook_factory
def basic_auth(username: str, password: str) -> RequestHandler:
    """Set an Authorization: Basic header."""
    auth = httpx.BasicAuth(username, password)

    def set_basic_auth(request: httpx.Request) -> None:
        # auth_flow sets the header before its first yield
        next(auth.auth_flow(request))
        logger.debug("Set basic auth", extra={"event": "basic_auth_set", "username": username})

    return set_basic_auth


@hook_factory
def accept_gzip() -> RequestHandler:
    """Ask the server for a gzip-compressed body."""
    return header("Accept-Encoding", "gzip")
