"""Response handler factories."""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableMapping

import httpx

from openwebclient.registration import hook_factory

logger = logging.getLogger(__name__)

ResponseHandler = Callable[[httpx.Response], None]


@hook_factory
def raise_for_status() -> ResponseHandler:
    """Raise httpx.HTTPStatusError for 4xx and 5xx responses."""

    def check_status(response: httpx.Response) -> None:
        if response.is_error:
            logger.debug(
                "Response status %s for %s",
                response.status_code,
                response.request.url,
                extra={"event": "status_error", "status_code": response.status_code},
            )
        response.raise_for_status()

    return check_status


@hook_factory
def capture_headers(sink: MutableMapping[str, str]) -> ResponseHandler:
    """Copy each response's headers into sink (lower-cased names).

    Later responses overwrite values captured from earlier ones.
    """

    def capture(response: httpx.Response) -> None:
        sink.update({k.lower(): v for k, v in response.headers.items()})
        logger.debug(
            "Captured %d response headers",
            len(response.headers),
            extra={"event": "headers_captured"},
        )

    return capture
