"""Fluent registration helpers for request and response handlers.

Handlers registered here are simple actions: they receive the request or
response, may mutate it, and their return value is ignored. Each helper
wraps the action into a pass-through transform and attaches it to the
client's request or response chain.

Three independent options are available:
- of: only act on values of a given type (others pass through untouched)
- one-time: run for the next matching value only, then detach
- every helper returns the client, so registrations can be chained
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from openwebclient.chain import HookChain, HookHandle, Transform
from openwebclient.errors import RegistrationError

if TYPE_CHECKING:
    from openwebclient.client import WebClient

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT", bound="WebClient")

# Type aliases
Handler = Callable[[Any], Any]
TypeFilter = type | tuple[type, ...] | None


class HookState(Enum):
    """Lifecycle of a one-time hook."""

    ARMED = "armed"
    FIRED = "fired"


def _require_callable(handler: Handler | None) -> None:
    if handler is None:
        raise RegistrationError("handler")
    if not callable(handler):
        raise RegistrationError("handler", f"handler must be callable, got {type(handler).__name__}")


def hook_factory(fn: Callable[..., Handler]) -> Callable[..., Handler]:
    """Mark fn as a factory that returns a handler.

    Configured hooks that point at a marked factory are called (with their
    params, if any) to produce the handler instead of being attached as is.
    """
    fn._hook_factory = True  # type: ignore[attr-defined]
    return fn


def handler_of(handler: Handler, of: TypeFilter = None) -> Transform[Any]:
    """Wrap an action into a pass-through transform.

    Args:
        handler: Called with the value; its return value is ignored
        of: Type (or tuple of types) the value must be an instance of for
            handler to run; None accepts every value

    Returns:
        Transform that runs handler when the value matches and always
        returns the value it was given

    Raises:
        RegistrationError: If handler is None or not callable
    """
    _require_callable(handler)

    def transform(value: Any) -> Any:
        if of is None or isinstance(value, of):
            handler(value)
        return value

    transform.__name__ = getattr(handler, "__name__", "handler")
    transform.__wrapped__ = handler  # type: ignore[attr-defined]
    return transform


class OneTimeHook:
    """Action that detaches itself from its chain the first time it runs.

    The ARMED -> FIRED transition and the detach both happen before the
    wrapped handler is called, so the hook is gone even if the handler
    raises. A second invocation (from a snapshot taken before the detach)
    is a no-op.
    """

    def __init__(self, chain: HookChain[Any], handler: Handler) -> None:
        self.chain = chain
        self.handler = handler
        self.__name__ = getattr(handler, "__name__", "handler")
        self.handle: HookHandle[Any] | None = None
        self.state = HookState.ARMED
        self._lock = threading.Lock()

    def attach(self, of: TypeFilter = None) -> HookHandle[Any]:
        """Attach this hook to its chain, narrowed to of."""
        transform = handler_of(self, of)
        with self._lock:
            self.handle = self.chain.attach(transform)
        return self.handle

    def __call__(self, value: Any) -> None:
        with self._lock:
            if self.state is HookState.FIRED:
                return
            self.state = HookState.FIRED
            handle = self.handle
        self.chain.detach(handle)
        logger.debug("One-time %s hook fired: %r", self.chain.name, handle)
        self.handler(value)


def _chain_of(client: Any, kind: str) -> HookChain[Any]:
    if client is None:
        raise RegistrationError("client")
    return getattr(client, f"{kind}_hooks")


def _add(client: ClientT, kind: str, handler: Handler, of: TypeFilter) -> ClientT:
    chain = _chain_of(client, kind)
    chain.attach(handler_of(handler, of))
    return client


def _add_one_time(client: ClientT, kind: str, handler: Handler, of: TypeFilter) -> ClientT:
    chain = _chain_of(client, kind)
    _require_callable(handler)
    OneTimeHook(chain, handler).attach(of)
    return client


def add_handler(
    client: ClientT,
    kind: str,
    handler: Handler,
    of: TypeFilter = None,
    once: bool = False,
) -> ClientT:
    """Add a handler to the "request" or "response" chain of client.

    Args:
        client: Client owning the chain
        kind: "request" or "response"
        handler: Action called with each matching value
        of: Optional type filter
        once: Detach after the first matching value
    """
    if kind not in ("request", "response"):
        raise ValueError(f"kind must be 'request' or 'response', got {kind!r}")
    if once:
        return _add_one_time(client, kind, handler, of)
    return _add(client, kind, handler, of)


def add_request_handler(client: ClientT, handler: Handler, of: TypeFilter = None) -> ClientT:
    """Add a handler called for each request (of type of) issued by client."""
    return _add(client, "request", handler, of)


def add_http_request_handler(client: ClientT, handler: Handler) -> ClientT:
    """Add a handler called for each httpx.Request issued by client."""
    return _add(client, "request", handler, httpx.Request)


def add_one_time_request_handler(client: ClientT, handler: Handler, of: TypeFilter = None) -> ClientT:
    """Add a handler called only for the next request (of type of), then discarded.

    The handler is called once regardless of whether it raises.
    """
    return _add_one_time(client, "request", handler, of)


def add_one_time_http_request_handler(client: ClientT, handler: Handler) -> ClientT:
    """Add a handler called only for the next httpx.Request, then discarded."""
    return _add_one_time(client, "request", handler, httpx.Request)


def add_response_handler(client: ClientT, handler: Handler, of: TypeFilter = None) -> ClientT:
    """Add a handler called for each response (of type of) received by client."""
    return _add(client, "response", handler, of)


def add_http_response_handler(client: ClientT, handler: Handler) -> ClientT:
    """Add a handler called for each httpx.Response received by client."""
    return _add(client, "response", handler, httpx.Response)


def add_one_time_response_handler(client: ClientT, handler: Handler, of: TypeFilter = None) -> ClientT:
    """Add a handler called only for the next response (of type of), then discarded.

    The handler is called once regardless of whether it raises.
    """
    return _add_one_time(client, "response", handler, of)


def add_one_time_http_response_handler(client: ClientT, handler: Handler) -> ClientT:
    """Add a handler called only for the next httpx.Response, then discarded."""
    return _add_one_time(client, "response", handler, httpx.Response)


def remove_handler(client: ClientT, kind: str, handler: Handler) -> ClientT:
    """Detach the most recently added permanent handler from a client chain.

    Unknown handlers are ignored.
    """
    chain = _chain_of(client, kind)
    for transform in reversed(chain.snapshot()):
        if getattr(transform, "__wrapped__", None) is handler:
            chain.detach(transform)
            break
    return client
