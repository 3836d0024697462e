"""Request/response interception for HTTP clients.

WebClient wraps a transport and runs every request it builds and every
response it receives through ordered, mutable hook chains:

    client = (
        WebClient()
        .add_request_handler(hooks.timeout(10))
        .add_one_time_response_handler(lambda r: print(r.status_code))
    )
    client.download_string("https://example.com")
"""

from openwebclient import hooks
from openwebclient.chain import HookChain, HookHandle, Transform, identity
from openwebclient.client import WebClient
from openwebclient.config import HookConfig, WebClientConfig, get_config
from openwebclient.errors import NullValueError, RegistrationError, WebClientError
from openwebclient.registration import HookState, OneTimeHook, handler_of
from openwebclient.transport import HttpxTransport, Transport

__all__ = [
    "WebClient",
    "HookChain",
    "HookHandle",
    "Transform",
    "identity",
    "handler_of",
    "OneTimeHook",
    "HookState",
    "Transport",
    "HttpxTransport",
    "WebClientConfig",
    "HookConfig",
    "get_config",
    "WebClientError",
    "NullValueError",
    "RegistrationError",
    "hooks",
]
