"""Built-in handler factories.

Each factory returns a handler suitable for WebClient.add_request_handler
or WebClient.add_response_handler, and can be referenced from the hooks
section of openwebclient.yaml:

    hooks:
      - hook: openwebclient.hooks.timeout
        params: {seconds: 10}
      - hook: openwebclient.hooks.raise_for_status
        on: response

The factories are marked with @hook_factory, so entries for factories
without arguments need no params.
"""

from openwebclient.hooks.request import accept_gzip, basic_auth, header, timeout, user_agent
from openwebclient.hooks.response import capture_headers, raise_for_status

__all__ = [
    "timeout",
    "header",
    "user_agent",
    "basic_auth",
    "accept_gzip",
    "raise_for_status",
    "capture_headers",
]
