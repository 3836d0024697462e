"""Exceptions raised by openwebclient.

Hook bodies may raise anything; those errors are never wrapped and reach the
caller unchanged. Only the decorator's own checks raise the types below.
"""

from __future__ import annotations


class WebClientError(Exception):
    """Base class for openwebclient errors."""


class NullValueError(WebClientError, ValueError):
    """A request or response was None where a value is required.

    Attributes:
        argument: Which value was missing ("request" or "response")
    """

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"{argument} must not be None")


class RegistrationError(WebClientError, TypeError):
    """A hook could not be attached (missing client, missing or non-callable hook).

    Attributes:
        argument: Name of the offending argument
    """

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(message or f"{argument} must not be None")
