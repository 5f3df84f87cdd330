"""Exception hierarchy for Image Relay.

Every error that should reach an HTTP client derives from :class:`RelayError`
and carries the status code it is rendered with.  The FastAPI application
registers one handler for the base class that turns any of these into a
``{"error": message}`` JSON body.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for errors rendered as ``{"error": message}`` responses.

    Attributes:
        message: Human-readable error text sent to the client.
        status_code: HTTP status code for the response.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingPromptError(RelayError):
    """The generation request carried no usable prompt."""

    status_code = 400

    def __init__(self, message: str = "Missing prompt") -> None:
        super().__init__(message)


class ConfigurationError(RelayError):
    """A credential the request depends on is not configured on the server."""

    status_code = 500


class ForbiddenError(RelayError):
    """The supplied admin credential is missing or wrong."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class UpstreamError(RelayError):
    """The inference API answered with a non-success status.

    The upstream status code and response body are passed through to the
    client unchanged.

    Attributes:
        body: Raw response text returned by the inference API.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(body, status_code=status_code)
        self.body = body


class LogStoreError(RelayError):
    """The audit log could not be read."""

    status_code = 500
