"""Errors raised by `InsightsClient`.

Every error derives from `InsightsError`; none of them leave the client in a
bad state, so the same client can be reused after any failure.
"""

from __future__ import annotations

from typing import Any


class InsightsError(Exception):
    """Base class for all Insights client errors."""


class InsightsConfigError(InsightsError, ValueError):
    """The configuration lacks something the requested operation needs."""


class RequestBuildError(InsightsError):
    """The HTTP request could not be constructed."""


class InsightsTransportError(InsightsError):
    """The transport failed to deliver the request (network error, timeout, ...)."""


class ResponseReadError(InsightsError):
    """The response body could not be read."""


class InsightsHttpError(InsightsError):
    """Non-200 response returned by the Insights API."""

    def __init__(self, *, status_code: int, body: bytes):
        """Create an error capturing HTTP status code and raw response body."""
        self.status_code = status_code
        self.body = body
        super().__init__(f"request unsuccessful: {status_code} - {_text(body)}")


class AttributeTypeError(InsightsError, TypeError):
    """An event attribute value is not one of the supported kinds."""

    def __init__(self, *, key: str, value: Any):
        self.key = key
        self.value = value
        super().__init__(f"could not cast {value!r} of type {type(value).__name__} to valid attributes")


class TooManyAttributesError(InsightsError, ValueError):
    """The event carries more attributes than the API accepts."""

    def __init__(self) -> None:
        super().__init__("too many attributes")


class PayloadEncodingError(InsightsError, ValueError):
    """The event payload could not be serialized to JSON."""


class QueryDecodeError(InsightsError, ValueError):
    """A query response body was not valid JSON for the requested target."""

    def __init__(self, *, body: bytes):
        self.body = body
        super().__init__(f"could not unmarshal {_text(body)}")


def _text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")
