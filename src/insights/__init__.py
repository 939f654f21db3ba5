"""New Relic Insights client.

Publishes events to the insert API and runs NRQL queries against the query
API. See `InsightsClient` for the entry point.
"""

from .attributes import MAX_ATTRIBUTES, AttributeValue
from .client import InsightsClient
from .errors import (
    AttributeTypeError,
    InsightsConfigError,
    InsightsError,
    InsightsHttpError,
    InsightsTransportError,
    PayloadEncodingError,
    QueryDecodeError,
    RequestBuildError,
    ResponseReadError,
    TooManyAttributesError,
)
from .models import QueryResponse
from .transport import SessionTransport, Transport

__all__ = [
    "MAX_ATTRIBUTES",
    "AttributeTypeError",
    "AttributeValue",
    "InsightsClient",
    "InsightsConfigError",
    "InsightsError",
    "InsightsHttpError",
    "InsightsTransportError",
    "PayloadEncodingError",
    "QueryDecodeError",
    "QueryResponse",
    "RequestBuildError",
    "ResponseReadError",
    "SessionTransport",
    "TooManyAttributesError",
    "Transport",
]
