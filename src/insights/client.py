"""Client for the New Relic Insights insert and query APIs.

Both operations are single, synchronous request/response cycles:

- `publish` coerces an event's attributes, POSTs them as JSON and expects 200.
- `query` GETs an NRQL query and decodes the JSON response.

There are no retries; every failure is raised to the caller as an
`InsightsError` subclass and the client stays usable afterwards.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import requests  # type: ignore
from pydantic import BaseModel  # type: ignore

from config import InsightsConfig

from .attributes import AttributeValue, build_event_payload, encode_payload
from .errors import (
    InsightsConfigError,
    InsightsHttpError,
    InsightsTransportError,
    QueryDecodeError,
    RequestBuildError,
    ResponseReadError,
)
from .transport import SessionTransport, Transport

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

INSERT_PATH = "/v1/accounts/{account_id}/events"
QUERY_PATH = "/v1/accounts/{account_id}/query"


class InsightsClient:
    """Insights API client.

    Members:
    - Config: `config` (account id, keys, base URLs)
    - Transport: `transport` (anything with `send(PreparedRequest) -> Response`)
    """

    def __init__(self, config: InsightsConfig, transport: Transport | None = None):
        """Create a client; without a transport, a `requests` session with `config.timeout` is used."""
        self.config = config
        self.transport: Transport = transport or SessionTransport(timeout=config.timeout)

    def __enter__(self) -> InsightsClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport, if it supports closing."""
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    @property
    def insert_url(self) -> str:
        """Full URL of the event insert endpoint."""
        return self.config.insert_url + INSERT_PATH.format(account_id=self.config.account_id)

    @property
    def query_url(self) -> str:
        """Full URL of the NRQL query endpoint (without the query string)."""
        return self.config.query_url + QUERY_PATH.format(account_id=self.config.account_id)

    def publish(self, event_type: str, attributes: Mapping[str, AttributeValue]) -> None:
        """Insert a single event.

        Raises:
        - `AttributeTypeError` / `TooManyAttributesError` before anything is sent
        - `InsightsTransportError` / `ResponseReadError` for transport failures
        - `InsightsHttpError` for any status other than 200
        """
        headers = self._auth_headers("X-Insert-Key", self.config.insert_key, "insert_key", "publish events")
        body = encode_payload(build_event_payload(event_type, attributes))

        request = self._prepare("POST", self.insert_url, headers=headers, data=body)
        status_code, response_body = self._send(request, action="post the request")
        if status_code != 200:
            raise InsightsHttpError(status_code=status_code, body=response_body)

    def query(self, nrql: str, model: type[M] | None = None) -> M | Any:
        """Run an NRQL query and return the decoded JSON response.

        When `model` is given the response is validated into it; otherwise the
        plain decoded JSON value is returned.

        Raises:
        - `InsightsTransportError` / `ResponseReadError` for transport failures
        - `InsightsHttpError` for any status other than 200
        - `QueryDecodeError` when the body is not valid JSON (or not valid for `model`)
        """
        headers = self._auth_headers("X-Query-Key", self.config.query_key, "query_key", "run queries")

        request = self._prepare("GET", self.query_url, headers=headers, params={"nrql": nrql})
        status_code, response_body = self._send(request, action="make the request")
        if status_code != 200:
            raise InsightsHttpError(status_code=status_code, body=response_body)

        try:
            decoded = json.loads(response_body)
            if model is not None:
                return model.model_validate(decoded)
            return decoded
        except ValueError as exc:
            raise QueryDecodeError(body=response_body) from exc

    def _auth_headers(self, header: str, key: str | None, field: str, purpose: str) -> dict[str, str]:
        """Build request headers, requiring `key` unless the transport handles auth."""
        headers = {"Content-Type": "application/json"}
        if key is not None:
            headers[header] = key
        elif not self.config.transport_auth:
            raise InsightsConfigError(f"{field} is required to {purpose}.")
        return headers

    def _prepare(self, method: str, url: str, **kwargs: Any) -> requests.PreparedRequest:
        """Build a prepared request, wrapping construction failures."""
        try:
            return requests.Request(method, url, **kwargs).prepare()
        except (requests.RequestException, ValueError) as exc:
            raise RequestBuildError(f"could not create request for {url}") from exc

    def _send(self, request: requests.PreparedRequest, *, action: str) -> tuple[int, bytes]:
        """Send a request and return `(status_code, body)`.

        The body is always read in full and the response always closed.
        """
        logger.debug("Insights request: %s %s", request.method, request.url)
        try:
            response = self.transport.send(request)
        except requests.RequestException as exc:
            raise InsightsTransportError(f"could not {action}") from exc

        try:
            body = response.content or b""
        except requests.RequestException as exc:
            raise ResponseReadError("could not read body") from exc
        finally:
            response.close()

        logger.debug("Insights response: %s %s -> %s", request.method, request.url, response.status_code)
        if response.status_code != 200:
            logger.warning("Insights API returned HTTP %s for %s", response.status_code, request.url)
        return response.status_code, body
