from __future__ import annotations

from typing import Any

import pytest
import requests
from pydantic import BaseModel

from config import InsightsConfig
from insights.client import InsightsClient
from insights.errors import (
    InsightsConfigError,
    InsightsHttpError,
    InsightsTransportError,
    QueryDecodeError,
    ResponseReadError,
)
from insights.models import QueryResponse


class _FakeResponse:
    def __init__(self, content: bytes, *, status_code: int = 200) -> None:
        self._content = content
        self.status_code = status_code
        self.closed = False

    @property
    def content(self) -> bytes:
        return self._content

    def close(self) -> None:
        self.closed = True


class _FakeTransport:
    def __init__(self, response: Any) -> None:
        self._response = response
        self.requests: list[requests.PreparedRequest] = []

    def send(self, request: requests.PreparedRequest) -> Any:
        self.requests.append(request)
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


class _Average(BaseModel):
    average: float


class _AverageQuery(BaseModel):
    results: list[_Average]


def _make_config(**overrides: Any) -> InsightsConfig:
    values: dict[str, Any] = {"account_id": "1", "insert_key": "insert-abc", "query_key": "query-abc"}
    values.update(overrides)
    return InsightsConfig(**values)


def test_query_builds_expected_request() -> None:
    transport = _FakeTransport(_FakeResponse(b'{"results":[{"average":2.3}]}'))
    client = InsightsClient(_make_config(), transport=transport)

    client.query("SELECT * FROM 1")

    request = transport.requests[0]
    assert request.method == "GET"
    assert request.url == "https://insights-api.newrelic.com/v1/accounts/1/query?nrql=SELECT+%2A+FROM+1"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["X-Query-Key"] == "query-abc"
    assert "X-Insert-Key" not in request.headers
    assert request.body is None


def test_query_encodes_reserved_characters() -> None:
    transport = _FakeTransport(_FakeResponse(b"{}"))
    client = InsightsClient(_make_config(), transport=transport)

    client.query("SELECT count(*) FROM Transaction WHERE name = 'a&b' SINCE 1 day ago")

    assert transport.requests[0].url == (
        "https://insights-api.newrelic.com/v1/accounts/1/query"
        "?nrql=SELECT+count%28%2A%29+FROM+Transaction+WHERE+name+%3D+%27a%26b%27+SINCE+1+day+ago"
    )


def test_query_returns_decoded_json_by_default() -> None:
    client = InsightsClient(_make_config(), transport=_FakeTransport(_FakeResponse(b'{"results":[{"average":2.3}]}')))

    assert client.query("SELECT * FROM 1") == {"results": [{"average": 2.3}]}


def test_query_decodes_into_caller_model() -> None:
    client = InsightsClient(_make_config(), transport=_FakeTransport(_FakeResponse(b'{"results":[{"average":2.3}]}')))

    result = client.query("SELECT * FROM 1", _AverageQuery)

    assert isinstance(result, _AverageQuery)
    assert result.results[0].average == 2.3


def test_query_decodes_into_query_response() -> None:
    body = b'{"results":[{"average":2.3}],"metadata":{"eventTypes":["Transaction"]},"performanceStats":{}}'
    client = InsightsClient(_make_config(), transport=_FakeTransport(_FakeResponse(body)))

    result = client.query("SELECT * FROM 1", QueryResponse)

    assert result.first("average") == 2.3
    assert result.first("missing", 0) == 0
    assert result.metadata == {"eventTypes": ["Transaction"]}


def test_query_response_first_without_results() -> None:
    assert QueryResponse().first("average") is None


@pytest.mark.parametrize("status_code", [400, 401, 404, 503])
def test_query_non_200_raises_and_returns_nothing(status_code: int) -> None:
    response = _FakeResponse(b"not authorized", status_code=status_code)
    client = InsightsClient(_make_config(), transport=_FakeTransport(response))

    with pytest.raises(InsightsHttpError) as excinfo:
        client.query("SELECT * FROM 1", _AverageQuery)

    assert excinfo.value.status_code == status_code
    assert excinfo.value.body == b"not authorized"
    assert f"{status_code} - not authorized" in str(excinfo.value)
    assert response.closed


@pytest.mark.parametrize("body", [b"", b"<html>oops</html>", b'{"results": ['])
def test_query_malformed_json_raises_decode_error_with_body(body: bytes) -> None:
    client = InsightsClient(_make_config(), transport=_FakeTransport(_FakeResponse(body)))

    with pytest.raises(QueryDecodeError) as excinfo:
        client.query("SELECT * FROM 1")

    assert excinfo.value.body == body
    assert str(excinfo.value).startswith("could not unmarshal")


def test_query_model_mismatch_raises_decode_error() -> None:
    client = InsightsClient(_make_config(), transport=_FakeTransport(_FakeResponse(b'{"results":[{"avg":1}]}')))

    with pytest.raises(QueryDecodeError) as excinfo:
        client.query("SELECT * FROM 1", _AverageQuery)
    assert excinfo.value.body == b'{"results":[{"avg":1}]}'


def test_query_wraps_transport_errors() -> None:
    cause = requests.Timeout("read timed out")
    client = InsightsClient(_make_config(), transport=_FakeTransport(cause))

    with pytest.raises(InsightsTransportError, match="could not make the request") as excinfo:
        client.query("SELECT * FROM 1")
    assert excinfo.value.__cause__ is cause


def test_query_wraps_body_read_errors() -> None:
    class _Broken(_FakeResponse):
        @property
        def content(self) -> bytes:
            raise requests.exceptions.ContentDecodingError("bad gzip")

    response = _Broken(b"")
    client = InsightsClient(_make_config(), transport=_FakeTransport(response))

    with pytest.raises(ResponseReadError):
        client.query("SELECT * FROM 1")
    assert response.closed


def test_query_requires_query_key() -> None:
    transport = _FakeTransport(_FakeResponse(b"{}"))
    client = InsightsClient(_make_config(query_key=None), transport=transport)

    with pytest.raises(InsightsConfigError, match="query_key"):
        client.query("SELECT * FROM 1")
    assert transport.requests == []


def test_query_key_injected_by_transport() -> None:
    class _AuthTransport(_FakeTransport):
        def send(self, request: requests.PreparedRequest) -> Any:
            request.headers["X-Query-Key"] = "from-transport"
            return super().send(request)

    transport = _AuthTransport(_FakeResponse(b'{"results":[]}'))
    client = InsightsClient(_make_config(query_key=None, transport_auth=True), transport=transport)

    assert client.query("SELECT * FROM 1") == {"results": []}
    assert transport.requests[0].headers["X-Query-Key"] == "from-transport"
