"""Demo entrypoint exercising the Insights client.

Usage:

    python src/main.py insert          # publish a `testEvent`
    python src/main.py query [NRQL]    # run a query with the configured query key
    python src/main.py query-transport [NRQL]

`query-transport` shows the alternate wiring where the query key is added by a
custom transport instead of the client configuration.

It is **not** intended to be production code; it is a manual integration
harness that reads its credentials from the environment (or `.env`).
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone

import requests  # type: ignore
from pydantic import BaseModel

from config import InsightsConfig, load_config
from insights import InsightsClient, InsightsConfigError, InsightsError

DEFAULT_NRQL = "SELECT average(duration) FROM Transaction"


class AverageRow(BaseModel):
    average: float | None = None


class AverageQuery(BaseModel):
    results: list[AverageRow] = []


class QueryKeyTransport:
    """Transport that sets the query key header itself."""

    def __init__(self, query_key: str, *, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self.query_key = query_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        request.headers["Content-Type"] = "application/json"
        request.headers["X-Query-Key"] = self.query_key
        return self.session.send(request, timeout=self.timeout, stream=True)

    def close(self) -> None:
        self.session.close()


def insert(config: InsightsConfig) -> None:
    """Publish one event with every supported attribute kind."""
    data = {
        "bool": True,
        "duration": timedelta(microseconds=3123),
        "float": 3.2,
        "int": 3,
        "string": "foo",
        "time": datetime.now(tz=timezone.utc),
    }
    with InsightsClient(config) as client:
        client.publish("testEvent", data)
    print("[insert] published testEvent")


def query(config: InsightsConfig, nrql: str) -> None:
    """Run a query using the key from the configuration."""
    with InsightsClient(config) as client:
        result = client.query(nrql, AverageQuery)
    print(f"[query] {result!r}")


def query_with_transport(config: InsightsConfig, nrql: str) -> None:
    """Run a query where the transport, not the client, adds the query key."""
    if config.query_key is None:
        raise InsightsConfigError("query_key is required to run queries.")
    transport = QueryKeyTransport(config.query_key, timeout=config.timeout)
    config = config.model_copy(update={"query_key": None, "transport_auth": True})
    with InsightsClient(config, transport=transport) as client:
        result = client.query(nrql, AverageQuery)
    print(f"[query-transport] {result!r}")


def main(argv: list[str]) -> int:
    logging.basicConfig(level=logging.INFO)
    if not argv or argv[0] not in {"insert", "query", "query-transport"}:
        print(__doc__)
        return 2

    config = load_config().insights
    command = argv[0]
    nrql = argv[1] if len(argv) > 1 else DEFAULT_NRQL
    try:
        if command == "insert":
            insert(config)
        elif command == "query":
            query(config, nrql)
        else:
            query_with_transport(config, nrql)
    except InsightsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
