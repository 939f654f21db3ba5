"""Transport interface used by `InsightsClient`.

The client depends on this small interface so tests can replace the network,
and so credentials can be injected by the transport instead of the client.
"""

from __future__ import annotations

from typing import Protocol

import requests  # type: ignore


class Transport(Protocol):
    def send(self, request: requests.PreparedRequest) -> requests.Response:
        """Send a prepared request and return the response.

        Network failures are raised as `requests.RequestException`.
        """


class SessionTransport:
    """Default transport: a `requests.Session` with a fixed timeout."""

    def __init__(self, *, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        """Send the request through the session, applying the timeout.

        The body is streamed so read failures surface when the caller reads
        `response.content`, not here.
        """
        return self.session.send(request, timeout=self.timeout, stream=True)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
