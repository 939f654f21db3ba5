from __future__ import annotations

import pytest
import requests


@pytest.fixture(autouse=True)
def _no_network_in_unit_tests(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch):
    """Fail loudly if a unit test reaches the default `requests` transport.

    Unit tests inject fake transports; anything that falls through to a real
    `requests.Session` is a test bug, not a network call we want to make.
    Tests marked `local_server` talk to a loopback server and are left alone.
    """
    if request.node.get_closest_marker("local_server") is not None:
        yield
        return

    def _send(self, request, **kwargs):  # noqa: ANN001
        raise AssertionError(f"unexpected network call: {request.method} {request.url}")

    monkeypatch.setattr(requests.Session, "send", _send)
    yield
