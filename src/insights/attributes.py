"""Event attribute coercion.

The insert API only accepts flat JSON objects whose values are numbers,
booleans or strings. Callers may additionally pass `datetime` values (sent as
Unix seconds) and `timedelta` values (sent as whole milliseconds).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from .errors import AttributeTypeError, PayloadEncodingError, TooManyAttributesError

AttributeValue = Union[int, bool, str, float, datetime, timedelta]

# Includes the `eventType` attribute itself.
MAX_ATTRIBUTES = 255

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)
_ONE_MICROSECOND = timedelta(microseconds=1)


def to_unix_seconds(value: datetime) -> int:
    """Convert a datetime to whole Unix seconds (floored; naive means UTC)."""
    if value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_SECOND


def to_milliseconds(value: timedelta) -> int:
    """Round a timedelta to the nearest millisecond, halves away from zero."""
    micros = value // _ONE_MICROSECOND
    millis, remainder = divmod(abs(micros), 1000)
    if remainder >= 500:
        millis += 1
    return -millis if micros < 0 else millis


def coerce_attribute(key: str, value: Any) -> int | bool | str | float:
    """Return the JSON-ready form of a single attribute value.

    Raises `AttributeTypeError` for anything outside `AttributeValue`.
    """
    if isinstance(value, datetime):
        return to_unix_seconds(value)
    if isinstance(value, timedelta):
        return to_milliseconds(value)
    if isinstance(value, (bool, int, str, float)):
        return value
    raise AttributeTypeError(key=key, value=value)


def build_event_payload(event_type: str, attributes: Mapping[str, AttributeValue]) -> dict[str, Any]:
    """Build the insert payload: `{"eventType": event_type, **coerced(attributes)}`.

    Fails on the first unsupported value, and only checks the attribute limit
    once every value has been coerced.
    """
    payload: dict[str, Any] = {"eventType": event_type}
    for key, value in attributes.items():
        payload[key] = coerce_attribute(key, value)

    if len(payload) > MAX_ATTRIBUTES:
        raise TooManyAttributesError()
    return payload


def encode_payload(payload: Mapping[str, Any]) -> bytes:
    """Serialize a payload to compact JSON with sorted keys."""
    try:
        return json.dumps(payload, separators=(",", ":"), sort_keys=True, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise PayloadEncodingError(f"could not marshal the body: {exc}") from exc
