"""Claim set normalisation and reusable time-based claim validators."""

from __future__ import annotations

import dataclasses
import time
from numbers import Real
from typing import Any, Callable, Dict, Mapping

from pydantic import BaseModel

from .results import Err, Ok, Result

EXP_OFFSET = 2 * 60 * 60
NBF_OFFSET = 1

STANDARD_CLAIMS = ("exp", "iat", "nbf", "aud", "iss", "sub", "jti")

TimePredicate = Callable[[Any, int], bool]


def current_time() -> int:
    """Return wall-clock time in whole seconds since the epoch."""
    return int(time.time())


def to_claims(value: Any) -> Dict[str, Any]:
    """Convert a mapping or record-like value into a string-keyed claim set.

    Accepts mappings, pydantic models, dataclass instances and namedtuples.
    Anything else raises ``TypeError`` rather than being coerced.
    """
    if isinstance(value, BaseModel):
        data = value.model_dump(mode="json")
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = dataclasses.asdict(value)
    elif isinstance(value, tuple) and hasattr(value, "_asdict"):
        data = value._asdict()
    elif isinstance(value, Mapping):
        data = dict(value)
    else:
        raise TypeError(
            f"Cannot use value of type '{type(value).__name__}' as a claim set"
        )

    for key in data:
        if not isinstance(key, str):
            raise TypeError(f"Claim names must be strings, got {key!r}")
    return data


def validate_time_claim(
    payload: Mapping[str, Any],
    name: str,
    message: str,
    predicate: TimePredicate,
) -> Result:
    """Compare the claim ``name`` against the current time.

    A missing or null claim passes. A value that is not a number fails with
    ``message``, as does any value for which ``predicate(value, now)`` is
    false.
    """
    value = payload.get(name)
    if value is None:
        return Ok()
    if isinstance(value, bool) or not isinstance(value, Real):
        return Err(message)
    if predicate(value, current_time()):
        return Ok()
    return Err(message)


def validate_exp(payload: Mapping[str, Any]) -> Result:
    return validate_time_claim(
        payload, "exp", "Token expired", lambda expires_at, now: expires_at > now
    )


def validate_nbf(payload: Mapping[str, Any]) -> Result:
    return validate_time_claim(
        payload,
        "nbf",
        "Token not valid yet",
        lambda not_before, now: not_before < now,
    )


def validate_iat(payload: Mapping[str, Any]) -> Result:
    return validate_time_claim(
        payload,
        "iat",
        "Token issued in the future",
        lambda issued_at, now: issued_at <= now,
    )
