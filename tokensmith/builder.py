"""The Token value object and the builder functions that fill it in.

Every builder takes a :class:`Token` and returns a new one; nothing is
mutated in place, so a token can be shared between threads and reused as a
template. Claims whose value depends on the signing instant (``exp``,
``iat``, ``nbf``) are registered as generators and only computed when the
token is signed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .claims import (
    EXP_OFFSET,
    NBF_OFFSET,
    current_time,
    to_claims,
    validate_exp,
    validate_iat,
    validate_nbf,
)
from .codec import JsonCodec
from .results import Err, Ok, Result
from .signer import Signer

logger = logging.getLogger(__name__)

ClaimGenerator = Callable[[], Any]
ClaimPredicate = Callable[[Any], bool]


class Token(BaseModel):
    """Claims, header and signing state threaded through the pipeline.

    Once ``error`` is set every later pipeline step hands the token back
    untouched.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    header: Dict[str, Any] = Field(default_factory=lambda: {"typ": "JWT"})
    claims: Dict[str, Any] = Field(default_factory=dict)
    claims_generation: Dict[str, ClaimGenerator] = Field(default_factory=dict)
    validations: Dict[str, ClaimPredicate] = Field(default_factory=dict)
    signer: Optional[Signer] = None
    token: Optional[str] = None
    error: Optional[str] = None
    codec: JsonCodec = Field(default_factory=JsonCodec)

    def replace(self, **changes: Any) -> "Token":
        return self.model_copy(update=changes)


def token(value: Any = None) -> Token:
    """Create a token.

    - no argument: ``exp``, ``iat`` and ``nbf`` generators plus validations
      requiring ``exp > now``, ``iat <= now`` and ``nbf < now``
    - a ``str``: wraps an existing compact token for verification
    - a mapping or record: uses it as the claim set
    """
    if value is None:
        new = with_nbf(with_iat(with_exp(Token())))
        new = with_validation(new, "exp", lambda exp: validate_exp({"exp": exp}).ok)
        new = with_validation(new, "iat", lambda iat: validate_iat({"iat": iat}).ok)
        return with_validation(new, "nbf", lambda nbf: validate_nbf({"nbf": nbf}).ok)
    if isinstance(value, str):
        return Token(token=value)
    return Token(claims=to_claims(value))


def _check_name(name: Any, kind: str = "claim") -> None:
    if not isinstance(name, str):
        raise TypeError(f"{kind.capitalize()} name must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError(f"{kind.capitalize()} name must not be empty")


def _put_claim(tok: Token, name: str, value: Any) -> Token:
    return tok.replace(claims={**tok.claims, name: value})


def with_claim(tok: Token, name: str, value: Any) -> Token:
    _check_name(name)
    return _put_claim(tok, name, value)


def with_claims(tok: Token, claims: Any) -> Token:
    """Replace the whole claim set with a mapping or record-like value."""
    return tok.replace(claims=to_claims(claims))


def with_exp(tok: Token, expires_at: Optional[int] = None) -> Token:
    """Set ``exp``; without a value it is generated as now + 2 hours at sign time."""
    if expires_at is None:
        return with_claim_generator(tok, "exp", lambda: current_time() + EXP_OFFSET)
    return _put_claim(tok, "exp", expires_at)


def with_iat(tok: Token, issued_at: Optional[int] = None) -> Token:
    """Set ``iat``; without a value it is generated as now at sign time."""
    if issued_at is None:
        return with_claim_generator(tok, "iat", current_time)
    return _put_claim(tok, "iat", issued_at)


def with_nbf(tok: Token, not_before: Optional[int] = None) -> Token:
    """Set ``nbf``; without a value it is generated as now - 1s at sign time."""
    if not_before is None:
        return with_claim_generator(tok, "nbf", lambda: current_time() - NBF_OFFSET)
    return _put_claim(tok, "nbf", not_before)


def with_iss(tok: Token, issuer: Any) -> Token:
    return _put_claim(tok, "iss", issuer)


def with_sub(tok: Token, subject: Any) -> Token:
    return _put_claim(tok, "sub", subject)


def with_aud(tok: Token, audience: Any) -> Token:
    return _put_claim(tok, "aud", audience)


def with_jti(tok: Token, jwt_id: Any) -> Token:
    return _put_claim(tok, "jti", jwt_id)


def with_claim_generator(tok: Token, name: str, generator: ClaimGenerator) -> Token:
    """Register a zero-argument function computing ``name`` at sign time.

    The generated value overwrites any literal value set for the same claim.
    """
    _check_name(name)
    if not callable(generator):
        raise TypeError(f"Generator for claim '{name}' must be callable")
    return tok.replace(claims_generation={**tok.claims_generation, name: generator})


def with_header_arg(tok: Token, key: str, value: Any) -> Token:
    _check_name(key, "header")
    if key == "alg":
        raise ValueError("'alg' is set from the signer and cannot be given directly")
    return tok.replace(header={**tok.header, key: value})


def with_header_args(tok: Token, header: Mapping[str, Any]) -> Token:
    """Replace the JOSE header. ``alg`` always comes from the signer."""
    if not isinstance(header, Mapping):
        raise TypeError(f"Header must be a mapping, got {type(header).__name__}")
    for key in header:
        _check_name(key, "header")
    return tok.replace(header={k: v for k, v in header.items() if k != "alg"})


def with_signer(tok: Token, signer: Signer) -> Token:
    """Attach ``signer`` without signing or verifying anything."""
    if not isinstance(signer, Signer):
        raise TypeError(f"Expected a Signer, got {type(signer).__name__}")
    return tok.replace(signer=signer)


def with_codec(tok: Token, codec: JsonCodec) -> Token:
    return tok.replace(codec=codec)


def with_compact_token(tok: Token, compact: str) -> Token:
    if not isinstance(compact, str):
        raise TypeError(f"Compact token must be a string, got {type(compact).__name__}")
    return tok.replace(token=compact)


def with_validation(tok: Token, name: str, predicate: ClaimPredicate) -> Token:
    """Require ``predicate(value)`` to hold for claim ``name`` when present."""
    _check_name(name)
    if not callable(predicate):
        raise TypeError(f"Validation for claim '{name}' must be callable")
    return tok.replace(validations={**tok.validations, name: predicate})


def without_validation(tok: Token, name: str) -> Token:
    _check_name(name)
    return tok.replace(
        validations={k: v for k, v in tok.validations.items() if k != name}
    )


def get_compact(tok: Token) -> Optional[str]:
    return tok.token


def get_claims(tok: Token) -> Dict[str, Any]:
    """Return the claim set. Generated claims only appear after signing."""
    return tok.claims


def get_error(tok: Token) -> Optional[str]:
    return tok.error


def get_data(tok: Token) -> Result:
    if tok.error is not None:
        return Err(tok.error)
    return Ok(tok.claims)
