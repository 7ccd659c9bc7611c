"""Call-level entry points: encode claims into a token and decode it back."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from .builder import Token, get_data
from .claims import STANDARD_CLAIMS, to_claims
from .config import TokenConfig, get_config
from .pipeline import sign, verify
from .results import Err, Ok, Result


def encode_token(payload: Any, config: Optional[TokenConfig] = None) -> Result:
    """Sign ``payload`` with the signer and claim generators of ``config``.

    ``payload`` may be a mapping or a record-like value (pydantic model,
    dataclass, namedtuple). For each standard claim whose ``config.claim``
    value is not None a generator is registered, so those values reflect the
    signing instant and override the same names in ``payload``.

    Returns ``Ok(compact_token)`` or ``Err(message)``.
    """
    config = get_config(config)
    claims = to_claims(payload)

    generators = {}
    for name in STANDARD_CLAIMS:
        value = config.claim(name, claims)
        if value is not None:
            generators[name] = lambda value=value: value

    tok = Token(claims=claims, claims_generation=generators, codec=config.codec())
    signed = sign(tok, config.signer())
    if signed.error is not None:
        return Err(signed.error)
    return Ok(signed.token)


def decode_token(
    compact: str,
    config: Optional[TokenConfig] = None,
    *,
    skip: Iterable[str] = (),
    **options: Any,
) -> Result:
    """Verify ``compact`` and validate its claims with ``config``.

    Every claim present in the payload, except those named in ``skip``, is
    passed to ``config.validate_claim(name, payload, options)``; ``options``
    holds ``skip`` and any extra keyword arguments. The first rejection
    wins.

    Returns ``Ok(claims)`` or ``Err(message)``; malformed input never raises.
    """
    config = get_config(config)
    tok = Token(token=compact, codec=config.codec())
    verified = verify(
        tok, config.signer(), skip=skip, validator=config.validate_claim, **options
    )
    return get_data(verified)
