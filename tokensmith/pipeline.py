"""Sign, verify and peek at tokens.

Each step takes a :class:`~tokensmith.builder.Token` and returns a new one.
Expected failures (bad keys, malformed input, bad signatures, rejected
claims) never raise out of here; they are recorded in ``Token.error`` and
every later step passes the token through unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .builder import Token, get_data
from .codec import JsonCodec
from .config import load_settings
from .exceptions import ClaimValidationError, TokenError
from .results import Err, Ok, Result
from .signer import Signer, b64decode, sign_compact, split_compact, verify_compact

logger = logging.getLogger(__name__)

ClaimValidator = Callable[[str, Mapping[str, Any], Dict[str, Any]], Result]


def _resolve_signer(tok: Token, signer: Optional[Signer]) -> Signer:
    if signer is not None:
        return signer
    if tok.signer is not None:
        return tok.signer
    return load_settings().signer.build_signer()


def _build_header(tok: Token, signer: Signer) -> Dict[str, Any]:
    header: Dict[str, Any] = {"typ": tok.header.get("typ", "JWT"), "alg": signer.algorithm.value}
    header.update((k, v) for k, v in tok.header.items() if k not in ("typ", "alg"))
    return header


def sign(tok: Token, signer: Optional[Signer] = None) -> Token:
    """Sign ``tok`` into a compact token.

    ``signer`` overrides the one attached to the token; with neither, the
    signer from the settings file is used. All claim generators run exactly
    once and their values replace literal claims of the same name.
    """
    if tok.error is not None:
        return tok

    signer = _resolve_signer(tok, signer)
    generated = {name: generate() for name, generate in tok.claims_generation.items()}
    claims = {**tok.claims, **generated}
    header = _build_header(tok, signer)

    try:
        compact = sign_compact(header, claims, signer, tok.codec)
    except TokenError as exc:
        logger.error(f"Failed to sign token with {signer.algorithm.value}: {exc}")
        return tok.replace(token=None, error=str(exc))

    logger.debug(f"Signed token with {signer.algorithm.value} ({len(claims)} claims)")
    return tok.replace(
        header=header, claims=claims, signer=signer, token=compact, error=None
    )


def _predicate_validator(tok: Token) -> ClaimValidator:
    def validate(name: str, payload: Mapping[str, Any], options: Dict[str, Any]) -> Result:
        predicate = tok.validations.get(name)
        if predicate is None:
            return Ok()
        try:
            accepted = predicate(payload[name])
        except (TypeError, ValueError):
            accepted = False
        return Ok() if accepted else Err(f"Invalid {name} claim")

    return validate


def _skip_names(skip: Iterable[str]) -> List[str]:
    # a bare claim name, not its characters
    if isinstance(skip, str):
        return [skip]
    return list(skip)


def run_validators(
    payload: Mapping[str, Any],
    validator: ClaimValidator,
    skip: Iterable[str] = (),
    options: Optional[Dict[str, Any]] = None,
) -> None:
    """Validate every claim present in ``payload`` in payload order.

    Raises :class:`ClaimValidationError` for the first rejected claim.
    """
    skipped = set(_skip_names(skip))
    options = options or {}
    for name in payload:
        if name in skipped:
            continue
        outcome = validator(name, payload, options)
        if isinstance(outcome, Err):
            raise ClaimValidationError(name, outcome.message)


def verify(
    tok: Token,
    signer: Optional[Signer] = None,
    *,
    skip: Iterable[str] = (),
    validator: Optional[ClaimValidator] = None,
    **options: Any,
) -> Token:
    """Verify the compact token held by ``tok`` and validate its claims.

    The signature is checked with ``signer``'s algorithm (never the ``alg``
    from the received header) before anything is decoded. Claims named in
    ``skip`` are not validated. ``validator(name, payload, options)`` decides
    each claim; without it the token's ``validations`` predicates apply.
    Extra keyword arguments are passed to the validator as ``options``.
    """
    if tok.error is not None:
        return tok

    signer = _resolve_signer(tok, signer)
    validator = validator or _predicate_validator(tok)
    skip = _skip_names(skip)

    try:
        raw_header, raw_payload = verify_compact(tok.token, signer)
        header = tok.codec.decode_header(raw_header)
        payload = tok.codec.decode(raw_payload)
    except TokenError as exc:
        logger.warning(f"Rejected token under {signer.algorithm.value}: {exc}")
        return tok.replace(error=str(exc))

    try:
        run_validators(payload, validator, skip, {**options, "skip": skip})
    except ClaimValidationError as exc:
        logger.info(f"Claim '{exc.claim}' failed validation: {exc.message}")
        return tok.replace(error=exc.message)

    logger.debug(f"Verified token under {signer.algorithm.value}")
    return tok.replace(header=header, claims=payload, signer=signer, error=None)


def verify_data(
    tok: Token,
    signer: Optional[Signer] = None,
    *,
    skip: Iterable[str] = (),
    validator: Optional[ClaimValidator] = None,
    **options: Any,
) -> Result:
    """Same as :func:`verify` but returns ``Ok(claims)`` or ``Err(message)``."""
    return get_data(verify(tok, signer, skip=skip, validator=validator, **options))


def _compact_and_codec(value: Token | str, codec: Optional[JsonCodec]):
    if isinstance(value, Token):
        return value.token, codec or value.codec
    return value, codec or JsonCodec()


def peek(value: Token | str, codec: Optional[JsonCodec] = None) -> Result:
    """Decode the payload WITHOUT checking the signature or any claim.

    The returned claims are untrusted. Use them only to decide how to
    verify the token (for example which key to load), never to authorize.
    """
    compact, codec = _compact_and_codec(value, codec)
    try:
        _, payload_segment, _ = split_compact(compact)
        return Ok(codec.decode(b64decode(payload_segment)))
    except TokenError as exc:
        return Err(str(exc))


def peek_header(value: Token | str, codec: Optional[JsonCodec] = None) -> Result:
    """Decode the header WITHOUT checking the signature. The result is untrusted."""
    compact, codec = _compact_and_codec(value, codec)
    try:
        header_segment, _, _ = split_compact(compact)
        return Ok(codec.decode_header(b64decode(header_segment)))
    except TokenError as exc:
        return Err(str(exc))

