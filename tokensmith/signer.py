"""Algorithm signers and the JWS compact serialization.

A :class:`Signer` pairs one algorithm from the closed :class:`Algorithm` set
with raw key material. Signing and verification are delegated to the PyJWT
algorithm providers; this module only decides which provider runs, checks
that the key fits the algorithm, and lays out the three compact segments.

Verification always uses the signer's own algorithm. The ``alg`` entry of a
received header is attacker controlled and is never consulted here.
"""

from __future__ import annotations

import binascii
import hashlib
import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ed448 import Ed448PrivateKey, Ed448PublicKey
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from jwt.algorithms import (
    ECAlgorithm,
    HMACAlgorithm,
    OKPAlgorithm,
    RSAAlgorithm,
    RSAPSSAlgorithm,
)
from jwt.exceptions import InvalidKeyError
from jwt.utils import base64url_decode, base64url_encode
from pydantic import BaseModel, ConfigDict, Field

from .codec import JsonCodec
from .exceptions import InvalidSignatureError, MalformedTokenError, UnsuitableKeyError

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Every signing algorithm a :class:`Signer` can use."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    ED25519 = "Ed25519"
    ED25519PH = "Ed25519ph"
    ED448 = "Ed448"
    ED448PH = "Ed448ph"
    NONE = "none"

    @property
    def family(self) -> str:
        return _FAMILIES[self]


_FAMILIES: Dict[Algorithm, str] = {
    Algorithm.HS256: "hmac",
    Algorithm.HS384: "hmac",
    Algorithm.HS512: "hmac",
    Algorithm.RS256: "rsa",
    Algorithm.RS384: "rsa",
    Algorithm.RS512: "rsa",
    Algorithm.PS256: "rsa-pss",
    Algorithm.PS384: "rsa-pss",
    Algorithm.PS512: "rsa-pss",
    Algorithm.ES256: "ecdsa",
    Algorithm.ES384: "ecdsa",
    Algorithm.ES512: "ecdsa",
    Algorithm.ED25519: "eddsa",
    Algorithm.ED25519PH: "eddsa",
    Algorithm.ED448: "eddsa",
    Algorithm.ED448PH: "eddsa",
    Algorithm.NONE: "none",
}

_PROVIDERS = {
    Algorithm.HS256: HMACAlgorithm(HMACAlgorithm.SHA256),
    Algorithm.HS384: HMACAlgorithm(HMACAlgorithm.SHA384),
    Algorithm.HS512: HMACAlgorithm(HMACAlgorithm.SHA512),
    Algorithm.RS256: RSAAlgorithm(RSAAlgorithm.SHA256),
    Algorithm.RS384: RSAAlgorithm(RSAAlgorithm.SHA384),
    Algorithm.RS512: RSAAlgorithm(RSAAlgorithm.SHA512),
    Algorithm.PS256: RSAPSSAlgorithm(RSAPSSAlgorithm.SHA256),
    Algorithm.PS384: RSAPSSAlgorithm(RSAPSSAlgorithm.SHA384),
    Algorithm.PS512: RSAPSSAlgorithm(RSAPSSAlgorithm.SHA512),
    Algorithm.ES256: ECAlgorithm(ECAlgorithm.SHA256),
    Algorithm.ES384: ECAlgorithm(ECAlgorithm.SHA384),
    Algorithm.ES512: ECAlgorithm(ECAlgorithm.SHA512),
    Algorithm.ED25519: OKPAlgorithm(),
    Algorithm.ED25519PH: OKPAlgorithm(),
    Algorithm.ED448: OKPAlgorithm(),
    Algorithm.ED448PH: OKPAlgorithm(),
}

_EC_CURVES = {
    Algorithm.ES256: "secp256r1",
    Algorithm.ES384: "secp384r1",
    Algorithm.ES512: "secp521r1",
}

_OKP_KEY_TYPES = {
    Algorithm.ED25519: (Ed25519PrivateKey, Ed25519PublicKey),
    Algorithm.ED25519PH: (Ed25519PrivateKey, Ed25519PublicKey),
    Algorithm.ED448: (Ed448PrivateKey, Ed448PublicKey),
    Algorithm.ED448PH: (Ed448PrivateKey, Ed448PublicKey),
}

# cryptography has no HashEdDSA, so the ph variants sign a digest of the message.
_PREHASH: Dict[Algorithm, Callable[[bytes], bytes]] = {
    Algorithm.ED25519PH: lambda message: hashlib.sha512(message).digest(),
    Algorithm.ED448PH: lambda message: hashlib.shake_256(message).digest(64),
}

_KEY_ERRORS = (InvalidKeyError, UnsupportedAlgorithm, ValueError, TypeError)


class Signer(BaseModel):
    """An algorithm plus the key material used to sign or verify with it.

    Signers are immutable and cheap to build, so callers construct one per
    call from whatever key material they hold: a secret for HMAC, a PEM
    string or ``cryptography`` key object for the asymmetric families.
    Private keys can verify as well as sign.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    algorithm: Algorithm
    key: Any = Field(default=None, repr=False)

    @property
    def insecure(self) -> bool:
        return self.algorithm is Algorithm.NONE

    def sign(self, message: bytes) -> bytes:
        if self.insecure:
            logger.warning("Signing with the 'none' algorithm; the token is unsecured")
            return b""

        key = self._prepare_key()
        if self.algorithm.family != "hmac" and not hasattr(key, "sign"):
            raise UnsuitableKeyError(
                f"{self.algorithm.value} signing requires a private key"
            )
        try:
            return _PROVIDERS[self.algorithm].sign(self._message(message), key)
        except (ValueError, TypeError) as exc:
            raise UnsuitableKeyError(
                f"Key is not suitable for {self.algorithm.value}: {exc}"
            ) from exc

    def verify(self, message: bytes, signature: bytes) -> bool:
        if self.insecure:
            logger.warning("Accepting a token under the 'none' algorithm; it is unsecured")
            return signature == b""

        key = self._prepare_key()
        if self.algorithm.family != "hmac" and hasattr(key, "public_key"):
            key = key.public_key()
        return _PROVIDERS[self.algorithm].verify(self._message(message), key, signature)

    def _message(self, message: bytes) -> bytes:
        prehash = _PREHASH.get(self.algorithm)
        return prehash(message) if prehash else message

    def _prepare_key(self) -> Any:
        try:
            key = _PROVIDERS[self.algorithm].prepare_key(self.key)
        except _KEY_ERRORS as exc:
            raise UnsuitableKeyError(
                f"Key is not suitable for {self.algorithm.value}: {exc}"
            ) from exc

        curve = _EC_CURVES.get(self.algorithm)
        if curve and key.curve.name != curve:
            raise UnsuitableKeyError(
                f"{self.algorithm.value} requires a {curve} key, got {key.curve.name}"
            )
        key_types = _OKP_KEY_TYPES.get(self.algorithm)
        if key_types and not isinstance(key, key_types):
            expected = " or ".join(key_type.__name__ for key_type in key_types)
            raise UnsuitableKeyError(f"{self.algorithm.value} requires an {expected}")
        return key


def _family_signer(family: str, algorithm: Algorithm | str, key: Any) -> Signer:
    alg = Algorithm(algorithm)
    if alg.family != family:
        raise ValueError(f"{alg.value} is not an {family} algorithm")
    return Signer(algorithm=alg, key=key)


def hs(algorithm: Algorithm | str, secret: str | bytes) -> Signer:
    """HMAC using SHA-2; ``secret`` is the raw shared secret."""
    return _family_signer("hmac", algorithm, secret)


def rs(algorithm: Algorithm | str, key: Any) -> Signer:
    """RSASSA-PKCS1-v1_5 using SHA-2."""
    return _family_signer("rsa", algorithm, key)


def ps(algorithm: Algorithm | str, key: Any) -> Signer:
    """RSASSA-PSS using SHA-2 and MGF1."""
    return _family_signer("rsa-pss", algorithm, key)


def es(algorithm: Algorithm | str, key: Any) -> Signer:
    """ECDSA; the key's curve must match the algorithm's bit size."""
    return _family_signer("ecdsa", algorithm, key)


def eddsa(algorithm: Algorithm | str, key: Any) -> Signer:
    return _family_signer("eddsa", algorithm, key)


def none() -> Signer:
    """Unsecured signer producing an empty signature. Never use in production."""
    return Signer(algorithm=Algorithm.NONE)


def hs256(secret: str | bytes) -> Signer:
    return hs(Algorithm.HS256, secret)


def hs384(secret: str | bytes) -> Signer:
    return hs(Algorithm.HS384, secret)


def hs512(secret: str | bytes) -> Signer:
    return hs(Algorithm.HS512, secret)


def rs256(key: Any) -> Signer:
    return rs(Algorithm.RS256, key)


def rs384(key: Any) -> Signer:
    return rs(Algorithm.RS384, key)


def rs512(key: Any) -> Signer:
    return rs(Algorithm.RS512, key)


def ps256(key: Any) -> Signer:
    return ps(Algorithm.PS256, key)


def ps384(key: Any) -> Signer:
    return ps(Algorithm.PS384, key)


def ps512(key: Any) -> Signer:
    return ps(Algorithm.PS512, key)


def es256(key: Any) -> Signer:
    return es(Algorithm.ES256, key)


def es384(key: Any) -> Signer:
    return es(Algorithm.ES384, key)


def es512(key: Any) -> Signer:
    return es(Algorithm.ES512, key)


def ed25519(key: Any) -> Signer:
    return eddsa(Algorithm.ED25519, key)


def ed25519ph(key: Any) -> Signer:
    """Ed25519 over the SHA-512 digest of the signing input.

    This is pure Ed25519 applied to a prehash, not RFC 8032 Ed25519ph, so
    other JOSE libraries will not verify these signatures.
    """
    return eddsa(Algorithm.ED25519PH, key)


def ed448(key: Any) -> Signer:
    return eddsa(Algorithm.ED448, key)


def ed448ph(key: Any) -> Signer:
    """Ed448 over the 64-byte SHAKE256 digest of the signing input.

    This is pure Ed448 applied to a prehash, not RFC 8032 Ed448ph, so other
    JOSE libraries will not verify these signatures.
    """
    return eddsa(Algorithm.ED448PH, key)


_SEGMENT = re.compile(r"[A-Za-z0-9_-]*")


def b64encode(data: bytes) -> str:
    return base64url_encode(data).decode("ascii")


def _check_segment(segment: str) -> None:
    if not _SEGMENT.fullmatch(segment) or len(segment) % 4 == 1:
        raise MalformedTokenError("Malformed token: invalid base64url segment")


def b64decode(segment: str) -> bytes:
    _check_segment(segment)
    try:
        return base64url_decode(segment)
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("Malformed token: invalid base64url segment") from exc


def split_compact(compact: Any) -> Tuple[str, str, str]:
    """Split a compact token into its header, payload and signature segments."""
    if not isinstance(compact, str) or not compact:
        raise MalformedTokenError("Malformed token: no compact token given")
    segments = compact.split(".")
    if len(segments) != 3:
        raise MalformedTokenError(
            f"Malformed token: expected 3 segments, got {len(segments)}"
        )
    for segment in segments:
        _check_segment(segment)
    header_segment, payload_segment, signature_segment = segments
    return header_segment, payload_segment, signature_segment


def sign_compact(
    header: Mapping[str, Any],
    claims: Mapping[str, Any],
    signer: Signer,
    codec: JsonCodec | None = None,
) -> str:
    """Encode ``header`` and ``claims`` and sign them into a compact token."""
    codec = codec or JsonCodec()
    header_segment = b64encode(codec.encode(header).encode("utf-8"))
    payload_segment = b64encode(codec.encode(claims).encode("utf-8"))
    signing_input = f"{header_segment}.{payload_segment}"
    signature = signer.sign(signing_input.encode("ascii"))
    return f"{signing_input}.{b64encode(signature)}"


def verify_compact(compact: str, signer: Signer) -> Tuple[bytes, bytes]:
    """Check the signature of ``compact`` and return its raw header and payload.

    Nothing in the header or payload is decoded before the signature has
    been accepted.
    """
    header_segment, payload_segment, signature_segment = split_compact(compact)
    signature = b64decode(signature_segment)
    signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
    if not signer.verify(signing_input, signature):
        raise InvalidSignatureError()
    return b64decode(header_segment), b64decode(payload_segment)
