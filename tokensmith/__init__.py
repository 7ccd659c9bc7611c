"""tokensmith: build, sign and verify JSON Web Tokens."""

from .api import decode_token, encode_token
from .builder import (
    Token,
    get_claims,
    get_compact,
    get_data,
    get_error,
    token,
    with_aud,
    with_claim,
    with_claim_generator,
    with_claims,
    with_codec,
    with_compact_token,
    with_exp,
    with_header_arg,
    with_header_args,
    with_iat,
    with_iss,
    with_jti,
    with_nbf,
    with_signer,
    with_sub,
    with_validation,
    without_validation,
)
from .claims import (
    current_time,
    to_claims,
    validate_exp,
    validate_iat,
    validate_nbf,
    validate_time_claim,
)
from .codec import JsonCodec, ModelCodec
from .config import SettingsConfig, StandardClaims, TokenConfig, TokenSettings, load_settings
from .exceptions import (
    ClaimValidationError,
    ConfigurationError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenDecodeError,
    TokenEncodeError,
    TokenError,
    UnsuitableKeyError,
)
from .pipeline import peek, peek_header, sign, verify, verify_data
from .results import Err, Ok, Result
from .signer import (
    Algorithm,
    Signer,
    ed448,
    ed448ph,
    ed25519,
    ed25519ph,
    eddsa,
    es,
    es256,
    es384,
    es512,
    hs,
    hs256,
    hs384,
    hs512,
    none,
    ps,
    ps256,
    ps384,
    ps512,
    rs,
    rs256,
    rs384,
    rs512,
)

__version__ = "0.1.0"
__all__ = [
    "Algorithm",
    "ClaimValidationError",
    "ConfigurationError",
    "Err",
    "InvalidSignatureError",
    "JsonCodec",
    "MalformedTokenError",
    "ModelCodec",
    "Ok",
    "Result",
    "SettingsConfig",
    "Signer",
    "StandardClaims",
    "Token",
    "TokenConfig",
    "TokenDecodeError",
    "TokenEncodeError",
    "TokenError",
    "TokenSettings",
    "UnsuitableKeyError",
    "current_time",
    "decode_token",
    "ed25519",
    "ed25519ph",
    "ed448",
    "ed448ph",
    "eddsa",
    "encode_token",
    "es",
    "es256",
    "es384",
    "es512",
    "get_claims",
    "get_compact",
    "get_data",
    "get_error",
    "hs",
    "hs256",
    "hs384",
    "hs512",
    "load_settings",
    "none",
    "peek",
    "peek_header",
    "ps",
    "ps256",
    "ps384",
    "ps512",
    "rs",
    "rs256",
    "rs384",
    "rs512",
    "sign",
    "to_claims",
    "token",
    "validate_exp",
    "validate_iat",
    "validate_nbf",
    "validate_time_claim",
    "verify",
    "verify_data",
    "with_aud",
    "with_claim",
    "with_claim_generator",
    "with_claims",
    "with_codec",
    "with_compact_token",
    "with_exp",
    "with_header_arg",
    "with_header_args",
    "with_iat",
    "with_iss",
    "with_jti",
    "with_nbf",
    "with_signer",
    "with_sub",
    "with_validation",
    "without_validation",
]
