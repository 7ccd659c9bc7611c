"""Error taxonomy for token signing and verification."""

from __future__ import annotations


class TokenError(Exception):
    """Base class for every expected token failure."""


class MalformedTokenError(TokenError):
    """Compact token does not have three valid base64url segments."""


class InvalidSignatureError(TokenError):
    def __init__(self, message: str = "Invalid signature") -> None:
        super().__init__(message)


class TokenDecodeError(TokenError):
    """Header or payload could not be decoded into a JSON object."""


class TokenEncodeError(TokenError):
    """Header or payload could not be encoded as JSON."""


class UnsuitableKeyError(TokenError):
    """Key material cannot be used with the configured algorithm."""


class ClaimValidationError(TokenError):
    """A claim was rejected by its validator.

    ``str()`` of the error is the validator's own message so callers see
    exactly what the validator reported.
    """

    def __init__(self, claim: str, message: str) -> None:
        super().__init__(message)
        self.claim = claim
        self.message = message


class ConfigurationError(Exception):
    """No usable signer or settings could be resolved."""
