from __future__ import annotations

import abc
import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

from .claims import (
    NBF_OFFSET,
    current_time,
    validate_exp,
    validate_iat,
    validate_nbf,
)
from .codec import JsonCodec
from .exceptions import ConfigurationError
from .results import Err, Ok, Result
from .signer import Algorithm, Signer

logger = logging.getLogger(__name__)


class TokenConfig(metaclass=abc.ABCMeta):
    """Bundle of signer, codec, claim generators and claim validators.

    Pass an instance to :func:`~tokensmith.api.encode_token` and
    :func:`~tokensmith.api.decode_token`. Subclasses override ``claim`` to
    generate standard claims at sign time and ``validate_claim`` to accept
    or reject each decoded claim.
    """

    @abc.abstractmethod
    def secret_key(self) -> Any:
        """Return the key material handed to the signer."""
        raise NotImplementedError

    def algorithm(self) -> Algorithm:
        return Algorithm.HS256

    def signer(self) -> Signer:
        return Signer(algorithm=self.algorithm(), key=self.secret_key())

    def codec(self) -> JsonCodec:
        return JsonCodec()

    def claim(self, name: str, payload: Mapping[str, Any]) -> Any:
        """Value generated for standard claim ``name`` at sign time, or None."""
        return None

    def validate_claim(
        self, name: str, payload: Mapping[str, Any], options: Dict[str, Any]
    ) -> Result:
        """Accept or reject claim ``name`` of a verified ``payload``.

        ``payload`` is the whole decoded payload so a validator can compare
        claims with each other or with caller ``options``.
        """
        return Ok()


class StandardClaims:
    """Mixin generating and validating ``exp``, ``iat`` and ``nbf``."""

    expires_in: int = 2 * 60 * 60

    def claim(self, name: str, payload: Mapping[str, Any]) -> Any:
        if name == "exp":
            return current_time() + self.expires_in
        if name == "iat":
            return current_time()
        if name == "nbf":
            return current_time() - NBF_OFFSET
        return super().claim(name, payload)

    def validate_claim(
        self, name: str, payload: Mapping[str, Any], options: Dict[str, Any]
    ) -> Result:
        if name == "exp":
            return validate_exp(payload)
        if name == "iat":
            return validate_iat(payload)
        if name == "nbf":
            return validate_nbf(payload)
        return super().validate_claim(name, payload, options)


class SignerSettings(BaseModel):
    """Signing algorithm and where its key material comes from."""

    algorithm: Algorithm = Algorithm.HS256
    secret: Optional[str] = None
    key_file: Optional[str] = None

    def load_key(self) -> Any:
        if self.algorithm.family == "none":
            return None
        if self.algorithm.family == "hmac":
            if not self.secret:
                raise ConfigurationError(
                    f"{self.algorithm.value} needs a secret; set signer.secret or TOKENSMITH_SECRET"
                )
            return self.secret
        if not self.key_file:
            raise ConfigurationError(
                f"{self.algorithm.value} needs a PEM key; set signer.key_file"
            )
        with open(self.key_file) as f:
            return f.read()

    def build_signer(self) -> Signer:
        return Signer(algorithm=self.algorithm, key=self.load_key())


class TokenSettings(BaseModel):
    """Top-level configuration model."""

    signer: SignerSettings = Field(default_factory=SignerSettings)
    issuer: Optional[str] = None
    audience: Optional[str] = None
    expires_in: int = 2 * 60 * 60


def load_settings(path: Optional[str] = None) -> TokenSettings:
    """Load settings from a YAML file.

    Args:
        path: Optional path to the settings file. Falls back to the
            TOKENSMITH_CONFIG env variable or 'tokensmith.yaml' in the
            current directory.
    """

    config_path = path or os.getenv("TOKENSMITH_CONFIG", "tokensmith.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        settings = TokenSettings(**data)
        logger.debug(f"Loaded token settings from {config_path}")
    else:
        settings = TokenSettings()

    env_algorithm = os.getenv("TOKENSMITH_ALGORITHM")
    if env_algorithm:
        settings.signer.algorithm = Algorithm(env_algorithm)
    env_secret = os.getenv("TOKENSMITH_SECRET")
    if env_secret:
        settings.signer.secret = env_secret
    return settings


class SettingsConfig(StandardClaims, TokenConfig):
    """:class:`TokenConfig` driven by :class:`TokenSettings`.

    Generates ``exp``, ``iat``, ``nbf``, ``iss`` and ``aud``. ``iss`` must
    match the configured issuer; ``aud`` must match the ``aud`` option when
    one is given, otherwise the configured audience.
    """

    def __init__(self, settings: Optional[TokenSettings] = None) -> None:
        self.settings = settings or load_settings()
        self.expires_in = self.settings.expires_in

    def secret_key(self) -> Any:
        return self.settings.signer.load_key()

    def algorithm(self) -> Algorithm:
        return self.settings.signer.algorithm

    def claim(self, name: str, payload: Mapping[str, Any]) -> Any:
        if name == "iss":
            return self.settings.issuer
        if name == "aud":
            return self.settings.audience
        return super().claim(name, payload)

    def validate_claim(
        self, name: str, payload: Mapping[str, Any], options: Dict[str, Any]
    ) -> Result:
        if name == "iss" and self.settings.issuer is not None:
            if payload.get("iss") != self.settings.issuer:
                return Err("Invalid issuer")
            return Ok()
        if name == "aud":
            expected = options.get("aud", self.settings.audience)
            if expected is not None and payload.get("aud") != expected:
                return Err("Invalid audience")
            return Ok()
        return super().validate_claim(name, payload, options)


def get_config(config: Optional[TokenConfig] = None) -> TokenConfig:
    """Return ``config`` or a :class:`SettingsConfig` from the settings file."""
    return config or SettingsConfig()
