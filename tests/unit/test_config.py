"""Tests for settings loading and the settings-driven config."""

import time

import pytest

from tokensmith.api import decode_token, encode_token
from tokensmith.config import (
    SettingsConfig,
    SignerSettings,
    TokenSettings,
    get_config,
    load_settings,
)
from tokensmith.exceptions import ConfigurationError
from tokensmith.results import Err, Ok
from tokensmith.signer import Algorithm


def test_load_settings_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "tokensmith.yaml"
    config_path.write_text(
        """
signer:
  algorithm: HS512
  secret: from-file
issuer: https://idp/
expires_in: 60
"""
    )
    monkeypatch.setenv("TOKENSMITH_CONFIG", str(config_path))

    settings = load_settings()
    assert settings.signer.algorithm is Algorithm.HS512
    assert settings.signer.secret == "from-file"
    assert settings.issuer == "https://idp/"
    assert settings.expires_in == 60


def test_env_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "tokensmith.yaml"
    config_path.write_text("signer:\n  secret: from-file\n")
    monkeypatch.setenv("TOKENSMITH_SECRET", "from-env")
    monkeypatch.setenv("TOKENSMITH_ALGORITHM", "HS384")

    settings = load_settings(str(config_path))
    assert settings.signer.secret == "from-env"
    assert settings.signer.algorithm is Algorithm.HS384


def test_defaults_without_file():
    settings = load_settings()
    assert settings.signer.algorithm is Algorithm.HS256
    assert settings.signer.secret is None
    assert settings.expires_in == 7200


def test_build_signer_requires_key_material():
    with pytest.raises(ConfigurationError):
        SignerSettings().build_signer()
    with pytest.raises(ConfigurationError):
        SignerSettings(algorithm="RS256").build_signer()
    assert SignerSettings(algorithm="none").build_signer().insecure


def test_build_signer_reads_key_file(tmp_path, rsa_private_pem):
    key_path = tmp_path / "key.pem"
    key_path.write_text(rsa_private_pem)

    signer = SignerSettings(algorithm="RS256", key_file=str(key_path)).build_signer()
    assert signer.algorithm is Algorithm.RS256
    assert signer.key == rsa_private_pem


def test_get_config_builds_from_settings(monkeypatch):
    monkeypatch.setenv("TOKENSMITH_SECRET", "env-secret")
    config = get_config()
    assert isinstance(config, SettingsConfig)
    assert config.secret_key() == "env-secret"


def _settings(**kwargs):
    return TokenSettings(signer=SignerSettings(secret="s3cret"), **kwargs)


def test_settings_config_generates_standard_claims():
    config = SettingsConfig(_settings(issuer="https://idp/", audience="api", expires_in=60))
    result = decode_token(encode_token({"sub": "alice"}, config).value, config)

    assert isinstance(result, Ok)
    claims = result.value
    now = int(time.time())
    assert claims["sub"] == "alice"
    assert claims["iss"] == "https://idp/"
    assert claims["aud"] == "api"
    assert now < claims["exp"] <= now + 61
    assert claims["nbf"] < claims["iat"] + 1


def test_settings_config_checks_issuer_and_audience():
    issuing = SettingsConfig(_settings(issuer="https://other/", audience="web"))
    compact = encode_token({"sub": "alice"}, issuing).value

    expecting = SettingsConfig(_settings(issuer="https://idp/"))
    assert decode_token(compact, expecting) == Err("Invalid issuer")
    assert decode_token(compact, expecting, skip=["iss"], aud="api") == Err("Invalid audience")
    assert isinstance(decode_token(compact, expecting, skip=["iss"], aud="web"), Ok)
