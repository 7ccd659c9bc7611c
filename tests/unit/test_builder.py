"""Tests for the Token model and its builder functions."""

import pytest
from pydantic import BaseModel

from tokensmith import builder
from tokensmith.builder import (
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
from tokensmith.codec import ModelCodec
from tokensmith.results import Err, Ok
from tokensmith.signer import hs256


class Claims(BaseModel):
    sub: str
    scope: str = "read"


def test_default_token_registers_time_generators_and_validations():
    tok = token()
    assert set(tok.claims_generation) == {"exp", "iat", "nbf"}
    assert set(tok.validations) == {"exp", "iat", "nbf"}
    assert tok.claims == {}
    assert tok.header == {"typ": "JWT"}


def test_token_from_mapping_record_and_compact():
    assert token({"sub": "alice"}).claims == {"sub": "alice"}
    assert token(Claims(sub="bob")).claims == {"sub": "bob", "scope": "read"}
    assert token("a.b.c").token == "a.b.c"


def test_builders_return_new_tokens():
    original = Token()
    updated = with_claim(original, "role", "admin")
    assert updated.claims == {"role": "admin"}
    assert original.claims == {}
    assert updated is not original


def test_token_is_frozen():
    tok = Token()
    with pytest.raises(Exception):
        tok.error = "boom"


def test_standard_claim_builders():
    tok = Token()
    tok = with_iss(tok, "issuer")
    tok = with_sub(tok, "alice")
    tok = with_aud(tok, "api")
    tok = with_jti(tok, "id-1")
    assert tok.claims == {"iss": "issuer", "sub": "alice", "aud": "api", "jti": "id-1"}


def test_time_builders_with_values_set_literals():
    tok = with_nbf(with_iat(with_exp(Token(), 100), 50), 40)
    assert tok.claims == {"exp": 100, "iat": 50, "nbf": 40}
    assert tok.claims_generation == {}


def test_time_builders_without_values_register_generators(monkeypatch):
    monkeypatch.setattr(builder, "current_time", lambda: 1000)
    tok = with_nbf(with_exp(Token()))
    assert tok.claims == {}
    assert tok.claims_generation["exp"]() == 1000 + 7200
    assert tok.claims_generation["nbf"]() == 999


def test_claim_names_must_be_non_empty_strings():
    with pytest.raises(ValueError):
        with_claim(Token(), "", 1)
    with pytest.raises(TypeError):
        with_claim(Token(), 42, 1)


def test_with_claims_replaces_claim_set():
    tok = with_claim(Token(), "old", True)
    tok = with_claims(tok, Claims(sub="carol"))
    assert tok.claims == {"sub": "carol", "scope": "read"}
    with pytest.raises(TypeError):
        with_claims(tok, [("sub", "carol")])


def test_generator_must_be_callable():
    with pytest.raises(TypeError):
        with_claim_generator(Token(), "exp", 1234)


def test_validation_must_be_callable_and_can_be_removed():
    with pytest.raises(TypeError):
        with_validation(Token(), "exp", "later")
    tok = with_validation(Token(), "exp", lambda exp: True)
    assert "exp" in tok.validations
    assert without_validation(tok, "exp").validations == {}


def test_header_args():
    tok = with_header_arg(Token(), "kid", "key-1")
    assert tok.header == {"typ": "JWT", "kid": "key-1"}
    with pytest.raises(ValueError):
        with_header_arg(tok, "alg", "none")

    replaced = with_header_args(tok, {"alg": "none", "cty": "JWT"})
    assert replaced.header == {"cty": "JWT"}


def test_with_signer_codec_and_compact():
    signer = hs256("secret")
    tok = with_signer(Token(), signer)
    assert tok.signer is signer
    assert tok.token is None
    with pytest.raises(TypeError):
        with_signer(Token(), "secret")

    codec = ModelCodec(Claims)
    assert with_codec(Token(), codec).codec is codec
    assert with_compact_token(Token(), "x.y.z").token == "x.y.z"


def test_accessors_and_get_data():
    tok = with_compact_token(with_claim(Token(), "a", 1), "x.y.z")
    assert get_compact(tok) == "x.y.z"
    assert get_claims(tok) == {"a": 1}
    assert get_error(tok) is None
    assert get_data(tok) == Ok({"a": 1})

    failed = tok.replace(error="Invalid signature")
    assert get_data(failed) == Err("Invalid signature")
