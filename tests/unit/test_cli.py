import json

from typer.testing import CliRunner

from tokensmith.cli import app


def test_sign_verify_and_peek(monkeypatch):
    monkeypatch.setenv("TOKENSMITH_SECRET", "cli-secret")
    runner = CliRunner()

    signed = runner.invoke(app, ["sign", "-c", "sub=alice", "-c", "admin=true"])
    assert signed.exit_code == 0, f"Command failed. Output: {signed.stdout}"
    compact = signed.stdout.strip()
    assert compact.count(".") == 2

    verified = runner.invoke(app, ["verify", compact])
    assert verified.exit_code == 0, f"Command failed. Output: {verified.stdout}"
    claims = json.loads(verified.stdout)
    assert claims["sub"] == "alice"
    assert claims["admin"] is True
    assert "exp" in claims

    peeked = runner.invoke(app, ["peek", compact])
    assert peeked.exit_code == 0
    assert "UNTRUSTED" in peeked.stdout
    assert '"alg": "HS256"' in peeked.stdout


def test_verify_rejects_bad_signature(monkeypatch):
    runner = CliRunner()
    monkeypatch.setenv("TOKENSMITH_SECRET", "one-secret")
    compact = runner.invoke(app, ["sign", "-c", "sub=alice"]).stdout.strip()

    monkeypatch.setenv("TOKENSMITH_SECRET", "another-secret")
    result = runner.invoke(app, ["verify", compact])
    assert result.exit_code == 1
    assert "Invalid signature" in result.stdout


def test_sign_without_secret_fails():
    result = CliRunner().invoke(app, ["sign", "-c", "sub=alice"])
    assert result.exit_code == 1
    assert "needs a secret" in result.stdout


def test_bad_claim_syntax_and_malformed_peek():
    runner = CliRunner()
    result = runner.invoke(app, ["sign", "-c", "novalue"])
    assert result.exit_code == 1
    assert "name=value" in result.stdout

    result = runner.invoke(app, ["peek", "foobar"])
    assert result.exit_code == 1
    assert "Malformed token" in result.stdout
