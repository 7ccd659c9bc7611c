"""Command line interface for signing, verifying and inspecting tokens."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from tokensmith.api import decode_token, encode_token
from tokensmith.config import SettingsConfig, load_settings
from tokensmith.exceptions import ConfigurationError
from tokensmith.pipeline import peek, peek_header

app = typer.Typer(help="CLI for tokensmith JSON Web Tokens")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """tokensmith CLI entry point."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _parse_claims(items: List[str]) -> Dict[str, Any]:
    claims: Dict[str, Any] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            _fail(f"Claims must look like name=value, got '{item}'")
        try:
            claims[name] = json.loads(raw)
        except ValueError:
            claims[name] = raw
    return claims


def _load_config(config: Optional[Path]) -> SettingsConfig:
    return SettingsConfig(load_settings(str(config) if config else None))


@app.command("sign")
def sign_command(
    claim: Optional[List[str]] = typer.Option(
        None, "--claim", "-c", help="Claim as name=value; JSON values are parsed"
    ),
    config: Optional[Path] = typer.Option(None, help="Path to a tokensmith.yaml"),
) -> None:
    """
    Sign the given claims and print the compact token.

    exp, iat and nbf are generated at signing time; iss and aud come from
    the settings file when configured.

    Example:
        TOKENSMITH_SECRET=s3cret tokensmith sign -c sub=alice -c admin=true
    """
    claims = _parse_claims(claim or [])
    try:
        result = encode_token(claims, _load_config(config))
    except ConfigurationError as exc:
        _fail(str(exc))
    if not result.ok:
        _fail(result.message)
    typer.echo(result.value)


@app.command("verify")
def verify_command(
    token: str,
    skip: Optional[List[str]] = typer.Option(
        None, "--skip", help="Claim name to leave unvalidated"
    ),
    aud: Optional[str] = typer.Option(None, help="Expected audience"),
    config: Optional[Path] = typer.Option(None, help="Path to a tokensmith.yaml"),
) -> None:
    """
    Verify a token's signature and claims and print the claims as JSON.

    Example:
        tokensmith verify eyJ0eXAi... --skip exp
    """
    options: Dict[str, Any] = {}
    if aud is not None:
        options["aud"] = aud
    try:
        result = decode_token(token, _load_config(config), skip=skip or [], **options)
    except ConfigurationError as exc:
        _fail(str(exc))
    if not result.ok:
        _fail(result.message)
    typer.echo(json.dumps(result.value, indent=2, sort_keys=True))


@app.command("peek")
def peek_command(token: str) -> None:
    """Print a token's header and claims WITHOUT verifying anything."""
    header = peek_header(token)
    claims = peek(token)
    if not header.ok:
        _fail(header.message)
    if not claims.ok:
        _fail(claims.message)
    typer.secho("UNTRUSTED: signature not verified", fg=typer.colors.YELLOW)
    typer.echo(json.dumps({"header": header.value, "claims": claims.value}, indent=2))
