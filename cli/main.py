"""
synet-vc: inspect and validate Synet verifiable credentials from the shell.

Examples:
    synet-vc validate credential.json
    synet-vc validate credential.json --json
    synet-vc classify subject.json
    synet-vc shape IpAssetCredential
    synet-vc types
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import click

from synet_credential.config import ValidatorConfig
from synet_credential.errors import UnknownCredentialType, ValidationFailure
from synet_credential.models import CredentialType
from synet_credential.registry import classify as classify_subject, family_of, shape_for
from synet_credential.validator import check_credential


def load_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise SystemExit(f"❌ {path} is not valid JSON: {e}")

def dump(obj: Any) -> str:
    return json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log validation steps")
@click.option(
    "--web2-mirrors",
    type=click.Choice(["allow", "warn", "reject"]),
    default=None,
    help="How to treat http(s) mirrors (overrides SYNET_VC_WEB2_MIRRORS)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, web2_mirrors: Optional[str]):
    """Synet verifiable credential tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = ValidatorConfig.from_env()
    except ValueError as e:
        raise SystemExit(f"❌ Invalid SYNET_VC_* setting: {e}")
    if web2_mirrors:
        config = config.model_copy(update={"web2_mirrors": web2_mirrors})
    ctx.obj = config


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print a machine-readable report")
@click.pass_obj
def validate(config: ValidatorConfig, path: str, as_json: bool):
    """
    Validate a credential JSON document.

    Exits with status 1 and prints the first violated rule when the
    credential is invalid.
    """
    result = check_credential(load_json(path), config)

    if isinstance(result, ValidationFailure):
        if as_json:
            click.echo(dump({"valid": False, "failure": result.to_dict()}))
        else:
            click.echo(f"❌ {result.rule.value} at {result.path or '<root>'}: {result.message}")
            if result.value:
                click.echo(f"   value: {result.value}")
            if result.candidates:
                click.echo(f"   candidates: {', '.join(result.candidates)}")
        raise SystemExit(1)

    if as_json:
        click.echo(dump({
            "valid": True,
            "credentialType": result.credential_type.value,
            "family": family_of(result.credential_type).value,
            "digest": result.digest(),
            "credential": result.to_dict(),
        }))
    else:
        click.echo(f"✓ {result.credential_type.value} ({family_of(result.credential_type).value})")
        click.echo(f"   id:     {result.id}")
        click.echo(f"   issuer: {result.issuer.id}")
        click.echo(f"   digest: {result.digest()}")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def classify(path: str):
    """
    Guess the credential type of a bare credentialSubject JSON document.

    Exits with status 1 when nothing matches or the match is ambiguous.
    """
    candidates = classify_subject(load_json(path))
    if not candidates:
        click.echo("❌ No credential type matches this subject")
        raise SystemExit(1)
    if len(candidates) > 1:
        click.echo("⚠️  Ambiguous subject, equally specific candidates:")
        for tag in candidates:
            click.echo(f"   - {tag.value}")
        raise SystemExit(1)
    click.echo(f"✓ {candidates[0].value}")


@main.command()
@click.argument("tag")
def shape(tag: str):
    """Show the required and optional subject fields for a credential type."""
    try:
        spec = shape_for(tag)
    except UnknownCredentialType:
        raise SystemExit(f"❌ Unknown credential type: {tag}")
    click.echo(dump(spec.to_dict()))


@main.command()
def types():
    """List every credential type and its family."""
    for tag in CredentialType:
        click.echo(f"{tag.value:<40} {family_of(tag).value}")


if __name__ == "__main__":
    main()
