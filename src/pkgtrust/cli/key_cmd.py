"""``pkgtrust key`` -- Public key inspection and trust store management.

Subcommands:
    info    -- Print id, user id and fingerprint of a key.
    import  -- Import keys that are not yet in the trust store.
    check   -- Exit 0 if a key is in the trust store, 1 if not.

LOCATION is a local path, a ``file://`` URI, or a remote URL; remote
keys are downloaded with the configured download settings.

Exit Codes:
    0 -- Success (``check``: key present).
    1 -- ``check`` only: key absent.
    2 -- The key could not be loaded or imported.
"""

from __future__ import annotations

import json
import sys

import click

from pkgtrust.config import TrustConfig
from pkgtrust.core.keys import KeyInfo
from pkgtrust.core.signature import SignatureVerifier
from pkgtrust.exceptions import PkgTrustError


def _load_key(location: str, config: TrustConfig) -> KeyInfo:
    try:
        return KeyInfo(location, config)
    except (PkgTrustError, OSError) as exc:
        click.echo(f"Error: {exc}")
        sys.exit(2)


@click.group("key")
def key_group() -> None:
    """Inspect public keys and manage the trust store."""


@key_group.command("info")
@click.argument("location")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.pass_obj
def key_info_command(obj: dict, location: str, output_format: str) -> None:
    """Show the identity of the public key at LOCATION."""
    key = _load_key(location, obj["config"])
    if output_format == "json":
        from pkgtrust.cli.output import key_to_json

        click.echo(json.dumps(key_to_json(key), indent=2))
    else:
        from pkgtrust.cli.output import print_key_info

        print_key_info(key)


@key_group.command("import")
@click.argument("locations", nargs=-1, required=True)
@click.pass_obj
def key_import_command(obj: dict, locations: tuple[str, ...]) -> None:
    """Import the public keys at LOCATIONS into the trust store."""
    verifier = SignatureVerifier(obj["config"], engine=obj["engine"])
    for location in locations:
        key = _load_key(location, obj["config"])
        try:
            imported = verifier.import_key(key)
        except PkgTrustError as exc:
            click.echo(f"Error: {exc}")
            sys.exit(2)
        state = "imported" if imported else "already present"
        click.echo(f"{key.get_short_key_id() or location}: {state}")


@key_group.command("check")
@click.argument("location")
@click.pass_obj
def key_check_command(obj: dict, location: str) -> None:
    """Exit 0 if the key at LOCATION is in the trust store, 1 otherwise."""
    key = _load_key(location, obj["config"])
    verifier = SignatureVerifier(obj["config"], engine=obj["engine"])
    try:
        present = verifier.is_key_present(key)
    except PkgTrustError as exc:
        click.echo(f"Error: {exc}")
        sys.exit(2)
    click.echo(f"{key.get_short_key_id() or location}: {'present' if present else 'not present'}")
    sys.exit(0 if present else 1)
