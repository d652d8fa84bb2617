"""``pkgtrust check <package>...`` -- Verify package signatures.

Packages are treated as command-line packages (``localpkg_gpgcheck``
applies) unless ``--repo`` names the repository they came from.

Exit Codes:
    0 -- Every package passed (or needed no check).
    1 -- At least one package failed its signature check.
    2 -- The check could not run (bad root, missing engine).
"""

from __future__ import annotations

import json
import sys

import click

from pkgtrust.core.signature import SignatureVerifier
from pkgtrust.exceptions import PkgTrustError
from pkgtrust.package import Package


@click.command("check")
@click.argument("packages", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--repo", "repo_id", default=None, help="Repository the packages come from.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.pass_obj
def check_command(obj: dict, packages: tuple[str, ...], repo_id: str | None, output_format: str) -> None:
    """Verify the signatures of PACKAGES.

    Exit code 0 if all signatures are OK, 1 if any check failed.
    """
    verifier = SignatureVerifier(obj["config"], engine=obj["engine"])

    results = []
    try:
        for path in packages:
            if repo_id is None:
                package = Package.from_commandline(path)
            else:
                package = Package.from_repository(path, repo_id)
            results.append((path, verifier.check_signature(package)))
    except PkgTrustError as exc:
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc)}))
        else:
            click.echo(f"Error: {exc}")
        sys.exit(2)

    if output_format == "json":
        from pkgtrust.cli.output import result_to_json

        click.echo(json.dumps([result_to_json(p, r) for p, r in results], indent=2))
    else:
        from pkgtrust.cli.output import print_check_results

        print_check_results(results)

    sys.exit(0 if all(r.is_ok for _, r in results) else 1)
