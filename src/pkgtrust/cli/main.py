"""pkgtrust CLI -- Package signature checks and key management.

Entry point for the ``pkgtrust`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    check       -- Verify the signatures of package files.
    key info    -- Show the identity of a public key.
    key import  -- Import public keys into the trust store.
    key check   -- Test whether a public key is in the trust store.

Usage::

    pkgtrust check ./dummy-signed-1.0.1-0.x86_64.rpm
    pkgtrust --installroot /mnt/sysimage check --repo fedora ./foo.rpm
    pkgtrust key info https://example.com/RPM-GPG-KEY
    pkgtrust key import file:///etc/pki/rpm-gpg/RPM-GPG-KEY-fedora
    pkgtrust -c ./pkgtrust.yaml key check ./RPM-GPG-KEY
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from pkgtrust import __version__
from pkgtrust.cli.check_cmd import check_command
from pkgtrust.cli.key_cmd import key_group
from pkgtrust.config import TrustConfig
from pkgtrust.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path("/etc/pkgtrust/pkgtrust.yaml")


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_config(config_path: str | None) -> TrustConfig:
    if config_path is not None:
        return TrustConfig.load(config_path)
    if DEFAULT_CONFIG_PATH.is_file():
        return TrustConfig.load(DEFAULT_CONFIG_PATH)
    return TrustConfig()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Configuration file (default: {DEFAULT_CONFIG_PATH} if present).",
)
@click.option(
    "--installroot",
    type=click.Path(file_okay=False),
    default=None,
    help="Override the configured install root.",
)
@click.option("-v", "--verbose", count=True, help="Increase log output (-v, -vv).")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, installroot: str | None, verbose: int) -> None:
    """pkgtrust: Signature verification for signed software packages.

    Checks package signatures against the trust store below the install
    root and manages the public keys in it.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    try:
        config = _load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    if installroot is not None:
        config.installroot = installroot
    ctx.obj["config"] = config
    # Tests and embedders may preset an engine.
    ctx.obj.setdefault("engine", None)


# Register all subcommands
cli.add_command(check_command)
cli.add_command(key_group)
