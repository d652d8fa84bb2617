"""Rich output formatting helpers for the pkgtrust CLI.

Verdict Color Mapping:
    OK = bold green, NOT_TRUSTED / KEY_MISSING = yellow,
    NOT_SIGNED = cyan, FAILED = bold red
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pkgtrust.core.classifier import CheckResult, describe_result
from pkgtrust.core.keys import KeyInfo

_RESULT_STYLES: dict[CheckResult, str] = {
    CheckResult.OK: "bold green",
    CheckResult.FAILED: "bold red",
    CheckResult.FAILED_NOT_TRUSTED: "yellow",
    CheckResult.FAILED_KEY_MISSING: "yellow",
    CheckResult.FAILED_NOT_SIGNED: "cyan",
}

console = Console()


def result_style(result: CheckResult) -> str:
    """Return the Rich style string for a verdict."""
    return _RESULT_STYLES.get(result, "white")


def result_to_json(path: str, result: CheckResult) -> dict[str, Any]:
    return {
        "package": path,
        "result": result.name,
        "ok": result.is_ok,
        "message": describe_result(result),
    }


def key_to_json(key: KeyInfo) -> dict[str, Any]:
    return {
        "location": key.location,
        "key_id": key.key_id,
        "short_key_id": key.get_short_key_id(),
        "user_id": key.user_id,
        "fingerprint": key.fingerprint,
        "packet_length": key.packet_length,
    }


def print_check_results(results: list[tuple[str, CheckResult]]) -> None:
    """Print a table of signature verdicts, one row per package."""
    if not results:
        console.print("[dim]No packages checked.[/dim]")
        return

    table = Table(title="Signature Check", show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Result", justify="center")
    table.add_column("Details")
    for path, result in results:
        style = result_style(result)
        table.add_row(path, Text(result.name, style=style), describe_result(result))
    console.print(table)

    failed = sum(1 for _, r in results if not r.is_ok)
    parts = [f"[bold]{len(results)}[/bold] packages checked"]
    if failed:
        parts.append(f"[red]{failed} failed[/red]")
    else:
        parts.append("[green]all signatures OK[/green]")
    console.print(" | ".join(parts))


def print_key_info(key: KeyInfo) -> None:
    """Print the identity of a public key."""
    header = Text.assemble(("Key: ", "bold"), (key.location, ""))
    console.print(Panel(header, title="Public Key"))
    console.print(f"  Key ID:       [bold]{key.key_id or '-'}[/bold]")
    console.print(f"  Short ID:     {key.get_short_key_id() or '-'}")
    console.print(f"  User ID:      {key.user_id or '-'}")
    console.print(f"  Fingerprint:  [dim]{key.fingerprint or '-'}[/dim]")
    console.print(f"  Packet bytes: {key.packet_length}")
