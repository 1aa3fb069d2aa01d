# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""CLI interface for bid request validation.

Provides commands for:
- Analyzing a single bid request file
- Bulk-analyzing a file of many requests
- Listing the rule catalogue
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ...config.settings import get_settings

app = typer.Typer(
    name="ortb-inspector",
    help="OpenRTB Inspector CLI - Validate bid requests against the OpenRTB rulebook",
)
console = Console()

SEVERITY_STYLES = {
    "Error": "red",
    "Warning": "yellow",
    "Info": "cyan",
}


def _configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level.upper(),
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        )
    else:
        root.setLevel(level.upper())


def _read_input(path: Path) -> str:
    if not path.is_file():
        console.print(f"[red]File not found: {escape(str(path))}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _partner_option(partner: Optional[str]) -> Optional[str]:
    from ...engines.analyzer import coerce_partner_profile

    try:
        coerce_partner_profile(partner)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--partner")
    return partner


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (defaults to LOG_LEVEL or WARNING)",
    ),
):
    """Validate OpenRTB 2.x bid requests."""
    _configure_logging(log_level or get_settings().log_level)


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="File holding the bid request JSON"),
    ctv: bool = typer.Option(False, "--ctv", help="Apply CTV rules regardless of device type"),
    partner: Optional[str] = typer.Option(None, "--partner", "-p", help="Partner profile: eq, or none to turn partner rules off"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
):
    """Analyze a single bid request."""
    from ...engines.analyzer import analyze as analyze_text

    profile = _partner_option(partner)
    text = _read_input(path)
    result = analyze_text(text, force_ctv=ctv, partner_profile=profile)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _print_result(result)

    if result.errors:
        raise typer.Exit(1)


def _print_result(result) -> None:
    summary = result.summary

    if result.error:
        console.print(Panel(f"[red]{escape(result.error)}[/red]", title="Parse Error"))
    else:
        lines = [
            f"Request Type: [cyan]{summary.request_type.value}[/cyan]",
            f"Media Formats: {', '.join(summary.media_formats) or 'None'}",
            f"Impressions: {summary.impressions}",
            f"Platform: {summary.platform.value}",
            f"Device Type: {summary.device_type}",
            f"Geo: {escape(summary.geo)}",
            f"CTV: {'Yes' if summary.is_ctv else 'No'}",
        ]
        if summary.timeout_ms is not None:
            lines.append(f"Timeout: {summary.timeout_ms} ms")
        if summary.currency:
            lines.append(f"Currency: {escape(summary.currency)}")
        if summary.bid_floor:
            lines.append(f"Bid Floor: {escape(summary.bid_floor)}")
        if summary.schain_nodes is not None:
            lines.append(f"Supply Chain: {summary.schain_nodes} nodes")
        if summary.privacy_signals:
            lines.append(f"Privacy: {', '.join(summary.privacy_signals)}")
        console.print(Panel("\n".join(lines), title="Request Summary"))

    if not result.issues:
        console.print("[green]✓ No issues found[/green]")
        return

    table = Table(title="Validation Issues")
    table.add_column("Severity")
    table.add_column("ID", style="cyan")
    table.add_column("Path")
    table.add_column("Message")

    for issue in result.issues:
        style = SEVERITY_STYLES.get(issue.severity.value, "")
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            issue.id,
            escape(issue.path or ""),
            escape(issue.message),
        )

    console.print(table)
    console.print(
        f"{len(result.errors)} error(s), {len(result.warnings)} warning(s), "
        f"{len(result.infos)} info"
    )


@app.command()
def bulk(
    path: Path = typer.Argument(..., help="File holding several bid requests"),
    ctv: bool = typer.Option(False, "--ctv", help="Apply CTV rules regardless of device type"),
    partner: Optional[str] = typer.Option(None, "--partner", "-p", help="Partner profile: eq, or none to turn partner rules off"),
):
    """Analyze a JSON array or concatenated stream of bid requests."""
    from ...engines.analyzer import analyze as analyze_text
    from ...engines.request_locator import split_documents

    profile = _partner_option(partner)
    documents = split_documents(_read_input(path))

    table = Table(title="Bulk Analysis")
    table.add_column("#")
    table.add_column("Request ID", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Platform")
    table.add_column("Errors", style="red")
    table.add_column("Warnings", style="yellow")
    table.add_column("Info")

    with_errors = 0
    for index, document in enumerate(documents, start=1):
        result = analyze_text(document, force_ctv=ctv, partner_profile=profile)
        if result.errors:
            with_errors += 1
        request_id = str(result.request.get("id", "-")) if isinstance(result.request, dict) else "-"
        table.add_row(
            str(index),
            escape(request_id),
            result.summary.request_type.value,
            result.summary.platform.value,
            str(len(result.errors)),
            str(len(result.warnings)),
            str(len(result.infos)),
        )

    console.print(table)
    console.print(f"Processed {len(documents)} request(s), {with_errors} with errors")


@app.command()
def rules(
    rule_set: Optional[str] = typer.Option(None, "--set", "-s", help="Only list this rule set"),
):
    """List the rule catalogue."""
    from ...rules import RULE_SETS, get_rule_set

    if rule_set:
        selected = get_rule_set(rule_set)
        if selected is None:
            names = ", ".join(s.name for s in RULE_SETS)
            console.print(f"[red]Unknown rule set: {escape(rule_set)}. Available: {names}[/red]")
            raise typer.Exit(1)
        rule_sets = (selected,)
    else:
        rule_sets = RULE_SETS

    table = Table(title="Rule Catalogue")
    table.add_column("Set", style="yellow")
    table.add_column("ID", style="cyan")
    table.add_column("Severity")
    table.add_column("Path")
    table.add_column("Description")

    total = 0
    for current in rule_sets:
        for rule in current.rules:
            style = SEVERITY_STYLES.get(rule.severity.value, "")
            table.add_row(
                current.name,
                rule.id,
                f"[{style}]{rule.severity.value}[/{style}]",
                rule.path or "",
                rule.description,
            )
            total += 1

    console.print(table)
    console.print(f"{total} rule(s) in {len(rule_sets)} set(s)")


if __name__ == "__main__":
    app()
