# pages_deploy/cli/utils/output.py
"""Output formatting utilities"""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from ...constants import EMOJI_SUCCESS, EMOJI_ERROR, EMOJI_WARNING, EMOJI_LINK
from ...models import DeployResult, DeploymentStatus, ManifestBuild, MappedStatus, PollOutcome, PollResult
from ...utils.file_utils import format_size

console = Console()

_STATUS_STYLES = {
    MappedStatus.QUEUED: "dim",
    MappedStatus.BUILDING: "cyan",
    MappedStatus.DEPLOYING: "blue",
    MappedStatus.SUCCESS: "green",
    MappedStatus.FAILURE: "red",
}


def styled_status(status: MappedStatus) -> str:
    style = _STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def print_json(data: Any) -> None:
    """Write machine readable output to stdout"""
    click.echo(json.dumps(data, indent=2, default=str))


def format_deploy_result(result: DeployResult) -> None:
    """Format and display deploy operation result"""
    lines = [
        f"[green]{EMOJI_SUCCESS}[/green] Deployment created!",
        "",
        f"[bold]Project:[/bold] {result.project_name}",
        f"[bold]Deployment:[/bold] {result.deployment_id}",
        f"[bold]Status:[/bold] {styled_status(result.initial_status.status)}",
    ]

    if result.url:
        lines.append(f"[bold]URL:[/bold] {EMOJI_LINK} {result.url}")

    lines.append("")
    lines.append(f"[bold]Files:[/bold] {result.file_count} ({result.unique_count} unique)")
    lines.append(f"[bold]Uploaded:[/bold] {result.uploaded_count}, "
                 f"already stored: {result.skipped_count}")

    if result.created_project:
        lines.append(f"[yellow]Project {result.project_name} was created[/yellow]")

    if result.duration is not None:
        lines.append(f"[dim]Duration: {result.duration:.2f}s[/dim]")

    panel = Panel(
        "\n".join(lines),
        title="Deploy Result",
        border_style="green"
    )
    console.print(panel)


def format_status(status: DeploymentStatus, title: Optional[str] = None) -> None:
    """Format and display a deployment status snapshot"""
    lines = [
        f"[bold]Status:[/bold] {styled_status(status.status)}",
        f"[bold]Progress:[/bold] {status.progress}%",
    ]
    if status.url:
        lines.append(f"[bold]URL:[/bold] {status.url}")
    if status.error_message:
        lines.append(f"[red]{EMOJI_ERROR} {status.error_message}[/red]")

    if status.logs:
        lines.append("")
        lines.append("[bold]Stages:[/bold]")
        lines.extend(f"  • {line}" for line in status.logs)

    border = "red" if status.status == MappedStatus.FAILURE else "green" if status.is_terminal else "blue"
    console.print(Panel("\n".join(lines), title=title or "Deployment Status", border_style=border))


def format_poll_result(result: PollResult) -> None:
    """Report how following a deployment ended"""
    if result.succeeded:
        url = result.status.url if result.status else None
        console.print(f"\n[green]{EMOJI_SUCCESS} Deployment is live[/green]"
                      + (f": {url}" if url else ""))
    elif result.failed:
        console.print(f"\n[red]{EMOJI_ERROR} {result.status.error_message or 'Deployment failed'}[/red]")
    elif result.outcome == PollOutcome.TIMED_OUT:
        console.print(f"\n[yellow]{EMOJI_WARNING} Stopped waiting; deployment state unknown. "
                      f"Check it later with `pages-deploy status`.[/yellow]")
    else:
        console.print(f"\n[yellow]{EMOJI_WARNING} Stopped following the deployment[/yellow]")

    if result.errors:
        console.print(f"[dim]{result.errors} of {result.polls} status queries failed[/dim]")


def format_manifest(build: ManifestBuild, show_files: bool = True) -> None:
    """Format and display a manifest build"""
    if show_files:
        table = Table(title=f"Manifest: {build.root}", box=box.ROUNDED)
        table.add_column("Path", style="cyan")
        table.add_column("Fingerprint")
        table.add_column("Size", justify="right")
        table.add_column("Content type", style="dim")

        for entry in build.entries:
            table.add_row(
                entry.relative_path,
                entry.fingerprint,
                format_size(entry.size),
                entry.content_type,
            )
        console.print(table)

    console.print(
        f"[bold]{len(build.entries)}[/bold] files, "
        f"[bold]{len(build.index)}[/bold] unique "
        f"({format_size(build.total_size)} total, {format_size(build.unique_size)} unique)"
    )
