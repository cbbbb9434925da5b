# release_tool/cli/utils/output.py
"""Output formatting utilities"""

from typing import List

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ...constants import EMOJI_ERROR, EMOJI_SUCCESS, EMOJI_WARNING, MSG_RELEASE_FINISHED
from ...models import Manifest, Release, ReleaseInfo, StatusCode

console = Console()

STATUS_STYLES = {
    StatusCode.DEPLOYED: "green",
    StatusCode.DEPLOYING: "yellow",
    StatusCode.DELETING: "yellow",
    StatusCode.DELETED: "dim",
    StatusCode.FAILED: "red",
    StatusCode.UNKNOWN: "white",
}


def format_status(status_code: StatusCode) -> str:
    style = STATUS_STYLES.get(status_code, "white")
    return f"[{style}]{status_code.value.upper()}[/{style}]"


def format_release_result(release: Release) -> None:
    """Display the outcome of an install/upgrade/rollback/delete"""
    if release.status_code in (StatusCode.DEPLOYED, StatusCode.DELETED):
        emoji, border = EMOJI_SUCCESS, "green"
    elif release.status_code == StatusCode.FAILED:
        emoji, border = EMOJI_ERROR, "red"
    else:
        emoji, border = EMOJI_WARNING, "yellow"

    message = MSG_RELEASE_FINISHED.format(
        emoji=emoji,
        name=release.name,
        version=release.version,
        status=release.status_code.value.upper(),
        description=escape(release.status.description or "-")
    )

    lines = [
        message,
        "",
        f"[bold]Package:[/bold] {release.package}",
        f"[bold]Platform:[/bold] {release.platform_name}",
        f"[bold]Applications:[/bold] {', '.join(release.manifest.application_names) or '-'}",
    ]
    console.print(Panel("\n".join(lines), title="Release Result", border_style=border))


def format_release_info(info: ReleaseInfo) -> None:
    """Display a release status snapshot"""
    lines = [
        f"[bold]Release:[/bold] {info.name} v{info.version}",
        f"[bold]Status:[/bold] {format_status(info.status_code)}",
        f"[bold]Description:[/bold] {escape(info.description or '-')}",
        f"[bold]Platform:[/bold] {info.platform_name}",
    ]
    if info.status.platform_status:
        lines.append(f"[bold]Platform status:[/bold] {escape(info.status.platform_status)}")
    lines.append(f"[bold]Updated:[/bold] {info.updated_at}")
    console.print(Panel("\n".join(lines), title="Release Status", border_style="cyan"))

    if info.app_statuses:
        table = Table(title="Applications", box=box.SIMPLE)
        table.add_column("Application", style="cyan")
        table.add_column("Deployment", style="white")
        table.add_column("State", style="green")

        for name, status in info.app_statuses.items():
            state_style = "green" if status.is_healthy else "yellow"
            table.add_row(name, status.deployment_id,
                          f"[{state_style}]{status.state.value}[/{state_style}]")

        console.print(table)


def release_table(releases: List[Release], title: str) -> Table:
    """Create a table listing releases"""
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Version", justify="right")
    table.add_column("Status")
    table.add_column("Package", style="white")
    table.add_column("Platform", style="white")
    table.add_column("Updated", style="yellow")
    table.add_column("Description", style="dim")

    for release in releases:
        table.add_row(
            release.name,
            str(release.version),
            format_status(release.status_code),
            str(release.package),
            release.platform_name,
            (release.updated_at or "")[:19],
            escape(release.status.description or "-")
        )

    return table


def format_manifest(manifest: Manifest) -> None:
    """Display a manifest with YAML highlighting"""
    console.print(Syntax(manifest.data, "yaml", word_wrap=True))
