"""
Rich rendering for the command-line tool.
"""

from rich.console import Console
from rich.table import Table

from .formatters import (
    docker_image_row,
    format_count,
    package_row,
    repository_row,
    version_row,
)


def _table(columns: list[tuple[str, int]]) -> Table:
    table = Table(show_lines=False)
    for title, width in columns:
        table.add_column(title, style=None, header_style="cyan", max_width=width, overflow="ellipsis")
    return table


def repositories_table(repositories: list) -> Table:
    table = _table([("Name", 30), ("Format", 12), ("Location", 15), ("Description", 30), ("Created", 22)])
    for repo in repositories:
        table.add_row(*repository_row(repo))
    return table


def packages_table(packages: list) -> Table:
    table = _table([("Package Name", 50), ("Created", 22), ("Updated", 22)])
    for package in packages:
        table.add_row(*package_row(package))
    return table


def versions_table(versions: list) -> Table:
    table = _table([("Version", 30), ("Created", 22), ("Updated", 22), ("Description", 30)])
    for version in versions:
        table.add_row(*version_row(version))
    return table


def docker_images_table(images: list) -> Table:
    table = _table([("Image", 45), ("Tags", 25), ("Size", 12), ("Uploaded", 22)])
    for image in images:
        table.add_row(*docker_image_row(image))
    return table


def search_table(results: list[dict]) -> Table:
    table = _table([("Name", 35), ("Description", 50), ("Stars", 8), ("Pulls", 8), ("Official", 8)])
    for result in results:
        table.add_row(
            result["name"],
            result["description"] or "-",
            format_count(result["stars"]),
            format_count(result["pulls"]),
            "yes" if result["isOfficial"] else "-",
        )
    return table


def tags_table(tags: list[dict]) -> Table:
    table = _table([("Tag", 30), ("Size", 12), ("Last Updated", 26), ("Digest", 30)])
    for tag in tags:
        table.add_row(tag["name"], tag["sizeFormatted"], tag["lastUpdated"] or "N/A", tag["digest"] or "N/A")
    return table


def popular_table(images: list[dict]) -> Table:
    table = _table([("Image", 25), ("Category", 15), ("Description", 40)])
    for image in images:
        table.add_row(image["name"], image["category"], image["description"])
    return table


def print_steps(console: Console, steps: list) -> None:
    """Print numbered command steps, one command per line so they can be copied."""
    for step in steps:
        console.print(f"\n[bold blue]{step.step}. {step.title}[/bold blue]")
        console.print(f"[dim]{step.description}[/dim]")
        console.print(step.command, style="white", markup=False, highlight=False)


def success(console: Console, message: str) -> None:
    console.print(f"[green]✓ {message}[/green]")


def failure(console: Console, message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")


def notice(console: Console, message: str) -> None:
    console.print(f"\n[yellow]{message}[/yellow]")
