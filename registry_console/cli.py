"""
Command-line interface for browsing Artifact Registry and Docker Hub.

Examples:
    $ registry-console list
    $ registry-console packages my-repo --location us-central1
    $ registry-console transfer nginx --repository my-repo --location us-central1 --tag 1.27
    $ registry-console            # interactive menu
"""

import logging

import typer
from rich.console import Console

from . import views
from .config import config
from .errors import CredentialsFileError
from .interactive import InteractiveMenu, Prompter
from .session import CliSession

app = typer.Typer(
    name="registry-console",
    help="CLI tool for browsing GCP Artifact Registry and copying Docker Hub images into it",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

LOCATION_HELP = "GCP location (e.g., us-central1, asia-south1)"


def _session(ctx: typer.Context) -> CliSession:
    return ctx.obj


def _require_credentials(session: CliSession) -> None:
    """Load the credential file or terminate: nothing registry-related works without it."""
    try:
        session.credentials
    except CredentialsFileError as e:
        views.failure(session.console, e.message)
        raise typer.Exit(1)


def _finish(result) -> None:
    if result is None:
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    credentials: str = typer.Option(
        config.CREDENTIALS_FILE,
        "--credentials",
        "-c",
        envvar="REGISTRY_CONSOLE_CREDENTIALS",
        help="Service account key file",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """
    Browse GCP Artifact Registry and generate Docker Hub transfer commands.

    Runs the interactive menu when no command is given.
    """
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if ctx.obj is None:
        ctx.obj = CliSession(credentials, console=console)

    if ctx.invoked_subcommand is None:
        interactive(ctx)


# -------------------------------
# Artifact Registry
# -------------------------------


@app.command("list")
def list_repositories(
    ctx: typer.Context,
    location: str | None = typer.Option(
        None, "--location", "-l", help=f"{LOCATION_HELP}; all candidate locations when omitted"
    ),
) -> None:
    """List all repositories."""
    session = _session(ctx)
    _require_credentials(session)
    _finish(session.list_repositories(location))


@app.command("packages")
def list_packages(
    ctx: typer.Context,
    repository: str = typer.Argument(..., help="Repository name"),
    location: str = typer.Option("us-central1", "--location", "-l", help=LOCATION_HELP),
) -> None:
    """List packages in a repository."""
    session = _session(ctx)
    _require_credentials(session)
    _finish(session.list_packages(repository, location))


@app.command("versions")
def list_versions(
    ctx: typer.Context,
    repository: str = typer.Argument(..., help="Repository name"),
    package: str = typer.Argument(..., help="Package name"),
    location: str = typer.Option("us-central1", "--location", "-l", help=LOCATION_HELP),
) -> None:
    """List versions of a package."""
    session = _session(ctx)
    _require_credentials(session)
    _finish(session.list_versions(repository, location, package))


@app.command("docker")
def list_docker_images(
    ctx: typer.Context,
    repository: str = typer.Argument(..., help="Repository name"),
    location: str = typer.Option("us-central1", "--location", "-l", help=LOCATION_HELP),
) -> None:
    """List Docker images in a repository."""
    session = _session(ctx)
    _require_credentials(session)
    _finish(session.list_docker_images(repository, location))


@app.command("pull")
def pull(
    ctx: typer.Context,
    repository: str = typer.Argument(..., help="Repository name"),
    location: str = typer.Option("us-central1", "--location", "-l", help=LOCATION_HELP),
    image: str | None = typer.Option(None, "--image", "-i", help="Image name (prompted for when omitted)"),
) -> None:
    """Print the commands to pull a Docker image from a repository."""
    session = _session(ctx)
    _require_credentials(session)
    images = session.list_docker_images(repository, location)
    _finish(images)
    if not images:
        return

    if image:
        matches = [i for i in images if i.name.split("/")[-1].split("@")[0] == image]
        if not matches:
            views.failure(session.console, f"Image '{image}' not found in {repository}")
            raise typer.Exit(1)
        selected = matches[0]
    else:
        selected = Prompter(session.console).choose(
            "Select an image to pull:",
            [(f"{i.name.split('/')[-1]} ({', '.join(i.tags) or 'untagged'})", i) for i in images],
        )
    session.show_pull(selected)


@app.command("push")
def push(
    ctx: typer.Context,
    repository: str = typer.Argument(..., help="Repository name"),
    location: str = typer.Option("us-central1", "--location", "-l", help=LOCATION_HELP),
    image: str | None = typer.Option(None, "--image", "-i", help="Local Docker image to push"),
    name: str | None = typer.Option(None, "--name", "-n", help="Image name in the repository (default: local image name)"),
    tag: str = typer.Option("latest", "--tag", "-t", help="Image tag"),
) -> None:
    """Print the commands to push a Docker image to a repository."""
    session = _session(ctx)
    _require_credentials(session)
    target = name or (image.split("/")[-1].split(":")[0] if image else None)
    if not target:
        views.failure(session.console, "Image name is required (use --name or --image)")
        raise typer.Exit(1)
    _finish(session.show_push(repository, location, target, tag, image))


@app.command("transfer")
def transfer(
    ctx: typer.Context,
    source_image: str = typer.Argument(..., help="Docker Hub image (e.g. nginx, grafana/grafana)"),
    repository: str = typer.Option(..., "--repository", "-r", help="Target repository"),
    location: str = typer.Option(..., "--location", "-l", help=LOCATION_HELP),
    tag: str | None = typer.Option(None, "--tag", "-t", help="Source tag (default: latest)"),
    name: str | None = typer.Option(None, "--name", "-n", help="Target image name"),
) -> None:
    """Print the commands to copy a Docker Hub image into Artifact Registry."""
    session = _session(ctx)
    _require_credentials(session)
    _finish(session.show_transfer(source_image, repository, location, tag, name))


# -------------------------------
# Docker Hub
# -------------------------------


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    page_size: int = typer.Option(config.DEFAULT_PAGE_SIZE, "--page-size", help="Results per page"),
) -> None:
    """Search Docker Hub."""
    _finish(_session(ctx).search(query, page, page_size))


@app.command("tags")
def tags(
    ctx: typer.Context,
    image: str = typer.Argument(..., help="Docker Hub image (e.g. nginx, grafana/grafana)"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
) -> None:
    """List tags of a Docker Hub image."""
    _finish(_session(ctx).tags(image, page))


@app.command("popular")
def popular(ctx: typer.Context) -> None:
    """Show the curated list of popular Docker Hub images."""
    _session(ctx).popular()


@app.command("interactive")
def interactive(ctx: typer.Context) -> None:
    """Start interactive mode."""
    session = _session(ctx)
    _require_credentials(session)
    InteractiveMenu(session).run()


# Short aliases
app.command("ls", hidden=True)(list_repositories)
app.command("pkg", hidden=True)(list_packages)
app.command("ver", hidden=True)(list_versions)
app.command("i", hidden=True)(interactive)


if __name__ == "__main__":
    app()
