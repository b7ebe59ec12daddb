"""
Operations behind the command-line tool.

Each operation shows a spinner, renders its result and reports failures as
a red line. Failures never raise: list operations return None so that
one-shot commands can set an exit code and the interactive menu can keep
going.
"""

import logging
from typing import Any, Callable

from rich.console import Console

from . import views
from .artifact_registry import ArtifactRegistry
from .credentials import CredentialBundle, load_credentials_file
from .dockerhub import DockerHubClient, popular_images, prioritize_tags, split_image_reference
from .errors import RegistryConsoleError
from .formatters import repository_format
from .transfer import (
    generate_transfer_plan,
    package_manager_hints,
    pull_commands,
    push_commands,
)

logger = logging.getLogger(__name__)


class CliSession:
    """
    State shared by one CLI invocation.

    Args:
        credentials_path: Service-account key file, read on first use
        console: Rich console for output
        registry_factory: Callable building an ArtifactRegistry from a bundle
        dockerhub: Docker Hub client
    """

    def __init__(
        self,
        credentials_path: str,
        console: Console | None = None,
        registry_factory: Callable[[CredentialBundle], Any] = ArtifactRegistry,
        dockerhub: DockerHubClient | None = None,
    ):
        self.credentials_path = credentials_path
        self.console = console or Console()
        self.registry_factory = registry_factory
        self.dockerhub = dockerhub or DockerHubClient()
        self._credentials = None
        self._registry = None

    @property
    def credentials(self) -> CredentialBundle:
        """
        Raises:
            CredentialsFileError: the key file is unreadable or malformed
        """
        if self._credentials is None:
            self._credentials = load_credentials_file(self.credentials_path)
        return self._credentials

    @property
    def registry(self) -> ArtifactRegistry:
        if self._registry is None:
            self._registry = self.registry_factory(self.credentials)
        return self._registry

    @property
    def project_id(self) -> str:
        return self.credentials.project_id

    def _run(self, status: str, failure: str, call: Callable[[], Any]) -> Any:
        try:
            with self.console.status(status):
                return call()
        except RegistryConsoleError as e:
            logger.debug(f"{failure}: {e.message}")
            views.failure(self.console, failure)
            self.console.print(f"[red]Error: {e.message}[/red]")
            if getattr(e, "code", None) == 7:
                views.notice(
                    self.console,
                    "Permission denied. Make sure the service account has Artifact Registry Reader role.",
                )
            return None

    # -------------------------------
    # Artifact Registry
    # -------------------------------

    def list_repositories(self, location: str | None = None) -> list | None:
        repositories = self._run(
            "Fetching repositories...",
            "Failed to fetch repositories",
            lambda: self.registry.list_repositories(location),
        )
        if repositories is None:
            return None
        views.success(self.console, f"Found {len(repositories)} repositories")
        if not repositories:
            views.notice(self.console, "No repositories found.")
        else:
            self.console.print(views.repositories_table(repositories))
        return repositories

    def list_packages(self, repository: str, location: str) -> list | None:
        packages = self._run(
            "Fetching packages...",
            "Failed to fetch packages",
            lambda: self.registry.list_packages(location, repository),
        )
        if packages is None:
            return None
        views.success(self.console, f"Found {len(packages)} packages in {repository}")
        if not packages:
            views.notice(self.console, "No packages found in this repository.")
        else:
            self.console.print(views.packages_table(packages))
        return packages

    def list_versions(self, repository: str, location: str, package: str) -> list | None:
        versions = self._run(
            "Fetching versions...",
            "Failed to fetch versions",
            lambda: self.registry.list_versions(location, repository, package),
        )
        if versions is None:
            return None
        views.success(self.console, f"Found {len(versions)} versions for {package}")
        if not versions:
            views.notice(self.console, "No versions found for this package.")
        else:
            self.console.print(views.versions_table(versions))
        return versions

    def list_docker_images(self, repository: str, location: str) -> list | None:
        images = self._run(
            "Fetching Docker images...",
            "Failed to fetch Docker images",
            lambda: self.registry.list_docker_images(location, repository),
        )
        if images is None:
            return None
        views.success(self.console, f"Found {len(images)} Docker images")
        if not images:
            views.notice(self.console, "No Docker images found in this repository.")
        else:
            self.console.print(views.docker_images_table(images))
        return images

    # -------------------------------
    # Command text
    # -------------------------------

    def show_pull(self, image: Any) -> list:
        """Print the commands pulling a registry image, by its first tag when it has one."""
        tags = list(getattr(image, "tags", None) or [])
        steps = pull_commands(image.uri, tags[0] if tags else None)
        self.console.print("\n[blue]Run these commands to pull the image:[/blue]")
        views.print_steps(self.console, steps)
        return steps

    def show_push(self, repository: str, location: str, image: str, tag: str = "latest", local_image: str | None = None) -> list | None:
        try:
            steps = push_commands(location, self.project_id, repository, image, tag, local_image)
        except RegistryConsoleError as e:
            views.failure(self.console, e.message)
            return None
        self.console.print("\n[blue]Run these commands to push the image:[/blue]")
        views.print_steps(self.console, steps)
        return steps

    def show_hints(self, fmt: str, repository: str, location: str, direction: str) -> list:
        fmt = repository_format(fmt)
        verb = "Download" if direction == "download" else "Upload"
        self.console.print(f"\n[yellow]{verb} for {fmt} format - use the appropriate package manager[/yellow]")
        lines = package_manager_hints(fmt, location, self.project_id, repository, direction)
        for line in lines:
            self.console.print(line, markup=False, highlight=False)
        return lines

    def show_transfer(self, source_image: str, repository: str, location: str, tag: str | None = None, name: str | None = None):
        try:
            plan = generate_transfer_plan(
                source_image, repository, location, self.credentials, source_tag=tag, target_name=name
            )
        except RegistryConsoleError as e:
            views.failure(self.console, "Failed to generate transfer commands")
            self.console.print(f"[red]Error: {e.message}[/red]")
            return None
        self.console.print(f"\n[blue]{plan.summary['source']} → {plan.summary['target']}[/blue]")
        views.print_steps(self.console, plan.steps)
        return plan

    # -------------------------------
    # Docker Hub
    # -------------------------------

    def search(self, query: str, page: int = 1, page_size: int | None = None) -> dict | None:
        result = self._run(
            "Searching Docker Hub...",
            "Docker Hub search failed",
            lambda: self.dockerhub.search(query, page, page_size),
        )
        if result is None:
            return None
        views.success(self.console, f"Found {result['count']} results")
        if result["results"]:
            self.console.print(views.search_table(result["results"]))
        return result

    def tags(self, image: str, page: int = 1, page_size: int | None = None) -> list | None:
        namespace, repository = split_image_reference(image)
        result = self._run(
            "Fetching tags...",
            "Failed to get tags",
            lambda: self.dockerhub.list_tags(namespace, repository, page, page_size),
        )
        if result is None:
            return None
        tags = prioritize_tags(result["tags"])
        views.success(self.console, f"Found {result['count']} tags for {image}")
        if tags:
            self.console.print(views.tags_table(tags))
        return tags

    def popular(self) -> list:
        images = popular_images()
        self.console.print(views.popular_table(images))
        return images
