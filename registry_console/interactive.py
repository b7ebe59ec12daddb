"""
Interactive menu for the command-line tool.

The menu is a small state machine: every Screen has a handler that does its
work and returns the next Screen, and TRANSITIONS lists which moves are
legal. The loop runs until the EXIT screen is reached.
"""

import logging
from enum import Enum

from rich.prompt import Confirm, IntPrompt, Prompt

from . import views
from .dockerhub import prioritize_tags
from .formatters import location_of, repository_format, short_name
from .session import CliSession

logger = logging.getLogger(__name__)


class Screen(Enum):
    MENU = "menu"
    LIST_REPOSITORIES = "list-repos"
    LIST_PACKAGES = "list-packages"
    LIST_DOCKER = "list-docker"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    TRANSFER = "transfer"
    CONTINUE = "continue"
    EXIT = "exit"


MENU_CHOICES = [
    ("📋 List Repositories", Screen.LIST_REPOSITORIES),
    ("📦 List Packages in Repository", Screen.LIST_PACKAGES),
    ("🐳 List Docker Images", Screen.LIST_DOCKER),
    ("📥 Download Artifact", Screen.DOWNLOAD),
    ("📤 Upload Artifact", Screen.UPLOAD),
    ("🔁 Transfer from Docker Hub", Screen.TRANSFER),
    ("🚪 Exit", Screen.EXIT),
]

ACTION_SCREENS = {
    Screen.LIST_REPOSITORIES,
    Screen.LIST_PACKAGES,
    Screen.LIST_DOCKER,
    Screen.DOWNLOAD,
    Screen.UPLOAD,
    Screen.TRANSFER,
}

TRANSITIONS = {
    Screen.MENU: ACTION_SCREENS | {Screen.EXIT},
    **{screen: {Screen.CONTINUE} for screen in ACTION_SCREENS},
    Screen.CONTINUE: {Screen.MENU, Screen.EXIT},
    Screen.EXIT: set(),
}


class Prompter:
    """Terminal prompts backed by rich.prompt."""

    def __init__(self, console):
        self.console = console

    def ask(self, message: str, default: str = "") -> str:
        return Prompt.ask(message, default=default, console=self.console, show_default=bool(default)).strip()

    def choose(self, message: str, choices: list[tuple[str, object]]):
        """Numbered list selection; returns the value of the chosen entry."""
        self.console.print(f"\n[bold]{message}[/bold]")
        for number, (label, _) in enumerate(choices, 1):
            self.console.print(f"  {number}. {label}", markup=False, highlight=False)
        numbers = [str(n) for n in range(1, len(choices) + 1)]
        answer = IntPrompt.ask("Choice", choices=numbers, show_choices=False, console=self.console)
        return choices[answer - 1][1]

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, default=default, console=self.console)


def _repository_choice(repo, with_format: bool = False) -> tuple[str, dict]:
    name = short_name(repo.name)
    location = location_of(repo.name)
    fmt = repository_format(getattr(repo, "format_", None))
    label = f"{name} ({fmt}, {location})" if with_format else f"{name} ({location})"
    return label, {"name": name, "location": location, "format": fmt}


class InteractiveMenu:
    """
    Menu loop driving a CliSession.

    Args:
        session: CliSession to run operations with
        prompter: Object with ask/choose/confirm (a rich-backed Prompter if omitted)
    """

    def __init__(self, session: CliSession, prompter=None):
        self.session = session
        self.console = session.console
        self.prompter = prompter or Prompter(self.console)
        self.screen = Screen.MENU
        self.handlers = {
            Screen.MENU: self.menu,
            Screen.LIST_REPOSITORIES: self.list_repositories,
            Screen.LIST_PACKAGES: self.list_packages,
            Screen.LIST_DOCKER: self.list_docker,
            Screen.DOWNLOAD: self.download,
            Screen.UPLOAD: self.upload,
            Screen.TRANSFER: self.transfer,
            Screen.CONTINUE: self.ask_continue,
        }

    def run(self) -> None:
        self.console.print("\n[bold blue]🚀 GCP Artifact Registry Tool[/bold blue]\n")
        self.console.print(f"[dim]Project: {self.session.project_id}[/dim]")
        self.console.print(f"[dim]Credentials: {self.session.credentials_path}[/dim]\n")

        while self.screen is not Screen.EXIT:
            next_screen = self.handlers[self.screen]()
            if next_screen not in TRANSITIONS[self.screen]:
                raise RuntimeError(f"Illegal menu transition {self.screen.name} -> {next_screen.name}")
            logger.debug(f"Menu transition {self.screen.name} -> {next_screen.name}")
            self.screen = next_screen

        self.console.print("\n[green]Goodbye! 👋[/green]\n")

    # -------------------------------
    # Screens
    # -------------------------------

    def menu(self) -> Screen:
        return self.prompter.choose("What would you like to do?", MENU_CHOICES)

    def ask_continue(self) -> Screen:
        if self.prompter.confirm("Would you like to perform another action?", default=True):
            return Screen.MENU
        return Screen.EXIT

    def _select_repository(self, repositories: list, message: str, with_format: bool = False) -> dict:
        return self.prompter.choose(message, [_repository_choice(r, with_format) for r in repositories])

    def list_repositories(self) -> Screen:
        location = self.prompter.ask("Enter location (leave empty for all candidate locations)")
        self.session.list_repositories(location or None)
        return Screen.CONTINUE

    def list_packages(self) -> Screen:
        repositories = self.session.list_repositories()
        if not repositories:
            return Screen.CONTINUE
        selected = self._select_repository(repositories, "Select a repository:")
        packages = self.session.list_packages(selected["name"], selected["location"])
        if packages and self.prompter.confirm("Show versions of a package?", default=False):
            package = self.prompter.choose(
                "Select a package:", [(short_name(p.name), short_name(p.name)) for p in packages]
            )
            self.session.list_versions(selected["name"], selected["location"], package)
        return Screen.CONTINUE

    def list_docker(self) -> Screen:
        repositories = self.session.list_repositories() or []
        docker = [r for r in repositories if repository_format(getattr(r, "format_", None)) == "DOCKER"]
        if not docker:
            views.notice(self.console, "No Docker repositories found.")
            return Screen.CONTINUE
        selected = self._select_repository(docker, "Select a Docker repository:")
        self.session.list_docker_images(selected["name"], selected["location"])
        return Screen.CONTINUE

    def download(self) -> Screen:
        repositories = self.session.list_repositories()
        if not repositories:
            return Screen.CONTINUE
        selected = self._select_repository(repositories, "Select a repository:", with_format=True)
        if selected["format"] != "DOCKER":
            self.session.show_hints(selected["format"], selected["name"], selected["location"], "download")
            return Screen.CONTINUE

        images = self.session.list_docker_images(selected["name"], selected["location"])
        if images:
            choices = []
            for image in images:
                label = f"{short_name(image.name)} ({', '.join(getattr(image, 'tags', None) or []) or 'untagged'})"
                choices.append((label, image))
            self.session.show_pull(self.prompter.choose("Select an image to pull:", choices))
        return Screen.CONTINUE

    def upload(self) -> Screen:
        repositories = self.session.list_repositories()
        if not repositories:
            return Screen.CONTINUE
        selected = self._select_repository(repositories, "Select a repository:", with_format=True)
        if selected["format"] != "DOCKER":
            self.session.show_hints(selected["format"], selected["name"], selected["location"], "upload")
            return Screen.CONTINUE

        local_image = self.prompter.ask("Enter local image name to push (or leave empty to just configure)")
        image = ""
        while not image:
            image = self.prompter.ask("Enter the image name")
            if not image:
                views.failure(self.console, "Image name is required")
        tag = self.prompter.ask("Enter the tag", default="latest")
        self.session.show_push(selected["name"], selected["location"], image, tag, local_image or None)
        return Screen.CONTINUE

    def transfer(self) -> Screen:
        source = self.prompter.ask("Docker Hub image to transfer", default="nginx")
        tags = self.session.tags(source) or []
        if tags:
            tag = self.prompter.choose(
                "Select a tag:", [(f"{t['name']} ({t['sizeFormatted']})", t["name"]) for t in prioritize_tags(tags)[:50]]
            )
        else:
            tag = "latest"

        repositories = self.session.list_repositories() or []
        docker = [r for r in repositories if repository_format(getattr(r, "format_", None)) == "DOCKER"]
        if not docker:
            views.notice(self.console, "No Docker repositories found.")
            return Screen.CONTINUE
        selected = self._select_repository(docker, "Select a target repository:")
        name = self.prompter.ask("Target image name", default=source.split("/")[-1])
        self.session.show_transfer(source, selected["name"], selected["location"], tag, name or None)
        return Screen.CONTINUE
