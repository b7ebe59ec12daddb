"""
Shell command generation for moving images into Artifact Registry.

Nothing in this module runs a command or touches the network: every
function returns command text for the operator to run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .credentials import parse_credentials
from .errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TAG = "latest"


@dataclass(frozen=True)
class CommandStep:
    step: int
    title: str
    command: str
    description: str

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "title": self.title,
            "command": self.command,
            "description": self.description,
        }


@dataclass
class TransferPlan:
    """Ordered commands plus a source/target summary."""

    steps: list[CommandStep] = field(default_factory=list)
    summary: dict = field(default_factory=dict)

    @property
    def commands(self) -> list[str]:
        return [s.command for s in self.steps]

    def to_dict(self) -> dict:
        return {"steps": [s.to_dict() for s in self.steps], "summary": dict(self.summary)}


def registry_host(location: str) -> str:
    """
    Examples:
        >>> registry_host("us-central1")
        'us-central1-docker.pkg.dev'
    """
    return f"{location}-docker.pkg.dev"


def repository_url(location: str, project: str, repository: str) -> str:
    return f"{registry_host(location)}/{project}/{repository}"


def auth_command(host: str) -> str:
    return f"gcloud auth configure-docker {host} --quiet"


def generate_transfer_plan(
    source_image: str,
    target_repository: str,
    target_location: str,
    credentials: Any,
    source_tag: str | None = None,
    target_name: str | None = None,
) -> TransferPlan:
    """
    Build the four commands that copy a public image into a private repository.

    Steps, always in this order:
        1. configure Docker authentication for the registry host
        2. pull the source image
        3. tag it with the Artifact Registry path
        4. push the tagged image

    Args:
        source_image: Docker Hub image (e.g. "nginx", "grafana/grafana")
        target_repository: Destination Artifact Registry repository
        target_location: Destination region (e.g. "us-central1")
        credentials: Credential value; only its project id is used
        source_tag: Tag to copy. Default: "latest"
        target_name: Image name in the destination. Default: last segment of source_image

    Returns:
        TransferPlan

    Raises:
        ValidationError: a required input is missing
        MalformedCredentialsError: credentials are not a valid bundle

    Example:
        >>> plan = generate_transfer_plan("nginx", "my-repo", "us-central1", creds)
        >>> plan.summary["target"]
        'us-central1-docker.pkg.dev/proj1/my-repo/nginx:latest'
    """
    required = {
        "sourceImage": source_image,
        "targetRepo": target_repository,
        "targetLocation": target_location,
        "credentials": credentials,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        logger.warning(f"Transfer plan rejected, missing: {', '.join(missing)}")
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    project_id = parse_credentials(credentials).project_id

    tag = source_tag or DEFAULT_TAG
    name = target_name or source_image.split("/")[-1]
    host = registry_host(target_location)
    target = f"{repository_url(target_location, project_id, target_repository)}/{name}:{tag}"
    source = f"{source_image}:{tag}"

    logger.debug(f"Transfer plan: {source} -> {target}")
    return TransferPlan(
        steps=[
            CommandStep(
                1,
                "Authenticate with GCP Artifact Registry",
                auth_command(host),
                "Configure Docker to authenticate with your GCP registry",
            ),
            CommandStep(
                2,
                "Pull the source image",
                f"docker pull {source}",
                f"Pull {source} from the source registry",
            ),
            CommandStep(
                3,
                "Tag for GCP Artifact Registry",
                f"docker tag {source} {target}",
                "Tag the image with your GCP registry path",
            ),
            CommandStep(
                4,
                "Push to GCP Artifact Registry",
                f"docker push {target}",
                "Push the image to your GCP Artifact Registry",
            ),
        ],
        summary={"source": source, "target": target},
    )


def pull_commands(uri: str, tag: str | None = None) -> list[CommandStep]:
    """
    Commands to pull an image that already lives in Artifact Registry.

    Args:
        uri: Image URI as reported by the registry (may carry an @sha256 digest)
        tag: Tag to pull instead of the digest

    Example:
        >>> [s.command for s in pull_commands("us-docker.pkg.dev/p/r/app@sha256:abc", "v1")]
        ['gcloud auth configure-docker us-docker.pkg.dev --quiet', 'docker pull us-docker.pkg.dev/p/r/app:v1']
    """
    host = uri.split("/")[0]
    reference = f"{uri.split('@')[0]}:{tag}" if tag else uri
    return [
        CommandStep(1, "Authenticate Docker with GCP", auth_command(host), "Configure Docker credentials for the registry host"),
        CommandStep(2, "Pull the image", f"docker pull {reference}", f"Pull {reference}"),
    ]


def push_commands(
    location: str,
    project: str,
    repository: str,
    image: str,
    tag: str = DEFAULT_TAG,
    local_image: str | None = None,
) -> list[CommandStep]:
    """
    Commands to push a local image into a repository.

    The tag step is included only when a local image name is given.
    """
    if not image:
        raise ValidationError("Image name is required")

    host = registry_host(location)
    target = f"{repository_url(location, project, repository)}/{image}:{tag or DEFAULT_TAG}"
    steps = [CommandStep(1, "Authenticate Docker with GCP", auth_command(host), "Configure Docker credentials for the registry host")]
    if local_image:
        steps.append(CommandStep(len(steps) + 1, "Tag the local image", f"docker tag {local_image} {target}", f"Tag {local_image} as {target}"))
    steps.append(CommandStep(len(steps) + 1, "Push the image", f"docker push {target}", f"Push {target}"))
    return steps


def package_manager_hints(fmt: str, location: str, project: str, repository: str, direction: str = "download") -> list[str]:
    """
    Hints for repositories that are not Docker repositories.

    Args:
        fmt: Repository format (NPM, MAVEN, PYTHON, ...)
        direction: "download" or "upload"

    Returns:
        Lines to show the operator; the first one is always the repository URL
    """
    url = repository_url(location, project, repository)
    lines = [f"Repository URL: {url}"]

    if direction == "upload":
        if fmt == "NPM":
            lines.append(f"npm publish --registry=https://{url}/")
        elif fmt == "PYTHON":
            lines.append(f"twine upload --repository-url https://{url}/ dist/*")
        return lines

    if fmt == "NPM":
        lines.append(f"npm config set @scope:registry https://{url}/")
    elif fmt == "MAVEN":
        lines.append(f"Maven repository URL: https://{url}")
    elif fmt == "PYTHON":
        lines.append(f"pip install --extra-index-url https://{url}/simple/ PACKAGE_NAME")
    return lines
