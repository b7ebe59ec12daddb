"""
Dashboard and command-line tool for GCP Artifact Registry.

Browses repositories, packages, versions and Docker images of a project
using a service-account key supplied by the caller, searches Docker Hub,
and generates the shell commands that copy a public image into a private
repository. Commands are only generated, never executed.

Features:
    - Repository discovery across a configurable set of candidate locations
    - Package, version and Docker image listings
    - Credential validation with a best-effort live probe
    - Docker Hub search and tag listing
    - Transfer, pull and push command generation
    - Flask JSON API with a static single-page dashboard
    - Typer CLI with an interactive menu

See README.md for full documentation.
"""

__version__ = "1.0.0"

from .artifact_registry import ArtifactRegistry, RepositoryScan, LocationOutcome, create_client
from .config import Config
from .credentials import CredentialBundle, parse_credentials, validate_credentials
from .dockerhub import DockerHubClient, popular_images
from .formatters import human_size, short_name
from .transfer import TransferPlan, generate_transfer_plan

__all__ = [
    "ArtifactRegistry",
    "RepositoryScan",
    "LocationOutcome",
    "create_client",
    "Config",
    "CredentialBundle",
    "parse_credentials",
    "validate_credentials",
    "DockerHubClient",
    "popular_images",
    "human_size",
    "short_name",
    "TransferPlan",
    "generate_transfer_plan",
]
