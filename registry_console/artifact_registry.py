"""
Google Artifact Registry access for the registry console.

Wraps artifactregistry_v1.ArtifactRegistryClient with parent-path
construction and full pager consumption. Every call is read-only and
issued once: nothing here retries.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from .config import config
from .credentials import CredentialBundle, parse_credentials
from .errors import AuthenticationError, MalformedCredentialsError, UpstreamError

logger = logging.getLogger(__name__)

# gRPC status code reported when google-auth cannot obtain a token
UNAUTHENTICATED = 16


def location_path(project: str, location: str) -> str:
    return f"projects/{project}/locations/{location}"


def repository_path(project: str, location: str, repository: str) -> str:
    return f"{location_path(project, location)}/repositories/{repository}"


def package_path(project: str, location: str, repository: str, package: str) -> str:
    return f"{repository_path(project, location, repository)}/packages/{package}"


def create_client(bundle: CredentialBundle, **kwargs) -> Any:
    """
    Build an Artifact Registry client for a credential bundle.

    The service-account key is passed explicitly; no environment variable or
    application-default lookup is involved.

    Args:
        bundle: Parsed credential bundle
        **kwargs: Extra keyword arguments for ArtifactRegistryClient

    Returns:
        google.cloud.artifactregistry_v1.ArtifactRegistryClient

    Raises:
        MalformedCredentialsError: google-auth cannot load the key material
    """
    from google.cloud import artifactregistry_v1
    from google.oauth2 import service_account

    info = dict(bundle.info)
    info.setdefault("type", "service_account")
    info.setdefault("token_uri", "https://oauth2.googleapis.com/token")
    try:
        credentials = service_account.Credentials.from_service_account_info(info)
    except ValueError as e:
        logger.warning("Rejected credentials: unusable key material")
        raise MalformedCredentialsError(f"Failed to parse credentials: {e}")
    return artifactregistry_v1.ArtifactRegistryClient(credentials=credentials, **kwargs)


def error_code(error: Exception) -> int | None:
    """Numeric gRPC status of an upstream error, if it has one."""
    code = getattr(error, "grpc_status_code", None)
    if code is None:
        return None
    return code.value[0]


@dataclass(frozen=True)
class LocationOutcome:
    """Result of listing repositories in one candidate location."""

    location: str
    status: str  # "success", "empty" or "error"
    count: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        data = {"location": self.location, "status": self.status, "count": self.count}
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class RepositoryScan:
    """Repositories gathered from all candidate locations, plus per-location outcomes."""

    repositories: list = field(default_factory=list)
    outcomes: list[LocationOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[LocationOutcome]:
        return [o for o in self.outcomes if o.status == "error"]


class ArtifactRegistry:
    """
    Read-only view of one project's Artifact Registry.

    Args:
        credentials: Credential value or CredentialBundle
        client: Prebuilt ArtifactRegistryClient (built from credentials if omitted)
        locations: Candidate regions for repository scans. Default: config.CANDIDATE_LOCATIONS

    Example:
        >>> registry = ArtifactRegistry(bundle)
        >>> scan = registry.scan_repositories()
        >>> [r.name for r in scan.repositories]
        ['projects/p/locations/us-central1/repositories/docker-repo']
    """

    def __init__(self, credentials: Any, client: Any = None, locations: list[str] | None = None):
        self.credentials = parse_credentials(credentials)
        self.client = client if client is not None else create_client(self.credentials)
        self.locations = list(locations) if locations is not None else list(config.CANDIDATE_LOCATIONS)

    @property
    def project_id(self) -> str:
        return self.credentials.project_id

    def _call(self, method: str, parent: str) -> list:
        """Run one list call against a parent path and drain its pager."""
        logger.debug(f"{method}: parent={parent}")
        try:
            items = list(getattr(self.client, method)(parent=parent))
        except google_exceptions.GoogleAPIError as e:
            code = error_code(e)
            message = getattr(e, "message", None) or str(e)
            logger.error(f"{method} failed for {parent}: {message}")
            if code == UNAUTHENTICATED:
                raise AuthenticationError(message, code)
            raise UpstreamError(message, code)
        except auth_exceptions.GoogleAuthError as e:
            logger.error(f"{method} failed for {parent}: authentication error")
            raise AuthenticationError(str(e), UNAUTHENTICATED)
        logger.debug(f"{method}: {len(items)} items from {parent}")
        return items

    def scan_repositories(self, locations: list[str] | None = None) -> RepositoryScan:
        """
        List repositories in every candidate location, one location at a time.

        A failing location is logged and recorded in the outcomes; it never
        aborts the scan. Results are concatenated in location order.

        Args:
            locations: Regions to scan. Default: the registry's candidate locations

        Returns:
            RepositoryScan with concatenated repositories and one outcome per location
        """
        scan = RepositoryScan()
        for location in locations if locations is not None else self.locations:
            parent = location_path(self.project_id, location)
            try:
                found = self._call("list_repositories", parent)
            except UpstreamError as e:
                logger.warning(f"No repositories in {location} or access denied, skipping")
                scan.outcomes.append(LocationOutcome(location, "error", error=e.message))
                continue
            scan.repositories.extend(found)
            scan.outcomes.append(LocationOutcome(location, "success" if found else "empty", len(found)))

        logger.info(
            f"Repository scan: {len(scan.repositories)} repositories, "
            f"{len(scan.failed)}/{len(scan.outcomes)} locations failed"
        )
        return scan

    def list_repositories(self, location: str | None = None) -> list:
        """
        List repositories.

        Without a location the candidate locations are scanned and failures
        absorbed; with an explicit location, errors propagate.

        Raises:
            UpstreamError: the explicit-location call failed
        """
        if location is None:
            return self.scan_repositories().repositories
        return self._call("list_repositories", location_path(self.project_id, location))

    def list_packages(self, location: str, repository: str) -> list:
        """
        Raises:
            UpstreamError: the backend call failed
        """
        return self._call("list_packages", repository_path(self.project_id, location, repository))

    def list_versions(self, location: str, repository: str, package: str) -> list:
        """
        Raises:
            UpstreamError: the backend call failed
        """
        return self._call(
            "list_versions", package_path(self.project_id, location, repository, package)
        )

    def list_docker_images(self, location: str, repository: str) -> list:
        """
        Raises:
            UpstreamError: the backend call failed
        """
        return self._call(
            "list_docker_images", repository_path(self.project_id, location, repository)
        )
