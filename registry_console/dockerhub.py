"""
Docker Hub client for the registry console.

Wraps the public, unauthenticated search and tag-listing endpoints of
hub.docker.com. Failures are reported once and never retried.
"""

import logging
from typing import Any

import requests

from .config import config
from .errors import IndexUnavailableError, ValidationError
from .formatters import human_size

logger = logging.getLogger(__name__)

# Placeholder namespace the dashboard uses for official images
OFFICIAL_PLACEHOLDER = "_"
OFFICIAL_NAMESPACE = "library"

# Tags offered first when picking a source tag for a transfer
COMMON_TAGS = ["latest", "22", "22.0", "21", "20", "stable", "alpine"]

POPULAR_IMAGES = [
    {"name": "nginx", "description": "Official NGINX image", "category": "Web Server"},
    {"name": "redis", "description": "Redis in-memory data store", "category": "Database"},
    {"name": "postgres", "description": "PostgreSQL database", "category": "Database"},
    {"name": "mysql", "description": "MySQL database", "category": "Database"},
    {"name": "mongo", "description": "MongoDB document database", "category": "Database"},
    {"name": "node", "description": "Node.js runtime", "category": "Runtime"},
    {"name": "python", "description": "Python runtime", "category": "Runtime"},
    {"name": "openjdk", "description": "OpenJDK Java runtime", "category": "Runtime"},
    {"name": "golang", "description": "Go programming language", "category": "Runtime"},
    {"name": "alpine", "description": "Minimal Alpine Linux", "category": "Base OS"},
    {"name": "ubuntu", "description": "Ubuntu Linux", "category": "Base OS"},
    {"name": "debian", "description": "Debian Linux", "category": "Base OS"},
    {"name": "keycloak/keycloak", "description": "Keycloak identity management", "category": "Security"},
    {"name": "elasticsearch", "description": "Elasticsearch search engine", "category": "Search"},
    {"name": "rabbitmq", "description": "RabbitMQ message broker", "category": "Messaging"},
    {"name": "jenkins/jenkins", "description": "Jenkins CI/CD server", "category": "CI/CD"},
    {"name": "grafana/grafana", "description": "Grafana monitoring dashboard", "category": "Monitoring"},
    {"name": "prom/prometheus", "description": "Prometheus monitoring", "category": "Monitoring"},
]


def popular_images() -> list[dict]:
    """Curated list of commonly transferred public images."""
    return [dict(image) for image in POPULAR_IMAGES]


def split_image_reference(name: str) -> tuple[str, str]:
    """
    Split a Docker Hub image name into namespace and repository.

    Official images have no namespace and get the placeholder.

    Examples:
        >>> split_image_reference("nginx")
        ('_', 'nginx')
        >>> split_image_reference("grafana/grafana")
        ('grafana', 'grafana')
    """
    if "/" in name:
        namespace, repository = name.split("/", 1)
        return namespace, repository
    return OFFICIAL_PLACEHOLDER, name


def prioritize_tags(tags: list[dict]) -> list[dict]:
    """Order tags so that common ones (latest, stable, ...) come first; others keep their order."""
    def rank(tag):
        name = tag.get("name")
        return COMMON_TAGS.index(name) if name in COMMON_TAGS else len(COMMON_TAGS)

    return sorted(tags, key=rank)


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class DockerHubClient:
    """
    Minimal client for the Docker Hub v2 REST API.

    Args:
        base_url: Docker Hub base URL. Default: config.DOCKER_HUB_URL
        timeout: Request timeout in seconds. Default: config.DOCKER_HUB_TIMEOUT
        session: requests.Session to reuse (a new one is created if omitted)
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None, session: requests.Session | None = None):
        self.base_url = (base_url or config.DOCKER_HUB_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.DOCKER_HUB_TIMEOUT
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict, failure: str) -> dict:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Docker Hub request failed: {url}: {e}")
            raise IndexUnavailableError(failure)

    def search(self, query: str, page: Any = 1, page_size: Any = None) -> dict:
        """
        Search public repositories.

        Args:
            query: Search text (required)
            page: 1-based page number. Default: 1
            page_size: Results per page. Default: config.DEFAULT_PAGE_SIZE

        Returns:
            {"results": [...], "count": int, "page": int, "pageSize": int}

        Raises:
            ValidationError: query is empty
            IndexUnavailableError: Docker Hub could not be reached
        """
        if not query:
            raise ValidationError("Query is required")

        page = _to_int(page, 1)
        page_size = _to_int(page_size, config.DEFAULT_PAGE_SIZE)
        logger.info(f"Searching Docker Hub: query='{query}', page={page}")

        data = self._get(
            "/v2/search/repositories/",
            {"query": query, "page": page, "page_size": page_size},
            "Failed to search Docker Hub",
        )
        results = [
            {
                "name": item.get("repo_name"),
                "description": item.get("short_description") or "",
                "stars": item.get("star_count") or 0,
                "pulls": item.get("pull_count") or 0,
                "isOfficial": bool(item.get("is_official")),
                "isAutomated": bool(item.get("is_automated")),
            }
            for item in data.get("results") or []
        ]
        return {"results": results, "count": data.get("count") or 0, "page": page, "pageSize": page_size}

    def list_tags(self, namespace: str, repository: str, page: Any = 1, page_size: Any = None) -> dict:
        """
        List tags of a public repository.

        Args:
            namespace: Repository namespace; "_" stands for official images ("library")
            repository: Repository name
            page: 1-based page number. Default: 1
            page_size: Tags per page. Default: config.DEFAULT_PAGE_SIZE

        Returns:
            {"tags": [...], "count": int, "page": int}

        Raises:
            IndexUnavailableError: Docker Hub could not be reached
        """
        namespace = OFFICIAL_NAMESPACE if namespace == OFFICIAL_PLACEHOLDER else namespace
        page = _to_int(page, 1)
        page_size = _to_int(page_size, config.DEFAULT_PAGE_SIZE)
        logger.info(f"Listing Docker Hub tags: {namespace}/{repository}, page={page}")

        data = self._get(
            f"/v2/repositories/{namespace}/{repository}/tags/",
            {"page": page, "page_size": page_size},
            "Failed to get tags",
        )
        tags = [
            {
                "name": tag.get("name"),
                "size": tag.get("full_size") or 0,
                "sizeFormatted": human_size(tag.get("full_size") or 0),
                "lastUpdated": tag.get("last_updated"),
                "digest": tag.get("digest"),
            }
            for tag in data.get("results") or []
        ]
        return {"tags": tags, "count": data.get("count") or 0, "page": page}
