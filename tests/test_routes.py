import json
import re
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from registry_console import artifact_registry, routes
from registry_console.artifact_registry import create_client
from registry_console.config import config
from registry_console.errors import IndexUnavailableError
from registry_console.routes import app

from conftest import CREDENTIALS, location_parent, repo_parent


@pytest.fixture
def registry_client(monkeypatch, images_client):
    monkeypatch.setattr(config, "CANDIDATE_LOCATIONS", ["asia-south1", "us-central1"])
    monkeypatch.setattr(config, "PROBE_LOCATIONS", ["asia-south1", "us-central1"])
    monkeypatch.setattr(artifact_registry, "create_client", lambda bundle, **kwargs: images_client)
    return images_client


@pytest.fixture
def client(registry_client):
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json["status"] == "ok"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", response.json["timestamp"])


def test_index_serves_dashboard(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Artifact Registry Console" in response.data


def test_cors_headers(client):
    response = client.get("/api/health")
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_unknown_route_is_json(client):
    response = client.post("/api/nope")
    assert response.status_code in (404, 405)
    assert "error" in response.json


# -------------------------------
# Credentials
# -------------------------------


def test_validate_credentials(client, credentials):
    response = client.post("/api/validate-credentials", json={"credentials": credentials})
    assert response.status_code == 200
    assert response.json == {
        "valid": True,
        "projectId": "proj1",
        "serviceAccount": "reader@proj1.iam.gserviceaccount.com",
    }


def test_validate_credentials_rejected(client, registry_client, credentials):
    for location in ("asia-south1", "us-central1"):
        registry_client.errors[location_parent(location)] = google_exceptions.Unauthenticated("bad key")
    response = client.post("/api/validate-credentials", json={"credentials": json.dumps(credentials)})
    assert response.status_code == 200
    assert response.json == {"valid": False, "error": "Invalid credentials - authentication failed"}


def test_validate_credentials_missing(client):
    response = client.post("/api/validate-credentials", json={})
    assert response.status_code == 400
    assert response.json == {"valid": False, "error": "No credentials provided"}


def test_info(client, credentials):
    response = client.post("/api/info", json={"credentials": credentials})
    assert response.json == {"projectId": "proj1", "serviceAccount": "reader@proj1.iam.gserviceaccount.com"}


# -------------------------------
# Artifact Registry
# -------------------------------


def test_repositories(client, registry_client, credentials):
    registry_client.errors[location_parent("asia-south1")] = google_exceptions.PermissionDenied("denied")
    response = client.post("/api/repositories", json={"credentials": credentials})

    assert response.status_code == 200
    assert response.json["count"] == 2
    assert [r["name"] for r in response.json["repositories"]] == ["docker-repo", "npm-repo"]
    assert response.json["repositories"][1]["sizeFormatted"] == "0 Bytes"
    assert response.json["locations"] == [
        {"location": "asia-south1", "status": "error", "count": 0, "error": "denied"},
        {"location": "us-central1", "status": "success", "count": 2},
    ]


def test_repositories_without_credentials(client):
    response = client.post("/api/repositories", json={})
    assert response.status_code == 401
    assert response.json == {"error": "No credentials provided", "requiresAuth": True}


def test_repositories_with_malformed_credentials(client):
    response = client.post("/api/repositories", json={"credentials": "{not json"})
    assert response.status_code == 400
    assert response.json["requiresAuth"] is True


UNUSABLE_KEY = dict(CREDENTIALS, private_key="not-a-key")


@pytest.mark.parametrize("path", ["/api/repositories", "/api/repositories/us-central1/docker-repo/packages"])
def test_unusable_private_key(client, monkeypatch, path):
    monkeypatch.setattr(artifact_registry, "create_client", create_client)
    response = client.post(path, json={"credentials": UNUSABLE_KEY})
    assert response.status_code == 400
    assert response.json["requiresAuth"] is True
    assert response.json["error"].startswith("Failed to parse credentials")


def test_validate_unusable_private_key(client, monkeypatch):
    monkeypatch.setattr(artifact_registry, "create_client", create_client)
    response = client.post("/api/validate-credentials", json={"credentials": UNUSABLE_KEY})
    assert response.status_code == 400
    assert response.json["valid"] is False
    assert response.json["error"].startswith("Failed to parse credentials")


def test_packages(client, credentials):
    response = client.post("/api/repositories/us-central1/docker-repo/packages", json={"credentials": credentials})
    assert response.status_code == 200
    assert response.json["count"] == 1
    assert response.json["packages"][0]["name"] == "app"
    assert response.json["packages"][0]["displayName"] == "app"


def test_packages_upstream_error(client, registry_client, credentials):
    registry_client.errors[("list_packages", repo_parent("private"))] = google_exceptions.PermissionDenied("denied")
    response = client.post("/api/repositories/us-central1/private/packages", json={"credentials": credentials})
    assert response.status_code == 500
    assert response.json == {"error": "denied", "code": 7}


def test_versions(client, credentials):
    response = client.post(
        "/api/repositories/us-central1/docker-repo/packages/app/versions", json={"credentials": credentials}
    )
    assert response.json["count"] == 1
    assert response.json["versions"][0]["metadata"] == {"imageSizeBytes": "2048"}


def test_docker_images(client, credentials):
    response = client.post("/api/repositories/us-central1/docker-repo/docker-images", json={"credentials": credentials})
    assert response.json["count"] == 2
    assert response.json["images"][0]["tags"] == ["v1", "latest"]
    assert response.json["images"][1]["tags"] == []


def test_credentials_in_query_string(client, credentials):
    response = client.post(
        "/api/repositories/us-central1/docker-repo/packages",
        query_string={"credentials": json.dumps(credentials)},
    )
    assert response.status_code == 200


# -------------------------------
# Docker Hub
# -------------------------------


@pytest.fixture
def dockerhub(monkeypatch):
    hub = MagicMock()
    monkeypatch.setattr(routes, "DockerHubClient", lambda: hub)
    return hub


def test_dockerhub_search(client, dockerhub):
    dockerhub.search.return_value = {"results": [], "count": 0, "page": 1, "pageSize": 25}
    response = client.get("/api/dockerhub/search?query=redis")
    assert response.json["count"] == 0
    assert dockerhub.search.call_args.args[0] == "redis"


def test_dockerhub_search_requires_query(client):
    response = client.get("/api/dockerhub/search")
    assert response.status_code == 400
    assert response.json == {"error": "Query is required"}


def test_dockerhub_search_unreachable(client, dockerhub):
    dockerhub.search.side_effect = IndexUnavailableError("Failed to search Docker Hub")
    response = client.get("/api/dockerhub/search?query=redis")
    assert response.status_code == 500
    assert response.json == {"error": "Failed to search Docker Hub"}


def test_dockerhub_tags(client, dockerhub):
    dockerhub.list_tags.return_value = {"tags": [{"name": "latest"}], "count": 1, "page": 1}
    response = client.get("/api/dockerhub/tags/_/nginx")
    assert response.json["tags"] == [{"name": "latest"}]
    assert dockerhub.list_tags.call_args.args == ("_", "nginx")


def test_dockerhub_popular(client):
    response = client.get("/api/dockerhub/popular")
    assert len(response.json["images"]) == 18


# -------------------------------
# Transfer
# -------------------------------


def test_transfer_commands(client, credentials):
    response = client.post(
        "/api/transfer-commands",
        json={
            "sourceImage": "nginx",
            "sourceTag": "1.27",
            "targetRepo": "docker-repo",
            "targetLocation": "us-central1",
            "credentials": credentials,
        },
    )
    assert response.status_code == 200
    assert [s["step"] for s in response.json["steps"]] == [1, 2, 3, 4]
    assert response.json["summary"] == {
        "source": "nginx:1.27",
        "target": "us-central1-docker.pkg.dev/proj1/docker-repo/nginx:1.27",
    }


def test_transfer_commands_missing_fields(client, credentials):
    response = client.post("/api/transfer-commands", json={"sourceImage": "nginx", "credentials": credentials})
    assert response.status_code == 400
    assert response.json == {"error": "Missing required fields: targetRepo, targetLocation"}
