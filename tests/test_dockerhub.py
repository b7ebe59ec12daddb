from unittest.mock import MagicMock

import pytest
import requests

from registry_console.dockerhub import (
    DockerHubClient,
    popular_images,
    prioritize_tags,
    split_image_reference,
)
from registry_console.errors import IndexUnavailableError, ValidationError

BASE_URL = "https://hub.example.test"


def hub(payload=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value.json.return_value = payload
    return DockerHubClient(base_url=BASE_URL, timeout=5, session=session), session


def test_search():
    client, session = hub(
        {
            "count": 1,
            "results": [
                {
                    "repo_name": "nginx",
                    "short_description": "Official build of Nginx.",
                    "star_count": 20000,
                    "pull_count": 1000000000,
                    "is_official": True,
                    "is_automated": False,
                }
            ],
        }
    )
    result = client.search("nginx", page="2", page_size=10)

    assert result == {
        "results": [
            {
                "name": "nginx",
                "description": "Official build of Nginx.",
                "stars": 20000,
                "pulls": 1000000000,
                "isOfficial": True,
                "isAutomated": False,
            }
        ],
        "count": 1,
        "page": 2,
        "pageSize": 10,
    }
    session.get.assert_called_once_with(
        f"{BASE_URL}/v2/search/repositories/",
        params={"query": "nginx", "page": 2, "page_size": 10},
        timeout=5,
    )


def test_search_requires_query():
    client, session = hub({})
    with pytest.raises(ValidationError):
        client.search("")
    session.get.assert_not_called()


def test_search_unreachable():
    client, _ = hub(error=requests.ConnectionError("boom"))
    with pytest.raises(IndexUnavailableError) as exc:
        client.search("nginx")
    assert exc.value.message == "Failed to search Docker Hub"
    assert exc.value.status_code == 500


def test_search_http_error():
    client, session = hub({})
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503")
    with pytest.raises(IndexUnavailableError):
        client.search("nginx")


def test_tags_official_namespace():
    client, session = hub(
        {
            "count": 2,
            "results": [
                {"name": "1.27", "full_size": 1536, "last_updated": "2024-05-01T00:00:00Z", "digest": "sha256:a"},
                {"name": "latest", "full_size": None, "last_updated": None, "digest": None},
            ],
        }
    )
    result = client.list_tags("_", "nginx")

    assert session.get.call_args.args[0] == f"{BASE_URL}/v2/repositories/library/nginx/tags/"
    assert result["count"] == 2
    assert result["page"] == 1
    assert result["tags"][0] == {
        "name": "1.27",
        "size": 1536,
        "sizeFormatted": "1.50 KB",
        "lastUpdated": "2024-05-01T00:00:00Z",
        "digest": "sha256:a",
    }
    assert result["tags"][1]["sizeFormatted"] == "0 Bytes"


def test_tags_unreachable():
    client, _ = hub(error=requests.Timeout("slow"))
    with pytest.raises(IndexUnavailableError) as exc:
        client.list_tags("grafana", "grafana")
    assert exc.value.message == "Failed to get tags"


def test_split_image_reference():
    assert split_image_reference("nginx") == ("_", "nginx")
    assert split_image_reference("grafana/grafana") == ("grafana", "grafana")


def test_prioritize_tags_is_stable():
    tags = [{"name": n} for n in ["1.0", "alpine", "0.9", "latest", "stable"]]
    assert [t["name"] for t in prioritize_tags(tags)] == ["latest", "stable", "alpine", "1.0", "0.9"]


def test_popular_images_are_copies():
    images = popular_images()
    assert len(images) == 18
    images[0]["name"] = "changed"
    assert popular_images()[0]["name"] == "nginx"
