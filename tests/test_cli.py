import json
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions
from typer.testing import CliRunner

from registry_console.cli import app
from registry_console.session import CliSession

from conftest import CREDENTIALS, output, repo_parent

runner = CliRunner()


def invoke(session, *args):
    return runner.invoke(app, list(args), obj=session)


def test_list(make_session, fake_client, console):
    result = invoke(make_session(fake_client), "list")
    assert result.exit_code == 0
    text = output(console)
    assert "Found 2 repositories" in text
    assert "docker-repo" in text
    assert "npm-repo" in text


def test_list_alias(make_session, fake_client, console):
    assert invoke(make_session(fake_client), "ls").exit_code == 0
    assert "Found 2 repositories" in output(console)


def test_packages_failure_sets_exit_code(make_session, fake_client, console):
    fake_client.errors[repo_parent("private")] = google_exceptions.PermissionDenied("denied")
    result = invoke(make_session(fake_client), "packages", "private")
    assert result.exit_code == 1
    text = output(console)
    assert "Failed to fetch packages" in text
    assert "Error: denied" in text
    assert "Artifact Registry Reader" in text


def test_versions(make_session, fake_client, console):
    result = invoke(make_session(fake_client), "versions", "docker-repo", "app")
    assert result.exit_code == 0
    assert "Found 1 versions for app" in output(console)


def test_docker_images(make_session, images_client, console):
    result = invoke(make_session(images_client), "docker", "docker-repo")
    assert result.exit_code == 0
    text = output(console)
    assert "Found 2 Docker images" in text
    assert "untagged" in text


def test_missing_credentials_file(make_session, fake_client, console, tmp_path):
    session = make_session(fake_client, path=str(tmp_path / "missing.json"))
    result = invoke(session, "list")
    assert result.exit_code == 1
    assert "Cannot read credentials file" in output(console)


def test_unusable_private_key(console, tmp_path):
    path = tmp_path / "gcp-creds.json"
    path.write_text(json.dumps(dict(CREDENTIALS, private_key="not-a-key")))
    session = CliSession(str(path), console=console)

    result = invoke(session, "list")

    assert result.exit_code == 1
    text = output(console)
    assert "Failed to fetch repositories" in text
    assert "Failed to parse credentials" in text
    assert session.list_repositories() is None


def test_pull_prints_commands(make_session, images_client, console):
    result = invoke(make_session(images_client), "pull", "docker-repo", "--image", "app")
    assert result.exit_code == 0
    text = output(console)
    assert "gcloud auth configure-docker us-central1-docker.pkg.dev --quiet" in text
    assert "docker pull us-central1-docker.pkg.dev/proj1/docker-repo/app:v1" in text


def test_pull_unknown_image(make_session, images_client, console):
    result = invoke(make_session(images_client), "pull", "docker-repo", "-i", "nope")
    assert result.exit_code == 1
    assert "Image 'nope' not found" in output(console)


def test_push_prints_commands(make_session, fake_client, console):
    result = invoke(make_session(fake_client), "push", "docker-repo", "-i", "myapp:dev", "-t", "v2")
    assert result.exit_code == 0
    text = output(console)
    assert "docker tag myapp:dev us-central1-docker.pkg.dev/proj1/docker-repo/myapp:v2" in text
    assert "docker push us-central1-docker.pkg.dev/proj1/docker-repo/myapp:v2" in text


def test_push_requires_a_name(make_session, fake_client, console):
    result = invoke(make_session(fake_client), "push", "docker-repo")
    assert result.exit_code == 1
    assert "Image name is required" in output(console)


def test_transfer(make_session, fake_client, console):
    result = invoke(
        make_session(fake_client), "transfer", "nginx", "--repository", "my-repo", "--location", "us-central1"
    )
    assert result.exit_code == 0
    text = output(console)
    assert "docker pull nginx:latest" in text
    assert "docker push us-central1-docker.pkg.dev/proj1/my-repo/nginx:latest" in text


def test_search(make_session, fake_client, console):
    hub = MagicMock()
    hub.search.return_value = {
        "results": [
            {
                "name": "bitnami/redis",
                "description": "",
                "stars": 1200,
                "pulls": 5_000_000,
                "isOfficial": False,
                "isAutomated": False,
            }
        ],
        "count": 1,
        "page": 1,
        "pageSize": 25,
    }
    result = invoke(make_session(fake_client, dockerhub=hub), "search", "redis")
    assert result.exit_code == 0
    text = output(console)
    assert "bitnami/redis" in text
    assert "5.0M" in text


def test_tags_official_image(make_session, fake_client, console):
    hub = MagicMock()
    hub.list_tags.return_value = {
        "tags": [
            {"name": "1.27", "sizeFormatted": "50.00 MB", "lastUpdated": None, "digest": None},
            {"name": "latest", "sizeFormatted": "50.00 MB", "lastUpdated": None, "digest": None},
        ],
        "count": 2,
        "page": 1,
    }
    result = invoke(make_session(fake_client, dockerhub=hub), "tags", "nginx")
    assert result.exit_code == 0
    assert hub.list_tags.call_args.args[:2] == ("_", "nginx")
    text = output(console)
    assert text.index("latest") < text.index("1.27")


def test_popular(make_session, fake_client, console):
    result = invoke(make_session(fake_client), "popular")
    assert result.exit_code == 0
    assert "grafana/grafana" in output(console)


@pytest.mark.parametrize("args", [["interactive"], []])
def test_interactive_exit(make_session, fake_client, console, args):
    result = runner.invoke(app, args, obj=make_session(fake_client), input="7\n")
    assert result.exit_code == 0
    assert "Goodbye!" in output(console)
