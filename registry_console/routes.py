"""
Flask application and JSON API endpoints.

Every registry endpoint takes the caller's credential bundle with the
request (JSON body field or query parameter "credentials"); nothing is
stored server-side.
"""

import logging

from flask import Flask, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException

from .artifact_registry import ArtifactRegistry
from .config import config
from .credentials import CredentialBundle, parse_credentials, validate_credentials
from .dockerhub import DockerHubClient, popular_images
from .errors import RegistryConsoleError
from .formatters import format_docker_image, format_package, format_repository, format_version, utc_now_iso
from .transfer import generate_transfer_plan

logger = logging.getLogger(__name__)

# Create Flask app
app = Flask(__name__, static_folder="static", static_url_path="")
app.config["MAX_CONTENT_LENGTH"] = config.MAX_CONTENT_LENGTH


# -------------------------------
# Request helpers
# -------------------------------


def _body() -> dict:
    return request.get_json(silent=True) or {}


def request_credentials() -> CredentialBundle:
    """
    Credential bundle of the current request.

    Raises:
        MissingCredentialsError: 401 when nothing was supplied
        MalformedCredentialsError: 400 when it cannot be parsed
    """
    return parse_credentials(_body().get("credentials") or request.args.get("credentials"))


def request_registry() -> ArtifactRegistry:
    return ArtifactRegistry(request_credentials())


# -------------------------------
# Error handling
# -------------------------------


@app.errorhandler(RegistryConsoleError)
def handle_console_error(error):
    """Render console errors as JSON with their status code."""
    if error.status_code >= 500:
        logger.error(f"{request.method} {request.path} failed: {error.message}")
    else:
        logger.warning(f"{request.method} {request.path} rejected: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@app.errorhandler(HTTPException)
def handle_http_error(error):
    """Render abort() and routing errors as JSON."""
    return jsonify({"error": error.description}), error.code


@app.after_request
def allow_cross_origin(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


# -------------------------------
# Dashboard
# -------------------------------


@app.route("/")
def index():
    """Serve the single-page dashboard."""
    return send_from_directory(app.static_folder, "index.html")


@app.route("/api/health")
def health():
    """
    Health check endpoint.

    Returns:
        {"status": "ok", "timestamp": "<ISO-8601 UTC>"}
    """
    return jsonify({"status": "ok", "timestamp": utc_now_iso()})


# -------------------------------
# Credentials
# -------------------------------


@app.route("/api/validate-credentials", methods=["POST"])
def validate():
    """
    Validate a credential bundle.

    Request Body:
        {"credentials": <service-account JSON text or object>}

    Returns:
        200 {"valid": true, "projectId": ..., "serviceAccount": ...}
        200 {"valid": false, "error": "Invalid credentials - authentication failed"}
        400 {"valid": false, "error": ...} for missing or malformed credentials
    """
    credentials = _body().get("credentials")
    try:
        result = validate_credentials(credentials)
    except RegistryConsoleError as e:
        logger.warning(f"Credential validation rejected: {e.message}")
        return jsonify({"valid": False, "error": e.message}), 400
    return jsonify(result)


@app.route("/api/info", methods=["POST"])
def info():
    """Project and service account of the supplied credentials."""
    bundle = request_credentials()
    return jsonify({"projectId": bundle.project_id, "serviceAccount": bundle.client_email})


# -------------------------------
# Artifact Registry
# -------------------------------


@app.route("/api/repositories", methods=["POST"])
def repositories():
    """
    List repositories across all candidate locations.

    Locations that fail are skipped; their outcome is reported under
    "locations".

    Returns:
        {"repositories": [...], "count": int, "locations": [...]}
    """
    scan = request_registry().scan_repositories()
    records = [format_repository(r) for r in scan.repositories]
    logger.info(f"Listed {len(records)} repositories")
    return jsonify(
        {
            "repositories": records,
            "count": len(records),
            "locations": [o.to_dict() for o in scan.outcomes],
        }
    )


@app.route("/api/repositories/<location>/<repository>/packages", methods=["POST"])
def packages(location, repository):
    """
    List packages in a repository.

    Returns:
        {"packages": [...], "count": int}
    """
    records = [format_package(p) for p in request_registry().list_packages(location, repository)]
    logger.info(f"Listed {len(records)} packages in {location}/{repository}")
    return jsonify({"packages": records, "count": len(records)})


@app.route("/api/repositories/<location>/<repository>/packages/<package>/versions", methods=["POST"])
def versions(location, repository, package):
    """
    List versions of a package.

    Returns:
        {"versions": [...], "count": int}
    """
    records = [format_version(v) for v in request_registry().list_versions(location, repository, package)]
    logger.info(f"Listed {len(records)} versions of {location}/{repository}/{package}")
    return jsonify({"versions": records, "count": len(records)})


@app.route("/api/repositories/<location>/<repository>/docker-images", methods=["POST"])
def docker_images(location, repository):
    """
    List Docker images in a repository.

    Returns:
        {"images": [...], "count": int}
    """
    records = [format_docker_image(i) for i in request_registry().list_docker_images(location, repository)]
    logger.info(f"Listed {len(records)} Docker images in {location}/{repository}")
    return jsonify({"images": records, "count": len(records)})


# -------------------------------
# Docker Hub (no credentials)
# -------------------------------


@app.route("/api/dockerhub/search")
def dockerhub_search():
    """
    Search Docker Hub.

    Query Parameters:
        query: Search text (required)
        page: Page number. Default: 1
        pageSize: Results per page. Default: 25

    Returns:
        {"results": [...], "count": int, "page": int, "pageSize": int}
    """
    return jsonify(
        DockerHubClient().search(
            request.args.get("query", ""),
            page=request.args.get("page", 1),
            page_size=request.args.get("pageSize"),
        )
    )


@app.route("/api/dockerhub/tags/<namespace>/<repository>")
def dockerhub_tags(namespace, repository):
    """
    List tags of a Docker Hub repository ("_" namespace for official images).

    Returns:
        {"tags": [...], "count": int, "page": int}
    """
    return jsonify(
        DockerHubClient().list_tags(
            namespace,
            repository,
            page=request.args.get("page", 1),
            page_size=request.args.get("pageSize"),
        )
    )


@app.route("/api/dockerhub/popular")
def dockerhub_popular():
    return jsonify({"images": popular_images()})


# -------------------------------
# Transfer
# -------------------------------


@app.route("/api/transfer-commands", methods=["POST"])
def transfer_commands():
    """
    Generate the commands to copy a Docker Hub image into Artifact Registry.

    Request Body:
        {
            "sourceImage": "nginx",
            "sourceTag": "1.27",            (optional, default "latest")
            "targetRepo": "my-repo",
            "targetLocation": "us-central1",
            "targetName": "web",            (optional, default last segment of sourceImage)
            "credentials": {...}
        }

    Returns:
        {"steps": [{step, title, command, description}, ...], "summary": {source, target}}
    """
    body = _body()
    plan = generate_transfer_plan(
        body.get("sourceImage"),
        body.get("targetRepo"),
        body.get("targetLocation"),
        body.get("credentials"),
        source_tag=body.get("sourceTag"),
        target_name=body.get("targetName"),
    )
    logger.info(f"Transfer plan generated: {plan.summary['source']} -> {plan.summary['target']}")
    return jsonify(plan.to_dict())
