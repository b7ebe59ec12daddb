"""
Web dashboard for GCP Artifact Registry.

Serves a single-page dashboard and a JSON API that lists repositories,
packages, versions and Docker images of the caller's project, searches
Docker Hub, and generates the commands that copy a Docker Hub image into
Artifact Registry.

Credentials:
    The service-account key is pasted into the dashboard, kept in the
    browser's localStorage and sent with every request. The server never
    stores it.

API Endpoints:
    - POST /api/validate-credentials - Validate a service-account key
    - POST /api/info - Project and service account
    - POST /api/repositories - Repositories across candidate locations
    - POST /api/repositories/<location>/<repository>/packages - Packages
    - POST /api/repositories/<location>/<repository>/packages/<package>/versions - Versions
    - POST /api/repositories/<location>/<repository>/docker-images - Docker images
    - GET /api/dockerhub/search - Docker Hub search
    - GET /api/dockerhub/tags/<namespace>/<repository> - Docker Hub tags
    - GET /api/dockerhub/popular - Curated popular images
    - POST /api/transfer-commands - Transfer commands
    - GET /api/health - Health check

Environment Variables:
    LOG_LEVEL, FLASK_HOST, FLASK_PORT (or PORT), MAX_CONTENT_LENGTH,
    CANDIDATE_LOCATIONS, PROBE_LOCATIONS, LIMITED_PERMISSION_CODES,
    AUTH_FAILURE_CODES, DOCKER_HUB_URL, DOCKER_HUB_TIMEOUT, DEFAULT_PAGE_SIZE

Example:
    $ LOG_LEVEL=DEBUG python app.py
    $ curl http://localhost:3000/api/health

See README.md for full documentation.
"""

import logging

from registry_console.config import config
from registry_console.routes import app

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    """Run the dashboard with the built-in Flask server."""
    debug_mode = logger.getEffectiveLevel() == logging.DEBUG
    logger.info(f"Dashboard listening on http://{config.FLASK_HOST}:{config.FLASK_PORT}/")
    logger.info(f"Configuration: {config}")
    logger.info(f"Repository scan locations: {', '.join(config.CANDIDATE_LOCATIONS)}")
    logger.info(f"Credential probe locations: {', '.join(config.PROBE_LOCATIONS)}")
    if debug_mode:
        logger.warning("Flask debug mode enabled; do not expose this server publicly")
    app.run(host=config.FLASK_HOST, port=config.FLASK_PORT, debug=debug_mode)


if __name__ == "__main__":
    main()
