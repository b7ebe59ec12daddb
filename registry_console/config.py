"""
Configuration module for the registry console.

Loads all configuration from environment variables with sensible defaults.
"""

import os


def _split(value: str) -> list[str]:
    """Split a comma-separated environment value into a list of non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """
    Console configuration from environment variables.

    Loads all configuration values from environment variables with sensible defaults.
    All settings can be overridden by setting the corresponding environment variable.
    """

    def __init__(self):
        """
        Initialize configuration from environment variables.

        Environment Variables:
            LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR). Default: INFO
            FLASK_HOST: Server bind address. Default: 0.0.0.0
            FLASK_PORT: Server bind port (falls back to PORT). Default: 3000
            MAX_CONTENT_LENGTH: Maximum JSON request body in bytes. Default: 10 MB
            CANDIDATE_LOCATIONS: Regions scanned for repositories (comma-separated).
                Default: asia-south1,us-central1,us-east1,europe-west1,asia-southeast1
            PROBE_LOCATIONS: Regions probed when validating credentials.
                Default: asia-south1,us-central1
            LIMITED_PERMISSION_CODES: gRPC status names that mean "authenticated,
                limited permissions" on the second probe.
                Default: PERMISSION_DENIED,INVALID_ARGUMENT
            AUTH_FAILURE_CODES: gRPC status names that mean the key was rejected.
                Default: UNAUTHENTICATED
            DOCKER_HUB_URL: Base URL of the public image index. Default: https://hub.docker.com
            DOCKER_HUB_TIMEOUT: Public index request timeout in seconds. Default: 30
            DEFAULT_PAGE_SIZE: Page size for public index listings. Default: 25
            REGISTRY_CONSOLE_CREDENTIALS: Credential file read by the CLI.
                Default: gcp-creds.json
        """
        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        # Server
        self.FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
        self.FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "3000")))
        self.MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))

        # Artifact Registry
        self.CANDIDATE_LOCATIONS = _split(
            os.getenv(
                "CANDIDATE_LOCATIONS",
                "asia-south1,us-central1,us-east1,europe-west1,asia-southeast1",
            )
        )
        self.PROBE_LOCATIONS = _split(os.getenv("PROBE_LOCATIONS", "asia-south1,us-central1"))
        self.LIMITED_PERMISSION_CODES = _split(
            os.getenv("LIMITED_PERMISSION_CODES", "PERMISSION_DENIED,INVALID_ARGUMENT")
        )
        self.AUTH_FAILURE_CODES = _split(os.getenv("AUTH_FAILURE_CODES", "UNAUTHENTICATED"))

        # Docker Hub
        self.DOCKER_HUB_URL = os.getenv("DOCKER_HUB_URL", "https://hub.docker.com")
        self.DOCKER_HUB_TIMEOUT = float(os.getenv("DOCKER_HUB_TIMEOUT", "30"))  # seconds
        self.DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "25"))

        # CLI
        self.CREDENTIALS_FILE = os.getenv("REGISTRY_CONSOLE_CREDENTIALS", "gcp-creds.json")

    def __repr__(self):
        """String representation for logging."""
        return (
            f"Config(LOG_LEVEL={self.LOG_LEVEL}, "
            f"FLASK_HOST={self.FLASK_HOST}, "
            f"FLASK_PORT={self.FLASK_PORT}, "
            f"CANDIDATE_LOCATIONS={','.join(self.CANDIDATE_LOCATIONS)}, "
            f"DOCKER_HUB_URL={self.DOCKER_HUB_URL})"
        )


# Global config instance
config = Config()
