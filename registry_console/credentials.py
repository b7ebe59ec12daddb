"""
Credential parsing and validation for the registry console.

A credential bundle is a Google service-account key. Callers may hand it over
as JSON text (browser, request body) or as an already decoded mapping; both
are resolved once, at the boundary, into a CredentialBundle.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from .config import config
from .errors import (
    CredentialsFileError,
    MalformedCredentialsError,
    MissingCredentialsError,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("project_id", "private_key", "client_email")


@dataclass(frozen=True)
class CredentialInput:
    """Credential value as received: raw JSON text or a decoded mapping."""

    kind: str  # "text" or "mapping"
    payload: Any


@dataclass(frozen=True)
class CredentialBundle:
    """Structurally valid service-account credentials."""

    project_id: str
    client_email: str
    private_key: str = field(repr=False)
    info: dict = field(repr=False, compare=False, default_factory=dict)


def coerce_credentials(value: Any) -> CredentialInput:
    """
    Tag a raw credential value as text or mapping.

    Raises:
        MissingCredentialsError: value is None or empty
        MalformedCredentialsError: value is neither a string nor a mapping
    """
    if value is None or (isinstance(value, (str, Mapping)) and not value):
        raise MissingCredentialsError()
    if isinstance(value, str):
        return CredentialInput("text", value)
    if isinstance(value, Mapping):
        return CredentialInput("mapping", value)
    raise MalformedCredentialsError(
        f"Failed to parse credentials: unsupported type {type(value).__name__}"
    )


def parse_credentials(value: Any) -> CredentialBundle:
    """
    Resolve a credential value into a CredentialBundle.

    Args:
        value: JSON text, mapping, CredentialInput or CredentialBundle

    Returns:
        CredentialBundle with project, service account and private key

    Raises:
        MissingCredentialsError: nothing was supplied
        MalformedCredentialsError: text is not a JSON object, or required
            fields (project_id, private_key, client_email) are missing

    Examples:
        >>> parse_credentials('{"project_id": "p", "private_key": "k", "client_email": "e"}')
        CredentialBundle(project_id='p', client_email='e')
    """
    if isinstance(value, CredentialBundle):
        return value

    source = value if isinstance(value, CredentialInput) else coerce_credentials(value)

    if source.kind == "text":
        try:
            info = json.loads(source.payload)
        except ValueError as e:
            logger.warning("Rejected credentials: malformed JSON")
            raise MalformedCredentialsError(f"Failed to parse credentials: malformed JSON ({e})")
        if not isinstance(info, Mapping):
            raise MalformedCredentialsError("Failed to parse credentials: malformed JSON (expected an object)")
    else:
        info = source.payload

    missing = [name for name in REQUIRED_FIELDS if not info.get(name)]
    if missing:
        logger.warning(f"Rejected credentials: missing {', '.join(missing)}")
        raise MalformedCredentialsError(
            f"Invalid credentials format. Missing required fields: {', '.join(missing)}"
        )

    return CredentialBundle(
        project_id=info["project_id"],
        client_email=info["client_email"],
        private_key=info["private_key"],
        info=dict(info),
    )


def load_credentials_file(path: str) -> CredentialBundle:
    """
    Read a service-account key file from disk.

    Raises:
        CredentialsFileError: the file cannot be read or is not a valid bundle
    """
    logger.debug(f"Loading credentials from {path}")
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise CredentialsFileError(f"Cannot read credentials file {path}: {e.strerror or e}")

    try:
        return parse_credentials(text)
    except (MalformedCredentialsError, MissingCredentialsError) as e:
        raise CredentialsFileError(f"{path}: {e.message}")


def status_name(error: Exception) -> str | None:
    """Return the gRPC status name of an upstream error (e.g. "UNAUTHENTICATED")."""
    if isinstance(error, auth_exceptions.GoogleAuthError):
        return "UNAUTHENTICATED"
    code = getattr(error, "grpc_status_code", None)
    return code.name if code is not None else None


def validate_credentials(
    value: Any,
    client_factory: Callable | None = None,
    probe_locations: list[str] | None = None,
    limited_codes: list[str] | None = None,
    rejected_codes: list[str] | None = None,
) -> dict:
    """
    Check a credential bundle structurally and with a best-effort live probe.

    The probe lists repositories in the first probe location and, if that
    fails, in the second. Only the second failure is interpreted:

        - status in limited_codes (PERMISSION_DENIED, INVALID_ARGUMENT):
          authenticated with limited permissions, still valid
        - status in rejected_codes (UNAUTHENTICATED): invalid
        - anything else: valid

    Args:
        value: Credential value (JSON text or mapping)
        client_factory: Callable building a registry client from a bundle.
            Default: artifact_registry.create_client
        probe_locations: Regions to probe. Default: config.PROBE_LOCATIONS
        limited_codes: Status names meaning "valid, limited". Default: config
        rejected_codes: Status names meaning "invalid". Default: config

    Returns:
        {"valid": True, "projectId": ..., "serviceAccount": ...} or
        {"valid": False, "error": ...}

    Raises:
        MissingCredentialsError, MalformedCredentialsError: structural failures,
            raised before any network call
    """
    bundle = parse_credentials(value)

    if client_factory is None:
        from .artifact_registry import create_client

        client_factory = create_client

    locations = probe_locations if probe_locations is not None else config.PROBE_LOCATIONS
    limited = set(limited_codes if limited_codes is not None else config.LIMITED_PERMISSION_CODES)
    rejected = set(rejected_codes if rejected_codes is not None else config.AUTH_FAILURE_CODES)

    try:
        client = client_factory(bundle)
    except ValueError as e:
        # google-auth rejects unusable key material before any call is made
        raise MalformedCredentialsError(f"Failed to validate: {e}")

    last_error = None
    for location in locations:
        parent = f"projects/{bundle.project_id}/locations/{location}"
        logger.debug(f"Probing credentials against {parent}")
        try:
            client.list_repositories(parent=parent)
            last_error = None
            break
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            logger.debug(f"Probe of {location} failed with {status_name(e)}")
            last_error = e

    if last_error is not None:
        status = status_name(last_error)
        if status in rejected:
            logger.warning(f"Credentials rejected for project {bundle.project_id}")
            return {"valid": False, "error": "Invalid credentials - authentication failed"}
        if status in limited:
            logger.info("Credentials valid, but limited permissions")

    logger.info(f"Credentials validated for project {bundle.project_id}")
    return {
        "valid": True,
        "projectId": bundle.project_id,
        "serviceAccount": bundle.client_email,
    }
