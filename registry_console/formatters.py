"""
Display formatting for Artifact Registry and Docker Hub records.

Two families live here: JSON records for the web API (camelCase keys,
ISO timestamps, missing sizes as 0) and table rows for the CLI (local
timestamps, "N/A" for anything missing).
"""

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]

REPOSITORY_FORMATS = {"DOCKER", "MAVEN", "NPM", "PYTHON", "APT", "YUM", "GO", "KFP", "GENERIC"}

NOT_AVAILABLE = "N/A"


def short_name(identifier: str) -> str:
    """
    Final path segment of a resource name.

    Examples:
        >>> short_name("projects/p/locations/us-central1/repositories/my-repo")
        'my-repo'
    """
    return identifier.split("/")[-1]


def location_of(identifier: str) -> str:
    """
    Location segment of a resource name (projects/{p}/locations/{location}/...).

    Examples:
        >>> location_of("projects/p/locations/us-central1/repositories/my-repo")
        'us-central1'
    """
    parts = identifier.split("/")
    return parts[3] if len(parts) > 3 else ""


def image_name(identifier: str) -> str:
    """
    Last two path segments of a Docker image resource name.

    Examples:
        >>> image_name("projects/p/locations/l/repositories/r/dockerImages/app@sha256:abc")
        'dockerImages/app@sha256:abc'
    """
    return "/".join(identifier.split("/")[-2:])


def human_size(size: Any, missing: str = NOT_AVAILABLE) -> str:
    """
    Format a byte count with the largest fitting unit.

    Args:
        size: Byte count, or None when the backend did not report one
        missing: Text returned for None

    Returns:
        "0 Bytes" for 0, otherwise "<value with 2 decimals> <unit>"

    Examples:
        >>> human_size(1536)
        '1.50 KB'
        >>> human_size(0)
        '0 Bytes'
        >>> human_size(None)
        'N/A'
    """
    if size is None:
        return missing
    size = float(size)
    if size == 0:
        return "0 Bytes"
    index = int(math.floor(math.log(size) / math.log(1024)))
    index = max(0, min(index, len(SIZE_UNITS) - 1))
    return f"{size / math.pow(1024, index):.2f} {SIZE_UNITS[index]}"


def to_datetime(timestamp: Any) -> datetime | None:
    """
    Normalize an upstream timestamp to a UTC datetime truncated to whole seconds.

    Accepts datetimes (proto-plus DatetimeWithNanoseconds included), protobuf
    Timestamp-like objects with a ``seconds`` attribute, and plain numbers of
    seconds since the epoch. Returns None for anything absent.
    """
    if timestamp is None:
        return None
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.astimezone(timezone.utc).replace(microsecond=0)
    seconds = getattr(timestamp, "seconds", timestamp)
    if isinstance(seconds, Mapping):
        seconds = seconds.get("seconds")
    if seconds is None:
        return None
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


def iso_timestamp(timestamp: Any) -> str | None:
    """ISO-8601 UTC string with millisecond precision, or None."""
    value = to_datetime(timestamp)
    if value is None:
        return None
    return value.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_timestamp(timestamp: Any) -> str:
    """Timestamp in the local time zone for terminal output, or "N/A"."""
    value = to_datetime(timestamp)
    if value is None:
        return NOT_AVAILABLE
    return value.astimezone().strftime("%m/%d/%Y, %I:%M:%S %p")


def repository_format(value: Any) -> str:
    """Map an upstream format (enum, int or string) to a known tag or "UNKNOWN"."""
    if isinstance(value, Enum):
        value = value.name
    if isinstance(value, str) and value.upper() in REPOSITORY_FORMATS:
        return value.upper()
    return "UNKNOWN"


def format_count(count: int) -> str:
    """
    Abbreviate star and pull counts.

    Examples:
        >>> format_count(1534)
        '1.5K'
        >>> format_count(2500000)
        '2.5M'
    """
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def _plain(value: Any) -> Any:
    """Convert proto-plus containers into JSON-serializable Python values."""
    if isinstance(value, Mapping) or hasattr(value, "items"):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)) or (
        hasattr(value, "__iter__") and not isinstance(value, (str, bytes))
    ):
        return [_plain(v) for v in value]
    return value


# -------------------------------
# Web API records
# -------------------------------


def format_repository(repo: Any) -> dict:
    size = int(repo.size_bytes) if getattr(repo, "size_bytes", None) else 0
    return {
        "id": repo.name,
        "name": short_name(repo.name),
        "location": location_of(repo.name),
        "format": repository_format(getattr(repo, "format_", None)),
        "description": getattr(repo, "description", "") or "",
        "createdAt": iso_timestamp(getattr(repo, "create_time", None)),
        "updatedAt": iso_timestamp(getattr(repo, "update_time", None)),
        "sizeBytes": size,
        "sizeFormatted": human_size(size),
    }


def format_package(package: Any) -> dict:
    name = short_name(package.name)
    return {
        "id": package.name,
        "name": name,
        "displayName": getattr(package, "display_name", "") or name,
        "createdAt": iso_timestamp(getattr(package, "create_time", None)),
        "updatedAt": iso_timestamp(getattr(package, "update_time", None)),
    }


def format_version(version: Any) -> dict:
    metadata = getattr(version, "metadata", None)
    return {
        "id": version.name,
        "name": short_name(version.name),
        "description": getattr(version, "description", "") or "",
        "createdAt": iso_timestamp(getattr(version, "create_time", None)),
        "updatedAt": iso_timestamp(getattr(version, "update_time", None)),
        "metadata": _plain(metadata) if metadata else {},
    }


def format_docker_image(image: Any) -> dict:
    size = int(image.image_size_bytes) if getattr(image, "image_size_bytes", None) else 0
    return {
        "id": image.name,
        "name": image_name(image.name),
        "uri": getattr(image, "uri", "") or "",
        "tags": list(getattr(image, "tags", None) or []),
        "sizeBytes": size,
        "sizeFormatted": human_size(size),
        "uploadedAt": iso_timestamp(getattr(image, "upload_time", None)),
        "buildTime": iso_timestamp(getattr(image, "build_time", None)),
        "mediaType": getattr(image, "media_type", "") or "",
    }


def filter_repositories(records: list[dict], query: str) -> list[dict]:
    """Case-insensitive match of query against repository name, format or location."""
    query = (query or "").lower()
    if not query:
        return list(records)
    return [
        r for r in records
        if query in r["name"].lower() or query in r["format"].lower() or query in r["location"].lower()
    ]


def repository_stats(records: list[dict]) -> dict:
    docker = sum(1 for r in records if r["format"] == "DOCKER")
    return {"total": len(records), "docker": docker, "other": len(records) - docker}


# -------------------------------
# CLI table rows
# -------------------------------


def _or_na(value: Any) -> str:
    return value if value else NOT_AVAILABLE


def repository_row(repo: Any) -> list[str]:
    fmt = repository_format(getattr(repo, "format_", None))
    return [
        short_name(repo.name),
        fmt if fmt != "UNKNOWN" else NOT_AVAILABLE,
        location_of(repo.name),
        _or_na(getattr(repo, "description", "")),
        local_timestamp(getattr(repo, "create_time", None)),
    ]


def package_row(package: Any) -> list[str]:
    return [
        short_name(package.name),
        local_timestamp(getattr(package, "create_time", None)),
        local_timestamp(getattr(package, "update_time", None)),
    ]


def version_row(version: Any) -> list[str]:
    return [
        short_name(version.name),
        local_timestamp(getattr(version, "create_time", None)),
        local_timestamp(getattr(version, "update_time", None)),
        _or_na(getattr(version, "description", "")),
    ]


def tag_summary(tags: Any) -> str:
    """Comma-joined tags, "untagged" when empty, shortened past 23 characters."""
    text = ", ".join(tags or []) or "untagged"
    if len(text) > 23:
        return text[:20] + "..."
    return text


def docker_image_row(image: Any) -> list[str]:
    return [
        image_name(image.name),
        tag_summary(getattr(image, "tags", None)),
        human_size(getattr(image, "image_size_bytes", None)),
        local_timestamp(getattr(image, "upload_time", None)),
    ]
