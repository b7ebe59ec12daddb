"""
Error types for the registry console.

Every error carries the HTTP status the web API answers with, so the Flask
error handler and the CLI can both report it without extra mapping.
"""


class RegistryConsoleError(Exception):
    """Base class for all errors surfaced to a caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class MissingCredentialsError(RegistryConsoleError):
    """No credential bundle was supplied."""

    status_code = 401

    def __init__(self, message: str = "No credentials provided"):
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "requiresAuth": True}


class MalformedCredentialsError(RegistryConsoleError):
    """The credential bundle is not JSON or lacks required fields."""

    status_code = 400

    def to_dict(self) -> dict:
        return {"error": self.message, "requiresAuth": True}


class CredentialsFileError(MalformedCredentialsError):
    """The CLI credential file could not be read."""


class ValidationError(RegistryConsoleError):
    """Caller input failed a precondition before any network call."""

    status_code = 400


class UpstreamError(RegistryConsoleError):
    """
    A registry backend call failed.

    Attributes:
        code: Numeric upstream status code (gRPC), when the backend provided one
    """

    status_code = 500

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code

    def to_dict(self) -> dict:
        data = {"error": self.message}
        if self.code is not None:
            data["code"] = self.code
        return data


class AuthenticationError(UpstreamError):
    """The registry backend rejected the credential (UNAUTHENTICATED)."""

    status_code = 401

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["requiresAuth"] = True
        return data


class IndexUnavailableError(RegistryConsoleError):
    """The public image index could not be reached or answered with an error."""

    status_code = 500
