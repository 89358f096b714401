"""
Exceptions raised by the Flakiness SDK
"""
from typing import Optional


class FlakinessError(Exception):
    """Base class for all SDK errors."""


class InvalidEnvironmentReference(FlakinessError, ValueError):
    """An attempt points at an environment index that does not exist."""

    def __init__(self, environment_idx: int, environment_count: int):
        self.environment_idx = environment_idx
        self.environment_count = environment_count
        super().__init__(
            f"environmentIdx {environment_idx} is out of bounds "
            f"for {environment_count} environment(s)"
        )


class UploadError(FlakinessError):
    """The report upload did not complete."""


class UploadRequestError(UploadError):
    """A single HTTP request answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, body: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request to {url} failed with {status_code}")


class UploadProtocolError(UploadError):
    """The service response is inconsistent with the upload session."""


class OIDCTokenError(FlakinessError):
    """GitHub OIDC token exchange failed."""
