"""Custom exceptions for Edusign API errors."""
from typing import Optional


class EdusignAPIError(Exception):
    """Base exception for Edusign API errors."""
    pass


class MissingCredentialError(EdusignAPIError):
    """No account API key was supplied."""
    pass


class GatewayError(EdusignAPIError):
    """Edusign gateway failed before the API answered."""

    status_code: int = 0

    def __init__(self, message: str = ""):
        self.message = message or f"HTTP {self.status_code}"
        super().__init__(self.message)


class BadGatewayError(GatewayError):
    """HTTP 502 from the Edusign gateway."""
    status_code = 502


class GatewayTimeoutError(GatewayError):
    """HTTP 504 from the Edusign gateway."""
    status_code = 504


class RemoteError(EdusignAPIError):
    """Edusign returned an error envelope.

    ``message`` is the remote text, verbatim. Callers match on it, so it must
    never be reformatted.
    """

    def __init__(self, message: Optional[str], status_code: Optional[int] = None):
        self.message = message or ""
        self.status_code = status_code
        super().__init__(self.message)


class NetworkError(RemoteError):
    """Network connectivity issues."""
    pass


class InvalidResponseError(EdusignAPIError):
    """API returned unexpected response format."""
    pass


class InvalidArgumentError(EdusignAPIError, ValueError):
    """Blank identifier or malformed argument."""
    pass


class DataNotFoundError(EdusignAPIError):
    """Requested data not found in Edusign."""
    pass
