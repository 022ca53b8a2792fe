"""
Exception classes for the spillover report.

Setup errors and pipeline errors are fatal and abort the run. Per-epic lookup
failures are not raised past the resolver; they become sentinel values.
"""

from typing import Optional, Any


class SpilloverError(Exception):
    """
    Base exception for all report errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code, when the error came from the API
        original_error: The original exception that was caught
        details: Additional error details
    """

    def __init__(
        self,
        message: str = "Spillover report error",
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.original_error = original_error
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class ConfigurationError(SpilloverError):
    """Raised for invalid run parameters (date format, project key, base URL)."""


class CredentialsError(SpilloverError):
    """Raised when the token file is missing, unreadable or empty."""


class JiraAPIError(SpilloverError):
    """Raised for transport, status or decode failures talking to JIRA."""


class ProjectNotFoundError(JiraAPIError):
    """
    Raised when the project lookup returns HTTP 404.

    This can occur when:
    - The project key doesn't exist
    - The user doesn't have permission to browse the project
    """

    def __init__(self, project_key: str, original_error: Optional[Exception] = None):
        super().__init__(
            message=f"Project '{project_key}' does not exist or is not accessible",
            status_code=404,
            original_error=original_error,
            details={"project_key": project_key}
        )
        self.project_key = project_key
