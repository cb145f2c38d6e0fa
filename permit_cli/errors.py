"""Error types for Permit CLI."""

from typing import Optional, Dict, Any


class PermitCLIError(Exception):
    """Base exception for Permit CLI errors."""

    def __init__(self, message: str, code: str = "PERMIT_CLI_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured output."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PermitCLIError):
    """Missing or invalid API key or scope, raised before any export stage runs."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class PermitAPIError(PermitCLIError):
    """The Permit API could not be reached or answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if status_code is not None:
            error_details["status_code"] = status_code
        super().__init__(message, code="PERMIT_API_ERROR", details=error_details)
        self.status_code = status_code


class AuthenticationError(PermitAPIError):
    """The Permit API rejected the API key (401/403)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=status_code, details=details)
        self.code = "AUTHENTICATION_ERROR"


class MalformedResponseError(PermitCLIError):
    """The Permit API returned data that cannot be interpreted."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="MALFORMED_RESPONSE", details=details)


class IntrospectionError(PermitCLIError):
    """Error while reading metadata from a Trino cluster."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INTROSPECTION_ERROR", details=details)
