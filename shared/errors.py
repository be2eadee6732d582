"""
Shared error handling for the ZEDLY client gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ZedlyClientException(Exception):
    """Base exception for the ZEDLY client."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(ZedlyClientException):
    """Authentication-related errors."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class ValidationError(ZedlyClientException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ExternalServiceError(ZedlyClientException):
    """External service errors."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class StorageError(ZedlyClientException):
    """Credential storage errors."""

    def __init__(self, message: str = "Credential storage error", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORAGE_ERROR", message, details)


class RenewalError(ZedlyClientException):
    """Access credential could not be renewed."""

    def __init__(self, code: str = "RENEWAL_ERROR", message: str = "Credential renewal failed",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class NoRefreshCredentialError(RenewalError):
    """No refresh credential is stored."""

    def __init__(self, message: str = "No refresh token available", details: Optional[Dict[str, Any]] = None):
        super().__init__("NO_REFRESH_CREDENTIAL", message, details)


class RenewalRejectedError(RenewalError):
    """The refresh endpoint refused the refresh credential."""

    def __init__(self, message: str = "Token refresh failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("RENEWAL_REJECTED", message, details)


class RenewalUnavailableError(RenewalError):
    """The refresh endpoint could not be reached."""

    def __init__(self, message: str = "Refresh endpoint unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("RENEWAL_UNAVAILABLE", message, details)
