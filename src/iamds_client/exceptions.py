"""
Exception hierarchy for the IAMDS client library.

Failures fall into three groups:

- caller errors detected before anything is sent (``InvalidArgumentError``,
  ``MissingPathParameterError``)
- failed API calls (``ApiCallFailedError`` and the translated ``DomainError``
  subclasses keyed by HTTP status code)
- dispatch problems (``RequestCancelledError``, ``NetworkError``,
  ``MulticastHookUnsupportedError``)
"""

from typing import Any, Dict, Optional


class IamdsClientError(Exception):
    """
    Base exception for all IAMDS client errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if applicable)
        error_code: Error code reported by the server (if any)
        details: Additional error details from the response
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.insert(0, f"[{self.error_code}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code}, "
            f"error_code={self.error_code!r})"
        )


# =============================================================================
# Caller Errors (raised before dispatch)
# =============================================================================


class InvalidArgumentError(IamdsClientError):
    """
    A required parameter was not supplied.

    Raised synchronously, before any request is built, so nothing is
    sent over the wire.
    """

    def __init__(
        self,
        parameter_name: str,
        operation: str,
        *,
        message: Optional[str] = None,
    ):
        super().__init__(
            message
            or f"Missing required parameter '{parameter_name}' when calling {operation}",
            details={"parameter": parameter_name, "operation": operation},
        )
        self.parameter_name = parameter_name
        self.operation = operation


class MissingPathParameterError(IamdsClientError):
    """A path template placeholder has no matching path parameter."""

    def __init__(self, token: str, template: str):
        super().__init__(
            f"No value for path placeholder '{{{token}}}' in '{template}'",
            details={"token": token, "template": template},
        )
        self.token = token
        self.template = template


# =============================================================================
# Failed API Calls
# =============================================================================


class ApiCallFailedError(IamdsClientError):
    """
    The API answered with a non-2xx status.

    Raised as-is when no exception translator is installed or the
    translator declines to produce an error.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: int,
        body: str = "",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"API call failed: {body}" if body else "API call failed"
        super().__init__(
            message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )
        self.body = body


class DomainError(ApiCallFailedError):
    """
    A failed call translated into operation-specific semantics.

    Attributes:
        source_operation: Name of the operation that failed (e.g. "PatchTenant")
    """

    default_message = "API error"
    default_status_code = 400

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        source_operation: Optional[str] = None,
        body: str = "",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message or self.default_message,
            status_code=status_code or self.default_status_code,
            body=body,
            error_code=error_code,
            details=details,
        )
        self.source_operation = source_operation


class ValidationError(DomainError):
    """The request was rejected as malformed (400)."""

    default_message = "Validation error"
    default_status_code = 400


class AuthenticationError(DomainError):
    """
    Authentication failed or credentials are invalid (401).

    Also raised when an OAuth2 token cannot be obtained.
    """

    default_message = "Authentication required"
    default_status_code = 401


class AuthorizationError(DomainError):
    """The credentials lack the scopes needed for the operation (403)."""

    default_message = "Access denied"
    default_status_code = 403


class NotFoundError(DomainError):
    """The addressed resource does not exist (404)."""

    default_message = "Resource not found"
    default_status_code = 404


class ConflictError(DomainError):
    """The request conflicts with the current state of the resource (409)."""

    default_message = "Resource conflict"
    default_status_code = 409


class PreconditionFailedError(DomainError):
    """
    An ``If-Match`` guard did not hold (412).

    The ETag sent with the request no longer matches the resource; fetch
    it again before retrying the update.
    """

    default_message = "Precondition failed"
    default_status_code = 412


class RateLimitError(DomainError):
    """
    Rate limit exceeded (429).

    The retry_after attribute indicates how many seconds to wait.
    """

    default_message = "Rate limit exceeded"
    default_status_code = 429

    def __init__(self, *args: Any, retry_after: Optional[int] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.retry_after = retry_after


class ServerError(DomainError):
    """Server-side error occurred (5xx)."""

    default_message = "Server error"
    default_status_code = 500


class ServiceUnavailableError(ServerError):
    """The service is temporarily unavailable (503)."""

    default_message = "Service temporarily unavailable"
    default_status_code = 503


# =============================================================================
# Dispatch Errors
# =============================================================================


class RequestCancelledError(IamdsClientError):
    """The call's cancellation token fired before a result was produced."""

    def __init__(self, message: str = "Request was cancelled", *, operation: Optional[str] = None):
        super().__init__(message, details={"operation": operation} if operation else None)
        self.operation = operation


class MulticastHookUnsupportedError(IamdsClientError):
    """A second exception translator was installed without clearing the first."""

    def __init__(
        self,
        message: str = "An exception translator is already installed; clear it first",
    ):
        super().__init__(message)


class NetworkError(IamdsClientError):
    """
    Network-level error occurred.

    Raised when there's a connection problem, DNS failure, or other
    network-related issues.
    """

    def __init__(
        self,
        message: str = "Network error",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class TimeoutError(NetworkError):
    """Request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class ConnectionError(NetworkError):
    """Failed to establish connection to the server."""

    def __init__(
        self,
        message: str = "Failed to connect to server",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# =============================================================================
# Exception Mapping
# =============================================================================

# Map HTTP status codes to exception classes
STATUS_CODE_EXCEPTIONS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
    429: RateLimitError,
    500: ServerError,
    502: ServerError,
    503: ServiceUnavailableError,
    504: ServerError,
}


def exception_from_response(
    status_code: int,
    message: str,
    *,
    source_operation: Optional[str] = None,
    body: str = "",
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> DomainError:
    """
    Create an appropriate exception from an HTTP response.

    Args:
        status_code: HTTP status code
        message: Error message
        source_operation: Operation that produced the response
        body: Raw response body
        error_code: Server error code
        details: Additional error details

    Returns:
        Appropriate DomainError subclass
    """
    exception_class = STATUS_CODE_EXCEPTIONS.get(status_code)
    if exception_class is None:
        exception_class = ServerError if status_code >= 500 else DomainError
    return exception_class(
        message,
        status_code=status_code,
        source_operation=source_operation,
        body=body,
        error_code=error_code,
        details=details,
    )
