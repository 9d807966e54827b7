from typing import Optional, Dict, Any


class CloudHandleException(Exception):
    """Base exception for all resource handler errors."""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ResourceNotFoundError(CloudHandleException):
    """Raised when a Get/Delete target does not exist in the handler's scope."""
    def __init__(self, message: str, code: str = "not_found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class ResourceConflictError(CloudHandleException):
    """Raised when a Create collides with an existing resource name."""
    def __init__(self, message: str, code: str = "conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class BackendUnavailableError(CloudHandleException):
    """Raised when a provider client call fails (network, auth, quota)."""
    def __init__(self, message: str, code: str = "backend_unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class OperationTimeoutError(BackendUnavailableError):
    """Raised when a provider operation does not settle within its bound."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="timeout", details=details)


class MappingFailureError(CloudHandleException):
    """Raised when a raw provider response cannot be mapped to the common model."""
    def __init__(self, message: str, code: str = "mapping_failure", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class ConfigurationError(CloudHandleException):
    """Raised when a handler or driver is configured with invalid scope."""
    def __init__(self, message: str, code: str = "config_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)
