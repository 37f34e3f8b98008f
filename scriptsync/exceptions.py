from typing import Dict, Optional


class ScriptSyncException(Exception):
    """Base exception for the ScriptSync worker."""

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ProviderException(ScriptSyncException):
    """Raised when an external provider (model, storage) fails."""
    pass


class ConfigurationException(ScriptSyncException):
    """Raised when configuration is invalid."""
    pass


class ValidationException(ScriptSyncException):
    """Raised when input or model output fails validation."""
    pass


class AuthenticationException(ScriptSyncException):
    """Raised when a provider rejects our credentials or permissions."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, error_code=kwargs.pop("error_code", "AUTH_ERROR"), **kwargs)
        self.status_code = status_code


class ResourceNotFoundException(ScriptSyncException):
    """Raised when requested resource is not found."""
    pass


class DurationCapExceededException(ScriptSyncException):
    """Raised when a clip would push a user past the processed-video cap."""
    pass


class FrameExtractionException(ScriptSyncException):
    """Raised when the video tool cannot probe or extract frames."""
    pass


class DatabaseException(ScriptSyncException):
    """Raised when a relational store read or write fails."""
    pass


class TaggingException(ScriptSyncException):
    """Raised when a clip cannot be tagged at all (e.g. no frames)."""
    pass
