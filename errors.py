class EngineError(Exception):
    """Base class for readiness engine failures."""


class ValidationError(EngineError, ValueError):
    """Raised for malformed input before anything is written."""


class NotFoundError(EngineError, LookupError):
    """Raised when a referenced session, protocol or daily record is missing."""


class UnauthorizedError(EngineError):
    """Raised when no caller identity was supplied."""
