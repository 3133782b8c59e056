"""Core exceptions for LeakGuard."""


class LeakGuardError(Exception):
    """Base exception for all LeakGuard errors."""

    def __init__(self, message: str, details: dict = None):
        """Initialize the exception."""
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(LeakGuardError):
    """Raised when configuration is invalid."""

    pass


class PatternError(ConfigurationError):
    """Raised when a detection pattern is missing or malformed."""

    pass


class ScanError(LeakGuardError):
    """Raised when scanning fails."""

    pass


class SourceMapError(LeakGuardError):
    """Raised when a source map cannot be fetched or parsed."""

    pass


class FingerprintError(LeakGuardError):
    """Raised when a secret fingerprint cannot be computed."""

    pass


class RepositoryError(LeakGuardError):
    """Raised when findings storage operations fail."""

    pass
