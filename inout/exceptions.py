"""Exception classes for InOut."""


class InOutError(Exception):
    """Base exception for InOut."""
    pass


class ConfigError(InOutError):
    """Configuration-related errors."""
    pass


class ProviderError(InOutError):
    """Errors raised by the persistence/auth provider."""
    pass


class ValidationError(InOutError):
    """A record failed validation at the provider boundary."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}
