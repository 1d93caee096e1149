"""Custom exceptions for clearer error handling across the package."""


class BetaStreamError(Exception):
    """Base exception for all package-specific errors."""


class InvalidArgumentError(BetaStreamError, ValueError):
    """Raised when an indicator or window is constructed or fed with invalid input."""


class UnknownExchangeError(BetaStreamError, LookupError):
    """Raised when no exchange timezone is registered for a symbol."""


class DataProviderError(BetaStreamError):
    """Raised when bar data cannot be loaded."""


class ConfigError(BetaStreamError, ValueError):
    """Raised when environment or CLI configuration is invalid."""
