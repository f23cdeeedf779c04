"""
Memcache Service - Core Error Types

Defines the exception hierarchy for the memcache service provider.
All exceptions raised by this package inherit from ServiceError.

Errors raised by the underlying cache clients (pymemcache, custom clients)
are never wrapped; they reach the caller unchanged.
"""

from typing import Any


class ServiceError(Exception):
    """Base exception for all memcache service errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ServiceError):
    """Raised when configuration is invalid or a cache client cannot be resolved."""

    pass


class ContainerError(ServiceError):
    """Base exception for service container errors."""

    pass


class UnknownServiceError(ContainerError, KeyError):
    """Raised when a key is not registered in the service container."""

    def __init__(self, key: str):
        super().__init__(f'Service "{key}" is not defined.', {"key": key})
        self.key = key

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class FrozenServiceError(ContainerError):
    """Raised when overriding a service that has already been built."""

    def __init__(self, key: str):
        super().__init__(f'Cannot override frozen service "{key}".', {"key": key})
        self.key = key
