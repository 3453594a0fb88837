"""Exceptions for the short links service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
Not-found outcomes are return values, not exceptions.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class ValidationError(ServiceError):
    """Input failed shape or format checks (URL, short code, owner, patch)."""
    pass


class ConflictError(ServiceError):
    """The requested short code is already in use."""
    pass


class StorageError(ServiceError):
    """Persistence failed, or no free short code was found within the attempt cap."""
    pass
