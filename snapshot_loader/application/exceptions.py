"""
Core business exceptions for the snapshot loader application.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains.
"""


class LoaderError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(LoaderError):
    """Raised for errors related to application configuration."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(LoaderError):
    """Base class for errors related to external systems (network, storage)."""
    pass


class FetchError(InfrastructureError):
    """
    Raised when a single snapshot download attempt fails.

    This is the only error handled locally: the locator moves on to the
    previous day when it sees one.
    """
    pass


class PersistenceError(InfrastructureError):
    """Raised when the document store rejects a connect, drop or insert."""
    pass


# --- Domain/Business Logic Errors ---

class DomainError(LoaderError):
    """Base class for errors related to business logic failures."""
    pass


class NotFoundError(DomainError):
    """Raised when no snapshot exists within the lookback window."""

    def __init__(self, max_lookback_days: int):
        super().__init__(
            f"Unable to find the latest csv file for the last "
            f"{max_lookback_days} days"
        )
        self.max_lookback_days = max_lookback_days


class MalformedInputError(DomainError):
    """Raised when a snapshot cannot be parsed (e.g., empty, missing columns)."""
    pass


class EmptySnapshotError(DomainError):
    """Raised when a snapshot has a header but no data rows."""
    pass


class InternalConsistencyError(DomainError):
    """Raised when a row refers to a country with no accumulator."""
    pass
