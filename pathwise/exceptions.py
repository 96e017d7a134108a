"""
Custom exceptions for the Pathwise application.
"""


class PathwiseError(Exception):
    """Base exception for all Pathwise-related errors."""
    pass


class ValidationError(PathwiseError):
    """Raised when validation fails for a node or operation."""
    pass


class NotFoundError(PathwiseError):
    """Raised when a requested node is not found."""
    pass


class InvalidOperationError(PathwiseError):
    """Raised when an operation is not allowed on the target node."""
    pass


class DuplicateError(PathwiseError):
    """Raised when a document contains the same id more than once."""
    pass


class ConfigurationError(PathwiseError):
    """Raised when there's a configuration or setup issue."""
    pass


class StorageError(PathwiseError):
    """Raised when a document file can't be read or written."""
    pass
