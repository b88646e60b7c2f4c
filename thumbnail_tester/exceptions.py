"""
Exception classes for the thumbnail tester.

Centralized location for all custom exceptions to avoid circular imports.
"""


class ThumbnailTesterError(Exception):
    """Base exception for all thumbnail tester errors."""
    pass


class InvalidRequestError(ThumbnailTesterError):
    """Raised when a request shape is unrecognized or ambiguous."""
    pass


class InvalidTestError(ThumbnailTesterError):
    """Raised when a test definition is missing its id or its videos."""
    pass


class ImageUploadError(ThumbnailTesterError):
    """Raised when a thumbnail could not be stored in the blob store."""

    def __init__(self, index: int, reason: str):
        self.index: int = index
        self.reason: str = reason
        super().__init__(f"Failed to upload image {index + 1}: {reason}")


class DuplicateTestError(ThumbnailTesterError):
    """Raised when creating a test whose id (or results table) is taken."""
    pass


class NotFoundError(ThumbnailTesterError):
    """Raised when a test id does not resolve to a stored test."""
    pass


class StoreError(ThumbnailTesterError):
    """Raised when an underlying persistence call fails."""
    pass


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""
    pass
