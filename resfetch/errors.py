"""
Custom exception classes for resfetch.
"""

from typing import Optional


class ResfetchError(Exception):
    """Base exception class for resfetch errors."""
    pass


class ConfigurationError(ResfetchError):
    """Raised when required configuration is missing or invalid."""
    pass


class RetrievalError(ResfetchError):
    """Raised when downloading the remote resource fails."""
    pass


class UnsupportedFormatError(ResfetchError):
    """Raised when the downloaded file is not a recognized compressed tar."""
    pass


class ExtractionError(ResfetchError):
    """Raised when writing extracted entries to local storage fails."""
    pass


class ArchiveFormatError(ExtractionError):
    """Raised when the compression stream or tar structure is malformed."""
    pass


class PathTraversalError(ResfetchError):
    """Raised when an archive entry resolves outside its extraction root."""
    pass


class UnsafeEntryError(PathTraversalError):
    """Raised for link and device entries, which are never materialized."""
    pass


class StagingError(ResfetchError):
    """Raised when publishing the extracted tree to its destination fails."""
    pass


class CorruptedRegistryError(ResfetchError):
    """Raised when the resource registry JSON file is corrupted."""
    pass


class PipelineError(ResfetchError):
    """Terminal failure of a pipeline run, wrapping the failing stage's error."""

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to fetch resources from URL: {url}")
        self.url = url
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is not None:
            return f"{message} ({self.cause})"
        return message
