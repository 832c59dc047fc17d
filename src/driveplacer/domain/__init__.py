"""Domain layer: errors, constants and schemas."""

from .errors import (
    DriveAppError,
    NotAuthenticatedError,
    ResolverDegradedError,
    UpstreamListingError,
    UpstreamWriteError,
    ValidationError,
)
from .schemas import (
    FolderNode,
    FolderRecord,
    FolderTree,
    PlacementDecision,
    UploadItem,
    UploadOutcome,
)

__all__ = [
    "DriveAppError",
    "NotAuthenticatedError",
    "ResolverDegradedError",
    "UpstreamListingError",
    "UpstreamWriteError",
    "ValidationError",
    "FolderNode",
    "FolderRecord",
    "FolderTree",
    "PlacementDecision",
    "UploadItem",
    "UploadOutcome",
]
