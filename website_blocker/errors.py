"""
Error taxonomy for the website blocker core.

Validation and permission errors are raised before any state changes.
I/O errors may leave the in-memory blocklist ahead of the hosts file; a
retry of the full save-and-sync sequence reconciles them.
"""

from __future__ import annotations


class BlockerError(Exception):
    """Base class for every error the core reports to the UI."""


class ValidationError(BlockerError, ValueError):
    pass


class InvalidFormatError(ValidationError):
    pass


class MissingHostError(ValidationError):
    pass


class PermissionDeniedError(BlockerError, PermissionError):
    def __init__(self, message: str = "Insufficient permissions. Please run as administrator."):
        super().__init__(message)


class SerializationError(BlockerError):
    pass


class StoreSaveError(BlockerError):
    pass


class SyncError(BlockerError):
    pass


class BackupFailedError(SyncError):
    pass


class DnsMarkerNotFoundError(BlockerError):
    pass
