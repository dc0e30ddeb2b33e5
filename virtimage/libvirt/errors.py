"""Shared exception definitions for image and volume helpers."""

from __future__ import annotations

from typing import Optional


class StorageError(RuntimeError):
    """Base error for storage-related failures."""


class SourceError(StorageError):
    """Raised when an image source cannot be opened or sized."""

    def __init__(self, uri: str, reason: str):
        super().__init__(f"Image source '{uri}' unusable: {reason}")
        self.uri = uri
        self.reason = reason


class UnsupportedSchemeError(SourceError):
    def __init__(self, uri: str, scheme: str):
        super().__init__(uri, f"unknown scheme '{scheme}'")
        self.scheme = scheme


class PoolLookupError(StorageError):
    def __init__(self, pool: str, cause: object = None):
        message = f"Storage pool '{pool}' not found"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.pool = pool


class VolumeLookupError(StorageError):
    def __init__(self, pool: str, volume: str, cause: object = None):
        message = f"Volume '{volume}' not found in pool '{pool}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.pool = pool
        self.volume = volume


class VolumePathError(StorageError):
    def __init__(self, pool: str, volume: str, cause: object = None):
        super().__init__(
            f"Failed to resolve path of volume '{volume}' in pool '{pool}': {cause}"
        )
        self.pool = pool
        self.volume = volume


class VolumeCreateError(StorageError):
    def __init__(self, pool: str, volume: str, cause: object = None):
        super().__init__(f"Failed to create volume '{volume}' in pool '{pool}': {cause}")
        self.pool = pool
        self.volume = volume


class VolumeUploadError(StorageError):
    def __init__(
        self,
        pool: str,
        volume: str,
        cause: object = None,
        cleanup_error: Optional[BaseException] = None,
    ):
        message = f"Failed to upload content to volume '{volume}' in pool '{pool}': {cause}"
        if cleanup_error is not None:
            message = f"{message} (cleanup failed: {cleanup_error})"
        super().__init__(message)
        self.pool = pool
        self.volume = volume
        self.cleanup_error = cleanup_error


class VolumeDeleteError(StorageError):
    def __init__(self, pool: str, volume: str, cause: object = None):
        super().__init__(f"Failed to delete volume '{volume}' in pool '{pool}': {cause}")
        self.pool = pool
        self.volume = volume


class PayloadTooLargeError(StorageError):
    def __init__(self, volume: str, limit: int):
        super().__init__(f"ISO payload for volume '{volume}' is bigger than {limit} bytes")
        self.volume = volume
        self.limit = limit


__all__ = [
    "StorageError",
    "SourceError",
    "UnsupportedSchemeError",
    "PoolLookupError",
    "VolumeLookupError",
    "VolumePathError",
    "VolumeCreateError",
    "VolumeUploadError",
    "VolumeDeleteError",
    "PayloadTooLargeError",
]
