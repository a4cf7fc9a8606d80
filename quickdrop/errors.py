"""
Exception types raised by the QuickDrop core.
"""


class QuickDropError(Exception):
    """Base class for QuickDrop errors"""


class UploadError(QuickDropError):
    """Upload rejected: no content, or the bytes could not be stored"""


class NotFound(QuickDropError):
    """Token unknown, already consumed or expired, or blob missing on disk"""


class StorageError(QuickDropError):
    """Disk I/O failure while saving or opening a blob"""
