"""
QuickDrop - ephemeral, single-use file relay.

Upload a file, share the link or QR code, and the file is destroyed as soon as
one recipient has downloaded it.
"""

from quickdrop.errors import NotFound, QuickDropError, StorageError, UploadError

__version__ = '1.0.0'

__all__ = ['NotFound', 'QuickDropError', 'StorageError', 'UploadError', '__version__']
