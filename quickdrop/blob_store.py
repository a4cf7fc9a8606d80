"""
Blob store - uploaded bytes on disk.

Every blob gets a fresh random file name inside the storage directory, so two
concurrent uploads can never write to the same file. The store has no policy of
its own: the lifecycle controller decides when a blob is saved and destroyed.
"""

import logging
import os
import uuid
from pathlib import Path

from quickdrop.config import CHUNK_SIZE
from quickdrop.errors import NotFound, StorageError

logger = logging.getLogger(__name__)


def sanitize_filename(filename):
    """Strip path components and traversal sequences from a client filename"""
    filename = os.path.basename(filename.replace('\\', '/'))
    filename = filename.replace('..', '').replace('/', '')
    # Control characters would end up in the Content-Disposition header
    filename = ''.join(ch for ch in filename if ch.isprintable())
    return filename.strip()


def safe_suffix(filename):
    """Return the extension of a client filename, or '' if it looks unsafe"""
    suffix = os.path.splitext(sanitize_filename(filename))[1]
    if len(suffix) > 16 or not suffix[1:].isalnum():
        return ''
    return suffix.lower()


class BlobStore:
    """Save, open and delete uploaded files under one root directory"""

    def __init__(self, root, chunk_size=CHUNK_SIZE):
        self.root = Path(root)
        self.chunk_size = chunk_size

    def save(self, source, suffix='', max_bytes=None):
        """Copy a readable stream to a new blob, returning (path, size)"""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f'Failed to create upload dir {self.root}: {e}') from e

        file_path = self.root / f'{uuid.uuid4().hex}{suffix}'
        total_written = 0
        try:
            # 'xb': never overwrite an existing blob
            with open(file_path, 'xb') as f:
                while True:
                    chunk = source.read(self.chunk_size)
                    if not chunk:
                        break
                    total_written += len(chunk)
                    if max_bytes is not None and total_written > max_bytes:
                        raise ValueError(
                            f'File size exceeds {max_bytes / (1024 * 1024):.0f} MB limit')
                    f.write(chunk)
        except OSError as e:
            self._discard(file_path)
            raise StorageError(f'Failed to save file: {e}') from e
        except BaseException:
            self._discard(file_path)
            raise

        logger.debug(f'[BLOB] Saved {total_written} bytes to {file_path}')
        return file_path, total_written

    def open(self, location):
        """Open a blob for binary reading"""
        try:
            return open(location, 'rb')
        except FileNotFoundError as e:
            raise NotFound(f'Blob missing on disk: {location}') from e
        except OSError as e:
            raise StorageError(f'Failed to open {location}: {e}') from e

    def size(self, location):
        return Path(location).stat().st_size

    def delete(self, location):
        """Best-effort removal; returns True only if this call removed the file"""
        try:
            Path(location).unlink()
        except FileNotFoundError:
            # Already reclaimed by a racing cleanup
            return False
        except OSError as e:
            logger.warning(f'[BLOB] Error removing {location}: {e}')
            return False
        logger.debug(f'[BLOB] Deleted {location}')
        return True

    def _discard(self, file_path):
        """Clean up a partial file after a failed save"""
        try:
            if file_path.exists():
                file_path.unlink()
        except OSError as e:
            logger.warning(f'[BLOB] Could not remove partial file {file_path}: {e}')
