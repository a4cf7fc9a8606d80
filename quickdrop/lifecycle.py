"""
Lifecycle controller - upload, single-use download, status and expiry.

Each token is ACTIVE from upload until it is destroyed, either by a download
attempt or by expiry. Destruction always removes the registry entry first and
deletes the blob second, so a lookup can never see an entry whose bytes are
already gone.
"""

import logging
from contextlib import contextmanager
from enum import Enum

from quickdrop.blob_store import safe_suffix, sanitize_filename
from quickdrop.errors import NotFound, StorageError, UploadError

logger = logging.getLogger(__name__)


class Status(Enum):
    EXISTS = 'exists'
    NOT_FOUND = 'not_found'


class Lifecycle:
    """Destroy-on-download and expire-after-TTL policies"""

    def __init__(self, registry, blobs, ttl_seconds, max_size_bytes=None):
        self.registry = registry
        self.blobs = blobs
        self.ttl_seconds = ttl_seconds
        self.max_size_bytes = max_size_bytes

    def upload(self, source, filename=''):
        """Store the stream and register it; returns the new Entry"""
        try:
            location, size = self.blobs.save(source, suffix=safe_suffix(filename),
                                             max_bytes=self.max_size_bytes)
        except StorageError as e:
            raise UploadError(str(e)) from e
        except ValueError as e:
            raise UploadError(str(e)) from e

        if size == 0:
            self.blobs.delete(location)
            raise UploadError('Empty file')

        entry = self.registry.insert(location, filename=sanitize_filename(filename), size=size)
        logger.info(f'[UPLOAD] {entry.filename or location.name} ({size} bytes) -> token {entry.token}')
        return entry

    @contextmanager
    def download(self, token):
        """Open the blob for token and destroy the token afterwards.

        Yields (entry, stream). Leaving the block by any route, including a
        client disconnect raising inside it, consumes the token.
        """
        entry = self.registry.claim(token)
        if entry is None:
            raise NotFound(token)

        try:
            stream = self.blobs.open(entry.location)
        except NotFound:
            logger.warning(f'[DOWNLOAD] Blob for token {token} missing on disk')
            self.destroy(token)
            raise
        except StorageError:
            self.registry.release(token)
            raise

        try:
            yield entry, stream
        finally:
            stream.close()
            self.destroy(token)

    def status(self, token):
        if self.registry.lookup(token) is None:
            return Status.NOT_FOUND
        return Status.EXISTS

    def destroy(self, token, skip_claimed=False):
        """Remove the entry, then delete its blob; True if this call removed it"""
        entry = self.registry.remove(token, skip_claimed=skip_claimed)
        if entry is None:
            return False
        self.blobs.delete(entry.location)
        logger.info(f'[DESTROY] Destroyed file for token: {token}')
        return True

    def expire(self, now=None):
        """Destroy every entry older than the TTL; returns the expired tokens"""
        if now is None:
            now = self.registry.clock()
        expired = []
        for token, entry in self.registry.snapshot():
            if entry.age(now) <= self.ttl_seconds:
                continue
            try:
                # Entries already picked up for download are left to the download
                if self.destroy(token, skip_claimed=True):
                    expired.append(token)
                    logger.info(f'[GC] Removed expired token {token}')
            except Exception:
                logger.exception(f'[GC] Failed to expire token {token}')
        return expired

    def destroy_all(self):
        """Destroy every active entry; used at shutdown"""
        count = 0
        for token, _ in self.registry.snapshot():
            if self.destroy(token):
                count += 1
        if count:
            logger.info(f'[DESTROY] Cleaned up {count} pending file(s)')
        return count
