"""
Registry - the in-memory token -> Entry map.

The registry is the only shared mutable state in the process. All access goes
through a read/write lock that is held only around the dict operation itself,
never while a blob is being read, written or deleted.
"""

import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path


def new_token():
    """Generate an unguessable download token"""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Entry:
    """One active upload"""

    token: str
    location: Path
    created_at: float
    filename: str = ''
    size: int = 0

    def age(self, now):
        return now - self.created_at


class ReadWriteLock:
    """Shared lock for readers, exclusive lock for writers.

    Writers are preferred: once a writer is waiting, new readers queue behind
    it so a steady stream of status polls cannot starve uploads or removals.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Registry:
    """Token-indexed map of active uploads"""

    def __init__(self, clock=time.time):
        self.clock = clock
        self._entries = {}
        self._claimed = set()
        self._lock = ReadWriteLock()

    def insert(self, location, filename='', size=0):
        """Store a new entry under a freshly generated token"""
        token = new_token()
        entry = Entry(token=token, location=Path(location), created_at=self.clock(),
                      filename=filename, size=size)
        with self._lock.write_locked():
            self._entries[token] = entry
        return entry

    def lookup(self, token):
        """Return the entry for token, or None"""
        with self._lock.read_locked():
            return self._entries.get(token)

    def claim(self, token):
        """Mark an entry as picked up for download.

        Returns the entry to exactly one caller; later claims on the same token
        get None until the claim is released.
        """
        with self._lock.write_locked():
            entry = self._entries.get(token)
            if entry is None or token in self._claimed:
                return None
            self._claimed.add(token)
            return entry

    def release(self, token):
        """Drop a claim without removing the entry"""
        with self._lock.write_locked():
            self._claimed.discard(token)

    def remove(self, token, skip_claimed=False):
        """Atomically remove and return the entry for token, or None.

        Of several racing calls for the same token only one gets the entry.
        With skip_claimed, an entry picked up for download is left in place.
        """
        with self._lock.write_locked():
            if skip_claimed and token in self._claimed:
                return None
            self._claimed.discard(token)
            return self._entries.pop(token, None)

    def snapshot(self):
        """Copy of the current (token, entry) pairs"""
        with self._lock.read_locked():
            return list(self._entries.items())

    def is_claimed(self, token):
        with self._lock.read_locked():
            return token in self._claimed

    def __len__(self):
        with self._lock.read_locked():
            return len(self._entries)

    def __contains__(self, token):
        return self.lookup(token) is not None
