"""
Reaper - background thread expiring uploads nobody picked up.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class Reaper:
    """Periodically sweeps the lifecycle controller for expired entries"""

    def __init__(self, lifecycle, interval):
        self.lifecycle = lifecycle
        self.interval = interval
        self._stop = threading.Event()
        self._thread = None

    def start(self):
        """Start the cleanup thread"""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._cleanup_loop, name='quickdrop-reaper',
                                        daemon=True)
        self._thread.start()

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def sweep(self):
        """Run one expiry pass"""
        expired = self.lifecycle.expire()
        if expired:
            logger.info(f'[GC] Expired {len(expired)} file(s)')
        return expired

    def _cleanup_loop(self):
        """Background thread for automatic cleanup"""
        while not self._stop.wait(self.interval):
            try:
                self.sweep()
            except Exception:
                logger.exception('[GC] Cleanup error')
