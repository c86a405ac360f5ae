import threading
from typing import Dict, Optional
from contextlib import contextmanager
import logging

from timeport.core.config import settings
from timeport.domain.imports.exceptions import ImportInProgress

logger = logging.getLogger(__name__)


class ImportLockManager:
    """
    Named, fail-fast locks used to serialize imports per organization.

    Each key gets its own lock, so imports for different organizations never
    contend. A second attempt on a held key does not queue: it waits at most
    ``wait_seconds`` and then reports failure to the caller.

    Locks are kept for the life of the manager, one per organization that
    has imported, so every caller of a key always shares the same Lock.
    """

    def __init__(self, wait_seconds: Optional[float] = None):
        self.wait_seconds = settings.import_lock_wait_seconds if wait_seconds is None else wait_seconds
        self._locks: Dict[str, threading.Lock] = {}
        self._global_lock = threading.Lock()

    def get_lock(self, key: str) -> threading.Lock:
        """Get or create the lock for a key."""
        with self._global_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def try_acquire(self, key: str) -> bool:
        lock = self.get_lock(key)
        if self.wait_seconds > 0:
            acquired = lock.acquire(timeout=self.wait_seconds)
        else:
            acquired = lock.acquire(blocking=False)
        if acquired:
            logger.info(f"Acquired import lock '{key}'")
        else:
            logger.info(f"Import lock '{key}' is held by another import")
        return acquired

    def release(self, key: str) -> None:
        self.get_lock(key).release()
        logger.info(f"Released import lock '{key}'")

    def is_locked(self, key: str) -> bool:
        return self.get_lock(key).locked()

    @contextmanager
    def hold(self, key: str):
        """Hold the lock for ``key`` or raise ImportInProgress immediately."""
        if not self.try_acquire(key):
            raise ImportInProgress(key)
        try:
            yield
        finally:
            self.release(key)


# Process-wide instance used by the default service wiring.
import_locks = ImportLockManager()
