"""In-flight request registry — at most one outstanding fetch per key.

Keys are directory paths for listings and download URLs for file fetches.
A second caller for a busy key is told to skip; it is neither queued nor
merged with the running request.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class InFlightRegistry:
    """Thread-safe set of keys with a request currently outstanding."""

    def __init__(self) -> None:
        self._keys: set[str] = set()
        self._lock = threading.Lock()

    def try_acquire(self, key: str) -> bool:
        """Claim *key*; ``False`` if another request already holds it."""
        with self._lock:
            if key in self._keys:
                logger.debug("Request already in flight for %r, skipping", key)
                return False
            self._keys.add(key)
            return True

    def release(self, key: str) -> None:
        """Give *key* back.  Releasing a key that is not held is a no-op."""
        with self._lock:
            self._keys.discard(key)

    def is_in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    @contextmanager
    def claim(self, key: str) -> Iterator[bool]:
        """Yield whether *key* was acquired and always release it afterwards.

        The release runs on success, failure and cancellation alike.
        """
        acquired = self.try_acquire(key)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(key)
