"""
Thread-safe in-memory cache of decoded secret records, keyed by path.

The cache sits between placeholder lookups and VaultClient: each secret path
is fetched from Vault once and every field lookup on that path is answered
from memory afterwards.

Properties:
    - Thread-safe with threading.Lock around the backing dict
    - In-memory only (NO disk persistence)
    - No TTL and no eviction: entries live as long as the cache does
    - First writer wins: two threads racing on a cold path may both fetch,
      but only one record is stored and both callers get that record

Example Usage:
    >>> cache = SecretCache(fetch=client.get_secret)
    >>> cache.get("myapp/database")["password"]
    '...'
    >>> cache.get("myapp/database")  # served from memory, no HTTP call
"""

import logging
import threading
from collections.abc import Callable

from libs.vault_client.response import SecretRecord

logger = logging.getLogger(__name__)


class SecretCache:
    """
    Memoizes SecretRecords by path.

    Attributes:
        _records: Secret path → record
        _fetch: Loader for cache misses (normally VaultClient.get_secret)
        _lock: Guards _records

    Thread Safety:
        All public methods can be called from multiple threads without
        external synchronization. The fetch runs outside the lock so that a
        slow Vault read for one path never blocks hits on other paths.
    """

    def __init__(self, fetch: Callable[[str], SecretRecord]) -> None:
        self._records: dict[str, SecretRecord] = {}
        self._fetch = fetch
        self._lock = threading.Lock()

    def get(self, path: str) -> SecretRecord:
        """
        Return the record for a path, fetching it on first access.

        Empty records (undecodable or empty secrets) are returned but not
        stored, so a later lookup tries Vault again.

        Raises:
            Whatever the fetch raises (e.g. TransportError); nothing is stored
        """
        with self._lock:
            record = self._records.get(path)
        if record is not None:
            logger.debug("Secret cache hit", extra={"secret_path": path})
            return record

        logger.debug("Secret cache miss", extra={"secret_path": path})
        fetched = self._fetch(path)
        if not fetched:
            return fetched

        with self._lock:
            return self._records.setdefault(path, fetched)

    def clear(self) -> None:
        """Drop every cached record (host lifecycle hook, e.g. on reload)."""
        with self._lock:
            self._records.clear()

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
