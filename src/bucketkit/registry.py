"""Registry of open buckets.

The registry is the single source of truth for whether a bucket is open.
All operations take one lock, so concurrent opens of the same name cannot
both succeed and no caller ever sees a half-registered config.
"""

import logging
import threading

from bucketkit.config import BucketConfig
from bucketkit.errors import BucketAlreadyExists, BucketNotFound

logger = logging.getLogger(__name__)


class BucketRegistry:
    """Maps an open bucket name to its resolved configuration.

    At most one configuration exists per bucket name at a time.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, BucketConfig] = {}
        self._lock = threading.Lock()

    def open(self, name: str, config: BucketConfig) -> None:
        """Register a bucket if no live entry exists for the name.

        Raises:
            BucketAlreadyExists: If the bucket is already registered.
        """
        with self._lock:
            if name in self._buckets:
                raise BucketAlreadyExists(name)
            self._buckets[name] = config
        logger.debug("Registered bucket %s", name)

    def lookup(self, name: str) -> BucketConfig:
        """Return the configuration of an open bucket.

        Raises:
            BucketNotFound: If the bucket is not registered.
        """
        with self._lock:
            config = self._buckets.get(name)
        if config is None:
            raise BucketNotFound(name)
        return config

    def close(self, name: str) -> BucketConfig:
        """Remove a bucket and return its configuration.

        The caller releases the connection pool named by the returned config.

        Raises:
            BucketNotFound: If the bucket is not registered.
        """
        with self._lock:
            config = self._buckets.pop(name, None)
        if config is None:
            raise BucketNotFound(name)
        logger.debug("Unregistered bucket %s", name)
        return config

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._buckets)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._buckets

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
