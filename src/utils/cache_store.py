"""
Key/value cache with per-entry expiry.

Stands in for the host's transient/object cache. Components receive a
CacheStore instance instead of reaching for a process-wide singleton, so
tests can hand them a fresh store with a controllable clock.

Usage:
    from utils.cache_store import MemoryCacheStore

    cache = MemoryCacheStore()
    cache.set("key", {"width": 10}, group="cloudflare_image_meta", ttl=3600)
    cache.get("key", group="cloudflare_image_meta")
"""

from abc import ABC, abstractmethod
import logging
import time

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """A value of None is never stored; get() returns None on a miss."""

    @abstractmethod
    def get(self, key, group=""):
        pass

    @abstractmethod
    def set(self, key, value, group="", ttl=0):
        pass

    @abstractmethod
    def delete(self, key, group=""):
        pass


class MemoryCacheStore(CacheStore):
    """
    In-process cache store.

    Entries are namespaced by group and expire ``ttl`` seconds after they
    were written. A ttl of 0 keeps the entry until it is deleted.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._entries = {}

    @staticmethod
    def _full_key(key, group):
        return f"{group}:{key}" if group else key

    def get(self, key, group=""):
        full_key = self._full_key(key, group)
        entry = self._entries.get(full_key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at and self._clock() >= expires_at:
            logger.debug(f"Cache entry expired: {full_key}")
            del self._entries[full_key]
            return None
        return value

    def set(self, key, value, group="", ttl=0):
        full_key = self._full_key(key, group)
        expires_at = self._clock() + ttl if ttl else 0
        self._entries[full_key] = (value, expires_at)
        logger.debug(f"Cache entry stored: {full_key} (ttl={ttl}s)")

    def delete(self, key, group=""):
        full_key = self._full_key(key, group)
        if self._entries.pop(full_key, None) is not None:
            logger.debug(f"Cache entry deleted: {full_key}")
