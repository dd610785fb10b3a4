"""
Rolling error log for the Cloudflare Image field.

Failures that must not block a field save (download errors, unreadable
image headers) are kept here so the next admin page view can show them
once. Only the most recent entries are kept, and the whole buffer expires
an hour after the last write.
"""

import logging
import time
from typing import List

from config import Config
from model import ErrorLogEntry

logger = logging.getLogger(__name__)

LOG_PREFIX = "[Cloudflare Image]"


class ErrorLog:
    def __init__(self, cache, debug=False, sink=None, clock=time.time,
                 key=Config.ERROR_LOG_KEY, ttl=Config.ERROR_LOG_TTL, size=Config.ERROR_LOG_SIZE):
        self.cache = cache
        self.debug = debug
        self.sink = sink or logger
        self.clock = clock
        self.key = key
        self.ttl = ttl
        self.size = size

    def append(self, message):
        """
        Record a failure message.

        The buffer is read, extended and written back without a lock; under
        concurrent writes the last writer wins.
        """
        if self.debug:
            self._mirror(message)

        errors = list(self.cache.get(self.key) or [])
        errors.append({"message": message, "time": int(self.clock())})
        self.cache.set(self.key, errors[-self.size:], ttl=self.ttl)

    def drain(self) -> List[ErrorLogEntry]:
        """Return the buffered entries, oldest first, and clear the buffer."""
        errors = self.cache.get(self.key) or []
        if errors:
            self.cache.delete(self.key)
        return [ErrorLogEntry(e["message"], e["time"]) for e in errors]

    def _mirror(self, message):
        try:
            self.sink.error(f"{LOG_PREFIX} {message}")
        except Exception as e:
            logger.debug(f"Diagnostic sink failed: {e}")
