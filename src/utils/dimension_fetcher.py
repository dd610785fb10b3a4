"""
Dimension fetcher for the Cloudflare Image field.

Alternative to static variant derivation: attaches the real pixel width and
height of the stored image to the field value. Results are cached by an MD5
digest of the URL for a day. A failed download never blocks the save; the
error is logged and the value is returned as it came in.
"""

from urllib.parse import urlparse
from dataclasses import replace
import hashlib
import logging
import time

from config import Config
from exceptions import TransientFetchError
from model import DimensionMetadata
from utils.image_loader import ImageDimensionLoader
from utils.variant_resolver import DELIVERY_HOST

logger = logging.getLogger(__name__)


def is_fetchable_url(url) -> bool:
    """Well-formed http(s) URL that points at the Cloudflare delivery host."""
    if not url:
        return False
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return DELIVERY_HOST in url


def cache_key(url) -> str:
    return hashlib.md5(url.encode("utf-8")).hexdigest()


class DimensionFetcher:
    def __init__(self, cache, error_log, loader=None, clock=time.time,
                 group=Config.META_CACHE_GROUP, ttl=Config.META_CACHE_TTL):
        self.cache = cache
        self.error_log = error_log
        self.loader = loader or ImageDimensionLoader()
        self.clock = clock
        self.group = group
        self.ttl = ttl

    def resolve(self, value):
        """
        Attach dimension metadata to a field value.

        Args:
            value: ImageFieldValue being saved

        Returns:
            A copy of value with metadata, or value itself when the URL is
            not fetchable or the download failed.
        """
        if not is_fetchable_url(value.url):
            return value

        key = cache_key(value.url)
        cached = self.cache.get(key, group=self.group)
        if cached is not None:
            logger.debug(f"Dimension cache hit for {value.url}")
            return replace(value, metadata=DimensionMetadata.from_dict(cached))

        try:
            width, height = self.loader.read_dimensions(value.url)
        except TransientFetchError as e:
            logger.warning(f"Could not fetch dimensions for {value.url}: {e}")
            self.error_log.append(str(e))
            self.error_log.append(f"Failed to get image dimensions for URL: {value.url}")
            return value

        metadata = DimensionMetadata(width, height, int(self.clock()))
        self.cache.set(key, metadata.to_dict(), group=self.group, ttl=self.ttl)
        logger.info(f"Stored dimensions {width}x{height} for {value.url}")
        return replace(value, metadata=metadata)
