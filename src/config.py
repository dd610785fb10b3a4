import os
import logging

logger = logging.getLogger(__name__)


class Config:
    """Compiled-in settings for the Cloudflare Image field and its update checker."""

    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    LOGGING_CONF = os.path.join(BASE_DIR, "config", "logging.conf")

    PLUGIN_NAME = "Cloudflare Image"
    PLUGIN_SLUG = "cloudflare-image-meta/cloudflare-image-meta.py"
    VERSION = "1.0.0"

    # Host platform this field is installed into
    HOST_VERSION = "6.5"
    # Server runtime the host runs on, compared against "requires_php"
    RUNTIME_VERSION = "8.2"

    UPDATE_ENDPOINT = "https://plugins.devhuset.dev/acf-cloudflare-image-meta/info.json"
    UPDATE_CACHE_KEY = "cf_image_upd"
    UPDATE_CACHE_TTL = 30 * 60
    UPDATE_TIMEOUT = 10
    UPDATE_CACHE_ALLOWED = True

    META_CACHE_GROUP = "cloudflare_image_meta"
    META_CACHE_TTL = 24 * 60 * 60

    ERROR_LOG_KEY = "cf_image_errors"
    ERROR_LOG_TTL = 60 * 60
    ERROR_LOG_SIZE = 5

    IMAGE_TIMEOUT_MS = 40000

    STRATEGIES = ("variants", "dimensions")

    def __init__(self, debug=False, strategy="variants", cache_allowed=None,
                 host_version=None, runtime_version=None):
        if strategy not in self.STRATEGIES:
            raise ValueError(f"Unknown field strategy: {strategy}")

        self.debug = debug
        self.strategy = strategy
        self.cache_allowed = self.UPDATE_CACHE_ALLOWED if cache_allowed is None else cache_allowed
        self.host_version = host_version or self.HOST_VERSION
        self.runtime_version = runtime_version or self.RUNTIME_VERSION

        logger.debug(f"Config loaded: strategy={self.strategy}, debug={self.debug}, "
                     f"cache_allowed={self.cache_allowed}")

    def get_field_config(self, field_name):
        return {
            "name": field_name,
            "label": self.PLUGIN_NAME,
            "strategy": self.strategy,
        }
