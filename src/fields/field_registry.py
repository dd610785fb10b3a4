from fields.cloudflare_image.cloudflare_image import CloudflareImage
from utils.dimension_fetcher import DimensionFetcher
import logging

logger = logging.getLogger(__name__)

FIELD_CLASSES = {
    "cloudflare_image": CloudflareImage,
}


class FieldRegistry:
    """Field instances by field name, all sharing one strategy and one cache."""

    def __init__(self, config, cache, error_log, loader=None):
        self.config = config
        self.fetcher = None
        if config.strategy == "dimensions":
            self.fetcher = DimensionFetcher(cache, error_log, loader=loader)
        self._fields = {}

    def get_field_instance(self, field_name, field_type="cloudflare_image"):
        field = self._fields.get(field_name)
        if field is None:
            field_class = FIELD_CLASSES.get(field_type)
            if field_class is None:
                raise ValueError(f"Unknown field type: {field_type}")

            field = field_class(self.config.get_field_config(field_name), fetcher=self.fetcher)
            self._fields[field_name] = field
            logger.debug(f"Loaded field {field_name} ({field_type}, strategy={self.config.strategy})")
        return field


class FieldStore:
    """In-process stand-in for the host's generic field value persistence."""

    def __init__(self):
        self._values = {}

    def get(self, field_name):
        return self._values.get(field_name)

    def save(self, field_name, value):
        self._values[field_name] = value
