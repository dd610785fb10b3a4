from fields.base_field.base_field import BaseField
from utils.variant_resolver import validate_url, derive_variants, preview_url
from model import ImageFieldValue
from dataclasses import replace
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Please enter a valid Cloudflare Images URL"


class CloudflareImage(BaseField):
    """
    Field holding a Cloudflare Images delivery URL and its alt text.

    Runs with one of two strategies: "variants" derives the sized variant
    URLs on every read, "dimensions" fetches the real pixel size once on
    save through a DimensionFetcher.
    """

    def __init__(self, config, fetcher=None):
        super().__init__({"id": "cloudflare_image", **config})
        self.strategy = config.get("strategy", "variants")

        if self.strategy == "dimensions" and fetcher is None:
            raise ValueError("The dimensions strategy requires a DimensionFetcher")
        self.fetcher = fetcher

    def validate(self, value):
        # an empty field means no value was provided
        if not value.url:
            return None
        if not validate_url(value.url):
            logger.info(f"Rejected URL for field {self.name}: {value.url}")
            return INVALID_URL_MESSAGE
        return None

    def format(self, value):
        if self.strategy != "variants":
            return value

        variants = derive_variants(value.url)
        if not variants:
            return value
        return replace(value, variants=variants)

    def on_save(self, value):
        if self.strategy == "dimensions":
            return self.fetcher.resolve(value)
        return value

    def render(self, value, error=None):
        value = value or ImageFieldValue()
        last_updated = None
        if value.metadata:
            last_updated = datetime.fromtimestamp(value.metadata.updated_at).strftime("%B %d, %Y")

        return self.render_template("render_field.html", {
            "value": value,
            "preview_url": preview_url(value),
            "last_updated": last_updated,
            "error": error,
        })
