"""
Cloudflare Images variant resolution.

A stored delivery URL looks like
``https://imagedelivery.net/<account hash>/<image id>/<variant>``. Every
size the front end needs is the same URL with a different preset token as
the last segment, so variants are derived from the URL alone and never
require a network call.
"""

from urllib.parse import urlparse
from typing import Dict
import logging
import re

from model import VariantDescriptor

logger = logging.getLogger(__name__)

DELIVERY_HOST = "imagedelivery.net"
DELIVERY_URL_PATTERN = re.compile(r'^https://imagedelivery\.net/[\w-]+/[\w-]+/.*$')

# name -> (preset token, width, height), in output order
VARIANTS = {
    "thumbnail": ("thumbnail", 150, 150),
    "xs": ("xs", 320, 213),
    "sm": ("sm", 640, 427),
    "md": ("md", 960, 640),
    "lg": ("lg", 1280, 853),
    "xl": ("xl", 1920, 1280),
    "public": ("public", 2560, 1707),
}


def validate_url(url) -> bool:
    """Return True if url is a Cloudflare Images delivery URL."""
    if not url or not isinstance(url, str):
        return False
    return DELIVERY_URL_PATTERN.match(url) is not None


def derive_variants(url) -> Dict[str, VariantDescriptor]:
    """
    Build every configured variant for a delivery URL.

    Args:
        url: Stored image URL

    Returns:
        Ordered mapping of variant name to VariantDescriptor, or an empty
        dict when the path does not hold an account hash and an image id.
    """
    if not url:
        return {}

    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    if len(segments) < 2:
        logger.debug(f"Not enough path segments to derive variants: {url}")
        return {}

    account_hash, image_id = segments[0], segments[1]
    base = f"https://{DELIVERY_HOST}/{account_hash}/{image_id}"

    return {
        name: VariantDescriptor(f"{base}/{token}", width, height)
        for name, (token, width, height) in VARIANTS.items()
    }


def preview_url(value) -> str:
    """Thumbnail variant of a field value, or its raw URL when there are no variants."""
    if value.variants and "thumbnail" in value.variants:
        return value.variants["thumbnail"].url
    return value.url
