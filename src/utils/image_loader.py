"""
Image dimension loader for the Cloudflare Image field.

Downloads an image to a temporary file and reads its pixel size from the
file header. Pillow's Image.open() is lazy: it parses the format header
and stops, so the full pixel data is never decoded.

Usage:
    loader = ImageDimensionLoader()
    width, height = loader.read_dimensions("https://imagedelivery.net/...")
"""

from PIL import Image, UnidentifiedImageError
from typing import Tuple
import requests
import logging
import tempfile
import os

from config import Config
from exceptions import TransientFetchError
from utils.http_client import get_http_session

logger = logging.getLogger(__name__)


class ImageDimensionLoader:
    DEFAULT_HEADERS = {
        'Accept': 'image/avif,image/webp,image/*,*/*;q=0.8'
    }

    def __init__(self, session=None, timeout_ms=Config.IMAGE_TIMEOUT_MS):
        self.session = session
        self.timeout_ms = timeout_ms

    def read_dimensions(self, url) -> Tuple[int, int]:
        """
        Download an image and return its (width, height).

        Args:
            url: Image URL to download

        Returns:
            Tuple of (width, height) in pixels

        Raises:
            TransientFetchError: On transport errors, non-200 responses and
                unreadable image headers.
        """
        tmp_path = None

        try:
            with tempfile.NamedTemporaryFile(delete=False, suffix='.img') as tmp:
                tmp_path = tmp.name
                self._download(url, tmp)

            return self._read_header(tmp_path)
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                    logger.debug(f"Cleaned up temp file: {tmp_path}")
                except OSError as e:
                    logger.warning(f"Could not delete temp file {tmp_path}: {e}")

    def _download(self, url, tmp):
        session = self.session or get_http_session()
        try:
            response = session.get(url, timeout=self.timeout_ms / 1000, stream=True,
                                   headers=self.DEFAULT_HEADERS)
        except requests.exceptions.RequestException as e:
            raise TransientFetchError(f"Failed to download image: {e}")

        if response.status_code != 200:
            raise TransientFetchError(f"Failed to download image: HTTP {response.status_code}")

        downloaded_bytes = 0
        try:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    tmp.write(chunk)
                    downloaded_bytes += len(chunk)
        except requests.exceptions.RequestException as e:
            raise TransientFetchError(f"Failed to download image: {e}")

        logger.debug(f"Downloaded {downloaded_bytes / 1024:.1f}KB to temp file")

    def _read_header(self, path):
        try:
            with Image.open(path) as img:
                width, height = img.size
                logger.info(f"Read image header: {width}x{height} ({img.format})")
                return width, height
        except (UnidentifiedImageError, OSError) as e:
            logger.error(f"Could not read image header from {path}: {e}")
            raise TransientFetchError("Failed to get image size for downloaded file")
