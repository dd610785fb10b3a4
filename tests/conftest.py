from io import BytesIO
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from utils.cache_store import MemoryCacheStore


class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_response(status_code=200, text="", content=b""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.iter_content.return_value = [content[i:i + 8192] for i in range(0, len(content), 8192)]
    return response


def make_image_bytes(size=(64, 48), fmt="PNG"):
    buffer = BytesIO()
    Image.new("RGB", size, (200, 40, 40)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)
