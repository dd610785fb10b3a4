"""
Shared HTTP session for the Cloudflare Image field.

Provides a single requests.Session() for the image downloads and the
release metadata checks, with connection reuse and a consistent
User-Agent. No automatic retries are mounted: a failed request is simply
re-attempted on the next save or page load.

Usage:
    from utils.http_client import get_http_session

    session = get_http_session()
    response = session.get(url, timeout=10)
"""

import requests
import logging
from typing import Optional

logger = logging.getLogger(__name__)

USER_AGENT = 'CloudflareImageField/1.0 Python-requests'

# Global session instance (singleton)
_HTTP_SESSION: Optional[requests.Session] = None


def get_http_session() -> requests.Session:
    """
    Get the shared HTTP session instance.
    Creates it on first call (lazy initialization).

    Returns:
        requests.Session: Shared session with connection pooling
    """
    global _HTTP_SESSION

    if _HTTP_SESSION is None:
        logger.debug("Initializing shared HTTP session")
        _HTTP_SESSION = requests.Session()
        _HTTP_SESSION.headers.update({'User-Agent': USER_AGENT})

        adapter = requests.adapters.HTTPAdapter(
            pool_connections=4,
            pool_maxsize=4,
            max_retries=0,
            pool_block=False
        )
        _HTTP_SESSION.mount('http://', adapter)
        _HTTP_SESSION.mount('https://', adapter)

    return _HTTP_SESSION


def close_http_session():
    """
    Close the shared HTTP session.
    Should be called on application shutdown.
    """
    global _HTTP_SESSION

    if _HTTP_SESSION is not None:
        logger.debug("Closing shared HTTP session")
        _HTTP_SESSION.close()
        _HTTP_SESSION = None
