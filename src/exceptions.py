"""
Error kinds for the Cloudflare Image field.

None of these are fatal: validation errors are shown inline to the editor,
fetch errors are logged and degrade to "no derived data", and unavailable
release metadata simply means no update is offered.
"""


class CloudflareImageError(Exception):
    """Base class for all field errors."""


class ValidationError(CloudflareImageError):
    """The stored URL is not a Cloudflare Images delivery URL."""

    def __init__(self, message, url=""):
        super().__init__(message)
        self.message = message
        self.url = url


class TransientFetchError(CloudflareImageError):
    """Download, non-200 response or unreadable image header."""


class UnavailableError(CloudflareImageError):
    """Remote release metadata could not be obtained or parsed."""
