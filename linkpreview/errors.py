"""Exceptions raised by the link preview pipeline."""
from typing import Optional


class PreviewError(Exception):
    """Base class for errors that abort a single preview."""


class FetchError(PreviewError):
    """The remote resource could not be fetched.

    ``reason`` is one of ``timeout``, ``connect``, ``tls`` or ``dns``.
    """

    def __init__(self, reason: str, url: str, cause: Optional[Exception] = None):
        self.reason = reason
        self.url = url
        self.cause = cause
        super().__init__(f"{reason} error fetching {url}: {cause}")


class GeoDatabaseError(PreviewError):
    """The geoip database could not be opened or read."""


class FormatError(PreviewError):
    """A value could not be rendered into the reply."""
