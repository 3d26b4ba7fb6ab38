"""Compose the one-line reply for a link posted in chat.

A :class:`PreviewJob` walks through :class:`PreviewState` while it fetches
the resource, annotates it and renders the description::

    IDLE -> LINK_FOUND -> FETCHING -> OVERSIZE_STUB ------------> COMPOSED
                                   -> BODY_RECEIVED -> TITLE_FOUND -> COMPOSED
                                                    -> NO_TITLE    -> COMPOSED

Any :class:`PreviewError` (or cancellation) leaves the job in ``FAILED``.
"""

import asyncio
import enum
import json
import logging
from typing import Optional

from linkpreview.config import PREVIEW_TIMEOUT
from linkpreview.errors import PreviewError
from linkpreview.fetcher import fetch
from linkpreview.geoip import CountryLookup, get_default_lookup
from linkpreview.metadata import annotate, render_tags
from linkpreview.sizes import format_size
from linkpreview.title import extract_title

logger = logging.getLogger(__name__)


class PreviewState(enum.Enum):
    IDLE = "idle"
    LINK_FOUND = "link_found"
    FETCHING = "fetching"
    OVERSIZE_STUB = "oversize_stub"
    BODY_RECEIVED = "body_received"
    TITLE_FOUND = "title_found"
    NO_TITLE = "no_title"
    COMPOSED = "composed"
    FAILED = "failed"


def quote(text: str) -> str:
    """Wrap *text* in double quotes, escaping quotes and control characters."""
    return json.dumps(text, ensure_ascii=False)


def preview_download(content_type: str, size: int) -> str:
    return f"{quote(content_type)} - {format_size(size)}"


class PreviewJob:
    """Preview of a single link. Not reusable; create one per message."""

    def __init__(
        self,
        protocol: str,
        url: str,
        *,
        deadline: float = PREVIEW_TIMEOUT,
        lookup: Optional[CountryLookup] = None,
    ):
        self.protocol = protocol
        self.url = url
        self.deadline = deadline
        self.lookup = lookup if lookup is not None else get_default_lookup()
        self.state = PreviewState.IDLE

    def _advance(self, state: PreviewState) -> None:
        logger.debug("Preview %s: %s -> %s", self.url, self.state.value, state.value)
        self.state = state

    async def run(self) -> str:
        self._advance(PreviewState.LINK_FOUND)
        try:
            return await self._run()
        except (PreviewError, asyncio.CancelledError):
            self._advance(PreviewState.FAILED)
            raise

    async def _run(self) -> str:
        self._advance(PreviewState.FETCHING)
        result = await fetch(self.url, self.deadline)

        if result.body is None:
            self._advance(PreviewState.OVERSIZE_STUB)
        else:
            self._advance(PreviewState.BODY_RECEIVED)

        tags = annotate(self.protocol, result.headers, result.peer_ip, self.lookup)
        extra = render_tags(tags)

        if result.body is None:
            description = preview_download(result.content_type, result.content_length)
        else:
            title = extract_title(result.body)
            if title is not None:
                self._advance(PreviewState.TITLE_FOUND)
                description = quote(title)
            else:
                self._advance(PreviewState.NO_TITLE)
                size = len(result.body.encode("utf-8"))
                description = preview_download(result.content_type, size)

        self._advance(PreviewState.COMPOSED)
        return f"{description}{extra}"


async def remote_preview(
    protocol: str,
    url: str,
    *,
    deadline: float = PREVIEW_TIMEOUT,
    lookup: Optional[CountryLookup] = None,
) -> str:
    """Fetch *url* and return its preview line."""
    job = PreviewJob(protocol, url, deadline=deadline, lookup=lookup)
    return await job.run()
