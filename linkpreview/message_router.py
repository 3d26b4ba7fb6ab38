import asyncio
import logging
from typing import Awaitable, Callable, Collection, Optional

from linkpreview import config
from linkpreview.errors import FetchError, PreviewError
from linkpreview.geoip import CountryLookup
from linkpreview.link_finder import find_link
from linkpreview.logging_config import logging_context
from linkpreview.preview import remote_preview
from linkpreview.tasks import create_task

logger = logging.getLogger(__name__)

SendFunc = Callable[[str, str], Awaitable[None]]


async def _preview_and_reply(
    target: str,
    protocol: str,
    url: str,
    send_reply: SendFunc,
    timeout: float,
    lookup: Optional[CountryLookup],
) -> None:
    try:
        reply = await asyncio.wait_for(
            remote_preview(protocol, url, deadline=timeout, lookup=lookup),
            timeout,
        )
    except asyncio.TimeoutError:
        logger.info("Preview timed out after %ss", timeout)
        return
    except FetchError as e:
        logger.info("Preview failed: %s", e.reason)
        return
    except PreviewError:
        logger.warning("Preview failed", exc_info=True)
        return
    await send_reply(target, reply)


async def route_message(
    text: str,
    target: str,
    sender: str,
    *,
    send_reply: SendFunc,
    readonly_channels: Collection[str] = config.READONLY_CHANNELS,
    nickname: str = config.BOT_NICKNAME,
    timeout: float = config.PREVIEW_TIMEOUT,
    lookup: Optional[CountryLookup] = None,
) -> Optional[asyncio.Task]:
    """Handle one chat line addressed to *target*.

    Link previews run in a background task so the caller can keep reading
    from the connection; the task is returned, or ``None`` if nothing was
    started.
    """
    if target in readonly_channels:
        return None

    if nickname and text.startswith(nickname):
        await send_reply(target, config.PING_REPLY)
        return None

    link = find_link(text)
    if link is None:
        return None

    with logging_context(channel=target, nick=sender, url=link.url):
        logger.debug("Starting preview")
        return create_task(
            _preview_and_reply(target, link.protocol, link.url, send_reply, timeout, lookup)
        )
