"""Single bounded HTTP GET used to build link previews. Uses aiohttp."""

import asyncio
import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Optional, Union

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from linkpreview.config import DOWNLOAD_THRESHOLD, USER_AGENT
from linkpreview.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
CHUNK_SIZE = 64 * 1024

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass
class FetchResult:
    headers: CIMultiDictProxy
    content_type: str = DEFAULT_CONTENT_TYPE
    content_length: Optional[int] = None
    peer_ip: Optional[IPAddress] = None
    # None when the advertised length is at or above DOWNLOAD_THRESHOLD.
    body: Optional[str] = None


class PeerRecordingConnector(aiohttp.TCPConnector):
    """TCP connector remembering the address of its latest connection.

    aiohttp hands small responses back with the connection already
    released, so the peer has to be captured when the connection is made.
    Across redirects the last connection is the one that served the final
    response.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.peername = None

    async def connect(self, req, traces, timeout):
        conn = await super().connect(req, traces, timeout)
        transport = conn.transport
        self.peername = transport.get_extra_info("peername") if transport is not None else None
        return conn


def _peer_ip(peername) -> Optional[IPAddress]:
    if not peername:
        return None
    host = str(peername[0]).split("%", 1)[0]
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def _decode(raw: bytes, charset: Optional[str]) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


async def _read_capped(resp, url: str) -> bytes:
    """Read at most DOWNLOAD_THRESHOLD decoded bytes of the body.

    The advertised length is that of the encoded payload, so a compressed
    body can still expand past the threshold here.
    """
    raw = b""
    async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
        raw += chunk
        if len(raw) >= DOWNLOAD_THRESHOLD:
            logger.debug("Body of %s truncated at %d bytes", url, DOWNLOAD_THRESHOLD)
            return raw[:DOWNLOAD_THRESHOLD]
    return raw


def _error_reason(exc: Exception) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout"
    if isinstance(exc, aiohttp.ClientSSLError):
        return "tls"
    if isinstance(exc, aiohttp.ClientConnectorError) and isinstance(
        exc.os_error, socket.gaierror
    ):
        return "dns"
    # idna refuses hostnames it cannot encode (e.g. labels over 63 chars)
    if isinstance(exc, UnicodeError):
        return "dns"
    return "connect"


async def fetch(url: str, deadline: float) -> FetchResult:
    """GET *url* once, giving up after *deadline* seconds.

    The body is only read when the server does not advertise a length of
    ``DOWNLOAD_THRESHOLD`` bytes or more, and never beyond that many bytes.
    Any transport failure is raised as :class:`FetchError`; there are no
    retries.
    """
    timeout = aiohttp.ClientTimeout(total=deadline)
    try:
        connector = PeerRecordingConnector()
        async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
            async with session.get(url, headers={"User-Agent": USER_AGENT}) as resp:
                headers = CIMultiDictProxy(CIMultiDict(resp.headers))
                result = FetchResult(
                    headers=headers,
                    content_type=headers.get("Content-Type", DEFAULT_CONTENT_TYPE),
                    content_length=resp.content_length,
                    peer_ip=_peer_ip(connector.peername),
                )
                if result.content_length is not None and result.content_length >= DOWNLOAD_THRESHOLD:
                    logger.debug("Skipping body (%d bytes)", result.content_length)
                    return result
                raw = await _read_capped(resp, url)
                result.body = _decode(raw, resp.charset)
                return result
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        reason = _error_reason(e)
        logger.debug("Fetch failed (%s): %s", reason, e)
        raise FetchError(reason, url, e) from e
