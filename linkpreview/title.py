"""Title lookup for fetched HTML documents."""

import logging
from typing import Optional

from bs4 import BeautifulSoup, Comment, NavigableString

logger = logging.getLogger(__name__)


def normalize_title(text: str) -> str:
    """Trim *text* and collapse every whitespace run to one space."""
    return " ".join(text.split())


def extract_title(html: str) -> Optional[str]:
    """Return the normalized text of the first ``<title>`` element.

    Parsing is lenient: broken markup only ever leads to ``None``.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception:
        logger.debug("Failed to parse document", exc_info=True)
        return None

    title = soup.find("title")
    if title is None:
        return None
    node = next(iter(title.contents), None)
    if not isinstance(node, NavigableString) or isinstance(node, Comment):
        return None
    return normalize_title(str(node))
