import re
from typing import NamedTuple, Optional

# The tail must not end on "." "," or ":" so trailing punctuation stays out.
LINK_REGEX = re.compile(
    r"(http|https)://([\w_-]+(?:(?:\.[\w_-]+)+))([\w.,@?^=%&:/~+#-]*[\w@?^=%&/~+#-])?"
)


class LinkCandidate(NamedTuple):
    protocol: str
    url: str


def find_link(text: str) -> Optional[LinkCandidate]:
    """Return the leftmost http(s) link in *text*, or ``None``."""
    match = LINK_REGEX.search(text)
    if not match:
        return None
    return LinkCandidate(protocol=match.group(1), url=match.group(0))


__all__ = ["LINK_REGEX", "LinkCandidate", "find_link"]
