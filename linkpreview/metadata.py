"""Security and location annotations appended to a preview."""

from typing import List, Mapping, NamedTuple, Optional

from linkpreview.geoip import CountryLookup

HTTP = "http"
HSTS = "hsts"
CSP = "csp"
CSP_REPORT_ONLY = "csp-report-only"
COUNTRY = "country"


class Tag(NamedTuple):
    kind: str
    text: str


def annotate(
    protocol: str,
    headers: Mapping[str, str],
    peer_ip=None,
    lookup: Optional[CountryLookup] = None,
) -> List[Tag]:
    """Collect tags in the fixed order http, hsts, csp, csp(ro), country.

    ``headers`` must be case-insensitive. A header that is present with an
    empty value still counts. ``GeoDatabaseError`` from *lookup* propagates.
    """
    tags = []
    if protocol == "http":
        tags.append(Tag(HTTP, "http"))
    if "strict-transport-security" in headers:
        tags.append(Tag(HSTS, "hsts"))
    if "content-security-policy" in headers:
        tags.append(Tag(CSP, "csp"))
    if "content-security-policy-report-only" in headers:
        tags.append(Tag(CSP_REPORT_ONLY, "csp(ro)"))
    if peer_ip is not None and lookup is not None:
        code = lookup.lookup_country(peer_ip)
        if code:
            tags.append(Tag(COUNTRY, code))
    return tags


# mIRC formatting: \x02 bold, \x03NN colour, \x0f reset
_COLOURS = {
    HTTP: "4",
    HSTS: "3",
    CSP: "2",
    CSP_REPORT_ONLY: "2",
}


def render_tags(tags: List[Tag]) -> str:
    """Render tags for IRC, each prefixed with a space."""
    parts = []
    for tag in tags:
        if tag.kind == COUNTRY:
            parts.append(f" ({tag.text})")
        else:
            parts.append(f" \x02\x03{_COLOURS[tag.kind]}[{tag.text}]\x0f")
    return "".join(parts)
