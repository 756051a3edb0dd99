"""URL parsing and search engine detection for traffic classification."""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlsplit, parse_qsl


# Checked in order, first match wins
SEARCH_ENGINES = {
    'google': re.compile(r'^https?://(?:www\.)?(?:google\.(?:com?\.)?(?:com|cat|[a-z]{2})|g\.cn)/', re.I),
    'yandex': re.compile(r'^https?://(?:www\.)?ya(?:ndex\.(?:com|net)?\.?(?:asia|mobi|org|[a-z]{2})?|\.ru)/', re.I),
    'bing': re.compile(r'^https?://(?:www\.)?bing\.com/', re.I),
    'duckduckgo': re.compile(r'^https?://(?:www\.)?duckduckgo\.com/', re.I),
    'ask': re.compile(r'^https?://(?:www\.)?ask\.com/', re.I),
    'yahoo': re.compile(r'^https?://(?:[-a-z]+\.)?(?:search\.)?yahoo\.com/', re.I),
}


@dataclass
class ParsedUrl:
    """Components of a page or referrer URL."""
    hostname: str = ""
    pathname: str = "/"
    query: Dict[str, str] = field(default_factory=dict)


def parse_url(url: str) -> ParsedUrl:
    """Split a URL into hostname, path and query parameters.

    Protocol-relative URLs (``//host/path``) are accepted. For repeated
    query parameters the first value is kept.
    """
    if not url:
        return ParsedUrl()

    try:
        parts = urlsplit(url)
    except ValueError:
        return ParsedUrl()

    query: Dict[str, str] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        query.setdefault(key, value)

    return ParsedUrl(
        hostname=(parts.hostname or "").lower(),
        pathname=parts.path or "/",
        query=query
    )


def get_search_engine(referrer: str) -> Optional[str]:
    """Return the search engine name a referrer belongs to, if any."""
    if not referrer:
        return None
    for engine, pattern in SEARCH_ENGINES.items():
        if pattern.match(referrer):
            return engine
    return None
