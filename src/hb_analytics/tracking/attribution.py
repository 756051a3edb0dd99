"""Traffic source attribution persisted across page views."""

import json
import logging
import threading
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple

from ..storage import KeyValueStore, MemoryStore
from .url_parser import parse_url, get_search_engine

logger = logging.getLogger(__name__)

STORAGE_KEY = 'staq_analytics'

DIRECT = '(direct)'
ORGANIC = '(organic)'
REFERRAL = '(referral)'

# Query parameters in TrafficSource field order
UTM_TAGS = [
    'utm_source', 'utm_medium', 'utm_campaign', 'utm_term', 'utm_content',
    'utm_c1', 'utm_c2', 'utm_c3', 'utm_c4', 'utm_c5'
]

_RANKS = {DIRECT: 0, ORGANIC: 1, REFERRAL: 2}
CAMPAIGN_RANK = 3


@dataclass
class TrafficSource:
    """Traffic source a visitor is credited with."""
    source: str
    medium: str
    campaign: str
    term: str = ""
    content: str = ""
    c1: str = ""
    c2: str = ""
    c3: str = ""
    c4: str = ""
    c5: str = ""

    @property
    def rank(self) -> int:
        return rank(self)

    @property
    def is_campaign(self) -> bool:
        """True for explicit campaign traffic, False for the sentinel classes."""
        return self.campaign not in _RANKS

    def to_dict(self) -> Dict[str, str]:
        """Serialize, leaving out empty optional fields."""
        data = asdict(self)
        return {
            key: value for key, value in data.items()
            if key in ('source', 'medium', 'campaign') or value
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'TrafficSource':
        return cls(
            source=str(data['source']),
            medium=str(data['medium']),
            campaign=str(data['campaign']),
            term=data.get('term', ''),
            content=data.get('content', ''),
            c1=data.get('c1', ''),
            c2=data.get('c2', ''),
            c3=data.get('c3', ''),
            c4=data.get('c4', ''),
            c5=data.get('c5', '')
        )

    @classmethod
    def direct(cls) -> 'TrafficSource':
        return cls(source=DIRECT, medium=DIRECT, campaign=DIRECT)


def rank(utm: TrafficSource) -> int:
    """Precedence of a traffic source: direct < organic < referral < campaign."""
    return _RANKS.get(utm.campaign, CAMPAIGN_RANK)


def choose_actual_utm(prev: TrafficSource, curr: TrafficSource) -> Tuple[bool, TrafficSource]:
    """Pick the traffic source to credit.

    Returns ``(updated, winner)``. A higher rank always wins. At equal rank the
    current source only wins when it is meaningfully different: another
    referring path, another search engine, or another campaign name or source.
    """
    prev_rank, curr_rank = rank(prev), rank(curr)
    if prev_rank < curr_rank:
        return True, curr
    if prev_rank > curr_rank:
        return False, prev

    if prev.campaign == REFERRAL and prev.content != curr.content:
        return True, curr
    if prev.campaign == ORGANIC and prev.source != curr.source:
        return True, curr
    # Any facet change on campaign traffic counts as a new campaign touch
    if prev.is_campaign and (prev.campaign != curr.campaign or prev.source != curr.source):
        return True, curr
    return False, prev


def get_utm(page_url: str) -> Optional[TrafficSource]:
    """Build a campaign source from utm_* query parameters.

    Both utm_campaign and utm_source are required; other parameters default
    to empty.
    """
    params = parse_url(page_url).query
    if not params.get('utm_campaign') or not params.get('utm_source'):
        return None
    values = [params.get(tag, '') for tag in UTM_TAGS]
    return TrafficSource(*values)


def get_current_traffic_source(page_url: str, referrer: Optional[str] = None) -> TrafficSource:
    """Classify the traffic source of the current page view."""
    source = get_utm(page_url)
    if source:
        return source

    if referrer:
        engine = get_search_engine(referrer)
        if engine:
            return TrafficSource(source=engine, medium=ORGANIC, campaign=ORGANIC)

        page = parse_url(page_url)
        ref = parse_url(referrer)
        if ref.hostname and ref.hostname != page.hostname:
            return TrafficSource(
                source=ref.hostname,
                medium=REFERRAL,
                campaign=REFERRAL,
                content=ref.pathname
            )

    return TrafficSource.direct()


class AttributionResolver:
    """Resolve and persist the traffic source credited to a visitor.

    Storage failures never reach the caller: an unreadable record is treated
    as absent and a failed write is skipped.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, storage_key: str = STORAGE_KEY):
        self.store = store if store is not None else MemoryStore()
        self.storage_key = storage_key
        self._lock = threading.Lock()

    def resolve(self, page_url: str, referrer: Optional[str] = None) -> TrafficSource:
        """Return the traffic source to report for this page view."""
        with self._lock:
            previous = self.get_previous_traffic_source()
            current = get_current_traffic_source(page_url, referrer)
            updated, actual = choose_actual_utm(previous, current)
            if updated:
                logger.info(f"Attribution updated: {previous.campaign} -> {actual.campaign} ({actual.source})")
                self._store_utm(actual)
            return actual

    def get_previous_traffic_source(self) -> TrafficSource:
        """Load the persisted source, DIRECT when missing or unreadable."""
        try:
            value = self.store.get_item(self.storage_key)
        except (OSError, ValueError) as e:
            logger.warning(f"Attribution storage unavailable: {e}")
            return TrafficSource.direct()

        if not value:
            return TrafficSource.direct()

        try:
            data = json.loads(value)
            return TrafficSource.from_dict(data)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Ignoring corrupt attribution record: {e}")
            return TrafficSource.direct()

    def _store_utm(self, utm: TrafficSource):
        """Persist the whole record."""
        try:
            self.store.set_item(self.storage_key, json.dumps(utm.to_dict()))
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not persist attribution: {e}")
