"""Traffic source classification and attribution."""

from .url_parser import ParsedUrl, parse_url, get_search_engine, SEARCH_ENGINES
from .attribution import (
    AttributionResolver,
    TrafficSource,
    choose_actual_utm,
    get_current_traffic_source,
    rank,
    DIRECT,
    ORGANIC,
    REFERRAL,
    STORAGE_KEY,
)

__all__ = [
    'ParsedUrl',
    'parse_url',
    'get_search_engine',
    'SEARCH_ENGINES',
    'AttributionResolver',
    'TrafficSource',
    'choose_actual_utm',
    'get_current_traffic_source',
    'rank',
    'DIRECT',
    'ORGANIC',
    'REFERRAL',
    'STORAGE_KEY'
]
