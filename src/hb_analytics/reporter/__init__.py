"""Auction event reporting."""

from .adapter import AnalyticsReporter, ReporterContext
from .events import AuctionEvent, ReportEvent, MalformedEventError, create_hb_event
from .transport import CollectorClient

__all__ = [
    "AnalyticsReporter",
    "ReporterContext",
    "AuctionEvent",
    "ReportEvent",
    "MalformedEventError",
    "create_hb_event",
    "CollectorClient",
]
