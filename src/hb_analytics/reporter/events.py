"""Conversion of auction lifecycle events to hb-event records."""

from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Optional


class AuctionEvent(Enum):
    """Lifecycle events emitted by the auction framework."""
    AUCTION_INIT = "auctionInit"
    BID_REQUESTED = "bidRequested"
    BID_RESPONSE = "bidResponse"
    BID_WON = "bidWon"
    BID_TIMEOUT = "bidTimeout"
    AUCTION_END = "auctionEnd"


class ReportEvent(Enum):
    """Event names sent to the collector."""
    AUCTION_INIT = "auctionInit"
    BID_REQUEST = "bidRequested"
    BID_RESPONSE = "bidResponse"
    BID_WON = "bidWon"
    AUCTION_END = "auctionEnd"
    TIMEOUT = "adapterTimedOut"


class MalformedEventError(ValueError):
    """Event arguments do not have the expected shape."""


def create_hb_event(
    event: ReportEvent,
    adapter: Optional[str] = None,
    tagid: Optional[str] = None,
    value: float = 0,
    time: float = 0
) -> Dict[str, Any]:
    """Build a flat hb-event record. Falsy optional fields are left out."""
    ev: Dict[str, Any] = {'event': event.value}
    if adapter:
        ev['adapter'] = adapter
    if tagid:
        ev['tagid'] = tagid
    if value:
        ev['val'] = value
    if time:
        ev['time'] = time
    return ev


def _number(args: Dict[str, Any], key: str) -> float:
    """Numeric field, 0 when absent."""
    value = args.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedEventError(f"{key} must be a number, got {value!r}")
    return value


def track_auction_init(args: Any = None) -> List[Dict[str, Any]]:
    return [create_hb_event(ReportEvent.AUCTION_INIT)]


def track_bid_request(args: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One record per requested bid."""
    if not isinstance(args, dict) or not isinstance(args.get('bids'), list):
        raise MalformedEventError("bidRequested needs a 'bids' list")
    if not all(isinstance(bid, dict) for bid in args['bids']):
        raise MalformedEventError("bidRequested bids must be objects")
    bidder = args.get('bidderCode')
    return [
        create_hb_event(ReportEvent.BID_REQUEST, bidder, bid.get('adUnitCode'))
        for bid in args['bids']
    ]


def track_bid_response(args: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not isinstance(args, dict):
        raise MalformedEventError("bidResponse needs a bid object")
    time_to_respond = _number(args, 'timeToRespond') / 1000
    return [create_hb_event(
        ReportEvent.BID_RESPONSE,
        args.get('bidderCode'),
        args.get('adUnitCode'),
        _number(args, 'cpm'),
        time_to_respond
    )]


def track_bid_won(args: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not isinstance(args, dict):
        raise MalformedEventError("bidWon needs a bid object")
    return [create_hb_event(
        ReportEvent.BID_WON,
        args.get('bidderCode'),
        args.get('adUnitCode'),
        _number(args, 'cpm')
    )]


def track_bid_timeout(args: List[str]) -> List[Dict[str, Any]]:
    """One record per timed out bidder."""
    if not isinstance(args, list):
        raise MalformedEventError("bidTimeout needs a list of bidder codes")
    return [create_hb_event(ReportEvent.TIMEOUT, bidder) for bidder in args]


def track_auction_end(duration_seconds: float) -> List[Dict[str, Any]]:
    return [create_hb_event(ReportEvent.AUCTION_END, time=duration_seconds)]
