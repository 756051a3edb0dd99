"""Analytics reporter wired into the auction framework's event stream."""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..batching import ExpiringQueue, TimerScheduler
from ..core.config import ReporterConfig, PageContext, ConfigError, ANALYTICS_VERSION
from ..storage import KeyValueStore, MemoryStore, JsonFileStore
from ..tracking import AttributionResolver, parse_url
from . import events as hb_events
from .events import AuctionEvent, MalformedEventError
from .transport import CollectorClient

logger = logging.getLogger(__name__)


@dataclass
class ReporterContext:
    """State owned by one enabled reporter."""
    config: ReporterConfig
    request_template: Dict[str, Any]
    queue: ExpiringQueue
    client: Any
    auction_time_start: float = 0


class AnalyticsReporter:
    """Collect auction events, batch them and ship them to the collector.

    Nothing is tracked until ``enable_analytics`` succeeds. Events are flushed
    when the queue has been quiet for the configured timeout and immediately
    after every auction end.
    """

    code = 'staq'

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        scheduler: Optional[TimerScheduler] = None,
        client_factory: Optional[Callable[[ReporterConfig], Any]] = None,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.scheduler = scheduler
        self.client_factory = client_factory or (
            lambda config: CollectorClient(config.endpoint, config.request_timeout)
        )
        self.clock = clock
        self.context: Optional[ReporterContext] = None

        self._handlers = {
            AuctionEvent.AUCTION_INIT: self._track_auction_init,
            AuctionEvent.BID_REQUESTED: hb_events.track_bid_request,
            AuctionEvent.BID_RESPONSE: hb_events.track_bid_response,
            AuctionEvent.BID_WON: hb_events.track_bid_won,
            AuctionEvent.BID_TIMEOUT: hb_events.track_bid_timeout,
            AuctionEvent.AUCTION_END: self._track_auction_end,
        }

    @property
    def enabled(self) -> bool:
        return self.context is not None

    def enable_analytics(
        self,
        options: Union[ReporterConfig, Dict[str, Any]],
        page: PageContext
    ) -> bool:
        """Activate the reporter. Returns False when configuration is incomplete."""
        logger.info("Enabling analytics reporter")
        config = options if isinstance(options, ReporterConfig) else ReporterConfig.from_options(options)
        try:
            config.validate()
        except ConfigError as e:
            logger.error(f"{e}. Analytics won't work")
            return False

        previous = self.context
        if previous is not None:
            # Deliver what the previous activation queued before replacing it
            self.send_all()
            previous.queue.cancel()

        resolver = AttributionResolver(self._get_store(config))
        self.context = ReporterContext(
            config=config,
            request_template=self.build_request_template(config.conn_id, page, resolver),
            queue=ExpiringQueue(self.send_all, config.queue_timeout_ms, self.scheduler),
            client=self.client_factory(config)
        )
        return True

    def disable_analytics(self):
        """Flush what is queued and deactivate."""
        context = self.context
        if context is None:
            return
        self.send_all()
        context.queue.cancel()
        self.context = None

    def _get_store(self, config: ReporterConfig) -> KeyValueStore:
        if self.store is not None:
            return self.store
        if config.storage_path:
            return JsonFileStore(Path(config.storage_path))
        return MemoryStore()

    def build_request_template(
        self,
        conn_id: str,
        page: PageContext,
        resolver: AttributionResolver
    ) -> Dict[str, Any]:
        """Fields shared by every payload sent for this page."""
        location = parse_url(page.url)
        return {
            'ver': ANALYTICS_VERSION,
            'domain': location.hostname,
            'path': location.pathname,
            'accId': conn_id,
            'env': {
                'screen': {
                    'w': page.screen_width,
                    'h': page.screen_height
                },
                'lang': page.language
            },
            'src': resolver.resolve(page.url, page.referrer).to_dict()
        }

    def track(self, event_type: Union[AuctionEvent, str], args: Any = None):
        """Handle one auction framework event."""
        if not self.context:
            return

        try:
            event_type = AuctionEvent(event_type)
        except ValueError:
            return

        if event_type == AuctionEvent.AUCTION_INIT:
            self.context.queue.init()

        try:
            records = self._handlers[event_type](args)
        except MalformedEventError as e:
            logger.warning(f"Dropping {event_type.value} event: {e}")
            return

        self.context.queue.push(records)
        if event_type == AuctionEvent.AUCTION_END:
            self.send_all()

    def send_all(self) -> bool:
        """Send every queued event in one request."""
        # Runs on the timer thread too, so the context is read exactly once
        context = self.context
        if context is None:
            return False
        records = context.queue.pop_all()
        if not records:
            return False
        return context.client.send(json.dumps(self.build_payload(records, context)))

    def build_payload(self, records: List[Dict[str, Any]], context: ReporterContext) -> Dict[str, Any]:
        payload = dict(context.request_template)
        payload['hb_ev'] = records
        return payload

    def _track_auction_init(self, args: Any = None) -> List[Dict[str, Any]]:
        self.context.auction_time_start = self.clock()
        return hb_events.track_auction_init(args)

    def _track_auction_end(self, args: Any = None) -> List[Dict[str, Any]]:
        start = self.context.auction_time_start
        duration = self.clock() - start if start else 0
        return hb_events.track_auction_end(duration)
