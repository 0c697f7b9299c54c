import asyncio
import logging
from datetime import datetime

from application.services.live_feed import LiveRateFeed
from domain.changes import NO_CHANGE, current_change, window_change
from domain.exceptions import MalformedSeriesError, NoActivePairError, ProviderError
from domain.models import CurrencyPair, DashboardSummary, RatePoint
from domain.series import RateSeriesStore
from infrastructure.providers import RatesAPIClient

logger = logging.getLogger(__name__)


class RateDashboard:
    """
    Page-level controller for the rate dashboard.

    Owns exactly one RateSeriesStore and one LiveRateFeed for the active pair.
    Switching pairs stops the old feed and throws the old series away; any
    history or live result that completes for a pair that is no longer active
    is dropped, and so is a history load overtaken by a newer one. Feeds
    retired with fetches still in flight are drained on close().
    """

    def __init__(
        self,
        client: RatesAPIClient,
        poll_interval: float = 60.0,
        history_length: int = 30,
        history_unit: str = 'day',
        history_resolution: str = 'hourly',
    ):
        self._client = client
        self.poll_interval = poll_interval
        self.history_length = history_length
        self.history_unit = history_unit
        self.history_resolution = history_resolution

        self._pair: CurrencyPair | None = None
        self._store: RateSeriesStore | None = None
        self._feed: LiveRateFeed | None = None
        self._retired_feeds: list[LiveRateFeed] = []
        self._history_generation = 0
        self.history_error: str | None = None

    @property
    def pair(self) -> CurrencyPair | None:
        return self._pair

    @property
    def store(self) -> RateSeriesStore | None:
        return self._store

    @property
    def feed(self) -> LiveRateFeed | None:
        return self._feed

    async def select_pair(self, pair: CurrencyPair, length: int | None = None) -> DashboardSummary:
        if length is not None:
            self.history_length = length

        if pair != self._pair or self._feed is None:
            self._stop_feed()
            self._pair = pair
            self._store = RateSeriesStore(pair)
            self._feed = LiveRateFeed(self._client.fetch_live, interval=self.poll_interval)
            self._feed.subscribe(self._on_tick)
            self.history_error = None
            self._feed.start(pair)
            logger.info(f'Dashboard switched to {pair}')

        await self._load_history(pair)
        return self.summary()

    async def set_time_range(self, length: int) -> DashboardSummary:
        pair = self._require_pair()
        self.history_length = length
        await self._load_history(pair)
        return self.summary()

    async def refresh(self) -> DashboardSummary:
        pair = self._require_pair()
        await self._load_history(pair)
        if self._feed is not None:
            await self._feed.fetch_once()
        return self.summary()

    def summary(self) -> DashboardSummary:
        pair = self._require_pair()
        series = self._store.snapshot()
        live = self._feed.last_value if self._feed else None

        if live is None:
            now_change = trend_change = NO_CHANGE
        else:
            now_change = current_change(series, live.value)
            trend_change = window_change(series, live.value)

        return DashboardSummary(
            pair=pair,
            series=series,
            live=live,
            current_change=now_change,
            window_change=trend_change,
            last_updated=live.time if live else None,
            last_error=(self._feed.last_error if self._feed else None) or self.history_error,
        )

    async def close(self) -> None:
        feeds = [*self._retired_feeds, *([self._feed] if self._feed is not None else [])]
        self._retired_feeds.clear()
        await asyncio.gather(*(feed.aclose() for feed in feeds))
        logger.info('Dashboard closed')

    def _require_pair(self) -> CurrencyPair:
        if self._pair is None or self._store is None:
            raise NoActivePairError('No currency pair selected')
        return self._pair

    def _stop_feed(self) -> None:
        if self._feed is not None:
            self._feed.stop()
            self._retired_feeds = [f for f in self._retired_feeds if f.has_pending_fetches]
            if self._feed.has_pending_fetches:
                self._retired_feeds.append(self._feed)
            self._feed = None

    def _on_tick(self, point: RatePoint) -> None:
        if self._store is None or point.pair != self._pair:
            logger.debug(f'Dropping live tick for inactive pair {point.pair}')
            return
        self._store.record_live(point)

    async def _load_history(self, pair: CurrencyPair) -> None:
        self._history_generation += 1
        generation = self._history_generation
        started_at = datetime.now()
        try:
            points = await self._client.get_history(
                pair.source,
                pair.target,
                length=self.history_length,
                unit=self.history_unit,
                resolution=self.history_resolution,
            )
        except ProviderError as e:
            logger.warning(f'Failed to load history for {pair}: {e}')
            if generation == self._history_generation:
                self.history_error = str(e)
            return

        if generation != self._history_generation or pair != self._pair or self._store is None:
            logger.debug(f'Dropping superseded history for {pair}')
            return

        try:
            self._store.replace_history(points)
        except MalformedSeriesError as e:
            logger.error(f'Rejected history for {pair}: {e}')
            self.history_error = str(e)
            return

        self.history_error = None
        elapsed_ms = int((datetime.now() - started_at).total_seconds() * 1000)
        logger.info(
            f'Loaded {len(points)} history points for {pair} in {elapsed_ms}ms',
            extra={'pair': str(pair), 'points': len(points), 'elapsed_ms': elapsed_ms},
        )
