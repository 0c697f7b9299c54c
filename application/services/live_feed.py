import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from domain.models import CurrencyPair, RatePoint

logger = logging.getLogger(__name__)

LiveFetcher = Callable[[CurrencyPair], Awaitable[RatePoint]]
TickCallback = Callable[[RatePoint], None]


class LiveRateFeed:
    """
    Polls the "current rate" of one currency pair on a fixed interval.

    The timer never waits for a fetch to finish: every tick spawns its own
    fetch task, so a hung request only delays its own result. Each start()
    or stop() bumps a generation counter, and a result is delivered only if
    its generation and pair are still the current ones. In-flight requests
    are never cancelled, their results are just dropped.
    """

    def __init__(self, fetcher: LiveFetcher, interval: float = 60.0):
        self._fetcher = fetcher
        self.interval = interval
        self._pair: CurrencyPair | None = None
        self._generation = 0
        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self._subscribers: list[TickCallback] = []

        self.last_value: RatePoint | None = None
        self.last_error: str | None = None
        self.last_updated: datetime | None = None

    @property
    def pair(self) -> CurrencyPair | None:
        return self._pair

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def has_pending_fetches(self) -> bool:
        return bool(self._inflight)

    def subscribe(self, callback: TickCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def start(self, pair: CurrencyPair, interval: float | None = None) -> None:
        """Fetch immediately, then every interval seconds. Restarts any running cycle."""
        self._cancel_timer()
        if interval is not None:
            self.interval = interval

        self._generation += 1
        if pair != self._pair:
            self.last_value = None
            self.last_error = None
            self.last_updated = None
        self._pair = pair

        generation = self._generation
        self._spawn_fetch(pair, generation)
        self._timer = asyncio.get_running_loop().create_task(
            self._tick_loop(pair, generation), name=f'live-feed:{pair}'
        )
        logger.info(f'Live feed started for {pair} every {self.interval}s')

    def stop(self) -> None:
        if self._pair is None and self._timer is None:
            return
        self._generation += 1
        self._cancel_timer()
        logger.info(f'Live feed stopped for {self._pair}')

    async def fetch_once(self) -> RatePoint | None:
        """On-demand fetch for the current pair; the periodic schedule is left as is."""
        if self._pair is None or not self.is_running:
            return None
        return await self._fetch_and_deliver(self._pair, self._generation)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _tick_loop(self, pair: CurrencyPair, generation: int) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if generation != self._generation:
                return
            self._spawn_fetch(pair, generation)

    def _spawn_fetch(self, pair: CurrencyPair, generation: int) -> None:
        task = asyncio.get_running_loop().create_task(self._fetch_and_deliver(pair, generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _fetch_and_deliver(self, pair: CurrencyPair, generation: int) -> RatePoint | None:
        try:
            point = await self._fetcher(pair)
        except Exception as e:
            if generation == self._generation:
                self.last_error = str(e)
            logger.warning(f'Live rate fetch failed for {pair}: {e}')
            return None

        if generation != self._generation or pair != self._pair:
            logger.debug(f'Dropping stale live tick for {pair}')
            return None
        if point.pair != pair:
            logger.warning(f'Live feed for {pair} received a {point.pair} rate, dropping it')
            return None

        self.last_error = None
        self.last_updated = datetime.now(UTC)
        if self.last_value is not None and point.time <= self.last_value.time:
            logger.debug(f'Keeping newer live value for {pair}, tick at {point.time.isoformat()} is late')
            return None
        self.last_value = point

        for callback in list(self._subscribers):
            try:
                callback(point)
            except Exception:
                logger.exception(f'Live tick subscriber failed for {pair}')

        return point

    async def aclose(self) -> None:
        """Stop polling and wait for in-flight fetches to settle."""
        self.stop()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
