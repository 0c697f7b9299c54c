import logging
from collections.abc import Iterable

from domain.exceptions import MalformedSeriesError
from domain.models import CurrencyPair, RatePoint

logger = logging.getLogger(__name__)


class RateSeriesStore:
    """
    Ordered rate history for a single currency pair.

    History is replaced wholesale when the pair, time range or an explicit
    refresh asks for it; live ticks are appended in between. A point is only
    appended when it is strictly newer than the last one held, so late or
    duplicate ticks never reorder the series.
    """

    def __init__(self, pair: CurrencyPair):
        self._pair = pair
        self._points: list[RatePoint] = []
        self._live: RatePoint | None = None

    @property
    def pair(self) -> CurrencyPair:
        return self._pair

    @property
    def points(self) -> tuple[RatePoint, ...]:
        return tuple(self._points)

    @property
    def latest_live(self) -> RatePoint | None:
        return self._live

    def __len__(self) -> int:
        return len(self._points)

    def append(self, point: RatePoint) -> bool:
        if point.pair != self._pair:
            logger.debug(f'Discarding {point.pair} point in {self._pair} series')
            return False

        if self._points and point.time <= self._points[-1].time:
            logger.debug(
                f'Discarding late tick for {self._pair}: {point.time.isoformat()} '
                f'<= {self._points[-1].time.isoformat()}'
            )
            return False

        self._points.append(point)
        return True

    def record_live(self, point: RatePoint) -> bool:
        """Remember point as the latest live value, unless a newer one is held, and merge it into the history."""
        if point.pair != self._pair:
            logger.debug(f'Ignoring live {point.pair} tick for {self._pair} store')
            return False
        if self._live is None or point.time > self._live.time:
            self._live = point
        return self.append(point)

    def replace_history(self, points: Iterable[RatePoint]) -> None:
        new_points = list(points)

        for i, point in enumerate(new_points):
            if point.pair != self._pair:
                raise MalformedSeriesError(
                    f'History for {self._pair} contains a {point.pair} point at index {i}'
                )
            if i and point.time < new_points[i - 1].time:
                raise MalformedSeriesError(
                    f'History for {self._pair} is not time-ordered at index {i}'
                )

        self._points = new_points

    def snapshot(self) -> list[RatePoint]:
        """History plus the latest live point when it is newer than the history."""
        series = list(self._points)
        live = self._live
        if live is None or live.pair != self._pair:
            return series
        if not series or live.time > series[-1].time:
            series.append(live)
        return series
