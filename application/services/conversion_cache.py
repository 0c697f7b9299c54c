import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime, timedelta

from domain.exceptions import InvalidCurrencyError
from domain.models import CacheEntry, normalize_currency

logger = logging.getLogger(__name__)

UnitRateFetcher = Callable[[str, str], Awaitable[float]]

FALLBACK_RATE = 1.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _valid_codes(currencies: Iterable[str]) -> list[str]:
    """Distinct normalized codes; malformed ones are skipped and priced at FALLBACK_RATE by callers."""
    codes: dict[str, None] = {}
    for currency in currencies:
        try:
            codes.setdefault(normalize_currency(currency), None)
        except InvalidCurrencyError:
            logger.warning(f'Skipping conversion for malformed currency code {currency!r}')
    return list(codes)


class ConversionRateCache:
    """
    One-unit conversion rates from any currency into a single reporting currency.

    The whole map is refreshed at most once per TTL window, whatever currency
    set is asked for. Only one refresh runs at a time: callers arriving while
    it is in flight get the previous map back. A currency whose conversion
    fails is stored with a rate of 1.0 and does not affect the others.
    """

    def __init__(
        self,
        fetch_rate: UnitRateFetcher,
        reporting_currency: str = 'USD',
        ttl: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._fetch_rate = fetch_rate
        self.reporting_currency = normalize_currency(reporting_currency)
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._refreshed_at: datetime | None = None
        self._refresh_task: asyncio.Task | None = None

    @property
    def refreshed_at(self) -> datetime | None:
        return self._refreshed_at

    @property
    def entries(self) -> dict[str, CacheEntry]:
        return dict(self._entries)

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def rates(self) -> dict[str, float]:
        return {code: entry.rate_to_reporting_currency for code, entry in self._entries.items()}

    def is_fresh(self) -> bool:
        if self._refreshed_at is None:
            return False
        return self._clock() - self._refreshed_at < self.ttl

    def invalidate(self) -> None:
        """Force the next get_rates() call to refresh. Entries are kept until then."""
        self._refreshed_at = None

    async def get_rates(
        self, currencies: Iterable[str], reporting_currency: str | None = None
    ) -> dict[str, float]:
        if reporting_currency is not None and normalize_currency(reporting_currency) != self.reporting_currency:
            raise ValueError(
                f'Cache reports in {self.reporting_currency}, got request for {reporting_currency}'
            )

        if self.is_fresh():
            return self.rates()

        if self.is_refreshing:
            logger.debug('Conversion rate refresh already in flight, serving previous rates')
            return self.rates()

        requested = _valid_codes(currencies)
        task = asyncio.ensure_future(self._refresh(requested))
        self._refresh_task = task
        task.add_done_callback(self._clear_refresh_task)
        return await asyncio.shield(task)

    def _clear_refresh_task(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _refresh(self, currencies: list[str]) -> dict[str, float]:
        foreign = [c for c in currencies if c != self.reporting_currency]
        logger.info(
            f'Refreshing conversion rates into {self.reporting_currency} for {len(foreign)} currencies'
        )

        results = await asyncio.gather(*(self._fetch_one(c) for c in foreign))

        now = self._clock()
        if self.reporting_currency in currencies:
            self._store(self.reporting_currency, 1.0, now)
        for currency, rate in zip(foreign, results, strict=True):
            self._store(currency, rate, now)

        self._refreshed_at = now
        logger.debug(
            'Conversion rates refreshed',
            extra={'reporting_currency': self.reporting_currency, 'refreshed_at': now, 'rates': self.rates()},
        )
        return self.rates()

    async def _fetch_one(self, currency: str) -> float:
        try:
            return float(await self._fetch_rate(currency, self.reporting_currency))
        except Exception as e:
            logger.warning(
                f'Conversion {currency}->{self.reporting_currency} failed, falling back to {FALLBACK_RATE}: {e}'
            )
            return FALLBACK_RATE

    def _store(self, currency: str, rate: float, refreshed_at: datetime) -> None:
        entry = self._entries.get(currency)
        if entry is None:
            self._entries[currency] = CacheEntry(
                currency=currency, rate_to_reporting_currency=rate, refreshed_at=refreshed_at
            )
        else:
            entry.rate_to_reporting_currency = rate
            entry.refreshed_at = refreshed_at
