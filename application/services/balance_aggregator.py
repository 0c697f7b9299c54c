import logging
from collections.abc import Iterable, Mapping

from application.services.conversion_cache import FALLBACK_RATE, ConversionRateCache
from domain.models import Account, BalanceTotal

logger = logging.getLogger(__name__)


def currencies_of(accounts: Iterable[Account]) -> list[str]:
    """Distinct wallet currencies, in first-seen order."""
    seen: dict[str, None] = {}
    for account in accounts:
        for wallet in account.wallets:
            seen.setdefault(wallet.currency.upper(), None)
    return list(seen)


def aggregate(accounts: Iterable[Account], rates: Mapping[str, float]) -> float:
    """Sum every wallet balance converted with rates; missing currencies count at 1.0."""
    return sum(
        wallet.balance * rates.get(wallet.currency.upper(), FALLBACK_RATE)
        for account in accounts
        for wallet in account.wallets
    )


class BalanceAggregator:
    def __init__(self, rate_cache: ConversionRateCache):
        self.rate_cache = rate_cache

    @property
    def reporting_currency(self) -> str:
        return self.rate_cache.reporting_currency

    async def total(self, accounts: list[Account]) -> BalanceTotal:
        rates = await self.rate_cache.get_rates(currencies_of(accounts))
        amount = aggregate(accounts, rates)
        logger.debug(f'Aggregated {len(accounts)} accounts into {amount} {self.reporting_currency}')
        return BalanceTotal(
            amount=amount,
            currency=self.reporting_currency,
            rates=rates,
            refreshed_at=self.rate_cache.refreshed_at,
        )
