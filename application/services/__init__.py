from .balance_aggregator import BalanceAggregator, aggregate, currencies_of
from .conversion_cache import ConversionRateCache
from .dashboard import RateDashboard
from .live_feed import LiveRateFeed

__all__ = [
    'BalanceAggregator',
    'ConversionRateCache',
    'LiveRateFeed',
    'RateDashboard',
    'aggregate',
    'currencies_of',
]
