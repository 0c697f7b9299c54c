from .accounts import Account, BalanceTotal, CacheEntry, Wallet
from .rates import (
    ChangeKind,
    ChangeResult,
    Conversion,
    CurrencyInfo,
    CurrencyPair,
    DashboardSummary,
    RatePoint,
    normalize_currency,
)

__all__ = [
    'Account',
    'BalanceTotal',
    'CacheEntry',
    'ChangeKind',
    'ChangeResult',
    'Conversion',
    'CurrencyInfo',
    'CurrencyPair',
    'DashboardSummary',
    'RatePoint',
    'Wallet',
    'normalize_currency',
]
