from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Wallet:
    currency: str
    balance: float


@dataclass(frozen=True)
class Account:
    id: str
    name: str | None = None
    wallets: list[Wallet] = field(default_factory=list)


@dataclass
class CacheEntry:
    currency: str
    rate_to_reporting_currency: float
    refreshed_at: datetime


@dataclass(frozen=True)
class BalanceTotal:
    amount: float
    currency: str
    rates: dict[str, float]
    refreshed_at: datetime | None
