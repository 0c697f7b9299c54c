import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from domain.exceptions import InvalidCurrencyError

_CURRENCY_CODE = re.compile(r'^[A-Z]{3}$')


def normalize_currency(code: str) -> str:
    """Upper-case and validate a three-letter currency code."""
    normalized = (code or '').strip().upper()
    if not _CURRENCY_CODE.match(normalized):
        raise InvalidCurrencyError(f'Invalid currency code: {code!r} (must be 3 letters)')
    return normalized


@dataclass(frozen=True)
class CurrencyPair:
    source: str
    target: str

    @classmethod
    def of(cls, source: str, target: str) -> 'CurrencyPair':
        return cls(source=normalize_currency(source), target=normalize_currency(target))

    def __str__(self) -> str:
        return f'{self.source}->{self.target}'


@dataclass(frozen=True)
class RatePoint:
    """One observation: 1 source = value target at time."""
    time: datetime
    value: float
    source: str
    target: str

    @property
    def pair(self) -> CurrencyPair:
        return CurrencyPair(self.source, self.target)


class ChangeKind(Enum):
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NEUTRAL = 'neutral'


@dataclass(frozen=True)
class ChangeResult:
    delta: float
    kind: ChangeKind


@dataclass(frozen=True)
class Conversion:
    source: str
    target: str
    amount: float
    rate: float
    converted: float
    time: datetime | None = None


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    name: str | None


@dataclass(frozen=True)
class DashboardSummary:
    pair: CurrencyPair
    series: list[RatePoint]
    live: RatePoint | None
    current_change: ChangeResult
    window_change: ChangeResult
    last_updated: datetime | None
    last_error: str | None = None
