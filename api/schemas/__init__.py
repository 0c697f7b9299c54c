from .requests import AccountIn, BalanceTotalRequest, SelectPairRequest, TimeRangeRequest, WalletIn
from .responses import (
	BalanceTotalResponse,
	ChangeResponse,
	CurrencyResponse,
	DashboardResponse,
	HealthResponse,
	RatePointResponse,
	SupportedCurrenciesResponse,
)

__all__ = [
	'AccountIn',
	'BalanceTotalRequest',
	'BalanceTotalResponse',
	'ChangeResponse',
	'CurrencyResponse',
	'DashboardResponse',
	'HealthResponse',
	'RatePointResponse',
	'SelectPairRequest',
	'SupportedCurrenciesResponse',
	'TimeRangeRequest',
	'WalletIn',
]
