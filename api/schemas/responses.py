from datetime import datetime

from pydantic import BaseModel, Field

from application.formatting import format_rate
from domain.models import ChangeResult, DashboardSummary, RatePoint


class RatePointResponse(BaseModel):
	time: datetime
	value: float
	source: str
	target: str

	@classmethod
	def from_point(cls, point: RatePoint) -> 'RatePointResponse':
		return cls(time=point.time, value=point.value, source=point.source, target=point.target)


class ChangeResponse(BaseModel):
	delta: float = Field(..., description='current value minus comparison value')
	kind: str = Field(..., description='positive, negative or neutral')

	@classmethod
	def from_result(cls, result: ChangeResult) -> 'ChangeResponse':
		return cls(delta=result.delta, kind=result.kind.value)


class DashboardResponse(BaseModel):
	source: str
	target: str
	series: list[RatePointResponse]
	live: RatePointResponse | None
	display_value: str = Field(..., description='Live value formatted for the target currency')
	current_change: ChangeResponse
	window_change: ChangeResponse
	last_updated: datetime | None = Field(None, description='Time of the latest live value')
	last_error: str | None = None

	@classmethod
	def from_summary(cls, summary: DashboardSummary) -> 'DashboardResponse':
		live = summary.live
		return cls(
			source=summary.pair.source,
			target=summary.pair.target,
			series=[RatePointResponse.from_point(p) for p in summary.series],
			live=RatePointResponse.from_point(live) if live else None,
			display_value=format_rate(live.value if live else None, summary.pair.target),
			current_change=ChangeResponse.from_result(summary.current_change),
			window_change=ChangeResponse.from_result(summary.window_change),
			last_updated=summary.last_updated,
			last_error=summary.last_error,
		)


class BalanceTotalResponse(BaseModel):
	amount: float
	display_amount: str
	currency: str = Field(..., description='Reporting currency')
	rates: dict[str, float] = Field(..., description='One-unit rates used for the total')
	refreshed_at: datetime | None = None

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'amount': 165.0,
				'display_amount': '165.00',
				'currency': 'USD',
				'rates': {'USD': 1.0, 'IDR': 0.000065},
				'refreshed_at': '2025-09-27T10:30:00Z',
			}
		}


class CurrencyResponse(BaseModel):
	code: str
	name: str | None = None


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[CurrencyResponse] = Field(description='Currencies offered by the rates API')


class HealthResponse(BaseModel):
	status: str
	pair: str | None = None
	feed_running: bool = False
	last_updated: datetime | None = None
	conversion_cache_fresh: bool = False
