from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_conversion_cache, get_dashboard, get_rates_client
from api.schemas import CurrencyResponse, HealthResponse, SupportedCurrenciesResponse
from application.services import ConversionRateCache, RateDashboard
from infrastructure.providers import RatesAPIClient

router = APIRouter(prefix='/api', tags=['currency'])


@router.get(
	'/currencies',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies(
	client: Annotated[RatesAPIClient, Depends(get_rates_client)],
) -> SupportedCurrenciesResponse:
	currencies = await client.get_currencies()
	return SupportedCurrenciesResponse(
		currencies=[CurrencyResponse(code=c.code, name=c.name) for c in currencies]
	)


@router.get('/health', response_model=HealthResponse, summary='Liveness and feed status')
async def health(
	dashboard: Annotated[RateDashboard, Depends(get_dashboard)],
	rate_cache: Annotated[ConversionRateCache, Depends(get_conversion_cache)],
) -> HealthResponse:
	feed = dashboard.feed
	return HealthResponse(
		status='healthy' if feed is not None and feed.is_running else 'degraded',
		pair=str(dashboard.pair) if dashboard.pair else None,
		feed_running=feed.is_running if feed else False,
		last_updated=feed.last_updated if feed else None,
		conversion_cache_fresh=rate_cache.is_fresh(),
	)
