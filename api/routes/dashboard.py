from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_conversion_cache, get_dashboard
from api.schemas import DashboardResponse, SelectPairRequest, TimeRangeRequest
from application.services import ConversionRateCache, RateDashboard
from domain.models import CurrencyPair

router = APIRouter(prefix='/api/dashboard', tags=['dashboard'])


@router.get(
	'',
	response_model=DashboardResponse,
	status_code=status.HTTP_200_OK,
	summary='Merged series and change metrics of the active pair',
)
async def get_dashboard_summary(
	dashboard: Annotated[RateDashboard, Depends(get_dashboard)],
) -> DashboardResponse:
	return DashboardResponse.from_summary(dashboard.summary())


@router.put(
	'/pair',
	response_model=DashboardResponse,
	status_code=status.HTTP_200_OK,
	summary='Select the currency pair to watch',
)
async def select_pair(
	request: SelectPairRequest,
	dashboard: Annotated[RateDashboard, Depends(get_dashboard)],
) -> DashboardResponse:
	pair = CurrencyPair.of(request.source, request.target)
	summary = await dashboard.select_pair(pair, length=request.length)
	return DashboardResponse.from_summary(summary)


@router.put(
	'/range',
	response_model=DashboardResponse,
	status_code=status.HTTP_200_OK,
	summary='Change the history window of the active pair',
)
async def set_time_range(
	request: TimeRangeRequest,
	dashboard: Annotated[RateDashboard, Depends(get_dashboard)],
) -> DashboardResponse:
	summary = await dashboard.set_time_range(request.length)
	return DashboardResponse.from_summary(summary)


@router.post(
	'/refresh',
	response_model=DashboardResponse,
	status_code=status.HTTP_200_OK,
	summary='Reload history, fetch the live rate once and expire conversion rates',
)
async def refresh_dashboard(
	dashboard: Annotated[RateDashboard, Depends(get_dashboard)],
	rate_cache: Annotated[ConversionRateCache, Depends(get_conversion_cache)],
) -> DashboardResponse:
	rate_cache.invalidate()
	summary = await dashboard.refresh()
	return DashboardResponse.from_summary(summary)
