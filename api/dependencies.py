import logging
from datetime import timedelta

from application.services import BalanceAggregator, ConversionRateCache, RateDashboard
from config.settings import get_settings
from domain.models import CurrencyPair
from infrastructure.providers import RatesAPIClient

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	client: RatesAPIClient | None = None
	dashboard: RateDashboard | None = None
	rate_cache: ConversionRateCache | None = None
	balance_aggregator: BalanceAggregator | None = None


deps = AppDependencies()


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.client = RatesAPIClient(settings.RATES_API_BASE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
	deps.dashboard = RateDashboard(
		deps.client,
		poll_interval=settings.LIVE_POLL_INTERVAL_SECONDS,
		history_length=settings.HISTORY_LENGTH,
		history_unit=settings.HISTORY_UNIT,
		history_resolution=settings.HISTORY_RESOLUTION,
	)
	deps.rate_cache = ConversionRateCache(
		deps.client.fetch_unit_rate,
		reporting_currency=settings.REPORTING_CURRENCY,
		ttl=timedelta(seconds=settings.CONVERSION_CACHE_TTL_SECONDS),
	)
	deps.balance_aggregator = BalanceAggregator(deps.rate_cache)
	logger.info('Dependencies initialized')


async def bootstrap() -> None:
	"""Start watching the default pair. Called after init_dependencies() at startup."""
	if deps.dashboard is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	settings = get_settings()
	pair = CurrencyPair.of(settings.DEFAULT_SOURCE_CURRENCY, settings.DEFAULT_TARGET_CURRENCY)
	await deps.dashboard.select_pair(pair)
	logger.info(f'Bootstrap complete, watching {pair}')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.dashboard:
		await deps.dashboard.close()
	if deps.client:
		await deps.client.close()

	logger.info('Cleanup complete')


def get_rates_client() -> RatesAPIClient:
	if deps.client is None:
		raise RuntimeError('Rates client not initialized')
	return deps.client


def get_dashboard() -> RateDashboard:
	if deps.dashboard is None:
		raise RuntimeError('Dashboard not initialized')
	return deps.dashboard


def get_conversion_cache() -> ConversionRateCache:
	if deps.rate_cache is None:
		raise RuntimeError('Conversion rate cache not initialized')
	return deps.rate_cache


def get_balance_aggregator() -> BalanceAggregator:
	if deps.balance_aggregator is None:
		raise RuntimeError('Balance aggregator not initialized')
	return deps.balance_aggregator
