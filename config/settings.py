from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	APP_NAME: str = 'FX Dashboard API'
	DEBUG: bool = False
	HOST: str = '0.0.0.0'  # nosec B104
	PORT: int = 8000

	# Upstream rates proxy
	RATES_API_BASE_URL: str = 'http://localhost:3000/api'
	HTTP_TIMEOUT_SECONDS: int = 5

	# Live feed and history window
	LIVE_POLL_INTERVAL_SECONDS: float = 60
	DEFAULT_SOURCE_CURRENCY: str = 'EUR'
	DEFAULT_TARGET_CURRENCY: str = 'IDR'
	HISTORY_LENGTH: int = 30
	HISTORY_UNIT: str = 'day'
	HISTORY_RESOLUTION: str = 'hourly'

	# Balance aggregation
	REPORTING_CURRENCY: str = 'USD'
	CONVERSION_CACHE_TTL_SECONDS: int = 60

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
