import contextlib
import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.exceptions import ProviderError, RatesTransportError, UpstreamHTTPError
from domain.models import Conversion, CurrencyInfo, CurrencyPair, RatePoint

logger = logging.getLogger(__name__)

MIN_HISTORY_LENGTH = 1
MAX_HISTORY_LENGTH = 30


def parse_time(raw: Any) -> datetime:
    """Accept epoch milliseconds or an ISO-8601 string, always return aware UTC."""
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f'Invalid time value: {raw!r}')
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000, tz=UTC)
    parsed = datetime.fromisoformat(str(raw).replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class RatesAPIClient:
    """Client for the dashboard rates proxy (live, history, convert, currencies)."""

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None, timeout: int = 5):
        self.base_url = base_url.rstrip('/')
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={'accept': 'application/json'},
        )

    @property
    def name(self) -> str:
        return 'rates-api'

    async def _request(self, endpoint: str, params: dict | None = None) -> Any:
        url = f'{self.base_url}/{endpoint}'
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body: Any = e.response.text[:200]
            with contextlib.suppress(Exception):
                body = e.response.json()
            raise UpstreamHTTPError(e.response.status_code, body, endpoint) from e
        except httpx.RequestError as e:
            raise RatesTransportError(f'Rates API request failed: {e.__class__.__name__}') from e

        try:
            return response.json()
        except Exception as e:
            raise ProviderError(f'Rates API response parsing error: {str(e)}') from e

    async def get_live(self, source: str, target: str) -> RatePoint:
        data = await self._request('rates/live', {'source': source.upper(), 'target': target.upper()})
        try:
            return RatePoint(
                time=parse_time(data['time']),
                value=float(data['value']),
                source=str(data.get('source', source)).upper(),
                target=str(data.get('target', target)).upper(),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f'Malformed live rate for {source}->{target}: {e}') from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(RatesTransportError),
        reraise=True,
    )
    async def get_history(
        self,
        source: str,
        target: str,
        length: int = 30,
        unit: str = 'day',
        resolution: str = 'hourly',
    ) -> list[RatePoint]:
        source, target = source.upper(), target.upper()
        capped_length = min(max(int(length), MIN_HISTORY_LENGTH), MAX_HISTORY_LENGTH)
        data = await self._request(
            'rates/history',
            {
                'source': source,
                'target': target,
                'length': capped_length,
                'unit': unit,
                'resolution': resolution,
            },
        )
        if not isinstance(data, list):
            raise ProviderError(f'Expected a list of history points for {source}->{target}')

        try:
            return [
                RatePoint(time=parse_time(item['time']), value=float(item['value']), source=source, target=target)
                for item in data
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f'Malformed history point for {source}->{target}: {e}') from e

    async def convert(self, source: str, target: str, amount: float = 1) -> Conversion:
        source, target = source.upper(), target.upper()
        data = await self._request('convert', {'source': source, 'target': target, 'amount': amount})
        try:
            return Conversion(
                source=source,
                target=target,
                amount=float(data.get('amount', amount)),
                rate=float(data['rate']),
                converted=float(data['converted']),
                time=parse_time(data['time']) if data.get('time') is not None else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f'Malformed conversion for {source}->{target}: {e}') from e

    async def get_currencies(self) -> list[CurrencyInfo]:
        data = await self._request('currencies')
        if not isinstance(data, list):
            raise ProviderError('Expected a list of currencies')
        return [
            CurrencyInfo(code=str(item['code']).upper(), name=item.get('name'))
            for item in data
            if isinstance(item, dict) and item.get('code')
        ]

    async def fetch_live(self, pair: CurrencyPair) -> RatePoint:
        return await self.get_live(pair.source, pair.target)

    async def fetch_unit_rate(self, currency: str, reporting_currency: str) -> float:
        conversion = await self.convert(currency, reporting_currency, 1)
        return conversion.rate

    async def close(self) -> None:
        await self._client.aclose()
