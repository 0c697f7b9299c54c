# nosec B101


from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_conversion_cache, get_dashboard, get_rates_client
from api.main import app
from domain.exceptions import RatesTransportError
from domain.models import CurrencyInfo, CurrencyPair


@pytest.fixture
def mock_rates_client():
    client = MagicMock()
    client.get_currencies = AsyncMock(
        return_value=[CurrencyInfo('EUR', 'Euro'), CurrencyInfo('IDR', 'Indonesian Rupiah')]
    )
    return client


@pytest.fixture
def mock_dashboard():
    dashboard = MagicMock()
    dashboard.pair = CurrencyPair('EUR', 'IDR')
    dashboard.feed.is_running = True
    dashboard.feed.last_updated = None
    return dashboard


@pytest.fixture
def mock_rate_cache():
    cache = MagicMock()
    cache.is_fresh.return_value = False
    return cache


@pytest.fixture
def client(mock_rates_client, mock_dashboard, mock_rate_cache):
    app.dependency_overrides[get_rates_client] = lambda: mock_rates_client
    app.dependency_overrides[get_dashboard] = lambda: mock_dashboard
    app.dependency_overrides[get_conversion_cache] = lambda: mock_rate_cache
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_supported_currencies(client):
    response = client.get('/api/currencies')

    assert response.status_code == 200
    assert response.json() == {
        'currencies': [
            {'code': 'EUR', 'name': 'Euro'},
            {'code': 'IDR', 'name': 'Indonesian Rupiah'},
        ]
    }


def test_supported_currencies_upstream_down(client, mock_rates_client):
    mock_rates_client.get_currencies.side_effect = RatesTransportError('Rates API request failed: ConnectError')

    response = client.get('/api/currencies')

    assert response.status_code == 503


def test_health_healthy(client):
    response = client.get('/api/health')

    assert response.status_code == 200
    data = response.json()
    assert data['status'] == 'healthy'
    assert data['pair'] == 'EUR->IDR'
    assert data['feed_running'] is True
    assert data['conversion_cache_fresh'] is False


def test_health_degraded_when_feed_stopped(client, mock_dashboard):
    mock_dashboard.feed.is_running = False

    response = client.get('/api/health')

    assert response.json()['status'] == 'degraded'


def test_health_without_pair(client, mock_dashboard):
    mock_dashboard.pair = None
    mock_dashboard.feed = None

    response = client.get('/api/health')

    data = response.json()
    assert data['status'] == 'degraded'
    assert data['pair'] is None
    assert data['feed_running'] is False
