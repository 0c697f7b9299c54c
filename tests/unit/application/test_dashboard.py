# nosec B101


import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from application.services.dashboard import RateDashboard
from domain.exceptions import NoActivePairError, RatesTransportError
from domain.models import ChangeKind, CurrencyPair, RatePoint
from infrastructure.providers import RatesAPIClient

T0 = datetime(2025, 11, 5, 10, 0, 0, tzinfo=UTC)
EUR_IDR = CurrencyPair('EUR', 'IDR')
USD_EUR = CurrencyPair('USD', 'EUR')


def point(seconds: int, value: float, source: str = 'EUR', target: str = 'IDR') -> RatePoint:
    return RatePoint(time=T0 + timedelta(seconds=seconds), value=value, source=source, target=target)


@pytest.fixture
def client():
    mock_client = MagicMock(spec=RatesAPIClient)
    mock_client.get_history = AsyncMock(return_value=[point(0, 100), point(60, 100)])
    mock_client.fetch_live = AsyncMock(return_value=point(120, 105))
    return mock_client


@pytest_asyncio.fixture
async def dashboard(client):
    board = RateDashboard(client, poll_interval=10)
    yield board
    await board.close()


@pytest.mark.asyncio
async def test_history_and_live_tick_merge_end_to_end(dashboard):
    await dashboard.select_pair(EUR_IDR)
    await asyncio.sleep(0.01)

    summary = dashboard.summary()

    assert len(summary.series) == 3
    assert summary.series[-1].value == 105
    assert summary.live == point(120, 105)
    assert summary.current_change.delta == 5
    assert summary.current_change.kind is ChangeKind.POSITIVE
    assert summary.window_change.delta == 5
    assert summary.last_updated == point(120, 105).time


@pytest.mark.asyncio
async def test_select_pair_requests_configured_history_window(dashboard, client):
    await dashboard.select_pair(EUR_IDR, length=7)

    client.get_history.assert_awaited_with('EUR', 'IDR', length=7, unit='day', resolution='hourly')
    assert dashboard.history_length == 7


@pytest.mark.asyncio
async def test_summary_before_live_tick_is_neutral(client):
    gate = asyncio.Event()

    async def _blocked_live(pair):
        await gate.wait()
        return point(120, 105)

    client.fetch_live = AsyncMock(side_effect=_blocked_live)
    board = RateDashboard(client, poll_interval=10)

    summary = await board.select_pair(EUR_IDR)

    assert summary.live is None
    assert summary.current_change.kind is ChangeKind.NEUTRAL
    assert summary.window_change.kind is ChangeKind.NEUTRAL
    assert [p.value for p in summary.series] == [100, 100]
    gate.set()
    await board.close()


@pytest.mark.asyncio
async def test_switching_pair_discards_series_and_stops_old_feed(dashboard, client):
    await dashboard.select_pair(EUR_IDR)
    await asyncio.sleep(0.01)
    old_feed = dashboard.feed

    client.get_history.return_value = [point(0, 1.08, 'USD', 'EUR')]
    client.fetch_live.return_value = point(30, 1.09, 'USD', 'EUR')
    await dashboard.select_pair(USD_EUR)
    await asyncio.sleep(0.01)

    summary = dashboard.summary()
    assert old_feed.is_running is False
    assert dashboard.feed is not old_feed
    assert summary.pair == USD_EUR
    assert all(p.pair == USD_EUR for p in summary.series)
    assert [p.value for p in summary.series] == [1.08, 1.09]


@pytest.mark.asyncio
async def test_stale_history_for_previous_pair_is_dropped(client):
    gate = asyncio.Event()
    eur_history = [point(0, 100)]
    usd_history = [point(0, 1.08, 'USD', 'EUR')]

    async def _history(source, target, **kwargs):
        if source == 'EUR':
            await gate.wait()
            return eur_history
        return usd_history

    client.get_history = AsyncMock(side_effect=_history)
    client.fetch_live = AsyncMock(side_effect=ConnectionError('offline'))
    board = RateDashboard(client, poll_interval=10)

    slow = asyncio.create_task(board.select_pair(EUR_IDR))
    await asyncio.sleep(0)
    await board.select_pair(USD_EUR)
    gate.set()
    await slow

    assert board.pair == USD_EUR
    assert board.store.points == tuple(usd_history)
    await board.close()


@pytest.mark.asyncio
async def test_history_failure_keeps_last_good_series(dashboard, client):
    await dashboard.select_pair(EUR_IDR)
    await asyncio.sleep(0.01)
    client.get_history.side_effect = RatesTransportError('Rates API request failed: ConnectError')

    summary = await dashboard.refresh()

    assert [p.value for p in summary.series] == [100, 100, 105]
    assert 'ConnectError' in summary.last_error


@pytest.mark.asyncio
async def test_unordered_history_is_rejected_and_reported(dashboard, client):
    await dashboard.select_pair(EUR_IDR)
    client.get_history.return_value = [point(60, 1), point(0, 2)]

    summary = await dashboard.set_time_range(2)

    assert [p.value for p in dashboard.store.points][:2] == [100, 100]
    assert 'not time-ordered' in summary.last_error


@pytest.mark.asyncio
async def test_refresh_reloads_history_and_fetches_live_once(dashboard, client):
    await dashboard.select_pair(EUR_IDR)
    await asyncio.sleep(0.01)
    client.get_history.return_value = [point(0, 100), point(60, 100), point(120, 105)]
    client.fetch_live.return_value = point(180, 104)

    summary = await dashboard.refresh()

    assert client.get_history.await_count == 2
    assert client.fetch_live.await_count == 2
    assert summary.live.value == 104
    assert summary.current_change.delta == pytest.approx(-1)
    assert summary.current_change.kind is ChangeKind.NEGATIVE


@pytest.mark.asyncio
async def test_summary_without_pair_raises(dashboard):
    with pytest.raises(NoActivePairError):
        dashboard.summary()

    with pytest.raises(NoActivePairError):
        await dashboard.refresh()


@pytest.mark.asyncio
async def test_close_stops_feed(client):
    board = RateDashboard(client, poll_interval=10)
    await board.select_pair(EUR_IDR)

    await board.close()

    assert board.feed.is_running is False


@pytest.mark.asyncio
async def test_overtaken_time_range_load_is_dropped(client):
    gate = asyncio.Event()
    week = [point(0, 100), point(60, 101)]
    fortnight = [point(0, 99), point(60, 100), point(120, 102)]

    async def _history(source, target, length, **kwargs):
        if length == 7:
            await gate.wait()
            return week
        return fortnight

    client.fetch_live = AsyncMock(side_effect=ConnectionError('offline'))
    board = RateDashboard(client, poll_interval=10)
    await board.select_pair(EUR_IDR)
    client.get_history = AsyncMock(side_effect=_history)

    slow = asyncio.create_task(board.set_time_range(7))
    await asyncio.sleep(0)
    await board.set_time_range(14)
    gate.set()
    await slow

    assert board.store.points == tuple(fortnight)
    assert board.history_error is None
    await board.close()


@pytest.mark.asyncio
async def test_close_drains_fetches_of_replaced_feeds(client):
    gate = asyncio.Event()

    async def _blocked_live(pair):
        await gate.wait()
        return point(120, 105)

    client.fetch_live = AsyncMock(side_effect=_blocked_live)
    board = RateDashboard(client, poll_interval=10)
    await board.select_pair(EUR_IDR)
    old_feed = board.feed
    client.get_history.return_value = [point(0, 1.08, 'USD', 'EUR')]
    await board.select_pair(USD_EUR)
    assert old_feed.has_pending_fetches is True

    asyncio.get_running_loop().call_later(0.01, gate.set)
    await board.close()

    assert old_feed.has_pending_fetches is False
    assert board.feed.has_pending_fetches is False
    assert old_feed.last_value is None
