"""
Tests for DashboardService and DashboardFeed: independent queries,
period-scoped historical data and the update subscription.

HTTP is served by httpx.MockTransport; no real API connections needed.
"""

import asyncio

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from creatorpulse.core.models import DashboardAnalytics, HistoricalRecord, Period
from creatorpulse.services.dashboard_service import (
    ACCOUNTS,
    ANALYTICS,
    HISTORICAL,
    DashboardFeed,
    DashboardService,
    DashboardSnapshot,
)


BASE_URL = "http://analytics.test"

ANALYTICS_PAYLOAD = {"totalFollowers": 5000, "totalReach": 12000, "totalPosts": 40}
ACCOUNTS_PAYLOAD = [
    {"id": "1", "platform": "instagram", "username": "octo", "followersCount": 3000,
     "avgEngagement": 4.2, "totalReach": 8000, "mediaCount": 25, "isConnected": True},
    {"id": "2", "platform": "youtube", "followersCount": 2000, "avgEngagement": None,
     "totalReach": 4000, "mediaCount": 15, "isConnected": False},
]
HISTORICAL_PAYLOAD = [
    {"date": "2024-01-02T00:00:00Z", "followers": 4800, "engagement": 4.0, "reach": 11000},
    {"date": "2024-01-01T00:00:00Z", "followers": 4500, "engagement": 3.5, "reach": 10000,
     "metrics": {"posts": 30, "contentScore": {"score": 4.0}}},
]


def _service(routes, seen=None):
    """DashboardService backed by a mock transport serving routes (path -> payload or status)."""
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        result = routes.get(request.url.path, 404)
        if isinstance(result, int):
            return httpx.Response(result)
        return httpx.Response(200, json=result)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DashboardService(base_url=BASE_URL, http_client=client)


def _routes(**overrides):
    routes = {
        DashboardService.ANALYTICS_PATH: ANALYTICS_PAYLOAD,
        DashboardService.ACCOUNTS_PATH: ACCOUNTS_PAYLOAD,
        DashboardService.HISTORICAL_PATH: HISTORICAL_PAYLOAD,
    }
    routes.update(overrides)
    return routes


# ============================================================================
# DashboardService
# ============================================================================

class TestDashboardService:
    """Test fetching the three dashboard queries."""

    @pytest.mark.asyncio
    async def test_fetch_snapshot(self):
        snapshot = await _service(_routes()).fetch_snapshot(Period.MONTH)

        assert snapshot.errors == {}
        assert snapshot.analytics.total_followers == 5000
        assert [a.platform for a in snapshot.accounts] == ["instagram", "youtube"]
        assert snapshot.accounts[1].avg_engagement == 0
        assert len(snapshot.historical) == 2
        assert snapshot.historical[1].metrics.content_score.score == 4.0
        assert snapshot.historical_period == Period.MONTH

    @pytest.mark.asyncio
    @pytest.mark.parametrize("period,days", [(Period.DAY, "7"), (Period.WEEK, "30"), (Period.MONTH, "90")])
    async def test_historical_window_per_period(self, period, days):
        seen = []
        await _service(_routes(), seen).fetch_historical(period)

        params = seen[0].url.params
        assert params["period"] == period.value
        assert params["days"] == days

    @pytest.mark.asyncio
    async def test_one_failing_query_does_not_block_others(self):
        routes = _routes(**{DashboardService.HISTORICAL_PATH: 500})
        snapshot = await _service(routes).fetch_snapshot(Period.WEEK)

        assert HISTORICAL in snapshot.errors
        assert snapshot.historical is None
        assert snapshot.analytics is not None
        assert snapshot.accounts is not None

    @pytest.mark.asyncio
    async def test_failed_analytics_is_not_pending(self):
        routes = _routes(**{DashboardService.ANALYTICS_PATH: 503})
        snapshot = await _service(routes).fetch_snapshot()

        assert snapshot.analytics is None
        assert snapshot.analytics_pending is False

    @pytest.mark.asyncio
    async def test_wrapped_account_list(self):
        routes = _routes(**{DashboardService.ACCOUNTS_PATH: {"accounts": ACCOUNTS_PAYLOAD}})
        accounts = await _service(routes).fetch_accounts()
        assert len(accounts) == 2

    @pytest.mark.asyncio
    async def test_unknown_query(self):
        with pytest.raises(ValueError):
            await _service(_routes()).fetch_query("followers")

    @pytest.mark.asyncio
    async def test_fetch_subset_of_queries(self):
        seen = []
        snapshot = await _service(_routes(), seen).fetch_snapshot(Period.DAY, queries=(ANALYTICS, ACCOUNTS))

        assert {r.url.path for r in seen} == {DashboardService.ANALYTICS_PATH, DashboardService.ACCOUNTS_PATH}
        assert snapshot.analytics.total_followers == 5000
        assert snapshot.historical is None

    @pytest.mark.asyncio
    async def test_fetch_unknown_query_in_subset(self):
        with pytest.raises(ValueError):
            await _service(_routes()).fetch_snapshot(queries=("followers",))

    def test_empty_snapshot_is_pending(self):
        assert DashboardSnapshot().analytics_pending is True


class TestDashboardSnapshotMerge:
    """Test combining queries fetched on different intervals."""

    def test_takes_only_named_queries(self):
        live = DashboardSnapshot(analytics=DashboardAnalytics(total_followers=1), historical_period=Period.DAY)
        history = [HistoricalRecord.model_validate(HISTORICAL_PAYLOAD[0])]
        cached = DashboardSnapshot(
            analytics=DashboardAnalytics(total_followers=99), historical=history, historical_period=Period.WEEK
        )

        merged = live.merge(cached, (HISTORICAL,))

        assert merged.analytics.total_followers == 1
        assert merged.historical == history
        assert merged.historical_period == Period.WEEK
        assert live.historical is None

    def test_errors_follow_their_query(self):
        live = DashboardSnapshot(errors={HISTORICAL: "stale", ACCOUNTS: "down"})
        cached = DashboardSnapshot(errors={ANALYTICS: "ignored"})

        merged = live.merge(cached, (HISTORICAL,))

        assert merged.errors == {ACCOUNTS: "down"}
        assert live.errors == {HISTORICAL: "stale", ACCOUNTS: "down"}

    def test_failed_history_reported(self):
        merged = DashboardSnapshot().merge(DashboardSnapshot(errors={HISTORICAL: "500"}), (HISTORICAL,))
        assert merged.errors == {HISTORICAL: "500"}


# ============================================================================
# DashboardFeed
# ============================================================================

def _feed(period=Period.MONTH):
    service = MagicMock()
    service.fetch_query = AsyncMock()
    return DashboardFeed(service, period=period, poll_seconds=0.01, historical_poll_seconds=0.01)


class TestDashboardFeed:
    """Test the update subscription."""

    @pytest.mark.asyncio
    async def test_publish_notifies_subscribers(self):
        feed = _feed()
        received = []
        feed.subscribe(lambda query, snapshot: received.append((query, snapshot.analytics)))

        analytics = DashboardAnalytics(total_followers=10)
        applied = await feed.publish(ANALYTICS, analytics)

        assert applied is True
        assert received == [(ANALYTICS, analytics)]

    @pytest.mark.asyncio
    async def test_async_subscriber_awaited(self):
        feed = _feed()
        callback = AsyncMock()
        feed.subscribe(callback)

        await feed.publish(ACCOUNTS, [])

        callback.assert_awaited_once_with(ACCOUNTS, feed.snapshot)

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        feed = _feed()
        callback = MagicMock()
        unsubscribe = feed.subscribe(callback)
        unsubscribe()
        unsubscribe()

        await feed.publish(ANALYTICS, DashboardAnalytics())

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_latest_value_wins(self):
        feed = _feed()
        await feed.publish(ANALYTICS, DashboardAnalytics(total_followers=1))
        await feed.publish(ANALYTICS, DashboardAnalytics(total_followers=2))
        assert feed.snapshot.analytics.total_followers == 2

    @pytest.mark.asyncio
    async def test_superseded_period_dropped(self):
        feed = _feed(Period.WEEK)
        records = [HistoricalRecord.model_validate(HISTORICAL_PAYLOAD[0])]

        applied = await feed.publish(HISTORICAL, records, period=Period.MONTH)

        assert applied is False
        assert feed.snapshot.historical is None

    @pytest.mark.asyncio
    async def test_unknown_query_rejected(self):
        with pytest.raises(ValueError):
            await _feed().publish("followers", 1)

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_value(self):
        feed = _feed()
        previous = DashboardAnalytics(total_followers=7)
        await feed.publish(ANALYTICS, previous)
        feed.service.fetch_query.side_effect = httpx.ConnectError("down")

        await feed.refresh(ANALYTICS)

        assert feed.snapshot.analytics is previous
        assert ANALYTICS in feed.snapshot.errors

    @pytest.mark.asyncio
    async def test_successful_refresh_clears_error(self):
        feed = _feed()
        await feed.publish_error(ANALYTICS, RuntimeError("boom"))
        feed.service.fetch_query.return_value = DashboardAnalytics(total_followers=3)

        await feed.refresh(ANALYTICS)

        assert ANALYTICS not in feed.snapshot.errors
        assert feed.snapshot.analytics.total_followers == 3

    @pytest.mark.asyncio
    async def test_set_period_clears_and_refetches_history(self):
        feed = _feed(Period.MONTH)
        await feed.publish(HISTORICAL, [HistoricalRecord.model_validate(HISTORICAL_PAYLOAD[0])], period=Period.MONTH)
        new_records = [HistoricalRecord.model_validate(HISTORICAL_PAYLOAD[1])]
        feed.service.fetch_query.return_value = new_records

        await feed.set_period(Period.DAY)

        feed.service.fetch_query.assert_awaited_once_with(HISTORICAL, Period.DAY)
        assert feed.snapshot.historical == new_records
        assert feed.snapshot.historical_period == Period.DAY

    @pytest.mark.asyncio
    async def test_set_same_period_is_noop(self):
        feed = _feed(Period.MONTH)
        await feed.set_period(Period.MONTH)
        feed.service.fetch_query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_polling_until_stopped(self):
        service = _service(_routes())
        feed = DashboardFeed(service, period=Period.WEEK, poll_seconds=0.01, historical_poll_seconds=0.01)
        stop = asyncio.Event()
        seen = set()

        def on_update(query, snapshot):
            seen.add(query)
            if seen == {ANALYTICS, ACCOUNTS, HISTORICAL}:
                stop.set()

        feed.subscribe(on_update)
        await asyncio.wait_for(feed.run_polling(stop), timeout=5)

        assert feed.snapshot.analytics.total_posts == 40
        assert len(feed.snapshot.accounts) == 2
        assert feed.snapshot.historical_period == Period.WEEK

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block_others(self):
        feed = _feed()
        received = []
        feed.subscribe(MagicMock(side_effect=RuntimeError("bad consumer")))
        feed.subscribe(AsyncMock(side_effect=ValueError("bad async consumer")))
        feed.subscribe(lambda query, snapshot: received.append(query))

        applied = await feed.publish(ANALYTICS, DashboardAnalytics(total_followers=4))

        assert applied is True
        assert received == [ANALYTICS]
        assert feed.snapshot.analytics.total_followers == 4

    @pytest.mark.asyncio
    async def test_polling_survives_failing_subscriber(self):
        service = _service(_routes())
        feed = DashboardFeed(service, period=Period.WEEK, poll_seconds=0.01, historical_poll_seconds=0.01)
        stop = asyncio.Event()
        counts = {query: 0 for query in (ANALYTICS, ACCOUNTS, HISTORICAL)}

        def bad(query, snapshot):
            raise RuntimeError("bad consumer")

        def on_update(query, snapshot):
            counts[query] += 1
            if all(count >= 3 for count in counts.values()):
                stop.set()

        feed.subscribe(bad)
        feed.subscribe(on_update)
        await asyncio.wait_for(feed.run_polling(stop), timeout=5)

        assert stop.is_set()
        assert all(count >= 3 for count in counts.values())

    def test_default_intervals(self):
        feed = DashboardFeed(MagicMock())
        assert feed.intervals[ANALYTICS] == 2
        assert feed.intervals[ACCOUNTS] == 2
        assert feed.intervals[HISTORICAL] == 5
