"""
Dashboard data service and live feed.

Fetches the three dashboard queries from the internal analytics API:
- GET /api/dashboard/analytics          (live aggregates)
- GET /api/social-accounts              (connected accounts)
- GET /api/analytics/historical         (historical series for a period)

The queries are independent: one failing or stalling never blocks the
others. DashboardFeed exposes the results as a subscription; values can be
pushed by a webhook receiver via publish() or pulled on a timer with
run_polling().
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

import httpx

from ..core.config import Config
from ..core.models import AccountSnapshot, DashboardAnalytics, HistoricalRecord, Period
from ..core.observability import get_logfire

logger = logging.getLogger(__name__)


# Query names
ANALYTICS = "analytics"
ACCOUNTS = "accounts"
HISTORICAL = "historical"
QUERIES = (ANALYTICS, ACCOUNTS, HISTORICAL)

# Days of history requested per period
HISTORY_DAYS: Dict[Period, int] = {
    Period.DAY: 7,
    Period.WEEK: 30,
    Period.MONTH: 90,
}


@dataclass
class DashboardSnapshot:
    """Latest resolved value of each dashboard query"""
    analytics: Optional[DashboardAnalytics] = None
    accounts: Optional[List[AccountSnapshot]] = None
    historical: Optional[List[HistoricalRecord]] = None
    historical_period: Optional[Period] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def analytics_pending(self) -> bool:
        """Primary query has neither resolved nor failed yet"""
        return self.analytics is None and ANALYTICS not in self.errors

    def merge(self, other: "DashboardSnapshot", queries: Sequence[str]) -> "DashboardSnapshot":
        """Copy of this snapshot with the given queries taken from other."""
        merged = replace(self, errors=dict(self.errors))
        for query in queries:
            setattr(merged, query, getattr(other, query))
            merged.errors.pop(query, None)
            if query in other.errors:
                merged.errors[query] = other.errors[query]
        if HISTORICAL in queries:
            merged.historical_period = other.historical_period
        return merged


def _unwrap_list(payload: Any, key: str) -> List[Any]:
    if isinstance(payload, dict):
        payload = payload.get(key) or payload.get("data") or []
    return payload or []


class DashboardService:
    """Client for the internal analytics API"""

    ANALYTICS_PATH = "/api/dashboard/analytics"
    ACCOUNTS_PATH = "/api/social-accounts"
    HISTORICAL_PATH = "/api/analytics/historical"

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize DashboardService.

        Args:
            base_url: Analytics API root (defaults to Config.DASHBOARD_API_BASE_URL)
            http_client: Pre-built httpx client (created lazily when omitted)
            timeout: Request timeout in seconds (defaults to Config.DASHBOARD_API_TIMEOUT)
        """
        self.base_url = (base_url or Config.DASHBOARD_API_BASE_URL).rstrip("/")
        self.timeout = timeout or Config.DASHBOARD_API_TIMEOUT
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.timeout
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this service created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "DashboardService":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._get_client()
        response = await client.get(f"{self.base_url}{path}", params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_analytics(self) -> DashboardAnalytics:
        """Fetch live aggregate totals"""
        payload = await self._get_json(self.ANALYTICS_PATH)
        return DashboardAnalytics.model_validate(payload or {})

    async def fetch_accounts(self) -> List[AccountSnapshot]:
        """Fetch connected social accounts"""
        payload = await self._get_json(self.ACCOUNTS_PATH)
        return [AccountSnapshot.model_validate(item) for item in _unwrap_list(payload, "accounts")]

    async def fetch_historical(self, period: Period) -> List[HistoricalRecord]:
        """
        Fetch the historical series for a period.

        Args:
            period: day (7 days), week (30 days) or month (90 days)

        Returns:
            Historical records in the order the API returned them
        """
        period = Period(period)
        payload = await self._get_json(
            self.HISTORICAL_PATH,
            params={"period": period.value, "days": HISTORY_DAYS[period]},
        )
        return [HistoricalRecord.model_validate(item) for item in _unwrap_list(payload, "records")]

    async def fetch_query(self, query: str, period: Period = Period.MONTH) -> Any:
        """Fetch one query by name"""
        if query == ANALYTICS:
            return await self.fetch_analytics()
        if query == ACCOUNTS:
            return await self.fetch_accounts()
        if query == HISTORICAL:
            return await self.fetch_historical(period)
        raise ValueError(f"Unknown dashboard query: {query}")

    async def fetch_snapshot(
        self,
        period: Period = Period.MONTH,
        queries: Sequence[str] = QUERIES
    ) -> DashboardSnapshot:
        """
        Fetch the requested queries concurrently (all three by default).

        A failing query is logged and recorded in snapshot.errors; the other
        results are still returned.
        """
        period = Period(period)
        unknown = set(queries) - set(QUERIES)
        if unknown:
            raise ValueError(f"Unknown dashboard query: {', '.join(sorted(unknown))}")

        with get_logfire().span("fetch_dashboard_snapshot", period=period.value, queries=list(queries)):
            results = await asyncio.gather(
                *(self.fetch_query(query, period) for query in queries),
                return_exceptions=True,
            )

        snapshot = DashboardSnapshot(historical_period=period)
        for query, result in zip(queries, results):
            if isinstance(result, (httpx.HTTPError, ValueError)):
                logger.warning(f"Dashboard query '{query}' failed: {result}")
                snapshot.errors[query] = str(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                setattr(snapshot, query, result)

        return snapshot


Subscriber = Callable[[str, DashboardSnapshot], Union[None, Awaitable[None]]]


class DashboardFeed:
    """
    Subscription over the dashboard queries.

    Every update replaces the previous value of its query (latest resolved
    value wins) and notifies subscribers with the query name and the full
    snapshot. A failed refresh keeps the previous value and records the error.
    """

    def __init__(
        self,
        service: DashboardService,
        period: Period = Period.MONTH,
        poll_seconds: Optional[float] = None,
        historical_poll_seconds: Optional[float] = None
    ):
        self.service = service
        self.period = Period(period)
        self.snapshot = DashboardSnapshot(historical_period=self.period)
        self.intervals: Dict[str, float] = {
            ANALYTICS: poll_seconds or Config.DASHBOARD_POLL_SECONDS,
            ACCOUNTS: poll_seconds or Config.DASHBOARD_POLL_SECONDS,
            HISTORICAL: historical_poll_seconds or Config.HISTORICAL_POLL_SECONDS,
        }
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for updates.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def _notify(self, query: str) -> None:
        # A failing subscriber must not stop the others or the polling loops
        for callback in list(self._subscribers):
            try:
                result = callback(query, self.snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Dashboard subscriber failed on '{query}' update")

    async def publish(self, query: str, data: Any, period: Optional[Period] = None) -> bool:
        """
        Push a new value for a query.

        Historical data for a period other than the selected one is dropped,
        so a superseded response never overwrites the current period.

        Returns:
            True if the value was applied
        """
        if query not in QUERIES:
            raise ValueError(f"Unknown dashboard query: {query}")

        if query == HISTORICAL and period is not None and Period(period) != self.period:
            logger.debug(f"Dropping historical data for superseded period '{period}'")
            return False

        setattr(self.snapshot, query, data)
        if query == HISTORICAL:
            self.snapshot.historical_period = self.period
        self.snapshot.errors.pop(query, None)
        await self._notify(query)
        return True

    async def publish_error(self, query: str, error: Exception) -> None:
        """Record a failed refresh, keeping the previous value."""
        self.snapshot.errors[query] = str(error)
        await self._notify(query)

    async def set_period(self, period: Period) -> None:
        """Switch the historical series to another period."""
        period = Period(period)
        if period == self.period:
            return
        self.period = period
        self.snapshot.historical = None
        self.snapshot.historical_period = period
        self.snapshot.errors.pop(HISTORICAL, None)
        await self.refresh(HISTORICAL)

    async def refresh(self, query: str) -> None:
        """Refetch one query and publish the outcome."""
        period = self.period
        try:
            data = await self.service.fetch_query(query, period)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Refresh of '{query}' failed: {e}")
            await self.publish_error(query, e)
            return

        await self.publish(query, data, period=period if query == HISTORICAL else None)

    async def _poll(self, query: str, stop: asyncio.Event) -> None:
        interval = self.intervals[query]
        while not stop.is_set():
            await self.refresh(query)
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    async def run_polling(self, stop: Optional[asyncio.Event] = None) -> None:
        """
        Poll every query on its own interval until stop is set.

        Analytics and accounts refresh every DASHBOARD_POLL_SECONDS,
        historical data every HISTORICAL_POLL_SECONDS. Each tick refetches;
        cached values are always treated as stale.
        """
        stop = stop or asyncio.Event()
        logger.info(f"Polling dashboard queries every {self.intervals}")
        await asyncio.gather(*(self._poll(query, stop) for query in QUERIES))
