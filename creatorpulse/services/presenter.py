"""
MetricsPresenter - Turns dashboard query results into a renderable view.

Holds the interaction state of the performance card (selected period and
the transient period insight) and decides between the loading skeleton,
the onboarding call-to-action and the metrics grid.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import Field

from ..core.config import Config
from ..core.models import (
    CamelModel,
    ConnectedPlatform,
    ContentScore,
    GrowthReport,
    Period,
    PeriodData,
)
from .dashboard_service import DashboardSnapshot
from .metrics_service import MetricsService


STATUS_LOADING = "loading"
STATUS_ONBOARDING = "onboarding"
STATUS_METRICS = "metrics"

PERIOD_LABELS: Dict[Period, str] = {
    Period.DAY: "Today",
    Period.WEEK: "This Week",
    Period.MONTH: "This Month",
}


class PeriodInsight(CamelModel):
    """Educational panel shown after switching periods"""
    title: str
    description: str
    tips: List[str]
    accent: str


PERIOD_INSIGHTS: Dict[Period, PeriodInsight] = {
    Period.DAY: PeriodInsight(
        title="Today's Performance",
        description=(
            "Real-time data showing today's activity. Great for monitoring immediate "
            "response to content and timing optimal posts."
        ),
        tips=[
            "Daily data shows immediate engagement patterns",
            "Best for tracking post timing effectiveness",
            "Monitor hourly engagement trends",
        ],
        accent="blue",
    ),
    Period.WEEK: PeriodInsight(
        title="Weekly Trends",
        description=(
            "7-day overview revealing weekly patterns and consistency. Ideal for "
            "understanding your audience's weekly behavior."
        ),
        tips=[
            "Weekly data reveals audience weekly patterns",
            "Perfect for content scheduling strategies",
            "Shows consistency in your posting rhythm",
        ],
        accent="green",
    ),
    Period.MONTH: PeriodInsight(
        title="Monthly Growth",
        description=(
            "30-day analysis showing long-term growth trends and content performance. "
            "Essential for strategic planning."
        ),
        tips=[
            "Monthly view shows sustainable growth patterns",
            "Best for measuring content strategy success",
            "Tracks long-term follower and engagement trends",
        ],
        accent="purple",
    ),
}


@dataclass
class PresenterState:
    """
    Interaction state of the performance card.

    Selecting a period shows that period's insight for
    INSIGHT_DISPLAY_SECONDS; selecting another period restarts the timer.
    """
    selected_period: Period = Period.MONTH
    show_insights: bool = False
    insight_key: int = 0
    insight_deadline: Optional[float] = None
    insight_seconds: float = field(default_factory=lambda: Config.INSIGHT_DISPLAY_SECONDS)

    def select_period(self, period: Period, now: Optional[float] = None) -> bool:
        """
        Select a period.

        Returns:
            True if the insight was (re)started
        """
        period = Period(period)
        if period == self.selected_period and self.insight_key > 0:
            return False

        now = time.monotonic() if now is None else now
        self.selected_period = period
        self.show_insights = True
        self.insight_key += 1
        self.insight_deadline = now + self.insight_seconds
        return True

    def insights_visible(self, now: Optional[float] = None) -> bool:
        """Whether the insight panel is still on screen (expires it if not)."""
        if not self.show_insights:
            return False

        now = time.monotonic() if now is None else now
        if self.insight_deadline is not None and now >= self.insight_deadline:
            self.show_insights = False
            self.insight_deadline = None
        return self.show_insights

    def dismiss_insights(self) -> None:
        self.show_insights = False
        self.insight_deadline = None


class PeriodTab(CamelModel):
    period: Period
    label: str
    selected: bool


class DashboardView(CamelModel):
    """Everything the performance card needs to render"""
    status: str
    period: Period
    period_label: str
    tabs: List[PeriodTab]
    insight: Optional[PeriodInsight] = None
    insight_key: int = 0
    period_data: Optional[PeriodData] = None
    growth: Optional[GrowthReport] = None
    content_score: Optional[ContentScore] = None
    platforms: List[ConnectedPlatform] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)


class MetricsPresenter:
    """Builds DashboardView objects from a snapshot and presenter state"""

    @staticmethod
    def build_view(
        state: PresenterState,
        snapshot: DashboardSnapshot,
        now: Optional[float] = None
    ) -> DashboardView:
        """
        Build the view for the current state.

        Args:
            state: Interaction state (period, insight visibility)
            snapshot: Latest query results
            now: Monotonic clock reading (defaults to time.monotonic())

        Returns:
            DashboardView with status loading, onboarding or metrics
        """
        period = state.selected_period
        view = DashboardView(
            status=STATUS_LOADING,
            period=period,
            period_label=PERIOD_LABELS[period],
            tabs=[
                PeriodTab(period=p, label=label, selected=p == period)
                for p, label in PERIOD_LABELS.items()
            ],
            insight=PERIOD_INSIGHTS[period] if state.insights_visible(now) else None,
            insight_key=state.insight_key,
            errors=dict(snapshot.errors),
        )

        if snapshot.analytics_pending:
            return view

        platforms = MetricsService.connected_platforms(snapshot.accounts)
        if not platforms:
            view.status = STATUS_ONBOARDING
            return view

        totals = MetricsService.aggregate_totals(snapshot.analytics, platforms)
        content_score = MetricsService.calculate_content_score(
            avg_engagement=totals.engagement,
            total_posts=totals.posts,
            total_reach=totals.reach,
            total_followers=totals.followers,
            platform_count=len(platforms),
        )

        # Historical data fetched for another period is not comparable
        historical = snapshot.historical
        if snapshot.historical_period is not None and snapshot.historical_period != period:
            historical = None

        view.status = STATUS_METRICS
        view.platforms = platforms
        view.content_score = content_score
        view.growth = MetricsService.calculate_growth(
            historical, totals, current_content_score=content_score.score
        )
        view.period_data = PeriodData(
            reach=totals.reach,
            posts=totals.posts,
            engagement=totals.engagement,
            follower_gains=0,
            follower_total=totals.followers,
        )
        return view
