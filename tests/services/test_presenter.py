"""
Tests for MetricsPresenter and PresenterState: status selection, period
insight timing and view assembly.
"""

import pytest

from creatorpulse.core.models import (
    AccountSnapshot,
    ContentRating,
    DashboardAnalytics,
    HistoricalRecord,
    Period,
)
from creatorpulse.services.dashboard_service import ANALYTICS, DashboardSnapshot
from creatorpulse.services.presenter import (
    PERIOD_INSIGHTS,
    STATUS_LOADING,
    STATUS_METRICS,
    STATUS_ONBOARDING,
    MetricsPresenter,
    PresenterState,
)


def _accounts():
    return [
        AccountSnapshot(platform="instagram", followers_count=1000, avg_engagement=5.0,
                        total_reach=2000, media_count=20, is_connected=True),
    ]


def _history():
    return [
        HistoricalRecord.model_validate({"date": "2024-01-01T00:00:00Z", "followers": 800,
                                         "engagement": 4.0, "reach": 1000,
                                         "metrics": {"posts": 10}}),
        HistoricalRecord.model_validate({"date": "2024-01-02T00:00:00Z", "followers": 900,
                                         "engagement": 5.0, "reach": 1600}),
    ]


# ============================================================================
# PresenterState
# ============================================================================

class TestPresenterState:
    """Test period selection and the insight timer."""

    def test_defaults(self):
        state = PresenterState()
        assert state.selected_period == Period.MONTH
        assert state.show_insights is False
        assert state.insight_key == 0

    def test_select_new_period_shows_insight(self):
        state = PresenterState(insight_seconds=8)
        assert state.select_period(Period.WEEK, now=100.0) is True
        assert state.selected_period == Period.WEEK
        assert state.insight_key == 1
        assert state.insights_visible(now=107.9) is True

    def test_insight_expires(self):
        state = PresenterState(insight_seconds=8)
        state.select_period(Period.DAY, now=100.0)
        assert state.insights_visible(now=108.0) is False
        assert state.show_insights is False

    def test_reselecting_same_period_is_noop(self):
        state = PresenterState(insight_seconds=8)
        state.select_period(Period.DAY, now=100.0)
        assert state.select_period(Period.DAY, now=105.0) is False
        assert state.insight_key == 1
        assert state.insights_visible(now=108.5) is False

    def test_switching_restarts_timer(self):
        state = PresenterState(insight_seconds=8)
        state.select_period(Period.DAY, now=100.0)
        state.select_period(Period.WEEK, now=106.0)
        assert state.insight_key == 2
        assert state.insights_visible(now=112.0) is True
        assert state.insights_visible(now=114.0) is False

    def test_first_selection_of_default_period_shows_insight(self):
        state = PresenterState()
        assert state.select_period(Period.MONTH, now=0.0) is True

    def test_dismiss(self):
        state = PresenterState()
        state.select_period(Period.WEEK, now=0.0)
        state.dismiss_insights()
        assert state.insights_visible(now=1.0) is False

    def test_accepts_period_string(self):
        state = PresenterState()
        state.select_period("day", now=0.0)
        assert state.selected_period == Period.DAY


# ============================================================================
# MetricsPresenter
# ============================================================================

class TestBuildView:
    """Test view status and contents."""

    def test_loading_while_analytics_pending(self):
        view = MetricsPresenter.build_view(PresenterState(), DashboardSnapshot(accounts=_accounts()), now=0.0)
        assert view.status == STATUS_LOADING
        assert view.growth is None

    def test_onboarding_without_platforms(self):
        snapshot = DashboardSnapshot(analytics=DashboardAnalytics(), accounts=[AccountSnapshot(platform="twitter")])
        view = MetricsPresenter.build_view(PresenterState(), snapshot, now=0.0)
        assert view.status == STATUS_ONBOARDING
        assert view.platforms == []

    def test_failed_analytics_still_renders(self):
        snapshot = DashboardSnapshot(accounts=_accounts(), errors={ANALYTICS: "HTTP 500"})
        view = MetricsPresenter.build_view(PresenterState(), snapshot, now=0.0)
        assert view.status == STATUS_METRICS
        assert view.errors == {ANALYTICS: "HTTP 500"}
        assert view.period_data.follower_total == 1000

    def test_metrics_view(self):
        snapshot = DashboardSnapshot(
            analytics=DashboardAnalytics(total_followers=1200),
            accounts=_accounts(),
            historical=_history(),
            historical_period=Period.MONTH,
        )
        view = MetricsPresenter.build_view(PresenterState(), snapshot, now=0.0)

        assert view.status == STATUS_METRICS
        assert view.period_label == "This Month"
        assert view.period_data.follower_total == 1200
        assert view.period_data.reach == 2000
        assert view.period_data.posts == 20
        assert view.period_data.engagement == 5.0
        assert view.growth.followers.display_value == "+50.0%"
        assert view.growth.engagement.display_value == "+25.0%"
        assert view.growth.reach.display_value == "+100.0%"
        assert view.growth.posts.display_value == "+100.0%"
        assert view.growth.content_score.available is True
        assert view.content_score.rating == ContentRating.POOR
        assert [p.name for p in view.platforms] == ["Instagram"]

    def test_history_for_other_period_ignored(self):
        snapshot = DashboardSnapshot(
            analytics=DashboardAnalytics(),
            accounts=_accounts(),
            historical=_history(),
            historical_period=Period.DAY,
        )
        view = MetricsPresenter.build_view(PresenterState(selected_period=Period.MONTH), snapshot, now=0.0)
        assert view.growth.engagement.display_value == "+100%"

    def test_tabs(self):
        view = MetricsPresenter.build_view(PresenterState(selected_period=Period.WEEK), DashboardSnapshot(), now=0.0)
        assert [(t.label, t.selected) for t in view.tabs] == [
            ("Today", False), ("This Week", True), ("This Month", False),
        ]

    @pytest.mark.parametrize("period", list(Period))
    def test_insight_for_selected_period(self, period):
        state = PresenterState(selected_period=Period.MONTH if period != Period.MONTH else Period.DAY)
        state.select_period(period, now=0.0)

        view = MetricsPresenter.build_view(state, DashboardSnapshot(), now=1.0)

        assert view.insight == PERIOD_INSIGHTS[period]
        assert view.insight_key == 1

    def test_insight_hidden_after_timeout(self):
        state = PresenterState(insight_seconds=8)
        state.select_period(Period.WEEK, now=0.0)
        view = MetricsPresenter.build_view(state, DashboardSnapshot(), now=9.0)
        assert view.insight is None

    def test_view_serializes_camel_case(self):
        snapshot = DashboardSnapshot(analytics=DashboardAnalytics(), accounts=_accounts())
        data = MetricsPresenter.build_view(PresenterState(), snapshot, now=0.0).model_dump(by_alias=True)
        assert "periodLabel" in data
        assert "displayValue" in data["growth"]["followers"]
        assert "contentScore" in data
