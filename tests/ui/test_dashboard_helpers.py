"""
Tests for the Streamlit page display helpers.
"""

from creatorpulse.core.models import AccountSnapshot, DashboardAnalytics, Period
from creatorpulse.services.dashboard_service import DashboardSnapshot
from creatorpulse.services.presenter import PERIOD_INSIGHTS, MetricsPresenter, PresenterState
from creatorpulse.ui.helpers import ACCENT_COLORS, insight_markdown, metric_cards


def _view():
    snapshot = DashboardSnapshot(
        analytics=DashboardAnalytics(total_followers=25_000),
        accounts=[AccountSnapshot(platform="instagram", followers_count=25_000, avg_engagement=3.2,
                                  total_reach=4000, media_count=7, is_connected=True)],
    )
    return MetricsPresenter.build_view(PresenterState(), snapshot, now=0.0)


class TestMetricCards:
    """Test headline metric cards."""

    def test_five_cards_in_order(self):
        cards = metric_cards(_view())
        assert [c.label.split(" (")[0] for c in cards] == ["Followers", "Engagement", "Reach", "Posts", "Content Score"]

    def test_values_and_deltas(self):
        followers, engagement, reach, posts, score = metric_cards(_view())
        assert followers.value == "25.0K"
        assert followers.delta == "+0.0%"
        assert engagement.value == "3.2%"
        assert reach.value == "4.0K"
        assert posts.delta == "+7"
        assert score.value.endswith("/10")

    def test_no_cards_without_metrics(self):
        view = MetricsPresenter.build_view(PresenterState(), DashboardSnapshot(), now=0.0)
        assert metric_cards(view) == []


class TestInsightMarkdown:
    """Test period insight rendering."""

    def test_contains_title_tips_and_accent(self):
        insight = PERIOD_INSIGHTS[Period.WEEK]
        markdown = insight_markdown(insight)
        assert insight.title in markdown
        assert all(f"- {tip}" in markdown for tip in insight.tips)
        assert ACCENT_COLORS["green"] in markdown
