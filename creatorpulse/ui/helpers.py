"""
Display helpers for the Streamlit performance page.

Kept free of Streamlit calls so the formatting can be tested directly.
"""

from typing import List, NamedTuple, Optional

from ..services.metrics_service import MetricsService
from ..services.presenter import DashboardView, PeriodInsight

ACCENT_COLORS = {
    "blue": "#3b82f6",
    "green": "#22c55e",
    "purple": "#a855f7",
}


class MetricCard(NamedTuple):
    label: str
    value: str
    delta: Optional[str]


def metric_cards(view: DashboardView) -> List[MetricCard]:
    """The five headline metrics of a metrics view, in display order."""
    if view.period_data is None or view.growth is None or view.content_score is None:
        return []

    data = view.period_data
    growth = view.growth
    score_delta = growth.content_score.display_value if growth.content_score.available else None

    return [
        MetricCard("Followers", MetricsService.format_number(data.follower_total), growth.followers.display_value),
        MetricCard("Engagement", f"{data.engagement:.1f}%", growth.engagement.display_value),
        MetricCard("Reach", MetricsService.format_number(data.reach), growth.reach.display_value),
        MetricCard("Posts", str(data.posts), growth.posts.display_value),
        MetricCard(
            f"Content Score ({view.content_score.rating.value})",
            f"{view.content_score.score:.1f}/10",
            score_delta,
        ),
    ]


def insight_markdown(insight: PeriodInsight) -> str:
    """Markdown block for a period insight panel."""
    color = ACCENT_COLORS.get(insight.accent, ACCENT_COLORS["blue"])
    tips = "\n".join(f"- {tip}" for tip in insight.tips)
    return (
        f"<span style='color:{color}; font-weight:600'>💡 {insight.title}</span>\n\n"
        f"{insight.description}\n\n{tips}"
    )
