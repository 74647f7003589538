"""
MetricsService - Growth and content-score calculations for the dashboard.

Provides pure functions with no side effects. Zero or missing denominators
map to 0% (or fixed placeholder percentages) instead of raising.
"""

from typing import Dict, List, Optional, Sequence

from ..core.models import (
    AccountSnapshot,
    ConnectedPlatform,
    ContentRating,
    ContentScore,
    CurrentMetrics,
    DashboardAnalytics,
    GrowthMetric,
    GrowthReport,
    HistoricalRecord,
)


# Display name and logo per platform slug; anything unknown renders as Facebook
PLATFORM_DISPLAY: Dict[str, Dict[str, str]] = {
    "instagram": {"name": "Instagram", "logo": "📷"},
    "youtube": {"name": "YouTube", "logo": "🎥"},
    "twitter": {"name": "Twitter", "logo": "🐦"},
    "linkedin": {"name": "LinkedIn", "logo": "💼"},
    "facebook": {"name": "Facebook", "logo": "📘"},
}

# Sub-score weights for the content score
CONTENT_SCORE_WEIGHTS: Dict[str, float] = {
    "engagement": 0.4,
    "activity": 0.3,
    "reach_efficiency": 0.2,
    "consistency": 0.1,
}

# (minimum score, rating), checked top-down
RATING_THRESHOLDS = [
    (9.0, ContentRating.EXCEPTIONAL),
    (7.5, ContentRating.EXCELLENT),
    (6.0, ContentRating.VERY_GOOD),
    (4.5, ContentRating.GOOD),
    (3.0, ContentRating.FAIR),
]

MAX_SUB_SCORE = 10.0
GROWTH_DISPLAY_LIMIT = 999.0
DEFAULT_BASELINE_CONTENT_SCORE = 5.0


class MetricsService:
    """
    Dashboard metric calculations.

    Provides methods for:
    - Growth percentages against historical baselines
    - Composite content score and rating
    - Connected platform rows and aggregate totals
    - Compact number formatting
    """

    # ========================================================================
    # Growth
    # ========================================================================

    @staticmethod
    def percent_change(current: float, baseline: float) -> float:
        """Percentage change from baseline to current; 0 when baseline is 0."""
        if baseline == 0:
            return 0.0
        return ((current - baseline) / baseline) * 100

    @staticmethod
    def format_growth(growth: float, clamp: bool = False) -> GrowthMetric:
        """
        Format a growth percentage with an explicit sign and one decimal.

        Args:
            growth: Percentage change
            clamp: Render magnitudes above 999 as "999+%"

        Returns:
            GrowthMetric whose sign always agrees with is_positive

        Example:
            >>> MetricsService.format_growth(12.345).display_value
            '+12.3%'
            >>> MetricsService.format_growth(-1500, clamp=True).display_value
            '-999+%'
        """
        is_positive = growth >= 0
        sign = "+" if is_positive else "-"

        if clamp and abs(growth) > GROWTH_DISPLAY_LIMIT:
            return GrowthMetric(display_value=f"{sign}999+%", is_positive=is_positive)

        return GrowthMetric(display_value=f"{sign}{abs(growth):.1f}%", is_positive=is_positive)

    @staticmethod
    def select_baselines(historical: Sequence[HistoricalRecord]):
        """
        Pick the comparison baselines from a historical series.

        Records are sorted ascending by date first (the input is not mutated).

        Returns:
            (oldest, previous) where previous is the second-newest record,
            or the oldest when the series has a single record
        """
        ordered = sorted(historical, key=lambda record: record.date)
        oldest = ordered[0]
        previous = ordered[-2] if len(ordered) >= 2 else oldest
        return oldest, previous

    @staticmethod
    def calculate_growth(
        historical: Optional[Sequence[HistoricalRecord]],
        current: CurrentMetrics,
        current_content_score: Optional[float] = None
    ) -> GrowthReport:
        """
        Compute growth for followers, engagement, reach, posts and content score.

        Followers and posts compare against the oldest record; engagement and
        reach against the second-newest one. Without history every metric
        gets an optimistic placeholder so nothing reads as a decline.

        Args:
            historical: Historical records in any order (None or empty allowed)
            current: Current aggregate values
            current_content_score: Today's content score; when omitted the
                content-score growth is reported as unavailable

        Returns:
            GrowthReport
        """
        if not historical:
            return GrowthReport(
                followers=GrowthMetric(display_value="+0.0%", is_positive=True),
                engagement=GrowthMetric(display_value="+100%", is_positive=True),
                reach=GrowthMetric(display_value="+100%", is_positive=True),
                posts=GrowthMetric(
                    display_value=f"+{current.posts}",
                    is_positive=current.posts > 0,
                ),
                content_score=GrowthMetric(display_value="+100%", is_positive=True),
            )

        oldest, previous = MetricsService.select_baselines(historical)

        follower_growth = MetricsService.percent_change(current.followers, oldest.followers)
        engagement_growth = MetricsService.percent_change(current.engagement, previous.engagement)
        reach_growth = MetricsService.percent_change(current.reach, previous.reach)

        # A missing post baseline counts as 0 posts divided by 1
        baseline_posts = oldest.metrics.posts
        if baseline_posts == 0:
            post_growth = 0.0
        else:
            post_growth = ((current.posts - (baseline_posts or 0)) / (baseline_posts or 1)) * 100

        return GrowthReport(
            followers=MetricsService.format_growth(follower_growth),
            engagement=MetricsService.format_growth(engagement_growth, clamp=True),
            reach=MetricsService.format_growth(reach_growth, clamp=True),
            posts=MetricsService.format_growth(post_growth),
            content_score=MetricsService.content_score_growth(oldest, current_content_score),
        )

    @staticmethod
    def content_score_growth(
        oldest: HistoricalRecord,
        current_score: Optional[float]
    ) -> GrowthMetric:
        """
        Growth of the content score against the oldest stored score.

        The stored baseline defaults to 5 when missing or zero.
        """
        if current_score is None:
            return GrowthMetric(display_value="n/a", is_positive=True, available=False)

        stored = oldest.metrics.content_score.score if oldest.metrics.content_score else None
        baseline = stored or DEFAULT_BASELINE_CONTENT_SCORE

        growth = ((current_score - baseline) / baseline) * 100
        return MetricsService.format_growth(growth)

    # ========================================================================
    # Content Score
    # ========================================================================

    @staticmethod
    def rating_for_score(score: float) -> ContentRating:
        """
        Map a 0-10 score to its rating. Thresholds include their lower bound.

        Example:
            >>> MetricsService.rating_for_score(9.0)
            <ContentRating.EXCEPTIONAL: 'Exceptional'>
        """
        for minimum, rating in RATING_THRESHOLDS:
            if score >= minimum:
                return rating
        return ContentRating.POOR

    @staticmethod
    def calculate_content_score(
        avg_engagement: float,
        total_posts: float,
        total_reach: float,
        total_followers: float,
        platform_count: int
    ) -> ContentScore:
        """
        Weighted content score from engagement, activity, reach efficiency
        and platform count.

        Each sub-score is capped at 10 before weighting and the final score
        is clamped to [0, 10].

        Args:
            avg_engagement: Average engagement rate (%)
            total_posts: Total posts across platforms
            total_reach: Total reach across platforms
            total_followers: Total followers across platforms
            platform_count: Number of connected platforms

        Returns:
            ContentScore (score 0 with rating NO_DATA when nothing is connected)
        """
        if platform_count <= 0:
            return ContentScore(score=0, rating=ContentRating.NO_DATA)

        engagement_score = min(avg_engagement / 10, MAX_SUB_SCORE)
        activity_score = min(total_posts / 10, MAX_SUB_SCORE)
        if total_followers > 0:
            reach_efficiency = min((total_reach / total_followers) / 5, MAX_SUB_SCORE)
        else:
            reach_efficiency = 0.0
        consistency_score = min(platform_count * 2.5, MAX_SUB_SCORE)

        score = (
            engagement_score * CONTENT_SCORE_WEIGHTS["engagement"]
            + activity_score * CONTENT_SCORE_WEIGHTS["activity"]
            + reach_efficiency * CONTENT_SCORE_WEIGHTS["reach_efficiency"]
            + consistency_score * CONTENT_SCORE_WEIGHTS["consistency"]
        )
        final_score = max(0.0, min(score, MAX_SUB_SCORE))

        return ContentScore(score=final_score, rating=MetricsService.rating_for_score(final_score))

    # ========================================================================
    # Aggregation
    # ========================================================================

    @staticmethod
    def connected_platforms(accounts: Optional[Sequence[AccountSnapshot]]) -> List[ConnectedPlatform]:
        """Presentation rows for accounts that are connected, followed or tokened."""
        platforms = []
        for account in accounts or []:
            if not account.is_active_connection:
                continue

            display = PLATFORM_DISPLAY.get(account.platform, PLATFORM_DISPLAY["facebook"])
            engagement = account.avg_engagement or 0.0
            platforms.append(ConnectedPlatform(
                name=display["name"],
                logo=display["logo"],
                platform=account.platform,
                username=account.username,
                followers=account.followers_count,
                engagement=engagement,
                engagement_display=f"{engagement:.1f}%" if engagement else "0%",
                reach=account.total_reach,
                posts=account.media_count,
            ))
        return platforms

    @staticmethod
    def aggregate_totals(
        analytics: Optional[DashboardAnalytics],
        platforms: Sequence[ConnectedPlatform]
    ) -> CurrentMetrics:
        """
        Current totals for the dashboard.

        Non-zero totals from the analytics endpoint win; otherwise the
        platform rows are summed. Engagement is the first platform's rate,
        rounded to the one decimal it is displayed with.
        """
        analytics = analytics or DashboardAnalytics()

        return CurrentMetrics(
            followers=analytics.total_followers or sum(p.followers for p in platforms),
            reach=analytics.total_reach or sum(p.reach for p in platforms),
            posts=analytics.total_posts or sum(p.posts for p in platforms),
            engagement=round(platforms[0].engagement, 1) if platforms else 0.0,
        )

    @staticmethod
    def format_number(num: float) -> str:
        """
        Compact display of large counts.

        Example:
            >>> MetricsService.format_number(1_250_000)
            '1.2M'
            >>> MetricsService.format_number(4321)
            '4.3K'
        """
        if num >= 1_000_000:
            return f"{num / 1_000_000:.1f}M"
        if num >= 1000:
            return f"{num / 1000:.1f}K"
        if float(num).is_integer():
            return str(int(num))
        return str(num)
