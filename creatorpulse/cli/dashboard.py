"""
Dashboard CLI Commands

Print the performance card (totals, growth, content score, platforms)
for a period, once or continuously.
"""

import asyncio
import logging
from typing import List

import click

from ..core.models import Period
from ..services.dashboard_service import ANALYTICS, HISTORICAL, DashboardFeed, DashboardService
from ..services.metrics_service import MetricsService
from ..services.presenter import (
    STATUS_LOADING,
    STATUS_ONBOARDING,
    DashboardView,
    MetricsPresenter,
    PresenterState,
)


logger = logging.getLogger(__name__)

PERIOD_CHOICES = [p.value for p in Period]


def format_view(view: DashboardView) -> List[str]:
    """Text lines for a dashboard view."""
    lines = [f"📊 Performance Overview - {view.period_label}"]

    if view.status == STATUS_LOADING:
        lines.append("⏳ Loading...")
        return lines

    if view.status == STATUS_ONBOARDING:
        lines.append("No social accounts connected yet.")
        lines.append("💡 Connect a platform to start tracking performance.")
        return lines

    data = view.period_data
    growth = view.growth
    lines.extend([
        f"   Followers:  {MetricsService.format_number(data.follower_total):>10}  {growth.followers.display_value}",
        f"   Engagement: {data.engagement:>9.1f}%  {growth.engagement.display_value}",
        f"   Reach:      {MetricsService.format_number(data.reach):>10}  {growth.reach.display_value}",
        f"   Posts:      {data.posts:>10}  {growth.posts.display_value}",
        f"   Content Score: {view.content_score.score:.1f}/10 ({view.content_score.rating.value})"
        f"  {growth.content_score.display_value}",
    ])

    lines.append("")
    lines.append(f"   Connected platforms ({len(view.platforms)}):")
    for platform in view.platforms:
        lines.append(
            f"   {platform.logo} {platform.name:<10} "
            f"{MetricsService.format_number(platform.followers):>8} followers  "
            f"{platform.engagement_display} engagement"
        )

    return lines


def _echo_view(view: DashboardView) -> None:
    for line in format_view(view):
        click.echo(line)
    for query, error in view.errors.items():
        click.echo(f"⚠️  {query} unavailable: {error}", err=True)


@click.group(name="dashboard")
def dashboard_group():
    """Creator performance dashboard"""
    pass


@dashboard_group.command(name="show")
@click.option('--period', type=click.Choice(PERIOD_CHOICES), default='month', help='Comparison period')
@click.option('--base-url', help='Analytics API root (defaults to DASHBOARD_API_BASE_URL)')
def show(period: str, base_url: str):
    """
    Show the performance card once.

    Examples:
        creatorpulse dashboard show
        creatorpulse dashboard show --period week
    """
    view = asyncio.run(_fetch_view(Period(period), base_url))
    _echo_view(view)


async def _fetch_view(period: Period, base_url: str) -> DashboardView:
    async with DashboardService(base_url=base_url) as service:
        snapshot = await service.fetch_snapshot(period)
    return MetricsPresenter.build_view(PresenterState(selected_period=period), snapshot)


@dashboard_group.command(name="watch")
@click.option('--period', type=click.Choice(PERIOD_CHOICES), default='month', help='Comparison period')
@click.option('--base-url', help='Analytics API root (defaults to DASHBOARD_API_BASE_URL)')
def watch(period: str, base_url: str):
    """
    Keep polling and reprint the card whenever analytics or history change.

    Press Ctrl+C to stop.
    """
    try:
        asyncio.run(_watch(Period(period), base_url))
    except KeyboardInterrupt:
        click.echo("\n👋 Stopped")


async def _watch(period: Period, base_url: str) -> None:
    async with DashboardService(base_url=base_url) as service:
        feed = DashboardFeed(service, period=period)
        state = PresenterState(selected_period=period)

        def on_update(query, snapshot):
            if query in (ANALYTICS, HISTORICAL):
                click.echo("")
                _echo_view(MetricsPresenter.build_view(state, snapshot))

        feed.subscribe(on_update)
        await feed.run_polling()
