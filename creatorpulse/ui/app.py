"""
CreatorPulse - Performance Overview

Streamlit page showing follower, engagement, reach, post and content-score
growth for the selected period. Analytics and accounts refresh on the
dashboard poll interval, the historical series on its own slower interval;
switching periods shows a short insight panel.

Run with:
    streamlit run creatorpulse/ui/app.py
"""

import asyncio
import logging
import time

import streamlit as st

from creatorpulse.core.config import Config
from creatorpulse.core.models import Period
from creatorpulse.core.observability import setup_logfire, setup_logging
from creatorpulse.services.dashboard_service import (
    ACCOUNTS,
    ANALYTICS,
    HISTORICAL,
    DashboardService,
    DashboardSnapshot,
)
from creatorpulse.services.presenter import (
    PERIOD_LABELS,
    STATUS_LOADING,
    STATUS_ONBOARDING,
    MetricsPresenter,
    PresenterState,
)
from creatorpulse.ui.helpers import insight_markdown, metric_cards

setup_logging(logging.INFO)
logger = logging.getLogger(__name__)
setup_logfire(service_name="creatorpulse-ui")

# Page config
st.set_page_config(
    page_title="Performance Overview",
    page_icon="📊",
    layout="wide"
)

# Initialize session state
if 'presenter_state' not in st.session_state:
    st.session_state.presenter_state = PresenterState()


def _fetch(period: Period, queries) -> DashboardSnapshot:
    async def _run():
        async with DashboardService() as service:
            return await service.fetch_snapshot(period, queries=queries)

    return asyncio.run(_run())


def fetch_live_snapshot(period: Period) -> DashboardSnapshot:
    """Analytics and accounts, refetched on every fragment tick."""
    return _fetch(period, (ANALYTICS, ACCOUNTS))


@st.cache_data(ttl=Config.HISTORICAL_POLL_SECONDS, show_spinner=False)
def fetch_historical_snapshot(period: Period) -> DashboardSnapshot:
    """Historical series for a period, refetched at most every HISTORICAL_POLL_SECONDS."""
    return _fetch(period, (HISTORICAL,))


def fetch_snapshot(period: Period) -> DashboardSnapshot:
    return fetch_live_snapshot(period).merge(fetch_historical_snapshot(period), (HISTORICAL,))


def render_period_selector(state: PresenterState):
    """Period tabs; picking a new one starts the insight timer."""
    periods = list(PERIOD_LABELS.keys())
    selected = st.radio(
        "Period",
        options=periods,
        index=periods.index(state.selected_period),
        format_func=lambda p: PERIOD_LABELS[p],
        horizontal=True,
        label_visibility="collapsed",
    )
    state.select_period(selected, now=time.monotonic())


@st.fragment(run_every=Config.DASHBOARD_POLL_SECONDS)
def render_performance_card():
    state: PresenterState = st.session_state.presenter_state

    # Skeleton while the first fetch is in flight
    loading = st.empty()
    if not st.session_state.get("dashboard_loaded"):
        loading.info("⏳ Loading performance data...")
    snapshot = fetch_snapshot(state.selected_period)
    loading.empty()
    st.session_state.dashboard_loaded = True

    view = MetricsPresenter.build_view(state, snapshot, now=time.monotonic())

    if view.insight:
        col1, col2 = st.columns([12, 1])
        with col1:
            st.info(insight_markdown(view.insight))
        with col2:
            if st.button("✕", key=f"dismiss_{view.insight_key}"):
                state.dismiss_insights()
                st.rerun(scope="fragment")

    if view.status == STATUS_LOADING:
        st.info("⏳ Loading performance data...")
        return

    if view.status == STATUS_ONBOARDING:
        st.markdown("### Connect your first platform")
        st.write("Link a social account to start tracking followers, engagement and reach.")
        return

    cards = metric_cards(view)
    for col, card in zip(st.columns(len(cards)), cards):
        with col:
            st.metric(card.label, card.value, delta=card.delta)

    st.markdown("#### Connected Platforms")
    for platform in view.platforms:
        col1, col2, col3 = st.columns([3, 2, 2])
        with col1:
            st.write(f"{platform.logo} **{platform.name}**  @{platform.username or ''}")
        with col2:
            st.write(f"{platform.followers:,} followers")
        with col3:
            st.write(f"{platform.engagement_display} engagement")

    for query, error in view.errors.items():
        st.caption(f"⚠️ {query} data unavailable: {error}")


st.title("📊 Performance Overview")
render_period_selector(st.session_state.presenter_state)
render_performance_card()
