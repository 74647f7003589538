"""
Services layer for CreatorPulse.

Separates data access (DashboardService), pure metric calculations
(MetricsService), view assembly (MetricsPresenter) and AI script
generation (ScriptGenerationService).
"""

from .dashboard_service import DashboardFeed, DashboardService, DashboardSnapshot
from .metrics_service import MetricsService
from .presenter import DashboardView, MetricsPresenter, PresenterState
from .script_service import ScriptGenerationService

__all__ = [
    'DashboardFeed',
    'DashboardService',
    'DashboardSnapshot',
    'MetricsService',
    'DashboardView',
    'MetricsPresenter',
    'PresenterState',
    'ScriptGenerationService',
]
