"""
CreatorPulse API - FastAPI application for script generation and dashboard data.
"""

__version__ = "0.1.0"
