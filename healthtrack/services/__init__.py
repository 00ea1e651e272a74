"""
Core services for the application.

This package contains the main service implementations for the dashboard,
including health metrics, risk scoring, the record query pipeline and the
orchestration that ties them to a record source.
"""

from .dashboard import DashboardService, DashboardView
from .metrics import calculate_bmi, get_bmi_category, get_bmi_color, get_health_score_category
from .query import QueryPipeline, QueryResult, RecordQuery, run_query
from .record_source import RecordSource, Result, configure_logging
from .risk import build_record_card, generate_recommendations, get_risk_level

__all__ = [
    "DashboardService",
    "DashboardView",
    "QueryPipeline",
    "QueryResult",
    "RecordQuery",
    "RecordSource",
    "Result",
    "build_record_card",
    "calculate_bmi",
    "configure_logging",
    "generate_recommendations",
    "get_bmi_category",
    "get_bmi_color",
    "get_health_score_category",
    "get_risk_level",
    "run_query",
]
