# Application Stats Package
from .metrics_calculator import CardMetrics, MetricsCalculator
from .service import NotebookStatsService, NotebookSummary

__all__ = ["MetricsCalculator", "CardMetrics", "NotebookStatsService", "NotebookSummary"]
