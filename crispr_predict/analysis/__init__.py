"""
Aggregation and performance analysis for crispr-predict.

Provides functions for:
- Filtering prediction records to a time window
- Confusion counts, accuracy, precision, recall and F1
- Category distribution, confidence histogram and category trends

Example usage:

    from crispr_predict.analysis import TimeRange, summarize

    summary = summarize(records, TimeRange.last('30d'), period='D')

    print(summary.metrics.accuracy)
    print(summary.confidence_histogram)
    for day, counts in summary.trends.items():
        print(day, counts)
"""

from .aggregation import (
    category_distribution,
    category_trends,
    confidence_histogram,
    filter_records,
    records_to_dataframe,
    usage_stats,
)
from .metrics import (
    compute_performance_metrics,
    confusion_from_categories,
    confusion_from_counts,
    safe_divide,
)
from .summary import summarize
from .types import (
    TIME_RANGE_PRESETS,
    AggregateSummary,
    CategoryStats,
    ConfusionMatrix,
    PerformanceMetrics,
    TimeRange,
    UsageStats,
)

__all__ = [
    # Types
    "TIME_RANGE_PRESETS",
    "TimeRange",
    "ConfusionMatrix",
    "PerformanceMetrics",
    "CategoryStats",
    "UsageStats",
    "AggregateSummary",
    # Aggregation
    "filter_records",
    "records_to_dataframe",
    "category_distribution",
    "confidence_histogram",
    "usage_stats",
    "category_trends",
    # Metrics
    "safe_divide",
    "confusion_from_counts",
    "confusion_from_categories",
    "compute_performance_metrics",
    # Summary
    "summarize",
]
