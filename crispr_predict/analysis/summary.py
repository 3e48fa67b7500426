"""
Summary statistics over a window of prediction records.
"""

import logging
from typing import Optional, Sequence

from ..core.models import PredictionRecord
from .aggregation import (
    PeriodKey,
    category_distribution,
    category_trends,
    confidence_histogram,
    filter_records,
    records_to_dataframe,
    usage_stats,
)
from .metrics import compute_performance_metrics, confusion_from_counts
from .types import AggregateSummary, TimeRange

logger = logging.getLogger(__name__)


def summarize(
    records: Sequence[PredictionRecord],
    window: Optional[TimeRange] = None,
    period: PeriodKey = 'D',
    dense: bool = False,
) -> AggregateSummary:
    """
    Summarize prediction records inside a time window.

    Records are never modified and nothing is cached; every call builds a
    fresh AggregateSummary.

    Args:
        records: Prediction records to summarize
        window: Inclusive created_at window; None includes every record
        period: Trend bucket, a pandas frequency alias ('D', 'W', 'M') or a
            callable mapping a record to a sortable key
        dense: Zero-fill periods with no records (frequency aliases only)

    Returns:
        AggregateSummary with metrics, distribution, histogram and trends

    Example:
        >>> summary = summarize(records, TimeRange.last('7d'))
        >>> print(f"Accuracy: {summary.metrics.accuracy:.1%}")
    """
    window = window if window is not None else TimeRange()
    selected = filter_records(records, window)

    logger.debug(f"Summarizing {len(selected)} of {len(records)} records in {window!r}")

    df = records_to_dataframe(selected, period=period)

    distribution = category_distribution(df)
    confusion = confusion_from_counts({s.category: s.count for s in distribution})

    return AggregateSummary(
        window=window,
        total_predictions=len(selected),
        metrics=compute_performance_metrics(confusion),
        category_distribution=distribution,
        confidence_histogram=confidence_histogram(df),
        trends=category_trends(df, period=period, window=window, dense=dense),
        additional=usage_stats(df),
    )

