"""
Data aggregation functions for crispr-predict.

Tabulates PredictionRecords into a DataFrame and derives the per-category
distribution, confidence histogram, usage statistics and time-bucketed
category trends used by summarize().
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

import pandas as pd

from ..core.classification import OutcomeCategory
from ..core.confidence import HISTOGRAM_LABELS, histogram_bin
from ..core.models import InputType, PredictionRecord
from .types import CategoryStats, TimeRange, UsageStats

logger = logging.getLogger(__name__)

CATEGORY_VALUES = [c.value for c in OutcomeCategory]

RECORD_COLUMNS = [
    'record_id',
    'created_at',
    'category',
    'actual_label',
    'predicted_label',
    'confidence',
    'pam_match',
    'total_matches',
    'processing_time_ms',
    'input_type',
]

PeriodKey = Union[str, Callable[[PredictionRecord], object]]


def filter_records(
    records: Sequence[PredictionRecord],
    window: Optional[TimeRange] = None,
) -> List[PredictionRecord]:
    """Return records whose created_at falls inside the window (inclusive)."""
    if window is None:
        return list(records)
    return [r for r in records if window.contains(r.created_at)]


def records_to_dataframe(
    records: Sequence[PredictionRecord],
    period: Optional[PeriodKey] = None,
) -> pd.DataFrame:
    """
    Convert PredictionRecords to a DataFrame, one row per record.

    Args:
        records: Prediction records
        period: Optional pandas frequency alias ('D', 'W', 'M') or callable
            record -> key; adds a 'period' column

    Returns:
        DataFrame with RECORD_COLUMNS (plus 'period' when requested);
        created_at is a UTC datetime column

    Example:
        >>> df = records_to_dataframe(records, period='D')
        >>> df.groupby('period')['category'].value_counts()
    """
    rows = []
    for r in records:
        rows.append({
            'record_id': r.record_id,
            'created_at': r.created_at,
            'category': r.category.value,
            'actual_label': r.actual_label,
            'predicted_label': r.predicted_label,
            'confidence': r.confidence,
            'pam_match': r.pam_match,
            'total_matches': r.total_matches,
            'processing_time_ms': r.processing_time_ms,
            'input_type': r.input_type.value,
        })

    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df['created_at'] = pd.to_datetime(df['created_at'], utc=True)

    if period is not None:
        if callable(period):
            df['period'] = [period(r) for r in records]
        else:
            df['period'] = _naive_utc(df['created_at']).dt.to_period(period)

    return df


def _naive_utc(series: pd.Series) -> pd.Series:
    # to_period() drops timezone information with a warning; strip it first
    return series.dt.tz_convert('UTC').dt.tz_localize(None)


def category_distribution(df: pd.DataFrame) -> List[CategoryStats]:
    """
    Count and mean confidence per category.

    All four categories are always reported, in OutcomeCategory order;
    a category with no records has count 0 and avg_confidence 0.0.
    """
    if df.empty:
        return [CategoryStats(category=c, count=0, avg_confidence=0.0) for c in OutcomeCategory]

    grouped = df.groupby('category')['confidence'].agg(['count', 'mean'])

    stats = []
    for category in OutcomeCategory:
        if category.value in grouped.index:
            row = grouped.loc[category.value]
            stats.append(CategoryStats(
                category=category,
                count=int(row['count']),
                avg_confidence=float(row['mean']),
            ))
        else:
            stats.append(CategoryStats(category=category, count=0, avg_confidence=0.0))
    return stats


def confidence_histogram(df: pd.DataFrame) -> Dict[str, int]:
    """Counts for the five fixed confidence ranges, in range order."""
    bins = df['confidence'].map(histogram_bin)
    counts = bins.value_counts().reindex(HISTOGRAM_LABELS, fill_value=0)
    return {label: int(count) for label, count in counts.items()}


def usage_stats(df: pd.DataFrame) -> UsageStats:
    """Average confidence / processing time and input, PAM counts."""
    if df.empty:
        return UsageStats()

    return UsageStats(
        avg_confidence=float(df['confidence'].mean()),
        avg_processing_time_ms=float(df['processing_time_ms'].mean()),
        text_inputs=int((df['input_type'] == InputType.TEXT.value).sum()),
        image_inputs=int((df['input_type'] == InputType.IMAGE.value).sum()),
        pam_matches=int(df['pam_match'].astype(bool).sum()),
    )


def category_trends(
    df: pd.DataFrame,
    period: PeriodKey = 'D',
    window: Optional[TimeRange] = None,
    dense: bool = False,
) -> Dict[object, Dict[str, int]]:
    """
    Per-period category counts, ordered chronologically.

    Periods with no records are omitted unless dense=True, in which case
    every period between the window bounds (or, for an open window, the
    first and last record) is present with zero counts.

    Args:
        df: DataFrame from records_to_dataframe(records, period=...)
        period: The frequency alias or callable used to build 'period'
        window: Window used to bound dense filling
        dense: Zero-fill empty periods (frequency aliases only)

    Returns:
        Ordered dict of period key -> {category value: count} covering all
        four categories. Frequency-alias keys are strings such as
        '2023-11-01' (D), '2023-11' (M) or '2023-10-30/2023-11-05' (W).
    """
    if dense and callable(period):
        raise ValueError("Dense trend filling requires a frequency alias, not a callable period key")

    if 'period' not in df.columns:
        raise ValueError("DataFrame has no 'period' column; pass period= to records_to_dataframe")

    if df.empty:
        table = pd.DataFrame(columns=CATEGORY_VALUES, dtype=int)
    else:
        table = (
            df.groupby(['period', 'category'], sort=True)
            .size()
            .unstack(fill_value=0)
            .reindex(columns=CATEGORY_VALUES, fill_value=0)
            .sort_index()
        )

    if dense:
        index = _dense_period_index(df, period, window)
        if index is not None:
            table = table.reindex(index, fill_value=0)

    trends = {}
    for key, row in table.iterrows():
        label = str(key) if isinstance(key, pd.Period) else key
        trends[label] = {value: int(row[value]) for value in CATEGORY_VALUES}

    logger.debug(f"Built trends over {len(trends)} periods (period={period!r}, dense={dense})")
    return trends


def _dense_period_index(
    df: pd.DataFrame,
    period: str,
    window: Optional[TimeRange],
) -> Optional[pd.PeriodIndex]:
    start = window.start if window is not None else None
    end = window.end if window is not None else None

    if start is None or end is None:
        if df.empty:
            return None
        created = _naive_utc(df['created_at'])
        if start is None:
            start = created.min()
        if end is None:
            end = created.max()

    start = pd.Timestamp(start)
    end = pd.Timestamp(end)
    if start.tzinfo is not None:
        start = start.tz_convert('UTC').tz_localize(None)
    if end.tzinfo is not None:
        end = end.tz_convert('UTC').tz_localize(None)

    return pd.period_range(start=start, end=end, freq=period)
