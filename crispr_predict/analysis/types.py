"""
Type definitions for the crispr-predict analysis module.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ..core.classification import OutcomeCategory
from ..core.confidence import HISTOGRAM_LABELS
from ..core.models import parse_timestamp


TIME_RANGE_PRESETS: Dict[str, timedelta] = {
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
    '90d': timedelta(days=90),
}


@dataclass(frozen=True)
class TimeRange:
    """
    Inclusive window on record creation time.

    Either bound may be None for an open-ended window.

    Attributes:
        start: Earliest created_at included
        end: Latest created_at included
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        if self.start is not None:
            object.__setattr__(self, 'start', parse_timestamp(self.start))
        if self.end is not None:
            object.__setattr__(self, 'end', parse_timestamp(self.end))
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"TimeRange start {self.start} is after end {self.end}")

    @classmethod
    def last(cls, preset: str, now: Optional[datetime] = None) -> 'TimeRange':
        """
        Build a window ending at `now` from a preset ('24h', '7d', '30d', '90d').

        'all' returns an unbounded window.

        Example:
            >>> TimeRange.last('7d', now=datetime(2023, 11, 8, tzinfo=timezone.utc))
            TimeRange(start=2023-11-01T00:00:00+00:00, end=2023-11-08T00:00:00+00:00)
        """
        key = preset.strip().lower()
        if key == 'all':
            return cls()
        if key not in TIME_RANGE_PRESETS:
            raise ValueError(
                f"Unknown time range: {preset!r} "
                f"(expected one of {', '.join(TIME_RANGE_PRESETS)}, all)"
            )
        end = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
        return cls(start=end - TIME_RANGE_PRESETS[key], end=end)

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, moment: datetime) -> bool:
        moment = parse_timestamp(moment)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            'start': self.start.isoformat() if self.start else None,
            'end': self.end.isoformat() if self.end else None,
        }

    def __repr__(self) -> str:
        start = self.start.isoformat() if self.start else None
        end = self.end.isoformat() if self.end else None
        return f"TimeRange(start={start}, end={end})"


@dataclass(frozen=True)
class ConfusionMatrix:
    """Confusion counts derived from outcome categories."""
    tp: int = 0
    tn: int = 0
    fp: int = 0
    fn: int = 0

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fp + self.fn

    def to_dict(self) -> Dict[str, int]:
        return {'tp': self.tp, 'tn': self.tn, 'fp': self.fp, 'fn': self.fn}


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Classification performance over a set of records.

    All rates are fractions in [0, 1]; a rate whose denominator is zero
    is reported as 0.0.
    """
    accuracy: float
    precision: float
    recall: float
    f1: float
    confusion: ConfusionMatrix

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accuracy': self.accuracy,
            'precision': self.precision,
            'recall': self.recall,
            'f1': self.f1,
            'confusionMatrix': self.confusion.to_dict(),
        }

    def to_percent_dict(self) -> Dict[str, float]:
        """Rates as percentages rounded to one decimal, for display."""
        return {
            'accuracy': round(self.accuracy * 100, 1),
            'precision': round(self.precision * 100, 1),
            'recall': round(self.recall * 100, 1),
            'f1Score': round(self.f1 * 100, 1),
        }


@dataclass(frozen=True)
class CategoryStats:
    """Count and mean confidence (percent) for one outcome category."""
    category: OutcomeCategory
    count: int
    avg_confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            '_id': self.category.value,
            'name': self.category.display_name,
            'count': self.count,
            'avgConfidence': round(self.avg_confidence, 2),
        }


@dataclass(frozen=True)
class UsageStats:
    """Secondary statistics reported alongside the performance metrics."""
    avg_confidence: float = 0.0
    avg_processing_time_ms: float = 0.0
    text_inputs: int = 0
    image_inputs: int = 0
    pam_matches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'avgConfidence': round(self.avg_confidence, 2),
            'avgProcessingTime': round(self.avg_processing_time_ms, 2),
            'textInputs': self.text_inputs,
            'imageInputs': self.image_inputs,
            'pamMatches': self.pam_matches,
        }


@dataclass
class AggregateSummary:
    """
    Summary statistics over a window of prediction records.

    Computed fresh on every summarize() call and never persisted.

    Attributes:
        window: Time window the records were filtered to
        total_predictions: Number of records inside the window
        metrics: Accuracy, precision, recall, F1 and confusion counts
        category_distribution: Stats for all four categories, in enum order
        confidence_histogram: Counts for the five fixed confidence ranges, in order
        trends: Period key -> per-category counts, chronologically ascending
        additional: Usage statistics (inputs, PAM matches, averages)
    """
    window: TimeRange
    total_predictions: int
    metrics: PerformanceMetrics
    category_distribution: List[CategoryStats] = field(default_factory=list)
    confidence_histogram: Dict[str, int] = field(default_factory=dict)
    trends: Dict[Any, Dict[str, int]] = field(default_factory=dict)
    additional: UsageStats = field(default_factory=UsageStats)

    @property
    def category_counts(self) -> Dict[OutcomeCategory, int]:
        return {s.category: s.count for s in self.category_distribution}

    @property
    def pam_match_rate(self) -> float:
        if self.total_predictions == 0:
            return 0.0
        return self.additional.pam_matches / self.total_predictions

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        performance = self.metrics.to_percent_dict()
        performance['confusionMatrix'] = self.metrics.confusion.to_dict()
        performance['totalPredictions'] = self.total_predictions
        performance['additional'] = self.additional.to_dict()

        return {
            'window': self.window.to_dict(),
            'totalPredictions': self.total_predictions,
            'metrics': self.metrics.to_dict(),
            'performance': performance,
            'categoryDistribution': [s.to_dict() for s in self.category_distribution],
            'confidenceDistribution': [
                {'range': label, 'count': self.confidence_histogram.get(label, 0)}
                for label in HISTOGRAM_LABELS
            ],
            'trends': {str(period): dict(counts) for period, counts in self.trends.items()},
        }
