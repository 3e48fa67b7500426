"""
Performance metrics for crispr-predict.

Accuracy, precision, recall and F1 from confusion counts. Rates with a
zero denominator are defined as 0.0 rather than raising.
"""

from typing import Dict, Iterable, Mapping

from ..core.classification import OutcomeCategory
from .types import ConfusionMatrix, PerformanceMetrics


def safe_divide(numerator: float, denominator: float) -> float:
    """Return numerator / denominator, or 0.0 when the denominator is 0."""
    return numerator / denominator if denominator else 0.0


def confusion_from_counts(counts: Mapping[OutcomeCategory, int]) -> ConfusionMatrix:
    """
    Build confusion counts from per-category counts.

    Args:
        counts: Mapping of OutcomeCategory (or its string value) to count;
            missing categories count as zero

    Returns:
        ConfusionMatrix with tp, tn, fp, fn
    """
    by_key: Dict[str, int] = {'tp': 0, 'tn': 0, 'fp': 0, 'fn': 0}
    for category, count in counts.items():
        by_key[OutcomeCategory.parse(category).confusion_key] += int(count)
    return ConfusionMatrix(**by_key)


def confusion_from_categories(categories: Iterable[OutcomeCategory]) -> ConfusionMatrix:
    """Tally confusion counts from a sequence of categories."""
    counts: Dict[OutcomeCategory, int] = {}
    for category in categories:
        category = OutcomeCategory.parse(category)
        counts[category] = counts.get(category, 0) + 1
    return confusion_from_counts(counts)


def compute_performance_metrics(confusion: ConfusionMatrix) -> PerformanceMetrics:
    """
    Compute accuracy, precision, recall and F1.

    accuracy = (tp + tn) / total
    precision = tp / (tp + fp)
    recall = tp / (tp + fn)
    f1 = 2 * precision * recall / (precision + recall)

    Args:
        confusion: Confusion counts

    Returns:
        PerformanceMetrics with all rates as fractions

    Example:
        >>> m = compute_performance_metrics(ConfusionMatrix(tp=15, tn=12, fp=8, fn=5))
        >>> round(m.accuracy, 3), round(m.precision, 3), round(m.recall, 3)
        (0.675, 0.652, 0.75)
    """
    tp, tn, fp, fn = confusion.tp, confusion.tn, confusion.fp, confusion.fn

    # Each zero denominator maps to 0.0; an empty record set reports all zeros
    accuracy = safe_divide(tp + tn, confusion.total)
    precision = safe_divide(tp, tp + fp)
    recall = safe_divide(tp, tp + fn)
    f1 = safe_divide(2 * precision * recall, precision + recall)

    return PerformanceMetrics(
        accuracy=accuracy,
        precision=precision,
        recall=recall,
        f1=f1,
        confusion=confusion,
    )
