"""
Confidence conversion and bucketing.

Confidence is carried as an integer percent (0-100) everywhere inside the
package. Model output is converted once at the boundary with to_percent().
Two independent bucketings derive from the percent value:
- bucket_level: High / Medium / Low for single-record display
- histogram_bin: five fixed ranges for aggregate histograms
"""

import math
from enum import Enum
from typing import List, Tuple


HIGH_CONFIDENCE_THRESHOLD = 80
MEDIUM_CONFIDENCE_THRESHOLD = 60

# (label, inclusive upper bound) on integer percent
HISTOGRAM_BINS: List[Tuple[str, int]] = [
    ('0-20%', 20),
    ('21-40%', 40),
    ('41-60%', 60),
    ('61-80%', 80),
    ('81-100%', 100),
]
HISTOGRAM_LABELS = [label for label, _ in HISTOGRAM_BINS]


class ConfidenceLevel(Enum):
    """Display confidence tiers."""
    HIGH = 'High'
    MEDIUM = 'Medium'
    LOW = 'Low'


class ConfidenceUnit(Enum):
    """Unit of a raw confidence value arriving at the boundary."""
    FRACTION = 'fraction'
    PERCENT = 'percent'

    @classmethod
    def parse(cls, value) -> 'ConfidenceUnit':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown confidence unit: {value!r} (expected 'fraction' or 'percent')"
            )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_percent(confidence: float, unit: ConfidenceUnit = ConfidenceUnit.FRACTION) -> int:
    """
    Convert a raw confidence value to integer percent.

    Args:
        confidence: Raw value, 0-1 for FRACTION or 0-100 for PERCENT
        unit: Unit of the raw value

    Returns:
        Confidence as an integer 0-100, rounded half up

    Raises:
        ValueError: If the value is NaN or outside the unit's range
    """
    unit = ConfidenceUnit.parse(unit)
    value = float(confidence)
    upper = 1.0 if unit is ConfidenceUnit.FRACTION else 100.0

    if math.isnan(value) or value < 0 or value > upper:
        raise ValueError(
            f"confidence {confidence!r} is outside [0, {upper:g}] for unit '{unit.value}'"
        )

    if unit is ConfidenceUnit.FRACTION:
        value *= 100
    return _round_half_up(value)


def bucket_level(confidence_percent: float) -> ConfidenceLevel:
    """
    Map a confidence percent to a display tier.

    >= 80 is High, >= 60 is Medium, anything lower is Low.
    """
    if confidence_percent >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.HIGH
    if confidence_percent >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def histogram_bin(confidence_percent: float) -> str:
    """
    Return the histogram range label for a confidence percent.

    The value is rounded to an integer percent first, then placed in
    0-20, 21-40, 41-60, 61-80 or 81-100.

    Raises:
        ValueError: If the value falls outside 0-100
    """
    value = _round_half_up(float(confidence_percent))
    if value < 0:
        raise ValueError(f"confidence percent must be >= 0 (got {confidence_percent!r})")

    for label, upper in HISTOGRAM_BINS:
        if value <= upper:
            return label

    raise ValueError(f"confidence percent must be <= 100 (got {confidence_percent!r})")
