"""
Data models for crispr-predict.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import pandas as pd

from ..utils.sequence import gc_content, validate_sequence
from .classification import (
    OutcomeCategory,
    PredictionSource,
    check_label,
    classify_outcome,
)
from .confidence import ConfidenceLevel, ConfidenceUnit, bucket_level, to_percent
from .matrix import MatchMatrix, build_match_matrix, count_total_matches
from .pam import check_pam_pair


class InputType(Enum):
    """How the sequences were entered."""
    TEXT = 'text'
    IMAGE = 'image'

    @classmethod
    def parse(cls, value) -> 'InputType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown input type: {value!r} (expected 'text' or 'image')")


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value) -> datetime:
    """Parse a datetime, ISO string or epoch-milliseconds number into a UTC datetime."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return ensure_utc(pd.Timestamp(value).to_pydatetime())


@dataclass(frozen=True)
class PredictionRecord:
    """
    One finished prediction.

    Records are immutable; a correction means building a new record.
    Sequences are validated and upper-cased on construction. pam_match and
    total_matches are derived from them; a supplied value that disagrees
    raises ValueError.
    The category is derived from actual_label and predicted_label every
    time it is read and is never stored.

    Attributes:
        guide: Validated guide (sgRNA) sequence
        target: Validated target DNA sequence
        actual_label: Ground truth label (0 or 1)
        predicted_label: Authoritative predicted label (0 or 1)
        confidence: Model confidence as integer percent (0-100), rounded half up
        pam_match: True if both guide and target end in GG (derived)
        total_matches: Match matrix 1-cell count, 0-529 (derived)
        processing_time_ms: Externally measured processing time
        created_at: When the prediction was made
        input_type: 'text' or 'image' entry
        prediction_source: Which label source produced predicted_label
        model_label: Label reported by the model (may differ from predicted_label)
        record_id: Optional identifier assigned by the persistence layer
    """
    guide: str
    target: str
    actual_label: int
    predicted_label: int
    confidence: int
    pam_match: Optional[bool] = None
    total_matches: Optional[int] = None
    processing_time_ms: float = 0.0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    input_type: InputType = InputType.TEXT
    prediction_source: PredictionSource = PredictionSource.AI_MODEL
    model_label: Optional[int] = None
    record_id: Optional[str] = None

    def __post_init__(self):
        guide = validate_sequence(self.guide, name='sgRNA')
        target = validate_sequence(self.target, name='DNA')
        object.__setattr__(self, 'guide', guide)
        object.__setattr__(self, 'target', target)

        # pam_match and total_matches always reflect the sequences
        pam_match = check_pam_pair(guide, target).both
        total_matches = count_total_matches(guide, target)
        if self.pam_match is not None and bool(self.pam_match) != pam_match:
            raise ValueError(
                f"pam_match={self.pam_match!r} contradicts the sequences (expected {pam_match})"
            )
        if self.total_matches is not None and self.total_matches != total_matches:
            raise ValueError(
                f"total_matches={self.total_matches!r} contradicts the sequences "
                f"(expected {total_matches})"
            )
        object.__setattr__(self, 'pam_match', pam_match)
        object.__setattr__(self, 'total_matches', total_matches)

        object.__setattr__(self, 'created_at', parse_timestamp(self.created_at))
        check_label(self.actual_label, "actual_label")
        check_label(self.predicted_label, "predicted_label")
        if self.model_label is not None:
            check_label(self.model_label, "model_label")
        object.__setattr__(
            self, 'confidence', to_percent(self.confidence, ConfidenceUnit.PERCENT)
        )

    @property
    def category(self) -> OutcomeCategory:
        return classify_outcome(self.actual_label, self.predicted_label)

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return bucket_level(self.confidence)

    @property
    def pam_label(self) -> int:
        return 1 if self.pam_match else 0

    @property
    def agreement(self) -> Optional[bool]:
        """Whether the model's own label agrees with the PAM rule."""
        if self.model_label is None:
            return None
        return self.model_label == self.pam_label

    def to_dict(self) -> Dict[str, Any]:
        """Flat dictionary for serialization and DataFrame creation."""
        return {
            'record_id': self.record_id,
            'sgRNA': self.guide,
            'DNA': self.target,
            'actualLabel': self.actual_label,
            'predictedLabel': self.predicted_label,
            'confidence': self.confidence,
            'confidenceUnit': ConfidenceUnit.PERCENT.value,
            'pamMatch': self.pam_match,
            'totalMatches': self.total_matches,
            'category': self.category.value,
            'processingTime': self.processing_time_ms,
            'createdAt': self.created_at.isoformat(),
            'inputType': self.input_type.value,
            'prediction_source': self.prediction_source.value,
            'model_prediction': self.model_label,
        }

    @classmethod
    def from_dict(
        cls,
        d: Dict[str, Any],
        confidence_unit: ConfidenceUnit = ConfidenceUnit.FRACTION,
    ) -> 'PredictionRecord':
        """
        Create from a dictionary produced by to_dict() or by the persistence layer.

        The confidence unit comes from a 'confidenceUnit' key when present
        (to_dict() writes one), otherwise from confidence_unit. Persisted
        model output is a 0-1 fraction, hence the default. Any stored
        'category' is ignored and re-derived from the labels. pamMatch and
        totalMatches are optional; when present they must agree with the
        sequences.
        """
        unit = d.get('confidenceUnit')
        if not isinstance(unit, str) or not unit:
            unit = confidence_unit
        confidence = to_percent(d['confidence'], ConfidenceUnit.parse(unit))

        model_label = d.get('model_prediction')
        if model_label is not None and not pd.isna(model_label):
            model_label = int(model_label)
        else:
            model_label = None

        record_id = d.get('record_id', d.get('_id'))
        if record_id is not None and pd.isna(record_id):
            record_id = None

        pam_match = d.get('pamMatch')
        pam_match = None if _is_missing(pam_match) else parse_bool(pam_match)
        total_matches = d.get('totalMatches')
        total_matches = None if _is_missing(total_matches) else int(total_matches)

        source = d.get('prediction_source')
        if _is_missing(source):
            source = PredictionSource.AI_MODEL

        return cls(
            guide=str(d['sgRNA']),
            target=str(d['DNA']),
            actual_label=int(d['actualLabel']),
            predicted_label=int(d['predictedLabel']),
            confidence=confidence,
            pam_match=pam_match,
            total_matches=total_matches,
            processing_time_ms=float(d.get('processingTime', 0.0) or 0.0),
            created_at=parse_timestamp(d['createdAt']),
            input_type=InputType.parse(d.get('inputType', 'text') or 'text'),
            prediction_source=PredictionSource.parse(source),
            model_label=model_label,
            record_id=str(record_id) if record_id is not None else None,
        )

    def to_display_dict(self, matrix: Optional[MatchMatrix] = None) -> Dict[str, Any]:
        """
        Record shape consumed by reporting/rendering layers.

        Args:
            matrix: Match matrix for the pair; rebuilt from the sequences if omitted
        """
        if matrix is None:
            matrix = build_match_matrix(self.guide, self.target)

        category = self.category
        return {
            'sgRNA': self.guide,
            'DNA': self.target,
            'matrix': matrix.to_list(),
            'totalMatches': self.total_matches,
            'pamMatch': self.pam_match,
            'category': category.value,
            'categoryName': category.display_name,
            'categoryExplanation': category.explanation,
            'predictedLabel': self.predicted_label,
            'actualLabel': self.actual_label,
            'confidence': self.confidence,
            'confidenceLevel': self.confidence_level.value,
            'gcContent': {
                'sgRNA': round(gc_content(self.guide), 4),
                'DNA': round(gc_content(self.target), 4),
            },
            'prediction_source': self.prediction_source.value,
            'model_prediction': self.model_label,
            'pam_prediction': self.pam_label,
            'agreement': self.agreement,
            'processingTime': self.processing_time_ms,
        }

    def __repr__(self) -> str:
        return (
            f"PredictionRecord(category={self.category.value}, "
            f"confidence={self.confidence}%, pam_match={self.pam_match})"
        )


def _is_missing(value) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value))


def parse_bool(value) -> bool:
    """Parse a bool from a table cell or config value ('true', '1', 'yes' are true)."""
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    if value is None or pd.isna(value):
        return False
    return bool(value)
