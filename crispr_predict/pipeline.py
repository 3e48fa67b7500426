"""
Prediction pipeline for a single guide/target pair.

Runs: validation -> match matrix -> PAM check -> external predictor ->
label-source policy -> classification, and returns a finished
PredictionRecord together with the match matrix for display.
"""

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from .config import EngineConfig
from .core.classification import PredictionSource, check_label, resolve_predicted_label
from .core.confidence import to_percent
from .core.matrix import MatchMatrix, build_match_matrix
from .core.models import InputType, PredictionRecord
from .core.pam import PamResult, check_pam_pair
from .utils.sequence import validate_sequence

logger = logging.getLogger(__name__)

# (guide, target) -> (label, confidence in the configured unit)
Predictor = Callable[[str, str], Tuple[int, float]]


@dataclass(frozen=True)
class PredictionResult:
    """Record plus the intermediate results the record was built from."""
    record: PredictionRecord
    matrix: MatchMatrix
    pam: PamResult

    def to_display_dict(self) -> Dict[str, Any]:
        display = self.record.to_display_dict(self.matrix)
        display['pam'] = {
            'sgRNA': self.pam.guide_has_pam,
            'DNA': self.pam.target_has_pam,
        }
        return display


def build_record(
    guide: str,
    target: str,
    actual_label: int,
    model_label: int,
    model_confidence: float,
    config: Optional[EngineConfig] = None,
    processing_time_ms: float = 0.0,
    created_at: Optional[datetime] = None,
    input_type: InputType = InputType.TEXT,
    record_id: Optional[str] = None,
) -> PredictionResult:
    """
    Build a classified record from raw sequences and a model's output.

    Args:
        guide: Raw guide (sgRNA) sequence; validated and upper-cased here
        target: Raw target DNA sequence; validated and upper-cased here
        actual_label: Ground truth label (0 or 1)
        model_label: Label reported by the model (0 or 1)
        model_confidence: Model confidence in config.confidence_unit
        config: Engine configuration (defaults to EngineConfig())
        processing_time_ms: Measured processing time
        created_at: Record timestamp (defaults to now, UTC)
        input_type: How the sequences were entered
        record_id: Optional identifier

    Returns:
        PredictionResult

    Raises:
        LengthError, AlphabetError: If either sequence is invalid
        ValueError: If labels or confidence are out of range
    """
    config = config or EngineConfig()

    guide = validate_sequence(guide, name='sgRNA')
    target = validate_sequence(target, name='DNA')
    actual_label = check_label(actual_label, 'actual_label')

    matrix = build_match_matrix(guide, target)
    pam = check_pam_pair(guide, target)

    predicted_label = resolve_predicted_label(model_label, pam, config.prediction_source)
    confidence = to_percent(model_confidence, config.confidence_unit)

    if config.prediction_source is PredictionSource.PAM_RULE and predicted_label != model_label:
        logger.info(
            f"Model label {model_label} disagrees with PAM rule label {predicted_label}; "
            f"using PAM rule"
        )

    record = PredictionRecord(
        guide=guide,
        target=target,
        actual_label=actual_label,
        predicted_label=predicted_label,
        confidence=confidence,
        pam_match=pam.both,
        total_matches=matrix.total_matches,
        processing_time_ms=processing_time_ms,
        created_at=created_at or datetime.now(timezone.utc),
        input_type=InputType.parse(input_type),
        prediction_source=config.prediction_source,
        model_label=check_label(model_label, 'model_label'),
        record_id=record_id,
    )

    logger.debug(f"Built {record!r}")

    return PredictionResult(record=record, matrix=matrix, pam=pam)


class PredictionPipeline:
    """
    Runs guide/target pairs through an external predictor.

    The predictor is opaque: any callable taking (guide, target) and
    returning (label, confidence). Processing time covers validation,
    prediction and classification.

    Example:
        >>> pipeline = PredictionPipeline(model.predict, EngineConfig())
        >>> result = pipeline.run("ATCGATCGATCGATCGATCAGGG",
        ...                       "ATCGATCGATCGATCGATCAGGG", actual_label=1)
        >>> result.record.category
        <OutcomeCategory.CORRECT_PREDICTED_CORRECT: 'correct_predicted_correct'>
    """

    def __init__(self, predictor: Predictor, config: Optional[EngineConfig] = None):
        self.predictor = predictor
        self.config = config or EngineConfig()

    def run(
        self,
        guide: str,
        target: str,
        actual_label: int,
        input_type: InputType = InputType.TEXT,
        record_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> PredictionResult:
        """
        Predict and classify one guide/target pair.

        Sequences are validated before the predictor is called, so invalid
        input never reaches the model.
        """
        start = time.perf_counter()

        guide = validate_sequence(guide, name='sgRNA')
        target = validate_sequence(target, name='DNA')

        model_label, model_confidence = self.predictor(guide, target)

        result = build_record(
            guide=guide,
            target=target,
            actual_label=actual_label,
            model_label=model_label,
            model_confidence=model_confidence,
            config=self.config,
            processing_time_ms=0.0,
            created_at=created_at,
            input_type=input_type,
            record_id=record_id,
        )
        elapsed_ms = round((time.perf_counter() - start) * 1000, 3)

        timed = replace(result.record, processing_time_ms=elapsed_ms)

        logger.info(
            f"Prediction complete: {timed.category.value} "
            f"(confidence {timed.confidence}%, {elapsed_ms} ms)"
        )

        return PredictionResult(record=timed, matrix=result.matrix, pam=result.pam)
