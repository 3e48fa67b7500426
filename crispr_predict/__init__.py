"""
crispr-predict - guide/target compatibility and prediction outcome analysis
for CRISPR-Cas9 editing predictions.
"""

__version__ = "0.1.0"

from .analysis import AggregateSummary, TimeRange, summarize
from .config import EngineConfig
from .core.classification import (
    OutcomeCategory,
    PredictionSource,
    classify_outcome,
    explain_category,
)
from .core.confidence import ConfidenceLevel, ConfidenceUnit, bucket_level
from .core.matrix import MatchMatrix, build_match_matrix
from .core.models import InputType, PredictionRecord
from .core.pam import PamResult, check_pam
from .pipeline import PredictionPipeline, PredictionResult, build_record
from .utils.sequence import AlphabetError, LengthError, SequenceValidationError, validate_sequence

__all__ = [
    "validate_sequence",
    "SequenceValidationError",
    "LengthError",
    "AlphabetError",
    "MatchMatrix",
    "build_match_matrix",
    "PamResult",
    "check_pam",
    "OutcomeCategory",
    "PredictionSource",
    "classify_outcome",
    "explain_category",
    "ConfidenceLevel",
    "ConfidenceUnit",
    "bucket_level",
    "InputType",
    "PredictionRecord",
    "TimeRange",
    "AggregateSummary",
    "summarize",
    "EngineConfig",
    "PredictionPipeline",
    "PredictionResult",
    "build_record",
    "__version__",
]
