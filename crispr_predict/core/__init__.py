"""
Core sequence compatibility and outcome classification modules.
"""

from .classification import (
    OutcomeCategory,
    PredictionSource,
    check_label,
    classify_outcome,
    explain_category,
    resolve_predicted_label,
)
from .confidence import (
    HISTOGRAM_BINS,
    HISTOGRAM_LABELS,
    ConfidenceLevel,
    ConfidenceUnit,
    bucket_level,
    histogram_bin,
    to_percent,
)
from .matrix import (
    MATRIX_CELLS,
    MatchMatrix,
    build_match_matrix,
    count_total_matches,
)
from .models import (
    InputType,
    PredictionRecord,
    parse_timestamp,
)
from .pam import (
    PAM_MOTIF,
    PamResult,
    check_pam,
    check_pam_pair,
)

__all__ = [
    # Match matrix
    'MATRIX_CELLS',
    'MatchMatrix',
    'build_match_matrix',
    'count_total_matches',
    # PAM
    'PAM_MOTIF',
    'PamResult',
    'check_pam',
    'check_pam_pair',
    # Classification
    'OutcomeCategory',
    'PredictionSource',
    'check_label',
    'classify_outcome',
    'explain_category',
    'resolve_predicted_label',
    # Confidence
    'ConfidenceLevel',
    'ConfidenceUnit',
    'HISTOGRAM_BINS',
    'HISTOGRAM_LABELS',
    'bucket_level',
    'histogram_bin',
    'to_percent',
    # Models
    'InputType',
    'PredictionRecord',
    'parse_timestamp',
]
