"""
Utility modules for crispr-predict.
"""

from .sequence import (
    SEQUENCE_LENGTH,
    VALID_BASES,
    AlphabetError,
    LengthError,
    SequenceValidationError,
    find_sequence_errors,
    gc_content,
    hamming_distance,
    is_valid_sequence,
    validate_sequence,
)

__all__ = [
    'SEQUENCE_LENGTH',
    'VALID_BASES',
    'SequenceValidationError',
    'LengthError',
    'AlphabetError',
    'validate_sequence',
    'is_valid_sequence',
    'find_sequence_errors',
    'hamming_distance',
    'gc_content',
]
