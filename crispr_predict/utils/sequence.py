"""
Sequence validation and manipulation utilities.

Guide (sgRNA) and target (DNA) inputs are fixed-length 23-mers over the
alphabet A, C, G, T. Validation normalizes to uppercase and rejects
anything else before it reaches the matrix, PAM or classification code.
"""

import re
from typing import Dict, Optional


SEQUENCE_LENGTH = 23
VALID_BASES = "ACGT"

# Regex to detect a pure ACGT string (case-insensitive)
ACGT_PATTERN = re.compile(r'^[ACGTacgt]+$')


class SequenceValidationError(ValueError):
    """Base class for guide/target sequence validation failures."""

    def __init__(self, message: str, name: str = "sequence"):
        super().__init__(message)
        self.name = name


class LengthError(SequenceValidationError):
    """Sequence is not exactly SEQUENCE_LENGTH bases long."""


class AlphabetError(SequenceValidationError):
    """Sequence contains a symbol outside A, C, G, T."""


def validate_sequence(sequence: str, name: str = "sequence") -> str:
    """
    Validate a guide or target sequence and normalize it to uppercase.

    Surrounding whitespace is stripped. The length check runs before the
    alphabet check, so an empty string raises LengthError.

    Args:
        sequence: Raw sequence string
        name: Label used in error messages (e.g. 'sgRNA', 'DNA')

    Returns:
        The uppercase sequence

    Raises:
        LengthError: If the sequence is not 23 bases long
        AlphabetError: If any base is outside A, C, G, T

    Examples:
        >>> validate_sequence("atcgatcgatcgatcgatcaggg")
        'ATCGATCGATCGATCGATCAGGG'
    """
    if sequence is None:
        raise LengthError(f"{name} sequence is required", name=name)

    seq = sequence.strip()

    if len(seq) != SEQUENCE_LENGTH:
        raise LengthError(
            f"{name} must be exactly {SEQUENCE_LENGTH} nucleotides long "
            f"(got {len(seq)})",
            name=name,
        )

    if not ACGT_PATTERN.match(seq):
        invalid = sorted({base for base in seq.upper() if base not in VALID_BASES})
        raise AlphabetError(
            f"{name} must contain only A, T, C, G nucleotides "
            f"(found: {', '.join(invalid)})",
            name=name,
        )

    return seq.upper()


def is_valid_sequence(sequence: str) -> bool:
    """Check if a string would pass validate_sequence."""
    try:
        validate_sequence(sequence)
    except SequenceValidationError:
        return False
    return True


def find_sequence_errors(guide: Optional[str], target: Optional[str]) -> Dict[str, str]:
    """
    Collect validation errors for a guide/target pair without raising.

    Returns:
        Dict mapping field name ('sgRNA', 'DNA') to an error message.
        Empty if both sequences are valid.
    """
    errors = {}

    for name, seq in (('sgRNA', guide), ('DNA', target)):
        if not seq:
            errors[name] = f"{name} sequence is required"
            continue
        try:
            validate_sequence(seq, name=name)
        except SequenceValidationError as e:
            errors[name] = str(e)

    return errors


def hamming_distance(seq1: str, seq2: str) -> int:
    """Count mismatches between two equal-length sequences.

    Raises ValueError if sequences have different lengths.
    """
    if len(seq1) != len(seq2):
        raise ValueError(f"Sequences must be equal length: {len(seq1)} vs {len(seq2)}")
    return sum(a != b for a, b in zip(seq1.upper(), seq2.upper()))


def gc_content(seq: str) -> float:
    """Calculate GC content of a sequence (0.0 to 1.0)."""
    seq = seq.upper()
    gc = sum(1 for base in seq if base in 'GC')
    total = sum(1 for base in seq if base in VALID_BASES)
    return gc / total if total > 0 else 0.0
