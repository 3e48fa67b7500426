"""Shared fixtures for crispr_predict tests."""

from datetime import datetime, timezone

import pytest

from crispr_predict.core.models import InputType, PredictionRecord


# Sample pairs used throughout the tests
PAM_MATCH_GUIDE = "ATCGATCGATCGATCGATCAGGG"
PAM_MATCH_TARGET = "ATCGATCGATCGATCGATCAGGG"
PAM_MISMATCH_TARGET = "ATCGATCGATCGATCGATCTGGA"
MIXED_GUIDE = "GTCACCTCCAATGACTAGGGAGG"
MIXED_TARGET = "GTCTCCTCCACTGGATTGTGAGG"


@pytest.fixture
def make_record():
    """Factory for PredictionRecords with sensible defaults."""

    def _make(
        actual_label=1,
        predicted_label=1,
        confidence=70,
        created_at=datetime(2023, 11, 1, 12, 0, tzinfo=timezone.utc),
        pam_match=None,
        input_type=InputType.TEXT,
        processing_time_ms=100.0,
        **kwargs,
    ):
        return PredictionRecord(
            guide=kwargs.pop('guide', PAM_MATCH_GUIDE),
            target=kwargs.pop('target', PAM_MATCH_TARGET),
            actual_label=actual_label,
            predicted_label=predicted_label,
            confidence=confidence,
            pam_match=pam_match,
            total_matches=kwargs.pop('total_matches', None),
            processing_time_ms=processing_time_ms,
            created_at=created_at,
            input_type=input_type,
            **kwargs,
        )

    return _make


@pytest.fixture
def confusion_records(make_record):
    """40 records with tp=15, fp=8, fn=5, tn=12."""
    records = []
    records += [make_record(1, 1, confidence=75) for _ in range(15)]
    records += [make_record(0, 1, confidence=64) for _ in range(8)]
    records += [make_record(1, 0, confidence=58) for _ in range(5)]
    records += [make_record(0, 0, confidence=71) for _ in range(12)]
    return records
