"""Tests for crispr_predict.core modules."""

from dataclasses import replace
from datetime import datetime, timezone

import numpy as np
import pytest
from crispr_predict.core.classification import (
    OutcomeCategory,
    PredictionSource,
    classify_outcome,
    explain_category,
    resolve_predicted_label,
)
from crispr_predict.core.confidence import (
    HISTOGRAM_LABELS,
    ConfidenceLevel,
    ConfidenceUnit,
    bucket_level,
    histogram_bin,
    to_percent,
)
from crispr_predict.core.matrix import MATRIX_CELLS, build_match_matrix, count_total_matches
from crispr_predict.core.models import InputType, PredictionRecord
from crispr_predict.core.pam import PamResult, check_pam, check_pam_pair
from crispr_predict.utils.sequence import AlphabetError, LengthError

from conftest import (
    MIXED_GUIDE,
    MIXED_TARGET,
    PAM_MATCH_GUIDE,
    PAM_MATCH_TARGET,
    PAM_MISMATCH_TARGET,
)


def brute_force_matches(guide, target):
    return sum(1 for g in guide for t in target if g == t)


class TestMatchMatrix:
    """Test match matrix construction."""

    def test_shape(self):
        """Test matrix is 23x23."""
        matrix = build_match_matrix(PAM_MATCH_GUIDE, PAM_MISMATCH_TARGET)
        assert matrix.shape == (23, 23)
        assert matrix.cells.size == MATRIX_CELLS == 529

    def test_cells_compare_guide_row_to_target_column(self):
        """Test cell (i, j) is 1 iff guide[i] == target[j]."""
        matrix = build_match_matrix(MIXED_GUIDE, MIXED_TARGET)
        for i, g in enumerate(MIXED_GUIDE):
            for j, t in enumerate(MIXED_TARGET):
                assert matrix.cells[i, j] == (1 if g == t else 0)

    def test_total_matches_counts_whole_grid(self):
        """Test total_matches equals the brute-force count over all pairs."""
        for guide, target in [
            (PAM_MATCH_GUIDE, PAM_MATCH_TARGET),
            (PAM_MATCH_GUIDE, PAM_MISMATCH_TARGET),
            (MIXED_GUIDE, MIXED_TARGET),
        ]:
            matrix = build_match_matrix(guide, target)
            assert matrix.total_matches == brute_force_matches(guide, target)
            assert matrix.total_matches == int(np.sum(matrix.cells))

    def test_identical_sample_pair(self):
        """Test the identical sample pair: A=6, T=5, C=5, G=7 gives 36+25+25+49."""
        matrix = build_match_matrix(PAM_MATCH_GUIDE, PAM_MATCH_TARGET)
        assert matrix.total_matches == 135
        assert matrix.diagonal_matches == 23

    def test_identical_sequences_at_least_diagonal(self):
        """Test identical sequences always have at least 23 matches."""
        for seq in (PAM_MATCH_GUIDE, MIXED_GUIDE, MIXED_TARGET, "ACGTACGTACGTACGTACGTACG"):
            assert build_match_matrix(seq, seq).total_matches >= 23

    def test_homopolymer_matches_every_cell(self):
        """Test identical homopolymers fill the whole grid."""
        seq = "G" * 23
        assert count_total_matches(seq, seq) == 529

    def test_disjoint_alphabets_no_matches(self):
        """Test sequences with no shared bases have zero matches."""
        assert count_total_matches("A" * 23, "C" * 23) == 0

    def test_mismatch_pair_total(self):
        """Test the PAM mismatch sample pair total."""
        assert count_total_matches(PAM_MATCH_GUIDE, PAM_MISMATCH_TARGET) == 133

    def test_matrix_is_read_only(self):
        """Test cells cannot be modified in place."""
        matrix = build_match_matrix(PAM_MATCH_GUIDE, PAM_MATCH_TARGET)
        with pytest.raises(ValueError):
            matrix.cells[0, 0] = 0

    def test_to_list(self):
        """Test nested list export."""
        rows = build_match_matrix(PAM_MATCH_GUIDE, PAM_MATCH_TARGET).to_list()
        assert len(rows) == 23
        assert all(len(row) == 23 for row in rows)
        assert rows[0][0] == 1
        assert set(v for row in rows for v in row) <= {0, 1}

    def test_match_fraction(self):
        """Test match fraction is total over 529."""
        matrix = build_match_matrix(PAM_MATCH_GUIDE, PAM_MATCH_TARGET)
        assert matrix.match_fraction == pytest.approx(135 / 529)


class TestPam:
    """Test PAM motif checks."""

    def test_ends_in_gg(self):
        """Test sequence ending in GG has a PAM."""
        assert check_pam("ATCGATCGATCGATCGATCAGGG") is True

    def test_ends_in_ga(self):
        """Test sequence ending in GA has no PAM."""
        assert check_pam("ATCGATCGATCGATCGATCTGGA") is False

    def test_single_terminal_g(self):
        """Test a single terminal G is not enough."""
        assert check_pam("ATCGATCGATCGATCGATCAGAG") is False

    def test_pair_both(self):
        """Test both sequences carrying the PAM."""
        result = check_pam_pair(PAM_MATCH_GUIDE, PAM_MATCH_TARGET)
        assert result == PamResult(guide_has_pam=True, target_has_pam=True)
        assert result.both
        assert result.pam_label == 1

    def test_pair_target_missing(self):
        """Test pamMatch requires both sequences."""
        result = check_pam_pair(PAM_MATCH_GUIDE, PAM_MISMATCH_TARGET)
        assert result.guide_has_pam
        assert not result.target_has_pam
        assert not result.both
        assert result.either
        assert result.pam_label == 0


class TestOutcomeCategory:
    """Test OutcomeCategory enum."""

    def test_category_values(self):
        """Test category enum values."""
        assert OutcomeCategory.CORRECT_PREDICTED_CORRECT.value == "correct_predicted_correct"
        assert OutcomeCategory.CORRECT_PREDICTED_WRONG.value == "correct_predicted_wrong"
        assert OutcomeCategory.WRONG_PREDICTED_CORRECT.value == "wrong_predicted_correct"
        assert OutcomeCategory.WRONG_PREDICTED_WRONG.value == "wrong_predicted_wrong"

    def test_exactly_four_categories(self):
        """Test the category set is closed at four members."""
        assert len(OutcomeCategory) == 4

    def test_display_names(self):
        """Test confusion-matrix display names."""
        assert OutcomeCategory.CORRECT_PREDICTED_CORRECT.display_name == "True Positive"
        assert OutcomeCategory.CORRECT_PREDICTED_WRONG.display_name == "False Negative"
        assert OutcomeCategory.WRONG_PREDICTED_CORRECT.display_name == "False Positive"
        assert OutcomeCategory.WRONG_PREDICTED_WRONG.display_name == "True Negative"

    def test_parse(self):
        """Test parsing from string values."""
        assert OutcomeCategory.parse("wrong_predicted_wrong") is OutcomeCategory.WRONG_PREDICTED_WRONG
        assert OutcomeCategory.parse(OutcomeCategory.CORRECT_PREDICTED_CORRECT) is (
            OutcomeCategory.CORRECT_PREDICTED_CORRECT
        )

    def test_parse_unknown_raises(self):
        """Test unknown category strings are rejected."""
        with pytest.raises(ValueError, match="Unknown category"):
            OutcomeCategory.parse("unknown")


class TestClassifyOutcome:
    """Test outcome classification."""

    def test_true_positive(self):
        """Test actual 1, predicted 1."""
        assert classify_outcome(1, 1) is OutcomeCategory.CORRECT_PREDICTED_CORRECT

    def test_false_negative(self):
        """Test actual 1, predicted 0."""
        assert classify_outcome(1, 0) is OutcomeCategory.CORRECT_PREDICTED_WRONG

    def test_false_positive(self):
        """Test actual 0, predicted 1."""
        assert classify_outcome(0, 1) is OutcomeCategory.WRONG_PREDICTED_CORRECT

    def test_true_negative(self):
        """Test actual 0, predicted 0."""
        assert classify_outcome(0, 0) is OutcomeCategory.WRONG_PREDICTED_WRONG

    def test_all_combinations_distinct(self):
        """Test the four label pairs map onto all four categories."""
        categories = {classify_outcome(a, p) for a in (0, 1) for p in (0, 1)}
        assert categories == set(OutcomeCategory)

    def test_invalid_label_raises(self):
        """Test labels outside 0/1 are rejected."""
        with pytest.raises(ValueError, match="actual_label"):
            classify_outcome(2, 1)
        with pytest.raises(ValueError, match="predicted_label"):
            classify_outcome(1, -1)

    def test_explanations_fixed_and_distinct(self):
        """Test each category has its own fixed explanation."""
        texts = [explain_category(c) for c in OutcomeCategory]
        assert len(set(texts)) == 4
        assert all(texts)
        assert explain_category("correct_predicted_wrong") == (
            OutcomeCategory.CORRECT_PREDICTED_WRONG.explanation
        )


class TestResolvePredictedLabel:
    """Test the label-source policy."""

    def test_ai_model_keeps_model_label(self):
        """Test AI_MODEL source uses the model label."""
        pam = PamResult(guide_has_pam=True, target_has_pam=False)
        assert resolve_predicted_label(1, pam, PredictionSource.AI_MODEL) == 1

    def test_pam_rule_overrides_model_label(self):
        """Test PAM_RULE source uses the PAM-derived label."""
        pam = PamResult(guide_has_pam=True, target_has_pam=False)
        assert resolve_predicted_label(1, pam, PredictionSource.PAM_RULE) == 0

        pam = PamResult(guide_has_pam=True, target_has_pam=True)
        assert resolve_predicted_label(0, pam, PredictionSource.PAM_RULE) == 1

    def test_source_parsed_from_string(self):
        """Test source strings are accepted."""
        pam = PamResult(guide_has_pam=True, target_has_pam=True)
        assert resolve_predicted_label(0, pam, "AI_model") == 0
        assert resolve_predicted_label(0, pam, "pam_rule") == 1

    def test_unknown_source_raises(self):
        """Test unknown sources are rejected."""
        pam = PamResult(guide_has_pam=True, target_has_pam=True)
        with pytest.raises(ValueError, match="prediction source"):
            resolve_predicted_label(0, pam, "majority_vote")


class TestConfidence:
    """Test confidence conversion and bucketing."""

    def test_bucket_boundaries(self):
        """Test tier boundaries are inclusive on the lower bound."""
        assert bucket_level(80) is ConfidenceLevel.HIGH
        assert bucket_level(79.9) is ConfidenceLevel.MEDIUM
        assert bucket_level(60) is ConfidenceLevel.MEDIUM
        assert bucket_level(59.9) is ConfidenceLevel.LOW

    def test_bucket_extremes(self):
        """Test 0 and 100."""
        assert bucket_level(0) is ConfidenceLevel.LOW
        assert bucket_level(100) is ConfidenceLevel.HIGH

    def test_level_values(self):
        """Test display values."""
        assert [level.value for level in ConfidenceLevel] == ['High', 'Medium', 'Low']

    def test_histogram_bin_edges(self):
        """Test the five histogram ranges at their edges."""
        assert histogram_bin(0) == '0-20%'
        assert histogram_bin(20) == '0-20%'
        assert histogram_bin(21) == '21-40%'
        assert histogram_bin(40) == '21-40%'
        assert histogram_bin(41) == '41-60%'
        assert histogram_bin(60) == '41-60%'
        assert histogram_bin(61) == '61-80%'
        assert histogram_bin(80) == '61-80%'
        assert histogram_bin(81) == '81-100%'
        assert histogram_bin(100) == '81-100%'

    def test_histogram_bin_rounds_to_integer_percent(self):
        """Test fractional percents are rounded before binning."""
        assert histogram_bin(20.4) == '0-20%'
        assert histogram_bin(20.5) == '21-40%'

    def test_histogram_and_tiers_independent(self):
        """Test 80 is High as a tier but lands in the 61-80% bin."""
        assert bucket_level(80) is ConfidenceLevel.HIGH
        assert histogram_bin(80) == '61-80%'

    def test_histogram_out_of_range(self):
        """Test values outside 0-100 are rejected."""
        with pytest.raises(ValueError):
            histogram_bin(101)
        with pytest.raises(ValueError):
            histogram_bin(-1)

    def test_histogram_labels_order(self):
        """Test histogram labels are ordered."""
        assert HISTOGRAM_LABELS == ['0-20%', '21-40%', '41-60%', '61-80%', '81-100%']

    def test_to_percent_fraction(self):
        """Test fraction conversion rounds half up."""
        assert to_percent(0.0) == 0
        assert to_percent(0.5) == 50
        assert to_percent(0.875) == 88
        assert to_percent(1.0) == 100

    def test_to_percent_percent(self):
        """Test percent values are rounded to integers."""
        assert to_percent(79.4, ConfidenceUnit.PERCENT) == 79
        assert to_percent(79.5, ConfidenceUnit.PERCENT) == 80
        assert to_percent(65, "percent") == 65

    def test_to_percent_out_of_range(self):
        """Test out-of-range values raise ValueError."""
        with pytest.raises(ValueError):
            to_percent(1.2)
        with pytest.raises(ValueError):
            to_percent(-0.1)
        with pytest.raises(ValueError):
            to_percent(101, ConfidenceUnit.PERCENT)

    def test_unknown_unit(self):
        """Test unknown units are rejected."""
        with pytest.raises(ValueError, match="confidence unit"):
            to_percent(0.5, "permille")


class TestPredictionRecord:
    """Test PredictionRecord dataclass."""

    def test_category_derived_from_labels(self, make_record):
        """Test category follows the labels."""
        assert make_record(1, 1).category is OutcomeCategory.CORRECT_PREDICTED_CORRECT
        assert make_record(0, 1).category is OutcomeCategory.WRONG_PREDICTED_CORRECT

    def test_category_recomputed_on_new_record(self, make_record):
        """Test a corrected record gets a fresh category."""
        record = make_record(1, 1)
        corrected = replace(record, actual_label=0)
        assert record.category is OutcomeCategory.CORRECT_PREDICTED_CORRECT
        assert corrected.category is OutcomeCategory.WRONG_PREDICTED_CORRECT

    def test_record_is_immutable(self, make_record):
        """Test fields cannot be reassigned."""
        record = make_record()
        with pytest.raises(AttributeError):
            record.actual_label = 0

    def test_invalid_label_rejected(self, make_record):
        """Test labels outside 0/1 raise ValueError."""
        with pytest.raises(ValueError):
            make_record(actual_label=3)

    def test_invalid_confidence_rejected(self, make_record):
        """Test confidence must be a percent."""
        with pytest.raises(ValueError, match="confidence"):
            make_record(confidence=101)

    def test_fractional_confidence_rounded(self, make_record):
        """Test a non-integer percent is rounded half up to an integer."""
        assert make_record(confidence=55.5).confidence == 56
        assert make_record(confidence=55.4).confidence == 55
        assert isinstance(make_record(confidence=55.5).confidence, int)

    def test_invalid_sequences_rejected(self, make_record):
        """Test records cannot hold sequences that fail validation."""
        with pytest.raises(LengthError) as exc_info:
            make_record(guide="XYZ")
        assert exc_info.value.name == 'sgRNA'

        with pytest.raises(AlphabetError) as exc_info:
            make_record(target="ATCGATCGATCGATCGATCNGGG")
        assert exc_info.value.name == 'DNA'

    def test_sequences_normalized(self, make_record):
        """Test lowercase sequences are stored upper-cased."""
        record = make_record(guide=PAM_MATCH_GUIDE.lower())
        assert record.guide == PAM_MATCH_GUIDE

    def test_pam_and_matches_derived(self, make_record):
        """Test pam_match and total_matches come from the sequences."""
        record = make_record()
        assert record.pam_match is True
        assert record.total_matches == 135

        record = make_record(target=PAM_MISMATCH_TARGET)
        assert record.pam_match is False
        assert record.total_matches == 133

    def test_consistent_values_accepted(self, make_record):
        """Test supplied values that agree with the sequences are kept."""
        record = make_record(pam_match=True, total_matches=135)
        assert record.pam_match is True
        assert record.total_matches == 135

    def test_contradicting_values_rejected(self, make_record):
        """Test supplied values that disagree with the sequences raise."""
        with pytest.raises(ValueError, match="pam_match"):
            make_record(pam_match=False)
        with pytest.raises(ValueError, match="total_matches"):
            make_record(total_matches=0)

    def test_confidence_level(self, make_record):
        """Test confidence level property."""
        assert make_record(confidence=85).confidence_level is ConfidenceLevel.HIGH
        assert make_record(confidence=65).confidence_level is ConfidenceLevel.MEDIUM

    def test_naive_timestamp_becomes_utc(self, make_record):
        """Test naive created_at is treated as UTC."""
        record = make_record(created_at=datetime(2023, 11, 1, 8, 30))
        assert record.created_at.tzinfo is not None
        assert record.created_at == datetime(2023, 11, 1, 8, 30, tzinfo=timezone.utc)

    def test_agreement(self, make_record):
        """Test agreement between model label and PAM rule."""
        assert make_record(model_label=1).agreement is True
        assert make_record(target=PAM_MISMATCH_TARGET, model_label=1).agreement is False
        assert make_record().agreement is None

    def test_from_dict_fraction_confidence(self):
        """Test persisted 0-1 confidence is converted to percent."""
        record = PredictionRecord.from_dict({
            '_id': 'abc123',
            'sgRNA': PAM_MATCH_GUIDE,
            'DNA': PAM_MISMATCH_TARGET,
            'actualLabel': 0,
            'predictedLabel': 0,
            'confidence': 0.75,
            'pamMatch': False,
            'totalMatches': 133,
            'processingTime': 185,
            'createdAt': '2023-11-02T10:00:00Z',
            'inputType': 'image',
            'category': 'correct_predicted_correct',
        })
        assert record.confidence == 75
        assert record.record_id == 'abc123'
        assert record.input_type is InputType.IMAGE
        # Stored category is ignored and re-derived
        assert record.category is OutcomeCategory.WRONG_PREDICTED_WRONG

    def test_to_dict_marks_percent_unit(self, make_record):
        """Test to_dict output reloads with the same percent confidence."""
        record = make_record(confidence=64)
        d = record.to_dict()
        assert d['confidenceUnit'] == 'percent'
        assert PredictionRecord.from_dict(d).confidence == 64

    def test_display_dict(self, make_record):
        """Test the display record shape."""
        display = make_record(1, 0, confidence=58).to_display_dict()
        assert display['category'] == 'correct_predicted_wrong'
        assert display['categoryName'] == 'False Negative'
        assert display['categoryExplanation'] == explain_category(
            OutcomeCategory.CORRECT_PREDICTED_WRONG
        )
        assert display['confidenceLevel'] == 'Low'
        assert display['totalMatches'] == 135
        assert len(display['matrix']) == 23
        assert display['pamMatch'] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
