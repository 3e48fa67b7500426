"""
Prediction outcome classification.

Classifies an (actual, predicted) label pair into one of four categories:
- correct_predicted_correct: True positive (actual 1, predicted 1)
- correct_predicted_wrong: False negative (actual 1, predicted 0)
- wrong_predicted_correct: False positive (actual 0, predicted 1)
- wrong_predicted_wrong: True negative (actual 0, predicted 0)

Category depends on the labels only. Confidence and PAM status never take
part; where a PAM-derived label should replace the model's label, that is
decided by resolve_predicted_label before classification.
"""

from enum import Enum
from typing import Dict, Tuple

from .pam import PamResult


class OutcomeCategory(Enum):
    """Confusion-matrix outcome categories."""
    CORRECT_PREDICTED_CORRECT = 'correct_predicted_correct'
    CORRECT_PREDICTED_WRONG = 'correct_predicted_wrong'
    WRONG_PREDICTED_CORRECT = 'wrong_predicted_correct'
    WRONG_PREDICTED_WRONG = 'wrong_predicted_wrong'

    @classmethod
    def parse(cls, value) -> 'OutcomeCategory':
        """Parse a category from its string value (or pass a member through)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(c.value for c in cls)
            raise ValueError(f"Unknown category: {value!r} (expected one of {valid})")

    @property
    def display_name(self) -> str:
        return _CATEGORY_INFO[self][0]

    @property
    def description(self) -> str:
        return _CATEGORY_INFO[self][1]

    @property
    def confusion_key(self) -> str:
        """Key in the confusion matrix: 'tp', 'fn', 'fp' or 'tn'."""
        return _CATEGORY_INFO[self][2]

    @property
    def explanation(self) -> str:
        return explain_category(self)


class PredictionSource(Enum):
    """Which label is authoritative for predicted_label."""
    AI_MODEL = 'AI_model'
    PAM_RULE = 'PAM_rule'

    @classmethod
    def parse(cls, value) -> 'PredictionSource':
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(
            f"Unknown prediction source: {value!r} "
            f"(expected one of {', '.join(m.value for m in cls)})"
        )


# (display name, description, confusion key)
_CATEGORY_INFO: Dict[OutcomeCategory, Tuple[str, str, str]] = {
    OutcomeCategory.CORRECT_PREDICTED_CORRECT: (
        'True Positive', 'Correctly predicted as successful', 'tp'),
    OutcomeCategory.CORRECT_PREDICTED_WRONG: (
        'False Negative', 'Incorrectly predicted as unsuccessful', 'fn'),
    OutcomeCategory.WRONG_PREDICTED_CORRECT: (
        'False Positive', 'Incorrectly predicted as successful', 'fp'),
    OutcomeCategory.WRONG_PREDICTED_WRONG: (
        'True Negative', 'Correctly predicted as unsuccessful', 'tn'),
}

_EXPLANATIONS: Dict[OutcomeCategory, str] = {
    OutcomeCategory.CORRECT_PREDICTED_CORRECT: (
        "The pair is known to edit successfully and the prediction was "
        "successful editing. The prediction matches the ground truth."
    ),
    OutcomeCategory.CORRECT_PREDICTED_WRONG: (
        "The pair is known to edit successfully but the prediction was no "
        "editing. A successful edit was missed."
    ),
    OutcomeCategory.WRONG_PREDICTED_CORRECT: (
        "The pair is known not to edit but the prediction was successful "
        "editing. A failed edit was reported as successful."
    ),
    OutcomeCategory.WRONG_PREDICTED_WRONG: (
        "The pair is known not to edit and the prediction was no editing. "
        "The prediction matches the ground truth."
    ),
}

_LABEL_TABLE: Dict[Tuple[int, int], OutcomeCategory] = {
    (1, 1): OutcomeCategory.CORRECT_PREDICTED_CORRECT,
    (1, 0): OutcomeCategory.CORRECT_PREDICTED_WRONG,
    (0, 1): OutcomeCategory.WRONG_PREDICTED_CORRECT,
    (0, 0): OutcomeCategory.WRONG_PREDICTED_WRONG,
}


def check_label(label, name: str = "label") -> int:
    """Return label as int, raising ValueError unless it is 0 or 1."""
    if isinstance(label, bool) or label not in (0, 1):
        raise ValueError(f"{name} must be 0 or 1 (got {label!r})")
    return int(label)


def classify_outcome(actual_label: int, predicted_label: int) -> OutcomeCategory:
    """
    Classify a prediction against its ground truth.

    Args:
        actual_label: Ground truth (1 = editing succeeds, 0 = it does not)
        predicted_label: Predicted label (0 or 1)

    Returns:
        OutcomeCategory for the pair

    Raises:
        ValueError: If either label is not 0 or 1
    """
    actual = check_label(actual_label, "actual_label")
    predicted = check_label(predicted_label, "predicted_label")
    return _LABEL_TABLE[(actual, predicted)]


def explain_category(category: OutcomeCategory) -> str:
    """Fixed human-readable explanation for a category."""
    return _EXPLANATIONS[OutcomeCategory.parse(category)]


def resolve_predicted_label(
    model_label: int,
    pam_result: PamResult,
    source: PredictionSource = PredictionSource.PAM_RULE,
) -> int:
    """
    Pick the label used as predicted_label for categorization.

    Args:
        model_label: Label reported by the external model
        pam_result: PAM check for the pair
        source: AI_MODEL keeps the model's label; PAM_RULE uses the
            PAM-derived label (1 only when both sequences end in GG)

    Returns:
        The authoritative predicted label (0 or 1)
    """
    model_label = check_label(model_label, "model_label")
    source = PredictionSource.parse(source)

    if source is PredictionSource.PAM_RULE:
        return pam_result.pam_label
    return model_label
