"""
Reading and writing prediction records and summaries.

Records are exchanged as JSON (a list, or an object with a 'data' list),
JSON lines, or TSV/CSV tables with the column names written by
PredictionRecord.to_dict().
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from ..analysis.types import AggregateSummary
from ..core.confidence import ConfidenceUnit
from ..core.models import PredictionRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('sgRNA', 'DNA', 'actualLabel', 'predictedLabel', 'confidence', 'createdAt')


def _read_rows(path: Path) -> List[Dict[str, Any]]:
    suffix = path.suffix.lower()

    if suffix == '.json':
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get('data', [])
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a list of records or an object with a 'data' list")
        return data

    if suffix in ('.jsonl', '.ndjson'):
        rows = []
        with open(path) as f:
            for line in f:
                line = line.strip()
                if line:
                    rows.append(json.loads(line))
        return rows

    if suffix in ('.tsv', '.txt'):
        df = pd.read_csv(path, sep='\t')
    elif suffix == '.csv':
        df = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported record file type: {path.suffix} (use .json, .jsonl, .tsv or .csv)")

    return df.to_dict(orient='records')


def load_records(
    path: Path,
    confidence_unit: ConfidenceUnit = ConfidenceUnit.FRACTION,
    strict: bool = False,
) -> List[PredictionRecord]:
    """
    Load prediction records from a file.

    Required fields:
    - sgRNA, DNA: guide and target sequences
    - actualLabel, predictedLabel: 0 or 1
    - confidence: model confidence (unit from a 'confidenceUnit' column,
      otherwise confidence_unit)
    - createdAt: ISO timestamp or epoch milliseconds

    Optional fields: pamMatch, totalMatches, processingTime, inputType,
    prediction_source, model_prediction, record_id/_id. A stored 'category'
    is ignored; it is always re-derived from the labels.

    Args:
        path: Path to a .json, .jsonl, .tsv or .csv file
        confidence_unit: Unit for rows without a 'confidenceUnit' field
        strict: Raise on the first malformed row instead of skipping it

    Returns:
        List of PredictionRecord objects
    """
    path = Path(path)
    rows = _read_rows(path)

    records = []
    errors = []

    for i, row in enumerate(rows):
        missing = [k for k in REQUIRED_FIELDS if k not in row]
        try:
            if missing:
                raise ValueError(f"missing fields: {', '.join(missing)}")
            records.append(PredictionRecord.from_dict(row, confidence_unit=confidence_unit))
        except (KeyError, TypeError, ValueError) as e:
            if strict:
                raise ValueError(f"{path}: row {i + 1}: {e}") from e
            errors.append(f"row {i + 1}: {e}")

    if errors:
        logger.warning(f"Skipped {len(errors)} malformed records in {path}:")
        for err in errors[:10]:
            logger.warning(f"  {err}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more")

    logger.info(f"Loaded {len(records)} records from {path}")

    return records


def write_records_tsv(records: Sequence[PredictionRecord], output_path: Path) -> Path:
    """
    Write records to TSV file.

    Args:
        records: Prediction records
        output_path: Path for output TSV

    Returns:
        Path to written file
    """
    df = pd.DataFrame([r.to_dict() for r in records])
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote {len(records)} records to {output_path}")

    return Path(output_path)


def write_summary_json(summary: AggregateSummary, output_path: Path) -> Path:
    """Write an AggregateSummary as JSON."""
    with open(output_path, 'w') as f:
        json.dump(summary.to_dict(), f, indent=2)

    logger.info(f"Wrote summary to {output_path}")

    return Path(output_path)


def generate_summary_report(summary: AggregateSummary, output_path: Path) -> Path:
    """
    Generate a summary report in markdown format.

    Args:
        summary: AggregateSummary to report
        output_path: Path for output markdown file

    Returns:
        Path to written file
    """
    metrics = summary.metrics
    confusion = metrics.confusion
    window = summary.window.to_dict()

    with open(output_path, 'w') as f:
        f.write("# CRISPR Prediction Performance Summary\n\n")

        f.write("## Overview\n\n")
        f.write(f"- **Window:** {window['start'] or 'open'} to {window['end'] or 'open'}\n")
        f.write(f"- **Total predictions:** {summary.total_predictions:,}\n")
        f.write(f"- **Accuracy:** {metrics.accuracy * 100:.1f}%\n")
        f.write(f"- **Precision:** {metrics.precision * 100:.1f}%\n")
        f.write(f"- **Recall:** {metrics.recall * 100:.1f}%\n")
        f.write(f"- **F1 score:** {metrics.f1 * 100:.1f}%\n")
        f.write(f"- **PAM matches:** {summary.additional.pam_matches} "
                f"({summary.pam_match_rate * 100:.1f}%)\n\n")

        f.write("## Confusion Matrix\n\n")
        f.write("| | Predicted 1 | Predicted 0 |\n")
        f.write("|---|---|---|\n")
        f.write(f"| **Actual 1** | {confusion.tp} (TP) | {confusion.fn} (FN) |\n")
        f.write(f"| **Actual 0** | {confusion.fp} (FP) | {confusion.tn} (TN) |\n\n")

        f.write("## Categories\n\n")
        f.write("| Category | Count | Avg confidence % |\n")
        f.write("|----------|-------|------------------|\n")
        for stats in summary.category_distribution:
            f.write(f"| {stats.category.display_name} | {stats.count} | {stats.avg_confidence:.1f} |\n")
        f.write("\n")

        f.write("## Confidence Distribution\n\n")
        f.write("| Range | Count |\n")
        f.write("|-------|-------|\n")
        for label, count in summary.confidence_histogram.items():
            f.write(f"| {label} | {count} |\n")
        f.write("\n")

        if summary.trends:
            f.write("## Trends\n\n")
            f.write("| Period | TP | FN | FP | TN | Total |\n")
            f.write("|--------|----|----|----|----|-------|\n")
            for period, counts in summary.trends.items():
                tp = counts.get('correct_predicted_correct', 0)
                fn = counts.get('correct_predicted_wrong', 0)
                fp = counts.get('wrong_predicted_correct', 0)
                tn = counts.get('wrong_predicted_wrong', 0)
                f.write(f"| {period} | {tp} | {fn} | {fp} | {tn} | {tp + fn + fp + tn} |\n")
            f.write("\n")

    logger.info(f"Wrote summary report to {output_path}")

    return Path(output_path)
