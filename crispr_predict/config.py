"""
Configuration for crispr-predict.

Policy knobs passed explicitly into the pipeline and summary calls.
Nothing here is process-wide state.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .analysis.types import TIME_RANGE_PRESETS, TimeRange
from .core.classification import PredictionSource
from .core.confidence import ConfidenceUnit
from .core.models import parse_bool


TREND_PERIODS = ('D', 'W', 'M')
BOOL_STRINGS = ('true', 'false', 'yes', 'no', '1', '0')


@dataclass
class EngineConfig:
    """
    Engine configuration.

    Attributes:
        prediction_source: Label used as predicted_label ('PAM_rule' or 'AI_model')
        confidence_unit: Unit of the model's raw confidence ('fraction' or 'percent')
        trend_period: Trend bucket frequency ('D', 'W' or 'M')
        dense_trends: Zero-fill trend periods with no records
        time_range: Default summary window ('24h', '7d', '30d', '90d' or 'all')
    """
    prediction_source: PredictionSource = PredictionSource.PAM_RULE
    confidence_unit: ConfidenceUnit = ConfidenceUnit.FRACTION
    trend_period: str = 'D'
    dense_trends: bool = False
    time_range: str = '7d'

    def __post_init__(self):
        self.prediction_source = PredictionSource.parse(self.prediction_source)
        self.confidence_unit = ConfidenceUnit.parse(self.confidence_unit)

        self.trend_period = str(self.trend_period).strip().upper()
        if self.trend_period not in TREND_PERIODS:
            raise ValueError(
                f"Unknown trend period: {self.trend_period!r} "
                f"(expected one of {', '.join(TREND_PERIODS)})"
            )

        if isinstance(self.dense_trends, str) and self.dense_trends.strip().lower() not in BOOL_STRINGS:
            raise ValueError(f"dense_trends must be a boolean (got {self.dense_trends!r})")
        self.dense_trends = parse_bool(self.dense_trends)

        self.time_range = str(self.time_range).strip().lower()
        if self.time_range != 'all' and self.time_range not in TIME_RANGE_PRESETS:
            raise ValueError(
                f"Unknown time range: {self.time_range!r} "
                f"(expected one of {', '.join(TIME_RANGE_PRESETS)}, all)"
            )

    def window(self, now: Optional[datetime] = None) -> TimeRange:
        """Summary window for the configured time range, ending at `now`."""
        return TimeRange.last(self.time_range, now=now)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'EngineConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = ('prediction_source', 'confidence_unit', 'trend_period',
                 'dense_trends', 'time_range')
        return cls(**{k: d[k] for k in known if k in d})

    @classmethod
    def from_yaml(cls, path: Path) -> 'EngineConfig':
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'prediction_source': self.prediction_source.value,
            'confidence_unit': self.confidence_unit.value,
            'trend_period': self.trend_period,
            'dense_trends': self.dense_trends,
            'time_range': self.time_range,
        }

    def to_yaml(self, path: Path) -> Path:
        """Write configuration to a YAML file."""
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        return Path(path)
