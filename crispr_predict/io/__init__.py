"""
I/O modules for crispr-predict.
"""

from .records import (
    generate_summary_report,
    load_records,
    write_records_tsv,
    write_summary_json,
)

__all__ = [
    'load_records',
    'write_records_tsv',
    'write_summary_json',
    'generate_summary_report',
]
