"""
Guide/target match matrix.

Cell (i, j) is 1 when guide[i] == target[j]. The comparison is exhaustive
over all 23 x 23 position pairs, so total_matches measures compositional
compatibility rather than positional identity.
"""

from dataclasses import dataclass
from typing import List

import numpy as np

from ..utils.sequence import SEQUENCE_LENGTH, hamming_distance


MATRIX_CELLS = SEQUENCE_LENGTH * SEQUENCE_LENGTH


@dataclass(frozen=True, eq=False)
class MatchMatrix:
    """
    Pairwise base-equality matrix for a guide/target pair.

    Attributes:
        guide: Guide sequence (rows)
        target: Target sequence (columns)
        cells: Read-only uint8 array of shape (len(guide), len(target))
        total_matches: Number of 1-cells across the whole grid
    """
    guide: str
    target: str
    cells: np.ndarray
    total_matches: int

    @property
    def shape(self):
        return self.cells.shape

    @property
    def diagonal_matches(self) -> int:
        """Same-position matches (informational; not used for scoring)."""
        return len(self.guide) - hamming_distance(self.guide, self.target)

    @property
    def match_fraction(self) -> float:
        """total_matches as a fraction of all cells."""
        return self.total_matches / self.cells.size if self.cells.size else 0.0

    def to_list(self) -> List[List[int]]:
        """Nested 0/1 lists, row per guide position."""
        return self.cells.astype(int).tolist()

    def __repr__(self) -> str:
        return f"MatchMatrix(total_matches={self.total_matches}/{self.cells.size})"


def build_match_matrix(guide: str, target: str) -> MatchMatrix:
    """
    Build the full cross match matrix for two validated sequences.

    The caller is responsible for validation; sequences are not re-checked.

    Args:
        guide: Validated guide sequence
        target: Validated target sequence

    Returns:
        MatchMatrix with cells and total_matches
    """
    guide_bases = np.frombuffer(guide.encode('ascii'), dtype=np.uint8)
    target_bases = np.frombuffer(target.encode('ascii'), dtype=np.uint8)

    cells = (guide_bases[:, None] == target_bases[None, :]).astype(np.uint8)
    cells.setflags(write=False)

    return MatchMatrix(
        guide=guide,
        target=target,
        cells=cells,
        total_matches=int(cells.sum()),
    )


def count_total_matches(guide: str, target: str) -> int:
    """Return total_matches without keeping the matrix."""
    return build_match_matrix(guide, target).total_matches
