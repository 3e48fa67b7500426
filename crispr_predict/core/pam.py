"""
PAM motif checks.

SpCas9 needs an NGG PAM at the 3' end of the protospacer. For the fixed
23-mer inputs this reduces to both sequences ending in "GG".
"""

from dataclasses import dataclass


PAM_MOTIF = "GG"


def check_pam(sequence: str) -> bool:
    """Return True if the sequence ends with the GG PAM motif."""
    return sequence.endswith(PAM_MOTIF)


@dataclass(frozen=True)
class PamResult:
    """PAM check for a guide/target pair."""
    guide_has_pam: bool
    target_has_pam: bool

    @property
    def both(self) -> bool:
        """Record-level pamMatch: both sequences carry the PAM."""
        return self.guide_has_pam and self.target_has_pam

    @property
    def either(self) -> bool:
        return self.guide_has_pam or self.target_has_pam

    @property
    def pam_label(self) -> int:
        """Rule-based success label: 1 if both sequences carry the PAM."""
        return 1 if self.both else 0


def check_pam_pair(guide: str, target: str) -> PamResult:
    """Check the PAM motif on a guide and target independently."""
    return PamResult(
        guide_has_pam=check_pam(guide),
        target_has_pam=check_pam(target),
    )
