"""
Churn risk calculation used by the post-sync recompute.

The orchestrator only depends on the RiskCalculator signature; this module
provides the default heuristic.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from app.models.member import ChurnRiskLevel

NEVER_VISITED_SCORE = 85
DEFAULT_COMMITMENT_SCORE = 50
DECAY_PERIOD_DAYS = 14
DECAY_FACTOR = 1.2


@dataclass(frozen=True)
class RiskInput:
    """Per-member inputs to a risk calculation."""
    joined_date: date
    last_visit_date: Optional[date]
    visits_last_30_days: int = 0
    commitment_score: Optional[int] = None


@dataclass(frozen=True)
class RiskResult:
    """Computed churn risk."""
    score: int
    level: ChurnRiskLevel


RiskCalculator = Callable[[RiskInput], RiskResult]


def level_for_commitment(commitment: float) -> ChurnRiskLevel:
    """Risk band from commitment: 80+ none, 61-79 low, 21-60 medium, else high."""
    if commitment >= 80:
        return ChurnRiskLevel.NONE
    if commitment >= 61:
        return ChurnRiskLevel.LOW
    if commitment >= 21:
        return ChurnRiskLevel.MEDIUM
    return ChurnRiskLevel.HIGH


def calculate_churn_risk(member: RiskInput, today: Optional[date] = None) -> RiskResult:
    """
    Default churn heuristic.

    Members who never visited are high risk (85). Otherwise the base risk is
    100 - commitment (commitment defaults to 50), multiplied by 1.2 for every
    full 14 days since the last visit and clamped to 0..100. The level comes
    from the commitment band alone.
    """
    if member.last_visit_date is None:
        return RiskResult(score=NEVER_VISITED_SCORE, level=ChurnRiskLevel.HIGH)

    today = today or date.today()
    commitment = member.commitment_score
    if commitment is None:
        commitment = DEFAULT_COMMITMENT_SCORE

    level = level_for_commitment(commitment)
    if level == ChurnRiskLevel.NONE and (today - member.last_visit_date).days <= 0:
        return RiskResult(score=0, level=level)

    days_since_visit = max(0, (today - member.last_visit_date).days)
    risk = float(100 - commitment)
    periods = days_since_visit // DECAY_PERIOD_DAYS
    if periods > 0:
        risk *= DECAY_FACTOR ** periods

    return RiskResult(score=max(0, min(100, round(risk))), level=level)


@dataclass
class RiskRecomputeSummary:
    """Counts for one full risk recompute."""
    total: int = 0
    updated: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"total": self.total, "updated": self.updated, "failed": self.failed}
