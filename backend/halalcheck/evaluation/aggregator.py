"""
Deterministic product-level assessment. Pure functions, no I/O.
One HARAM ingredient makes the product HARAM; MASHBOOH and UNCERTAIN both make it MASHBOOH.
"""
from dataclasses import dataclass
from typing import List

from halalcheck.models.analysis import AnalysisSummary, CriticalFindings
from halalcheck.models.verdict import HalalStatus, IngredientVerdict, RiskLevel


@dataclass(frozen=True)
class AggregateAssessment:
    overall_status: HalalStatus
    overall_risk_level: RiskLevel
    expert_review_required: bool


def aggregate(verdicts: List[IngredientVerdict]) -> AggregateAssessment:
    """
    status: HARAM > MASHBOOH/UNCERTAIN > HALAL.
    risk:   HIGH if any HARAM; MEDIUM if any MASHBOOH or any UNCERTAIN; else LOW.
    review: any ingredient asks for it, any UNCERTAIN, or more than two MASHBOOH.
    An empty list aggregates to HALAL/LOW; the pipeline decides what that means for a product.
    """
    summary = AnalysisSummary.from_verdicts(verdicts)

    if summary.haram_count > 0:
        status = HalalStatus.HARAM
    elif summary.mashbooh_count > 0 or summary.uncertain_count > 0:
        status = HalalStatus.MASHBOOH
    else:
        status = HalalStatus.HALAL

    if summary.haram_count > 0:
        risk = RiskLevel.HIGH
    elif summary.mashbooh_count > 0 or summary.uncertain_count > 1:
        risk = RiskLevel.MEDIUM
    elif summary.uncertain_count == 1:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW

    review = (
        any(v.requires_expert_review for v in verdicts)
        or summary.uncertain_count > 0
        or summary.mashbooh_count > 2
    )
    return AggregateAssessment(status, risk, review)


def critical_findings(verdicts: List[IngredientVerdict]) -> CriticalFindings:
    return CriticalFindings(
        haram=[v.detected_name for v in verdicts if v.status == HalalStatus.HARAM],
        mashbooh=[v.detected_name for v in verdicts if v.status == HalalStatus.MASHBOOH],
        requires_review=[v.detected_name for v in verdicts if v.requires_expert_review],
    )
