"""
Template recommendations keyed off the verdict counts.
"""
from typing import List

from halalcheck.models.verdict import HalalStatus, IngredientVerdict

SUITABLE_MESSAGE = "This product appears suitable for halal consumption"
NOT_SUITABLE_MESSAGE = "This product is NOT suitable for halal consumption"
NO_INGREDIENTS_MESSAGE = (
    "No ingredients could be identified in the submitted text; "
    "verify the label manually before relying on this result"
)
GENERAL_RECOMMENDATIONS = [
    "Always verify with manufacturer about halal certification",
    "Check for cross-contamination with non-halal products during manufacturing",
]


def build_recommendations(verdicts: List[IngredientVerdict]) -> List[str]:
    if not verdicts:
        return [NO_INGREDIENTS_MESSAGE] + GENERAL_RECOMMENDATIONS

    haram = [v.detected_name for v in verdicts if v.status == HalalStatus.HARAM]
    mashbooh = [v.detected_name for v in verdicts if v.status == HalalStatus.MASHBOOH]
    uncertain = [v for v in verdicts if v.status == HalalStatus.UNCERTAIN]
    review = [v for v in verdicts if v.requires_expert_review]

    recs: List[str] = []
    if haram:
        recs.append(f"AVOID: This product contains {len(haram)} haram ingredient(s): {', '.join(haram)}")
        recs.append(NOT_SUITABLE_MESSAGE)
    if mashbooh:
        recs.append(f"CAUTION: Contains {len(mashbooh)} doubtful ingredient(s): {', '.join(mashbooh)}")
        recs.append("Consider avoiding due to uncertainty about halal status")
    if review:
        recs.append(f"EXPERT REVIEW: {len(review)} ingredient(s) require expert verification")
        recs.append("Contact a qualified halal certification body for final determination")
    if not haram and not mashbooh and not uncertain:
        recs.append("All analyzed ingredients appear to be halal")
        recs.append(SUITABLE_MESSAGE)
    recs.extend(GENERAL_RECOMMENDATIONS)
    return recs
