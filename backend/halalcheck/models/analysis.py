"""
Product-level analysis: request echo, per-ingredient verdicts and derived totals.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from halalcheck.config import MAX_INGREDIENT_TEXT_LENGTH, MAX_PRODUCT_NAME_LENGTH
from halalcheck.errors import ValidationError
from halalcheck.models.verdict import HalalStatus, IngredientVerdict, RiskLevel


@dataclass
class AnalysisRequest:
    product_name: str
    ingredient_text: str
    language: str = "en"
    region: str = "EU"
    certification_standard: str = "HFCE"
    user_id: Optional[str] = None
    organization_id: Optional[str] = None

    def validate(self) -> None:
        """Raise ValidationError for blank or oversized input."""
        if not (self.product_name or "").strip():
            raise ValidationError("product_name is required")
        if len(self.product_name) > MAX_PRODUCT_NAME_LENGTH:
            raise ValidationError(f"product_name exceeds {MAX_PRODUCT_NAME_LENGTH} characters")
        if not (self.ingredient_text or "").strip():
            raise ValidationError("ingredient_text is required")
        if len(self.ingredient_text) > MAX_INGREDIENT_TEXT_LENGTH:
            raise ValidationError(f"ingredient_text exceeds {MAX_INGREDIENT_TEXT_LENGTH} characters")


@dataclass
class AnalysisSummary:
    total: int = 0
    halal_count: int = 0
    haram_count: int = 0
    mashbooh_count: int = 0
    uncertain_count: int = 0

    @classmethod
    def from_verdicts(cls, verdicts: list[IngredientVerdict]) -> "AnalysisSummary":
        counts = {status: 0 for status in HalalStatus}
        for v in verdicts:
            counts[v.status] += 1
        return cls(
            total=len(verdicts),
            halal_count=counts[HalalStatus.HALAL],
            haram_count=counts[HalalStatus.HARAM],
            mashbooh_count=counts[HalalStatus.MASHBOOH],
            uncertain_count=counts[HalalStatus.UNCERTAIN],
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "halal_count": self.halal_count,
            "haram_count": self.haram_count,
            "mashbooh_count": self.mashbooh_count,
            "uncertain_count": self.uncertain_count,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AnalysisSummary":
        return cls(**{k: int(d.get(k, 0)) for k in ("total", "halal_count", "haram_count", "mashbooh_count", "uncertain_count")})


@dataclass
class CriticalFindings:
    haram: list[str] = field(default_factory=list)
    mashbooh: list[str] = field(default_factory=list)
    requires_review: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "haram": list(self.haram),
            "mashbooh": list(self.mashbooh),
            "requires_review": list(self.requires_review),
        }


@dataclass
class ProductAnalysis:
    id: str
    product_name: str
    ingredient_text: str
    language: str
    region: str
    certification_standard: str
    overall_status: HalalStatus
    overall_risk_level: RiskLevel
    ingredients: list[IngredientVerdict]
    summary: AnalysisSummary
    recommendations: list[str]
    expert_review_required: bool
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: int = 0
    critical_findings: CriticalFindings = field(default_factory=CriticalFindings)
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "ingredient_text": self.ingredient_text,
            "language": self.language,
            "region": self.region,
            "certification_standard": self.certification_standard,
            "overall_status": self.overall_status.value,
            "overall_risk_level": self.overall_risk_level.value,
            "ingredients": [v.to_dict() for v in self.ingredients],
            "summary": self.summary.to_dict(),
            "recommendations": list(self.recommendations),
            "expert_review_required": self.expert_review_required,
            "user_id": self.user_id,
            "organization_id": self.organization_id,
            "analyzed_at": self.analyzed_at.isoformat(),
            "processing_time_ms": self.processing_time_ms,
            "critical_findings": self.critical_findings.to_dict(),
            "degraded": self.degraded,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ProductAnalysis":
        findings = d.get("critical_findings") or {}
        return cls(
            id=d["id"],
            product_name=d["product_name"],
            ingredient_text=d.get("ingredient_text", ""),
            language=d.get("language", "en"),
            region=d.get("region", "EU"),
            certification_standard=d.get("certification_standard", "HFCE"),
            overall_status=HalalStatus(d["overall_status"]),
            overall_risk_level=RiskLevel(d["overall_risk_level"]),
            ingredients=[IngredientVerdict.from_dict(v) for v in d.get("ingredients", [])],
            summary=AnalysisSummary.from_dict(d.get("summary") or {}),
            recommendations=d.get("recommendations", []) or [],
            expert_review_required=d.get("expert_review_required", False),
            user_id=d.get("user_id"),
            organization_id=d.get("organization_id"),
            analyzed_at=datetime.fromisoformat(d["analyzed_at"]) if d.get("analyzed_at") else datetime.now(timezone.utc),
            processing_time_ms=int(d.get("processing_time_ms", 0)),
            critical_findings=CriticalFindings(
                haram=findings.get("haram", []) or [],
                mashbooh=findings.get("mashbooh", []) or [],
                requires_review=findings.get("requires_review", []) or [],
            ),
            degraded=d.get("degraded", False),
        )
