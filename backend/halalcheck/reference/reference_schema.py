"""
Strict contract for one row of the halal reference table.
Legacy five-level risk values and REQUIRES_REVIEW are folded into the three-level model on load.
"""
from dataclasses import dataclass, field
from typing import Optional

from halalcheck.models.verdict import (
    HalalStatus,
    IngredientVerdict,
    RiskLevel,
    VerdictSource,
    clamp_confidence,
)

_LEGACY_RISK = {
    "VERY_LOW": RiskLevel.LOW,
    "LOW": RiskLevel.LOW,
    "MEDIUM": RiskLevel.MEDIUM,
    "HIGH": RiskLevel.HIGH,
    "VERY_HIGH": RiskLevel.HIGH,
}


def parse_status(value: str) -> tuple[HalalStatus, bool]:
    """Return (status, forces_review). REQUIRES_REVIEW maps to MASHBOOH + review."""
    v = (value or "").strip().upper()
    if v == "REQUIRES_REVIEW":
        return HalalStatus.MASHBOOH, True
    return HalalStatus(v), False


def parse_risk(value: str) -> RiskLevel:
    return _LEGACY_RISK[(value or "").strip().upper()]


@dataclass(frozen=True)
class ReferenceIngredient:
    id: str
    standard_name: str
    status: HalalStatus
    risk_level: RiskLevel
    reasoning: str
    confidence: float = 0.95
    requires_expert_review: bool = False
    aliases: list[str] = field(default_factory=list)
    # language code -> names in that language
    translations: dict[str, list[str]] = field(default_factory=dict)
    e_numbers: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_verdict(self, detected_name: str, match_type: Optional[str] = None) -> IngredientVerdict:
        return IngredientVerdict(
            detected_name=detected_name,
            standard_name=self.standard_name,
            status=self.status,
            risk_level=self.risk_level,
            confidence=self.confidence,
            reasoning=self.reasoning,
            requires_expert_review=self.requires_expert_review,
            warnings=list(self.warnings),
            suggestions=list(self.suggestions),
            source=VerdictSource.DATABASE,
            e_numbers=list(self.e_numbers),
            categories=list(self.categories),
            match_type=match_type,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "standard_name": self.standard_name,
            "status": self.status.value,
            "risk_level": self.risk_level.value,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "requires_expert_review": self.requires_expert_review,
            "aliases": list(self.aliases),
            "translations": {k: list(v) for k, v in self.translations.items()},
            "e_numbers": list(self.e_numbers),
            "categories": list(self.categories),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ReferenceIngredient":
        status, forces_review = parse_status(d["status"])
        translations = {}
        for lang, names in (d.get("translations") or {}).items():
            if isinstance(names, str):
                names = [names]
            translations[str(lang).lower()] = [n for n in names if n]
        return cls(
            id=str(d["id"]),
            standard_name=d["standard_name"],
            status=status,
            risk_level=parse_risk(d.get("risk_level", "MEDIUM")),
            reasoning=d.get("reasoning", "") or f"Reference classification for {d['standard_name']}",
            confidence=clamp_confidence(d.get("confidence", 0.95), default=0.95),
            requires_expert_review=bool(d.get("requires_expert_review", False)) or forces_review,
            aliases=d.get("aliases", []) or [],
            translations=translations,
            e_numbers=[e.upper() for e in d.get("e_numbers", []) or []],
            categories=d.get("categories", []) or [],
            warnings=d.get("warnings", []) or [],
            suggestions=d.get("suggestions", []) or [],
        )
