"""
Per-ingredient halal verdict. One verdict per parsed ingredient, always.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class HalalStatus(str, Enum):
    HALAL = "HALAL"
    HARAM = "HARAM"
    MASHBOOH = "MASHBOOH"
    UNCERTAIN = "UNCERTAIN"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class VerdictSource(str, Enum):
    DATABASE = "DATABASE"
    AI = "AI"
    FALLBACK = "FALLBACK"


def _unique(items) -> list[str]:
    return list(dict.fromkeys(str(i).strip() for i in (items or []) if str(i).strip()))


def clamp_confidence(value: Any, default: float = 0.5) -> float:
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return default
    if conf != conf:  # NaN
        return default
    return max(0.0, min(1.0, conf))


@dataclass
class IngredientVerdict:
    detected_name: str
    standard_name: str
    status: HalalStatus
    risk_level: RiskLevel
    confidence: float
    reasoning: str
    requires_expert_review: bool = False
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    source: VerdictSource = VerdictSource.DATABASE
    e_numbers: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    match_type: Optional[str] = None

    def __post_init__(self) -> None:
        self.confidence = clamp_confidence(self.confidence)
        self.e_numbers = _unique(e.upper() for e in self.e_numbers)
        self.categories = _unique(self.categories)
        if not (self.reasoning or "").strip():
            self.reasoning = f"No reasoning provided for {self.detected_name or 'ingredient'}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "detected_name": self.detected_name,
            "standard_name": self.standard_name,
            "status": self.status.value,
            "risk_level": self.risk_level.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "requires_expert_review": self.requires_expert_review,
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "source": self.source.value,
            "e_numbers": list(self.e_numbers),
            "categories": list(self.categories),
            "match_type": self.match_type,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "IngredientVerdict":
        return cls(
            detected_name=d["detected_name"],
            standard_name=d.get("standard_name") or d["detected_name"],
            status=HalalStatus(d["status"]),
            risk_level=RiskLevel(d["risk_level"]),
            confidence=d.get("confidence", 0.5),
            reasoning=d.get("reasoning", ""),
            requires_expert_review=d.get("requires_expert_review", False),
            warnings=d.get("warnings", []) or [],
            suggestions=d.get("suggestions", []) or [],
            source=VerdictSource(d.get("source", "DATABASE")),
            e_numbers=d.get("e_numbers", []) or [],
            categories=d.get("categories", []) or [],
            match_type=d.get("match_type"),
        )
