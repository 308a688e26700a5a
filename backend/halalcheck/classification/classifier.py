"""
Per-ingredient halal classifier.
Resolve: 1) reference table (authoritative) 2) text-generation model with a fixed rubric.
A failure at either tier degrades that one ingredient to UNCERTAIN; it never aborts the batch.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from halalcheck.config import CLASSIFIER_DELAY_MS
from halalcheck.classification.prompts import build_ingredient_prompt, build_rubric_prompt
from halalcheck.enrichment.unresolved_log import UnresolvedIngredientsLog
from halalcheck.errors import MalformedUpstreamReply
from halalcheck.llm.client import TextGenerator
from halalcheck.llm.replies import parse_json_reply
from halalcheck.models.verdict import HalalStatus, IngredientVerdict, RiskLevel, VerdictSource
from halalcheck.reference.reference_registry import ReferenceMatch, normalize_key

logger = logging.getLogger(__name__)

LOOKUP_FAILURE_CONFIDENCE = 0.1
GENERATIVE_FAILURE_CONFIDENCE = 0.3
CLASSIFY_TEMPERATURE = 0.1
CLASSIFY_MAX_TOKENS = 800

_DEFAULT_RISK = {
    HalalStatus.HALAL: RiskLevel.LOW,
    HalalStatus.MASHBOOH: RiskLevel.MEDIUM,
    HalalStatus.UNCERTAIN: RiskLevel.MEDIUM,
    HalalStatus.HARAM: RiskLevel.HIGH,
}


class ReferenceLookup(Protocol):
    def lookup(self, ingredient: str, language: str = "en") -> Optional[ReferenceMatch]: ...


@dataclass(frozen=True)
class ClassificationError:
    tier: str  # "lookup" | "generative"
    kind: str  # exception class name
    message: str


@dataclass
class ClassificationResult:
    verdict: IngredientVerdict
    error: Optional[ClassificationError] = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


def _as_bool(value: Any) -> bool:
    """Real booleans and "true"/"false" strings only; anything else is malformed."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise MalformedUpstreamReply(f"expected a boolean, got {value!r}")


def verdict_from_reply(ingredient: str, data: dict) -> IngredientVerdict:
    """Map a model JSON reply to a verdict. Missing or unknown status is malformed."""
    raw_status = str(_pick(data, "status", default="")).strip().upper()
    try:
        status = HalalStatus(raw_status)
    except ValueError:
        raise MalformedUpstreamReply(f"unknown status {raw_status!r}")
    raw_risk = str(_pick(data, "riskLevel", "risk_level", default="")).strip().upper()
    try:
        risk = RiskLevel(raw_risk)
    except ValueError:
        risk = _DEFAULT_RISK[status]
    requires_review = _as_bool(_pick(data, "requiresExpertReview", "requires_expert_review", default=False))
    return IngredientVerdict(
        detected_name=ingredient,
        standard_name=ingredient,
        status=status,
        risk_level=risk,
        confidence=_pick(data, "confidence", default=0.5),
        reasoning=str(_pick(data, "reasoning", default="") or "AI analysis completed"),
        requires_expert_review=requires_review or status == HalalStatus.UNCERTAIN,
        warnings=_as_list(data.get("warnings")),
        suggestions=_as_list(data.get("suggestions")),
        source=VerdictSource.AI,
        e_numbers=_as_list(_pick(data, "eNumbers", "e_numbers")),
        categories=_as_list(data.get("categories")),
        match_type="AI",
    )


def fallback_verdict(ingredient: str, confidence: float, reasoning: str, warning: str, suggestion: str) -> IngredientVerdict:
    return IngredientVerdict(
        detected_name=ingredient,
        standard_name=ingredient,
        status=HalalStatus.UNCERTAIN,
        risk_level=RiskLevel.MEDIUM,
        confidence=confidence,
        reasoning=reasoning,
        requires_expert_review=True,
        warnings=[warning],
        suggestions=[suggestion],
        source=VerdictSource.FALLBACK,
        match_type="NONE",
    )


class IngredientClassifier:
    """
    Two-tier classifier. The reference table always completes before the model is asked.
    """

    def __init__(
        self,
        reference: ReferenceLookup,
        generator: Optional[TextGenerator] = None,
        unresolved_log: Optional[UnresolvedIngredientsLog] = None,
        delay_ms: int = CLASSIFIER_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._reference = reference
        self._generator = generator or TextGenerator()
        self._unresolved = unresolved_log
        self._delay_s = max(0, delay_ms) / 1000.0
        self._sleep = sleep

    def classify(self, name: str, language: str = "en", region: str = "EU", standard: str = "HFCE") -> IngredientVerdict:
        return self.classify_result(name, language, region, standard).verdict

    def classify_result(
        self,
        name: str,
        language: str = "en",
        region: str = "EU",
        standard: str = "HFCE",
    ) -> ClassificationResult:
        try:
            match = self._reference.lookup(name, language)
        except Exception as e:
            logger.warning("CLASSIFY tier=lookup failed ingredient=%s error=%s", name, e)
            verdict = fallback_verdict(
                name,
                LOOKUP_FAILURE_CONFIDENCE,
                f"Analysis failed: reference lookup error for {name}: {e}",
                "Analysis failed - expert review required",
                "Contact halal certification expert",
            )
            return ClassificationResult(verdict, ClassificationError("lookup", type(e).__name__, str(e)))

        if match is not None:
            logger.info(
                "CLASSIFY tier=database ingredient=%s standard_name=%s match=%s status=%s",
                name, match.ingredient.standard_name, match.match_type, match.ingredient.status.value,
            )
            return ClassificationResult(match.ingredient.to_verdict(name, match.match_type))

        try:
            verdict = self._classify_with_model(name, language, region, standard)
            result = ClassificationResult(verdict)
            logger.info(
                "CLASSIFY tier=ai ingredient=%s status=%s confidence=%.2f",
                name, verdict.status.value, verdict.confidence,
            )
        except Exception as e:
            logger.warning("CLASSIFY tier=ai failed ingredient=%s error=%s", name, e)
            verdict = fallback_verdict(
                name,
                GENERATIVE_FAILURE_CONFIDENCE,
                f"AI analysis failed. Manual review required for ingredient: {name}",
                "AI analysis unavailable",
                "Consult halal certification expert",
            )
            result = ClassificationResult(verdict, ClassificationError("generative", type(e).__name__, str(e)))

        self._log_unresolved(name, language, verdict.status.value)
        return result

    def classify_many(
        self,
        names: List[str],
        language: str = "en",
        region: str = "EU",
        standard: str = "HFCE",
    ) -> List[ClassificationResult]:
        """Classify in order, one at a time, with a fixed pause between calls."""
        results: List[ClassificationResult] = []
        for i, name in enumerate(names):
            if i > 0 and self._delay_s:
                self._sleep(self._delay_s)
            results.append(self.classify_result(name, language, region, standard))
        return results

    def _classify_with_model(self, name: str, language: str, region: str, standard: str) -> IngredientVerdict:
        reply = self._generator.generate(
            system=build_rubric_prompt(standard, region, language),
            prompt=build_ingredient_prompt(name),
            temperature=CLASSIFY_TEMPERATURE,
            max_tokens=CLASSIFY_MAX_TOKENS,
            force_json=True,
        )
        return verdict_from_reply(name, parse_json_reply(reply))

    def _log_unresolved(self, name: str, language: str, status: str) -> None:
        if self._unresolved is None:
            return
        try:
            self._unresolved.record(name, normalize_key(name), language=language, status=status)
        except Exception as e:
            logger.warning(
                "UNRESOLVED_INGREDIENT log write failed raw=%s error=%s", name[:50], e, exc_info=True,
            )
