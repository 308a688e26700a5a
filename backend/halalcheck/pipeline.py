"""
Analysis pipeline: Parser -> Classifier (sequential, throttled) -> Aggregator -> Persistence.

The caller always gets a complete ProductAnalysis. Parse failures fall back to a naive split,
per-ingredient failures degrade to UNCERTAIN, and a failed save is logged and dropped.
"""
import logging
import time
import uuid
from typing import Callable, Optional

from supabase import create_client

from halalcheck.classification.classifier import IngredientClassifier
from halalcheck.config import (
    LOG_UNRESOLVED_INGREDIENTS,
    get_analysis_store_backend,
    get_supabase_key,
    get_supabase_url,
)
from halalcheck.enrichment.unresolved_log import UnresolvedIngredientsLog
from halalcheck.errors import HalalCheckError
from halalcheck.evaluation.aggregator import aggregate, critical_findings
from halalcheck.evaluation.recommendations import build_recommendations
from halalcheck.llm.client import TextGenerator
from halalcheck.models.analysis import AnalysisRequest, AnalysisSummary, ProductAnalysis
from halalcheck.parsing.ingredient_parser import IngredientParser
from halalcheck.persistence.analysis_store import AnalysisStore, JsonAnalysisStore, SupabaseAnalysisStore
from halalcheck.reference.reference_registry import ReferenceRegistry
from halalcheck.reference.supabase_store import SupabaseReferenceStore

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    def __init__(
        self,
        parser: IngredientParser,
        classifier: IngredientClassifier,
        store: Optional[AnalysisStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.parser = parser
        self.classifier = classifier
        self.store = store
        self._clock = clock

    def analyze(self, request: AnalysisRequest) -> ProductAnalysis:
        analysis_id = str(uuid.uuid4())
        started = self._clock()
        logger.info(
            "ANALYSIS_START analysis_id=%s product=%s language=%s region=%s standard=%s",
            analysis_id, request.product_name[:80], request.language, request.region,
            request.certification_standard,
        )

        names = self.parser.parse(request.ingredient_text, request.language)
        results = self.classifier.classify_many(
            names, request.language, request.region, request.certification_standard,
        )
        verdicts = [r.verdict for r in results]

        assessment = aggregate(verdicts)
        recommendations = build_recommendations(verdicts)
        expert_review = assessment.expert_review_required
        if not verdicts:
            # Zero ingredients: vacuous HALAL, reviewed by a human.
            expert_review = True

        analysis = ProductAnalysis(
            id=analysis_id,
            product_name=request.product_name,
            ingredient_text=request.ingredient_text,
            language=request.language,
            region=request.region,
            certification_standard=request.certification_standard,
            overall_status=assessment.overall_status,
            overall_risk_level=assessment.overall_risk_level,
            ingredients=verdicts,
            summary=AnalysisSummary.from_verdicts(verdicts),
            recommendations=recommendations,
            expert_review_required=expert_review,
            user_id=request.user_id,
            organization_id=request.organization_id,
            processing_time_ms=max(0, int((self._clock() - started) * 1000)),
            critical_findings=critical_findings(verdicts),
            degraded=any(r.degraded for r in results),
        )

        self._save(analysis)
        logger.info(
            "ANALYSIS_COMPLETE analysis_id=%s status=%s risk=%s ingredients=%d degraded=%s "
            "expert_review=%s processing_time_ms=%d",
            analysis.id, analysis.overall_status.value, analysis.overall_risk_level.value,
            analysis.summary.total, analysis.degraded, analysis.expert_review_required,
            analysis.processing_time_ms,
        )
        return analysis

    def _save(self, analysis: ProductAnalysis) -> None:
        if self.store is None:
            return
        try:
            self.store.save(analysis)
        except HalalCheckError as e:
            logger.error("ANALYSIS_SAVE_FAILED analysis_id=%s error=%s", analysis.id, e)
        except Exception as e:
            logger.error("ANALYSIS_SAVE_FAILED analysis_id=%s error=%s", analysis.id, e, exc_info=True)


def build_pipeline(client_factory: Callable = create_client) -> AnalysisPipeline:
    """Wire the pipeline from environment configuration."""
    generator = TextGenerator()
    backend = get_analysis_store_backend()
    if backend == "supabase":
        url, key = get_supabase_url(), get_supabase_key()
        if not (url and key):
            raise ValueError("ANALYSIS_STORE=supabase requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
        client = client_factory(url, key)
        reference = SupabaseReferenceStore(client)
        store: AnalysisStore = SupabaseAnalysisStore(client)
    else:
        reference = ReferenceRegistry()
        store = JsonAnalysisStore()

    unresolved = UnresolvedIngredientsLog() if LOG_UNRESOLVED_INGREDIENTS else None
    classifier = IngredientClassifier(reference, generator=generator, unresolved_log=unresolved)
    logger.info("PIPELINE ready store=%s reference=%s", backend, type(reference).__name__)
    return AnalysisPipeline(IngredientParser(generator), classifier, store)
