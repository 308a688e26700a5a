"""
HalalCheck EU FastAPI application.

Endpoints:
    GET    /                    Health check
    POST   /analyze             Ingredient text -> per-ingredient and product halal verdicts
    GET    /analyses            Analysis history for an organization (paged, newest first)
    GET    /analyses/{id}       One stored analysis
    DELETE /analyses/{id}       Soft delete through the audit log
    GET    /dashboard/stats     Totals by overall status
"""
from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, Optional
import logging
from dotenv import load_dotenv
from pathlib import Path

# Load env vars
load_dotenv(Path(__file__).parent / ".env")

# Initialize App
app = FastAPI(title="HalalCheck EU Ingredient Analysis API")

from halalcheck.config import log_config
log_config()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from halalcheck.errors import PersistenceFailure, ValidationError
from halalcheck.models.analysis import AnalysisRequest, ProductAnalysis
from halalcheck.persistence.analysis_store import AnalysisStore
from halalcheck.persistence.audit_log import (
    ANALYSIS_COMPLETED,
    ANALYSIS_DELETED,
    ANALYSIS_FAILED,
    ANALYSIS_STARTED,
    AuditLog,
)
from halalcheck.pipeline import AnalysisPipeline, build_pipeline

_pipeline: Optional[AnalysisPipeline] = None
_audit_log: Optional[AuditLog] = None


def get_pipeline() -> AnalysisPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline()
    return _pipeline


def get_store(pipeline: AnalysisPipeline = Depends(get_pipeline)) -> AnalysisStore:
    if pipeline.store is None:
        raise HTTPException(status_code=503, detail="Analysis storage is not configured")
    return pipeline.store


def get_audit_log() -> AuditLog:
    global _audit_log
    if _audit_log is None:
        _audit_log = AuditLog()
    return _audit_log


# --- Request Models ---
class AnalyzeRequest(BaseModel):
    product_name: str
    ingredient_text: str
    language: str = "en"
    region: str = "EU"
    certification_standard: str = "HFCE"
    user_id: Optional[str] = None
    organization_id: Optional[str] = None


def _audit(audit_log: AuditLog, action: str, request: AnalysisRequest, **kwargs) -> None:
    try:
        audit_log.log_action(action, request.user_id, request.organization_id, **kwargs)
    except PersistenceFailure as e:
        logger.error("AUDIT_WRITE_FAILED action=%s error=%s", action, e)


def _analysis_response(analysis: ProductAnalysis) -> Dict[str, Any]:
    """Serialized analysis with confidences as integer percentages."""
    body = analysis.to_dict()
    for item in body["ingredients"]:
        item["confidence"] = int(round(item["confidence"] * 100))
    return body


def _visible_analysis(
    analysis_id: str,
    organization_id: str,
    store: AnalysisStore,
    audit_log: AuditLog,
) -> ProductAnalysis:
    try:
        deleted = audit_log.deleted_ids(organization_id)
    except PersistenceFailure as e:
        logger.error("Audit log unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Audit log unavailable")
    if analysis_id in deleted:
        raise HTTPException(status_code=404, detail="Analysis not found")
    analysis = store.get(analysis_id)
    if analysis is None or analysis.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis


# --- Endpoints ---
@app.get("/")
def health_check():
    return {"status": "ok", "service": "HalalCheck EU"}


@app.post("/analyze")
def analyze(
    body: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
    audit_log: AuditLog = Depends(get_audit_log),
):
    """Run the full analysis pipeline on one ingredient list."""
    request = AnalysisRequest(**body.model_dump())
    try:
        request.validate()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _audit(
        audit_log, ANALYSIS_STARTED, request,
        details={"product_name": request.product_name, "language": request.language,
                 "ingredient_text_length": len(request.ingredient_text)},
    )
    try:
        analysis = pipeline.analyze(request)
    except Exception as e:
        logger.error("Analysis failed: %s", e, exc_info=True)
        _audit(
            audit_log, ANALYSIS_FAILED, request,
            details={"product_name": request.product_name, "error": str(e)},
        )
        raise HTTPException(status_code=500, detail="Analysis failed")

    _audit(
        audit_log, ANALYSIS_COMPLETED, request, resource_id=analysis.id,
        details={"overall_status": analysis.overall_status.value,
                 "ingredient_count": analysis.summary.total,
                 "processing_time_ms": analysis.processing_time_ms},
    )
    return _analysis_response(analysis)


@app.get("/analyses")
def list_analyses(
    organization_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    store: AnalysisStore = Depends(get_store),
    audit_log: AuditLog = Depends(get_audit_log),
):
    """Analysis history for one organization, newest first."""
    limit = min(limit, 100)
    try:
        items, total = store.list_for_organization(
            organization_id, page=page, limit=limit,
            exclude_ids=audit_log.deleted_ids(organization_id),
        )
    except Exception as e:
        logger.error("List analyses failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve analysis history")
    return {
        "analyses": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


@app.get("/analyses/{analysis_id}")
def get_analysis(
    analysis_id: str,
    organization_id: str,
    store: AnalysisStore = Depends(get_store),
    audit_log: AuditLog = Depends(get_audit_log),
):
    return _analysis_response(_visible_analysis(analysis_id, organization_id, store, audit_log))


@app.delete("/analyses/{analysis_id}")
def delete_analysis(
    analysis_id: str,
    organization_id: str,
    user_id: Optional[str] = None,
    store: AnalysisStore = Depends(get_store),
    audit_log: AuditLog = Depends(get_audit_log),
):
    analysis = _visible_analysis(analysis_id, organization_id, store, audit_log)
    try:
        audit_log.log_action(
            ANALYSIS_DELETED, user_id, organization_id, resource_id=analysis.id,
            details={"product_name": analysis.product_name},
        )
    except PersistenceFailure as e:
        logger.error("Delete failed for %s: %s", analysis.id, e)
        raise HTTPException(status_code=500, detail="Failed to delete analysis")
    return {"message": "Analysis deleted successfully", "id": analysis.id}


@app.get("/dashboard/stats")
def dashboard_stats(
    organization_id: str,
    store: AnalysisStore = Depends(get_store),
    audit_log: AuditLog = Depends(get_audit_log),
):
    try:
        return store.stats_for_organization(organization_id, exclude_ids=audit_log.deleted_ids(organization_id))
    except Exception as e:
        logger.error("Dashboard stats failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve dashboard statistics")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)
