from .analysis_store import AnalysisStore, JsonAnalysisStore, SupabaseAnalysisStore
from .audit_log import AuditLog, ANALYSIS_STARTED, ANALYSIS_COMPLETED, ANALYSIS_FAILED, ANALYSIS_DELETED

__all__ = [
    "AnalysisStore",
    "JsonAnalysisStore",
    "SupabaseAnalysisStore",
    "AuditLog",
    "ANALYSIS_STARTED",
    "ANALYSIS_COMPLETED",
    "ANALYSIS_FAILED",
    "ANALYSIS_DELETED",
]
