from .verdict import HalalStatus, RiskLevel, VerdictSource, IngredientVerdict
from .analysis import AnalysisRequest, AnalysisSummary, CriticalFindings, ProductAnalysis

__all__ = [
    "HalalStatus",
    "RiskLevel",
    "VerdictSource",
    "IngredientVerdict",
    "AnalysisRequest",
    "AnalysisSummary",
    "CriticalFindings",
    "ProductAnalysis",
]
