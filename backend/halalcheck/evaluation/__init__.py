from .aggregator import AggregateAssessment, aggregate, critical_findings
from .recommendations import build_recommendations

__all__ = ["AggregateAssessment", "aggregate", "critical_findings", "build_recommendations"]
