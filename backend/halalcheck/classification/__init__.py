from .classifier import (
    IngredientClassifier,
    ClassificationResult,
    ClassificationError,
    verdict_from_reply,
)

__all__ = [
    "IngredientClassifier",
    "ClassificationResult",
    "ClassificationError",
    "verdict_from_reply",
]
