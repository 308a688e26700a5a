"""
Reference-table curation: log of ingredients that fell through to the model.
"""
from .unresolved_log import UnresolvedIngredientsLog

__all__ = ["UnresolvedIngredientsLog"]
