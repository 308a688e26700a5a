"""
Halal reference table: schema, in-memory registry and Supabase-backed store.
"""
from .reference_schema import ReferenceIngredient
from .reference_registry import ReferenceRegistry, ReferenceMatch, normalize_key, extract_e_number
from .similarity import similarity

__all__ = [
    "ReferenceIngredient",
    "ReferenceRegistry",
    "ReferenceMatch",
    "normalize_key",
    "extract_e_number",
    "similarity",
]
