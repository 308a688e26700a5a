"""
Reference lookups against the Supabase `ingredients` table.
Same contract as ReferenceRegistry.lookup; similarity is delegated to the
`match_ingredient_similarity` RPC (pg_trgm on the database side).
"""
import logging
from typing import Any, Optional

from supabase import Client

from .reference_registry import ReferenceMatch, extract_e_number, normalize_key
from .reference_schema import ReferenceIngredient
from halalcheck.config import FUZZY_MATCH_THRESHOLD
from halalcheck.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

TABLE = "ingredients"
SIMILARITY_RPC = "match_ingredient_similarity"


def escape_like(value: str) -> str:
    """Make `value` match literally in an ILIKE pattern (backslash is the default escape)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def reference_to_row(ing: ReferenceIngredient) -> dict[str, Any]:
    """ReferenceIngredient -> `ingredients` table row."""
    return {
        "id": ing.id,
        "standard_name": ing.standard_name,
        "halal_status": ing.status.value,
        "risk_level": ing.risk_level.value,
        "confidence": ing.confidence,
        "reasoning": ing.reasoning,
        "requires_expert_review": ing.requires_expert_review,
        "common_names": [normalize_key(a) for a in ing.aliases],
        "translations": {k: [normalize_key(n) for n in v] for k, v in ing.translations.items()},
        "e_numbers": list(ing.e_numbers),
        "categories": list(ing.categories),
        "warnings": list(ing.warnings),
        "suggestions": list(ing.suggestions),
    }


def row_to_reference(row: dict[str, Any]) -> ReferenceIngredient:
    return ReferenceIngredient.from_dict({
        "id": row["id"],
        "standard_name": row["standard_name"],
        "status": row["halal_status"],
        "risk_level": row.get("risk_level", "MEDIUM"),
        "confidence": row.get("confidence", 0.95),
        "reasoning": row.get("reasoning", ""),
        "requires_expert_review": row.get("requires_expert_review", False),
        "aliases": row.get("common_names") or [],
        "translations": row.get("translations") or {},
        "e_numbers": row.get("e_numbers") or [],
        "categories": row.get("categories") or [],
        "warnings": row.get("warnings") or [],
        "suggestions": row.get("suggestions") or [],
    })


class SupabaseReferenceStore:
    def __init__(self, client: Client, fuzzy_threshold: float = FUZZY_MATCH_THRESHOLD):
        self._client = client
        self._fuzzy_threshold = fuzzy_threshold

    def _first(self, query) -> Optional[dict]:
        response = query.limit(1).execute()
        return response.data[0] if response.data else None

    def lookup(self, ingredient: str, language: str = "en") -> Optional[ReferenceMatch]:
        key = normalize_key(ingredient)
        if not key:
            return None
        lang = (language or "").lower()
        try:
            table = self._client.table(TABLE)
            row = self._first(table.select("*").ilike("standard_name", escape_like(key)))
            if row:
                return ReferenceMatch(row_to_reference(row), "EXACT")
            row = self._first(table.select("*").contains("common_names", [key]))
            if row:
                return ReferenceMatch(row_to_reference(row), "ALIAS")
            row = self._first(table.select("*").contains("translations", {lang: [key]}))
            if row:
                return ReferenceMatch(row_to_reference(row), "TRANSLATION")
            e_number = extract_e_number(ingredient)
            if e_number:
                row = self._first(table.select("*").contains("e_numbers", [e_number]))
                if row:
                    return ReferenceMatch(row_to_reference(row), "E_NUMBER")
            response = self._client.rpc(
                SIMILARITY_RPC,
                {"query_text": key, "match_threshold": self._fuzzy_threshold, "match_count": 1},
            ).execute()
        except Exception as e:
            logger.warning("REFERENCE supabase lookup failed raw=%s error=%s", ingredient[:60], e)
            raise UpstreamUnavailable(f"Reference lookup failed: {e}") from e

        if response.data:
            row = response.data[0]
            return ReferenceMatch(row_to_reference(row), "FUZZY", float(row.get("similarity", 0.0)))
        return None
