"""
Turn a raw ingredient label into an ordered list of canonical ingredient names.
The text-generation backend does the splitting and standardisation; if it fails or
returns nothing usable we fall back to a plain comma/semicolon split. Never raises.
"""
import logging
import re
from typing import List, Optional

from halalcheck.config import MAX_INGREDIENTS
from halalcheck.llm.client import TextGenerator
from halalcheck.llm.replies import split_reply_lines

logger = logging.getLogger(__name__)

PARSE_TEMPERATURE = 0.1
PARSE_MAX_TOKENS = 1000


def build_parser_prompt(language: str) -> str:
    return f"""You are an expert ingredient parser for halal food certification. Your task is to extract and standardize ingredient names from product labels.

INSTRUCTIONS:
1. Parse the ingredient list and extract individual ingredient names
2. Standardize ingredient names (e.g., "E471" not "emulsifier E471")
3. Separate compound ingredients when possible
4. Remove quantity indicators, percentages, and non-ingredient text
5. Return ONLY ingredient names, one per line
6. Use standard English names regardless of input language
7. If you see E-numbers, keep them as "E123" format

INPUT LANGUAGE: {language}
REGION CONTEXT: Focus on ingredients commonly found in European/Middle Eastern products

Return ingredients separated by newlines, nothing else."""


def split_ingredient_text(raw_text: str, limit: int = MAX_INGREDIENTS) -> List[str]:
    """Fallback split on commas/semicolons: trim, drop empties, keep the first `limit`."""
    if not raw_text:
        return []
    parts = [p.strip() for p in re.split(r"[,;]", raw_text)]
    return [p for p in parts if p][:limit]


class IngredientParser:
    def __init__(self, generator: Optional[TextGenerator] = None, max_ingredients: int = MAX_INGREDIENTS):
        self._generator = generator or TextGenerator()
        self._max = max_ingredients

    def parse(self, raw_text: str, language: str = "en") -> List[str]:
        if not raw_text or not raw_text.strip():
            return []
        try:
            reply = self._generator.generate(
                system=build_parser_prompt(language or "en"),
                prompt=f"Parse these ingredients: {raw_text}",
                temperature=PARSE_TEMPERATURE,
                max_tokens=PARSE_MAX_TOKENS,
            )
            ingredients = split_reply_lines(reply)[:self._max]
        except Exception as e:
            fallback = split_ingredient_text(raw_text, self._max)
            logger.warning(
                "PARSER fallback reason=backend_error error=%s count=%d text=%s",
                e, len(fallback), raw_text[:200],
            )
            return fallback

        if not ingredients:
            fallback = split_ingredient_text(raw_text, self._max)
            logger.warning("PARSER fallback reason=empty_reply count=%d", len(fallback))
            return fallback

        logger.debug("PARSER parsed count=%d ingredients=%s", len(ingredients), ingredients)
        return ingredients
