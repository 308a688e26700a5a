"""
Halal reference table. Loads from data/halal_reference.json.
Lookup order: canonical name -> alias -> translation -> canonical name as whole-word
substring -> E-number -> trigram similarity. First tier that matches wins; ties go to table row order.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import json
import re
import logging

from .reference_schema import ReferenceIngredient
from .similarity import similarity
from halalcheck.config import get_reference_path, FUZZY_MATCH_THRESHOLD

logger = logging.getLogger(__name__)

E_NUMBER_PATTERN = re.compile(r"(?<![a-z0-9])e\s?(\d{3,4}[a-z]?)(?![a-z0-9])", re.IGNORECASE)


def normalize_key(text: str) -> str:
    """Lowercase, drop label punctuation, collapse whitespace."""
    if not text or not isinstance(text, str):
        return ""
    t = text.lower().strip()
    t = t.replace("*", "").replace(" ", " ")
    t = re.sub(r"[\.:;]+$", "", t)
    t = re.sub(r"\s+", " ", t)
    return t.strip()


def extract_e_number(text: str) -> Optional[str]:
    """'E 471' / 'e471' / 'Emulsifier (E471)' -> 'E471'."""
    m = E_NUMBER_PATTERN.search(text or "")
    if not m:
        return None
    return "E" + m.group(1).upper()


@dataclass(frozen=True)
class ReferenceMatch:
    ingredient: ReferenceIngredient
    match_type: str  # EXACT | SUBSTRING | ALIAS | TRANSLATION | E_NUMBER | FUZZY
    similarity: float = 1.0


class ReferenceRegistry:
    """
    In-memory reference table with O(1) exact lookups and a linear scan for
    substring and trigram matches.
    """

    def __init__(
        self,
        reference_path: Optional[Path] = None,
        fuzzy_threshold: float = FUZZY_MATCH_THRESHOLD,
        rows: Optional[list[ReferenceIngredient]] = None,
    ):
        self._path = reference_path or get_reference_path()
        self._fuzzy_threshold = fuzzy_threshold
        self._rows: list[ReferenceIngredient] = []
        self._by_name: dict[str, ReferenceIngredient] = {}
        self._by_alias: dict[str, ReferenceIngredient] = {}
        self._by_translation: dict[tuple[str, str], ReferenceIngredient] = {}
        self._by_e_number: dict[str, ReferenceIngredient] = {}
        self._version: str = "0"
        if rows is not None:
            for row in rows:
                self._index(row)
        else:
            self._load()

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning("Reference table not found at %s; registry empty.", self._path)
            return
        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)
        self._version = str(data.get("reference_version", "0"))
        for item in data.get("ingredients", []):
            self._index(ReferenceIngredient.from_dict(item))
        logger.info("Loaded %d reference ingredients from %s", len(self._rows), self._path)

    def _index(self, row: ReferenceIngredient) -> None:
        self._rows.append(row)
        key = normalize_key(row.standard_name)
        if key:
            self._by_name.setdefault(key, row)
        for alias in row.aliases:
            k = normalize_key(alias)
            if k:
                self._by_alias.setdefault(k, row)
        for lang, names in row.translations.items():
            for name in names:
                k = normalize_key(name)
                if k:
                    self._by_translation.setdefault((lang, k), row)
        for e in row.e_numbers:
            self._by_e_number.setdefault(e.upper(), row)

    def lookup(self, ingredient: str, language: str = "en") -> Optional[ReferenceMatch]:
        """Resolve a raw ingredient name. Returns None when no tier matches."""
        key = normalize_key(ingredient)
        if not key:
            return None

        row = self._by_name.get(key)
        if row is not None:
            return ReferenceMatch(row, "EXACT")

        row = self._by_alias.get(key)
        if row is not None:
            return ReferenceMatch(row, "ALIAS")

        row = self._by_translation.get(((language or "").lower(), key))
        if row is not None:
            return ReferenceMatch(row, "TRANSLATION")

        # Substring only after every exact key missed: "porcine gelatin" is an alias
        # of pork gelatin and must not fall through to plain "gelatin".
        row = self._substring_match(key)
        if row is not None:
            return ReferenceMatch(row, "SUBSTRING")

        e_number = extract_e_number(ingredient)
        if e_number:
            row = self._by_e_number.get(e_number)
            if row is not None:
                return ReferenceMatch(row, "E_NUMBER")

        return self._fuzzy_match(key)

    def _substring_match(self, key: str) -> Optional[ReferenceIngredient]:
        """Longest canonical name appearing as whole words inside the key; row order breaks ties."""
        best: Optional[ReferenceIngredient] = None
        best_len = 0
        for name_key, row in self._by_name.items():
            if len(name_key) <= best_len:
                continue
            if re.search(r"(?<!\w)" + re.escape(name_key) + r"(?!\w)", key):
                best, best_len = row, len(name_key)
        return best

    def _fuzzy_match(self, key: str) -> Optional[ReferenceMatch]:
        best: Optional[ReferenceMatch] = None
        for row in self._rows:
            for candidate in [row.standard_name] + list(row.aliases):
                score = similarity(key, candidate)
                if score > self._fuzzy_threshold and (best is None or score > best.similarity):
                    best = ReferenceMatch(row, "FUZZY", round(score, 4))
        if best is not None:
            logger.debug(
                "REFERENCE fuzzy_match key=%s standard_name=%s similarity=%.3f",
                key, best.ingredient.standard_name, best.similarity,
            )
        return best

    def rows(self) -> list[ReferenceIngredient]:
        return list(self._rows)

    def get_version(self) -> str:
        return self._version

    def __len__(self) -> int:
        return len(self._rows)
