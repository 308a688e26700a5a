"""
Unit tests for the halal reference table: schema folding and the lookup tiers.
Run from backend: python -m pytest tests/test_reference_registry.py -v
"""
import json
import tempfile
from pathlib import Path

import pytest


def test_requires_review_folds_to_mashbooh_with_review():
    from halalcheck.reference.reference_schema import ReferenceIngredient
    from halalcheck.models.verdict import HalalStatus, RiskLevel
    ing = ReferenceIngredient.from_dict({
        "id": "x", "standard_name": "X", "status": "REQUIRES_REVIEW", "risk_level": "VERY_HIGH",
    })
    assert ing.status == HalalStatus.MASHBOOH
    assert ing.requires_expert_review is True
    assert ing.risk_level == RiskLevel.HIGH
    assert ing.reasoning


def test_unknown_status_rejected():
    from halalcheck.reference.reference_schema import ReferenceIngredient
    with pytest.raises(ValueError):
        ReferenceIngredient.from_dict({"id": "x", "standard_name": "X", "status": "MAYBE"})


def test_exact_match_is_case_insensitive(registry):
    m = registry.lookup("  WATER. ")
    assert m.match_type == "EXACT"
    assert m.ingredient.standard_name == "Water"


def test_alias_match(registry):
    m = registry.lookup("Sodium Chloride")
    assert m.match_type == "ALIAS"
    assert m.ingredient.id == "salt"


def test_alias_beats_shorter_substring(registry):
    """'porcine gelatin' is an alias of pork gelatin, not a mention of plain gelatin."""
    m = registry.lookup("Porcine Gelatin")
    assert m.match_type == "ALIAS"
    assert m.ingredient.id == "pork-gelatin"


def test_translation_uses_request_language(registry):
    m = registry.lookup("Varkensgelatine", language="nl")
    assert m.match_type == "TRANSLATION"
    assert m.ingredient.id == "pork-gelatin"
    assert registry.lookup("Varkensgelatine", language="en") is None


def test_translation_given_as_plain_string(registry):
    m = registry.lookup("gélatine de porc", language="fr")
    assert m is not None and m.ingredient.id == "pork-gelatin"


def test_substring_whole_word(registry):
    m = registry.lookup("Salt (iodised)")
    assert m.match_type == "SUBSTRING"
    assert m.ingredient.id == "salt"
    assert registry.lookup("saltpetre") is None


def test_substring_longest_name_wins(registry):
    m = registry.lookup("pork gelatin powder")
    assert m.match_type == "SUBSTRING"
    assert m.ingredient.id == "pork-gelatin"


def test_e_number_match(registry):
    m = registry.lookup("E120")
    assert m.match_type == "E_NUMBER"
    assert m.ingredient.id == "carmine"
    assert registry.lookup("e 441").ingredient.id == "gelatin"


def test_e_number_inside_label_text(registry):
    m = registry.lookup("Emulsifier (E471)")
    assert m.match_type == "E_NUMBER"
    assert m.ingredient.requires_expert_review is True
    assert registry.lookup("E9999") is None


def test_extract_e_number():
    from halalcheck.reference.reference_registry import extract_e_number
    assert extract_e_number("e 471") == "E471"
    assert extract_e_number("E472e") == "E472E"
    assert extract_e_number("Emulsifier (E471)") == "E471"
    assert extract_e_number("vitamine") is None
    assert extract_e_number("") is None


def test_fuzzy_match_above_threshold(registry):
    m = registry.lookup("vanila extract")
    assert m.match_type == "FUZZY"
    assert m.ingredient.id == "vanilla-extract"
    assert m.similarity > 0.7


def test_fuzzy_respects_threshold(reference_rows):
    from halalcheck.reference.reference_registry import ReferenceRegistry
    strict = ReferenceRegistry(rows=reference_rows, fuzzy_threshold=0.95)
    assert strict.lookup("vanila extract") is None


def test_first_row_wins_on_duplicate_keys():
    from halalcheck.reference.reference_registry import ReferenceRegistry
    from halalcheck.reference.reference_schema import ReferenceIngredient
    rows = [
        ReferenceIngredient.from_dict({"id": "a", "standard_name": "Gum A", "status": "HALAL", "aliases": ["gum"]}),
        ReferenceIngredient.from_dict({"id": "b", "standard_name": "Gum B", "status": "HARAM", "aliases": ["gum"]}),
    ]
    reg = ReferenceRegistry(rows=rows)
    assert reg.lookup("gum").ingredient.id == "a"


def test_no_match_and_empty_input(registry):
    assert registry.lookup("quinoa") is None
    assert registry.lookup("") is None
    assert registry.lookup("   ") is None


def test_to_verdict_carries_reference_fields(registry):
    from halalcheck.models.verdict import VerdictSource
    m = registry.lookup("E120")
    v = m.ingredient.to_verdict("E120", m.match_type)
    assert v.detected_name == "E120"
    assert v.standard_name == "Carmine"
    assert v.source == VerdictSource.DATABASE
    assert v.match_type == "E_NUMBER"
    assert v.e_numbers == ["E120"]


def test_load_from_json_file():
    from halalcheck.reference.reference_registry import ReferenceRegistry
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "ref.json"
        path.write_text(json.dumps({
            "reference_version": "test-1",
            "ingredients": [{"id": "honey", "standard_name": "Honey", "status": "HALAL", "risk_level": "LOW"}],
        }))
        reg = ReferenceRegistry(reference_path=path)
        assert len(reg) == 1
        assert reg.get_version() == "test-1"
        assert reg.lookup("honey").match_type == "EXACT"


def test_missing_file_gives_empty_registry():
    from halalcheck.reference.reference_registry import ReferenceRegistry
    with tempfile.TemporaryDirectory() as tmp:
        reg = ReferenceRegistry(reference_path=Path(tmp) / "missing.json")
        assert len(reg) == 0
        assert reg.lookup("water") is None
