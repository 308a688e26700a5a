"""
Shared test doubles: a scripted text-generation backend and a small reference table.
"""
import json
import re
from typing import Dict, List, Optional, Union

import pytest

PARSE_PREFIX = "Parse these ingredients: "
CLASSIFY_PREFIX = "Analyze this ingredient for halal compliance: "


class FakeGenerator:
    """
    Stands in for TextGenerator. Parser calls get `parse_reply` (or raise it if it is an
    exception, or split the raw text on commas/semicolons when None); classifier calls are answered
    from `replies` keyed by ingredient name, where a value may be a dict, raw string or exception.
    """

    def __init__(
        self,
        parse_reply: Union[str, Exception, None] = None,
        replies: Optional[Dict[str, Union[dict, str, Exception]]] = None,
    ):
        self.parse_reply = parse_reply
        self.replies = replies or {}
        self.calls: List[dict] = []

    def generate(self, system, prompt, temperature=0.1, max_tokens=800, force_json=False):
        self.calls.append({"system": system, "prompt": prompt, "temperature": temperature,
                           "max_tokens": max_tokens, "force_json": force_json})
        if prompt.startswith(PARSE_PREFIX):
            if isinstance(self.parse_reply, Exception):
                raise self.parse_reply
            if self.parse_reply is None:
                return "\n".join(p.strip() for p in re.split(r"[,;]", prompt[len(PARSE_PREFIX):]))
            return self.parse_reply
        name = prompt[len(CLASSIFY_PREFIX):]
        reply = self.replies.get(name)
        if reply is None:
            raise AssertionError(f"unexpected classifier call for {name!r}")
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply)
        return reply

    def classify_calls(self) -> List[str]:
        return [c["prompt"][len(CLASSIFY_PREFIX):] for c in self.calls if c["prompt"].startswith(CLASSIFY_PREFIX)]


REFERENCE_ROWS = [
    {"id": "water", "standard_name": "Water", "status": "HALAL", "risk_level": "VERY_LOW",
     "reasoning": "Water is inherently halal", "aliases": ["aqua"], "translations": {"fr": ["Eau"]}},
    {"id": "salt", "standard_name": "Salt", "status": "HALAL", "risk_level": "LOW",
     "reasoning": "Mineral salt", "aliases": ["sodium chloride"], "translations": {"nl": ["Zout"]}},
    {"id": "sugar", "standard_name": "Sugar", "status": "HALAL", "risk_level": "LOW",
     "reasoning": "Plant-derived", "aliases": ["sucrose"]},
    {"id": "beef", "standard_name": "Beef", "status": "HALAL", "risk_level": "LOW",
     "reasoning": "Halal when properly slaughtered"},
    {"id": "pork-gelatin", "standard_name": "Pork Gelatin", "status": "HARAM", "risk_level": "VERY_HIGH",
     "reasoning": "Pork-derived gelatin is haram", "aliases": ["porcine gelatin", "pig gelatin"],
     "translations": {"nl": ["Varkensgelatine"], "fr": "Gélatine de Porc", "de": ["Schweinegelatine"]}},
    {"id": "gelatin", "standard_name": "Gelatin", "status": "HARAM", "risk_level": "HIGH",
     "reasoning": "Unspecified gelatin", "e_numbers": ["e441"], "aliases": ["gelatine"]},
    {"id": "carmine", "standard_name": "Carmine", "status": "MASHBOOH", "risk_level": "MEDIUM",
     "reasoning": "Insect-derived colour", "e_numbers": ["E120"], "requires_expert_review": True},
    {"id": "e471", "standard_name": "Mono- and Diglycerides", "status": "REQUIRES_REVIEW", "risk_level": "HIGH",
     "reasoning": "Source verification mandatory", "e_numbers": ["E471"]},
    {"id": "vanilla-extract", "standard_name": "Vanilla Extract", "status": "MASHBOOH", "risk_level": "MEDIUM",
     "reasoning": "Alcohol carrier"},
    {"id": "citric-acid", "standard_name": "Citric Acid", "status": "HALAL", "risk_level": "VERY_LOW",
     "reasoning": "Fermentation product", "e_numbers": ["E330"]},
]


@pytest.fixture
def reference_rows():
    from halalcheck.reference.reference_schema import ReferenceIngredient
    return [ReferenceIngredient.from_dict(r) for r in REFERENCE_ROWS]


@pytest.fixture
def registry(reference_rows):
    from halalcheck.reference.reference_registry import ReferenceRegistry
    return ReferenceRegistry(rows=reference_rows)
