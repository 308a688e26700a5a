"""
Unit tests for the Supabase-backed reference lookup (client mocked).
Run from backend: python -m pytest tests/test_supabase_reference.py -v
"""
import pytest
from unittest.mock import MagicMock

ROW = {
    "id": "carmine", "standard_name": "Carmine", "halal_status": "MASHBOOH", "risk_level": "MEDIUM",
    "confidence": 0.85, "reasoning": "Insect colour", "requires_expert_review": True,
    "common_names": ["cochineal"], "translations": {"nl": ["karmijn"]}, "e_numbers": ["E120"],
}


class _Table:
    def __init__(self, store):
        self.store = store

    def select(self, *_args, **_kwargs):
        return _Query(self.store)


class _Query:
    """Records filters and answers from a scripted list of results."""

    def __init__(self, store):
        self.store, self.filters = store, []

    def ilike(self, col, val):
        self.filters.append(("ilike", col, val))
        return self

    def contains(self, col, val):
        self.filters.append(("contains", col, val))
        return self

    def limit(self, _n):
        return self

    def execute(self):
        self.store.queries.append(self.filters)
        return MagicMock(data=self.store.answers.pop(0))


class _Client:
    def __init__(self, answers, rpc_data=None):
        self.answers = list(answers)
        self.queries = []
        self.rpc_calls = []
        self.rpc_data = rpc_data or []

    def table(self, name):
        return _Table(self)

    def rpc(self, name, params):
        self.rpc_calls.append((name, params))
        return MagicMock(execute=lambda: MagicMock(data=self.rpc_data))


def test_exact_name_hit():
    from halalcheck.reference.supabase_store import SupabaseReferenceStore
    client = _Client([[ROW]])
    m = SupabaseReferenceStore(client).lookup("Carmine")
    assert m.match_type == "EXACT"
    assert m.ingredient.status.value == "MASHBOOH"
    assert client.queries[0] == [("ilike", "standard_name", "carmine")]


def test_falls_through_to_e_number():
    from halalcheck.reference.supabase_store import SupabaseReferenceStore
    client = _Client([[], [], [], [ROW]])
    m = SupabaseReferenceStore(client).lookup("E 120", language="nl")
    assert m.match_type == "E_NUMBER"
    assert client.queries[2] == [("contains", "translations", {"nl": ["e 120"]})]
    assert client.queries[3] == [("contains", "e_numbers", ["E120"])]
    assert client.rpc_calls == []


def test_similarity_rpc_last():
    from halalcheck.reference.supabase_store import SupabaseReferenceStore
    client = _Client([[], [], []], rpc_data=[dict(ROW, similarity=0.81)])
    m = SupabaseReferenceStore(client, fuzzy_threshold=0.7).lookup("carmin")
    assert m.match_type == "FUZZY"
    assert m.similarity == pytest.approx(0.81)
    name, params = client.rpc_calls[0]
    assert name == "match_ingredient_similarity"
    assert params == {"query_text": "carmin", "match_threshold": 0.7, "match_count": 1}


def test_no_match():
    from halalcheck.reference.supabase_store import SupabaseReferenceStore
    assert SupabaseReferenceStore(_Client([[], [], []])).lookup("quinoa") is None


def test_client_error_is_upstream_unavailable():
    from halalcheck.errors import UpstreamUnavailable
    from halalcheck.reference.supabase_store import SupabaseReferenceStore
    client = MagicMock()
    client.table.side_effect = ConnectionError("refused")
    with pytest.raises(UpstreamUnavailable):
        SupabaseReferenceStore(client).lookup("salt")


def test_reference_row_mapping():
    from halalcheck.reference.supabase_store import reference_to_row, row_to_reference
    ing = row_to_reference(ROW)
    row = reference_to_row(ing)
    assert row["halal_status"] == "MASHBOOH"
    assert row["common_names"] == ["cochineal"]
    assert row["translations"] == {"nl": ["karmijn"]}
    assert row["e_numbers"] == ["E120"]


def test_exact_name_query_escapes_like_wildcards():
    from halalcheck.reference.supabase_store import SupabaseReferenceStore, escape_like
    assert escape_like("100%_juice") == "100\\%\\_juice"
    assert escape_like("a\\b") == "a\\\\b"
    client = _Client([[], [], []])
    assert SupabaseReferenceStore(client).lookup("Orange_%") is None
    assert client.queries[0] == [("ilike", "standard_name", "orange\\_\\%")]
