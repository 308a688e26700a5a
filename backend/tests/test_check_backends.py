"""
Unit tests for scripts/check_backends.py (backends mocked).
Run from backend: python -m pytest tests/test_check_backends.py -v
"""
import importlib.util
import json
import tempfile
from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "check_backends.py"


@pytest.fixture
def check_backends():
    spec = importlib.util.spec_from_file_location("check_backends", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@patch("halalcheck.llm.client.requests.post")
def test_textgen_ok(mock_post, check_backends, monkeypatch):
    monkeypatch.setenv("TEXTGEN_PROVIDER", "ollama")
    mock_post.return_value = MagicMock(status_code=200, json=lambda: {"response": "OK"})
    ok, msg = check_backends.check_textgen()
    assert ok is True
    assert "ollama" in msg


@patch("halalcheck.llm.client.requests.post")
def test_textgen_down(mock_post, check_backends, monkeypatch):
    import requests
    monkeypatch.setenv("TEXTGEN_PROVIDER", "ollama")
    mock_post.side_effect = requests.ConnectionError("refused")
    ok, _ = check_backends.check_textgen()
    assert ok is False


def test_reference_ok_and_empty(check_backends):
    with tempfile.TemporaryDirectory() as tmp:
        good = Path(tmp) / "ref.json"
        good.write_text(json.dumps({"reference_version": "t", "ingredients": [
            {"id": "water", "standard_name": "Water", "status": "HALAL", "risk_level": "LOW"},
        ]}))
        ok, msg = check_backends.check_reference(good)
        assert ok is True and "1 rows" in msg
        ok, _ = check_backends.check_reference(Path(tmp) / "missing.json")
        assert ok is False


def test_main_exit_codes(check_backends):
    with patch.object(check_backends, "check_textgen", return_value=(True, "ok")), \
         patch.object(check_backends, "check_reference", return_value=(True, "ok")):
        assert check_backends.main() == 0
    with patch.object(check_backends, "check_textgen", return_value=(False, "down")), \
         patch.object(check_backends, "check_reference", return_value=(True, "ok")):
        assert check_backends.main() == 1
