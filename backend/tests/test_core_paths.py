"""
Unit tests for config path resolution. Run from backend directory:
  cd backend && python -m pytest tests/test_core_paths.py -v
"""
import pytest


def test_backend_is_current_or_on_path():
    """Tests run with backend on path so 'halalcheck' resolves."""
    from halalcheck import config
    assert config._BACKEND_DIR.is_dir()
    assert (config._BACKEND_DIR / "halalcheck").is_dir()
    assert config._REPO_ROOT.is_dir()
    assert config._REPO_ROOT.name != "halalcheck"


def test_reference_path_resolution(monkeypatch):
    """Reference path is repo_root/data/halal_reference.json unless overridden."""
    from halalcheck.config import get_reference_path, _REPO_ROOT
    monkeypatch.delenv("HALAL_REFERENCE_PATH", raising=False)
    path = get_reference_path()
    assert path == _REPO_ROOT / "data" / "halal_reference.json"
    assert path.suffix == ".json"


def test_reference_path_env_override(monkeypatch, tmp_path):
    from halalcheck.config import get_reference_path
    custom = tmp_path / "ref.json"
    monkeypatch.setenv("HALAL_REFERENCE_PATH", str(custom))
    assert get_reference_path() == custom


def test_store_paths_live_under_data():
    from halalcheck.config import (
        _REPO_ROOT,
        get_analyses_path,
        get_audit_log_path,
        get_unresolved_ingredients_log_path,
    )
    for path in (get_analyses_path(), get_audit_log_path(), get_unresolved_ingredients_log_path()):
        assert path.parent == _REPO_ROOT / "data"
        assert path.suffix == ".json"


def test_backend_settings_read_lazily(monkeypatch):
    """get_* readers pick up env changes after import."""
    from halalcheck import config
    monkeypatch.setenv("TEXTGEN_PROVIDER", "OpenAI ")
    monkeypatch.setenv("ANALYSIS_STORE", "Supabase")
    monkeypatch.setenv("OLLAMA_MODEL", "mistral:7b")
    assert config.get_textgen_provider() == "openai"
    assert config.get_analysis_store_backend() == "supabase"
    assert config.get_ollama_model() == "mistral:7b"


def test_pipeline_limits():
    from halalcheck import config
    assert config.MAX_INGREDIENTS == 50
    assert config.MAX_PRODUCT_NAME_LENGTH == 255
    assert config.MAX_INGREDIENT_TEXT_LENGTH == 10000


def test_reference_file_loads_when_data_present():
    """Shipped reference table loads and resolves the basics."""
    from halalcheck.config import get_reference_path
    from halalcheck.reference.reference_registry import ReferenceRegistry
    if not get_reference_path().exists():
        pytest.skip("halal_reference.json not found")
    reg = ReferenceRegistry()
    assert len(reg) > 0
    assert reg.get_version() and len(reg.get_version()) >= 1
    assert reg.lookup("water").ingredient.status.value == "HALAL"
    assert reg.lookup("E120").ingredient.status.value == "MASHBOOH"
    assert reg.lookup("pork gelatin").ingredient.status.value == "HARAM"
    assert reg.lookup("E471").ingredient.requires_expert_review is True
