"""
Feature flags, paths, and centralized configuration.
All resolution relative to the backend directory.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# backend/halalcheck/config.py -> parent=halalcheck, parent.parent=backend, parent.parent.parent=repo
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_REPO_ROOT = _BACKEND_DIR.parent


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


# --- Feature flags ---
LOG_UNRESOLVED_INGREDIENTS = _flag("LOG_UNRESOLVED_INGREDIENTS", "true")

# --- Pipeline limits ---
MAX_INGREDIENTS = 50
MAX_PRODUCT_NAME_LENGTH = 255
MAX_INGREDIENT_TEXT_LENGTH = 10000


# --- Data paths ---
def get_reference_path() -> Path:
    return Path(os.environ.get("HALAL_REFERENCE_PATH", "") or _REPO_ROOT / "data" / "halal_reference.json")


def get_analyses_path() -> Path:
    return _REPO_ROOT / "data" / "analyses.json"


def get_audit_log_path() -> Path:
    return _REPO_ROOT / "data" / "audit_log.json"


def get_unresolved_ingredients_log_path() -> Path:
    return _REPO_ROOT / "data" / "unresolved_ingredients_log.json"


# --- Text generation backend (lazy read from env) ---
def get_textgen_provider() -> str:
    return os.environ.get("TEXTGEN_PROVIDER", "ollama").strip().lower()


def get_ollama_url() -> str:
    return os.environ.get("OLLAMA_API_URL", "http://localhost:11434/api/generate")


def get_ollama_model() -> str:
    return os.environ.get("OLLAMA_MODEL", "llama3.2:3b")


def get_openai_api_key() -> str:
    return os.environ.get("OPENAI_API_KEY", "").strip()


def get_openai_url() -> str:
    return os.environ.get("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")


def get_openai_model() -> str:
    return os.environ.get("OPENAI_MODEL", "gpt-4o-mini")


# Timeout per text-generation call (seconds)
TEXTGEN_TIMEOUT = int(os.environ.get("TEXTGEN_TIMEOUT", "30"))
# Minimum spacing between classifier calls (milliseconds)
CLASSIFIER_DELAY_MS = int(os.environ.get("CLASSIFIER_DELAY_MS", "100"))
# Trigram similarity needed for a fuzzy reference match
FUZZY_MATCH_THRESHOLD = float(os.environ.get("FUZZY_MATCH_THRESHOLD", "0.7"))


# --- Storage ---
def get_analysis_store_backend() -> str:
    return os.environ.get("ANALYSIS_STORE", "json").strip().lower()


def get_supabase_url() -> str:
    return os.environ.get("SUPABASE_URL", "").strip()


def get_supabase_key() -> str:
    return os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "").strip()


# --- Startup logging ---
def log_config() -> None:
    provider = get_textgen_provider()
    model = get_openai_model() if provider == "openai" else get_ollama_model()
    logger.info(
        "CONFIG: textgen_provider=%s model=%s openai_key=%s reference=%s store=%s "
        "supabase=%s textgen_timeout=%ds classifier_delay=%dms fuzzy_threshold=%.2f",
        provider, model, bool(get_openai_api_key()),
        get_reference_path().exists(), get_analysis_store_backend(),
        bool(get_supabase_url() and get_supabase_key()),
        TEXTGEN_TIMEOUT, CLASSIFIER_DELAY_MS, FUZZY_MATCH_THRESHOLD,
    )
