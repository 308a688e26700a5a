"""
Log of ingredient names the reference table could not resolve: raw input,
normalized key, frequency, languages seen, last verdict from the model.
Used to decide which rows to add to the reference table next.

One instance is shared by every request the API serves, so record() and the file
write run under a single lock and the file is replaced atomically.
"""
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from halalcheck.config import get_unresolved_ingredients_log_path
from halalcheck.persistence.json_files import read_json, write_json_atomic

logger = logging.getLogger(__name__)

MAX_RAW_INPUTS = 20
MAX_LANGUAGES = 10


def _new_entry(normalized_key: str, now: float) -> Dict[str, Any]:
    return {
        "normalized_key": normalized_key,
        "raw_inputs": [],
        "frequency": 0,
        "first_seen": now,
        "last_seen": now,
        "languages": [],
        "last_status": None,
    }


def _merged(entry: Dict[str, Any], raw_input: str, language: Optional[str], status: Optional[str], now: float) -> Dict[str, Any]:
    """Copy of `entry` with one more sighting folded in."""
    out = dict(entry)
    raw_inputs = list(entry.get("raw_inputs", []))
    if raw_input and raw_input not in raw_inputs:
        raw_inputs.append(raw_input)
    out["raw_inputs"] = raw_inputs[:MAX_RAW_INPUTS]
    languages = list(entry.get("languages", []))
    if language and language not in languages:
        languages.append(language)
    out["languages"] = languages[:MAX_LANGUAGES]
    out["frequency"] = entry.get("frequency", 0) + 1
    out["last_seen"] = now
    if status:
        out["last_status"] = status
    return out


class UnresolvedIngredientsLog:
    """
    In-memory log with optional persist to JSON, keyed by normalized_key.
    Entries are never mutated in place; record() swaps in a new dict.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_unresolved_ingredients_log_path()
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        try:
            data = read_json(self._path)
        except (OSError, ValueError) as e:
            logger.warning("Unresolved ingredients log load failed: %s", e)
            return
        if isinstance(data, dict) and isinstance(data.get("unresolved_ingredients"), dict):
            self._entries = data["unresolved_ingredients"]

    def record(
        self,
        raw_input: str,
        normalized_key: str,
        language: Optional[str] = None,
        status: Optional[str] = None,
        persist: bool = True,
    ) -> None:
        """Record or update an unresolved ingredient."""
        if not normalized_key:
            return
        now = time.time()
        with self._lock:
            current = self._entries.get(normalized_key) or _new_entry(normalized_key, now)
            entry = _merged(current, raw_input, language, status, now)
            entries = dict(self._entries)
            entries[normalized_key] = entry
            self._entries = entries
            if persist:
                write_json_atomic(self._path, {"unresolved_ingredients": entries, "version": "1.0"})
        logger.info(
            "UNRESOLVED_INGREDIENT logged raw=%s normalized_key=%s frequency=%s",
            raw_input[:50], normalized_key, entry["frequency"],
        )

    def get_entries(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return dict(self._entries)

    def get_keys_for_curation(self, min_frequency: int = 1) -> List[str]:
        """Normalized keys seen at least `min_frequency` times, most frequent first."""
        entries = self.get_entries()
        keys = [k for k, v in entries.items() if v.get("frequency", 0) >= min_frequency]
        return sorted(keys, key=lambda k: -entries[k].get("frequency", 0))
