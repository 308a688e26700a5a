"""
Append-only audit trail of analysis actions. Analyses are never physically deleted:
an ANALYSIS_DELETED entry hides them from reads.

If the audit file exists but cannot be read, the log refuses to write over it and
refuses to answer deleted_ids(); both raise PersistenceFailure.
"""
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from halalcheck.config import get_audit_log_path
from halalcheck.errors import PersistenceFailure
from halalcheck.persistence.json_files import read_json, write_json_atomic

logger = logging.getLogger(__name__)

ANALYSIS_STARTED = "ANALYSIS_STARTED"
ANALYSIS_COMPLETED = "ANALYSIS_COMPLETED"
ANALYSIS_FAILED = "ANALYSIS_FAILED"
ANALYSIS_DELETED = "ANALYSIS_DELETED"


class AuditLog:
    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_audit_log_path()
        self._entries: List[Dict[str, Any]] = []
        self._load_error: Optional[str] = None
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        try:
            data = read_json(self._path)
            if data is None:
                return
            entries = data.get("entries", [])
            if not isinstance(entries, list):
                raise ValueError("entries is not a list")
            self._entries = entries
        except (OSError, ValueError, AttributeError) as e:
            self._load_error = str(e)
            logger.error("AUDIT_LOAD_FAILED path=%s error=%s", self._path, e)

    def _check_readable(self) -> None:
        if self._load_error is not None:
            raise PersistenceFailure(f"Audit log {self._path} is unreadable: {self._load_error}")

    def log_action(
        self,
        action: str,
        user_id: Optional[str],
        organization_id: Optional[str],
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        persist: bool = True,
    ) -> Dict[str, Any]:
        """Append one entry. With persist, the file is replaced atomically or nothing changes."""
        entry = {
            "action": action,
            "user_id": user_id,
            "organization_id": organization_id,
            "resource": "ingredient_analysis",
            "resource_id": resource_id,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            entries = self._entries + [entry]
            if persist:
                self._check_readable()
                try:
                    write_json_atomic(self._path, {"entries": entries, "version": "1.0"})
                except OSError as e:
                    raise PersistenceFailure(f"Could not write {self._path}: {e}") from e
            self._entries = entries
        logger.info(
            "AUDIT action=%s user_id=%s organization_id=%s resource_id=%s",
            action, user_id, organization_id, resource_id,
        )
        return entry

    def deleted_ids(self, organization_id: Optional[str] = None) -> Set[str]:
        with self._lock:
            self._check_readable()
            entries = self._entries
        return {
            e["resource_id"] for e in entries
            if e.get("action") == ANALYSIS_DELETED
            and e.get("resource_id")
            and (organization_id is None or e.get("organization_id") == organization_id)
        }

    def get_entries(self, action: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            entries = self._entries
        return [dict(e) for e in entries if action is None or e.get("action") == action]
