"""
Persistent analysis storage: one parent record per product analysis plus one child
record per ingredient verdict.
- JsonAnalysisStore: data/analyses.json, whole file replaced atomically on each save.
- SupabaseAnalysisStore: product_analyses + ingredient_analyses tables through an injected client.
Write failures raise PersistenceFailure; the pipeline decides whether that is fatal.
"""
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional

from supabase import Client

from halalcheck.config import get_analyses_path
from halalcheck.errors import PersistenceFailure
from halalcheck.models.analysis import ProductAnalysis
from halalcheck.models.verdict import HalalStatus
from halalcheck.persistence.json_files import read_json, write_json_atomic

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

HISTORY_FIELDS = (
    "id", "product_name", "overall_status", "overall_risk_level", "expert_review_required",
    "processing_time_ms", "analyzed_at",
)


def _history_item(d: dict) -> dict:
    item = {k: d.get(k) for k in HISTORY_FIELDS}
    summary = d.get("summary") or {}
    item["total_ingredients"] = summary.get("total", d.get("total_ingredients", 0))
    for key in ("halal_count", "haram_count", "mashbooh_count", "uncertain_count"):
        item[key] = summary.get(key, d.get(key, 0))
    return item


def _page_bounds(page: int, limit: int) -> tuple[int, int]:
    page = max(1, int(page or 1))
    limit = max(1, min(int(limit or 20), MAX_PAGE_SIZE))
    return (page - 1) * limit, limit


def _stats(rows: Iterable[dict]) -> dict[str, int]:
    out = {"total_analyses": 0, "expert_review_required": 0}
    for status in HalalStatus:
        out[f"{status.value.lower()}_products"] = 0
    for row in rows:
        out["total_analyses"] += 1
        status = row.get("overall_status")
        if status:
            out[f"{str(status).lower()}_products"] = out.get(f"{str(status).lower()}_products", 0) + 1
        if row.get("expert_review_required"):
            out["expert_review_required"] += 1
    return out


class AnalysisStore(ABC):
    @abstractmethod
    def save(self, analysis: ProductAnalysis) -> None: ...

    @abstractmethod
    def get(self, analysis_id: str) -> Optional[ProductAnalysis]: ...

    @abstractmethod
    def list_for_organization(
        self,
        organization_id: str,
        page: int = 1,
        limit: int = 20,
        exclude_ids: Iterable[str] = (),
    ) -> tuple[list[dict], int]:
        """Newest first. Returns (history items, total matching)."""

    @abstractmethod
    def stats_for_organization(self, organization_id: str, exclude_ids: Iterable[str] = ()) -> dict[str, int]: ...


class JsonAnalysisStore(AnalysisStore):
    """
    File-backed store. Saves are serialized per instance (read, add, atomic replace).
    An unreadable file is never overwritten: save raises PersistenceFailure.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_analyses_path()
        self._lock = threading.Lock()

    def _read(self) -> dict:
        data = read_json(self._path)
        if data is None:
            return {}
        if not isinstance(data, dict) or not isinstance(data.get("analyses", {}), dict):
            raise ValueError("unexpected analyses file layout")
        return data.get("analyses", {})

    def _load_all(self) -> dict:
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.warning("Failed to load analyses: %s", e)
            return {}

    def save(self, analysis: ProductAnalysis) -> None:
        with self._lock:
            try:
                data = self._read()
            except (OSError, ValueError) as e:
                raise PersistenceFailure(f"Refusing to overwrite unreadable {self._path}: {e}") from e
            data[analysis.id] = analysis.to_dict()
            try:
                write_json_atomic(self._path, {"analyses": data, "version": "1.0"})
            except OSError as e:
                raise PersistenceFailure(f"Could not write {self._path}: {e}") from e
        logger.info("ANALYSIS_SAVE analysis_id=%s ingredient_count=%d", analysis.id, len(analysis.ingredients))

    def get(self, analysis_id: str) -> Optional[ProductAnalysis]:
        raw = self._load_all().get(analysis_id)
        return ProductAnalysis.from_dict(raw) if raw else None

    def _rows_for(self, organization_id: str, exclude_ids: Iterable[str]) -> list[dict]:
        excluded = set(exclude_ids)
        rows = [
            d for d in self._load_all().values()
            if d.get("organization_id") == organization_id and d.get("id") not in excluded
        ]
        rows.sort(key=lambda d: d.get("analyzed_at") or "", reverse=True)
        return rows

    def list_for_organization(self, organization_id, page=1, limit=20, exclude_ids=()):
        rows = self._rows_for(organization_id, exclude_ids)
        offset, limit = _page_bounds(page, limit)
        return [_history_item(d) for d in rows[offset:offset + limit]], len(rows)

    def stats_for_organization(self, organization_id, exclude_ids=()):
        return _stats(self._rows_for(organization_id, exclude_ids))


def analysis_to_rows(analysis: ProductAnalysis) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """ProductAnalysis -> (product_analyses row, ingredient_analyses rows)."""
    d = analysis.to_dict()
    parent = {k: v for k, v in d.items() if k not in ("ingredients", "summary")}
    parent["total_ingredients"] = analysis.summary.total
    parent.update({k: v for k, v in analysis.summary.to_dict().items() if k != "total"})
    children = []
    for position, verdict in enumerate(analysis.ingredients):
        row = verdict.to_dict()
        row["analysis_id"] = analysis.id
        row["position"] = position
        children.append(row)
    return parent, children


def rows_to_analysis(parent: dict, children: list[dict]) -> ProductAnalysis:
    d = dict(parent)
    d["summary"] = {
        "total": parent.get("total_ingredients", len(children)),
        "halal_count": parent.get("halal_count", 0),
        "haram_count": parent.get("haram_count", 0),
        "mashbooh_count": parent.get("mashbooh_count", 0),
        "uncertain_count": parent.get("uncertain_count", 0),
    }
    d["ingredients"] = sorted(children, key=lambda r: r.get("position", 0))
    return ProductAnalysis.from_dict(d)


class SupabaseAnalysisStore(AnalysisStore):
    """
    Parent row first, then all child rows in one batch insert. There is no transaction
    across the two calls; a failed child insert leaves the parent without ingredients.
    """

    PARENT_TABLE = "product_analyses"
    CHILD_TABLE = "ingredient_analyses"

    def __init__(self, client: Client):
        self._client = client

    def save(self, analysis: ProductAnalysis) -> None:
        parent, children = analysis_to_rows(analysis)
        try:
            self._client.table(self.PARENT_TABLE).insert(parent).execute()
            if children:
                self._client.table(self.CHILD_TABLE).insert(children).execute()
        except Exception as e:
            raise PersistenceFailure(f"Supabase insert failed for {analysis.id}: {e}") from e
        logger.info("ANALYSIS_SAVE analysis_id=%s ingredient_count=%d backend=supabase", analysis.id, len(children))

    def get(self, analysis_id: str) -> Optional[ProductAnalysis]:
        parent = self._client.table(self.PARENT_TABLE).select("*").eq("id", analysis_id).limit(1).execute()
        if not parent.data:
            return None
        children = (
            self._client.table(self.CHILD_TABLE).select("*").eq("analysis_id", analysis_id)
            .order("position").execute()
        )
        return rows_to_analysis(parent.data[0], children.data or [])

    def _org_query(self, columns: str, organization_id: str, exclude_ids: Iterable[str], count: Optional[str] = None):
        query = self._client.table(self.PARENT_TABLE).select(columns, count=count).eq("organization_id", organization_id)
        excluded = list(exclude_ids)
        if excluded:
            query = query.not_.in_("id", excluded)
        return query

    def list_for_organization(self, organization_id, page=1, limit=20, exclude_ids=()):
        offset, limit = _page_bounds(page, limit)
        response = (
            self._org_query("*", organization_id, exclude_ids, count="exact")
            .order("analyzed_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return [_history_item(r) for r in rows], total

    def stats_for_organization(self, organization_id, exclude_ids=()):
        response = self._org_query("overall_status, expert_review_required", organization_id, exclude_ids).execute()
        return _stats(response.data or [])
