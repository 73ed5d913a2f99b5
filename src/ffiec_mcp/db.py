"""MongoDB persistence layer for institutions and financial statements.

Collections:
  institutions          - one document per bank, keyed by idrssd
  financial_statements  - one document per (idrssd, reporting_period)

All writes are single-document upserts on the natural key, so a quarter
can be re-imported any number of times without duplicating anything, and
an interrupted batch leaves only complete documents behind.

The store is an explicit handle (``FilingStore``) passed to the importer
and the peer batch; ``get_store()`` builds a shared one from the
environment for the CLI and the MCP server.  Tests hand in a mongomock
database instead.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Iterator

from ffiec_mcp.errors import StoreUnavailableError
from ffiec_mcp.models import FinancialStatement, Institution, PeerAnalysis

log = logging.getLogger(__name__)

TOTAL_ASSETS_PATH = "balance_sheet.assets.total_assets"


def period_key(period: date | datetime) -> datetime:
    """Reporting periods are stored as midnight datetimes (BSON has no date type)."""
    return datetime(period.year, period.month, period.day)


def _dig(doc: dict | None, path: str) -> Any:
    node: Any = doc
    for part in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


class FilingStore:
    """Thin wrapper over a pymongo (or mongomock) Database."""

    def __init__(self, database: Any):
        self.db = database
        self.institutions = database.institutions
        self.statements = database.financial_statements

    @classmethod
    def connect(cls, uri: str, database: str) -> FilingStore:
        from pymongo import MongoClient

        client = MongoClient(uri, serverSelectionTimeoutMS=5000)
        # Ping confirms connectivity before the first batch write
        client.admin.command("ping")
        log.info("MongoDB connected (database %s)", database)
        return cls(client[database])

    def ensure_indexes(self) -> None:
        self.institutions.create_index("idrssd", unique=True)
        self.institutions.create_index("name")
        self.statements.create_index([("idrssd", 1), ("reporting_period", -1)], unique=True)
        self.statements.create_index([("reporting_period", 1), (TOTAL_ASSETS_PATH, -1)])

    # ── Institutions ──────────────────────────────────────────────────

    def upsert_institution(self, institution: Institution) -> None:
        data = institution.model_dump()
        if data.get("website") is None:
            data.pop("website", None)   # keep a website found by an earlier import
        now = datetime.now(timezone.utc)
        self.institutions.update_one(
            {"idrssd": institution.idrssd},
            {"$set": {**data, "updated_at": now}, "$setOnInsert": {"created_at": now}},
            upsert=True,
        )

    def get_institution(self, idrssd: str) -> dict | None:
        return self.institutions.find_one({"idrssd": idrssd}, {"_id": 0})

    def institution_names(self, ids: Iterable[str]) -> dict[str, str]:
        cursor = self.institutions.find({"idrssd": {"$in": list(ids)}}, {"idrssd": 1, "name": 1, "_id": 0})
        return {doc["idrssd"]: doc.get("name") for doc in cursor}

    def count_institutions(self) -> int:
        return self.institutions.count_documents({})

    # ── Statements ────────────────────────────────────────────────────

    def upsert_statement(self, statement: FinancialStatement) -> None:
        """Write a statement, replacing the imported sections but not peer_analysis."""
        data = statement.model_dump(exclude={"peer_analysis"})
        data["reporting_period"] = period_key(statement.reporting_period)
        if statement.peer_analysis is not None:
            data["peer_analysis"] = statement.peer_analysis.model_dump()
        now = datetime.now(timezone.utc)
        self.statements.update_one(
            {"idrssd": statement.idrssd, "reporting_period": data["reporting_period"]},
            {"$set": {**data, "updated_at": now}, "$setOnInsert": {"created_at": now}},
            upsert=True,
        )

    def get_statement(self, idrssd: str, period: date | None = None) -> dict | None:
        """One statement document; the most recent one when no period is given."""
        query: dict = {"idrssd": idrssd}
        if period is not None:
            query["reporting_period"] = period_key(period)
        docs = list(self.statements.find(query, {"_id": 0}).sort("reporting_period", -1).limit(1))
        return docs[0] if docs else None

    def previous_statement(self, idrssd: str, period: date) -> dict | None:
        """The bank's latest statement strictly before ``period``."""
        docs = list(
            self.statements.find(
                {"idrssd": idrssd, "reporting_period": {"$lt": period_key(period)}},
                {"reporting_period": 1, "income_statement": 1, "_id": 0},
            ).sort("reporting_period", -1).limit(1)
        )
        return docs[0] if docs else None

    def count_statements(self, period: date | None = None) -> int:
        query = {} if period is None else {"reporting_period": period_key(period)}
        return self.statements.count_documents(query)

    def statement_periods(self, idrssd: str, periods: list[date] | None = None) -> list[tuple[date, float | None]]:
        """(reporting_period, total_assets) for a bank, oldest first."""
        query: dict = {"idrssd": idrssd}
        if periods:
            query["reporting_period"] = {"$in": [period_key(p) for p in periods]}
        cursor = self.statements.find(
            query, {"reporting_period": 1, TOTAL_ASSETS_PATH: 1, "_id": 0},
        ).sort("reporting_period", 1)
        return [(doc["reporting_period"].date(), _dig(doc, TOTAL_ASSETS_PATH)) for doc in cursor]

    def income_history(self, idrssd: str) -> list[dict]:
        """Income statements of a bank in chronological order."""
        cursor = self.statements.find(
            {"idrssd": idrssd}, {"reporting_period": 1, "income_statement": 1, "_id": 0},
        ).sort("reporting_period", 1)
        return list(cursor)

    def entity_ids(self) -> list[str]:
        return list(self.statements.distinct("idrssd"))

    # ── Peer queries (projection only) ────────────────────────────────

    def nearest_by_assets(
        self,
        idrssd: str,
        total_assets: float,
        period: date,
        limit: int,
        *,
        larger: bool,
    ) -> list[str]:
        """Closest banks strictly above (larger=True) or below the given assets."""
        if limit <= 0:
            return []
        op, direction = ("$gt", 1) if larger else ("$lt", -1)
        cursor = (
            self.statements.find(
                {
                    "reporting_period": period_key(period),
                    "idrssd": {"$ne": idrssd},
                    TOTAL_ASSETS_PATH: {op: total_assets},
                },
                {"idrssd": 1, "_id": 0},
            )
            .sort(TOTAL_ASSETS_PATH, direction)
            .limit(limit)
        )
        return [doc["idrssd"] for doc in cursor]

    def project_metric(self, period: date, path: str) -> Iterator[tuple[str, Any]]:
        """Stream (idrssd, value) for one metric path across a whole period."""
        cursor = self.statements.find(
            {"reporting_period": period_key(period)}, {"idrssd": 1, path: 1, "_id": 0},
        )
        for doc in cursor:
            yield doc["idrssd"], _dig(doc, path)

    def project_metrics(self, ids: list[str], period: date, paths: Iterable[str]) -> list[dict[str, Any]]:
        """Flat {idrssd, path: value ...} rows for the given banks at one period."""
        paths = list(paths)
        projection: dict = {"idrssd": 1, "_id": 0}
        projection.update({p: 1 for p in paths})
        cursor = self.statements.find(
            {"idrssd": {"$in": list(ids)}, "reporting_period": period_key(period)}, projection,
        )
        return [{"idrssd": doc["idrssd"], **{p: _dig(doc, p) for p in paths}} for doc in cursor]

    def latest_assets(self) -> list[dict[str, Any]]:
        """(idrssd, reporting_period, total_assets) for every statement."""
        cursor = self.statements.find(
            {}, {"idrssd": 1, "reporting_period": 1, TOTAL_ASSETS_PATH: 1, "_id": 0},
        )
        return [
            {
                "idrssd": doc["idrssd"],
                "reporting_period": doc["reporting_period"],
                "total_assets": _dig(doc, TOTAL_ASSETS_PATH),
            }
            for doc in cursor
        ]

    # ── Batch updates ─────────────────────────────────────────────────

    def set_peer_analysis(self, idrssd: str, period: date, analysis: PeerAnalysis) -> None:
        self.statements.update_one(
            {"idrssd": idrssd, "reporting_period": period_key(period)},
            {"$set": {"peer_analysis": analysis.model_dump()}},
        )

    def set_operating_leverage(self, idrssd: str, period: date | datetime, value: float | None) -> None:
        self.statements.update_one(
            {"idrssd": idrssd, "reporting_period": period_key(period)},
            {"$set": {"ratios.operating_leverage": value}},
        )


_store: FilingStore | None = None


def get_store() -> FilingStore:
    """Lazy-init the shared store from MONGODB_URI."""
    global _store
    if _store is not None:
        return _store

    from ffiec_mcp.config import get_config

    config = get_config()
    if not config.mongodb_uri:
        raise StoreUnavailableError("MONGODB_URI is not set")
    try:
        _store = FilingStore.connect(config.mongodb_uri, config.mongodb_database)
    except Exception as exc:
        log.warning("MongoDB unavailable: %s", exc)
        raise StoreUnavailableError(str(exc)) from exc
    _store.ensure_indexes()
    return _store
