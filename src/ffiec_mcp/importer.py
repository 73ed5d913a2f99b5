"""Quarterly Call Report import: schedules → institutions + statements.

Data flow:
  1. find_required_files() → locate POR / RC / RCCI / RI (+ RC-M, RC-N, RI-B)
  2. read_schedule() → raw records per schedule
  3. index_by_entity() → IDRSSD lookup maps for every schedule but the roster
  4. per roster bank (worker pool):
       upsert Institution
       build_statement() → transform, validate, ratios
       upsert FinancialStatement keyed by (idrssd, reporting_period)
  5. ImportResult with counts and per-bank issues

Only a missing required schedule aborts the import, and it does so before
anything is parsed or written.  Everything else (malformed rows, banks
without a balance sheet or income statement, a bad optional schedule, an
exception while transforming one bank) is logged and skipped.
"""

from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Mapping

import pandas as pd

from ffiec_mcp.config import Settings, get_config
from ffiec_mcp.db import FilingStore, get_store
from ffiec_mcp.errors import MissingScheduleError
from ffiec_mcp.field_resolver import FieldResolver
from ffiec_mcp.mdrm_fields import ROSTER_COLUMNS, ROSTER_LAST_UPDATED, WEBSITE_FIELD
from ffiec_mcp.models import (
    EntityIssue,
    FinancialStatement,
    ImportResult,
    IncomeStatement,
    Institution,
)
from ffiec_mcp.ratios import compute_operating_leverage, compute_ratios
from ffiec_mcp.schedule_reader import (
    ParsedSchedule,
    RawRecord,
    entity_id,
    index_by_entity,
    read_schedule,
)
from ffiec_mcp.transformer import (
    categorize_loans,
    transform_balance_sheet,
    transform_charge_offs,
    transform_credit_quality,
    transform_income_statement,
    validation_totals,
)
from ffiec_mcp.validation import validate_statement

log = logging.getLogger(__name__)

REQUIRED_SCHEDULES = ("por", "rc", "rcci", "ri")
OPTIONAL_SCHEDULES = ("rcm", "rcn", "rib")

SCHEDULE_LABELS = {
    "por": "POR (Bank Information)",
    "rc": "RC (Balance Sheet)",
    "rcci": "RCCI (Loan Detail)",
    "ri": "RI (Income Statement)",
    "rcm": "RC-M (Memoranda - website URLs)",
    "rcn": "RC-N (Past Due and Nonaccrual Loans)",
    "rib": "RI-B (Charge-offs and Recoveries)",
}

# Schedule token in "FFIEC CDR Call Schedule RCCI 06302025.txt" → files key
_SCHEDULE_TOKENS = {
    "rc": "rc",
    "rcci": "rcci",
    "ri": "ri",
    "rcm": "rcm",
    "rcn": "rcn",
    "rc-n": "rcn",
    "ribi": "rib",
    "ri-b": "rib",
}
_SCHEDULE_RE = re.compile(r"schedule\s+([a-z0-9-]+)")
_PERIOD_RE = re.compile(r"(\d{8})")

LogSink = Callable[[str, str], None]

_SINK_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class ImportContext:
    """Store handle, settings and progress sink for one import run."""
    store: FilingStore
    config: Settings = field(default_factory=get_config)
    log_sink: LogSink | None = None

    def emit(self, message: str, level: str = "info") -> None:
        log.log(_SINK_LEVELS.get(level, logging.INFO), message)
        if self.log_sink is not None:
            self.log_sink(message, level)


@dataclass
class _EntityOutcome:
    idrssd: str
    institution_written: bool = False
    statement_written: bool = False
    validation_errors: int = 0
    issue: EntityIssue | None = None


# ═══════════════════════════════════════════════════════════════════════════
#  File discovery
# ═══════════════════════════════════════════════════════════════════════════

def find_required_files(directory: str | Path) -> dict[str, Path | None]:
    """Locate each schedule in an unpacked FFIEC bulk download by filename.

    RC-N and RI-B may be split into several parts; the first part found
    (in name order) is used.
    """
    found: dict[str, Path | None] = {k: None for k in REQUIRED_SCHEDULES + OPTIONAL_SCHEDULES}
    for path in sorted(Path(directory).iterdir()):
        lower = path.name.lower()
        if not path.is_file() or not lower.endswith(".txt"):
            continue
        if " por " in f" {lower} " or "bulk por" in lower:
            found["por"] = found["por"] or path
            continue
        match = _SCHEDULE_RE.search(lower)
        if not match:
            continue
        key = _SCHEDULE_TOKENS.get(match.group(1))
        if key is not None and found[key] is None:
            found[key] = path
    return found


def extract_reporting_period(filename: str) -> date | None:
    """Reporting period from the MMDDYYYY stamp in an FFIEC filename."""
    match = _PERIOD_RE.search(filename)
    if not match:
        return None
    stamp = match.group(1)
    try:
        return date(int(stamp[4:8]), int(stamp[0:2]), int(stamp[2:4]))
    except ValueError:
        return None


def _missing_required(files: Mapping[str, Any]) -> list[str]:
    missing = []
    for key in REQUIRED_SCHEDULES:
        path = files.get(key)
        if not path or not Path(path).is_file():
            missing.append(key)
    return missing


# ═══════════════════════════════════════════════════════════════════════════
#  Roster helpers
# ═══════════════════════════════════════════════════════════════════════════

def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _timestamp(value: Any):
    if value is None:
        return None
    ts = pd.to_datetime(str(value), errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def clean_website(value: Any) -> str | None:
    """Normalise an RC-M website entry to an https URL."""
    if not isinstance(value, str):
        return None
    url = value.strip()
    if not url or url == "0":
        return None
    if not url.lower().startswith("http"):
        url = f"https://{url}"
    return url


def build_institution(idrssd: str, roster: RawRecord, memoranda: RawRecord | None = None) -> Institution:
    values = {name: _text(roster.get(column)) for name, column in ROSTER_COLUMNS.items()}
    zip_code = values.get("zip_code")
    if zip_code and zip_code.isdigit() and len(zip_code) < 5:
        values["zip_code"] = zip_code.zfill(5)   # numeric cells lose leading zeros
    website = clean_website(memoranda.get(WEBSITE_FIELD)) if memoranda else None
    return Institution(
        idrssd=idrssd,
        last_updated=_timestamp(roster.get(ROSTER_LAST_UPDATED)),
        website=website,
        **values,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  Statement assembly
# ═══════════════════════════════════════════════════════════════════════════

def build_statement(
    idrssd: str,
    reporting_period: date,
    rc: RawRecord,
    ri: RawRecord,
    *,
    rcci: RawRecord | None = None,
    rcn: RawRecord | None = None,
    rib: RawRecord | None = None,
    previous_income: IncomeStatement | None = None,
    config: Settings | None = None,
) -> FinancialStatement:
    """Transform, validate and derive ratios for one bank-quarter."""
    config = config or get_config()
    strict = config.strict_missing_fields

    merged = {**rc, **(rcci or {})}
    resolver = FieldResolver(merged, strict=strict)
    balance_sheet = transform_balance_sheet(merged, resolver)
    income_statement = transform_income_statement(ri, strict=strict)

    credit_quality = None
    if rcn is not None:
        try:
            credit_quality = transform_credit_quality(
                {**rc, **rcn}, FieldResolver({**rc, **rcn}, strict=strict, basis=resolver.basis),
            )
        except Exception as exc:
            log.warning("[%s] RC-N transform failed, credit quality omitted: %s", idrssd, exc)

    charge_offs = None
    if rib is not None:
        try:
            charge_offs = transform_charge_offs({**ri, **rib}, strict=strict)
        except Exception as exc:
            log.warning("[%s] RI-B transform failed, charge-offs omitted: %s", idrssd, exc)

    ratios = compute_ratios(balance_sheet, income_statement, reporting_period, charge_offs)
    if previous_income is not None:
        ratios.operating_leverage = compute_operating_leverage(income_statement, previous_income)

    return FinancialStatement(
        idrssd=idrssd,
        reporting_period=reporting_period,
        balance_sheet=balance_sheet,
        income_statement=income_statement,
        ratios=ratios,
        validation=validate_statement(balance_sheet, income_statement, config.validation_tolerance),
        validation_totals=validation_totals(resolver),
        loan_categories=categorize_loans(balance_sheet.assets.earning_assets.loans_and_leases.portfolio),
        credit_quality=credit_quality,
        charge_offs=charge_offs,
    )


def _previous_income(store: FilingStore, idrssd: str, reporting_period: date) -> IncomeStatement | None:
    doc = store.previous_statement(idrssd, reporting_period)
    if not doc or not doc.get("income_statement"):
        return None
    return IncomeStatement.model_validate(doc["income_statement"])


# ═══════════════════════════════════════════════════════════════════════════
#  Import
# ═══════════════════════════════════════════════════════════════════════════

def _parse_required(ctx: ImportContext, files: Mapping[str, Any]) -> dict[str, ParsedSchedule]:
    """Read every required schedule; empty or unreadable ones count as missing."""
    parsed: dict[str, ParsedSchedule] = {}
    unreadable = []
    for key in REQUIRED_SCHEDULES:
        ctx.emit(f"Parsing Schedule {SCHEDULE_LABELS[key]}...")
        try:
            parsed[key] = read_schedule(files[key])
        except (OSError, ValueError) as exc:
            ctx.emit(f"✗ Could not read {SCHEDULE_LABELS[key]} schedule: {exc}", "error")
            unreadable.append(key)
            continue
        ctx.emit(f"✓ Parsed {len(parsed[key].records)} {key.upper()} records", "success")
        if parsed[key].skipped_rows:
            ctx.emit(f"⚠ Skipped {parsed[key].skipped_rows} malformed {key.upper()} rows", "warning")
    if unreadable:
        raise MissingScheduleError(unreadable, SCHEDULE_LABELS)
    return parsed


def _parse_optional(ctx: ImportContext, files: Mapping[str, Any], key: str) -> dict[str, RawRecord] | None:
    path = files.get(key)
    if not path:
        ctx.emit(f"⚠ {SCHEDULE_LABELS[key]} schedule not found - its fields will not be imported", "warning")
        return None
    try:
        ctx.emit(f"Parsing Schedule {SCHEDULE_LABELS[key]}...")
        schedule = read_schedule(path)
    except Exception as exc:
        ctx.emit(f"⚠ Could not parse {SCHEDULE_LABELS[key]} schedule: {exc}", "warning")
        return None
    ctx.emit(f"✓ Parsed {len(schedule.records)} {key.upper()} records", "success")
    return index_by_entity(schedule.records)


def _import_entity(
    ctx: ImportContext,
    idrssd: str,
    roster: RawRecord,
    maps: dict[str, dict[str, RawRecord] | None],
    reporting_period: date,
    store_gate: threading.BoundedSemaphore,
) -> _EntityOutcome:
    def lookup(key: str) -> RawRecord | None:
        index = maps.get(key)
        return index.get(idrssd) if index else None

    outcome = _EntityOutcome(idrssd=idrssd)
    institution = build_institution(idrssd, roster, lookup("rcm"))
    with store_gate:
        ctx.store.upsert_institution(institution)
    outcome.institution_written = True

    rc, ri = lookup("rc"), lookup("ri")
    if rc is None or ri is None:
        absent = [k for k, v in (("rc", rc), ("ri", ri)) if v is None]
        outcome.issue = EntityIssue(
            idrssd=idrssd,
            kind="missing_schedule",
            field=",".join(absent),
            message=f"No {' or '.join(k.upper() for k in absent)} data; statement not created",
        )
        return outcome

    try:
        with store_gate:
            previous_income = _previous_income(ctx.store, idrssd, reporting_period)
        statement = build_statement(
            idrssd,
            reporting_period,
            rc,
            ri,
            rcci=lookup("rcci"),
            rcn=lookup("rcn"),
            rib=lookup("rib"),
            previous_income=previous_income,
            config=ctx.config,
        )
        with store_gate:
            ctx.store.upsert_statement(statement)
    except Exception as exc:
        log.error("[%s] statement not created: %s", idrssd, exc)
        outcome.issue = EntityIssue(idrssd=idrssd, kind="transform_error", message=str(exc))
        return outcome

    outcome.statement_written = True
    outcome.validation_errors = len(statement.validation.errors)
    return outcome


def process_import(
    files: Mapping[str, str | Path | None],
    reporting_period: date,
    log_sink: LogSink | None = None,
    *,
    context: ImportContext | None = None,
    store: FilingStore | None = None,
    config: Settings | None = None,
) -> ImportResult:
    """Import one quarter of Call Report schedules.

    ``files`` maps schedule keys (por, rc, rcci, ri, and optionally rcm,
    rcn, rib) to paths.  Raises MissingScheduleError before any write if a
    required schedule is absent, empty or unreadable; otherwise always returns an ImportResult.

    The store and settings come from ``context`` when given, else from
    ``store`` / ``config``, else from the environment.
    """
    missing = _missing_required(files)
    if missing:
        raise MissingScheduleError(missing, SCHEDULE_LABELS)

    if context is None:
        context = ImportContext(store=store or get_store(), config=config or get_config())
    ctx = context
    if log_sink is not None:
        ctx.log_sink = log_sink

    parsed = _parse_required(ctx, files)
    ctx.store.ensure_indexes()
    maps: dict[str, dict[str, RawRecord] | None] = {
        key: index_by_entity(parsed[key].records) for key in ("rc", "rcci", "ri")
    }
    for key in OPTIONAL_SCHEDULES:
        maps[key] = _parse_optional(ctx, files, key)

    result = ImportResult(reporting_period=reporting_period)
    roster = parsed["por"].records
    ctx.emit(f"Importing {len(roster)} banks for {reporting_period.isoformat()}...")

    store_gate = threading.BoundedSemaphore(max(1, ctx.config.max_concurrent_writes))
    with ThreadPoolExecutor(max_workers=max(1, ctx.config.import_workers)) as executor:
        futures = {}
        for record in roster:
            idrssd = entity_id(record)
            if idrssd is None:
                result.issues.append(EntityIssue(kind="transform_error", message="Roster row without IDRSSD"))
                continue
            futures[executor.submit(
                _import_entity, ctx, idrssd, record, maps, reporting_period, store_gate,
            )] = idrssd

        done = 0
        for future in as_completed(futures):
            idrssd = futures[future]
            done += 1
            try:
                outcome = future.result()
            except Exception as exc:
                log.error("[%s] import failed: %s", idrssd, exc)
                result.issues.append(EntityIssue(idrssd=idrssd, kind="transform_error", message=str(exc)))
                result.entities_skipped += 1
                continue

            if outcome.institution_written:
                result.entities_created += 1
            if outcome.statement_written:
                result.statements_created += 1
                result.validation_error_count += outcome.validation_errors
            else:
                result.entities_skipped += 1
            if outcome.issue is not None:
                result.issues.append(outcome.issue)

            if ctx.config.progress_interval and done % ctx.config.progress_interval == 0:
                ctx.emit(f"  Processed {done} banks...")

    ctx.emit("Import Complete!", "success")
    ctx.emit(f"   Institutions: {result.entities_created}", "success")
    ctx.emit(f"   Financial Statements: {result.statements_created}", "success")
    ctx.emit(
        f"   Validation Errors: {result.validation_error_count}",
        "warning" if result.validation_error_count else "success",
    )
    return result


def import_directory(
    directory: str | Path,
    reporting_period: date | None = None,
    log_sink: LogSink | None = None,
    *,
    context: ImportContext | None = None,
    store: FilingStore | None = None,
    config: Settings | None = None,
) -> ImportResult:
    """Import an unpacked bulk download, reading the period from the filenames if not given."""
    files = find_required_files(directory)
    if reporting_period is None:
        stamped = next((p for p in files.values() if p is not None), None)
        reporting_period = extract_reporting_period(stamped.name) if stamped else None
    if reporting_period is None:
        missing = _missing_required(files)
        if missing:
            raise MissingScheduleError(missing, SCHEDULE_LABELS)
        raise ValueError(f"Cannot determine reporting period from files in {directory}")
    return process_import(files, reporting_period, log_sink, context=context, store=store, config=config)
