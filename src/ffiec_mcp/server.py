"""FFIEC-MCP: MCP server for Call Report financials and peer analytics.

Tool hierarchy
──────────────
  Import
    1. import_call_reports      - load one quarter's bulk schedules into the store

  Financials
    2. get_bank_financials      - institution + one stored statement
    3. get_peer_comparison      - stored peer analysis for one quarter

  Peer analytics
    4. run_peer_analysis        - (re)compute peers, averages and rankings
    5. refresh_operating_leverage - recompute QoQ operating leverage
"""

from __future__ import annotations

from datetime import date

from fastmcp import FastMCP

from ffiec_mcp import peer_analysis
from ffiec_mcp.db import get_store
from ffiec_mcp.errors import FFIECError
from ffiec_mcp.importer import import_directory

mcp = FastMCP(name="FFIEC-MCP")


def _parse_period(reporting_period: str | None) -> date | None:
    """Accept '2025-06-30' (ISO) or '06302025' (FFIEC filename stamp)."""
    if not reporting_period:
        return None
    text = reporting_period.strip()
    if len(text) == 8 and text.isdigit():
        return date(int(text[4:8]), int(text[0:2]), int(text[2:4]))
    return date.fromisoformat(text)


# ═══════════════════════════════════════════════════════════════════════════
#  IMPORT
# ═══════════════════════════════════════════════════════════════════════════


@mcp.tool()
def import_call_reports(directory: str, reporting_period: str | None = None) -> dict:
    """Import an unpacked FFIEC Call Report bulk download.

    Args:
        directory: folder holding the POR, RC, RCCI and RI schedule files
            (RC-M, RC-N and RI-B are picked up when present)
        reporting_period: quarter end, e.g. '2025-06-30'. None = read from
            the MMDDYYYY stamp in the file names.

    Returns counts of institutions, statements, validation errors and
    skipped banks, plus per-bank issues.
    """
    messages: list[dict] = []
    try:
        result = import_directory(
            directory,
            _parse_period(reporting_period),
            lambda message, level: messages.append({"level": level, "message": message}),
        )
    except (FFIECError, ValueError) as exc:
        return {"directory": directory, "error": str(exc), "log": messages}
    return {**result.model_dump(mode="json"), "log": messages}


# ═══════════════════════════════════════════════════════════════════════════
#  FINANCIALS
# ═══════════════════════════════════════════════════════════════════════════


@mcp.tool()
def get_bank_financials(idrssd: str, reporting_period: str | None = None) -> dict:
    """Get a bank's stored Call Report statement.

    Args:
        idrssd: the bank's RSSD id (e.g. '480228')
        reporting_period: quarter end, e.g. '2025-06-30'. None = latest.

    Returns the institution record and the statement: balance sheet,
    income statement (year-to-date), ratios, validation, loan categories
    and, where imported, credit quality and charge-offs.
    """
    try:
        store = get_store()
        statement = store.get_statement(idrssd, _parse_period(reporting_period))
    except (FFIECError, ValueError) as exc:
        return {"idrssd": idrssd, "error": str(exc)}
    if statement is None:
        return {"idrssd": idrssd, "error": "No financial statement found"}
    statement["reporting_period"] = statement["reporting_period"].date().isoformat()
    return {"institution": store.get_institution(idrssd), "statement": statement}


@mcp.tool()
def get_peer_comparison(idrssd: str, reporting_period: str | None = None) -> dict:
    """Get a bank's peer group, peer averages and population rankings.

    Args:
        idrssd: the bank's RSSD id
        reporting_period: quarter end. None = latest.

    Reads the stored analysis; if none has been generated yet, it is
    computed on the fly (not saved).  Rankings are 1 = best, with
    efficiency_ratio ranked lowest-first.
    """
    try:
        store = get_store()
        statement = store.get_statement(idrssd, _parse_period(reporting_period))
    except (FFIECError, ValueError) as exc:
        return {"idrssd": idrssd, "error": str(exc)}
    if statement is None:
        return {"idrssd": idrssd, "error": "No financial statement found"}

    period = statement["reporting_period"].date()
    if statement.get("peer_analysis"):
        return {"idrssd": idrssd, "reporting_period": period.isoformat(), **statement["peer_analysis"]}

    result = peer_analysis.generate_peer_analysis(idrssd, period, store=store)
    if result is None or not result.periods:
        return {"idrssd": idrssd, "reporting_period": period.isoformat(), "error": "No peers found"}
    return result.periods[0].model_dump(mode="json")


# ═══════════════════════════════════════════════════════════════════════════
#  PEER ANALYTICS
# ═══════════════════════════════════════════════════════════════════════════


@mcp.tool()
def run_peer_analysis(
    idrssd: str | None = None,
    reporting_period: str | None = None,
    top: int = 100,
) -> dict:
    """Generate and save peer analysis.

    Args:
        idrssd: one bank's RSSD id. None = the `top` largest banks.
        reporting_period: a single quarter. None = every stored quarter.
        top: number of banks (by latest total assets) when idrssd is None
    """
    try:
        store = get_store()
        period = _parse_period(reporting_period)
    except (FFIECError, ValueError) as exc:
        return {"idrssd": idrssd, "error": str(exc)}
    if idrssd is None:
        return peer_analysis.generate_all_peer_analyses(top, period, store)

    result = peer_analysis.generate_peer_analysis(idrssd, period, store=store)
    if result is None:
        return {"idrssd": idrssd, "error": "No financial statements found"}
    saved = peer_analysis.save_peer_analysis(result, store)
    return {"idrssd": idrssd, "name": result.name, "periods_saved": saved}


@mcp.tool()
def refresh_operating_leverage(idrssd: str | None = None) -> dict:
    """Recompute quarter-over-quarter operating leverage on stored statements.

    Args:
        idrssd: one bank's RSSD id. None = every bank in the store.
    """
    try:
        store = get_store()
    except FFIECError as exc:
        return {"idrssd": idrssd, "error": str(exc)}
    updated = peer_analysis.refresh_operating_leverage(store, idrssd)
    return {"idrssd": idrssd, "statements_updated": updated}


# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import sys

    # python -m ffiec_mcp.server --sse   for remote hosting; STDIO otherwise
    if "--sse" in sys.argv:
        mcp.run(transport="sse")
    else:
        mcp.run()
