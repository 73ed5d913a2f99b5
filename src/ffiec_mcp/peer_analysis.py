"""Peer analysis batch: peers, peer averages and rankings per bank-quarter.

Runs against statements already in the store, after a quarter has been
imported for the whole population:

  generate_peer_analysis()      - one bank, every stored quarter (or one)
  save_peer_analysis()          - $set peer_analysis on each statement
  generate_all_peer_analyses()  - top N banks by latest total assets
  refresh_operating_leverage()  - recompute QoQ operating leverage
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import pandas as pd

from ffiec_mcp.config import get_config
from ffiec_mcp.db import FilingStore, get_store
from ffiec_mcp.metrics import METRICS, extract_metrics
from ffiec_mcp.models import (
    IncomeStatement,
    PeerAnalysis,
    PeerAnalysisResult,
    PeriodPeerAnalysis,
)
from ffiec_mcp.peers import peer_averages, select_peers
from ffiec_mcp.ranking import rank_entity
from ffiec_mcp.ratios import compute_operating_leverage

log = logging.getLogger(__name__)


def generate_peer_analysis(
    idrssd: str,
    period: date | None = None,
    *,
    store: FilingStore | None = None,
    n: int | None = None,
) -> PeerAnalysisResult | None:
    """Peer analysis for each stored quarter of a bank (or just ``period``).

    Quarters without any peer are left out.  Returns None when the bank has
    no statements at all.
    """
    store = store or get_store()
    n = n if n is not None else get_config().peer_count

    statements = store.statement_periods(idrssd, [period] if period else None)
    if not statements:
        log.warning("[%s] no financial statements found", idrssd)
        return None

    name = store.institution_names([idrssd]).get(idrssd)
    result = PeerAnalysisResult(idrssd=idrssd, name=name, generated_at=datetime.now(timezone.utc))
    log.info("[%s] %s: %d periods", idrssd, name or idrssd, len(statements))

    for reporting_period, total_assets in statements:
        peers = select_peers(store, idrssd, total_assets, reporting_period, n)
        if not peers.peer_ids:
            log.info("[%s] %s: no peers found, skipped", idrssd, reporting_period)
            continue

        own = store.get_statement(idrssd, reporting_period)
        result.periods.append(PeriodPeerAnalysis(
            reporting_period=reporting_period,
            peers=peers,
            peer_averages=peer_averages(store, peers.peer_ids, reporting_period),
            rankings=rank_entity(store, idrssd, reporting_period),
            bank_metrics=extract_metrics(own, METRICS),
        ))

    return result


def save_peer_analysis(result: PeerAnalysisResult, store: FilingStore | None = None) -> int:
    """Attach each period's analysis to its statement. Returns periods written."""
    store = store or get_store()
    for period in result.periods:
        store.set_peer_analysis(
            result.idrssd,
            period.reporting_period,
            PeerAnalysis(
                peers=period.peers,
                peer_averages=period.peer_averages,
                rankings=period.rankings,
                generated_at=result.generated_at,
            ),
        )
    return len(result.periods)


def largest_banks(store: FilingStore, top_n: int) -> list[str]:
    """Bank ids ordered by total assets at each bank's latest quarter, largest first."""
    rows = store.latest_assets()
    if not rows:
        return []
    frame = pd.DataFrame(rows)
    latest = (
        frame.sort_values("reporting_period", ascending=False, kind="mergesort")
        .drop_duplicates("idrssd", keep="first")
        .sort_values("total_assets", ascending=False, kind="mergesort", na_position="last")
    )
    return latest["idrssd"].head(top_n).tolist()


def generate_all_peer_analyses(
    top_n: int | None = None,
    period: date | None = None,
    store: FilingStore | None = None,
) -> dict:
    """Generate and save peer analysis for the top N banks by assets.

    A failure on one bank is logged and counted; the batch carries on.
    """
    store = store or get_store()
    top_n = top_n if top_n is not None else get_config().top_n

    banks = largest_banks(store, top_n)
    log.info("Processing top %d banks (by latest total assets)", len(banks))

    processed = errors = 0
    for i, idrssd in enumerate(banks, 1):
        try:
            result = generate_peer_analysis(idrssd, period, store=store)
            if result is not None and result.periods:
                save_peer_analysis(result, store)
                processed += 1
                log.info("  ✓ %s (%d/%d)", result.name or idrssd, i, len(banks))
        except Exception as exc:
            errors += 1
            log.error("  ✗ %s: %s", idrssd, exc)

    log.info("Peer analysis complete: %d processed, %d errors", processed, errors)
    return {"banks": len(banks), "processed": processed, "errors": errors}


def refresh_operating_leverage(store: FilingStore | None = None, idrssd: str | None = None) -> int:
    """Recompute operating leverage between each bank's consecutive statements.

    The earliest statement of a bank has no predecessor and is left as is.
    Returns the number of statements updated.
    """
    store = store or get_store()
    ids = [idrssd] if idrssd else store.entity_ids()
    updated = 0
    for bank in ids:
        history = store.income_history(bank)
        for previous, current in zip(history, history[1:]):
            if not previous.get("income_statement") or not current.get("income_statement"):
                continue
            leverage = compute_operating_leverage(
                IncomeStatement.model_validate(current["income_statement"]),
                IncomeStatement.model_validate(previous["income_statement"]),
            )
            store.set_operating_leverage(bank, current["reporting_period"], leverage)
            updated += 1
    log.info("Operating leverage refreshed on %d statements (%d banks)", updated, len(ids))
    return updated
