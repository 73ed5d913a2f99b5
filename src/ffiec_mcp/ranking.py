"""Population-wide rankings of one bank per metric for one quarter.

Every bank with a value for the metric at that quarter is ranked, not just
the peer group.  Higher is better except for LOWER_IS_BETTER metrics.

    rank        1-based position in the sorted population
    total       number of banks with a value
    percentile  round-half-up((total - rank + 1) / total * 100)

Only ``{idrssd, <metric path>}`` is projected from the store per metric.
Equal values keep the store's order (stable sort), so ties get
consecutive ranks rather than a shared one.
"""

from __future__ import annotations

import logging
import math
from datetime import date

import pandas as pd

from ffiec_mcp.db import FilingStore
from ffiec_mcp.metrics import LOWER_IS_BETTER, METRIC_PATHS, METRICS, metric_value
from ffiec_mcp.models import MetricRanking

log = logging.getLogger(__name__)


def percentile(rank: int, total: int) -> int:
    """Share of the population at or below this rank, rounded half up."""
    return math.floor((total - rank + 1) / total * 100 + 0.5)


def rank_metric(store: FilingStore, idrssd: str, period: date, metric: str) -> MetricRanking:
    rows = [
        (entity, metric_value(value))
        for entity, value in store.project_metric(period, METRIC_PATHS[metric])
    ]
    frame = pd.DataFrame(rows, columns=["idrssd", "value"]).dropna(subset=["value"])
    if frame.empty or not (frame["idrssd"] == idrssd).any():
        return MetricRanking()

    ordered = (
        frame.astype({"value": float})
        .sort_values("value", ascending=metric in LOWER_IS_BETTER, kind="mergesort")
        .reset_index(drop=True)
    )
    position = int(ordered.index[ordered["idrssd"] == idrssd][0])
    rank, total = position + 1, len(ordered)
    return MetricRanking(
        rank=rank,
        total=total,
        percentile=percentile(rank, total),
        value=float(ordered.at[position, "value"]),
    )


def rank_entity(
    store: FilingStore,
    idrssd: str,
    period: date,
    metrics=METRICS,
) -> dict[str, MetricRanking]:
    """Rank one bank against every bank reporting each metric at ``period``."""
    rankings = {metric: rank_metric(store, idrssd, period, metric) for metric in metrics}
    log.debug(
        "[%s] %s: ranked on %d/%d metrics",
        idrssd, period, sum(r.rank is not None for r in rankings.values()), len(rankings),
    )
    return rankings
