"""Peer selection by asset size and peer-group averages.

A bank's peers for a quarter are the ``n`` banks with the next-larger total
assets and the ``n`` banks with the next-smaller total assets in that same
quarter, closest first.  Ties with the target's own assets are in neither
side.  Near the top or bottom of the population one side is simply shorter.
"""

from __future__ import annotations

import logging
from datetime import date

import pandas as pd

from ffiec_mcp.db import FilingStore
from ffiec_mcp.metrics import METRIC_PATHS, METRICS, metric_value
from ffiec_mcp.models import PeerSet

log = logging.getLogger(__name__)


def select_peers(
    store: FilingStore,
    idrssd: str,
    total_assets: float | None,
    period: date,
    n: int = 10,
) -> PeerSet:
    """Up to n strictly-larger and n strictly-smaller banks, nearest first."""
    if total_assets is None:
        return PeerSet()
    larger = store.nearest_by_assets(idrssd, total_assets, period, n, larger=True)
    smaller = store.nearest_by_assets(idrssd, total_assets, period, n, larger=False)
    log.debug("[%s] %s: %d larger, %d smaller peers", idrssd, period, len(larger), len(smaller))
    return PeerSet.from_sides(larger, smaller)


def peer_averages(
    store: FilingStore,
    peer_ids: list[str],
    period: date,
    metrics=METRICS,
) -> dict[str, float | None]:
    """Arithmetic mean of each metric over the peers that report it.

    Missing and non-numeric values are left out of both the sum and the
    count; a metric no peer reports averages to None.
    """
    averages: dict[str, float | None] = {m: None for m in metrics}
    if not peer_ids:
        return averages

    rows = store.project_metrics(peer_ids, period, [METRIC_PATHS[m] for m in metrics])
    if not rows:
        return averages

    frame = pd.DataFrame(rows)
    for metric in metrics:
        values = frame[METRIC_PATHS[metric]].map(metric_value).dropna()
        if not values.empty:
            averages[metric] = float(values.astype(float).mean())
    return averages
