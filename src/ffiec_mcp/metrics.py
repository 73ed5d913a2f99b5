"""Metric catalogue shared by peer averages and rankings.

Each metric maps to the dotted path of its value in a stored statement
document, so both consumers can project only that path.
"""

from __future__ import annotations

import math
from typing import Any

from ffiec_mcp.transformer import get_path

METRIC_PATHS: dict[str, str] = {
    "total_assets": "balance_sheet.assets.total_assets",
    "total_loans": "balance_sheet.assets.earning_assets.loans_and_leases.net",
    "total_deposits": "balance_sheet.liabilities.deposits.total",
    "total_equity": "balance_sheet.equity.total_equity",
    "net_income": "income_statement.net_income",
    "net_interest_income": "income_statement.net_interest_income",
    "noninterest_income": "income_statement.noninterest_income.total",
    "noninterest_expense": "income_statement.noninterest_expense.total",
    "roe": "ratios.roe",
    "roa": "ratios.roa",
    "nim": "ratios.net_interest_margin",
    "efficiency_ratio": "ratios.efficiency_ratio",
    "operating_leverage": "ratios.operating_leverage",
}

METRICS: tuple[str, ...] = tuple(METRIC_PATHS)

# Ranked ascending: a lower efficiency ratio means less expense per revenue
LOWER_IS_BETTER = frozenset({"efficiency_ratio"})


def metric_value(value: Any) -> float | None:
    """A usable metric value, or None for missing / non-numeric / NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def extract_metric(doc: Any, metric: str) -> float | None:
    """Read one catalogue metric from a statement document or model."""
    return metric_value(get_path(doc, METRIC_PATHS[metric]))


def extract_metrics(doc: Any, metrics=METRICS) -> dict[str, float | None]:
    return {m: extract_metric(doc, m) for m in metrics}
