"""Profitability, margin and leverage ratios for one bank-quarter.

Income statement figures in a Call Report are year-to-date.  Before they
are divided by a point-in-time balance, they are annualized by the
quarter-end month: March ×4, June ×2, September ×4/3, December ×1.

Ratios are expressed in percent.  A ratio whose denominator is not
positive is left as None rather than divided by zero.
"""

from __future__ import annotations

from datetime import date

from ffiec_mcp.models import BalanceSheet, ChargeOffs, IncomeStatement, Ratios

_ANNUALIZATION = {3: 4.0, 6: 2.0, 9: 4.0 / 3.0, 12: 1.0}

# Operating leverage is capped so a near-flat expense base doesn't explode it
OPERATING_LEVERAGE_CAP = 999.0
_FLAT_GROWTH_PCT = 0.01


def annualization_factor(period: date | None) -> float:
    """Multiplier turning a YTD flow at this quarter-end into a full-year figure."""
    if period is None:
        return 1.0
    return _ANNUALIZATION.get(period.month, 1.0)


def _div(a: float | None, b: float | None) -> float | None:
    """Percentage a / b × 100 - None if either operand is missing or b ≤ 0."""
    if a is None or b is None or b <= 0:
        return None
    return a / b * 100


def _total(*values: float | None) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present)


def earning_assets(bs: BalanceSheet) -> float | None:
    """Net loans + all securities + interest-bearing balances + fed funds sold.

    Point-in-time balances, not the average balances a UBPR NIM uses.
    """
    ea = bs.assets.earning_assets
    return _total(
        ea.loans_and_leases.net,
        ea.securities.available_for_sale,
        ea.securities.held_to_maturity,
        ea.securities.equity,
        ea.interest_bearing_bank_balances,
        ea.fed_funds_sold_and_repos,
    )


def _annualize(value: float | None, factor: float) -> float | None:
    return None if value is None else value * factor


def compute_ratios(
    bs: BalanceSheet,
    inc: IncomeStatement,
    period: date | None = None,
    charge_offs: ChargeOffs | None = None,
) -> Ratios:
    """Derive the statement's ratios.

    efficiency_ratio      nonint expense / (NII + nonint income)   - lower is better
    roa                   annualized net income / total assets
    roe                   annualized net income / total equity
    net_interest_margin   annualized NII / earning assets
    tier1_leverage_ratio  total equity / total assets (Tier 1 capital proxy)
    net_charge_off_ratio  annualized net charge-offs / net loans (RI-B only)
    """
    factor = annualization_factor(period)
    net_income = _annualize(inc.net_income, factor)
    nii = _annualize(inc.net_interest_income, factor)
    total_assets = bs.assets.total_assets
    total_equity = bs.equity.total_equity

    revenue = None
    if inc.net_interest_income is not None and inc.noninterest_income.total is not None:
        revenue = inc.net_interest_income + inc.noninterest_income.total

    ratios = Ratios(
        efficiency_ratio=_div(inc.noninterest_expense.total, revenue),
        roa=_div(net_income, total_assets),
        roe=_div(net_income, total_equity),
        net_interest_margin=_div(nii, earning_assets(bs)),
        tier1_leverage_ratio=_div(total_equity, total_assets),
    )

    if charge_offs is not None:
        ratios.net_charge_off_ratio = _div(
            _annualize(charge_offs.net_charge_offs, factor),
            bs.assets.earning_assets.loans_and_leases.net,
        )

    return ratios


# ═══════════════════════════════════════════════════════════════════════════
#  Operating leverage (quarter over quarter)
# ═══════════════════════════════════════════════════════════════════════════

def _revenue_and_expense(inc: IncomeStatement) -> tuple[float, float]:
    revenue = (inc.net_interest_income or 0) + (inc.noninterest_income.total or 0)
    return revenue, inc.noninterest_expense.total or 0


def compute_operating_leverage(current: IncomeStatement, previous: IncomeStatement) -> float | None:
    """Revenue growth % / expense growth % between two consecutive statements.

    > 1 means revenue is outgrowing expenses.  Returns None when the
    previous quarter has no positive revenue or expense base.
    """
    cur_rev, cur_exp = _revenue_and_expense(current)
    prev_rev, prev_exp = _revenue_and_expense(previous)
    if prev_rev <= 0 or prev_exp <= 0:
        return None

    revenue_growth = (cur_rev - prev_rev) / prev_rev * 100
    expense_growth = (cur_exp - prev_exp) / prev_exp * 100

    if abs(expense_growth) < _FLAT_GROWTH_PCT:
        if revenue_growth > _FLAT_GROWTH_PCT:
            return OPERATING_LEVERAGE_CAP
        if revenue_growth < -_FLAT_GROWTH_PCT:
            return -OPERATING_LEVERAGE_CAP
        return 0.0

    leverage = revenue_growth / expense_growth
    return max(-OPERATING_LEVERAGE_CAP, min(OPERATING_LEVERAGE_CAP, leverage))
