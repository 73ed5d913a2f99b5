"""Tests for annualization, ratio math and operating leverage."""

from datetime import date

import pytest

from ffiec_mcp.models import (
    Assets,
    BalanceSheet,
    ChargeOffBreakdown,
    ChargeOffs,
    EarningAssets,
    Equity,
    IncomeStatement,
    LoansAndLeases,
    NoninterestExpense,
    NoninterestIncome,
    Securities,
)
from ffiec_mcp.ratios import (
    OPERATING_LEVERAGE_CAP,
    annualization_factor,
    compute_operating_leverage,
    compute_ratios,
    earning_assets,
)


def _bs(total_assets=1_000_000, total_equity=100_000, loans=600_000, securities=200_000):
    return BalanceSheet(
        assets=Assets(
            total_assets=total_assets,
            earning_assets=EarningAssets(
                loans_and_leases=LoansAndLeases(net=loans),
                securities=Securities(available_for_sale=securities),
                interest_bearing_bank_balances=50_000,
                fed_funds_sold_and_repos=0,
            ),
        ),
        equity=Equity(total_equity=total_equity),
    )


def _inc(net_income=2_500, nii=8_000, nonint_income=2_000, nonint_expense=6_000):
    return IncomeStatement(
        net_income=net_income,
        net_interest_income=nii,
        noninterest_income=NoninterestIncome(total=nonint_income),
        noninterest_expense=NoninterestExpense(total=nonint_expense),
    )


@pytest.mark.parametrize("month,factor", [(3, 4.0), (6, 2.0), (9, 4.0 / 3.0), (12, 1.0)])
def test_annualization_factor(month, factor):
    day = 31 if month in (3, 12) else 30
    assert annualization_factor(date(2025, month, day)) == pytest.approx(factor)


def test_roa_example_first_quarter():
    ratios = compute_ratios(_bs(), _inc(net_income=2_500), date(2025, 3, 31))
    assert ratios.roa == pytest.approx(1.00)


def test_roa_is_annualized_by_quarter():
    bs, inc = _bs(), _inc(net_income=7_500)
    assert compute_ratios(bs, inc, date(2025, 9, 30)).roa == pytest.approx(1.00)
    assert compute_ratios(bs, inc, date(2025, 12, 31)).roa == pytest.approx(0.75)


def test_roe_and_leverage():
    ratios = compute_ratios(_bs(), _inc(net_income=5_000), date(2025, 6, 30))
    assert ratios.roe == pytest.approx(10.0)
    assert ratios.tier1_leverage_ratio == pytest.approx(10.0)


def test_efficiency_ratio_not_annualized():
    ratios = compute_ratios(_bs(), _inc(nii=8_000, nonint_income=2_000, nonint_expense=6_000), date(2025, 3, 31))
    assert ratios.efficiency_ratio == pytest.approx(60.0)


def test_net_interest_margin_over_earning_assets():
    bs = _bs()
    assert earning_assets(bs) == 850_000
    ratios = compute_ratios(bs, _inc(nii=8_500), date(2025, 12, 31))
    assert ratios.net_interest_margin == pytest.approx(1.0)


def test_zero_denominators_are_undefined():
    ratios = compute_ratios(
        _bs(total_assets=0, total_equity=0, loans=0, securities=0),
        _inc(nii=0, nonint_income=0),
        date(2025, 3, 31),
    )
    assert ratios.roa is None
    assert ratios.roe is None
    assert ratios.efficiency_ratio is None
    assert ratios.tier1_leverage_ratio is None


def test_net_charge_off_ratio():
    charge_offs = ChargeOffs(
        charge_offs=ChargeOffBreakdown(total=2_000),
        recoveries=ChargeOffBreakdown(total=500),
        net_charge_offs=1_500,
    )
    ratios = compute_ratios(_bs(loans=600_000), _inc(), date(2025, 6, 30), charge_offs)
    assert ratios.net_charge_off_ratio == pytest.approx(0.5)
    assert compute_ratios(_bs(), _inc(), date(2025, 6, 30)).net_charge_off_ratio is None


def test_operating_leverage():
    previous = _inc(nii=800, nonint_income=200, nonint_expense=500)
    current = _inc(nii=880, nonint_income=220, nonint_expense=525)
    # revenue +10%, expense +5%
    assert compute_operating_leverage(current, previous) == pytest.approx(2.0)


def test_operating_leverage_flat_expenses():
    previous = _inc(nii=800, nonint_income=200, nonint_expense=500)
    assert compute_operating_leverage(_inc(nii=900, nonint_income=200, nonint_expense=500), previous) == OPERATING_LEVERAGE_CAP
    assert compute_operating_leverage(_inc(nii=700, nonint_income=200, nonint_expense=500), previous) == -OPERATING_LEVERAGE_CAP
    assert compute_operating_leverage(previous, previous) == 0.0


def test_operating_leverage_capped():
    previous = _inc(nii=800, nonint_income=200, nonint_expense=100_000)
    current = _inc(nii=1_600, nonint_income=400, nonint_expense=100_020)
    assert compute_operating_leverage(current, previous) == OPERATING_LEVERAGE_CAP


def test_operating_leverage_needs_positive_base():
    previous = _inc(nii=0, nonint_income=0, nonint_expense=500)
    assert compute_operating_leverage(_inc(), previous) is None
