"""Tests for RC / RI / RC-N / RI-B transforms and loan categorisation."""

from ffiec_mcp.field_resolver import FieldResolver
from ffiec_mcp.mdrm_fields import CREDIT_CARD_DISCLAIMER
from ffiec_mcp.transformer import (
    categorize_loans,
    get_path,
    transform_balance_sheet,
    transform_charge_offs,
    transform_credit_quality,
    transform_income_statement,
    validation_totals,
)


def test_domestic_balance_sheet():
    record = {
        "RCON2170": 1000, "RCON2948": 900, "RCON3210": 100,
        "RCONB528": 600, "RCON2200": 800, "RCON6631": 200, "RCON6636": 600,
        "RCONB537": 50,
    }
    bs = transform_balance_sheet(record)

    assert bs.data_source == "domestic"
    assert bs.assets.total_assets == 1000
    assert bs.liabilities.total_liabilities == 900
    assert bs.equity.total_equity == 100
    assert bs.assets.earning_assets.loans_and_leases.net == 600
    assert bs.liabilities.deposits.total == 800
    assert bs.assets.earning_assets.loans_and_leases.portfolio.consumer.credit_cards == 50
    # Unreported items read as zero by default
    assert bs.equity.surplus == 0


def test_consolidated_deposits_rebuilt_from_foreign_and_domestic():
    record = {
        "RCFD2170": 5000, "RCON2170": 4200,
        "RCFD2200": 9999, "RCON2200": 3000, "RCFN2200": 1000,
        "RCON6631": 700,
    }
    bs = transform_balance_sheet(record)

    assert bs.data_source == "consolidated"
    assert bs.liabilities.deposits.total == 4000
    assert bs.liabilities.deposits.non_interest_bearing == 700
    assert bs.liabilities.deposits.interest_bearing == 0


def test_strict_balance_sheet_leaves_missing_as_none():
    bs = transform_balance_sheet({"RCON2170": 10}, strict=True)
    assert bs.assets.total_assets == 10
    assert bs.liabilities.total_liabilities is None


def test_income_statement():
    inc = transform_income_statement({
        "RIAD4107": 50, "RIAD4073": 20, "RIAD4074": 30,
        "RIAD4079": 10, "RIAD4093": 25, "RIAD4340": 5,
    })
    assert inc.interest_income.total == 50
    assert inc.interest_expense.total == 20
    assert inc.net_interest_income == 30
    assert inc.noninterest_income.total == 10
    assert inc.noninterest_expense.total == 25
    assert inc.net_income == 5
    assert inc.provision_for_credit_losses == 0


def test_credit_quality_buckets():
    record = {"RCON2170": 100, "RCON1607": 5, "RCON1609": 1, "RCON1608": 2, "RCON1227": 3}
    cq = transform_credit_quality(record)

    assert cq.past_due_30_to_89.ci == 5
    assert cq.past_due_30_to_89.total == 6
    assert cq.past_due_90_plus.total == 2
    assert cq.nonaccrual.total == 3
    assert cq.total_noncurrent == 5


def test_credit_quality_uses_supplied_basis():
    record = {"RCFD1607": 9, "RCON1607": 5}
    resolver = FieldResolver({"RCFD2170": 100, **record})
    assert transform_credit_quality(record, resolver).past_due_30_to_89.ci == 9


def test_charge_offs_net():
    co = transform_charge_offs({"RIAD4635": 30, "RIAD4605": 10, "RIAD4645": 12})
    assert co.charge_offs.total == 30
    assert co.charge_offs.ci == 12
    assert co.recoveries.total == 10
    assert co.net_charge_offs == 20


def test_categorize_loans():
    bs = transform_balance_sheet({
        "RCON2170": 1000,
        "RCONB537": 50,       # credit cards
        "RCONK137": 25,       # auto
        "RCON5367": 100,      # 1-4 family first liens
        "RCON1763": 200,      # C&I
        "RCONF160": 70,       # owner-occupied CRE
        "RCON2746": 999,      # construction aggregate, not categorised
    })
    categories = categorize_loans(bs.assets.earning_assets.loans_and_leases.portfolio)

    assert categories.consumer.total == 175
    assert categories.consumer.credit_card == 50
    assert categories.consumer.mortgage == 100
    assert categories.business.total == 270
    assert categories.business.ci == 200
    assert categories.business.cre == 70
    assert categories.disclaimers == [CREDIT_CARD_DISCLAIMER]


def test_no_disclaimer_without_credit_cards():
    bs = transform_balance_sheet({"RCON2170": 10, "RCON1763": 5})
    categories = categorize_loans(bs.assets.earning_assets.loans_and_leases.portfolio)
    assert categories.disclaimers == []


def test_validation_totals():
    resolver = FieldResolver({"RCON2170": 10, "RCON1410": 4, "RCONB528": 8, "RCON3123": 1})
    totals = validation_totals(resolver)
    assert totals.total_real_estate_loans == 4
    assert totals.total_loans_gross == 8
    assert totals.allowance_for_losses == 1


def test_get_path_model_and_document():
    bs = transform_balance_sheet({"RCON2170": 10})
    assert get_path(bs, "assets.total_assets") == 10
    assert get_path({"a": {"b": 2}}, "a.b") == 2
    assert get_path({"a": None}, "a.b") is None
