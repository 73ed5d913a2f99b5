"""Accounting-identity checks on a transformed statement.

Mismatches are recorded on the statement, never raised: a bank whose
filing does not balance is still imported, flagged, and counted.
"""

from __future__ import annotations

from ffiec_mcp.models import (
    BalanceSheet,
    IdentityCheck,
    IncomeStatement,
    StatementValidation,
    ValidationIssue,
)


# Call Report amounts are whole thousands; anything under one unit is rounding
DEFAULT_TOLERANCE = 1.0


def _check(left: float | None, right: float | None, tolerance: float) -> IdentityCheck:
    if left is None or right is None:
        return IdentityCheck(is_valid=False, measured_left=left, measured_right=right)
    difference = abs(left - right)
    return IdentityCheck(
        is_valid=difference < tolerance,
        measured_left=left,
        measured_right=right,
        difference=difference,
    )


def _add(a: float | None, b: float | None) -> float | None:
    if a is None or b is None:
        return None
    return a + b


def check_balance_sheet(bs: BalanceSheet, tolerance: float = DEFAULT_TOLERANCE) -> IdentityCheck:
    """Total assets vs total liabilities + total equity."""
    return _check(
        bs.assets.total_assets,
        _add(bs.liabilities.total_liabilities, bs.equity.total_equity),
        tolerance,
    )


def check_income_statement(inc: IncomeStatement, tolerance: float = DEFAULT_TOLERANCE) -> IdentityCheck:
    """Reported net interest income vs interest income − interest expense."""
    calculated = None
    if inc.interest_income.total is not None and inc.interest_expense.total is not None:
        calculated = inc.interest_income.total - inc.interest_expense.total
    return _check(inc.net_interest_income, calculated, tolerance)


def validate_statement(
    bs: BalanceSheet,
    inc: IncomeStatement,
    tolerance: float = DEFAULT_TOLERANCE,
) -> StatementValidation:
    """Run both identities and collect structured issues for the failures."""
    bs_check = check_balance_sheet(bs, tolerance)
    is_check = check_income_statement(inc, tolerance)

    errors: list[ValidationIssue] = []
    if not bs_check.is_valid:
        errors.append(ValidationIssue(
            kind="balance_sheet",
            field="assets.total_assets",
            difference=bs_check.difference,
            message=(
                f"Balance sheet doesn't balance: Assets={bs_check.measured_left}, "
                f"Liab+Equity={bs_check.measured_right}"
            ),
        ))
    if not is_check.is_valid:
        errors.append(ValidationIssue(
            kind="income_statement",
            field="net_interest_income",
            difference=is_check.difference,
            message=(
                f"Income statement NII mismatch: Calculated={is_check.measured_right}, "
                f"Reported={is_check.measured_left}"
            ),
        ))

    return StatementValidation(
        is_valid=not errors,
        balance_sheet=bs_check,
        income_statement=is_check,
        errors=errors,
    )
