"""Raw Call Report records → canonical statement models.

All functions here are pure: they read a bank's merged schedule record and
return pydantic models, without touching the store.

  transform_balance_sheet()   - Schedule RC merged with RC-C Part I
  transform_income_statement() - Schedule RI
  transform_credit_quality()  - Schedule RC-N (optional)
  transform_charge_offs()     - Schedule RI-B (optional)
  categorize_loans()          - consumer / business split of the portfolio
  validation_totals()         - reported loan summary lines
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ffiec_mcp.field_resolver import FieldResolver, numeric
from ffiec_mcp.mdrm_fields import (
    BALANCE_SHEET_FIELDS,
    CHARGE_OFF_FIELDS,
    CREDIT_QUALITY_FIELDS,
    INCOME_STATEMENT_FIELDS,
    LOAN_CATEGORY_MAP,
    LOAN_PORTFOLIO_FIELDS,
    RECONSTRUCTED_DEPOSIT_PATHS,
    RECOVERY_FIELDS,
    VALIDATION_TOTAL_FIELDS,
    FieldSpec,
    ReportingBasis,
)
from ffiec_mcp.models import (
    BalanceSheet,
    ChargeOffBreakdown,
    ChargeOffs,
    CreditQuality,
    DelinquencyBreakdown,
    IncomeStatement,
    LoanCategories,
    LoanPortfolio,
    ValidationTotals,
)


# ═══════════════════════════════════════════════════════════════════════════
#  Path helpers
# ═══════════════════════════════════════════════════════════════════════════

def _set_path(tree: dict, path: str, value: Any) -> None:
    parts = path.split(".")
    node = tree
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value


def get_path(obj: BaseModel | dict | None, path: str) -> Any:
    """Read a dotted path from a model or a plain (Mongo) document."""
    node: Any = obj
    for part in path.split("."):
        if node is None:
            return None
        if isinstance(node, dict):
            node = node.get(part)
        else:
            node = getattr(node, part, None)
    return node


def _sum_present(values: list[float | None], strict: bool) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None if strict else 0
    return sum(present)


def _resolver_for(record: dict[str, Any], resolver: FieldResolver | None, strict: bool) -> FieldResolver:
    if resolver is not None:
        return resolver
    return FieldResolver(record, strict=strict)


# ═══════════════════════════════════════════════════════════════════════════
#  Balance sheet
# ═══════════════════════════════════════════════════════════════════════════

def transform_loan_portfolio(resolver: FieldResolver) -> LoanPortfolio:
    """Decompose loans into the fixed RC-C taxonomy."""
    tree: dict = {}
    for path, spec in LOAN_PORTFOLIO_FIELDS.items():
        _set_path(tree, path, resolver.resolve_spec(spec))
    return LoanPortfolio.model_validate(tree)


def transform_balance_sheet(
    record: dict[str, Any],
    resolver: FieldResolver | None = None,
    *,
    strict: bool = False,
) -> BalanceSheet:
    """Map a bank's RC + RC-C record into a BalanceSheet.

    For consolidated (RCFD) filers the three deposit lines are rebuilt as
    RCFN + RCON, because the schema has no consolidated deposit items.
    """
    resolver = _resolver_for(record, resolver, strict)
    consolidated = resolver.basis is ReportingBasis.CONSOLIDATED

    tree: dict = {}
    for path, spec in BALANCE_SHEET_FIELDS.items():
        if consolidated and path in RECONSTRUCTED_DEPOSIT_PATHS:
            value = resolver.sum_bases(spec.code, ReportingBasis.FOREIGN, ReportingBasis.DOMESTIC)
        else:
            value = resolver.resolve_spec(spec)
        _set_path(tree, path, value)

    portfolio = transform_loan_portfolio(resolver)
    _set_path(tree, "assets.earning_assets.loans_and_leases.portfolio", portfolio.model_dump())
    tree["data_source"] = resolver.basis.label
    return BalanceSheet.model_validate(tree)


# ═══════════════════════════════════════════════════════════════════════════
#  Income statement
# ═══════════════════════════════════════════════════════════════════════════

def transform_income_statement(
    record: dict[str, Any],
    *,
    strict: bool = False,
) -> IncomeStatement:
    """Map a bank's RI record into an IncomeStatement (year-to-date figures)."""
    resolver = FieldResolver(record, strict=strict)
    tree: dict = {}
    for path, spec in INCOME_STATEMENT_FIELDS.items():
        _set_path(tree, path, resolver.resolve_income(spec))
    return IncomeStatement.model_validate(tree)


# ═══════════════════════════════════════════════════════════════════════════
#  Optional schedules
# ═══════════════════════════════════════════════════════════════════════════

def _delinquency(resolver: FieldResolver, fields: dict[str, FieldSpec]) -> DelinquencyBreakdown:
    values = {name: resolver.resolve_spec(spec) for name, spec in fields.items()}
    values["total"] = _sum_present(list(values.values()), resolver.strict)
    return DelinquencyBreakdown.model_validate(values)


def transform_credit_quality(
    record: dict[str, Any],
    resolver: FieldResolver | None = None,
    *,
    strict: bool = False,
) -> CreditQuality:
    """Past-due and nonaccrual balances from RC-N, merged with RC for the basis."""
    resolver = _resolver_for(record, resolver, strict)
    buckets = {
        bucket: _delinquency(resolver, fields)
        for bucket, fields in CREDIT_QUALITY_FIELDS.items()
    }
    noncurrent = _sum_present(
        [buckets["past_due_90_plus"].total, buckets["nonaccrual"].total], resolver.strict,
    )
    return CreditQuality(**buckets, total_noncurrent=noncurrent)


def _charge_off_breakdown(resolver: FieldResolver, fields: dict[str, FieldSpec]) -> ChargeOffBreakdown:
    return ChargeOffBreakdown.model_validate(
        {name: resolver.resolve_income(spec) for name, spec in fields.items()}
    )


def transform_charge_offs(record: dict[str, Any], *, strict: bool = False) -> ChargeOffs:
    """Charge-offs and recoveries from RI-B Part I (year-to-date)."""
    resolver = FieldResolver(record, strict=strict)
    charge_offs = _charge_off_breakdown(resolver, CHARGE_OFF_FIELDS)
    recoveries = _charge_off_breakdown(resolver, RECOVERY_FIELDS)
    net = None
    if charge_offs.total is not None and recoveries.total is not None:
        net = charge_offs.total - recoveries.total
    return ChargeOffs(charge_offs=charge_offs, recoveries=recoveries, net_charge_offs=net)


# ═══════════════════════════════════════════════════════════════════════════
#  Derived views
# ═══════════════════════════════════════════════════════════════════════════

def categorize_loans(portfolio: LoanPortfolio) -> LoanCategories:
    """Split the loan portfolio into consumer and business lending."""
    result = LoanCategories()
    disclaimers: list[str] = []
    for entry in LOAN_CATEGORY_MAP:
        value = numeric(get_path(portfolio, entry.path))
        if not value:
            continue
        totals = result.consumer if entry.primary == "consumer" else result.business
        totals.total += value
        setattr(totals, entry.secondary, getattr(totals, entry.secondary) + value)
        if entry.disclaimer and entry.disclaimer not in disclaimers:
            disclaimers.append(entry.disclaimer)
    result.disclaimers = disclaimers
    return result


def validation_totals(resolver: FieldResolver) -> ValidationTotals:
    return ValidationTotals.model_validate(
        {name: resolver.resolve_spec(spec) for name, spec in VALIDATION_TOTAL_FIELDS.items()}
    )
