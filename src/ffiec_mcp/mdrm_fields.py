"""MDRM field registry - canonical statement paths → Call Report field codes.

Every figure in a Call Report schedule is identified by an MDRM code: a
4-character prefix naming the reporting basis plus a 4-character item code.

  RCFD  - consolidated, foreign and domestic offices
  RCON  - domestic offices only
  RCFN  - foreign offices only
  RIAD  - income statement items (no basis split)

The tables below map each canonical model path (dotted, relative to the
model it fills) to the item code that feeds it.  The resolver decides the
prefix per bank, so the fallback order is auditable in one place
(``candidates``) instead of being spread over string concatenations.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


# ═══════════════════════════════════════════════════════════════════════════
#  Reporting bases
# ═══════════════════════════════════════════════════════════════════════════

class ReportingBasis(str, Enum):
    CONSOLIDATED = "RCFD"
    DOMESTIC = "RCON"
    FOREIGN = "RCFN"

    @property
    def label(self) -> str:
        return self.name.lower()


INCOME_PREFIX = "RIAD"

# Tried after the governing basis, skipping whichever one that was
FALLBACK_ORDER: tuple[ReportingBasis, ...] = (
    ReportingBasis.DOMESTIC,
    ReportingBasis.CONSOLIDATED,
    ReportingBasis.FOREIGN,
)

# Total assets decides the governing basis
TOTAL_ASSETS_CODE = "2170"


class FieldSpec(NamedTuple):
    code: str                   # item code without prefix
    description: str            # human label
    prefix: str | None = None   # fixed prefix; None = resolve by reporting basis


def candidates(code: str, basis: ReportingBasis) -> list[str]:
    """Ordered full MDRM codes to try for an item under a governing basis."""
    order = [basis] + [b for b in FALLBACK_ORDER if b is not basis]
    return [f"{b.value}{code}" for b in order]


def income_code(spec: FieldSpec) -> str:
    return f"{spec.prefix or INCOME_PREFIX}{spec.code}"


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule RC: Balance sheet
#  Paths are relative to models.BalanceSheet
# ═══════════════════════════════════════════════════════════════════════════

BALANCE_SHEET_FIELDS: dict[str, FieldSpec] = {
    # Earning assets
    "assets.earning_assets.loans_and_leases.net": FieldSpec("B528", "Loans and leases held for investment, net of unearned income"),
    "assets.earning_assets.loans_and_leases.net_of_allowance": FieldSpec("B529", "Loans and leases, net of unearned income and allowance"),
    "assets.earning_assets.loans_and_leases.held_for_sale": FieldSpec("5369", "Loans and leases held for sale"),
    "assets.earning_assets.securities.available_for_sale": FieldSpec("1773", "Available-for-sale debt securities"),
    "assets.earning_assets.securities.held_to_maturity": FieldSpec("JJ34", "Held-to-maturity debt securities"),
    "assets.earning_assets.securities.equity": FieldSpec("JA22", "Equity securities with readily determinable fair values"),
    "assets.earning_assets.interest_bearing_bank_balances": FieldSpec("0071", "Interest-bearing balances"),
    "assets.earning_assets.fed_funds_sold_and_repos": FieldSpec("B989", "Securities purchased under agreements to resell"),
    # Nonearning assets
    "assets.nonearning_assets.cash_and_due_from_banks": FieldSpec("0081", "Noninterest-bearing balances and currency and coin"),
    "assets.nonearning_assets.premises_and_fixed_assets": FieldSpec("2145", "Premises and fixed assets"),
    "assets.nonearning_assets.intangible_assets": FieldSpec("2143", "Intangible assets"),
    "assets.nonearning_assets.other_real_estate": FieldSpec("2150", "Other real estate owned"),
    "assets.nonearning_assets.other_assets": FieldSpec("2160", "Other assets"),
    "assets.total_assets": FieldSpec(TOTAL_ASSETS_CODE, "Total assets"),
    # Liabilities
    "liabilities.deposits.total": FieldSpec("2200", "Deposits"),
    "liabilities.deposits.non_interest_bearing": FieldSpec("6631", "Noninterest-bearing deposits"),
    "liabilities.deposits.interest_bearing": FieldSpec("6636", "Interest-bearing deposits"),
    "liabilities.borrowings.fed_funds_purchased_and_repos": FieldSpec("B993", "Federal funds purchased"),
    "liabilities.borrowings.other_borrowed_money": FieldSpec("3190", "Other borrowed money"),
    "liabilities.borrowings.subordinated_debt": FieldSpec("3200", "Subordinated notes and debentures"),
    "liabilities.other_liabilities": FieldSpec("2930", "Other liabilities"),
    "liabilities.total_liabilities": FieldSpec("2948", "Total liabilities"),
    # Equity
    "equity.common_stock": FieldSpec("3230", "Common stock"),
    "equity.surplus": FieldSpec("3839", "Surplus"),
    "equity.retained_earnings": FieldSpec("3632", "Retained earnings"),
    "equity.accumulated_oci": FieldSpec("B530", "Accumulated other comprehensive income"),
    "equity.total_equity": FieldSpec("3210", "Total bank equity capital"),
}

# No consolidated deposits figure exists in the schema: for RCFD filers the
# total is rebuilt as foreign-office (RCFN) + domestic-office (RCON).
RECONSTRUCTED_DEPOSIT_PATHS = (
    "liabilities.deposits.total",
    "liabilities.deposits.non_interest_bearing",
    "liabilities.deposits.interest_bearing",
)


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule RC-C Part I: Loan portfolio
#  Paths are relative to models.LoanPortfolio
# ═══════════════════════════════════════════════════════════════════════════

LOAN_PORTFOLIO_FIELDS: dict[str, FieldSpec] = {
    "real_estate.construction_and_land_development.total": FieldSpec("2746", "Construction and land development, total"),
    "real_estate.construction_and_land_development.residential_1_to_4_family": FieldSpec("F158", "1-4 family residential construction loans"),
    "real_estate.construction_and_land_development.other_construction_and_land_development": FieldSpec("F159", "Other construction and land development loans"),
    "real_estate.secured_by_1_to_4_family.revolving_open_end": FieldSpec("1797", "Revolving, open-end 1-4 family loans (HELOCs)"),
    "real_estate.secured_by_1_to_4_family.closed_end_first_liens": FieldSpec("5367", "Closed-end 1-4 family first liens"),
    "real_estate.secured_by_1_to_4_family.closed_end_junior_liens": FieldSpec("5368", "Closed-end 1-4 family junior liens"),
    "real_estate.multifamily": FieldSpec("1460", "Multifamily (5 or more) residential properties"),
    "real_estate.nonfarm_nonresidential.owner_occupied": FieldSpec("F160", "Owner-occupied nonfarm nonresidential"),
    "real_estate.nonfarm_nonresidential.other_nonfarm_nonresidential": FieldSpec("F161", "Other nonfarm nonresidential"),
    "real_estate.farmland": FieldSpec("1420", "Secured by farmland"),
    "commercial_and_industrial.us_addressees": FieldSpec("1763", "C&I loans to U.S. addressees"),
    "commercial_and_industrial.non_us_addressees": FieldSpec("1764", "C&I loans to non-U.S. addressees"),
    "consumer.credit_cards": FieldSpec("B537", "Credit cards"),
    "consumer.automobile_loans": FieldSpec("K137", "Automobile loans"),
    "consumer.other_revolving_credit": FieldSpec("B538", "Other revolving credit plans"),
    "consumer.other_consumer_loans": FieldSpec("B539", "Other consumer loans"),
    "other.agricultural_production": FieldSpec("1590", "Loans to finance agricultural production"),
    "other.to_depository_institutions": FieldSpec("1288", "Loans to depository institutions"),
    "other.loans_to_foreign_governments": FieldSpec("2081", "Loans to foreign governments and official institutions"),
    "other.municipal_loans": FieldSpec("2107", "Obligations of states and political subdivisions"),
    "other.loans_to_other_depository_us": FieldSpec("B534", "Loans to other U.S. depository institutions"),
    "other.loans_to_banks_foreign": FieldSpec("B535", "Loans to foreign banks"),
    "other.all_other_loans": FieldSpec("A570", "All other loans"),
    "lease_financing_receivables.consumer_leases": FieldSpec("F162", "Leases to individuals"),
    "lease_financing_receivables.all_other_leases": FieldSpec("F163", "All other leases"),
}


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule RI: Income statement (year-to-date)
#  Paths are relative to models.IncomeStatement
# ═══════════════════════════════════════════════════════════════════════════

INCOME_STATEMENT_FIELDS: dict[str, FieldSpec] = {
    "interest_income.loans": FieldSpec("4010", "Interest and fee income on loans", INCOME_PREFIX),
    "interest_income.securities": FieldSpec("4060", "Interest income on securities", INCOME_PREFIX),
    "interest_income.fed_funds": FieldSpec("4020", "Interest income on federal funds sold", INCOME_PREFIX),
    "interest_income.other": FieldSpec("5415", "Other interest income", INCOME_PREFIX),
    "interest_income.total": FieldSpec("4107", "Total interest income", INCOME_PREFIX),
    "interest_expense.deposits": FieldSpec("4170", "Interest on deposits", INCOME_PREFIX),
    "interest_expense.borrowings": FieldSpec("4180", "Interest on borrowed money", INCOME_PREFIX),
    "interest_expense.subordinated_debt": FieldSpec("4200", "Interest on subordinated notes", INCOME_PREFIX),
    "interest_expense.total": FieldSpec("4073", "Total interest expense", INCOME_PREFIX),
    "net_interest_income": FieldSpec("4074", "Net interest income", INCOME_PREFIX),
    "provision_for_credit_losses": FieldSpec("JJ33", "Provision for credit losses", INCOME_PREFIX),
    "noninterest_income.service_fees": FieldSpec("4080", "Service charges on deposit accounts", INCOME_PREFIX),
    "noninterest_income.trading_revenue": FieldSpec("A220", "Trading revenue", INCOME_PREFIX),
    "noninterest_income.investment_banking": FieldSpec("C888", "Investment banking and advisory fees", INCOME_PREFIX),
    "noninterest_income.other_noninterest_income": FieldSpec("B497", "Other noninterest income", INCOME_PREFIX),
    "noninterest_income.total": FieldSpec("4079", "Total noninterest income", INCOME_PREFIX),
    "noninterest_expense.salaries_and_benefits": FieldSpec("4135", "Salaries and employee benefits", INCOME_PREFIX),
    "noninterest_expense.premises_expense": FieldSpec("4217", "Expenses of premises and fixed assets", INCOME_PREFIX),
    "noninterest_expense.other": FieldSpec("4092", "Other noninterest expense", INCOME_PREFIX),
    "noninterest_expense.total": FieldSpec("4093", "Total noninterest expense", INCOME_PREFIX),
    "income_before_taxes": FieldSpec("4301", "Income before applicable income taxes", INCOME_PREFIX),
    "applicable_taxes": FieldSpec("4302", "Applicable income taxes", INCOME_PREFIX),
    "net_income": FieldSpec("4340", "Net income", INCOME_PREFIX),
    "full_time_equivalent_employees": FieldSpec("4150", "Number of full-time equivalent employees", INCOME_PREFIX),
}


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule RC-N: Past due and nonaccrual
#  Category → item code; the same categories apply to each bucket
# ═══════════════════════════════════════════════════════════════════════════

CREDIT_QUALITY_FIELDS: dict[str, dict[str, FieldSpec]] = {
    "past_due_30_to_89": {
        "real_estate_construction": FieldSpec("2759", "Construction - 30-89 days past due"),
        "real_estate_1_to_4_family": FieldSpec("5398", "1-4 Family - 30-89 days past due"),
        "real_estate_multifamily": FieldSpec("3499", "Multifamily - 30-89 days past due"),
        "real_estate_cre": FieldSpec("3500", "CRE - 30-89 days past due"),
        "real_estate_farmland": FieldSpec("3501", "Farmland - 30-89 days past due"),
        "ci": FieldSpec("1607", "C&I - 30-89 days past due"),
        "consumer": FieldSpec("1609", "Consumer - 30-89 days past due"),
        "credit_cards": FieldSpec("K129", "Credit cards - 30-89 days past due"),
        "auto_loans": FieldSpec("K205", "Auto loans - 30-89 days past due"),
        "other_consumer": FieldSpec("K206", "Other consumer - 30-89 days past due"),
        "agricultural": FieldSpec("1594", "Agricultural - 30-89 days past due"),
        "leases": FieldSpec("1611", "Leases - 30-89 days past due"),
        "other": FieldSpec("1613", "Other - 30-89 days past due"),
    },
    "past_due_90_plus": {
        "real_estate_construction": FieldSpec("2769", "Construction - 90+ days past due"),
        "real_estate_1_to_4_family": FieldSpec("5399", "1-4 Family - 90+ days past due"),
        "real_estate_multifamily": FieldSpec("3502", "Multifamily - 90+ days past due"),
        "real_estate_cre": FieldSpec("3503", "CRE - 90+ days past due"),
        "real_estate_farmland": FieldSpec("3504", "Farmland - 90+ days past due"),
        "ci": FieldSpec("1608", "C&I - 90+ days past due"),
        "consumer": FieldSpec("1610", "Consumer - 90+ days past due"),
        "credit_cards": FieldSpec("K130", "Credit cards - 90+ days past due"),
        "auto_loans": FieldSpec("K207", "Auto loans - 90+ days past due"),
        "other_consumer": FieldSpec("K208", "Other consumer - 90+ days past due"),
        "agricultural": FieldSpec("1597", "Agricultural - 90+ days past due"),
        "leases": FieldSpec("1612", "Leases - 90+ days past due"),
        "other": FieldSpec("1614", "Other - 90+ days past due"),
    },
    "nonaccrual": {
        "real_estate_construction": FieldSpec("3505", "Construction - nonaccrual"),
        "real_estate_1_to_4_family": FieldSpec("3506", "1-4 Family - nonaccrual"),
        "real_estate_multifamily": FieldSpec("3507", "Multifamily - nonaccrual"),
        "real_estate_cre": FieldSpec("3508", "CRE - nonaccrual"),
        "real_estate_farmland": FieldSpec("3509", "Farmland - nonaccrual"),
        "ci": FieldSpec("1227", "C&I - nonaccrual"),
        "consumer": FieldSpec("1228", "Consumer - nonaccrual"),
        "credit_cards": FieldSpec("K131", "Credit cards - nonaccrual"),
        "auto_loans": FieldSpec("K209", "Auto loans - nonaccrual"),
        "other_consumer": FieldSpec("K210", "Other consumer - nonaccrual"),
        "agricultural": FieldSpec("1583", "Agricultural - nonaccrual"),
        "leases": FieldSpec("1229", "Leases - nonaccrual"),
        "other": FieldSpec("1230", "Other - nonaccrual"),
    },
}


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule RI-B Part I: Charge-offs and recoveries (year-to-date)
# ═══════════════════════════════════════════════════════════════════════════

CHARGE_OFF_FIELDS: dict[str, FieldSpec] = {
    "total": FieldSpec("4635", "Total charge-offs", INCOME_PREFIX),
    "real_estate": FieldSpec("4651", "Real estate charge-offs", INCOME_PREFIX),
    "ci": FieldSpec("4645", "C&I charge-offs", INCOME_PREFIX),
    "consumer": FieldSpec("4648", "Consumer charge-offs", INCOME_PREFIX),
    "credit_cards": FieldSpec("C891", "Credit card charge-offs", INCOME_PREFIX),
    "agricultural": FieldSpec("4655", "Agricultural charge-offs", INCOME_PREFIX),
    "leases": FieldSpec("4658", "Lease charge-offs", INCOME_PREFIX),
}

RECOVERY_FIELDS: dict[str, FieldSpec] = {
    "total": FieldSpec("4605", "Total recoveries", INCOME_PREFIX),
    "real_estate": FieldSpec("4661", "Real estate recoveries", INCOME_PREFIX),
    "ci": FieldSpec("4617", "C&I recoveries", INCOME_PREFIX),
    "consumer": FieldSpec("4628", "Consumer recoveries", INCOME_PREFIX),
    "credit_cards": FieldSpec("C893", "Credit card recoveries", INCOME_PREFIX),
    "agricultural": FieldSpec("4665", "Agricultural recoveries", INCOME_PREFIX),
    "leases": FieldSpec("4668", "Lease recoveries", INCOME_PREFIX),
}


# ═══════════════════════════════════════════════════════════════════════════
#  Reported summary totals (reconciliation only)
# ═══════════════════════════════════════════════════════════════════════════

VALIDATION_TOTAL_FIELDS: dict[str, FieldSpec] = {
    "total_real_estate_loans": FieldSpec("1410", "Total loans secured by real estate"),
    "total_loans_gross": FieldSpec("B528", "Total loans and leases, net of unearned income"),
    "total_loans_net": FieldSpec("2122", "Total loans and leases, net"),
    "allowance_for_losses": FieldSpec("3123", "Allowance for credit losses on loans and leases"),
}


# ═══════════════════════════════════════════════════════════════════════════
#  Loan categorisation (consumer vs business)
# ═══════════════════════════════════════════════════════════════════════════

CREDIT_CARD_DISCLAIMER = (
    "This field includes both consumer and commercial credit card receivables "
    "as reported on Schedule RC-C."
)


class LoanCategoryEntry(NamedTuple):
    path: str                   # path in LOAN_PORTFOLIO_FIELDS
    primary: str                # "consumer" | "business"
    secondary: str              # attribute on the primary totals model
    disclaimer: str | None = None


# Aggregates (construction total) are left out so nothing is counted twice
LOAN_CATEGORY_MAP: list[LoanCategoryEntry] = [
    LoanCategoryEntry("real_estate.construction_and_land_development.residential_1_to_4_family", "consumer", "construction"),
    LoanCategoryEntry("real_estate.construction_and_land_development.other_construction_and_land_development", "business", "construction"),
    LoanCategoryEntry("real_estate.secured_by_1_to_4_family.revolving_open_end", "consumer", "mortgage"),
    LoanCategoryEntry("real_estate.secured_by_1_to_4_family.closed_end_first_liens", "consumer", "mortgage"),
    LoanCategoryEntry("real_estate.secured_by_1_to_4_family.closed_end_junior_liens", "consumer", "mortgage"),
    LoanCategoryEntry("real_estate.multifamily", "business", "cre"),
    LoanCategoryEntry("real_estate.nonfarm_nonresidential.owner_occupied", "business", "cre"),
    LoanCategoryEntry("real_estate.nonfarm_nonresidential.other_nonfarm_nonresidential", "business", "cre"),
    LoanCategoryEntry("real_estate.farmland", "business", "agriculture"),
    LoanCategoryEntry("commercial_and_industrial.us_addressees", "business", "ci"),
    LoanCategoryEntry("commercial_and_industrial.non_us_addressees", "business", "ci"),
    LoanCategoryEntry("consumer.credit_cards", "consumer", "credit_card", CREDIT_CARD_DISCLAIMER),
    LoanCategoryEntry("consumer.automobile_loans", "consumer", "auto"),
    LoanCategoryEntry("consumer.other_revolving_credit", "consumer", "personal"),
    LoanCategoryEntry("consumer.other_consumer_loans", "consumer", "personal"),
    LoanCategoryEntry("other.agricultural_production", "business", "agriculture"),
    LoanCategoryEntry("other.to_depository_institutions", "business", "other"),
    LoanCategoryEntry("other.loans_to_foreign_governments", "business", "other"),
    LoanCategoryEntry("other.municipal_loans", "business", "other"),
    LoanCategoryEntry("other.loans_to_other_depository_us", "business", "other"),
    LoanCategoryEntry("other.loans_to_banks_foreign", "business", "other"),
    LoanCategoryEntry("other.all_other_loans", "business", "other"),
    LoanCategoryEntry("lease_financing_receivables.consumer_leases", "consumer", "leases"),
    LoanCategoryEntry("lease_financing_receivables.all_other_leases", "business", "leases"),
]


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule POR (bank roster) and RC-M (memoranda)
# ═══════════════════════════════════════════════════════════════════════════

ROSTER_COLUMNS: dict[str, str] = {
    "name": "Financial Institution Name",
    "fdic_cert": "FDIC Certificate Number",
    "occ_charter": "OCC Charter Number",
    "aba_routing": "Primary ABA Routing Number",
    "address": "Financial Institution Address",
    "city": "Financial Institution City",
    "state": "Financial Institution State",
    "zip_code": "Financial Institution Zip Code",
    "filing_type": "Financial Institution Filing Type",
}
ROSTER_LAST_UPDATED = "Last Date/Time Submission Updated On"

WEBSITE_FIELD = "TEXT4087"
