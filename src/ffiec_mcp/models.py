"""Pydantic models for institutions, canonical statements and peer analysis."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


# Amounts are in thousands of dollars, as reported.  None only appears when
# the resolver runs in strict mode and the field was not reported.
Amount = float | None


# ---------------------------------------------------------------------------
# Institution
# ---------------------------------------------------------------------------

class Institution(BaseModel):
    idrssd: str
    name: str | None = None
    fdic_cert: str | None = None
    occ_charter: str | None = None
    aba_routing: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    filing_type: str | None = None
    last_updated: datetime | None = None
    website: str | None = None


# ---------------------------------------------------------------------------
# Loan portfolio (Schedule RC-C Part I)
# ---------------------------------------------------------------------------

class ConstructionLoans(BaseModel):
    total: Amount = 0.0
    residential_1_to_4_family: Amount = 0.0
    other_construction_and_land_development: Amount = 0.0


class OneToFourFamilyLoans(BaseModel):
    revolving_open_end: Amount = 0.0
    closed_end_first_liens: Amount = 0.0
    closed_end_junior_liens: Amount = 0.0


class NonfarmNonresidentialLoans(BaseModel):
    owner_occupied: Amount = 0.0
    other_nonfarm_nonresidential: Amount = 0.0


class RealEstateLoans(BaseModel):
    construction_and_land_development: ConstructionLoans = ConstructionLoans()
    secured_by_1_to_4_family: OneToFourFamilyLoans = OneToFourFamilyLoans()
    multifamily: Amount = 0.0
    nonfarm_nonresidential: NonfarmNonresidentialLoans = NonfarmNonresidentialLoans()
    farmland: Amount = 0.0


class CommercialAndIndustrialLoans(BaseModel):
    us_addressees: Amount = 0.0
    non_us_addressees: Amount = 0.0


class ConsumerLoans(BaseModel):
    credit_cards: Amount = 0.0
    automobile_loans: Amount = 0.0
    other_revolving_credit: Amount = 0.0
    other_consumer_loans: Amount = 0.0


class OtherLoans(BaseModel):
    agricultural_production: Amount = 0.0
    to_depository_institutions: Amount = 0.0
    loans_to_foreign_governments: Amount = 0.0
    municipal_loans: Amount = 0.0
    loans_to_other_depository_us: Amount = 0.0
    loans_to_banks_foreign: Amount = 0.0
    all_other_loans: Amount = 0.0


class LeaseFinancingReceivables(BaseModel):
    consumer_leases: Amount = 0.0
    all_other_leases: Amount = 0.0


class LoanPortfolio(BaseModel):
    real_estate: RealEstateLoans = RealEstateLoans()
    commercial_and_industrial: CommercialAndIndustrialLoans = CommercialAndIndustrialLoans()
    consumer: ConsumerLoans = ConsumerLoans()
    other: OtherLoans = OtherLoans()
    lease_financing_receivables: LeaseFinancingReceivables = LeaseFinancingReceivables()


# ---------------------------------------------------------------------------
# Balance sheet (Schedule RC)
# ---------------------------------------------------------------------------

class LoansAndLeases(BaseModel):
    net: Amount = 0.0
    net_of_allowance: Amount = 0.0
    held_for_sale: Amount = 0.0
    portfolio: LoanPortfolio = LoanPortfolio()


class Securities(BaseModel):
    available_for_sale: Amount = 0.0
    held_to_maturity: Amount = 0.0
    equity: Amount = 0.0


class EarningAssets(BaseModel):
    loans_and_leases: LoansAndLeases = LoansAndLeases()
    securities: Securities = Securities()
    interest_bearing_bank_balances: Amount = 0.0
    fed_funds_sold_and_repos: Amount = 0.0


class NonearningAssets(BaseModel):
    cash_and_due_from_banks: Amount = 0.0
    premises_and_fixed_assets: Amount = 0.0
    intangible_assets: Amount = 0.0
    other_real_estate: Amount = 0.0
    other_assets: Amount = 0.0


class Assets(BaseModel):
    earning_assets: EarningAssets = EarningAssets()
    nonearning_assets: NonearningAssets = NonearningAssets()
    total_assets: Amount = 0.0


class Deposits(BaseModel):
    total: Amount = 0.0
    non_interest_bearing: Amount = 0.0
    interest_bearing: Amount = 0.0


class Borrowings(BaseModel):
    fed_funds_purchased_and_repos: Amount = 0.0
    other_borrowed_money: Amount = 0.0
    subordinated_debt: Amount = 0.0


class Liabilities(BaseModel):
    deposits: Deposits = Deposits()
    borrowings: Borrowings = Borrowings()
    other_liabilities: Amount = 0.0
    total_liabilities: Amount = 0.0


class Equity(BaseModel):
    common_stock: Amount = 0.0
    surplus: Amount = 0.0
    retained_earnings: Amount = 0.0
    accumulated_oci: Amount = 0.0
    total_equity: Amount = 0.0


class BalanceSheet(BaseModel):
    assets: Assets = Assets()
    liabilities: Liabilities = Liabilities()
    equity: Equity = Equity()
    data_source: str = "domestic"   # consolidated / domestic / foreign


# ---------------------------------------------------------------------------
# Income statement (Schedule RI), year-to-date flows
# ---------------------------------------------------------------------------

class InterestIncome(BaseModel):
    loans: Amount = 0.0
    securities: Amount = 0.0
    fed_funds: Amount = 0.0
    other: Amount = 0.0
    total: Amount = 0.0


class InterestExpense(BaseModel):
    deposits: Amount = 0.0
    borrowings: Amount = 0.0
    subordinated_debt: Amount = 0.0
    total: Amount = 0.0


class NoninterestIncome(BaseModel):
    service_fees: Amount = 0.0
    trading_revenue: Amount = 0.0
    investment_banking: Amount = 0.0
    other_noninterest_income: Amount = 0.0
    total: Amount = 0.0


class NoninterestExpense(BaseModel):
    salaries_and_benefits: Amount = 0.0
    premises_expense: Amount = 0.0
    other: Amount = 0.0
    total: Amount = 0.0


class IncomeStatement(BaseModel):
    interest_income: InterestIncome = InterestIncome()
    interest_expense: InterestExpense = InterestExpense()
    net_interest_income: Amount = 0.0
    provision_for_credit_losses: Amount = 0.0
    noninterest_income: NoninterestIncome = NoninterestIncome()
    noninterest_expense: NoninterestExpense = NoninterestExpense()
    income_before_taxes: Amount = 0.0
    applicable_taxes: Amount = 0.0
    net_income: Amount = 0.0
    full_time_equivalent_employees: Amount = 0.0


# ---------------------------------------------------------------------------
# Optional schedules: RC-N (credit quality) and RI-B (charge-offs)
# ---------------------------------------------------------------------------

class DelinquencyBreakdown(BaseModel):
    real_estate_construction: Amount = 0.0
    real_estate_1_to_4_family: Amount = 0.0
    real_estate_multifamily: Amount = 0.0
    real_estate_cre: Amount = 0.0
    real_estate_farmland: Amount = 0.0
    ci: Amount = 0.0
    consumer: Amount = 0.0
    credit_cards: Amount = 0.0
    auto_loans: Amount = 0.0
    other_consumer: Amount = 0.0
    agricultural: Amount = 0.0
    leases: Amount = 0.0
    other: Amount = 0.0
    total: Amount = 0.0


class CreditQuality(BaseModel):
    past_due_30_to_89: DelinquencyBreakdown = DelinquencyBreakdown()
    past_due_90_plus: DelinquencyBreakdown = DelinquencyBreakdown()
    nonaccrual: DelinquencyBreakdown = DelinquencyBreakdown()
    total_noncurrent: Amount = 0.0


class ChargeOffBreakdown(BaseModel):
    real_estate: Amount = 0.0
    ci: Amount = 0.0
    consumer: Amount = 0.0
    credit_cards: Amount = 0.0
    agricultural: Amount = 0.0
    leases: Amount = 0.0
    total: Amount = 0.0


class ChargeOffs(BaseModel):
    charge_offs: ChargeOffBreakdown = ChargeOffBreakdown()
    recoveries: ChargeOffBreakdown = ChargeOffBreakdown()
    net_charge_offs: Amount = 0.0


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

class ConsumerLoanTotals(BaseModel):
    total: float = 0.0
    mortgage: float = 0.0
    credit_card: float = 0.0
    auto: float = 0.0
    personal: float = 0.0
    leases: float = 0.0
    construction: float = 0.0


class BusinessLoanTotals(BaseModel):
    total: float = 0.0
    cre: float = 0.0
    ci: float = 0.0
    agriculture: float = 0.0
    construction: float = 0.0
    leases: float = 0.0
    other: float = 0.0


class LoanCategories(BaseModel):
    """Consumer vs business split of the loan portfolio."""
    consumer: ConsumerLoanTotals = ConsumerLoanTotals()
    business: BusinessLoanTotals = BusinessLoanTotals()
    disclaimers: list[str] = []


class ValidationTotals(BaseModel):
    """Summary totals as reported, kept for reconciling the portfolio."""
    total_real_estate_loans: Amount = 0.0
    total_loans_gross: Amount = 0.0
    total_loans_net: Amount = 0.0
    allowance_for_losses: Amount = 0.0


class Ratios(BaseModel):
    """Derived ratios in percent.  None means not computable."""
    efficiency_ratio: float | None = None
    roa: float | None = None
    roe: float | None = None
    net_interest_margin: float | None = None
    tier1_leverage_ratio: float | None = None
    operating_leverage: float | None = None
    net_charge_off_ratio: float | None = None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class IdentityCheck(BaseModel):
    """One accounting identity: left side vs right side."""
    is_valid: bool
    measured_left: float | None = None
    measured_right: float | None = None
    difference: float | None = None


class ValidationIssue(BaseModel):
    kind: str                    # "balance_sheet" | "income_statement"
    message: str
    field: str | None = None
    difference: float | None = None


class StatementValidation(BaseModel):
    is_valid: bool = True
    balance_sheet: IdentityCheck | None = None
    income_statement: IdentityCheck | None = None
    errors: list[ValidationIssue] = []


# ---------------------------------------------------------------------------
# Peer analysis
# ---------------------------------------------------------------------------

class PeerSet(BaseModel):
    """Nearest larger/smaller banks by total assets, closest first."""
    larger: list[str] = []
    smaller: list[str] = []
    peer_ids: list[str] = []
    count: int = 0

    @classmethod
    def from_sides(cls, larger: list[str], smaller: list[str]) -> PeerSet:
        ids = list(larger) + list(smaller)
        return cls(larger=list(larger), smaller=list(smaller), peer_ids=ids, count=len(ids))


class MetricRanking(BaseModel):
    rank: int | None = None
    total: int | None = None
    percentile: int | None = None
    value: float | None = None


class PeerAnalysis(BaseModel):
    """Stored on a statement once the population for its period is loaded."""
    peers: PeerSet = PeerSet()
    peer_averages: dict[str, float | None] = {}
    rankings: dict[str, MetricRanking] = {}
    generated_at: datetime | None = None


class PeriodPeerAnalysis(BaseModel):
    reporting_period: date
    peers: PeerSet
    peer_averages: dict[str, float | None] = {}
    rankings: dict[str, MetricRanking] = {}
    bank_metrics: dict[str, float | None] = {}


class PeerAnalysisResult(BaseModel):
    idrssd: str
    name: str | None = None
    generated_at: datetime
    periods: list[PeriodPeerAnalysis] = []


# ---------------------------------------------------------------------------
# Statement & import results
# ---------------------------------------------------------------------------

class FinancialStatement(BaseModel):
    """One bank, one quarter-end."""
    idrssd: str
    reporting_period: date
    balance_sheet: BalanceSheet = BalanceSheet()
    income_statement: IncomeStatement = IncomeStatement()
    ratios: Ratios = Ratios()
    validation: StatementValidation = StatementValidation()
    validation_totals: ValidationTotals | None = None
    loan_categories: LoanCategories | None = None
    credit_quality: CreditQuality | None = None
    charge_offs: ChargeOffs | None = None
    peer_analysis: PeerAnalysis | None = None


class EntityIssue(BaseModel):
    """A per-bank problem that did not stop the batch."""
    idrssd: str | None = None
    kind: str                    # "missing_schedule" | "transform_error"
    message: str
    field: str | None = None


class ImportResult(BaseModel):
    reporting_period: date
    entities_created: int = 0
    statements_created: int = 0
    validation_error_count: int = 0
    entities_skipped: int = 0
    issues: list[EntityIssue] = []
