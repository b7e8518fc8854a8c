# src/zipreach/domain/mortgage.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from zipreach.domain.affordability import AffordabilityInputs, AffordabilityTier
from zipreach.domain.metrics import round_half_up

# PMI applies strictly below 20% down; no phase-in
PMI_RATE = 0.007
PMI_DOWN_PAYMENT_THRESHOLD_PCT = 20.0

# Bisection over [0, income * 10]; 50 halvings resolve far below a cent
MAX_PRICE_ITERATIONS = 50
MAX_PRICE_INCOME_MULTIPLE = 10

# Cash-flow cushion rules (monthly spending enabled)
MIN_MONTHLY_CUSHION = 500.0
AFFORDABLE_MIN_CASH_FLOW_PCT = 0.15
STRETCH_MIN_CASH_FLOW_PCT = 0.25


@dataclass
class MonthlyPayment:
    total: float
    principal: float    # principal + interest
    tax: float
    insurance: float
    pmi: float
    hoa: float


def calculate_monthly_payment(principal: float, annual_rate_pct: float, term_years: float) -> float:
    """
    Fixed-rate amortization. Returns monthly principal + interest.

    ``annual_rate_pct`` is a plain percent (6.5 for 6.5%). A zero or negative
    rate falls back to straight-line principal / n.
    """
    n_months = term_years * 12
    if principal <= 0 or n_months <= 0:
        return 0.0
    if annual_rate_pct <= 0:
        return principal / n_months

    r = annual_rate_pct / 100 / 12
    growth = (1 + r) ** n_months
    return principal * r * growth / (growth - 1)


def calculate_full_monthly_payment(home_price: float, inputs: AffordabilityInputs) -> MonthlyPayment:
    """Full monthly housing cost: P&I + property tax + insurance + PMI + HOA."""
    loan_amount = home_price * (1 - inputs.down_payment_pct / 100)
    principal = calculate_monthly_payment(loan_amount, inputs.interest_rate, inputs.loan_term_years)
    tax = home_price * (inputs.property_tax_rate / 100) / 12
    insurance = inputs.annual_insurance / 12
    pmi = loan_amount * PMI_RATE / 12 if inputs.down_payment_pct < PMI_DOWN_PAYMENT_THRESHOLD_PCT else 0.0
    hoa = inputs.hoa_monthly

    return MonthlyPayment(
        total=principal + tax + insurance + pmi + hoa,
        principal=principal,
        tax=tax,
        insurance=insurance,
        pmi=pmi,
        hoa=hoa,
    )


def calculate_max_home_price(inputs: AffordabilityInputs) -> int:
    """
    Highest home price whose full monthly cost fits the front-end DTI budget
    after existing debts.

    Tax and PMI scale with price, so there is no closed form; the full
    payment is strictly increasing in price and a bounded bisection finds
    the crossing. Monthly spending is deliberately ignored here.
    """
    if not inputs.has_income:
        return 0

    max_monthly = inputs.gross_monthly_income * (inputs.front_dti_pct / 100)
    available_for_housing = max_monthly - inputs.monthly_debts
    if available_for_housing <= 0:
        return 0

    low = 0.0
    high = float(inputs.annual_income) * MAX_PRICE_INCOME_MULTIPLE
    for _ in range(MAX_PRICE_ITERATIONS):
        mid = (low + high) / 2
        if calculate_full_monthly_payment(mid, inputs).total < available_for_housing:
            low = mid
        else:
            high = mid
    return round_half_up((low + high) / 2)


def get_effective_max_price(inputs: AffordabilityInputs) -> Optional[float]:
    """Manual override when enabled and positive, else the DTI solver (None without income)."""
    manual = inputs.manual_max_price
    if inputs.use_manual_max_price and manual is not None and manual > 0:
        return manual
    if not inputs.has_income:
        return None
    return calculate_max_home_price(inputs)


# ----------------------------
# Tier classification
# ----------------------------

@dataclass(frozen=True)
class CashFlow:
    remaining: float     # gross monthly - housing - debts - spending
    pct: float           # remaining / gross monthly


@dataclass(frozen=True)
class DowngradeRule:
    name: str
    applies: Callable[[AffordabilityTier, CashFlow], bool]
    to_tier: AffordabilityTier


# Order matters: each rule sees the tier left by the previous one, so an
# affordable home can fall to stretch and then to unaffordable in one pass.
CASH_FLOW_RULES: tuple[DowngradeRule, ...] = (
    DowngradeRule(
        name="negative_cash_flow",
        applies=lambda tier, cf: cf.remaining < 0,
        to_tier="unaffordable",
    ),
    DowngradeRule(
        name="below_min_cushion",
        applies=lambda tier, cf: 0 <= cf.remaining < MIN_MONTHLY_CUSHION,
        to_tier="unaffordable",
    ),
    DowngradeRule(
        name="thin_cash_flow",
        applies=lambda tier, cf: (
            cf.remaining >= MIN_MONTHLY_CUSHION
            and cf.pct < AFFORDABLE_MIN_CASH_FLOW_PCT
            and tier == "affordable"
        ),
        to_tier="stretch",
    ),
    DowngradeRule(
        name="stretch_cash_flow",
        applies=lambda tier, cf: cf.pct < STRETCH_MIN_CASH_FLOW_PCT and tier == "stretch",
        to_tier="unaffordable",
    ),
)


def apply_cash_flow_rules(
    tier: AffordabilityTier,
    cash_flow: CashFlow,
    rules: tuple[DowngradeRule, ...] = CASH_FLOW_RULES,
) -> tuple[AffordabilityTier, list[str]]:
    """Fold the ordered rules over ``tier``; returns (final tier, names of rules that fired)."""
    fired: list[str] = []
    for rule in rules:
        if rule.applies(tier, cash_flow):
            tier = rule.to_tier
            fired.append(rule.name)
    return tier, fired


@dataclass
class TierAssessment:
    home_price: Optional[float]
    tier: AffordabilityTier
    base_tier: AffordabilityTier
    payment: Optional[MonthlyPayment] = None
    total_debts: Optional[float] = None
    dti_ratio: Optional[float] = None
    cash_flow: Optional[CashFlow] = None
    applied_rules: list[str] = field(default_factory=list)


def _is_missing(x: Optional[float]) -> bool:
    return x is None or (isinstance(x, float) and math.isnan(x))


def tier_breakdown(home_price: Optional[float], inputs: AffordabilityInputs) -> TierAssessment:
    if _is_missing(home_price) or not inputs.has_income:
        return TierAssessment(home_price=home_price, tier="unknown", base_tier="unknown")

    payment = calculate_full_monthly_payment(home_price, inputs)
    total_debts = payment.total + inputs.monthly_debts
    gross_monthly = inputs.gross_monthly_income
    dti_ratio = total_debts / gross_monthly

    base: AffordabilityTier
    if dti_ratio <= inputs.front_dti_pct / 100:
        base = "affordable"
    elif dti_ratio <= inputs.back_dti_pct / 100:
        base = "stretch"
    else:
        base = "unaffordable"

    assessment = TierAssessment(
        home_price=home_price,
        tier=base,
        base_tier=base,
        payment=payment,
        total_debts=total_debts,
        dti_ratio=dti_ratio,
    )

    if inputs.include_spending and inputs.monthly_spending > 0:
        remaining = gross_monthly - total_debts - inputs.monthly_spending
        cash_flow = CashFlow(remaining=remaining, pct=remaining / gross_monthly)
        assessment.cash_flow = cash_flow
        assessment.tier, assessment.applied_rules = apply_cash_flow_rules(base, cash_flow)

    return assessment


def get_affordability_tier(home_price: Optional[float], inputs: AffordabilityInputs) -> AffordabilityTier:
    """
    affordable: DTI <= front-end limit
    stretch:    front-end < DTI <= back-end
    unaffordable: above back-end, or pushed down by the cash-flow rules
    unknown:    no price or no income
    """
    return tier_breakdown(home_price, inputs).tier
