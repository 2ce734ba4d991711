from __future__ import annotations

from typing import Optional

from .amortization import monthly_payment
from .schemas import BuyingCosts, RentingCosts, ScenarioInputs

MORTGAGE_INSURANCE_RATE = 0.005  # of the original loan, per year
MORTGAGE_INSURANCE_LTV = 0.80


def property_tax_monthly(tax_rate_pct: float, home_value: float) -> float:
    return home_value * (tax_rate_pct / 100) / 12


def maintenance_monthly(maintenance_rate_pct: float, home_value: float) -> float:
    return home_value * (maintenance_rate_pct / 100) / 12


def loan_to_value(balance: float, home_value: float) -> float:
    if home_value <= 0:
        return 0.0
    return balance / home_value


def mortgage_insurance_monthly(
    original_loan: float, balance: float, home_value: float
) -> float:
    """PMI charged while the loan is above 80% of the current home value."""
    if loan_to_value(balance, home_value) > MORTGAGE_INSURANCE_LTV:
        return original_loan * MORTGAGE_INSURANCE_RATE / 12
    return 0.0


def buying_costs(
    inputs: ScenarioInputs, home_value: Optional[float] = None
) -> BuyingCosts:
    """
    Monthly cost of owning, priced against ``home_value``.

    Without an explicit value this is the first-month preview at the
    purchase price. The mortgage always follows the original loan.
    """
    if home_value is None:
        home_value = inputs.home_price

    mortgage = monthly_payment(
        inputs.loan_amount, inputs.interest_rate, inputs.loan_term_years
    )
    property_tax = property_tax_monthly(inputs.property_tax_rate, home_value)
    insurance = inputs.home_insurance_annual / 12
    hoa = inputs.hoa_monthly
    maintenance = maintenance_monthly(inputs.maintenance_rate, home_value)

    return BuyingCosts(
        mortgage=mortgage,
        property_tax=property_tax,
        insurance=insurance,
        hoa=hoa,
        maintenance=maintenance,
        total=mortgage + property_tax + insurance + hoa + maintenance,
    )


def renting_costs(inputs: ScenarioInputs, month: int) -> RentingCosts:
    """Rent steps up once per 12-month block, starting from month 1."""
    year = (month - 1) // 12
    rent = inputs.monthly_rent * (1 + inputs.rent_growth_rate / 100) ** year
    insurance = inputs.renter_insurance_annual / 12
    return RentingCosts(monthly_rent=rent, insurance=insurance, total=rent + insurance)
