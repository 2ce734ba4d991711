from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class ScenarioInputs:
    """Assumptions for one buy-vs-rent run. Percentages are whole numbers."""

    home_price: float
    down_payment_percent: float
    monthly_rent: float
    interest_rate: float = 7.0  # annual percentage, e.g., 7.0
    loan_term_years: int = 30
    time_horizon_years: int = 30
    property_tax_rate: float = 1.0  # percent of home value per year
    home_insurance_annual: float = 1200.0
    hoa_monthly: float = 150.0
    maintenance_rate: float = 1.0  # percent of home value per year
    renter_insurance_annual: float = 240.0
    home_appreciation_rate: float = 3.0
    rent_growth_rate: float = 3.5
    investment_return_rate: float = 7.0

    @property
    def down_payment_amount(self) -> float:
        return self.home_price * (self.down_payment_percent / 100)

    @property
    def loan_amount(self) -> float:
        return self.home_price - self.down_payment_amount

    @property
    def horizon_months(self) -> int:
        return int(self.time_horizon_years * 12)

    @property
    def term_months(self) -> int:
        return int(self.loan_term_years * 12)


@dataclass(frozen=True)
class AmortizationEntry:
    month: int
    payment: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float


@dataclass(frozen=True)
class ResolvedRates:
    """Annual rates (whole-number percent) actually applied during a run."""

    home_appreciation_rate: float
    rent_growth_rate: float
    investment_return_rate: float
    source: str = "timeline"

    @classmethod
    def from_inputs(cls, inputs: ScenarioInputs) -> "ResolvedRates":
        return cls(
            home_appreciation_rate=inputs.home_appreciation_rate,
            rent_growth_rate=inputs.rent_growth_rate,
            investment_return_rate=inputs.investment_return_rate,
            source="inputs",
        )


@dataclass(frozen=True)
class LocationStats:
    """Local market statistics for a ZIP code."""

    zip_code: str
    city: str
    state: str
    median_home_price: float
    average_rent: float
    property_tax_rate: float  # annual percentage
    home_appreciation_rate: Optional[float] = None  # annual percentage
    rent_growth_rate: Optional[float] = None  # annual percentage

    @property
    def has_market_trends(self) -> bool:
        return self.home_appreciation_rate is not None and self.rent_growth_rate is not None


@dataclass(frozen=True)
class BuyingCosts:
    mortgage: float
    property_tax: float
    insurance: float
    hoa: float
    maintenance: float
    total: float


@dataclass(frozen=True)
class RentingCosts:
    monthly_rent: float
    insurance: float
    total: float


@dataclass(frozen=True)
class MonthlySnapshot:
    month: int
    mortgage_payment: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float
    home_value: float
    home_equity: float
    monthly_buying_costs: float
    monthly_rent: float
    monthly_renting_costs: float
    invested_down_payment: float
    buyer_net_worth: float
    renter_net_worth: float
    net_worth_delta: float


@dataclass(frozen=True)
class YearlyPoint:
    year: int
    buyer_net_worth: float
    renter_net_worth: float
    net_worth_delta: float


@dataclass
class ComparisonResult:
    inputs: ScenarioInputs
    rates: ResolvedRates
    total_interest_paid: float
    total_principal_paid: float
    total_buying_costs: float
    total_renting_costs: float
    break_even_month: Optional[int]
    final_buyer_net_worth: float
    final_renter_net_worth: float
    final_home_value: float
    final_investment_value: float
    snapshots: Tuple[MonthlySnapshot, ...] = field(default_factory=tuple)

    @property
    def final_net_worth_delta(self) -> float:
        return self.final_buyer_net_worth - self.final_renter_net_worth

    @property
    def better_option(self) -> str:
        if self.final_buyer_net_worth > self.final_renter_net_worth:
            return "buying"
        if self.final_renter_net_worth > self.final_buyer_net_worth:
            return "renting"
        return "tie"
