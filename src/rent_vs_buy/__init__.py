"""
Rent vs. Buy net-worth simulator.

This package projects, month by month, the mortgage amortization, ownership
and rental costs, and the resulting net worth of a buyer versus a renter who
invests the down payment instead. Local ZIP-level market data can optionally
tune the growth assumptions.
"""

from .amortization import amortization_schedule, monthly_payment
from .costs import buying_costs, renting_costs
from .model import compare_scenarios, simulate, yearly_view
from .rates import resolve_rates
from .schemas import (
    AmortizationEntry,
    BuyingCosts,
    ComparisonResult,
    LocationStats,
    MonthlySnapshot,
    RentingCosts,
    ResolvedRates,
    ScenarioInputs,
    YearlyPoint,
)

__all__ = [
    "AmortizationEntry",
    "BuyingCosts",
    "ComparisonResult",
    "LocationStats",
    "MonthlySnapshot",
    "RentingCosts",
    "ResolvedRates",
    "ScenarioInputs",
    "YearlyPoint",
    "amortization_schedule",
    "buying_costs",
    "compare_scenarios",
    "monthly_payment",
    "renting_costs",
    "resolve_rates",
    "simulate",
    "yearly_view",
]
