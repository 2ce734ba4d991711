from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from .amortization import amortization_schedule, annual_to_monthly_rate
from .costs import (
    maintenance_monthly,
    mortgage_insurance_monthly,
    property_tax_monthly,
)
from .rates import resolve_rates
from .schemas import (
    ComparisonResult,
    LocationStats,
    MonthlySnapshot,
    ResolvedRates,
    ScenarioInputs,
    YearlyPoint,
)

logger = logging.getLogger(__name__)

CLOSING_COST_RATE = 0.03  # of purchase price, paid at month 0
SELLING_COST_RATE = 0.08  # of home value, paid on the final month


def simulate(
    inputs: ScenarioInputs, rates: Optional[ResolvedRates] = None
) -> List[MonthlySnapshot]:
    """
    Walk the horizon month by month and track buyer vs. renter net worth.

    Whichever side has the lower monthly cost invests the difference, so
    both scenarios stay fully invested.
    """
    if rates is None:
        rates = resolve_rates(inputs.time_horizon_years)

    down_payment = inputs.down_payment_amount
    loan_amount = inputs.home_price - down_payment
    schedule = amortization_schedule(
        loan_amount, inputs.interest_rate, inputs.loan_term_years
    )

    mortgage_rate_monthly = annual_to_monthly_rate(inputs.interest_rate)
    appreciation_monthly = annual_to_monthly_rate(rates.home_appreciation_rate)
    rent_growth_monthly = annual_to_monthly_rate(rates.rent_growth_rate)
    investment_monthly = annual_to_monthly_rate(rates.investment_return_rate)
    logger.debug(
        "Simulating %s months with %s rates: appreciation=%.2f%% rent=%.2f%% invest=%.2f%%",
        inputs.horizon_months,
        rates.source,
        rates.home_appreciation_rate,
        rates.rent_growth_rate,
        rates.investment_return_rate,
    )

    home_value = inputs.home_price
    balance = loan_amount
    rent = inputs.monthly_rent
    buyer_cash = -down_payment - inputs.home_price * CLOSING_COST_RATE
    renter_portfolio = down_payment
    insurance = inputs.home_insurance_annual / 12
    months = inputs.horizon_months
    timeline: List[MonthlySnapshot] = []

    for month in range(1, months + 1):
        home_value *= 1 + appreciation_monthly
        rent *= 1 + rent_growth_monthly

        # Past the loan term there is nothing left to pay.
        payment = schedule[month - 1].payment if month <= len(schedule) else 0.0
        interest_paid = balance * mortgage_rate_monthly if payment else 0.0
        principal_paid = payment - interest_paid
        balance = max(0.0, balance - principal_paid)
        equity = home_value - balance

        owner_cost = (
            interest_paid
            + property_tax_monthly(inputs.property_tax_rate, home_value)
            + insurance
            + maintenance_monthly(inputs.maintenance_rate, home_value)
            + inputs.hoa_monthly
            + mortgage_insurance_monthly(loan_amount, balance, home_value)
        )
        renter_cost = rent

        # The cheaper side banks the gap, then both balances earn the return.
        savings = renter_cost - owner_cost
        if savings > 0:
            buyer_cash += savings
        else:
            renter_portfolio -= savings
        buyer_cash *= 1 + investment_monthly
        renter_portfolio *= 1 + investment_monthly

        selling_cost = home_value * SELLING_COST_RATE if month == months else 0.0
        buyer_net_worth = (equity - selling_cost) + buyer_cash
        renter_net_worth = renter_portfolio

        timeline.append(
            MonthlySnapshot(
                month=month,
                mortgage_payment=payment,
                principal_paid=principal_paid,
                interest_paid=interest_paid,
                remaining_balance=balance,
                home_value=home_value,
                home_equity=equity,
                monthly_buying_costs=owner_cost,
                monthly_rent=rent,
                monthly_renting_costs=renter_cost,
                invested_down_payment=renter_portfolio,
                buyer_net_worth=buyer_net_worth,
                renter_net_worth=renter_net_worth,
                net_worth_delta=buyer_net_worth - renter_net_worth,
            )
        )

    if timeline:
        last = timeline[-1]
        logger.debug(
            "Month %s: home=%.0f equity=%.0f cash=%.0f buyer=%.0f renter=%.0f",
            last.month,
            last.home_value,
            last.home_equity,
            buyer_cash,
            last.buyer_net_worth,
            last.renter_net_worth,
        )

    return timeline


def compare_scenarios(
    inputs: ScenarioInputs,
    location: Optional[LocationStats] = None,
    rates: Optional[ResolvedRates] = None,
) -> ComparisonResult:
    if rates is None:
        rates = resolve_rates(inputs.time_horizon_years, location)
    timeline = simulate(inputs, rates)

    break_even = next(
        (snap.month for snap in timeline if snap.net_worth_delta >= 0), None
    )
    last = timeline[-1] if timeline else None

    return ComparisonResult(
        inputs=inputs,
        rates=rates,
        total_interest_paid=sum(snap.interest_paid for snap in timeline),
        total_principal_paid=sum(snap.principal_paid for snap in timeline),
        total_buying_costs=sum(snap.monthly_buying_costs for snap in timeline),
        total_renting_costs=sum(snap.monthly_renting_costs for snap in timeline),
        break_even_month=break_even,
        final_buyer_net_worth=last.buyer_net_worth if last else 0.0,
        final_renter_net_worth=last.renter_net_worth if last else 0.0,
        final_home_value=last.home_value if last else inputs.home_price,
        final_investment_value=last.invested_down_payment if last else 0.0,
        snapshots=tuple(timeline),
    )


def yearly_view(snapshots: Sequence[MonthlySnapshot]) -> List[YearlyPoint]:
    """
    Chart-friendly thinning: the first month of every year plus the final
    month. Month 1 stands in for year 0; the final month counts as the year
    it completes, so partial years round up.
    """
    last_index = len(snapshots) - 1
    return [
        YearlyPoint(
            year=math.ceil(snap.month / 12) if index == last_index else (snap.month - 1) // 12,
            buyer_net_worth=snap.buyer_net_worth,
            renter_net_worth=snap.renter_net_worth,
            net_worth_delta=snap.net_worth_delta,
        )
        for index, snap in enumerate(snapshots)
        if index % 12 == 0 or index == last_index
    ]
