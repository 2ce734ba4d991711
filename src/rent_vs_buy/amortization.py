from __future__ import annotations

from typing import List

from .schemas import AmortizationEntry


def monthly_payment(
    principal: float, annual_rate_pct: float, term_years: float
) -> float:
    """Fixed payment that fully amortizes ``principal`` over ``term_years``."""
    if principal <= 0:
        return 0.0
    num_payments = max(int(term_years * 12), 1)
    if annual_rate_pct == 0:
        return principal / num_payments
    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    growth = (1 + monthly_rate) ** num_payments
    return principal * (monthly_rate * growth) / (growth - 1)


def amortization_schedule(
    principal: float, annual_rate_pct: float, term_years: float
) -> List[AmortizationEntry]:
    """
    Month-by-month split of each payment into interest and principal.

    The schedule always covers the full contractual term, regardless of how
    long a comparison consumes it.
    """
    payment = monthly_payment(principal, annual_rate_pct, term_years)
    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    balance = principal
    schedule: List[AmortizationEntry] = []

    for month in range(1, int(term_years * 12) + 1):
        interest_paid = balance * monthly_rate
        principal_paid = payment - interest_paid
        balance = max(0.0, balance - principal_paid)
        schedule.append(
            AmortizationEntry(
                month=month,
                payment=payment,
                principal_paid=principal_paid,
                interest_paid=interest_paid,
                remaining_balance=balance,
            )
        )

    return schedule


def annual_to_monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 100.0 / 12.0
