from __future__ import annotations

import logging
from typing import Optional, Tuple

from .schemas import LocationStats, ResolvedRates

logger = logging.getLogger(__name__)

DEFAULT_RENT_GROWTH_RATE = 3.5

# (max horizon years, appreciation %, investment return %, local-trend multiplier)
HORIZON_BUCKETS: Tuple[Tuple[float, float, float, float], ...] = (
    (3, 0.5, 4.0, 0.10),
    (7, 1.5, 6.0, 0.50),
    (float("inf"), 2.5, 7.0, 1.00),
)


def _bucket(horizon_years: float) -> Tuple[float, float, float, float]:
    for bucket in HORIZON_BUCKETS:
        if horizon_years <= bucket[0]:
            return bucket
    return HORIZON_BUCKETS[-1]


def timeline_rates(horizon_years: float) -> Tuple[float, float]:
    """Baseline (appreciation, investment return) for a holding period."""
    _, appreciation, investment_return, _ = _bucket(horizon_years)
    return appreciation, investment_return


def horizon_multiplier(horizon_years: float) -> float:
    """Share of a local market trend trusted over the holding period."""
    return _bucket(horizon_years)[3]


def resolve_rates(
    horizon_years: float, location: Optional[LocationStats] = None
) -> ResolvedRates:
    """
    Rates used for a simulation run.

    Local appreciation and rent growth are scaled toward zero for short
    horizons. Investment return always comes from the horizon table.
    """
    appreciation, investment_return = timeline_rates(horizon_years)

    if location is None or not location.has_market_trends:
        return ResolvedRates(
            home_appreciation_rate=appreciation,
            rent_growth_rate=DEFAULT_RENT_GROWTH_RATE,
            investment_return_rate=investment_return,
            source="timeline",
        )

    multiplier = horizon_multiplier(horizon_years)
    logger.debug(
        "Scaling local trends for ZIP %s by %.2f (horizon %s years)",
        location.zip_code,
        multiplier,
        horizon_years,
    )
    return ResolvedRates(
        home_appreciation_rate=location.home_appreciation_rate * multiplier,
        rent_growth_rate=max(0.0, location.rent_growth_rate * multiplier),
        investment_return_rate=investment_return,
        source="location",
    )
