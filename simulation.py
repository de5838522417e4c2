"""Year-by-year growth of the three allocation buckets."""

import logging
from dataclasses import dataclass

from config import ALLOCATION_TOTAL
from rates import value_at


@dataclass(frozen=True)
class YearState:
    """Portfolio snapshot at the start of ``year``.

    ``btc_with_income`` and ``btc_without_income`` are total stacks on the two
    tracks; the bucket fields break down the pure-growth track.
    """

    year: int
    btc_with_income: float
    btc_without_income: float
    savings: float
    investments: float
    speculation: float


@dataclass(frozen=True)
class PortfolioProjection:
    states: tuple[YearState, ...]
    savings_by_year: tuple[float, ...]
    savings_at_activation: float
    extracted_btc: float


def bucket_yield(year: int, start: float, end: float, time_horizon: int) -> float:
    """Yield in percent for a bucket moving linearly from ``start`` to ``end``."""
    if start == 0 and end == 0:
        return 0.0
    return start - (start - end) * (year / time_horizon)


def split_allocation(
    total: float, savings_pct: float, investments_pct: float, speculation_pct: float
) -> tuple[float, float, float]:
    return (
        total * (savings_pct / 100),
        total * (investments_pct / 100),
        total * (speculation_pct / 100),
    )


def grow_buckets(
    buckets: tuple[float, float, float],
    year: int,
    time_horizon: int,
    investments_start_yield: float,
    investments_end_yield: float,
    speculation_start_yield: float,
    speculation_end_yield: float,
) -> tuple[float, float, float]:
    """Apply one year of growth. Savings does not earn a yield."""
    savings, investments, speculation = buckets
    investments_yield = bucket_yield(
        year, investments_start_yield, investments_end_yield, time_horizon
    )
    speculation_yield = bucket_yield(
        year, speculation_start_yield, speculation_end_yield, time_horizon
    )
    return (
        savings,
        investments * (1 + investments_yield / 100),
        speculation * (1 + speculation_yield / 100),
    )


def simulate_portfolio(
    btc_stack: float,
    savings_pct: float,
    investments_pct: float,
    speculation_pct: float,
    investments_start_yield: float,
    investments_end_yield: float,
    speculation_start_yield: float,
    speculation_end_yield: float,
    time_horizon: int,
    enable_annual_reallocation: bool,
    activation_year: int,
    income_allocation_pct: float,
    price_crash_pct: float = 0.0,
) -> PortfolioProjection:
    """Project both stack tracks for years ``0..time_horizon``.

    The with-income track matches the pure-growth track until
    ``activation_year``, where ``income_allocation_pct`` percent of its savings
    bucket is removed to fund the income pool. With annual reallocation the
    grown total is split back to the target percentages after every year,
    otherwise each bucket compounds on its own.

    Allocation percentages are used as given, even when they do not add up to
    100. ``price_crash_pct`` scales the reported states only.

    Returns:
        A :class:`PortfolioProjection` with ``time_horizon + 1`` states, the
        uncrashed savings bucket of the pure-growth track per year, the savings
        bucket at activation and the BTC moved into the income pool.
    """
    total_pct = savings_pct + investments_pct + speculation_pct
    if total_pct != ALLOCATION_TOTAL:
        logging.warning(
            "Allocation percentages sum to %s%%, projecting with them unchanged",
            total_pct,
        )

    allocation = (savings_pct, investments_pct, speculation_pct)
    yields = (
        investments_start_yield,
        investments_end_yield,
        speculation_start_yield,
        speculation_end_yield,
    )
    crash_multiplier = 1 - price_crash_pct / 100

    without_income = split_allocation(btc_stack, *allocation)
    with_income = without_income
    savings_by_year = []
    extracted_btc = 0.0
    states = []

    for year in range(time_horizon + 1):
        if year == activation_year:
            savings, investments, speculation = with_income
            extracted_btc = savings * (income_allocation_pct / 100)
            with_income = (savings - extracted_btc, investments, speculation)

        savings_by_year.append(without_income[0])
        states.append(
            YearState(
                year=year,
                btc_with_income=sum(with_income) * crash_multiplier,
                btc_without_income=sum(without_income) * crash_multiplier,
                savings=without_income[0] * crash_multiplier,
                investments=without_income[1] * crash_multiplier,
                speculation=without_income[2] * crash_multiplier,
            )
        )

        if year < time_horizon:
            without_income = grow_buckets(without_income, year, time_horizon, *yields)
            with_income = grow_buckets(with_income, year, time_horizon, *yields)
            if enable_annual_reallocation:
                without_income = split_allocation(sum(without_income), *allocation)
                with_income = split_allocation(sum(with_income), *allocation)

    return PortfolioProjection(
        states=tuple(states),
        savings_by_year=tuple(savings_by_year),
        savings_at_activation=value_at(savings_by_year, activation_year),
        extracted_btc=extracted_btc,
    )
