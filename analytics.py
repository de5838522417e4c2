"""Summary metrics derived from a portfolio projection."""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

import numpy as np

from rates import value_at
from simulation import YearState, bucket_yield


@dataclass(frozen=True)
class PortfolioInsights:
    """Read-only summary metrics of one projection."""

    growth: Mapping[str, float]
    cashflows: Mapping[str, Mapping[str, float]]
    escape_year_base: Optional[int]
    escape_year_leveraged: Optional[int]
    portfolio_mix: Mapping[str, float]
    liquidation: Optional[Mapping[str, float]]


def _round_finite(value: float, digits: int = 2) -> float:
    return round(value, digits) if math.isfinite(value) else value


def calculate_portfolio_growth(
    results: Sequence[YearState], btc_stack: float
) -> dict[str, float]:
    """Percentage growth of the final stack on both tracks.

    A zero starting stack reports ``0`` growth for a track that ends empty and
    infinite growth otherwise; their difference is then undefined (``nan``).
    """
    final_with_income = results[-1].btc_with_income if results else 0.0
    final_without_income = results[-1].btc_without_income if results else 0.0

    if btc_stack == 0:
        return {
            "btc_growth_with_income": 0.0 if final_with_income == 0 else math.inf,
            "btc_growth_without_income": 0.0 if final_without_income == 0 else math.inf,
            "btc_growth_difference": math.nan,
            "final_btc_with_income": final_with_income,
            "final_btc_without_income": final_without_income,
        }

    growth_with_income = _round_finite(
        (final_with_income - btc_stack) / btc_stack * 100
    )
    growth_without_income = _round_finite(
        (final_without_income - btc_stack) / btc_stack * 100
    )
    return {
        "btc_growth_with_income": growth_with_income,
        "btc_growth_without_income": growth_without_income,
        "btc_growth_difference": _round_finite(
            growth_without_income - growth_with_income
        ),
        "final_btc_with_income": final_with_income,
        "final_btc_without_income": final_without_income,
    }


def calculate_cashflows(
    usd_income: Sequence[float],
    usd_income_with_leverage: Sequence[float],
    annual_expenses: Sequence[float],
    activation_year: int,
) -> dict[str, dict[str, float]]:
    """Income minus expenses at the activation year and in the final year."""
    final_index = len(annual_expenses) - 1
    activation_expenses = value_at(annual_expenses, activation_year)
    final_expenses = value_at(annual_expenses, final_index)
    return {
        "activation_year": {
            "without_leverage": value_at(usd_income, activation_year)
            - activation_expenses,
            "with_leverage": value_at(usd_income_with_leverage, activation_year)
            - activation_expenses,
        },
        "final_year": {
            "without_leverage": value_at(usd_income, len(usd_income) - 1)
            - final_expenses,
            "with_leverage": value_at(
                usd_income_with_leverage, len(usd_income_with_leverage) - 1
            )
            - final_expenses,
        },
    }


def escape_velocity(
    income: Sequence[float],
    expenses: Sequence[float],
    time_horizon: Optional[int] = None,
) -> Optional[int]:
    """First year in which income strictly exceeds expenses, or ``None``.

    Examples
    --------
    >>> escape_velocity([0, 50, 120], [100, 100, 100])
    2
    >>> escape_velocity([0, 50, 90], [100, 100, 100]) is None
    True
    """
    if time_horizon is None:
        time_horizon = len(income) - 1
    for year in range(time_horizon + 1):
        if value_at(income, year) > value_at(expenses, year):
            return year
    return None


def project_terminal_mix(
    savings_pct: float,
    investments_pct: float,
    speculation_pct: float,
    investments_start_yield: float,
    investments_end_yield: float,
    speculation_start_yield: float,
    speculation_end_yield: float,
    time_horizon: int,
) -> dict[str, float]:
    """Bucket percentages in the final year under independent compounding.

    The projection never rebalances, so it reports drift even for portfolios
    that are reallocated every year.
    """
    if time_horizon <= 0:
        return {
            "final_savings_pct": savings_pct,
            "final_investments_pct": investments_pct,
            "final_speculation_pct": speculation_pct,
            "mix_change": 0.0,
        }

    investments_growth = 1.0
    speculation_growth = 1.0
    for year in range(time_horizon):
        investments_growth *= 1 + bucket_yield(
            year, investments_start_yield, investments_end_yield, time_horizon
        ) / 100
        speculation_growth *= 1 + bucket_yield(
            year, speculation_start_yield, speculation_end_yield, time_horizon
        ) / 100

    weighted_investments = investments_pct * investments_growth
    weighted_speculation = speculation_pct * speculation_growth
    total = savings_pct + weighted_investments + weighted_speculation
    if total == 0:
        return {
            "final_savings_pct": 0.0,
            "final_investments_pct": 0.0,
            "final_speculation_pct": 0.0,
            "mix_change": 0.0,
        }

    final_investments_pct = weighted_investments / total * 100
    final_speculation_pct = weighted_speculation / total * 100
    final_savings_pct = 100 - final_investments_pct - final_speculation_pct
    return {
        "final_savings_pct": final_savings_pct,
        "final_investments_pct": final_investments_pct,
        "final_speculation_pct": final_speculation_pct,
        "mix_change": abs(final_savings_pct - savings_pct),
    }


def format_currency(value: float) -> tuple[str, bool]:
    """Format USD as a whole-dollar string with accounting-style negatives.

    Returns ``(text, is_positive)``. Non-finite values never raise.

    Examples
    --------
    >>> format_currency(1234.5)
    ('$1,235', True)
    >>> format_currency(-1234.56)
    ('($1,235)', False)
    """
    if math.isnan(value):
        return "$--", True
    if math.isinf(value):
        return ("$∞", True) if value > 0 else ("($∞)", False)

    is_positive = value >= 0
    rounded = int(np.floor(value + 0.5))
    if is_positive:
        return f"${rounded:,}", True
    return f"(${abs(rounded):,})", False


def calculate_insights(
    results: Sequence[YearState],
    btc_stack: float,
    usd_income: Sequence[float],
    usd_income_with_leverage: Sequence[float],
    annual_expenses: Sequence[float],
    income_at_activation_years: Sequence[float],
    income_at_activation_years_with_leverage: Sequence[float],
    expenses_at_activation_years: Sequence[float],
    activation_year: int,
    time_horizon: int,
    allocation: tuple[float, float, float],
    yields: tuple[float, float, float, float],
    leveraged: bool,
    liquidation: Optional[dict[str, float]] = None,
) -> PortfolioInsights:
    """Bundle the summary metrics of one projection.

    Escape velocity is read from the activation-year sweep; the leveraged
    year is only reported when leverage is in use.
    """
    cashflows = calculate_cashflows(
        usd_income, usd_income_with_leverage, annual_expenses, activation_year
    )
    return PortfolioInsights(
        growth=MappingProxyType(calculate_portfolio_growth(results, btc_stack)),
        cashflows=MappingProxyType(
            {key: MappingProxyType(flows) for key, flows in cashflows.items()}
        ),
        escape_year_base=escape_velocity(
            income_at_activation_years, expenses_at_activation_years, time_horizon
        ),
        escape_year_leveraged=(
            escape_velocity(
                income_at_activation_years_with_leverage,
                expenses_at_activation_years,
                time_horizon,
            )
            if leveraged
            else None
        ),
        portfolio_mix=MappingProxyType(
            project_terminal_mix(*allocation, *yields, time_horizon)
        ),
        liquidation=(
            MappingProxyType(dict(liquidation))
            if leveraged and liquidation is not None
            else None
        ),
    )
