"""Income and leverage calculations for the Bitcoin portfolio projection."""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from config import (
    LIQUIDATION_LTV,
    RISK_BUFFER_HIGH,
    RISK_BUFFER_LOW,
    RISK_BUFFER_MODERATE,
)
from rates import compound_series, value_at


@dataclass(frozen=True)
class LoanDetails:
    """Loan taken against part of the savings bucket at activation."""

    collateral_btc: float
    price_at_activation: float
    loan_principal: float
    annual_interest: float
    annual_payment: float
    total_interest: float
    liquidation_price: float
    risk_level: str


@dataclass(frozen=True)
class IncomeProjection:
    usd_income: tuple[float, ...]
    usd_income_with_leverage: tuple[float, ...]
    btc_income: tuple[float, ...]
    annual_expenses: tuple[float, ...]
    income_pool: float


@dataclass(frozen=True)
class ActivationSweep:
    """First-year income for every candidate activation year."""

    income: tuple[float, ...]
    income_with_leverage: tuple[float, ...]
    expenses: tuple[float, ...]


def annual_debt_service(
    loan_principal: float, loan_rate: float, loan_term_years: int, interest_only: bool
) -> float:
    """Yearly payment on the loan.

    Interest-only loans pay ``loan_rate`` percent of the principal each year.
    Otherwise the payment fully amortizes the principal over
    ``loan_term_years`` annual installments.
    """
    rate = loan_rate / 100
    if interest_only:
        return loan_principal * rate
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if rate == 0:
            return float(np.divide(loan_principal, np.float64(loan_term_years)))
        growth = np.power(np.float64(1 + rate), loan_term_years)
        return float(loan_principal * rate * growth / (growth - 1))


def risk_level(price_at_activation: float, liquidation_price: float) -> str:
    """Classify the headroom between the activation price and liquidation."""
    with np.errstate(divide="ignore", invalid="ignore"):
        headroom = price_at_activation - liquidation_price
        buffer = float(np.divide(headroom, np.float64(liquidation_price)) * 100)
    if buffer > RISK_BUFFER_LOW:
        return "low"
    if buffer > RISK_BUFFER_MODERATE:
        return "moderate"
    if buffer > RISK_BUFFER_HIGH:
        return "high"
    return "extreme"


def calculate_loan_details(
    savings_at_activation: float,
    price_at_activation: float,
    collateral_pct: float,
    ltv_ratio: float,
    loan_rate: float,
    loan_term_years: int,
    interest_only: bool,
) -> LoanDetails:
    """Size the loan backed by ``collateral_pct`` percent of the savings bucket.

    The principal is ``ltv_ratio`` percent of the collateral's USD value at
    ``price_at_activation``. Liquidation is assumed at an 80% loan-to-value.
    """
    collateral_btc = savings_at_activation * (collateral_pct / 100)
    loan_principal = collateral_btc * (ltv_ratio / 100) * price_at_activation
    annual_interest = loan_principal * (loan_rate / 100)
    annual_payment = annual_debt_service(
        loan_principal, loan_rate, loan_term_years, interest_only
    )
    if interest_only:
        total_interest = annual_payment * loan_term_years
    else:
        total_interest = annual_payment * loan_term_years - loan_principal
    liquidation_price = price_at_activation * (ltv_ratio / LIQUIDATION_LTV)

    return LoanDetails(
        collateral_btc=collateral_btc,
        price_at_activation=price_at_activation,
        loan_principal=loan_principal,
        annual_interest=annual_interest,
        annual_payment=float(annual_payment),
        total_interest=float(total_interest),
        liquidation_price=liquidation_price,
        risk_level=risk_level(price_at_activation, liquidation_price),
    )


def calculate_liquidation_buffer(
    prices: Sequence[float],
    activation_year: int,
    time_horizon: int,
    liquidation_price: float,
) -> Optional[dict[str, float]]:
    """Compare the lowest projected price after activation with liquidation.

    Returns ``None`` when no projected year falls between ``activation_year``
    and ``time_horizon``.
    """
    window = [
        value_at(prices, year)
        for year in range(max(activation_year, 0), min(time_horizon + 1, len(prices)))
    ]
    if not window:
        return None
    min_price = min(window)
    with np.errstate(divide="ignore", invalid="ignore"):
        headroom = min_price - liquidation_price
        buffer = float(np.divide(headroom, np.float64(liquidation_price)) * 100)
    return {
        "liquidation_price": liquidation_price,
        "min_btc_price": min_price,
        "max_btc_price": max(window),
        "liquidation_buffer": buffer,
    }


def calculate_additional_collateral_potential(
    savings_at_activation: float, loan: LoanDetails, collateral_pct: float
) -> Optional[tuple[float, float]]:
    """Liquidation price if the rest of the savings bucket were pledged too.

    Returns ``(additional_btc, improved_liquidation_price)`` or ``None`` when
    the whole bucket is already collateral.
    """
    additional_btc = savings_at_activation - loan.collateral_btc
    if collateral_pct >= 100 or additional_btc <= 0:
        return None
    total_collateral = loan.collateral_btc + additional_btc
    with np.errstate(divide="ignore", invalid="ignore"):
        liquidation_value = np.float64(total_collateral * LIQUIDATION_LTV / 100)
        improved = float(np.divide(loan.loan_principal, liquidation_value))
    return additional_btc, improved


def project_expenses(
    starting_expenses: float, inflation_rates: Sequence[float], time_horizon: int
) -> list[float]:
    """Annual expenses inflated by the preceding years' inflation rates."""
    return compound_series(starting_expenses, inflation_rates, time_horizon)


def project_income(
    extracted_btc: float,
    prices: Sequence[float],
    income_yield_rates: Sequence[float],
    expenses: Sequence[float],
    time_horizon: int,
    activation_year: int,
    income_allocation_pct: float,
    income_reinvestment_pct: float,
    collateral_pct: float = 0.0,
    loan: Optional[LoanDetails] = None,
) -> IncomeProjection:
    """Project USD and BTC income from the pool funded at activation.

    At ``activation_year`` the extracted BTC is sold at that year's price into
    a USD pool. From then on the pool yields at the income-yield rate;
    ``income_reinvestment_pct`` percent of each year's yield stays in the pool
    and the rest is paid out as income.

    The leveraged track adds the loan principal to its pool and subtracts the
    annual debt service from each payout. It only differs from the base track
    when there is both collateral and an income allocation.
    """
    leverage_active = (
        loan is not None and collateral_pct > 0 and income_allocation_pct > 0
    )
    reinvest = income_reinvestment_pct / 100

    pool = 0.0
    leveraged_pool = 0.0
    usd_income = []
    usd_income_with_leverage = []

    for year in range(time_horizon + 1):
        if year == activation_year:
            pool = extracted_btc * value_at(prices, year)
            leveraged_pool = pool + (loan.loan_principal if leverage_active else 0.0)

        if year < activation_year:
            usd_income.append(0.0)
            usd_income_with_leverage.append(0.0)
            continue

        rate = value_at(income_yield_rates, year) / 100
        base_yield = pool * rate
        leveraged_yield = leveraged_pool * rate
        base_income = base_yield - base_yield * reinvest
        leveraged_income = leveraged_yield - leveraged_yield * reinvest

        usd_income.append(base_income)
        if leverage_active:
            usd_income_with_leverage.append(leveraged_income - loan.annual_payment)
        else:
            usd_income_with_leverage.append(base_income)

        pool += base_yield * reinvest
        leveraged_pool += leveraged_yield * reinvest

    income_array = np.asarray(usd_income, dtype=float)
    price_array = np.asarray(
        [value_at(prices, year) for year in range(time_horizon + 1)], dtype=float
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        btc_income = np.where(income_array != 0, income_array / price_array, 0.0)

    return IncomeProjection(
        usd_income=tuple(usd_income),
        usd_income_with_leverage=tuple(usd_income_with_leverage),
        btc_income=tuple(btc_income.tolist()),
        annual_expenses=tuple(expenses),
        income_pool=extracted_btc * value_at(prices, activation_year),
    )


def sweep_activation_years(
    savings_by_year: Sequence[float],
    prices: Sequence[float],
    income_yield_rates: Sequence[float],
    expenses: Sequence[float],
    time_horizon: int,
    income_allocation_pct: float,
    income_reinvestment_pct: float,
    collateral_pct: float,
    ltv_ratio: float,
    loan_rate: float,
    loan_term_years: int,
    interest_only: bool,
) -> ActivationSweep:
    """First-year income had income been activated in each year ``0..horizon``.

    Each candidate year repeats the activation extraction on the pure-growth
    savings bucket. The leveraged figure is net of debt service and floored
    at zero.
    """
    reinvest = income_reinvestment_pct / 100
    income = []
    income_with_leverage = []
    swept_expenses = []

    for year in range(time_horizon + 1):
        savings = value_at(savings_by_year, year)
        price = value_at(prices, year)
        rate = value_at(income_yield_rates, year) / 100

        pool = savings * (income_allocation_pct / 100) * price
        total_yield = pool * rate
        annual_income = total_yield - total_yield * reinvest

        net_leveraged = annual_income
        if collateral_pct > 0:
            loan = calculate_loan_details(
                savings,
                price,
                collateral_pct,
                ltv_ratio,
                loan_rate,
                loan_term_years,
                interest_only,
            )
            leveraged_yield = (pool + loan.loan_principal) * rate
            leveraged_income = leveraged_yield - leveraged_yield * reinvest
            net_leveraged = float(
                np.maximum(0.0, leveraged_income - loan.annual_payment)
            )

        income.append(annual_income)
        income_with_leverage.append(net_leveraged)
        swept_expenses.append(value_at(expenses, year))

    return ActivationSweep(
        income=tuple(income),
        income_with_leverage=tuple(income_with_leverage),
        expenses=tuple(swept_expenses),
    )
