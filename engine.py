"""Single entry point turning a configuration snapshot into projections.

``simulate`` is a pure function: it reads the configuration and the scenario
catalog it carries, and returns a fresh :class:`ResultSet`. Hosts decide when
to call it and whether to cache results.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import pandas as pd

from analytics import PortfolioInsights, calculate_insights
from calculations import (
    LoanDetails,
    calculate_additional_collateral_potential,
    calculate_liquidation_buffer,
    calculate_loan_details,
    project_expenses,
    project_income,
    sweep_activation_years,
)
from config import (
    DEFAULT_ACTIVATION_YEAR,
    DEFAULT_ANNUAL_REALLOCATION,
    DEFAULT_BTC_STACK,
    DEFAULT_COLLATERAL_PCT,
    DEFAULT_ECONOMIC_SCENARIO,
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_INCOME_ALLOCATION_PCT,
    DEFAULT_INCOME_REINVESTMENT_PCT,
    DEFAULT_INTEREST_ONLY,
    DEFAULT_INVESTMENTS_END_YIELD,
    DEFAULT_INVESTMENTS_PCT,
    DEFAULT_INVESTMENTS_START_YIELD,
    DEFAULT_LOAN_RATE,
    DEFAULT_LOAN_TERM_YEARS,
    DEFAULT_LTV_RATIO,
    DEFAULT_PRICE_CRASH_PCT,
    DEFAULT_SAVINGS_PCT,
    DEFAULT_SPECULATION_END_YIELD,
    DEFAULT_SPECULATION_PCT,
    DEFAULT_SPECULATION_START_YIELD,
    DEFAULT_STARTING_EXPENSES,
    DEFAULT_TIME_HORIZON,
)
from rates import (
    PresetRate,
    RateSpec,
    as_rate_spec,
    compound_annual_growth,
    compound_series,
    generate,
    value_at,
)
from scenarios import ECONOMIC_SCENARIOS, ScenarioCatalog
from simulation import YearState, simulate_portfolio

RateInput = Union[RateSpec, Sequence[float]]


@dataclass(frozen=True)
class SimulationConfig:
    """Everything a projection depends on.

    Percentages are plain numbers (``65`` means 65%). Each rate input is
    either a rate specification or an explicit per-year sequence. Sequences
    are copied into :class:`ExplicitRates` on construction, so the config stays
    hashable and later edits to the source list do not leak in.
    """

    btc_stack: float = DEFAULT_BTC_STACK
    time_horizon: int = DEFAULT_TIME_HORIZON
    savings_pct: float = DEFAULT_SAVINGS_PCT
    investments_pct: float = DEFAULT_INVESTMENTS_PCT
    speculation_pct: float = DEFAULT_SPECULATION_PCT
    investments_start_yield: float = DEFAULT_INVESTMENTS_START_YIELD
    investments_end_yield: float = DEFAULT_INVESTMENTS_END_YIELD
    speculation_start_yield: float = DEFAULT_SPECULATION_START_YIELD
    speculation_end_yield: float = DEFAULT_SPECULATION_END_YIELD
    enable_annual_reallocation: bool = DEFAULT_ANNUAL_REALLOCATION
    activation_year: int = DEFAULT_ACTIVATION_YEAR
    income_allocation_pct: float = DEFAULT_INCOME_ALLOCATION_PCT
    income_reinvestment_pct: float = DEFAULT_INCOME_REINVESTMENT_PCT
    starting_expenses: float = DEFAULT_STARTING_EXPENSES
    inflation: RateInput = PresetRate(DEFAULT_ECONOMIC_SCENARIO)
    btc_price: RateInput = PresetRate(DEFAULT_ECONOMIC_SCENARIO)
    income_yield: RateInput = PresetRate(DEFAULT_ECONOMIC_SCENARIO)
    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    collateral_pct: float = DEFAULT_COLLATERAL_PCT
    ltv_ratio: float = DEFAULT_LTV_RATIO
    loan_rate: float = DEFAULT_LOAN_RATE
    loan_term_years: int = DEFAULT_LOAN_TERM_YEARS
    interest_only: bool = DEFAULT_INTEREST_ONLY
    price_crash_pct: float = DEFAULT_PRICE_CRASH_PCT
    scenarios: ScenarioCatalog = field(
        default_factory=lambda: ECONOMIC_SCENARIOS, compare=False, repr=False
    )

    def __post_init__(self):
        for name in ("inflation", "btc_price", "income_yield"):
            object.__setattr__(self, name, as_rate_spec(getattr(self, name)))


@dataclass(frozen=True)
class ResultSet:
    results: tuple[YearState, ...]
    usd_income: tuple[float, ...]
    usd_income_with_leverage: tuple[float, ...]
    btc_income: tuple[float, ...]
    annual_expenses: tuple[float, ...]
    income_at_activation_years: tuple[float, ...]
    income_at_activation_years_with_leverage: tuple[float, ...]
    expenses_at_activation_years: tuple[float, ...]
    loan_principal: float
    loan_interest: float
    average_price_appreciation: float
    inflation_rates: tuple[float, ...]
    btc_price_rates: tuple[float, ...]
    income_yield_rates: tuple[float, ...]
    btc_prices: tuple[float, ...]
    loan: LoanDetails
    additional_collateral: Optional[tuple[float, float]]
    insights: PortfolioInsights

    def to_frame(self) -> pd.DataFrame:
        """Per-year series as a DataFrame indexed by year."""
        df = pd.DataFrame(
            {
                "BTC with income (₿)": [r.btc_with_income for r in self.results],
                "BTC without income (₿)": [r.btc_without_income for r in self.results],
                "Savings (₿)": [r.savings for r in self.results],
                "Investments (₿)": [r.investments for r in self.results],
                "Speculation (₿)": [r.speculation for r in self.results],
                "BTC price ($)": self.btc_prices,
                "Inflation (%)": self.inflation_rates,
                "BTC appreciation (%)": self.btc_price_rates,
                "Income yield (%)": self.income_yield_rates,
                "Income ($)": self.usd_income,
                "Income with leverage ($)": self.usd_income_with_leverage,
                "Income (₿)": self.btc_income,
                "Expenses ($)": self.annual_expenses,
                "Income if activated ($)": self.income_at_activation_years,
                "Leveraged income if activated ($)": (
                    self.income_at_activation_years_with_leverage
                ),
                "Expenses if activated ($)": self.expenses_at_activation_years,
            },
            index=pd.Index([r.year for r in self.results], name="Year"),
        )
        return df


def simulate(config: SimulationConfig) -> ResultSet:
    """Run the full projection for ``config``.

    Rate series are resolved against ``config.scenarios``, the portfolio is
    grown year by year, and the income, loan and summary metrics are derived
    from the grown portfolio. Nothing is clamped: zero stacks, zero horizons
    and non-finite inputs flow through as ``inf``/``nan``.
    """
    horizon = config.time_horizon
    if not 0 <= config.activation_year <= horizon:
        logging.warning(
            "Activation year %s is outside the %s-year horizon; income stays at zero",
            config.activation_year,
            horizon,
        )

    inflation_rates = generate(config.inflation, horizon, "inflation", config.scenarios)
    btc_price_rates = generate(config.btc_price, horizon, "btc_price", config.scenarios)
    income_yield_rates = generate(
        config.income_yield, horizon, "income_yield", config.scenarios
    )
    prices = compound_series(config.exchange_rate, btc_price_rates, horizon)

    projection = simulate_portfolio(
        btc_stack=config.btc_stack,
        savings_pct=config.savings_pct,
        investments_pct=config.investments_pct,
        speculation_pct=config.speculation_pct,
        investments_start_yield=config.investments_start_yield,
        investments_end_yield=config.investments_end_yield,
        speculation_start_yield=config.speculation_start_yield,
        speculation_end_yield=config.speculation_end_yield,
        time_horizon=horizon,
        enable_annual_reallocation=config.enable_annual_reallocation,
        activation_year=config.activation_year,
        income_allocation_pct=config.income_allocation_pct,
        price_crash_pct=config.price_crash_pct,
    )

    expenses = project_expenses(config.starting_expenses, inflation_rates, horizon)
    loan = calculate_loan_details(
        projection.savings_at_activation,
        value_at(prices, config.activation_year),
        config.collateral_pct,
        config.ltv_ratio,
        config.loan_rate,
        config.loan_term_years,
        config.interest_only,
    )
    income = project_income(
        projection.extracted_btc,
        prices,
        income_yield_rates,
        expenses,
        horizon,
        config.activation_year,
        config.income_allocation_pct,
        config.income_reinvestment_pct,
        collateral_pct=config.collateral_pct,
        loan=loan,
    )
    sweep = sweep_activation_years(
        projection.savings_by_year,
        prices,
        income_yield_rates,
        expenses,
        horizon,
        config.income_allocation_pct,
        config.income_reinvestment_pct,
        config.collateral_pct,
        config.ltv_ratio,
        config.loan_rate,
        config.loan_term_years,
        config.interest_only,
    )

    # Headline loan figures use today's stack and price
    display_principal = (
        config.btc_stack
        * (config.savings_pct / 100)
        * (config.collateral_pct / 100)
        * (config.ltv_ratio / 100)
        * config.exchange_rate
    )
    display_interest = display_principal * (config.loan_rate / 100)

    leveraged = config.collateral_pct > 0
    insights = calculate_insights(
        projection.states,
        config.btc_stack,
        income.usd_income,
        income.usd_income_with_leverage,
        income.annual_expenses,
        sweep.income,
        sweep.income_with_leverage,
        sweep.expenses,
        config.activation_year,
        horizon,
        allocation=(config.savings_pct, config.investments_pct, config.speculation_pct),
        yields=(
            config.investments_start_yield,
            config.investments_end_yield,
            config.speculation_start_yield,
            config.speculation_end_yield,
        ),
        leveraged=leveraged,
        liquidation=(
            calculate_liquidation_buffer(
                prices, config.activation_year, horizon, loan.liquidation_price
            )
            if leveraged
            else None
        ),
    )

    logging.debug(
        "Simulated %s years: final stack %s BTC with income, %s BTC without",
        horizon,
        insights.growth["final_btc_with_income"],
        insights.growth["final_btc_without_income"],
    )

    return ResultSet(
        results=projection.states,
        usd_income=income.usd_income,
        usd_income_with_leverage=income.usd_income_with_leverage,
        btc_income=income.btc_income,
        annual_expenses=income.annual_expenses,
        income_at_activation_years=sweep.income,
        income_at_activation_years_with_leverage=sweep.income_with_leverage,
        expenses_at_activation_years=sweep.expenses,
        loan_principal=display_principal,
        loan_interest=display_interest,
        average_price_appreciation=compound_annual_growth(btc_price_rates, horizon),
        inflation_rates=tuple(inflation_rates),
        btc_price_rates=tuple(btc_price_rates),
        income_yield_rates=tuple(income_yield_rates),
        btc_prices=tuple(prices),
        loan=loan,
        additional_collateral=(
            calculate_additional_collateral_potential(
                projection.savings_at_activation, loan, config.collateral_pct
            )
            if leveraged
            else None
        ),
        insights=insights,
    )
