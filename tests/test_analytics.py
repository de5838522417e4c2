import math
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from analytics import (
    calculate_cashflows,
    calculate_insights,
    calculate_portfolio_growth,
    escape_velocity,
    format_currency,
    project_terminal_mix,
)
from simulation import YearState


def _states(*pairs):
    return [
        YearState(
            year=year,
            btc_with_income=with_income,
            btc_without_income=without_income,
            savings=without_income,
            investments=0.0,
            speculation=0.0,
        )
        for year, (with_income, without_income) in enumerate(pairs)
    ]


def test_format_currency():
    assert format_currency(0) == ("$0", True)
    assert format_currency(-1234.56) == ("($1,235)", False)
    assert format_currency(1234567.4) == ("$1,234,567", True)
    assert format_currency(2.5) == ("$3", True)


def test_format_currency_non_finite_never_raises():
    assert format_currency(float("nan")) == ("$--", True)
    assert format_currency(float("inf")) == ("$∞", True)
    assert format_currency(float("-inf")) == ("($∞)", False)


def test_escape_velocity():
    assert escape_velocity([0, 50, 120], [100, 100, 100]) == 2
    assert escape_velocity([0, 50, 90], [100, 100, 100]) is None
    assert escape_velocity([100, 200], [100, 100]) == 1


def test_escape_velocity_respects_horizon_and_missing_years():
    assert escape_velocity([0, 0, 200], [100, 100, 100], time_horizon=1) is None
    assert escape_velocity([0, 200], [100, 100], time_horizon=5) == 1
    assert escape_velocity([], [], time_horizon=3) is None


def test_portfolio_growth():
    growth = calculate_portfolio_growth(_states((2.0, 2.0), (2.5, 3.0)), 2.0)
    assert growth["btc_growth_with_income"] == pytest.approx(25.0)
    assert growth["btc_growth_without_income"] == pytest.approx(50.0)
    assert growth["btc_growth_difference"] == pytest.approx(25.0)
    assert growth["final_btc_with_income"] == 2.5


def test_portfolio_growth_rounds_to_two_decimals():
    growth = calculate_portfolio_growth(_states((3.0, 3.0), (4.0, 4.0)), 3.0)
    assert growth["btc_growth_with_income"] == 33.33


def test_portfolio_growth_with_zero_stack_propagates_non_finite():
    empty = calculate_portfolio_growth(_states((0.0, 0.0), (0.0, 0.0)), 0)
    assert empty["btc_growth_with_income"] == 0
    assert math.isnan(empty["btc_growth_difference"])

    grown = calculate_portfolio_growth(_states((0.0, 0.0), (1.0, 1.0)), 0)
    assert math.isinf(grown["btc_growth_without_income"])


def test_cashflows_at_activation_and_final_year():
    flows = calculate_cashflows([0, 10, 20], [0, 15, 25], [5, 6, 7], activation_year=1)
    assert flows["activation_year"] == {"without_leverage": 4, "with_leverage": 9}
    assert flows["final_year"] == {"without_leverage": 13, "with_leverage": 18}


def test_cashflows_out_of_range_activation_reads_zero():
    flows = calculate_cashflows([0, 10], [0, 15], [5, 6], activation_year=10)
    assert flows["activation_year"] == {"without_leverage": 0, "with_leverage": 0}


def test_terminal_mix_simple_case():
    mix = project_terminal_mix(50, 50, 0, 100, 100, 0, 0, time_horizon=1)
    assert mix["final_investments_pct"] == pytest.approx(200 / 3)
    assert mix["final_savings_pct"] == pytest.approx(100 / 3)
    assert mix["final_speculation_pct"] == pytest.approx(0)
    assert mix["mix_change"] == pytest.approx(50 / 3)


def test_terminal_mix_drifts_away_from_savings():
    mix = project_terminal_mix(65, 25, 10, 30, 0, 40, 0, time_horizon=20)
    assert mix["final_savings_pct"] < 65
    total = (
        mix["final_savings_pct"]
        + mix["final_investments_pct"]
        + mix["final_speculation_pct"]
    )
    assert total == pytest.approx(100)


def test_terminal_mix_edge_cases():
    assert project_terminal_mix(65, 25, 10, 30, 0, 40, 0, time_horizon=0) == {
        "final_savings_pct": 65,
        "final_investments_pct": 25,
        "final_speculation_pct": 10,
        "mix_change": 0.0,
    }
    zeros = project_terminal_mix(0, 0, 0, 30, 0, 40, 0, time_horizon=5)
    assert zeros["final_savings_pct"] == 0
    assert zeros["mix_change"] == 0


def test_insights_hide_leveraged_figures_without_collateral():
    params = dict(
        results=_states((1.0, 1.0), (1.0, 1.0)),
        btc_stack=1.0,
        usd_income=[0, 10],
        usd_income_with_leverage=[0, 10],
        annual_expenses=[5, 5],
        income_at_activation_years=[1, 10],
        income_at_activation_years_with_leverage=[6, 20],
        expenses_at_activation_years=[5, 5],
        activation_year=1,
        time_horizon=1,
        allocation=(100, 0, 0),
        yields=(0, 0, 0, 0),
        liquidation={"liquidation_buffer": 25.0},
    )
    plain = calculate_insights(leveraged=False, **params)
    assert plain.escape_year_base == 1
    assert plain.escape_year_leveraged is None
    assert plain.liquidation is None
    assert plain.portfolio_mix["final_savings_pct"] == pytest.approx(100)

    leveraged = calculate_insights(leveraged=True, **params)
    assert leveraged.escape_year_leveraged == 0
    assert leveraged.liquidation == {"liquidation_buffer": 25.0}
