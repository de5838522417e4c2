import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from config import BTC_STACK_MAX
from engine import SimulationConfig
from validation import (
    validate_allocation,
    validate_inputs,
    validate_loan_configuration,
    validate_warnings,
)


def test_default_config_is_valid() -> None:
    config = SimulationConfig()
    assert validate_inputs(config) == []
    assert validate_warnings(config) == []
    is_valid, warnings, errors = validate_loan_configuration(config)
    assert is_valid
    assert warnings == []
    assert errors == []


def test_allocation_must_sum_to_100() -> None:
    assert validate_allocation(65, 25, 10) == (True, "", 100)

    is_valid, error, total = validate_allocation(60, 25, 10)
    assert not is_valid
    assert total == 95
    assert error == "Allocations must sum to 100% (current: 95%)"


def test_time_horizon_limits() -> None:
    for horizon in (0, 101):
        errors = validate_inputs(SimulationConfig(time_horizon=horizon, activation_year=0))
        assert any(
            "Time horizon" in error for error in errors
        ), f"Horizon {horizon} should fail validation"


def test_btc_stack_limits() -> None:
    assert "BTC stack must be greater than 0" in validate_inputs(
        SimulationConfig(btc_stack=0)
    )
    assert "BTC stack cannot exceed 1,000,000 BTC" in validate_inputs(
        SimulationConfig(btc_stack=BTC_STACK_MAX + 1)
    )


def test_negative_and_excessive_yields_fail() -> None:
    errors = validate_inputs(
        SimulationConfig(investments_start_yield=-1, speculation_end_yield=1001)
    )
    assert "Investments start yield cannot be negative" in errors
    assert "Speculation end yield cannot exceed 1000%" in errors


def test_warnings_for_suspicious_inputs() -> None:
    warnings = validate_warnings(
        SimulationConfig(
            time_horizon=10, activation_year=10, starting_expenses=0, exchange_rate=-1
        )
    )
    assert len(warnings) == 3
    assert "Activation year should be before the end of time horizon" in warnings


def test_loan_configuration_warnings() -> None:
    is_valid, warnings, errors = validate_loan_configuration(
        SimulationConfig(ltv_ratio=60, loan_rate=25, collateral_pct=90, loan_term_years=40)
    )
    assert is_valid
    assert errors == []
    assert len(warnings) == 4


def test_low_ltv_only_warns_when_leveraged() -> None:
    _, warnings, _ = validate_loan_configuration(SimulationConfig(ltv_ratio=5))
    assert any("Very low LTV" in warning for warning in warnings)

    _, warnings, _ = validate_loan_configuration(
        SimulationConfig(ltv_ratio=5, collateral_pct=0)
    )
    assert warnings == []


def test_loan_term_below_one_year_is_an_error() -> None:
    is_valid, _, errors = validate_loan_configuration(
        SimulationConfig(loan_term_years=0)
    )
    assert not is_valid
    assert errors == ["Loan term must be at least 1 year"]
