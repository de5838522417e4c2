# validation.py
from config import (
    ALLOCATION_TOTAL,
    BTC_STACK_MAX,
    COLLATERAL_WARN_HIGH,
    LOAN_RATE_WARN_HIGH,
    LOAN_RATE_WARN_LOW,
    LOAN_TERM_MIN,
    LOAN_TERM_WARN_MAX,
    LTV_WARN_HIGH,
    LTV_WARN_LOW,
    TIME_HORIZON_RANGE,
    YIELD_MAX,
)


def validate_allocation(savings_pct, investments_pct, speculation_pct):
    """Return ``(is_valid, error, total)`` for the three bucket percentages."""
    total = savings_pct + investments_pct + speculation_pct
    is_valid = total == ALLOCATION_TOTAL
    error = "" if is_valid else f"Allocations must sum to 100% (current: {total}%)"
    return is_valid, error, total


def _validate_yield_pair(label, start_yield, end_yield):
    errors = []
    if start_yield < 0:
        errors.append(f"{label} start yield cannot be negative")
    if end_yield < 0:
        errors.append(f"{label} end yield cannot be negative")
    if start_yield > YIELD_MAX:
        errors.append(f"{label} start yield cannot exceed {YIELD_MAX:g}%")
    if end_yield > YIELD_MAX:
        errors.append(f"{label} end yield cannot exceed {YIELD_MAX:g}%")
    return errors


def validate_inputs(config):
    """Validate a simulation config and return any errors found.

    The engine runs with whatever it is given; these messages are advisory
    for the host application.
    """
    errors = []

    if not TIME_HORIZON_RANGE[0] <= config.time_horizon <= TIME_HORIZON_RANGE[1]:
        errors.append(
            f"Time horizon must be between {TIME_HORIZON_RANGE[0]} and {TIME_HORIZON_RANGE[1]} years"
        )

    if config.btc_stack <= 0:
        errors.append("BTC stack must be greater than 0")
    elif config.btc_stack > BTC_STACK_MAX:
        errors.append("BTC stack cannot exceed 1,000,000 BTC")

    errors.extend(
        _validate_yield_pair(
            "Investments", config.investments_start_yield, config.investments_end_yield
        )
    )
    errors.extend(
        _validate_yield_pair(
            "Speculation", config.speculation_start_yield, config.speculation_end_yield
        )
    )

    is_valid, error, _ = validate_allocation(
        config.savings_pct, config.investments_pct, config.speculation_pct
    )
    if not is_valid:
        errors.append(error)

    return errors


def validate_warnings(config):
    """Return advisory warnings for inputs that are legal but suspicious."""
    warnings = []

    if config.activation_year >= config.time_horizon:
        warnings.append("Activation year should be before the end of time horizon")

    if config.starting_expenses <= 0:
        warnings.append("Starting expenses should be greater than 0")

    if config.exchange_rate <= 0:
        warnings.append("Exchange rate should be greater than 0")

    return warnings


def validate_loan_configuration(config):
    """Check the leverage settings.

    Returns:
        tuple: ``(is_valid, warnings, errors)``; only errors make the loan
            configuration invalid.
    """
    warnings = []
    errors = []

    if config.ltv_ratio > LTV_WARN_HIGH:
        warnings.append("LTV ratio above 50% increases liquidation risk significantly")

    if config.ltv_ratio < LTV_WARN_LOW and config.collateral_pct > 0:
        warnings.append("Very low LTV ratio may limit the effectiveness of leverage")

    if config.loan_rate < LOAN_RATE_WARN_LOW:
        warnings.append("Unusually low loan rate - verify this is realistic")

    if config.loan_rate > LOAN_RATE_WARN_HIGH:
        warnings.append("High loan rate significantly increases cost of leverage")

    if config.loan_term_years < LOAN_TERM_MIN:
        errors.append("Loan term must be at least 1 year")

    if config.loan_term_years > LOAN_TERM_WARN_MAX:
        warnings.append("Very long loan terms increase exposure to rate changes")

    if config.collateral_pct > COLLATERAL_WARN_HIGH:
        warnings.append("Using most of your stack as collateral increases risk")

    return not errors, warnings, errors
