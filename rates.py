"""Per-year rate curve generation for inflation, BTC price and income yield.

Every generator returns a plain list of annual percentages with one entry per
year from ``0`` (now) to ``horizon`` inclusive. Inputs are never clamped:
negative rates model losses or deflation and non-finite values propagate.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

import numpy as np

from config import (
    DECAY_FACTOR,
    DECAY_FLOOR,
    DECAY_PERIOD_YEARS,
    INFLATION_CURVE_EXPONENT,
    PRICE_CURVE_EXPONENT,
    YIELD_CURVE_EXPONENT,
)
from scenarios import ECONOMIC_SCENARIOS, ScenarioCatalog, get_preset


@dataclass(frozen=True)
class FlatRate:
    rate: float


@dataclass(frozen=True)
class LinearRate:
    start: float
    end: float


@dataclass(frozen=True)
class PresetRate:
    """A curve taken from a named entry of the scenario catalog."""

    scenario: str


@dataclass(frozen=True)
class DecayingRate:
    initial_rate: float
    decay_factor: float = DECAY_FACTOR


@dataclass(frozen=True)
class ExplicitRates:
    values: tuple[float, ...]


RateSpec = Union[FlatRate, LinearRate, PresetRate, DecayingRate, ExplicitRates]
RATE_SPEC_TYPES = (FlatRate, LinearRate, PresetRate, DecayingRate, ExplicitRates)

# (curve exponent, rounding step) per rate kind
PRESET_SHAPES = {
    "inflation": (INFLATION_CURVE_EXPONENT, 2),
    "btc_price": (PRICE_CURVE_EXPONENT, 2),
    "income_yield": (YIELD_CURVE_EXPONENT, 1),
}


def _round_half_up(values: np.ndarray, step: float) -> np.ndarray:
    return np.floor(values / step + 0.5) * step


def flat(rate: float, horizon: int) -> list[float]:
    """Return ``horizon + 1`` copies of ``rate``."""
    return [rate] * (horizon + 1)


def linear(start: float, end: float, horizon: int) -> list[float]:
    """Interpolate linearly from ``start`` (year 0) to ``end`` (year ``horizon``)."""
    if horizon == 0:
        return [start]
    return np.linspace(start, end, horizon + 1).tolist()


def decaying_projection(
    initial_rate: float, horizon: int, decay_factor: float = DECAY_FACTOR
) -> list[float]:
    """Long-horizon projection: ``initial_rate`` decaying every four years.

    The rate for year ``y`` is ``initial_rate * decay_factor ** (y / 4)`` and
    never drops below :data:`config.DECAY_FLOOR`.
    """
    years = np.arange(horizon + 1, dtype=float)
    decayed = initial_rate * np.power(decay_factor, years / DECAY_PERIOD_YEARS)
    return np.maximum(decayed, DECAY_FLOOR).tolist()


def from_preset(
    preset_start: float,
    preset_end: float,
    horizon: int,
    curve_exponent: float = PRICE_CURVE_EXPONENT,
    step: float = 2,
) -> list[float]:
    """Curve between a preset's start and end rates.

    Progress runs as ``year / (horizon - 1)`` (``0`` when ``horizon <= 1``) and
    is raised to ``curve_exponent`` before interpolating, so the final year
    continues slightly past ``preset_end``. Each value is rounded half-up to
    the nearest multiple of ``step``.
    """
    years = np.arange(horizon + 1, dtype=float)
    if horizon > 1:
        progress = years / (horizon - 1)
    else:
        progress = np.zeros_like(years)
    curved = np.power(progress, curve_exponent)
    rates = preset_start + (preset_end - preset_start) * curved
    return _round_half_up(rates, step).tolist()


def normalize(rates: Sequence[float], target_length: int) -> list[float]:
    """Truncate or pad ``rates`` with its last value to ``target_length``.

    A new list is always returned; an empty input pads with ``0``.
    """
    result = list(rates[: max(target_length, 0)])
    fill = rates[-1] if len(rates) else 0.0
    result.extend([fill] * (target_length - len(result)))
    return result


def from_explicit_array(values: Sequence[float], horizon: int) -> list[float]:
    return normalize(values, horizon + 1)


def average_over_horizon(rates: Sequence[float], horizon: int) -> float:
    """Mean of years ``1..horizon``; year 0 is the present and is excluded."""
    relevant = np.asarray(rates[1 : horizon + 1], dtype=float)
    if relevant.size == 0:
        return 0.0
    return float(np.mean(relevant))


def compound_annual_growth(rates: Sequence[float], horizon: int) -> float:
    """Compound annual growth rate implied by years ``0..horizon - 1``.

    Rounded to one decimal place, returns ``0`` when there is nothing to
    compound.
    """
    if horizon <= 0 or len(rates) == 0:
        return 0.0
    used = np.asarray(rates[:horizon], dtype=float)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        compounded = np.prod(1 + used / 100)
        cagr = (np.power(compounded, 1 / used.size) - 1) * 100
    return round(float(cagr), 1)


def value_at(series: Sequence[float], index: int, default: float = 0.0) -> float:
    """Return ``series[index]`` or ``default`` when the year is out of range."""
    if 0 <= index < len(series):
        return series[index]
    return default


def compound_series(
    seed: float, rates: Sequence[float], horizon: int
) -> list[float]:
    """Compound ``seed`` by annual ``rates`` for each year ``0..horizon``.

    The value in year ``y`` is ``seed`` grown by the rates of years
    ``0..y - 1``, so year 0 is the seed itself. Used for BTC prices from the
    appreciation series and for expenses from the inflation series.
    """
    factors = np.array(
        [1 + value_at(rates, year) / 100 for year in range(max(horizon, 0))],
        dtype=float,
    )
    with np.errstate(over="ignore", invalid="ignore"):
        return (seed * np.cumprod(np.r_[1.0, factors])).tolist()


def generate(
    spec: Union[RateSpec, Sequence[float]],
    horizon: int,
    kind: str,
    scenarios: ScenarioCatalog = ECONOMIC_SCENARIOS,
) -> list[float]:
    """Resolve ``spec`` into a series of ``horizon + 1`` annual rates.

    ``kind`` selects the catalog curve and its preset shape and must be one of
    ``"inflation"``, ``"btc_price"`` or ``"income_yield"``. A bare sequence is
    treated as an explicit array.
    """
    if isinstance(spec, FlatRate):
        return flat(spec.rate, horizon)
    if isinstance(spec, LinearRate):
        return linear(spec.start, spec.end, horizon)
    if isinstance(spec, PresetRate):
        preset = get_preset(spec.scenario, kind, scenarios)
        exponent, step = PRESET_SHAPES[kind]
        return from_preset(
            preset.start_rate, preset.end_rate, horizon, exponent, step
        )
    if isinstance(spec, DecayingRate):
        return decaying_projection(spec.initial_rate, horizon, spec.decay_factor)
    if isinstance(spec, ExplicitRates):
        return from_explicit_array(spec.values, horizon)
    if isinstance(spec, Iterable) and not isinstance(spec, (str, bytes)):
        return from_explicit_array(list(spec), horizon)
    raise TypeError(f"Unsupported rate specification: {spec!r}")


def as_rate_spec(value: Union[RateSpec, Iterable[float]]) -> RateSpec:
    """Freeze a bare per-year sequence into :class:`ExplicitRates`.

    Rate specifications and anything that is not a sequence of rates are
    returned unchanged.
    """
    if isinstance(value, RATE_SPEC_TYPES):
        return value
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return ExplicitRates(tuple(value))
    return value
