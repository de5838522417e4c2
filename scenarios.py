"""Named economic scenarios for inflation, BTC price and income yield curves."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

RATE_KINDS = ("inflation", "btc_price", "income_yield")


@dataclass(frozen=True)
class ScenarioPreset:
    """Start/end rate pair for a single curve, in percent per year."""

    name: str
    start_rate: float
    end_rate: float
    max_axis: float


@dataclass(frozen=True)
class EconomicScenario:
    name: str
    description: str
    inflation_avg: float
    btc_appreciation_avg: float
    income_growth: float
    inflation: ScenarioPreset
    btc_price: ScenarioPreset
    income_yield: ScenarioPreset

    def preset(self, kind: str) -> ScenarioPreset:
        """Return the preset for ``kind`` (one of :data:`RATE_KINDS`)."""
        if kind not in RATE_KINDS:
            raise KeyError(f"Unknown rate kind: {kind!r}")
        return getattr(self, kind)


ScenarioCatalog = Mapping[str, EconomicScenario]


ECONOMIC_SCENARIOS: ScenarioCatalog = MappingProxyType(
    {
        "tight": EconomicScenario(
            name="Tight monetary policy",
            description="Low inflation, steady BTC growth",
            inflation_avg=2,
            btc_appreciation_avg=15,
            income_growth=7.5,
            inflation=ScenarioPreset("Tight monetary policy", 2, 2, 10),
            btc_price=ScenarioPreset("Tight monetary policy - Low growth", 10, 30, 50),
            income_yield=ScenarioPreset("Tight monetary policy - Stable income", 5, 5, 10),
        ),
        "debasement": EconomicScenario(
            name="Managed debasement",
            description="Moderate inflation, solid BTC growth",
            inflation_avg=5,
            btc_appreciation_avg=30,
            income_growth=12.5,
            inflation=ScenarioPreset("Managed debasement", 8, 12, 20),
            btc_price=ScenarioPreset("Managed debasement - Conservative growth", 30, 70, 100),
            income_yield=ScenarioPreset("Managed debasement - Growing income", 8, 10, 15),
        ),
        "crisis": EconomicScenario(
            name="Accelerated crisis",
            description="Higher inflation, accelerated BTC adoption",
            inflation_avg=12,
            btc_appreciation_avg=60,
            income_growth=45,
            inflation=ScenarioPreset("Accelerated crisis", 8, 25, 40),
            btc_price=ScenarioPreset("Accelerated crisis - Rapid adoption", 50, 120, 150),
            income_yield=ScenarioPreset("Accelerated crisis - Income", 35, 40, 50),
        ),
        "spiral": EconomicScenario(
            name="Hyperinflationary spiral",
            description="High inflation, rapid BTC adoption",
            inflation_avg=35,
            btc_appreciation_avg=120,
            income_growth=11,
            inflation=ScenarioPreset("Hyperinflationary spiral", 10, 100, 100),
            btc_price=ScenarioPreset("Hyperbitcoinization", 80, 200, 250),
            income_yield=ScenarioPreset("Hyperinflationary spiral", 20, 2, 25),
        ),
        "custom": EconomicScenario(
            name="Manual configuration",
            description="Manually configured settings",
            inflation_avg=0,
            btc_appreciation_avg=0,
            income_growth=0,
            inflation=ScenarioPreset("Custom Inflation", 3, 3, 100),
            btc_price=ScenarioPreset("Custom BTC Growth", 20, 20, 200),
            income_yield=ScenarioPreset("Custom Income", 5, 5, 100),
        ),
    }
)


def get_preset(
    scenario_key: str, kind: str, scenarios: ScenarioCatalog = ECONOMIC_SCENARIOS
) -> ScenarioPreset:
    """Look up the ``kind`` curve of ``scenario_key`` in ``scenarios``."""
    try:
        scenario = scenarios[scenario_key]
    except KeyError:
        raise KeyError(f"Unknown economic scenario: {scenario_key!r}") from None
    return scenario.preset(kind)


def dropdown_presets(
    kind: str, scenarios: ScenarioCatalog = ECONOMIC_SCENARIOS
) -> dict[str, ScenarioPreset]:
    """Presets of one kind offered for selection, excluding ``custom``."""
    return {
        key: scenario.preset(kind)
        for key, scenario in scenarios.items()
        if key != "custom"
    }
