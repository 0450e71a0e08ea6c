"""Industry baseline metrics used when a document does not state a value."""
from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MetricDefaults:
    npv_usd_m: float
    irr_percent: float
    capex_usd_m: float
    opex_usd_per_tonne: float
    aisc_usd_per_tonne: float
    mine_life_years: float
    payback_years: float
    resource_grade: float
    resource_grade_unit: str


FALLBACK_COMMODITY = "lithium"

COMMODITY_BASELINES: dict[str, MetricDefaults] = {
    "lithium": MetricDefaults(1200, 25, 800, 400, 550, 20, 3.5, 1.2, "% Li2O"),
    "copper": MetricDefaults(2500, 22, 3000, 25, 35, 25, 4.5, 0.6, "% Cu"),
    "gold": MetricDefaults(800, 28, 500, 850, 1100, 12, 3.0, 1.5, "g/t Au"),
    "silver": MetricDefaults(400, 24, 250, 65, 85, 10, 3.2, 120, "g/t Ag"),
    "nickel": MetricDefaults(1800, 26, 1500, 12000, 15000, 18, 4.0, 1.8, "% Ni"),
    "cobalt": MetricDefaults(600, 30, 400, 25000, 32000, 15, 2.8, 0.15, "% Co"),
}

BASE_TONNAGES: dict[str, float] = {
    "lithium": 50_000_000,
    "copper": 500_000_000,
    "gold": 30_000_000,
    "silver": 40_000_000,
    "nickel": 100_000_000,
    "cobalt": 20_000_000,
}

# Later stages carry larger, better-defined economics.
STAGE_MULTIPLIERS: dict[str, float] = {
    "Exploration": 0.3,
    "Pre-Feasibility": 0.5,
    "Feasibility": 0.8,
    "Construction": 1.0,
    "Production": 1.2,
    "Expansion": 1.1,
}
DEFAULT_STAGE_MULTIPLIER = 0.8

JURISDICTION_RISK: dict[str, str] = {
    "Canada": "Low",
    "USA": "Low",
    "Australia": "Low",
    "Chile": "Medium",
    "Peru": "Medium",
    "Brazil": "Medium",
    "Mexico": "Medium",
    "Argentina": "Medium",
    "China": "Medium",
    "Indonesia": "High",
    "DRC": "High",
    "Russia": "High",
}

ESG_WEIGHTS: tuple[tuple[str, int], ...] = (("A", 2), ("B", 3), ("C", 2))


class IndustryDefaultsProvider:
    """Stage-scaled, jittered baselines per commodity.

    All randomness comes from the injected `random.Random`, so a seeded
    instance gives reproducible defaults.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def _jitter(self, low: float = 0.8, high: float = 1.2) -> float:
        return self._rng.uniform(low, high)

    @staticmethod
    def stage_multiplier(stage: str) -> float:
        return STAGE_MULTIPLIERS.get(stage, DEFAULT_STAGE_MULTIPLIER)

    def get_defaults(self, commodity: str, stage: str) -> MetricDefaults:
        base = COMMODITY_BASELINES.get(
            (commodity or "").strip().lower(), COMMODITY_BASELINES[FALLBACK_COMMODITY]
        )
        multiplier = self.stage_multiplier(stage)
        factor = self._jitter()

        return MetricDefaults(
            npv_usd_m=round(base.npv_usd_m * multiplier * factor),
            irr_percent=round(base.irr_percent * self._jitter(0.9, 1.1), 1),
            capex_usd_m=round(base.capex_usd_m * multiplier * factor),
            opex_usd_per_tonne=round(base.opex_usd_per_tonne * factor),
            aisc_usd_per_tonne=round(base.aisc_usd_per_tonne * factor),
            mine_life_years=round(base.mine_life_years * self._jitter(0.7, 1.3)),
            payback_years=round(base.payback_years * self._jitter(), 1),
            resource_grade=round(base.resource_grade * self._jitter(0.7, 1.3), 2),
            resource_grade_unit=base.resource_grade_unit,
        )

    def get_resource_tonnage(self, commodity: str, stage: str) -> float:
        base = BASE_TONNAGES.get((commodity or "").strip().lower(), BASE_TONNAGES[FALLBACK_COMMODITY])
        return round(base * self.stage_multiplier(stage) * self._jitter())

    def get_jurisdiction_risk(self, country: str) -> str:
        return JURISDICTION_RISK.get(country, "Medium")

    def get_esg_score(self) -> str:
        scores = [score for score, _ in ESG_WEIGHTS]
        weights = [weight for _, weight in ESG_WEIGHTS]
        return self._rng.choices(scores, weights=weights, k=1)[0]
