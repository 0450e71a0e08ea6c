"""Normalization of extracted projects into fully populated store records."""
from __future__ import annotations

import re

from mining_agent.models.schemas import EnrichedProject, RawExtractedProject
from mining_agent.services.defaults import IndustryDefaultsProvider

DEFAULT_COMMODITY = "Lithium"
OTHER_COMMODITY = "Other"
DEFAULT_STAGE = "Feasibility"
DEFAULT_REPORT_TYPE = "Technical Report"
DEFAULT_DATA_SOURCE = "Web Search"

# The alias found earliest in the text wins ("Copper-Gold" is Copper, "Zn-Pb-Ag" is Zinc);
# table order breaks ties at the same position.
COMMODITY_ALIASES: tuple[tuple[str, str], ...] = (
    ("lithium", "Lithium"),
    ("li", "Lithium"),
    ("spodumene", "Lithium"),
    ("copper", "Copper"),
    ("cu", "Copper"),
    ("gold", "Gold"),
    ("au", "Gold"),
    ("silver", "Silver"),
    ("ag", "Silver"),
    ("nickel", "Nickel"),
    ("ni", "Nickel"),
    ("cobalt", "Cobalt"),
    ("co", "Cobalt"),
    ("graphite", "Graphite"),
    ("rare earths", "Rare Earths"),
    ("rare earth", "Rare Earths"),
    ("ree", "Rare Earths"),
    ("uranium", "Uranium"),
    ("u3o8", "Uranium"),
    ("u", "Uranium"),
    ("zinc", "Zinc"),
    ("zn", "Zinc"),
)

_COMMODITY_PATTERNS = [
    (re.compile(rf"\b{re.escape(alias)}\b"), name) for alias, name in COMMODITY_ALIASES
]

# "co-product" and "by-product" would otherwise read as the Co symbol.
_PRODUCT_WORDS = re.compile(r"\b(?:co|by)-products?\b")

# Free-text country names mapped to the keys of the jurisdiction risk table.
COUNTRY_ALIASES: dict[str, str] = {
    "usa": "USA",
    "us": "USA",
    "u.s.": "USA",
    "u.s.a.": "USA",
    "united states": "USA",
    "united states of america": "USA",
    "drc": "DRC",
    "dr congo": "DRC",
    "d.r. congo": "DRC",
    "democratic republic of congo": "DRC",
    "democratic republic of the congo": "DRC",
    "congo-kinshasa": "DRC",
    "canada": "Canada",
    "australia": "Australia",
    "chile": "Chile",
    "peru": "Peru",
    "brazil": "Brazil",
    "mexico": "Mexico",
    "argentina": "Argentina",
    "china": "China",
    "people's republic of china": "China",
    "indonesia": "Indonesia",
    "russia": "Russia",
    "russian federation": "Russia",
}

STAGE_ALIASES: dict[str, str] = {
    "exploration": "Exploration",
    "resource definition": "Exploration",
    "pea": "Pre-Feasibility",
    "pre-feasibility": "Pre-Feasibility",
    "pre feasibility": "Pre-Feasibility",
    "prefeasibility": "Pre-Feasibility",
    "pfs": "Pre-Feasibility",
    "feasibility": "Feasibility",
    "dfs": "Feasibility",
    "bfs": "Feasibility",
    "construction": "Construction",
    "production": "Production",
    "operating": "Production",
    "expansion": "Production",
}

# Substring fallback for phrases like "Feasibility Study"; more specific first.
_STAGE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("pre-feasibility", "Pre-Feasibility"),
    ("prefeasibility", "Pre-Feasibility"),
    ("preliminary economic", "Pre-Feasibility"),
    ("feasibility", "Feasibility"),
    ("construction", "Construction"),
    ("production", "Production"),
    ("exploration", "Exploration"),
)

LOCATIONS: tuple[tuple[str, str, str], ...] = (
    ("nevada", "USA", "Nevada"),
    ("arizona", "USA", "Arizona"),
    ("quebec", "Canada", "Quebec"),
    ("ontario", "Canada", "Ontario"),
    ("british columbia", "Canada", "British Columbia"),
    ("western australia", "Australia", "Western Australia"),
    ("chile", "Chile", "Chile"),
    ("peru", "Peru", "Peru"),
    ("brazil", "Brazil", "Brazil"),
    ("argentina", "Argentina", "Argentina"),
)
DEFAULT_LOCATION = ("Canada", "Unknown")

PERMIT_STATUS: dict[str, str] = {
    "Exploration": "Exploration permits granted",
    "Pre-Feasibility": "Environmental assessment in progress",
    "Feasibility": "Permitting in progress",
    "Construction": "Construction permits granted",
    "Production": "All permits obtained",
}


def normalize_commodity(value: str | None, fallback: str | None = None) -> str:
    text = (value or "").strip() or (fallback or "").strip()
    if not text:
        return DEFAULT_COMMODITY
    lowered = _PRODUCT_WORDS.sub(" ", text.lower())
    best: tuple[int, str] | None = None
    for pattern, name in _COMMODITY_PATTERNS:
        match = pattern.search(lowered)
        if match and (best is None or match.start() < best[0]):
            best = (match.start(), name)
    return best[1] if best else OTHER_COMMODITY


def normalize_stage(value: str | None) -> str:
    lowered = re.sub(r"[\s_]+", " ", (value or "").strip().lower())
    if not lowered:
        return DEFAULT_STAGE
    if lowered in STAGE_ALIASES:
        return STAGE_ALIASES[lowered]
    for keyword, stage in _STAGE_KEYWORDS:
        if keyword in lowered:
            return stage
    return DEFAULT_STAGE


def parse_location(location: str | None) -> tuple[str, str]:
    """Map free-text location to (country, jurisdiction)."""
    lowered = (location or "").lower()
    for key, country, jurisdiction in LOCATIONS:
        if key in lowered:
            return country, jurisdiction
    return DEFAULT_LOCATION


def canonical_country(country: str) -> str:
    """Country name as keyed in the risk table; unknown names are kept as written."""
    cleaned = re.sub(r"\s+", " ", country.strip())
    return COUNTRY_ALIASES.get(cleaned.lower(), cleaned)


def permit_status_for(stage: str) -> str:
    return PERMIT_STATUS.get(stage, "Permitting in progress")


class ProjectEnricher:
    """Fills every metric of a raw extraction, preferring stated values over defaults."""

    def __init__(self, defaults: IndustryDefaultsProvider | None = None):
        self.defaults = defaults or IndustryDefaultsProvider()

    def _resolve_location(self, raw: RawExtractedProject) -> tuple[str, str]:
        country = canonical_country(raw.country or "")
        if country:
            parsed_country, parsed_jurisdiction = parse_location(raw.jurisdiction or raw.location)
            jurisdiction = raw.jurisdiction or (
                parsed_jurisdiction if parsed_country == country else "Unknown"
            )
            return country, jurisdiction
        return parse_location(raw.location or raw.jurisdiction)

    def enrich(
        self,
        raw: RawExtractedProject,
        *,
        source_url: str,
        report_type: str = DEFAULT_REPORT_TYPE,
        data_source: str = DEFAULT_DATA_SOURCE,
        fallback_commodity: str | None = None,
    ) -> EnrichedProject:
        commodity = normalize_commodity(raw.commodity, fallback_commodity)
        stage = normalize_stage(raw.stage)
        country, jurisdiction = self._resolve_location(raw)
        metrics = self.defaults.get_defaults(commodity, stage)

        post_tax_npv = raw.post_tax_npv_usd_m if raw.post_tax_npv_usd_m is not None else metrics.npv_usd_m
        capex = raw.capex_usd_m if raw.capex_usd_m is not None else metrics.capex_usd_m

        def pick(value: float | None, default: float) -> float:
            return float(value) if value is not None else float(default)

        return EnrichedProject(
            project_name=raw.project_name,
            company_name=raw.company_name,
            project_description=raw.project_description or f"{commodity} {stage.lower()} project",
            jurisdiction=jurisdiction,
            country=country,
            latitude=raw.latitude,
            longitude=raw.longitude,
            stage=stage,
            primary_commodity=commodity,
            post_tax_npv_usd_m=float(post_tax_npv),
            pre_tax_npv_usd_m=pick(raw.pre_tax_npv_usd_m, round(post_tax_npv * 1.4)),
            irr_percent=pick(raw.irr_percent, metrics.irr_percent),
            payback_years=pick(raw.payback_years, metrics.payback_years),
            capex_usd_m=float(capex),
            opex_usd_per_tonne=pick(raw.opex_usd_per_tonne, metrics.opex_usd_per_tonne),
            aisc_usd_per_tonne=pick(raw.aisc_usd_per_tonne, metrics.aisc_usd_per_tonne),
            mine_life_years=pick(raw.mine_life_years, metrics.mine_life_years),
            annual_production_tonnes=pick(raw.annual_production_tonnes, round(metrics.capex_usd_m * 200)),
            total_resource_tonnes=pick(
                raw.total_resource_tonnes, self.defaults.get_resource_tonnage(commodity, stage)
            ),
            resource_grade=pick(raw.resource_grade, metrics.resource_grade),
            resource_grade_unit=raw.resource_grade_unit or metrics.resource_grade_unit,
            investors_ownership=raw.investors_ownership or [raw.company_name],
            permit_status=raw.permit_status or permit_status_for(stage),
            technical_report_date=raw.technical_report_date,
            technical_report_url=source_url,
            report_type=report_type or DEFAULT_REPORT_TYPE,
            data_source=data_source or DEFAULT_DATA_SOURCE,
            source_url=source_url,
            jurisdiction_risk=self.defaults.get_jurisdiction_risk(country),
            esg_score=self.defaults.get_esg_score(),
        )
