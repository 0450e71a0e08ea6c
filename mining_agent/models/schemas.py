from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

NUMERIC_FIELDS = (
    "latitude",
    "longitude",
    "post_tax_npv_usd_m",
    "pre_tax_npv_usd_m",
    "irr_percent",
    "payback_years",
    "capex_usd_m",
    "opex_usd_per_tonne",
    "aisc_usd_per_tonne",
    "mine_life_years",
    "annual_production_tonnes",
    "total_resource_tonnes",
    "resource_grade",
)

TEXT_FIELDS = (
    "project_description",
    "location",
    "country",
    "jurisdiction",
    "commodity",
    "stage",
    "resource_grade_unit",
    "permit_status",
    "technical_report_date",
)


def _coerce_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _NUMBER_RE.search(value.replace(",", ""))
        return float(match.group()) if match else None
    return None


# --- Extraction ---


class RawExtractedProject(BaseModel):
    """One project as returned by the language model, after validation."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    project_name: str = Field(validation_alias=AliasChoices("project_name", "name"))
    company_name: str = Field(validation_alias=AliasChoices("company_name", "company", "operator"))
    project_description: str | None = Field(
        default=None, validation_alias=AliasChoices("project_description", "description")
    )
    location: str | None = None
    country: str | None = None
    jurisdiction: str | None = Field(
        default=None, validation_alias=AliasChoices("jurisdiction", "state", "province")
    )
    latitude: float | None = None
    longitude: float | None = None
    commodity: str | None = Field(
        default=None, validation_alias=AliasChoices("commodity", "primary_commodity")
    )
    stage: str | None = None

    post_tax_npv_usd_m: float | None = Field(
        default=None,
        validation_alias=AliasChoices("post_tax_npv_usd_m", "npv", "post_tax_npv", "npv_usd_m"),
    )
    pre_tax_npv_usd_m: float | None = Field(
        default=None, validation_alias=AliasChoices("pre_tax_npv_usd_m", "pre_tax_npv")
    )
    irr_percent: float | None = Field(
        default=None, validation_alias=AliasChoices("irr_percent", "irr")
    )
    payback_years: float | None = Field(
        default=None, validation_alias=AliasChoices("payback_years", "payback")
    )
    capex_usd_m: float | None = Field(
        default=None, validation_alias=AliasChoices("capex_usd_m", "capex", "capital_cost")
    )
    opex_usd_per_tonne: float | None = Field(
        default=None, validation_alias=AliasChoices("opex_usd_per_tonne", "opex")
    )
    aisc_usd_per_tonne: float | None = Field(
        default=None, validation_alias=AliasChoices("aisc_usd_per_tonne", "aisc")
    )
    mine_life_years: float | None = Field(
        default=None, validation_alias=AliasChoices("mine_life_years", "mine_life", "life_of_mine")
    )
    annual_production_tonnes: float | None = Field(
        default=None, validation_alias=AliasChoices("annual_production_tonnes", "annual_production")
    )
    total_resource_tonnes: float | None = Field(
        default=None, validation_alias=AliasChoices("total_resource_tonnes", "resource_tonnes")
    )
    resource_grade: float | None = Field(
        default=None, validation_alias=AliasChoices("resource_grade", "grade")
    )
    resource_grade_unit: str | None = Field(
        default=None, validation_alias=AliasChoices("resource_grade_unit", "grade_unit")
    )
    investors_ownership: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("investors_ownership", "investors")
    )
    permit_status: str | None = None
    technical_report_date: str | None = None

    @field_validator("project_name", "company_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value:
            raise ValueError("must be a non-empty string")
        return value

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _parse_number(cls, value: Any) -> float | None:
        return _coerce_number(value)

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _parse_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, (dict, list)):
            return None
        text = str(value).strip()
        return text or None

    @field_validator("investors_ownership", mode="before")
    @classmethod
    def _parse_investors(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            return [value] if value.strip() else []
        if isinstance(value, list):
            return [str(item).strip() for item in value if isinstance(item, str) and item.strip()]
        return []

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.project_name, self.company_name)


def dedup_key(project_name: str, company_name: str) -> str:
    return f"{project_name.lower()}-{company_name.lower()}"


class EnrichedProject(BaseModel):
    """Normalized project with every metric populated; the unit written to the store."""

    project_name: str
    company_name: str
    project_description: str
    jurisdiction: str
    country: str
    latitude: float | None = None
    longitude: float | None = None
    stage: str
    primary_commodity: str

    post_tax_npv_usd_m: float
    pre_tax_npv_usd_m: float
    irr_percent: float
    payback_years: float
    capex_usd_m: float
    opex_usd_per_tonne: float
    aisc_usd_per_tonne: float
    mine_life_years: float
    annual_production_tonnes: float
    total_resource_tonnes: float
    resource_grade: float
    resource_grade_unit: str

    investors_ownership: list[str] = Field(default_factory=list)
    permit_status: str
    technical_report_date: str | None = None
    technical_report_url: str
    report_type: str
    data_source: str
    source_url: str
    jurisdiction_risk: str
    esg_score: str

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.project_name, self.company_name)


# --- API ---


class SourceResultResponse(BaseModel):
    source: str
    documents_found: int
    projects_created: int
    projects_updated: int
    errors: list[str]


class MiningAgentRunResponse(BaseModel):
    success: bool
    message: str
    results: list[SourceResultResponse]


class DiscoveryResponse(BaseModel):
    success: bool
    projects_added: int
    message: str


class ProgressStateResponse(BaseModel):
    stage: str
    message: str
    current_step: int
    total_steps: int
    details: dict[str, Any] | None = None


class ProgressResponse(BaseModel):
    success: bool
    progress: ProgressStateResponse


class AgentStatusResponse(BaseModel):
    last_run: str | None = None
    agent_type: str | None = None
    total_projects: int = 0
    projects_added: int = 0
    projects_updated: int = 0
    can_run_now: bool = True
