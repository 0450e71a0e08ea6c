from __future__ import annotations

import pytest
from pydantic import ValidationError

from mining_agent.models.schemas import NUMERIC_FIELDS, RawExtractedProject
from mining_agent.services.enrichment import (
    canonical_country,
    normalize_commodity,
    normalize_stage,
    parse_location,
    permit_status_for,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Lithium", "Lithium"),
        ("Cu", "Copper"),
        ("Copper-Gold", "Copper"),
        ("Au", "Gold"),
        ("silver", "Silver"),
        ("REE", "Rare Earths"),
        ("Rare Earth Elements", "Rare Earths"),
        ("U3O8", "Uranium"),
        ("Zn", "Zinc"),
        ("Gold-Copper", "Gold"),
        ("Zn-Pb-Ag", "Zinc"),
        ("Zinc (co-product lead)", "Zinc"),
        ("Copper with cobalt by-product", "Copper"),
        ("Potash", "Other"),
        ("Coal", "Other"),
    ],
)
def test_normalize_commodity(value, expected):
    assert normalize_commodity(value) == expected


def test_normalize_commodity_uses_fallback_then_lithium():
    assert normalize_commodity(None, "nickel") == "Nickel"
    assert normalize_commodity("  ", None) == "Lithium"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("PEA", "Pre-Feasibility"),
        ("prefeasibility", "Pre-Feasibility"),
        ("Pre-Feasibility Study", "Pre-Feasibility"),
        ("DFS", "Feasibility"),
        ("Definitive Feasibility Study", "Feasibility"),
        ("Operating", "Production"),
        ("expansion", "Production"),
        ("Construction", "Construction"),
        ("Care & Maintenance", "Feasibility"),
        (None, "Feasibility"),
    ],
)
def test_normalize_stage(value, expected):
    assert normalize_stage(value) == expected


def test_parse_location():
    assert parse_location("Humboldt County, Nevada, USA") == ("USA", "Nevada")
    assert parse_location("James Bay, Quebec") == ("Canada", "Quebec")
    assert parse_location("somewhere remote") == ("Canada", "Unknown")
    assert parse_location(None) == ("Canada", "Unknown")


def test_permit_status_follows_stage():
    assert permit_status_for("Production") == "All permits obtained"
    assert permit_status_for("Unknown") == "Permitting in progress"


def test_raw_project_accepts_model_aliases_and_numeric_strings():
    raw = RawExtractedProject.model_validate(
        {
            "name": "Thacker Pass",
            "company": "Lithium Americas",
            "npv": "$5,700M",
            "irr": "21.2%",
            "capital_cost": 2270,
            "life_of_mine": "40 years",
            "grade": "n/a",
            "investors": "General Motors",
        }
    )

    assert raw.project_name == "Thacker Pass"
    assert raw.company_name == "Lithium Americas"
    assert raw.post_tax_npv_usd_m == 5700
    assert raw.irr_percent == 21.2
    assert raw.capex_usd_m == 2270
    assert raw.mine_life_years == 40
    assert raw.resource_grade is None
    assert raw.investors_ownership == ["General Motors"]
    assert raw.dedup_key == "thacker pass-lithium americas"


@pytest.mark.parametrize("payload", [{"project_name": "X"}, {"project_name": "  ", "company_name": "Y"}])
def test_raw_project_requires_name_and_company(payload):
    with pytest.raises(ValidationError):
        RawExtractedProject.model_validate(payload)


def test_enrich_fills_every_metric(enricher):
    raw = RawExtractedProject(project_name="Kathleen Valley", company_name="Liontown")
    project = enricher.enrich(raw, source_url="https://example.com/kv")

    for field in NUMERIC_FIELDS:
        if field in ("latitude", "longitude"):
            continue
        assert getattr(project, field) is not None, field
    assert project.primary_commodity == "Lithium"
    assert project.stage == "Feasibility"
    assert project.project_description == "Lithium feasibility project"
    assert project.investors_ownership == ["Liontown"]
    assert project.permit_status == "Permitting in progress"
    assert project.report_type == "Technical Report"
    assert project.data_source == "Web Search"
    assert project.source_url == project.technical_report_url == "https://example.com/kv"
    assert project.esg_score in {"A", "B", "C"}


def test_enrich_prefers_extracted_values(enricher):
    raw = RawExtractedProject.model_validate(
        {
            "project_name": "Grota do Cirilo",
            "company_name": "Sigma Lithium",
            "commodity": "Li",
            "stage": "Production",
            "location": "Minas Gerais, Brazil",
            "npv": "1,200",
            "capex": 600,
            "grade_unit": "% Li2O",
        }
    )
    project = enricher.enrich(raw, source_url="https://example.com/gdc", fallback_commodity="gold")

    assert project.primary_commodity == "Lithium"
    assert project.stage == "Production"
    assert project.country == "Brazil"
    assert project.jurisdiction_risk == "Medium"
    assert project.post_tax_npv_usd_m == 1200
    assert project.pre_tax_npv_usd_m == 1680
    assert project.capex_usd_m == 600
    assert project.permit_status == "All permits obtained"


def test_enrich_keeps_explicit_country_and_jurisdiction(enricher):
    raw = RawExtractedProject(
        project_name="Salar Blanco", company_name="Lithium Chile", country="Chile", jurisdiction="Atacama"
    )
    project = enricher.enrich(raw, source_url="https://example.com/sb", data_source="SEDAR")

    assert (project.country, project.jurisdiction) == ("Chile", "Atacama")
    assert project.data_source == "SEDAR"


def test_enrich_uses_query_commodity_when_not_extracted(enricher):
    raw = RawExtractedProject(project_name="Kamoa", company_name="Ivanhoe")
    project = enricher.enrich(raw, source_url="https://example.com/k", fallback_commodity="copper")

    assert project.primary_commodity == "Copper"
    assert project.resource_grade_unit == "% Cu"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("United States", "USA"),
        ("U.S.", "USA"),
        ("  united   states of america ", "USA"),
        ("Democratic Republic of the Congo", "DRC"),
        ("Congo-Kinshasa", "DRC"),
        ("canada", "Canada"),
        ("Finland", "Finland"),
    ],
)
def test_canonical_country(value, expected):
    assert canonical_country(value) == expected


@pytest.mark.parametrize(
    ("country", "risk"),
    [("United States", "Low"), ("Democratic Republic of the Congo", "High"), ("Finland", "Medium")],
)
def test_enrich_rates_risk_on_canonical_country(enricher, country, risk):
    raw = RawExtractedProject(
        project_name="Rhyolite Ridge", company_name="ioneer", country=country, jurisdiction="Nevada"
    )
    project = enricher.enrich(raw, source_url="https://example.com/rr")

    assert project.jurisdiction_risk == risk
    assert project.country == canonical_country(country)
    assert project.jurisdiction == "Nevada"


def test_enrich_matches_parsed_jurisdiction_for_country_alias(enricher):
    raw = RawExtractedProject(
        project_name="Thacker Pass", company_name="Lithium Americas", country="U.S.", location="Humboldt County, Nevada"
    )
    project = enricher.enrich(raw, source_url="https://example.com/tp")

    assert (project.country, project.jurisdiction) == ("USA", "Nevada")
