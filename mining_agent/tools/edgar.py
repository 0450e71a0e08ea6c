"""SEC EDGAR full-text search for S-K 1300 technical report exhibits (EX-96.1)."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum
from typing import Any

import httpx
from loguru import logger

from mining_agent.config import settings

SEARCH_URL = "https://efts.sec.gov/LATEST/search-index"
ARCHIVES_URL = "https://www.sec.gov/Archives/edgar/data"
TECHNICAL_REPORT_EXHIBIT = "EX-96.1"
INITIAL_LOOKBACK_YEARS = 5

MINING_SIC_CODES = (
    "1000",  # Metal mining
    "1040",  # Gold and silver ores
    "1044",  # Silver ores
    "1090",  # Miscellaneous metal ores
    "1094",  # Uranium-radium-vanadium ores
    "1099",  # Miscellaneous metal ores, NEC
    "1400",  # Nonmetallic minerals
    "1455",
    "1459",
    "1479",
    "1499",
)

# "HECLA MINING CO/DE/  (HL)  (CIK 0001164727)" -> "HL"
_TICKERS = re.compile(r"\(([A-Z0-9.\-]+(?:,\s*[A-Z0-9.\-]+)*)\)\s*\(CIK")


class EdgarSearchMode(StrEnum):
    INITIAL = "initial"
    INCREMENTAL = "incremental"
    BACKFILL = "backfill"


def date_window(
    mode: EdgarSearchMode | str,
    *,
    today: date | None = None,
    days_back: int | None = None,
    start: date | None = None,
    end: date | None = None,
) -> tuple[date, date]:
    """Filing date range for a search mode.

    `initial` covers the last five years, `incremental` the last `days_back`
    days, and `backfill` the explicit `start`..`end` range.
    """
    today = today or date.today()
    mode = EdgarSearchMode(mode)
    if mode is EdgarSearchMode.BACKFILL:
        if start is None or end is None:
            raise ValueError("Backfill needs both start and end dates")
        if start > end:
            raise ValueError(f"Backfill start {start} is after end {end}")
        return start, end
    if mode is EdgarSearchMode.INITIAL:
        try:
            return today.replace(year=today.year - INITIAL_LOOKBACK_YEARS), today
        except ValueError:
            # 29 February
            return today.replace(year=today.year - INITIAL_LOOKBACK_YEARS, day=28), today
    days = days_back if days_back is not None else settings.edgar_lookback_days
    return today - timedelta(days=days), today


def technical_report_query(commodities: list[str] | None = None) -> str:
    """Full-text query for EX-96.1 exhibits, optionally narrowed to commodities."""
    query = f'"{TECHNICAL_REPORT_EXHIBIT}"'
    terms: list[str] = []
    for commodity in commodities or []:
        name = commodity.strip().lower()
        if name:
            terms.extend([f'"{name}"', f'"{name} project"'])
    if terms:
        query += f" AND ({' OR '.join(terms)})"
    return query


def tickers_from_display_name(display_name: str) -> tuple[str, ...]:
    match = _TICKERS.search(display_name or "")
    if not match:
        return ()
    return tuple(t.strip() for t in match.group(1).split(","))


@dataclass(slots=True)
class EdgarFiling:
    cik: str
    company: str
    form: str
    filed: str
    accession: str
    file_name: str
    tickers: tuple[str, ...] = ()

    @property
    def document_url(self) -> str:
        cik = self.cik.lstrip("0") or "0"
        return f"{ARCHIVES_URL}/{cik}/{self.accession.replace('-', '')}/{self.file_name}"


def parse_hit(hit: dict[str, Any]) -> EdgarFiling | None:
    """One search hit; `_id` is "<accession>:<file name>"."""
    source = hit.get("_source") or {}
    accession_from_id, _, file_name = str(hit.get("_id") or "").partition(":")
    ciks = source.get("ciks") or []
    names = source.get("display_names") or []
    accession = str(source.get("adsh") or accession_from_id)
    file_name = file_name or str(source.get("file_name") or "")
    if not ciks or not accession or not file_name:
        return None
    return EdgarFiling(
        cik=str(ciks[0]),
        company=str(names[0]) if names else "Unknown company",
        form=str(source.get("form") or source.get("root_form") or ""),
        filed=str(source.get("file_date") or source.get("filing_date") or ""),
        accession=accession,
        file_name=file_name,
        tickers=tickers_from_display_name(str(names[0])) if names else (),
    )


class EdgarClient:
    def __init__(
        self,
        user_agent: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent or settings.edgar_user_agent
        self.timeout = timeout
        self._transport = transport

    async def search_technical_reports(
        self,
        *,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
        commodities: list[str] | None = None,
        tickers: list[str] | None = None,
    ) -> list[EdgarFiling]:
        """EX-96.1 filings in the date range; `tickers` keeps only those issuers."""
        end = end or date.today()
        start = start or end - timedelta(days=settings.edgar_lookback_days)
        limit = limit or settings.edgar_max_documents

        params = {
            "q": technical_report_query(commodities),
            "sics": ",".join(MINING_SIC_CODES),
            "dateRange": "custom",
            "startdt": start.isoformat(),
            "enddt": end.isoformat(),
        }
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(SEARCH_URL, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()

        hits = ((data or {}).get("hits") or {}).get("hits") or []
        wanted = {t.strip().upper() for t in tickers or [] if t.strip()}
        filings: list[EdgarFiling] = []
        seen: set[str] = set()
        for hit in hits:
            filing = parse_hit(hit)
            if filing is None or filing.document_url in seen:
                continue
            if wanted and not wanted.intersection(filing.tickers):
                continue
            seen.add(filing.document_url)
            filings.append(filing)
            if len(filings) >= limit:
                break
        logger.info(f"EDGAR search returned {len(filings)} {TECHNICAL_REPORT_EXHIBIT} filings")
        return filings
