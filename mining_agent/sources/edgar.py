from __future__ import annotations

from datetime import date

from loguru import logger

from mining_agent.config import settings
from mining_agent.models.interfaces import SourceDocument
from mining_agent.tools.edgar import TECHNICAL_REPORT_EXHIBIT, EdgarClient, EdgarSearchMode, date_window


class EdgarFetcher:
    """EX-96.1 technical report summaries filed with the SEC.

    `mode` picks the filing window: `incremental` (the last `days_back` days),
    `initial` (five years) or `backfill` (explicit `start` and `end`).
    """

    name = "EDGAR"

    def __init__(
        self,
        client: EdgarClient | None = None,
        *,
        mode: EdgarSearchMode | str | None = None,
        days_back: int | None = None,
        start: date | None = None,
        end: date | None = None,
        commodities: list[str] | None = None,
        tickers: list[str] | None = None,
        limit: int | None = None,
    ):
        self.client = client or EdgarClient()
        self.mode = EdgarSearchMode(mode or settings.edgar_mode)
        self.days_back = days_back
        self.start = start or settings.edgar_backfill_start
        self.end = end or settings.edgar_backfill_end
        self.commodities = commodities if commodities is not None else settings.edgar_commodity_list
        self.tickers = tickers if tickers is not None else settings.edgar_ticker_list
        self.limit = limit

    async def fetch_latest_documents(self) -> list[SourceDocument]:
        start, end = date_window(
            self.mode, days_back=self.days_back, start=self.start, end=self.end
        )
        logger.debug(f"EDGAR {self.mode} search {start} .. {end}")
        filings = await self.client.search_technical_reports(
            start=start,
            end=end,
            limit=self.limit,
            commodities=self.commodities,
            tickers=self.tickers,
        )
        return [
            SourceDocument(
                url=filing.document_url,
                title=f"{filing.company} - {filing.form} {TECHNICAL_REPORT_EXHIBIT} Technical Report Summary",
                type=TECHNICAL_REPORT_EXHIBIT,
                date=filing.filed,
                source=self.name,
            )
            for filing in filings
        ]
