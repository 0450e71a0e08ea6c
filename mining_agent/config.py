from datetime import date

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenRouter
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "openai/gpt-4o-mini"
    openrouter_model: str = ""
    extraction_temperature: float = 0.1

    # Firecrawl (search + scrape)
    firecrawl_api_key: str = ""
    firecrawl_base_url: str = "https://api.firecrawl.dev"

    # Supabase project store
    supabase_url: str = ""
    supabase_service_key: str = ""
    projects_table: str = "projects"
    runs_table: str = "agent_runs"

    # SEC EDGAR
    edgar_user_agent: str = "Mining Agent research@example.com"
    edgar_lookback_days: int = 90
    edgar_mode: str = "incremental"
    edgar_max_documents: int = 10
    edgar_commodities: str = ""
    edgar_tickers: str = ""
    edgar_backfill_start: date | None = None
    edgar_backfill_end: date | None = None

    # Pipeline tuning
    query_limit: int = 30
    search_batch_size: int = 5
    search_results_per_query: int = 2
    search_timeout_seconds: float = 15.0
    scrape_timeout_ms: int = 10000
    sufficient_documents: int = 15
    document_concurrency: int = 2
    max_candidates_per_document: int = 3
    extraction_content_chars: int = 8000
    document_content_chars: int = 15000

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def edgar_commodity_list(self) -> list[str]:
        return [c.strip() for c in self.edgar_commodities.split(",") if c.strip()]

    @property
    def edgar_ticker_list(self) -> list[str]:
        return [t.strip() for t in self.edgar_tickers.split(",") if t.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
