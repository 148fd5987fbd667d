from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "recipe-cost"
    env: str = "local"
    log_level: str = "INFO"

    database_dsn: str = "sqlite:///./prices.db"
    redis_url: str = "redis://redis:6379/0"

    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: str = ""
    llm_temperature: float = 0.0
    llm_timeout_s: int = 30
    # Minimum spacing between external translation calls (rate limit of the translation API).
    translation_min_interval_s: float = 1.0

    default_country: str = "EE"
    default_servings: int = 4
    country_locales: dict[str, str] = {"EE": "et"}

    # Ordered set of active price sources; names must exist in STORE_DEFINITIONS.
    price_sources: list[str] = ["selver", "rimi"]
    store_gateway_api_key: str = ""
    price_cache_ttl_hours: int = 24
    source_fetch_timeout_s: float = 10.0
    price_fetch_max_workers: int = 6
    # Relative spread (max - min) / mean under which multi-source prices count as agreeing.
    price_agreement_tolerance: float = 0.25
    default_unit_price: float = 2.50

    # Parallel ingredient lines per recipe calculation.
    ingredient_batch_max_workers: int = 8

    mealdb_base_url: str = "https://www.themealdb.com/api/json/v1/1"
    mealdb_timeout_s: float = 15.0

    price_history_days: int = 30
    record_calculations: bool = True
    celery_worker_concurrency: int = 4

    class Config:
        env_file = ".env"


settings = Settings()
