from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./labscore.db"
    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"

    openai_api_key: str | None = None
    ai_analysis_enabled: bool = True
    ai_model: str = "gpt-4o-mini"
    ai_max_attempts: int = 3
    ai_retry_backoff_seconds: float = 1.0
    ai_confidence: float = 0.8
    analysis_cache_ttl_seconds: int = 600


settings = Settings()
