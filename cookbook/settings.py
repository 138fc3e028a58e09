from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./db.sqlite"

    # Logging
    log_level: str = "INFO"

    # Unhandled requests are forwarded to https://<Host header>
    proxy_fallback_enabled: bool = False
    proxy_timeout_seconds: float = 30.0

    # Ingest upload guard (multipart body size)
    max_upload_bytes: int = 256 * 1024 * 1024

    # Per-IP limits
    rate_limit: str = "100/minute"
    ingest_rate_limit: str = "30/minute"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost",
        "http://127.0.0.1",
    ]


settings = Settings()
