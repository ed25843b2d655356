"""
Engine Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # ======================
    # Market Data
    # ======================
    QUOTE_API_BASE_URL: str = "http://localhost:3000"
    QUOTE_TIMEOUT_SECONDS: float = 10.0
    MARKET_DATA_PROVIDER: str = "http"
    # Comma separated, tried in order after the primary provider
    MARKET_DATA_FALLBACK_PROVIDERS: str = ""

    # ======================
    # Symbol Search
    # ======================
    SEARCH_DEBOUNCE_MS: int = 300
    SEARCH_RESULT_LIMIT: int = 50

    # ======================
    # Holdings Store
    # ======================
    DUPLICATE_SYMBOL_POLICY: str = "reject"  # reject | merge
    MUTATION_BUSY_POLICY: str = "queue"  # queue | reject

    # ======================
    # Auto Refresh
    # ======================
    AUTO_REFRESH_ENABLED: bool = False
    REFRESH_INTERVAL_SECONDS: int = 10

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )

    @property
    def fallback_providers(self) -> list[str]:
        return [
            name.strip().lower()
            for name in self.MARKET_DATA_FALLBACK_PROVIDERS.split(",")
            if name.strip()
        ]


settings = Settings()
